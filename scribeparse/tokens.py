"""Tokens, source locations and a cursor over a token list."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union


class TokType(Enum):
    """Kinds of tokens; each value is the token's display text."""

    INT = "<int>"
    FLT = "<float>"
    CHAR = "<char>"
    STR = "<string>"
    IDEN = "<identifier>"

    VOID = "void"
    TRUE = "true"
    FALSE = "false"
    NIL = "nil"
    ANY = "any"
    TYPE = "type"
    I1 = "i1"
    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    F32 = "f32"
    F64 = "f64"

    LET = "let"
    FN = "fn"
    IF = "if"
    ELIF = "elif"
    ELSE = "else"
    FOR = "for"
    IN = "in"
    WHILE = "while"
    RETURN = "return"
    CONTINUE = "continue"
    BREAK = "break"
    DEFER = "defer"
    INLINE = "inline"
    CONST = "const"
    STATIC = "static"
    VOLATILE = "volatile"
    GLOBAL = "global"
    COMPTIME = "comptime"
    ENUM = "enum"
    STRUCT = "struct"
    EXTERN = "extern"
    OR = "or"

    ASSN = "="
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"
    ADD_ASSN = "+="
    SUB_ASSN = "-="
    MUL_ASSN = "*="
    DIV_ASSN = "/="
    MOD_ASSN = "%="
    XINC = "++"
    XDEC = "--"
    INCX = "++ (pre)"
    DECX = "-- (pre)"
    UADD = "+ (unary)"
    USUB = "- (unary)"
    UMUL = "* (deref)"
    UAND = "& (address)"
    LAND = "&&"
    LOR = "||"
    LNOT = "!"
    EQ = "=="
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="
    NE = "!="
    BAND = "&"
    BOR = "|"
    BNOT = "~"
    BXOR = "^"
    BAND_ASSN = "&="
    BOR_ASSN = "|="
    BNOT_ASSN = "~="
    BXOR_ASSN = "^="
    LSHIFT = "<<"
    RSHIFT = ">>"
    LSHIFT_ASSN = "<<="
    RSHIFT_ASSN = ">>="
    PRE_VA = "..."
    POST_VA = "... (post)"
    DOT = "."
    ARROW = "->"
    QUEST = "?"
    COL = ":"
    COMMA = ","
    COLS = ";"
    AT = "@"
    SUBS = "[]"
    FNCALL = "()"
    STCALL = "{}"
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"
    LBRACK = "["
    RBRACK = "]"

    FEOF = "<EOF>"
    INVALID = "<invalid>"

    def __str__(self) -> str:
        return self.value


_LITERALS = frozenset({TokType.INT, TokType.FLT, TokType.CHAR, TokType.STR})

_DATA = _LITERALS | frozenset(
    {
        TokType.IDEN,
        TokType.VOID,
        TokType.TRUE,
        TokType.FALSE,
        TokType.NIL,
        TokType.ANY,
        TokType.TYPE,
        TokType.I1,
        TokType.I8,
        TokType.I16,
        TokType.I32,
        TokType.I64,
        TokType.U8,
        TokType.U16,
        TokType.U32,
        TokType.U64,
        TokType.F32,
        TokType.F64,
    }
)


@dataclass(frozen=True)
class Location:
    """A position in a source module."""

    module: str = ""
    line: int = 0
    col: int = 0

    def __str__(self) -> str:
        return f"{self.module}:{self.line}:{self.col}"


@dataclass
class Lexeme:
    """A token with its location and optional payload."""

    loc: Location = field(default_factory=Location)
    tok: TokType = TokType.INVALID
    data: Union[str, int, float, None] = None

    def is_data(self) -> bool:
        """True for tokens that carry a value (names, literals, type names)."""
        return self.tok in _DATA

    def is_literal(self) -> bool:
        """True for integer, float, character and string literals."""
        return self.tok in _LITERALS

    def is_valid(self) -> bool:
        """True unless the token is the invalid or end-of-file marker."""
        return self.tok not in (TokType.INVALID, TokType.FEOF)

    @property
    def data_str(self) -> str:
        """The payload as text, or an empty string when there is none."""
        return "" if self.data is None else str(self.data)

    def __str__(self) -> str:
        if self.data is None:
            return self.tok.value
        return f"{self.tok.name}: {self.data}"


class ParseError(Exception):
    """Raised when the token stream does not form a valid construct."""

    def __init__(self, message: str, where: object = None) -> None:
        super().__init__(message)
        self.message = message
        if where is None or isinstance(where, Location):
            self.location = where
        else:
            self.location = getattr(where, "loc", None)

    def __str__(self) -> str:
        if self.location is None:
            return self.message
        return f"{self.location}: {self.message}"


class TokenStream:
    """A cursor over a list of lexemes with bounded look-ahead and look-behind."""

    def __init__(self, tokens, begin: int = 0, module: str = "") -> None:
        self.tokens: list[Lexeme] = list(tokens)
        empty = Location(module, 0, 0)
        self.eof = Lexeme(empty, TokType.FEOF)
        self.invalid = Lexeme(empty, TokType.INVALID)
        self.pos = begin

    def peek(self, offset: int = 0) -> Lexeme:
        """The lexeme at ``offset`` from the cursor, or the end-of-file marker."""
        index = self.pos + offset
        if index < 0 or index >= len(self.tokens):
            return self.eof
        return self.tokens[index]

    def peek_type(self, offset: int = 0) -> TokType:
        return self.peek(offset).tok

    def advance(self) -> Lexeme:
        """Move forward one token and return the new current lexeme."""
        self.pos += 1
        return self.peek()

    def advance_type(self) -> TokType:
        return self.advance().tok

    def back(self) -> Lexeme:
        """Move back one token; at the start return the invalid marker."""
        if self.pos == 0:
            return self.invalid
        self.pos -= 1
        return self.peek()

    def back_type(self) -> TokType:
        if self.pos == 0:
            return self.invalid.tok
        return self.back().tok

    def at(self, index: int) -> Lexeme:
        if 0 <= index < len(self.tokens):
            return self.tokens[index]
        return self.invalid

    def accept(self, *args: TokType) -> bool:
        """True if the current token is one of ``args``."""
        return self.peek_type() in args

    def accept_next(self, *args: TokType) -> bool:
        """Like :meth:`accept`, and move past the token when it matches."""
        if not self.accept(*args):
            return False
        self.pos += 1
        return True

    def accept_data(self) -> bool:
        return self.peek().is_data()

    def set_type(self, tok: TokType) -> None:
        """Change the kind of the current token in place."""
        if 0 <= self.pos < len(self.tokens):
            self.tokens[self.pos].tok = tok

    def is_valid(self) -> bool:
        """True while the cursor has not reached the end of input."""
        return self.peek_type() is not TokType.FEOF