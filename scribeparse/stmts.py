"""Syntax tree nodes produced by the parser."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntFlag
from typing import Any, ClassVar, Optional

from scribeparse.tokens import Lexeme, Location, TokType


class StmtKind(Enum):
    """Kinds of statements; each value is the kind's readable name."""

    BLOCK = "block"
    TYPE = "type"
    SIMPLE = "simple"
    EXPR = "expression"
    FNCALLINFO = "function call info"
    VAR = "variable declaration base"
    FNSIG = "function signature"
    FNDEF = "function definition"
    HEADER = "extern header"
    LIB = "extern library"
    EXTERN = "extern"
    ENUMDEF = "enumeration definition"
    STRUCTDEF = "structure definition"
    VARDECL = "variable declaration"
    COND = "conditional"
    FOR = "for loop"
    RET = "return"
    CONTINUE = "continue"
    BREAK = "break"
    DEFER = "defer"


class StmtMask(IntFlag):
    REF = 1
    CONST = 2
    COMPTIME = 4


class VarMask(IntFlag):
    STATIC = 1
    VOLATILE = 2
    GLOBAL = 4
    IN = 8


class ValueRegistry:
    """Hands out numeric ids for values; id 0 always maps to None."""

    def __init__(self) -> None:
        self._values: dict[int, Any] = {0: None}
        self._next = 1

    def register(self, value: Any) -> int:
        vid = self._next
        self._next += 1
        self._values[vid] = value
        return vid

    def get(self, vid: int) -> Any:
        return self._values.get(vid)


def _innermost(ty: Any) -> Any:
    while ty.is_ptr():
        ty = ty.to
    return ty


def _mask_words(mask: StmtMask) -> str:
    words = ""
    if mask & StmtMask.COMPTIME:
        words += "comptime "
    if mask & StmtMask.REF:
        words += "& "
    if mask & StmtMask.CONST:
        words += "const "
    return words


@dataclass(eq=False)
class Stmt:
    """Common state of every node: location, resolved type, value and masks.

    Types are expected to offer ``is_ptr()``, ``is_any()``, ``is_template()``
    and, for pointers, a ``to`` attribute; values offer ``has_data()``.
    """

    KIND: ClassVar[StmtKind]

    loc: Location = field(default_factory=Location, kw_only=True)
    ty: Any = field(default=None, kw_only=True)
    value: Any = field(default=None, kw_only=True)
    cast_ty: Any = field(default=None, kw_only=True)
    derefcount: int = field(default=0, kw_only=True)
    stmtmask: StmtMask = field(default=StmtMask(0), kw_only=True)
    castmask: StmtMask = field(default=StmtMask(0), kw_only=True)

    @property
    def kind(self) -> StmtKind:
        return self.KIND

    def kind_name(self) -> str:
        return self.KIND.value

    @property
    def is_ref(self) -> bool:
        return bool(self.stmtmask & StmtMask.REF)

    @property
    def is_const(self) -> bool:
        return bool(self.stmtmask & StmtMask.CONST)

    @property
    def is_comptime(self) -> bool:
        return bool(self.stmtmask & StmtMask.COMPTIME)

    def set_ref(self) -> None:
        self.stmtmask |= StmtMask.REF

    def set_cast(self, ty: Any, mask: StmtMask) -> None:
        self.cast_ty = ty
        self.castmask = StmtMask(mask)

    def type_string(self) -> str:
        """Annotation with type, cast and known value, or '' when untyped."""
        ty = self.get_ty()
        if ty is None and self.value is None:
            return ""
        res = " :: " + _mask_words(self.stmtmask) + str(ty)
        if self.cast_ty is not None:
            res += " -> " + _mask_words(self.castmask) + str(self.cast_ty)
        if self.value is not None and self.value.has_data():
            res += " ==> " + str(self.value)
        return res

    def get_ty(self, exact: bool = False) -> Any:
        """The effective type: the cast type, or the type after dereferences."""
        if exact:
            return self.ty
        if self.cast_ty is not None:
            return self.cast_ty
        ty = self.ty
        for _ in range(self.derefcount):
            ty = ty.to
        return ty

    def requires_template_init(self) -> bool:
        return False


@dataclass(eq=False)
class StmtBlock(Stmt):
    KIND: ClassVar[StmtKind] = StmtKind.BLOCK

    stmts: list = field(default_factory=list)
    is_top: bool = False

    def requires_template_init(self) -> bool:
        return any(s is not None and s.requires_template_init() for s in self.stmts)


@dataclass(eq=False)
class StmtType(Stmt):
    KIND: ClassVar[StmtKind] = StmtKind.TYPE

    expr: Stmt = None
    ptr: int = 0
    variadic: bool = False

    def requires_template_init(self) -> bool:
        return self.variadic or self.expr.requires_template_init()

    def string_name(self) -> str:
        name = "*" * self.ptr
        if self.variadic:
            name = "..." + name
        return name + self.expr.kind_name()

    def is_meta_type(self) -> bool:
        return isinstance(self.expr, StmtSimple) and self.expr.lex.tok is TokType.TYPE


@dataclass(eq=False)
class StmtSimple(Stmt):
    KIND: ClassVar[StmtKind] = StmtKind.SIMPLE

    lex: Lexeme = field(default_factory=Lexeme)
    decl: Optional[Stmt] = None
    self_arg: Optional[Stmt] = None
    disable_module_id_mangle: bool = False
    disable_codegen_mangle: bool = False

    def requires_template_init(self) -> bool:
        return self.lex.tok in (TokType.ANY, TokType.TYPE)


@dataclass(eq=False)
class StmtFnCallInfo(Stmt):
    KIND: ClassVar[StmtKind] = StmtKind.FNCALLINFO

    args: list = field(default_factory=list)

    def requires_template_init(self) -> bool:
        return any(a.requires_template_init() for a in self.args)


@dataclass(eq=False)
class StmtExpr(Stmt):
    KIND: ClassVar[StmtKind] = StmtKind.EXPR

    lhs: Optional[Stmt] = None
    oper: Lexeme = field(default_factory=Lexeme)
    rhs: Optional[Stmt] = None
    commas: int = 0
    is_intrinsic_call: bool = False
    or_blk: Optional[StmtBlock] = None
    or_blk_var: Optional[Lexeme] = None
    calledfn: Any = None

    def __post_init__(self) -> None:
        if self.or_blk_var is None:
            self.or_blk_var = Lexeme(self.loc)

    def set_or(self, blk: StmtBlock, var: Lexeme) -> None:
        self.or_blk = blk
        self.or_blk_var = var

    def requires_template_init(self) -> bool:
        return any(
            part is not None and part.requires_template_init()
            for part in (self.lhs, self.rhs, self.or_blk)
        )


@dataclass(eq=False)
class StmtVar(Stmt):
    KIND: ClassVar[StmtKind] = StmtKind.VAR

    name: Lexeme = field(default_factory=Lexeme)
    vtype: Optional[StmtType] = None
    vval: Optional[Stmt] = None
    varmask: VarMask = VarMask(0)
    disable_module_id_mangle: bool = False
    disable_codegen_mangle: bool = False

    def __post_init__(self) -> None:
        self.varmask = VarMask(self.varmask)
        if self.vtype is not None:
            self.stmtmask |= self.vtype.stmtmask

    @property
    def is_in(self) -> bool:
        return bool(self.varmask & VarMask.IN)

    @property
    def is_static(self) -> bool:
        return bool(self.varmask & VarMask.STATIC)

    @property
    def is_volatile(self) -> bool:
        return bool(self.varmask & VarMask.VOLATILE)

    @property
    def is_global(self) -> bool:
        return bool(self.varmask & VarMask.GLOBAL)

    def requires_template_init(self) -> bool:
        return any(
            part is not None and part.requires_template_init()
            for part in (self.vtype, self.vval)
        )


@dataclass(eq=False)
class StmtFnSig(Stmt):
    KIND: ClassVar[StmtKind] = StmtKind.FNSIG

    args: list = field(default_factory=list)
    rettype: Optional[StmtType] = None
    has_variadic: bool = False
    disable_template: bool = False

    def requires_template_init(self) -> bool:
        """Needs resolved types; once found non-generic, the answer is cached."""
        if self.disable_template:
            return False
        if self.has_variadic:
            return True
        for arg in self.args:
            ty = arg.get_ty()
            if ty.is_template() or arg.is_comptime:
                return True
            if _innermost(ty).is_any():
                return True
        rty = self.rettype.get_ty()
        if rty.is_template() or _innermost(rty).is_any():
            return True
        self.disable_template = True
        return False


@dataclass(eq=False)
class StmtFnDef(Stmt):
    KIND: ClassVar[StmtKind] = StmtKind.FNDEF

    sig: StmtFnSig = None
    blk: Optional[StmtBlock] = None
    is_inline: bool = False
    parentvar: Optional[StmtVar] = None
    used: int = 0

    def requires_template_init(self) -> bool:
        if self.sig.requires_template_init():
            return True
        return self.blk is not None and self.blk.requires_template_init()


@dataclass(eq=False)
class StmtHeader(Stmt):
    KIND: ClassVar[StmtKind] = StmtKind.HEADER

    names: Lexeme = field(default_factory=Lexeme)
    flags: Lexeme = field(default_factory=Lexeme)


@dataclass(eq=False)
class StmtLib(Stmt):
    KIND: ClassVar[StmtKind] = StmtKind.LIB

    flags: Lexeme = field(default_factory=Lexeme)


@dataclass(eq=False)
class StmtExtern(Stmt):
    KIND: ClassVar[StmtKind] = StmtKind.EXTERN

    fname: Lexeme = field(default_factory=Lexeme)
    headers: Optional[StmtHeader] = None
    libs: Optional[StmtLib] = None
    entity: Optional[Stmt] = None
    parentvar: Optional[StmtVar] = None

    def requires_template_init(self) -> bool:
        return self.entity is not None and self.entity.requires_template_init()


@dataclass(eq=False)
class StmtEnum(Stmt):
    KIND: ClassVar[StmtKind] = StmtKind.ENUMDEF

    items: list = field(default_factory=list)
    tagty: Optional[StmtType] = None


@dataclass(eq=False)
class StmtStruct(Stmt):
    KIND: ClassVar[StmtKind] = StmtKind.STRUCTDEF

    fields: list = field(default_factory=list)
    templates: list = field(default_factory=list)
    is_decl: bool = False
    is_externed: bool = False

    def requires_template_init(self) -> bool:
        if self.templates:
            return True
        return any(f.requires_template_init() or f.is_comptime for f in self.fields)

    def template_names(self) -> list[str]:
        return [t.data_str for t in self.templates]


@dataclass(eq=False)
class StmtVarDecl(Stmt):
    KIND: ClassVar[StmtKind] = StmtKind.VARDECL

    decls: list = field(default_factory=list)

    def requires_template_init(self) -> bool:
        return any(d.requires_template_init() for d in self.decls)


@dataclass(eq=False)
class Conditional:
    """One branch of a conditional; ``cond`` is None for the else branch."""

    cond: Optional[Stmt] = None
    blk: Optional[StmtBlock] = None


@dataclass(eq=False)
class StmtCond(Stmt):
    KIND: ClassVar[StmtKind] = StmtKind.COND

    conds: list = field(default_factory=list)
    is_inline: bool = False

    def requires_template_init(self) -> bool:
        if self.is_inline:
            return True
        return any(
            part is not None and part.requires_template_init()
            for c in self.conds
            for part in (c.cond, c.blk)
        )


@dataclass(eq=False)
class StmtFor(Stmt):
    KIND: ClassVar[StmtKind] = StmtKind.FOR

    init: Optional[Stmt] = None
    cond: Optional[Stmt] = None
    incr: Optional[Stmt] = None
    blk: Optional[StmtBlock] = None
    is_inline: bool = False

    def requires_template_init(self) -> bool:
        if self.is_inline:
            return True
        return self.blk is not None and self.blk.requires_template_init()


@dataclass(eq=False)
class StmtRet(Stmt):
    KIND: ClassVar[StmtKind] = StmtKind.RET

    val: Optional[Stmt] = None
    fnblk: Optional[StmtBlock] = None


@dataclass(eq=False)
class StmtContinue(Stmt):
    KIND: ClassVar[StmtKind] = StmtKind.CONTINUE


@dataclass(eq=False)
class StmtBreak(Stmt):
    KIND: ClassVar[StmtKind] = StmtKind.BREAK


@dataclass(eq=False)
class StmtDefer(Stmt):
    KIND: ClassVar[StmtKind] = StmtKind.DEFER

    val: Stmt = None

    def requires_template_init(self) -> bool:
        return self.val.requires_template_init()