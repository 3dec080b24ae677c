"""Parsing of expressions, blocks of expression statements and function signatures."""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, Optional

from scribeparse.stmts import (
    Stmt,
    StmtBlock,
    StmtExpr,
    StmtFnCallInfo,
    StmtFnSig,
    StmtMask,
    StmtSimple,
    StmtType,
    StmtVar,
    VarMask,
)
from scribeparse.tokens import Lexeme, ParseError, TokenStream, TokType

_COMPOUND_ASSIGN = (
    TokType.ADD_ASSN,
    TokType.SUB_ASSN,
    TokType.MUL_ASSN,
    TokType.DIV_ASSN,
    TokType.MOD_ASSN,
    TokType.LSHIFT_ASSN,
    TokType.RSHIFT_ASSN,
    TokType.BAND_ASSN,
    TokType.BOR_ASSN,
    TokType.BNOT_ASSN,
    TokType.BXOR_ASSN,
)

_PREFIX_OPS = (
    TokType.XINC,
    TokType.XDEC,
    TokType.ADD,
    TokType.SUB,
    TokType.MUL,
    TokType.BAND,
    TokType.LNOT,
    TokType.BNOT,
)

_PREFIX_FORMS = {
    TokType.XINC: TokType.INCX,
    TokType.XDEC: TokType.DECX,
    TokType.ADD: TokType.UADD,
    TokType.SUB: TokType.USUB,
    TokType.MUL: TokType.UMUL,
    TokType.BAND: TokType.UAND,
}


def _found(p: TokenStream, message: str) -> ParseError:
    return ParseError(f"{message}{p.peek().tok}", p.peek())


class ExpressionParser:
    """Recursive-descent parser for the expression grammar.

    Every ``parse_*`` method consumes tokens from the given stream and returns
    the node it built, raising :class:`ParseError` when the tokens do not fit.
    Blocks handled here hold expression statements and nested blocks; a
    subclass widens them by overriding ``_parse_statement``.
    """

    # ------------------------------------------------------------------ blocks

    def parse_block(self, p: TokenStream, with_brace: bool = True) -> StmtBlock:
        """Parse a block; without braces it runs to the end of input (top level)."""
        start = p.peek()
        if with_brace and not p.accept_next(TokType.LBRACE):
            raise _found(p, "expected opening braces '{' for block, found: ")

        stmts: list[Stmt] = []
        while p.is_valid() and (not with_brace or not p.accept(TokType.RBRACE)):
            stmt, self_terminated = self._parse_statement(p)
            if not self_terminated and not p.accept_next(TokType.COLS):
                raise _found(p, "expected semicolon for end of statement, found: ")
            stmts.append(stmt)

        if with_brace and not p.accept_next(TokType.RBRACE):
            raise _found(p, "expected closing braces '}' for block, found: ")
        return StmtBlock(loc=start.loc, stmts=stmts, is_top=not with_brace)

    def _parse_statement(self, p: TokenStream) -> tuple[Stmt, bool]:
        """One statement, and whether it ends without a semicolon."""
        if p.accept(TokType.LBRACE):
            return self.parse_block(p), True
        return self.parse_expr(p, False), False

    # ------------------------------------------------------------------- types

    def _parse_type(self, p: TokenStream) -> StmtType:
        start = p.peek()
        if p.accept(TokType.FN):
            return StmtType(loc=start.loc, expr=self.parse_fn_sig(p))

        variadic = p.accept_next(TokType.PRE_VA)
        ptr = 0
        while p.accept_next(TokType.MUL):
            ptr += 1
        mask = StmtMask(0)
        if p.accept_next(TokType.BAND):
            mask |= StmtMask.REF
        if p.accept_next(TokType.CONST):
            mask |= StmtMask.CONST

        try:
            expr = self.parse_primary(p, True)
        except ParseError as exc:
            raise ParseError("failed to parse type expression", p.peek()) from exc
        if expr is None:
            raise ParseError("no type expression found", start)

        stype = StmtType(loc=start.loc, expr=expr, ptr=ptr, variadic=variadic)
        stype.stmtmask = mask
        return stype

    def _parse_param(self, p: TokenStream) -> StmtVar:
        """A function parameter: modifiers, a name and a mandatory type."""
        stmtmask = StmtMask(0)
        varmask = VarMask(0)
        while p.accept(TokType.STATIC, TokType.VOLATILE, TokType.GLOBAL, TokType.COMPTIME):
            if p.accept_next(TokType.COMPTIME):
                stmtmask |= StmtMask.COMPTIME
            if p.accept_next(TokType.STATIC):
                varmask |= VarMask.STATIC
            if p.accept_next(TokType.VOLATILE):
                varmask |= VarMask.VOLATILE
            if p.accept_next(TokType.GLOBAL):
                varmask |= VarMask.GLOBAL
        comptime = bool(stmtmask & StmtMask.COMPTIME)

        if not p.accept(TokType.IDEN):
            raise _found(p, "expected identifier for variable name, found: ")
        name = replace(p.peek())
        p.advance()

        if p.accept(TokType.IN):
            raise ParseError("unexpected 'in' here", p.peek())

        vtype: Optional[StmtType] = None
        if p.accept_next(TokType.COL):
            try:
                vtype = self._parse_type(p)
            except ParseError as exc:
                raise ParseError(
                    f"failed to parse type for variable: {name.data_str}", p.peek()
                ) from exc
            if vtype.is_meta_type() and not comptime:
                raise ParseError("a variable of type 'type' must be comptime", vtype)

        if p.accept(TokType.ASSN):
            raise ParseError("unexpected beginning of value assignment here", p.peek())
        if vtype is None:
            raise ParseError("invalid variable declaration - no type or value set", name)

        var = StmtVar(loc=name.loc, name=name, vtype=vtype, varmask=varmask)
        var.stmtmask |= stmtmask
        return var

    def parse_fn_sig(self, p: TokenStream) -> StmtFnSig:
        """Parse ``fn(<params>)[: <type>]``; the return type defaults to void."""
        start = p.peek()
        if not p.accept_next(TokType.FN):
            raise _found(p, "expected 'fn' here, found: ")
        if not p.accept_next(TokType.LPAREN):
            raise _found(p, "expected opening parenthesis for function args, found: ")

        args: list[StmtVar] = []
        names: set[str] = set()
        found_va = False
        if not p.accept_next(TokType.RPAREN):
            while True:
                is_comptime = p.accept_next(TokType.COMPTIME)
                argname = p.peek().data_str
                if argname in names:
                    raise ParseError(
                        "this argument name is already used before in this function signature",
                        p.peek(),
                    )
                names.add(argname)
                if is_comptime:
                    p.pos -= 1
                var = self._parse_param(p)
                if var.vtype.variadic:
                    found_va = True
                args.append(var)
                if not p.accept_next(TokType.COMMA):
                    break
                if found_va:
                    raise ParseError("no parameter can exist after variadic", p.peek())
            if not p.accept_next(TokType.RPAREN):
                raise _found(p, "expected closing parenthesis after function args, found: ")

        rettype: Optional[StmtType] = None
        if p.accept_next(TokType.COL):
            try:
                rettype = self._parse_type(p)
            except ParseError as exc:
                raise ParseError("failed to parse return type for function", p.peek()) from exc
        if rettype is None:
            voideme = Lexeme(p.peek(-1).loc, TokType.VOID, "void")
            voidsim = StmtSimple(loc=voideme.loc, lex=voideme)
            rettype = StmtType(loc=voidsim.loc, expr=voidsim)

        return StmtFnSig(loc=start.loc, args=args, rettype=rettype, has_variadic=found_va)

    # ------------------------------------------------------------- expressions

    def parse_simple(self, p: TokenStream) -> StmtSimple:
        """A single data token: a name, a literal or a built-in type name."""
        if not p.peek().is_data():
            raise _found(p, "expected data here, found: ")
        val = replace(p.peek())
        p.advance()
        return StmtSimple(loc=val.loc, lex=val)

    def parse_affixed_literal(self, p: TokenStream) -> StmtExpr:
        """``ref"text"`` or ``9h``: a literal with a name before or after it, as a call."""
        if p.peek_type() is TokType.IDEN:
            iden, lit = p.peek(), p.peek(1)
        else:
            lit, iden = p.peek(), p.peek(1)
        oper = Lexeme(iden.loc, TokType.FNCALL)
        p.advance()
        p.advance()

        arg = StmtSimple(loc=lit.loc, lex=replace(lit))
        fn = StmtSimple(loc=iden.loc, lex=replace(iden))
        finfo = StmtFnCallInfo(loc=arg.loc, args=[arg])
        return StmtExpr(loc=lit.loc, lhs=fn, oper=oper, rhs=finfo)

    def parse_expr(self, p: TokenStream, disable_brace_after_iden: bool = False) -> Stmt:
        return self.parse_comma(p, disable_brace_after_iden)

    def parse_comma(self, p: TokenStream, disable_brace_after_iden: bool = False) -> Stmt:
        start = p.peek()
        commas = 0
        rhs = self.parse_ternary(p, disable_brace_after_iden)
        while p.accept(TokType.COMMA):
            commas += 1
            oper = replace(p.peek())
            p.advance()
            lhs = self.parse_ternary(p, disable_brace_after_iden)
            rhs = StmtExpr(loc=start.loc, lhs=lhs, oper=oper, rhs=rhs)
        if isinstance(rhs, StmtExpr):
            rhs.commas = commas
        return rhs

    def parse_ternary(self, p: TokenStream, disable_brace_after_iden: bool = False) -> Stmt:
        start = p.peek()
        lhs = self.parse_assign(p, disable_brace_after_iden)
        if not p.accept(TokType.QUEST):
            return lhs
        oper = replace(p.peek())
        p.advance()
        when_true = self.parse_assign(p, disable_brace_after_iden)
        if not p.accept(TokType.COL):
            raise _found(p, "expected ':' for ternary operator, found: ")
        oper_inside = replace(p.peek())
        p.advance()
        when_false = self.parse_assign(p, disable_brace_after_iden)
        rhs = StmtExpr(loc=oper.loc, lhs=when_true, oper=oper_inside, rhs=when_false)
        return StmtExpr(loc=start.loc, lhs=lhs, oper=oper, rhs=rhs)

    def parse_assign(self, p: TokenStream, disable_brace_after_iden: bool = False) -> Stmt:
        start = p.peek()
        rhs = self.parse_compound_assign(p, disable_brace_after_iden)
        while p.accept(TokType.ASSN):
            oper = replace(p.peek())
            p.advance()
            lhs = self.parse_compound_assign(p, disable_brace_after_iden)
            rhs = StmtExpr(loc=start.loc, lhs=lhs, oper=oper, rhs=rhs)
        return rhs

    def parse_compound_assign(
        self, p: TokenStream, disable_brace_after_iden: bool = False
    ) -> Stmt:
        """Compound assignments, then an optional ``or [name] { ... }`` block."""
        expr = self._binary(p, disable_brace_after_iden, self.parse_logical_or, _COMPOUND_ASSIGN)
        if not p.accept_next(TokType.OR):
            return expr

        or_blk_var = Lexeme()
        if p.accept(TokType.IDEN):
            or_blk_var = replace(p.peek())
            p.advance()
        or_blk = self.parse_block(p)
        if not isinstance(expr, StmtExpr):
            expr = StmtExpr(loc=expr.loc, lhs=expr, oper=Lexeme(), rhs=None)
        expr.set_or(or_blk, or_blk_var)
        return expr

    def _binary(
        self,
        p: TokenStream,
        disable_brace_after_iden: bool,
        operand: Callable[[TokenStream, bool], Stmt],
        ops: tuple[TokType, ...],
    ) -> Stmt:
        start = p.peek()
        lhs = operand(p, disable_brace_after_iden)
        while p.accept(*ops):
            oper = replace(p.peek())
            p.advance()
            rhs = operand(p, disable_brace_after_iden)
            lhs = StmtExpr(loc=start.loc, lhs=lhs, oper=oper, rhs=rhs)
        return lhs

    def parse_logical_or(self, p: TokenStream, disable_brace_after_iden: bool = False) -> Stmt:
        return self._binary(p, disable_brace_after_iden, self.parse_logical_and, (TokType.LOR,))

    def parse_logical_and(self, p: TokenStream, disable_brace_after_iden: bool = False) -> Stmt:
        return self._binary(p, disable_brace_after_iden, self.parse_bit_or, (TokType.LAND,))

    def parse_bit_or(self, p: TokenStream, disable_brace_after_iden: bool = False) -> Stmt:
        return self._binary(p, disable_brace_after_iden, self.parse_bit_xor, (TokType.BOR,))

    def parse_bit_xor(self, p: TokenStream, disable_brace_after_iden: bool = False) -> Stmt:
        return self._binary(p, disable_brace_after_iden, self.parse_bit_and, (TokType.BXOR,))

    def parse_bit_and(self, p: TokenStream, disable_brace_after_iden: bool = False) -> Stmt:
        return self._binary(p, disable_brace_after_iden, self.parse_equality, (TokType.BAND,))

    def parse_equality(self, p: TokenStream, disable_brace_after_iden: bool = False) -> Stmt:
        return self._binary(
            p, disable_brace_after_iden, self.parse_relational, (TokType.EQ, TokType.NE)
        )

    def parse_relational(self, p: TokenStream, disable_brace_after_iden: bool = False) -> Stmt:
        return self._binary(
            p,
            disable_brace_after_iden,
            self.parse_shift,
            (TokType.LT, TokType.LE, TokType.GT, TokType.GE),
        )

    def parse_shift(self, p: TokenStream, disable_brace_after_iden: bool = False) -> Stmt:
        return self._binary(
            p, disable_brace_after_iden, self.parse_additive, (TokType.LSHIFT, TokType.RSHIFT)
        )

    def parse_additive(self, p: TokenStream, disable_brace_after_iden: bool = False) -> Stmt:
        return self._binary(
            p, disable_brace_after_iden, self.parse_multiplicative, (TokType.ADD, TokType.SUB)
        )

    def parse_multiplicative(
        self, p: TokenStream, disable_brace_after_iden: bool = False
    ) -> Stmt:
        return self._binary(
            p,
            disable_brace_after_iden,
            self.parse_prefix,
            (TokType.MUL, TokType.DIV, TokType.MOD),
        )

    def parse_prefix(self, p: TokenStream, disable_brace_after_iden: bool = False) -> Stmt:
        """Unary operators; minus signs on numeric literals are folded into the value."""
        start = p.peek()
        opers: list[Lexeme] = []
        while p.accept(*_PREFIX_OPS):
            form = _PREFIX_FORMS.get(p.peek_type())
            if form is not None:
                p.set_type(form)
            opers.insert(0, replace(p.peek()))
            p.advance()

        lhs = self.parse_postfix(p, disable_brace_after_iden)
        if lhs is None:
            raise ParseError("invalid expression", start)

        if isinstance(lhs, StmtSimple) and lhs.lex.tok in (TokType.INT, TokType.FLT):
            while opers and opers[0].tok is TokType.USUB:
                lhs.lex.data = -lhs.lex.data
                opers.pop(0)

        for op in opers:
            lhs = StmtExpr(loc=op.loc, lhs=lhs, oper=op, rhs=None)
        return lhs

    def parse_postfix(
        self, p: TokenStream, disable_brace_after_iden: bool = False
    ) -> Optional[Stmt]:
        lhs = self.parse_primary(p, disable_brace_after_iden)
        if p.accept(TokType.XINC, TokType.XDEC, TokType.PRE_VA):
            if p.peek_type() is TokType.PRE_VA:
                p.set_type(TokType.POST_VA)
            oper = replace(p.peek())
            lhs = StmtExpr(loc=oper.loc, lhs=lhs, oper=oper, rhs=None)
            p.advance()
        return lhs

    def parse_primary(
        self, p: TokenStream, disable_brace_after_iden: bool = False
    ) -> Optional[Stmt]:
        """Operands with member access, subscripts, calls and struct literals.

        Returns None when no operand starts at the cursor.
        """
        if (p.accept(TokType.IDEN) and p.peek(1).is_literal()) or (
            p.peek().is_literal() and p.peek_type(1) is TokType.IDEN
        ):
            return self.parse_affixed_literal(p)

        lhs: Optional[Stmt] = None
        rhs: Optional[Stmt] = None
        dot = Lexeme()
        is_intrinsic = False

        if p.accept_next(TokType.LPAREN):
            lhs = self.parse_expr(p, disable_brace_after_iden)
            if not p.accept_next(TokType.RPAREN):
                raise _found(p, "expected ending parenthesis ')' for expression, found: ")

        if p.accept_next(TokType.AT):
            is_intrinsic = True
        if p.accept_data():
            lhs = self.parse_simple(p)

        after_dot = False
        while True:
            if after_dot:
                after_dot = False
                if not p.accept_data():
                    raise _found(p, "expected member name after access operator, found: ")
                rhs = self.parse_simple(p)
                if lhs is not None and rhs is not None:
                    lhs = StmtExpr(loc=dot.loc, lhs=lhs, oper=dot, rhs=rhs)
                    rhs = None

            if p.accept(TokType.LBRACK):
                p.set_type(TokType.SUBS)
                oper = replace(p.peek())
                p.advance()
                if is_intrinsic:
                    raise ParseError(
                        "only function calls can be intrinsic; attempted subscript here",
                        p.peek(),
                    )
                try:
                    rhs = self.parse_ternary(p, False)
                except ParseError as exc:
                    raise ParseError("failed to parse expression for subscript", oper) from exc
                if not p.accept_next(TokType.RBRACK):
                    raise _found(
                        p, "expected closing bracket for subscript expression, found: "
                    )
                lhs = StmtExpr(loc=oper.loc, lhs=lhs, oper=oper, rhs=rhs)
                rhs = None
                if p.accept(TokType.LBRACK, TokType.LPAREN):
                    continue
            elif p.accept(TokType.LPAREN) or (
                not disable_brace_after_iden and p.accept(TokType.LBRACE)
            ):
                fncall = p.accept(TokType.LPAREN)
                close = TokType.RPAREN if fncall else TokType.RBRACE
                p.set_type(TokType.FNCALL if fncall else TokType.STCALL)
                oper = replace(p.peek())
                p.advance()
                args: list[Stmt] = []
                if not p.accept_next(close):
                    while True:
                        args.append(self.parse_ternary(p, False))
                        if not p.accept_next(TokType.COMMA):
                            break
                    if not p.accept_next(close):
                        raise _found(
                            p,
                            "expected closing parenthesis/brace after "
                            "function/struct call arguments, found: ",
                        )
                info = StmtFnCallInfo(loc=oper.loc, args=args)
                lhs = StmtExpr(
                    loc=oper.loc, lhs=lhs, oper=oper, rhs=info, is_intrinsic_call=is_intrinsic
                )
                rhs = None
                if not disable_brace_after_iden and p.accept(TokType.LBRACE):
                    continue
                if p.accept(TokType.LBRACK, TokType.LPAREN):
                    continue

            if p.accept_next(TokType.DOT, TokType.ARROW):
                access = replace(p.peek(-1))
                if lhs is not None and rhs is not None:
                    lhs = StmtExpr(loc=access.loc, lhs=lhs, oper=access, rhs=rhs)
                    rhs = None
                dot = access
                after_dot = True
                continue
            break

        if lhs is not None and rhs is not None:
            lhs = StmtExpr(loc=dot.loc, lhs=lhs, oper=dot, rhs=rhs)
        return lhs