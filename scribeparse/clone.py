"""Deep copies of syntax trees."""

from __future__ import annotations

from dataclasses import replace
from functools import singledispatch
from typing import Optional

from scribeparse.stmts import (
    Conditional,
    Stmt,
    StmtBlock,
    StmtBreak,
    StmtCond,
    StmtContinue,
    StmtDefer,
    StmtEnum,
    StmtExpr,
    StmtExtern,
    StmtFnCallInfo,
    StmtFnDef,
    StmtFnSig,
    StmtFor,
    StmtHeader,
    StmtLib,
    StmtRet,
    StmtSimple,
    StmtStruct,
    StmtType,
    StmtVar,
    StmtVarDecl,
)
from scribeparse.tokens import Lexeme


def clone(stmt: Stmt) -> Stmt:
    """Copy ``stmt`` and every node below it.

    The copy keeps locations, statement masks and cast information; resolved
    types and values are not carried over. Links that point outside the tree
    (the called function of an expression, the function block of a return)
    are shared with the original.
    """
    new = _copy(stmt)
    new.stmtmask |= stmt.stmtmask
    new.set_cast(stmt.cast_ty, stmt.castmask)
    return new


def _maybe(stmt: Optional[Stmt]) -> Optional[Stmt]:
    return None if stmt is None else clone(stmt)


def _lex(lex: Lexeme) -> Lexeme:
    return replace(lex)


@singledispatch
def _copy(stmt: object) -> Stmt:
    raise TypeError(f"cannot clone {type(stmt).__name__}")


@_copy.register
def _(stmt: StmtBlock) -> Stmt:
    return StmtBlock(
        loc=stmt.loc,
        stmts=[_maybe(s) for s in stmt.stmts],
        is_top=stmt.is_top,
    )


@_copy.register
def _(stmt: StmtType) -> Stmt:
    return StmtType(
        loc=stmt.loc,
        expr=clone(stmt.expr),
        ptr=stmt.ptr,
        variadic=stmt.variadic,
    )


@_copy.register
def _(stmt: StmtSimple) -> Stmt:
    return StmtSimple(
        loc=stmt.loc,
        lex=_lex(stmt.lex),
        self_arg=_maybe(stmt.self_arg),
        disable_module_id_mangle=stmt.disable_module_id_mangle,
        disable_codegen_mangle=stmt.disable_codegen_mangle,
    )


@_copy.register
def _(stmt: StmtFnCallInfo) -> Stmt:
    return StmtFnCallInfo(loc=stmt.loc, args=[clone(a) for a in stmt.args])


@_copy.register
def _(stmt: StmtExpr) -> Stmt:
    return StmtExpr(
        loc=stmt.loc,
        lhs=_maybe(stmt.lhs),
        oper=_lex(stmt.oper),
        rhs=_maybe(stmt.rhs),
        commas=stmt.commas,
        is_intrinsic_call=stmt.is_intrinsic_call,
        or_blk=_maybe(stmt.or_blk),
        or_blk_var=_lex(stmt.or_blk_var),
        calledfn=stmt.calledfn,
    )


@_copy.register
def _(stmt: StmtVar) -> Stmt:
    return StmtVar(
        loc=stmt.loc,
        name=_lex(stmt.name),
        vtype=_maybe(stmt.vtype),
        vval=_maybe(stmt.vval),
        varmask=stmt.varmask,
        disable_module_id_mangle=stmt.disable_module_id_mangle,
        disable_codegen_mangle=stmt.disable_codegen_mangle,
    )


@_copy.register
def _(stmt: StmtFnSig) -> Stmt:
    return StmtFnSig(
        loc=stmt.loc,
        args=[clone(a) for a in stmt.args],
        rettype=_maybe(stmt.rettype),
        has_variadic=stmt.has_variadic,
    )


@_copy.register
def _(stmt: StmtFnDef) -> Stmt:
    return StmtFnDef(
        loc=stmt.loc,
        sig=clone(stmt.sig),
        blk=_maybe(stmt.blk),
        is_inline=stmt.is_inline,
    )


@_copy.register
def _(stmt: StmtHeader) -> Stmt:
    return StmtHeader(loc=stmt.loc, names=_lex(stmt.names), flags=_lex(stmt.flags))


@_copy.register
def _(stmt: StmtLib) -> Stmt:
    return StmtLib(loc=stmt.loc, flags=_lex(stmt.flags))


@_copy.register
def _(stmt: StmtExtern) -> Stmt:
    return StmtExtern(
        loc=stmt.loc,
        fname=_lex(stmt.fname),
        headers=_maybe(stmt.headers),
        libs=_maybe(stmt.libs),
        entity=_maybe(stmt.entity),
    )


@_copy.register
def _(stmt: StmtEnum) -> Stmt:
    return StmtEnum(
        loc=stmt.loc,
        items=[_lex(i) for i in stmt.items],
        tagty=_maybe(stmt.tagty),
    )


@_copy.register
def _(stmt: StmtStruct) -> Stmt:
    return StmtStruct(
        loc=stmt.loc,
        fields=[clone(f) for f in stmt.fields],
        templates=[_lex(t) for t in stmt.templates],
        is_decl=stmt.is_decl,
    )


@_copy.register
def _(stmt: StmtVarDecl) -> Stmt:
    return StmtVarDecl(loc=stmt.loc, decls=[clone(d) for d in stmt.decls])


@_copy.register
def _(stmt: StmtCond) -> Stmt:
    return StmtCond(
        loc=stmt.loc,
        conds=[Conditional(_maybe(c.cond), _maybe(c.blk)) for c in stmt.conds],
        is_inline=stmt.is_inline,
    )


@_copy.register
def _(stmt: StmtFor) -> Stmt:
    return StmtFor(
        loc=stmt.loc,
        init=_maybe(stmt.init),
        cond=_maybe(stmt.cond),
        incr=_maybe(stmt.incr),
        blk=_maybe(stmt.blk),
        is_inline=stmt.is_inline,
    )


@_copy.register
def _(stmt: StmtRet) -> Stmt:
    return StmtRet(loc=stmt.loc, val=_maybe(stmt.val), fnblk=stmt.fnblk)


@_copy.register
def _(stmt: StmtContinue) -> Stmt:
    return StmtContinue(loc=stmt.loc)


@_copy.register
def _(stmt: StmtBreak) -> Stmt:
    return StmtBreak(loc=stmt.loc)


@_copy.register
def _(stmt: StmtDefer) -> Stmt:
    return StmtDefer(loc=stmt.loc, val=clone(stmt.val))