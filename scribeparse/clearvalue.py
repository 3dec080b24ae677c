"""Dropping computed values from a syntax tree."""

from __future__ import annotations

from functools import singledispatch

from scribeparse.stmts import (
    Stmt,
    StmtBlock,
    StmtCond,
    StmtDefer,
    StmtEnum,
    StmtExpr,
    StmtExtern,
    StmtFnCallInfo,
    StmtFnDef,
    StmtFnSig,
    StmtFor,
    StmtRet,
    StmtSimple,
    StmtStruct,
    StmtType,
    StmtVar,
    StmtVarDecl,
)


def _clear_own(stmt: Stmt) -> None:
    if stmt.value is not None:
        stmt.value.clear_has_data()


def _clear_all(*parts) -> None:
    for part in parts:
        if part is not None:
            clear_value(part)


@singledispatch
def clear_value(stmt: object) -> None:
    """Mark the values attached to ``stmt`` and its children as holding no data.

    Values are expected to offer ``clear_has_data()``. Simple nodes keep their
    values untouched.
    """
    raise TypeError(f"cannot clear values of {type(stmt).__name__}")


@clear_value.register
def _(stmt: Stmt) -> None:
    # Leaf nodes: headers, libraries, continue and break clear their own value;
    # simple nodes keep theirs.
    if not isinstance(stmt, StmtSimple):
        _clear_own(stmt)


@clear_value.register
def _(stmt: StmtBlock) -> None:
    _clear_own(stmt)
    _clear_all(*stmt.stmts)


@clear_value.register
def _(stmt: StmtType) -> None:
    _clear_own(stmt)
    _clear_all(stmt.expr)


@clear_value.register
def _(stmt: StmtFnCallInfo) -> None:
    _clear_own(stmt)
    _clear_all(*stmt.args)


@clear_value.register
def _(stmt: StmtExpr) -> None:
    _clear_own(stmt)
    _clear_all(stmt.lhs, stmt.rhs)


@clear_value.register
def _(stmt: StmtVar) -> None:
    _clear_own(stmt)
    _clear_all(stmt.vtype, stmt.vval)


@clear_value.register
def _(stmt: StmtFnSig) -> None:
    _clear_own(stmt)
    _clear_all(*stmt.args, stmt.rettype)


@clear_value.register
def _(stmt: StmtFnDef) -> None:
    _clear_own(stmt)
    _clear_all(stmt.sig, stmt.blk)


@clear_value.register
def _(stmt: StmtExtern) -> None:
    _clear_own(stmt)
    _clear_all(stmt.headers, stmt.libs, stmt.entity)


@clear_value.register
def _(stmt: StmtEnum) -> None:
    _clear_own(stmt)
    _clear_all(stmt.tagty)


@clear_value.register
def _(stmt: StmtStruct) -> None:
    _clear_own(stmt)
    _clear_all(*stmt.fields)


@clear_value.register
def _(stmt: StmtVarDecl) -> None:
    _clear_own(stmt)
    _clear_all(*stmt.decls)


@clear_value.register
def _(stmt: StmtCond) -> None:
    _clear_own(stmt)
    for branch in stmt.conds:
        _clear_all(branch.cond, branch.blk)


@clear_value.register
def _(stmt: StmtFor) -> None:
    _clear_own(stmt)
    _clear_all(stmt.init, stmt.cond, stmt.incr, stmt.blk)


@clear_value.register
def _(stmt: StmtRet) -> None:
    _clear_own(stmt)
    _clear_all(stmt.val)


@clear_value.register
def _(stmt: StmtDefer) -> None:
    _clear_own(stmt)
    _clear_all(stmt.val)