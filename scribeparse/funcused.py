"""Counting how often function definitions are reachable from a tree."""

from __future__ import annotations

from functools import singledispatch

from scribeparse.stmts import (
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

# Nodes with no children and no use count of their own.
_LEAVES = (StmtHeader, StmtLib, StmtContinue, StmtBreak)


def set_func_used(stmt: Stmt, inc: bool) -> None:
    """Raise (or lower) the use count of every function reachable from ``stmt``.

    Each node is visited at most once per call, so shared subtrees and cycles
    through function types are counted once. A count never drops below zero.
    Function types are expected to offer ``is_func()`` and a ``var`` attribute
    naming the variable that holds the function; called functions on
    expressions offer ``var`` as well.
    """
    _visit(stmt, inc, set())


def _visit(stmt: Stmt | None, inc: bool, done: set[int]) -> None:
    if stmt is None or id(stmt) in done:
        return
    done.add(id(stmt))
    if not isinstance(stmt, _LEAVES):
        _mark(stmt, inc, done)


def _visit_all(parts, inc: bool, done: set[int]) -> None:
    for part in parts:
        _visit(part, inc, done)


@singledispatch
def _mark(stmt: object, inc: bool, done: set[int]) -> None:
    raise TypeError(f"cannot mark functions used in {type(stmt).__name__}")


@_mark.register
def _(stmt: StmtBlock, inc: bool, done: set[int]) -> None:
    _visit_all(stmt.stmts, inc, done)


@_mark.register
def _(stmt: StmtType, inc: bool, done: set[int]) -> None:
    _visit(stmt.expr, inc, done)


@_mark.register
def _(stmt: StmtSimple, inc: bool, done: set[int]) -> None:
    ty = stmt.get_ty()
    if ty is not None and ty.is_func():
        _visit(ty.var, inc, done)


@_mark.register
def _(stmt: StmtFnCallInfo, inc: bool, done: set[int]) -> None:
    _visit_all(stmt.args, inc, done)


@_mark.register
def _(stmt: StmtExpr, inc: bool, done: set[int]) -> None:
    _visit_all((stmt.lhs, stmt.rhs), inc, done)
    if stmt.calledfn is None:
        return
    fnvar = stmt.calledfn.var
    if fnvar is not None and isinstance(fnvar.vval, StmtFnDef):
        _visit(fnvar, inc, done)


@_mark.register
def _(stmt: StmtVar, inc: bool, done: set[int]) -> None:
    _visit_all((stmt.vtype, stmt.vval), inc, done)


@_mark.register
def _(stmt: StmtFnSig, inc: bool, done: set[int]) -> None:
    _visit_all(stmt.args, inc, done)
    _visit(stmt.rettype, inc, done)


@_mark.register
def _(stmt: StmtFnDef, inc: bool, done: set[int]) -> None:
    if inc:
        stmt.used += 1
    elif stmt.used > 0:
        stmt.used -= 1
    _visit_all((stmt.sig, stmt.blk), inc, done)


@_mark.register
def _(stmt: StmtExtern, inc: bool, done: set[int]) -> None:
    _visit_all((stmt.headers, stmt.libs, stmt.entity), inc, done)


@_mark.register
def _(stmt: StmtEnum, inc: bool, done: set[int]) -> None:
    _visit(stmt.tagty, inc, done)


@_mark.register
def _(stmt: StmtStruct, inc: bool, done: set[int]) -> None:
    _visit_all(stmt.fields, inc, done)


@_mark.register
def _(stmt: StmtVarDecl, inc: bool, done: set[int]) -> None:
    _visit_all(stmt.decls, inc, done)


@_mark.register
def _(stmt: StmtCond, inc: bool, done: set[int]) -> None:
    for branch in stmt.conds:
        _visit_all((branch.cond, branch.blk), inc, done)


@_mark.register
def _(stmt: StmtFor, inc: bool, done: set[int]) -> None:
    _visit_all((stmt.init, stmt.cond, stmt.incr, stmt.blk), inc, done)


@_mark.register
def _(stmt: StmtRet, inc: bool, done: set[int]) -> None:
    _visit(stmt.val, inc, done)


@_mark.register
def _(stmt: StmtDefer, inc: bool, done: set[int]) -> None:
    _visit(stmt.val, inc, done)