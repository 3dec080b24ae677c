"""Rendering syntax trees as indented text."""

from __future__ import annotations

from contextlib import contextmanager
from functools import singledispatch
from typing import Iterator

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

_YES_NO = {True: "yes", False: "no"}


def dump(stmt: Stmt) -> str:
    """Return a tree view of ``stmt``, one node or label per line."""
    tree = _Tree()
    _disp(stmt, tree, False)
    return "".join(line + "\n" for line in tree.lines)


class _Tree:
    def __init__(self) -> None:
        self.lines: list[str] = []
        self._stack: list[bool] = []

    @contextmanager
    def level(self, has_next: object) -> Iterator[None]:
        self._stack.append(bool(has_next))
        try:
            yield
        finally:
            self._stack.pop()

    def line(self, has_next: object, *parts: str) -> None:
        bars = "".join("│   " if more else "    " for more in self._stack[:-1])
        branch = "├── " if has_next else "└── "
        self.lines.append(bars + branch + "".join(parts))


@singledispatch
def _disp(stmt: object, tree: _Tree, has_next: bool) -> None:
    raise TypeError(f"cannot display {type(stmt).__name__}")


@_disp.register
def _(stmt: StmtBlock, tree: _Tree, has_next: bool) -> None:
    with tree.level(has_next):
        tree.line(
            has_next, "Block [top = ", _YES_NO[bool(stmt.is_top)], "]:", stmt.type_string()
        )
        last = len(stmt.stmts) - 1
        for i, child in enumerate(stmt.stmts):
            if child is None:
                with tree.level(has_next):
                    tree.line(i != last, "<Source End>")
                continue
            _disp(child, tree, i != last)


@_disp.register
def _(stmt: StmtType, tree: _Tree, has_next: bool) -> None:
    tname = "*" * stmt.ptr
    if stmt.variadic:
        tname = "..." + tname
    if tname:
        with tree.level(has_next):
            tree.line(
                has_next or stmt.expr is not None, "Type info: ", tname, stmt.type_string()
            )
    with tree.level(has_next):
        tree.line(has_next, "Type Expr:")
        _disp(stmt.expr, tree, False)


@_disp.register
def _(stmt: StmtSimple, tree: _Tree, has_next: bool) -> None:
    with tree.level(has_next):
        tree.line(
            has_next,
            "Simple [decl = ",
            _YES_NO[bool(stmt.decl)],
            "] [self = ",
            _YES_NO[bool(stmt.self_arg)],
            "]: ",
            str(stmt.lex),
            stmt.type_string(),
        )


@_disp.register
def _(stmt: StmtFnCallInfo, tree: _Tree, has_next: bool) -> None:
    with tree.level(has_next):
        tree.line(has_next, "Function Call Info: ", "" if stmt.args else "(empty)")
        if stmt.args:
            with tree.level(False):
                tree.line(False, "Args:")
                last = len(stmt.args) - 1
                for i, arg in enumerate(stmt.args):
                    _disp(arg, tree, i != last)


@_disp.register
def _(stmt: StmtExpr, tree: _Tree, has_next: bool) -> None:
    has_oper = stmt.oper.is_valid()
    has_rhs = stmt.rhs is not None
    has_or = stmt.or_blk is not None
    with tree.level(has_next):
        tree.line(
            has_next,
            "Expression [parsing intinsic: ",
            _YES_NO[bool(stmt.is_intrinsic_call)],
            "]:",
            stmt.type_string(),
        )
        if stmt.lhs is not None:
            more = has_oper or has_rhs or has_or
            with tree.level(more):
                tree.line(more, "LHS:")
                _disp(stmt.lhs, tree, False)
        if has_oper:
            with tree.level(has_rhs or has_or):
                tree.line(has_rhs or has_or, "Oper: ", stmt.oper.tok.value)
        if has_rhs:
            with tree.level(has_or):
                tree.line(has_or, "RHS:")
                _disp(stmt.rhs, tree, False)
        if has_or:
            var = stmt.or_blk_var
            name = var.data_str if var is not None and var.is_data() else "<none>"
            with tree.level(False):
                tree.line(False, "Or: ", name)
                _disp(stmt.or_blk, tree, False)


@_disp.register
def _(stmt: StmtVar, tree: _Tree, has_next: bool) -> None:
    with tree.level(has_next):
        tree.line(
            has_next,
            "Variable [in = ",
            _YES_NO[bool(stmt.is_in)],
            "] [comptime = ",
            _YES_NO[bool(stmt.is_comptime)],
            "] [global = ",
            _YES_NO[bool(stmt.is_global)],
            "] [static = ",
            _YES_NO[bool(stmt.is_static)],
            "] [const = ",
            _YES_NO[bool(stmt.is_const)],
            "] [volatile = ",
            _YES_NO[bool(stmt.is_volatile)],
            "]: ",
            stmt.name.data_str,
            stmt.type_string(),
        )
        if stmt.vtype is not None:
            more = stmt.vval is not None
            with tree.level(more):
                tree.line(more, "Type:")
                _disp(stmt.vtype, tree, False)
        if stmt.vval is not None:
            with tree.level(False):
                tree.line(False, "Value:")
                _disp(stmt.vval, tree, False)


@_disp.register
def _(stmt: StmtFnSig, tree: _Tree, has_next: bool) -> None:
    has_ret = stmt.rettype is not None
    with tree.level(has_next):
        tree.line(
            has_next,
            "Function signature [variadic = ",
            _YES_NO[bool(stmt.has_variadic)],
            "]",
            stmt.type_string(),
        )
        if stmt.args:
            with tree.level(has_ret):
                tree.line(has_ret, "Parameters:")
                last = len(stmt.args) - 1
                for i, arg in enumerate(stmt.args):
                    _disp(arg, tree, i != last)
        if has_ret:
            with tree.level(False):
                tree.line(False, "Return Type", stmt.rettype.type_string())
                _disp(stmt.rettype, tree, False)


@_disp.register
def _(stmt: StmtFnDef, tree: _Tree, has_next: bool) -> None:
    with tree.level(has_next):
        tree.line(
            has_next,
            "Function definition [is inline: ",
            _YES_NO[bool(stmt.is_inline)],
            "] [has parent: ",
            _YES_NO[stmt.parentvar is not None],
            "]",
            stmt.type_string(),
        )
        with tree.level(True):
            tree.line(True, "Function Signature:")
            _disp(stmt.sig, tree, False)
        with tree.level(False):
            tree.line(False, "Function Block:")
            if stmt.blk is not None:
                _disp(stmt.blk, tree, False)


@_disp.register
def _(stmt: StmtHeader, tree: _Tree, has_next: bool) -> None:
    has_flags = bool(stmt.flags.data_str)
    with tree.level(has_next):
        tree.line(has_next, "Header")
        with tree.level(has_flags):
            tree.line(has_flags, "Names: ", stmt.names.data_str)
        if has_flags:
            with tree.level(False):
                tree.line(False, "Flags: ", stmt.flags.data_str)


@_disp.register
def _(stmt: StmtLib, tree: _Tree, has_next: bool) -> None:
    with tree.level(has_next):
        tree.line(has_next, "Libs")
        with tree.level(False):
            tree.line(False, "Flags: ", stmt.flags.data_str)


@_disp.register
def _(stmt: StmtExtern, tree: _Tree, has_next: bool) -> None:
    has_libs = stmt.libs is not None
    has_entity = stmt.entity is not None
    with tree.level(has_next):
        tree.line(
            has_next,
            "Extern for ",
            stmt.fname.data_str,
            " [has parent: ",
            _YES_NO[stmt.parentvar is not None],
            "]",
            stmt.type_string(),
        )
        if stmt.headers is not None:
            with tree.level(has_libs or has_entity):
                tree.line(has_libs or has_entity, "Headers:")
                _disp(stmt.headers, tree, False)
        if has_libs:
            with tree.level(has_entity):
                tree.line(has_entity, "Libs:")
                _disp(stmt.libs, tree, False)
        if has_entity:
            with tree.level(False):
                tree.line(False, "Entity:")
                _disp(stmt.entity, tree, False)


@_disp.register
def _(stmt: StmtEnum, tree: _Tree, has_next: bool) -> None:
    with tree.level(has_next):
        tree.line(has_next, "Enumerations:", stmt.type_string())
        if stmt.tagty is not None:
            more = bool(stmt.items)
            with tree.level(more):
                tree.line(more, "Provided Tag Type:")
                _disp(stmt.tagty, tree, False)
        last = len(stmt.items) - 1
        for i, item in enumerate(stmt.items):
            with tree.level(i != last):
                tree.line(i != last, str(item))


@_disp.register
def _(stmt: StmtStruct, tree: _Tree, has_next: bool) -> None:
    templates = ""
    if stmt.templates:
        templates = "<" + ", ".join(stmt.template_names()) + ">"
    with tree.level(has_next):
        tree.line(
            has_next,
            "Struct",
            templates,
            " (decl) " if stmt.is_decl else " ",
            stmt.type_string(),
        )
        if stmt.fields:
            with tree.level(False):
                tree.line(False, "Fields:")
                last = len(stmt.fields) - 1
                for i, fld in enumerate(stmt.fields):
                    _disp(fld, tree, i != last)


@_disp.register
def _(stmt: StmtVarDecl, tree: _Tree, has_next: bool) -> None:
    with tree.level(has_next):
        tree.line(has_next, "Variable declarations")
        last = len(stmt.decls) - 1
        for i, decl in enumerate(stmt.decls):
            _disp(decl, tree, i != last)


@_disp.register
def _(stmt: StmtCond, tree: _Tree, has_next: bool) -> None:
    with tree.level(has_next):
        tree.line(has_next, "Conditional [is inline = ", _YES_NO[bool(stmt.is_inline)], "]")
        last = len(stmt.conds) - 1
        for i, branch in enumerate(stmt.conds):
            with tree.level(i != last):
                tree.line(i != last, "Branch:")
                if branch.cond is not None:
                    with tree.level(True):
                        tree.line(True, "Condition:")
                        _disp(branch.cond, tree, False)
                with tree.level(False):
                    tree.line(False, "Block:")
                    _disp(branch.blk, tree, False)


@_disp.register
def _(stmt: StmtFor, tree: _Tree, has_next: bool) -> None:
    has_cond = stmt.cond is not None
    has_incr = stmt.incr is not None
    has_blk = stmt.blk is not None
    with tree.level(has_next):
        tree.line(has_next, "For/While [is inline = ", _YES_NO[bool(stmt.is_inline)], "]")
        if stmt.init is not None:
            more = has_cond or has_incr or has_blk
            with tree.level(more):
                tree.line(more, "Init:")
                _disp(stmt.init, tree, False)
        if has_cond:
            with tree.level(has_incr or has_blk):
                tree.line(has_incr or has_blk, "Condition:")
                _disp(stmt.cond, tree, False)
        if has_incr:
            with tree.level(has_blk):
                tree.line(has_blk, "Increment:")
                _disp(stmt.incr, tree, False)
        if has_blk:
            with tree.level(False):
                tree.line(False, "Block:")
                _disp(stmt.blk, tree, False)


def _disp_valued(label: str, stmt: Stmt, val: Stmt | None, tree: _Tree, has_next: bool) -> None:
    with tree.level(has_next):
        tree.line(has_next, label, stmt.type_string())
        if val is not None:
            with tree.level(False):
                tree.line(False, "Value:")
                _disp(val, tree, False)


@_disp.register
def _(stmt: StmtRet, tree: _Tree, has_next: bool) -> None:
    _disp_valued("Return", stmt, stmt.val, tree, has_next)


@_disp.register
def _(stmt: StmtDefer, tree: _Tree, has_next: bool) -> None:
    _disp_valued("Defer", stmt, stmt.val, tree, has_next)


@_disp.register
def _(stmt: StmtContinue, tree: _Tree, has_next: bool) -> None:
    with tree.level(has_next):
        tree.line(has_next, "Continue")


@_disp.register
def _(stmt: StmtBreak, tree: _Tree, has_next: bool) -> None:
    with tree.level(has_next):
        tree.line(has_next, "Break")