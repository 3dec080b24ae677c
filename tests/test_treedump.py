import pytest

from scribeparse.stmts import (
    Conditional,
    StmtBlock,
    StmtBreak,
    StmtCond,
    StmtContinue,
    StmtEnum,
    StmtExpr,
    StmtFnSig,
    StmtFor,
    StmtHeader,
    StmtMask,
    StmtRet,
    StmtSimple,
    StmtStruct,
    StmtType,
    StmtVar,
    VarMask,
)
from scribeparse.tokens import Lexeme, TokType
from scribeparse.treedump import dump


class FakeTy:
    def __init__(self, name):
        self.name = name

    def __str__(self):
        return self.name


def iden(name):
    return Lexeme(tok=TokType.IDEN, data=name)


def simple(name):
    return StmtSimple(lex=iden(name))


def test_break_single_line():
    assert dump(StmtBreak()) == "└── Break\n"


def test_continue_is_one_line():
    out = dump(StmtContinue())
    assert out.count("\n") == 1
    assert out.rstrip().endswith("Continue")


def test_block_children_are_indented():
    lines = dump(StmtBlock(stmts=[StmtBreak(), StmtContinue()], is_top=True)).splitlines()
    assert len(lines) == 3
    assert "Block [top = yes]:" in lines[0]
    assert lines[1].index("Break") > lines[0].index("Block")
    assert lines[2].index("Continue") == lines[1].index("Break")
    assert lines[1][: lines[1].index("Break")] != lines[2][: lines[2].index("Continue")]


def test_block_source_end_marker():
    out = dump(StmtBlock(stmts=[StmtBreak(), None]))
    assert "<Source End>" in out.splitlines()[-1]


def test_simple_with_type():
    node = StmtSimple(lex=iden("x"), ty=FakeTy("i32"))
    out = dump(node)
    assert "Simple [decl = no] [self = no]: " in out
    assert out.rstrip().endswith(" :: i32")


def test_type_string_mask_words():
    node = StmtSimple(lex=iden("x"), ty=FakeTy("i32"), stmtmask=StmtMask.REF | StmtMask.CONST)
    assert dump(node).rstrip().endswith(" :: & const i32")


def test_expression_parts_in_order():
    expr = StmtExpr(lhs=simple("a"), oper=Lexeme(tok=TokType.ADD), rhs=simple("b"))
    out = dump(expr)
    assert out.index("LHS:") < out.index("Oper: +") < out.index("RHS:")
    assert "Or:" not in out


def test_expression_or_block_without_variable():
    expr = StmtExpr(lhs=simple("a"))
    expr.set_or(StmtBlock(stmts=[]), Lexeme())
    out = dump(expr)
    assert "Or: <none>" in out
    assert "Oper:" not in out


def test_expression_or_block_with_variable():
    expr = StmtExpr(lhs=simple("a"))
    expr.set_or(StmtBlock(stmts=[]), iden("err"))
    assert "Or: err" in dump(expr)


def test_struct_templates_and_decl():
    node = StmtStruct(templates=[iden("T"), iden("U")], is_decl=True)
    assert "Struct<T, U> (decl) " in dump(node)


def test_struct_plain_with_fields():
    field_var = StmtVar(name=iden("x"), vtype=StmtType(expr=simple("i32")))
    lines = dump(StmtStruct(fields=[field_var])).splitlines()
    assert lines[0].endswith("Struct ")
    assert "Fields:" in lines[1]


def test_header_flags_shown_only_when_present():
    without = dump(StmtHeader(names=Lexeme(tok=TokType.STR, data="stdio.h")))
    assert "Names: stdio.h" in without
    assert "Flags:" not in without
    with_flags = dump(
        StmtHeader(
            names=Lexeme(tok=TokType.STR, data="stdio.h"),
            flags=Lexeme(tok=TokType.STR, data="-I."),
        )
    )
    assert "Flags: -I." in with_flags


def test_variable_flags():
    var = StmtVar(
        name=iden("v"),
        vval=simple("a"),
        varmask=VarMask.STATIC | VarMask.GLOBAL,
    )
    out = dump(var)
    assert "[global = yes] [static = yes]" in out
    assert "[volatile = no]" in out
    assert "Value:" in out
    assert "Type:" not in out


def test_return_value_is_nested():
    lines = dump(StmtRet(val=simple("a"))).splitlines()
    assert lines[1].index("Value:") > lines[0].index("Return")


def test_conditional_else_has_no_condition():
    cond = StmtCond(
        conds=[
            Conditional(simple("c"), StmtBlock(stmts=[])),
            Conditional(None, StmtBlock(stmts=[])),
        ]
    )
    out = dump(cond)
    assert out.count("Branch:") == 2
    assert out.count("Condition:") == 1


def test_function_signature_return_type():
    sig = StmtFnSig(rettype=StmtType(expr=simple("void"), ty=FakeTy("void")))
    out = dump(sig)
    assert "Return Type :: void" in out
    assert "Parameters:" not in out


def test_enum_items_listed():
    out = dump(StmtEnum(items=[iden("A"), iden("B")]))
    assert out.index(str(iden("A"))) < out.index(str(iden("B")))


def test_for_sections_in_order():
    loop = StmtFor(init=simple("i"), cond=simple("c"), incr=simple("n"), blk=StmtBlock(stmts=[]))
    out = dump(loop)
    assert out.index("Init:") < out.index("Condition:") < out.index("Increment:") < out.index("Block:")


def test_unknown_object_raises_type_error():
    with pytest.raises(TypeError):
        dump(object())