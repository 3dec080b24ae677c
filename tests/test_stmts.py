import pytest

from scribeparse.stmts import (
    Conditional,
    StmtBlock,
    StmtBreak,
    StmtCond,
    StmtDefer,
    StmtExpr,
    StmtExtern,
    StmtFnSig,
    StmtFor,
    StmtKind,
    StmtMask,
    StmtRet,
    StmtSimple,
    StmtStruct,
    StmtType,
    StmtVar,
    StmtVarDecl,
    ValueRegistry,
    VarMask,
)
from scribeparse.tokens import Lexeme, Location, TokType


class FakeTy:
    def __init__(self, name, to=None, template=False, any_=False):
        self.name = name
        self.to = to
        self.template = template
        self.any_ = any_

    def is_ptr(self):
        return self.to is not None

    def is_template(self):
        return self.template

    def is_any(self):
        return self.any_

    def __str__(self):
        return self.name


class FakeVal:
    def __init__(self, text, data=True):
        self.text = text
        self.data = data

    def has_data(self):
        return self.data

    def __str__(self):
        return self.text


def iden(name):
    return StmtSimple(Lexeme(tok=TokType.IDEN, data=name))


def test_value_registry():
    reg = ValueRegistry()
    obj = object()
    assert reg.get(0) is None
    vid = reg.register(obj)
    assert vid == 1
    assert reg.get(vid) is obj
    assert reg.register(object()) == vid + 1
    assert reg.get(12345) is None


def test_kind_names():
    assert StmtBreak().kind_name() == "break"
    assert StmtBlock().kind_name() == "block"
    assert StmtFnSig().kind is StmtKind.FNSIG
    assert StmtVarDecl().kind_name() == "variable declaration"


def test_type_string_empty_when_untyped():
    assert iden("a").type_string() == ""


def test_type_string_with_masks():
    s = iden("a")
    s.ty = FakeTy("i32")
    s.stmtmask = StmtMask.COMPTIME | StmtMask.REF | StmtMask.CONST
    assert s.type_string() == " :: comptime & const i32"


def test_type_string_with_cast_and_value():
    s = iden("a")
    s.ty = FakeTy("i32")
    s.set_cast(FakeTy("i64"), StmtMask.REF)
    s.value = FakeVal("5")
    assert s.type_string() == " :: i64 -> & i64 ==> 5"


def test_type_string_value_without_data():
    s = iden("a")
    s.ty = FakeTy("i32")
    s.value = FakeVal("5", data=False)
    assert s.type_string() == " :: i32"


def test_get_ty_exact_cast_and_deref():
    inner = FakeTy("i8")
    mid = FakeTy("*i8", to=inner)
    outer = FakeTy("**i8", to=mid)
    s = iden("p")
    s.ty = outer
    assert s.get_ty() is outer
    s.derefcount = 2
    assert s.get_ty() is inner
    assert s.get_ty(exact=True) is outer
    s.derefcount = 1
    assert s.get_ty() is mid
    cast = FakeTy("u64")
    s.cast_ty = cast
    assert s.get_ty() is cast
    assert s.get_ty(True) is outer


def test_string_name_and_meta_type():
    t = StmtType(iden("T"), ptr=2, variadic=True)
    assert t.string_name() == "...**simple"
    assert not t.is_meta_type()
    meta = StmtType(StmtSimple(Lexeme(tok=TokType.TYPE)))
    assert meta.is_meta_type()
    assert meta.string_name() == "simple"


def test_simple_requires_template():
    assert StmtSimple(Lexeme(tok=TokType.ANY)).requires_template_init()
    assert StmtSimple(Lexeme(tok=TokType.TYPE)).requires_template_init()
    assert not iden("x").requires_template_init()


def test_block_and_type_propagation():
    any_simple = StmtSimple(Lexeme(tok=TokType.ANY))
    assert StmtBlock([iden("a"), StmtVarDecl([StmtVar(Lexeme(), vval=any_simple)])]).requires_template_init()
    assert not StmtBlock([iden("a"), StmtBreak()]).requires_template_init()
    assert StmtType(iden("a"), variadic=True).requires_template_init()
    assert not StmtType(iden("a")).requires_template_init()


def test_expr_requires_template_via_or_block():
    e = StmtExpr(iden("a"))
    assert not e.requires_template_init()
    e.set_or(StmtBlock([StmtSimple(Lexeme(tok=TokType.ANY))]), Lexeme(tok=TokType.IDEN, data="err"))
    assert e.requires_template_init()
    assert e.or_blk_var.data_str == "err"


def test_expr_default_or_var_is_invalid_at_loc():
    loc = Location("m", 4, 2)
    e = StmtExpr(iden("a"), loc=loc)
    assert not e.or_blk_var.is_valid()
    assert e.or_blk_var.loc == loc


def test_struct_requirements_and_template_names():
    st = StmtStruct([], [Lexeme(tok=TokType.IDEN, data="T"), Lexeme(tok=TokType.IDEN, data="U")])
    assert st.requires_template_init()
    assert st.template_names() == ["T", "U"]
    field_var = StmtVar(Lexeme(tok=TokType.IDEN, data="f"), vtype=StmtType(iden("i32")))
    assert not StmtStruct([field_var]).requires_template_init()
    field_var.stmtmask |= StmtMask.COMPTIME
    assert StmtStruct([field_var]).requires_template_init()


def test_cond_for_ret_defer_extern():
    plain = StmtBlock([iden("x")])
    assert StmtCond([Conditional(iden("c"), plain)], is_inline=True).requires_template_init()
    assert not StmtCond([Conditional(iden("c"), plain), Conditional(None, plain)]).requires_template_init()
    assert StmtFor(blk=plain, is_inline=True).requires_template_init()
    assert not StmtFor(blk=plain).requires_template_init()
    any_simple = StmtSimple(Lexeme(tok=TokType.ANY))
    assert not StmtRet(any_simple).requires_template_init()
    assert StmtDefer(any_simple).requires_template_init()
    assert StmtExtern(entity=StmtStruct(templates=[Lexeme()])).requires_template_init()
    assert not StmtExtern().requires_template_init()


def test_var_merges_type_mask():
    vt = StmtType(iden("i32"))
    vt.stmtmask = StmtMask.CONST | StmtMask.REF
    v = StmtVar(Lexeme(tok=TokType.IDEN, data="v"), vtype=vt, varmask=VarMask.STATIC | VarMask.IN)
    assert v.is_const and v.is_ref and not v.is_comptime
    assert v.is_static and v.is_in
    assert not v.is_global and not v.is_volatile


def _arg(ty, comptime=False):
    t = StmtType(iden("t"))
    a = StmtVar(Lexeme(tok=TokType.IDEN, data="a"), vtype=t)
    a.ty = ty
    if comptime:
        a.stmtmask |= StmtMask.COMPTIME
    return a


def _ret(ty):
    r = StmtType(iden("r"))
    r.ty = ty
    return r


def test_fnsig_plain_caches_result():
    sig = StmtFnSig([_arg(FakeTy("i32"))], _ret(FakeTy("void")))
    assert not sig.requires_template_init()
    assert sig.disable_template
    sig.has_variadic = True
    assert not sig.requires_template_init()


@pytest.mark.parametrize(
    "args, ret, variadic",
    [
        ([], FakeTy("void"), True),
        ([_arg(FakeTy("T", template=True))], FakeTy("void"), False),
        ([_arg(FakeTy("*any", to=FakeTy("any", any_=True)))], FakeTy("void"), False),
        ([_arg(FakeTy("i32"), comptime=True)], FakeTy("void"), False),
        ([], FakeTy("any", any_=True), False),
    ],
)
def test_fnsig_generic_cases(args, ret, variadic):
    sig = StmtFnSig(args, _ret(ret), has_variadic=variadic)
    assert sig.requires_template_init()
    assert not sig.disable_template


def test_nodes_compare_by_identity():
    a = iden("x")
    b = iden("x")
    assert a is not b
    assert len({a, b}) == 2
    assert a == a and not (a == b)