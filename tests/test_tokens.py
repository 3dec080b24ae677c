import pytest

from scribeparse.tokens import Lexeme, Location, ParseError, TokenStream, TokType


def _toks():
    loc = Location("m", 1, 1)
    return [
        Lexeme(loc, TokType.LET),
        Lexeme(loc, TokType.IDEN, "x"),
        Lexeme(loc, TokType.ASSN),
        Lexeme(loc, TokType.INT, 5),
        Lexeme(loc, TokType.COLS),
    ]


def test_peek_in_range_and_offsets():
    p = TokenStream(_toks())
    assert p.peek().tok is TokType.LET
    assert p.peek(1).data == "x"
    assert p.peek_type(3) is TokType.INT


def test_peek_out_of_range_gives_eof():
    p = TokenStream(_toks())
    assert p.peek(10).tok is TokType.FEOF
    assert p.peek(-1).tok is TokType.FEOF
    assert p.peek_type(-3) is TokType.FEOF


def test_advance_and_back():
    p = TokenStream(_toks())
    assert p.advance().tok is TokType.IDEN
    assert p.advance_type() is TokType.ASSN
    assert p.back().tok is TokType.IDEN
    assert p.back_type() is TokType.LET
    assert p.pos == 0
    assert p.back().tok is TokType.INVALID
    assert p.back_type() is TokType.INVALID
    assert p.pos == 0


def test_advance_past_end():
    p = TokenStream(_toks(), begin=4)
    assert p.advance().tok is TokType.FEOF
    assert not p.is_valid()


def test_at():
    p = TokenStream(_toks())
    assert p.at(3).data == 5
    assert p.at(99).tok is TokType.INVALID
    assert p.at(-1).tok is TokType.INVALID


def test_accept_and_accept_next():
    p = TokenStream(_toks())
    assert p.accept(TokType.IDEN, TokType.LET)
    assert not p.accept(TokType.IDEN)
    assert not p.accept_next(TokType.IDEN)
    assert p.pos == 0
    assert p.accept_next(TokType.LET)
    assert p.pos == 1
    assert p.accept_data()


def test_set_type_mutates_current_token():
    toks = _toks()
    p = TokenStream(toks, begin=2)
    p.set_type(TokType.NE)
    assert p.peek_type() is TokType.NE
    assert toks[2].tok is TokType.NE


def test_set_type_at_end_leaves_eof_alone():
    p = TokenStream([])
    p.set_type(TokType.IDEN)
    assert p.peek_type() is TokType.FEOF


def test_is_valid_walk_counts_tokens():
    p = TokenStream(_toks())
    seen = []
    while p.is_valid():
        seen.append(p.peek_type())
        p.advance()
    assert len(seen) == 5


def test_lexeme_classification():
    assert Lexeme(tok=TokType.INT, data=1).is_literal()
    assert Lexeme(tok=TokType.STR, data="s").is_data()
    assert Lexeme(tok=TokType.IDEN, data="a").is_data()
    assert not Lexeme(tok=TokType.IDEN, data="a").is_literal()
    assert Lexeme(tok=TokType.I32).is_data()
    assert not Lexeme(tok=TokType.ADD).is_data()
    assert not Lexeme().is_valid()
    assert not Lexeme(tok=TokType.FEOF).is_valid()
    assert Lexeme(tok=TokType.COMMA).is_valid()


def test_lexeme_data_str():
    assert Lexeme(tok=TokType.IDEN, data="name").data_str == "name"
    assert Lexeme().data_str == ""


def test_parse_error_location_from_lexeme():
    loc = Location("mod", 3, 7)
    err = ParseError("bad thing", Lexeme(loc, TokType.IDEN, "a"))
    assert err.location == loc
    assert str(err).endswith("bad thing")
    assert str(err).startswith("mod")
    with pytest.raises(ParseError):
        raise err


def test_parse_error_without_location():
    err = ParseError("oops")
    assert err.location is None
    assert str(err) == "oops"