# scribeparse

A recursive-descent expression parser and a statement tree for a small systems
programming language. It turns a list of lexemes into tree nodes. You can then
copy, inspect and print those trees.

## Installing

```
pip install .
```

To run the tests, install the test extra and run pytest:

```
pip install .[test]
pytest
```

## What it provides

- `scribeparse.tokens` holds the token kinds (`TokType`), source positions
  (`Location`) and lexemes (`Lexeme`). It also has `TokenStream`, a cursor over
  the lexemes with `peek`, `advance`, `back`, `accept`, `accept_next`,
  `set_type` and related methods. Parse failures raise `ParseError`, which
  carries the message and, where known, the location of the offending lexeme.
- `scribeparse.stmts` holds the statement tree: `StmtBlock`, `StmtExpr`,
  `StmtSimple`, `StmtVar`, `StmtFnSig`, `StmtFnDef`, `StmtStruct`, `StmtEnum`,
  `StmtCond`, `StmtFor` and the other node types, together with `StmtKind`,
  `StmtMask`, `VarMask` and `ValueRegistry`.
- `scribeparse.exprparse.ExpressionParser` parses expressions. It follows the
  language's precedence rules, from the comma operator down to primary
  expressions, including calls, struct literals, subscripts, member access,
  `or` blocks and affixed literals such as `9h`. It also parses function
  signatures (`parse_fn_sig`) and blocks made of expression statements and
  nested blocks (`parse_block`).
- `scribeparse.clone.clone(stmt)` makes a deep copy of a tree. Masks and cast
  information are kept; resolved types and values are not.
- `scribeparse.clearvalue.clear_value(stmt)` marks every value attached to a
  tree as holding no data. Values must offer `clear_has_data()`.
- `scribeparse.funcused.set_func_used(stmt, inc)` raises or lowers the use
  count of every function definition reachable from a tree. Resolved function
  types must offer `is_func()` and a `var` attribute.
- `scribeparse.treedump.dump(stmt)` renders a tree as indented text.

## Example

```python
from scribeparse.exprparse import ExpressionParser
from scribeparse.tokens import Lexeme, TokType, TokenStream
from scribeparse.treedump import dump

tokens = [
    Lexeme(tok=TokType.IDEN, data="a"),
    Lexeme(tok=TokType.ADD),
    Lexeme(tok=TokType.INT, data=2),
    Lexeme(tok=TokType.MUL),
    Lexeme(tok=TokType.IDEN, data="b"),
    Lexeme(tok=TokType.COLS),
]
tree = ExpressionParser().parse_block(TokenStream(tokens), with_brace=False)
print(dump(tree))
```

Invalid input raises `scribeparse.tokens.ParseError`.

## What it does not do

- There is no lexer: the lexemes have to be built by the caller.
- Blocks hold only expression statements and nested blocks. Declarations and
  control flow (`let`, `if`, `for`, `while`, `return`, `defer`, structs,
  enums, externs) are not parsed; the tree has node types for them, which can
  be built by hand and then cloned, cleared, counted and dumped.
- There is no command-line tool and no type checking or code generation.