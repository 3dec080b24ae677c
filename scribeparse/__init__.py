"""Expression parser and statement tree for a small systems programming language."""

__version__ = "0.1.0"
__all__ = ["clearvalue", "clone", "exprparse", "funcused", "stmts", "tokens", "treedump"]