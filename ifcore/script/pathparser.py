"""
Parse expression-style paths such as ``entities.apple.rules[0]`` into
path tuples.
"""

from __future__ import annotations

from functools import lru_cache

from ifcore.engine.path import Path, PossiblePath
from ifcore.errors import CompileError
from ifcore.script.ast import (
    Compound,
    Expression,
    Identifier,
    Literal,
    MemberExpression,
    ThisExpression,
)
from ifcore.script.parser import parse_expression


def parse_path_expr(expr: Expression) -> Path:
    """Convert an identifier/member AST into a path tuple."""
    if isinstance(expr, Identifier):
        return (expr.name,)
    if isinstance(expr, ThisExpression):
        return ("this",)
    if isinstance(expr, Literal) and isinstance(expr.value, (str, int)) and not isinstance(expr.value, bool):
        return (expr.value,)
    if isinstance(expr, MemberExpression):
        return parse_path_expr(expr.object) + parse_path_expr(expr.property)
    if isinstance(expr, Compound):
        return tuple(element for e in expr.body for element in parse_path_expr(e))
    raise CompileError(f"Invalid path expression: {type(expr).__name__}")


@lru_cache(maxsize=1024)
def _parse_path_string(text: str) -> Path:
    if text.isidentifier():
        return (text,)
    return parse_path_expr(parse_expression(text))


def parse_path(path: PossiblePath) -> Path:
    """Normalise a dotted string, tuple or None into a path tuple."""
    if path is None:
        return ()
    if isinstance(path, str):
        return _parse_path_string(path)
    return tuple(path)
