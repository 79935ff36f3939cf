"""
AST node definitions for the expression language.

Nodes are immutable; ``expr_to_string`` renders any node back to source
text for diagnostics.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Identifier:
    name: str


@dataclass(frozen=True)
class Literal:
    value: Any
    raw: str


@dataclass(frozen=True)
class ThisExpression:
    pass


@dataclass(frozen=True)
class ArrayExpression:
    elements: tuple[Expression, ...]


@dataclass(frozen=True)
class UnaryExpression:
    operator: str
    argument: Expression


@dataclass(frozen=True)
class BinaryExpression:
    operator: str
    left: Expression
    right: Expression


@dataclass(frozen=True)
class AssignmentExpression:
    operator: str
    left: Expression
    right: Expression


@dataclass(frozen=True)
class CallExpression:
    callee: Expression
    arguments: tuple[Expression, ...]


@dataclass(frozen=True)
class MemberExpression:
    """``object.property`` or, when computed, ``object[property]``."""

    object: Expression
    property: Expression
    computed: bool = False


@dataclass(frozen=True)
class Compound:
    """Several expressions separated by ``;``."""

    body: tuple[Expression, ...]


Expression = Union[
    Identifier,
    Literal,
    ThisExpression,
    ArrayExpression,
    UnaryExpression,
    BinaryExpression,
    AssignmentExpression,
    CallExpression,
    MemberExpression,
    Compound,
]


def expr_to_string(expr: Expression | None) -> str:
    """Render an expression as source text."""
    if expr is None:
        return ""
    if isinstance(expr, Identifier):
        return expr.name
    if isinstance(expr, Literal):
        if expr.raw:
            return expr.raw
        return json.dumps(expr.value)
    if isinstance(expr, ThisExpression):
        return "this"
    if isinstance(expr, ArrayExpression):
        return "[" + ", ".join(expr_to_string(e) for e in expr.elements) + "]"
    if isinstance(expr, UnaryExpression):
        return f"{expr.operator}{expr_to_string(expr.argument)}"
    if isinstance(expr, (BinaryExpression, AssignmentExpression)):
        return f"{expr_to_string(expr.left)} {expr.operator} {expr_to_string(expr.right)}"
    if isinstance(expr, CallExpression):
        args = ", ".join(expr_to_string(arg) for arg in expr.arguments)
        return f"{expr_to_string(expr.callee)}({args})"
    if isinstance(expr, MemberExpression):
        if expr.computed:
            return f"{expr_to_string(expr.object)}[{expr_to_string(expr.property)}]"
        return f"{expr_to_string(expr.object)}.{expr_to_string(expr.property)}"
    if isinstance(expr, Compound):
        return "; ".join(expr_to_string(e) for e in expr.body)
    raise TypeError(f"Unknown expression type: {type(expr).__name__}")
