"""
Thunks and Results.

A Thunk is a compiled expression waiting for an Environment. Compiling
happens once, when content is loaded; resolving happens every time the
expression runs.

A Result wraps the value a Thunk produced, plus any extra properties a
builtin attached to it (``if(...)`` attaches ``then`` and ``else``).
Wrapping is idempotent: ``mk_result`` returns an existing Result unchanged.

Example:
    >>> thunk = parse_to_thunk("1 + 2")
    >>> thunk.resolve(env).get_value()
    3
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Callable

from ifcore.errors import EngineError, rethrow_execution_error
from ifcore.script.ast import expr_to_string

if TYPE_CHECKING:
    from ifcore.engine.env import Environment
    from ifcore.script.ast import Expression


# Errors a resolving Thunk re-raises annotated with its source
RUNTIME_ERRORS = (EngineError, ArithmeticError, TypeError, ValueError, LookupError)


class ThunkType(str, Enum):
    """How a caller should treat a Thunk.

    Arguments of builtin and property calls are passed to the callee as
    unresolved Thunks instead of values.
    """

    NORMAL = "normal"
    BUILTIN = "builtin"
    PROPERTY = "property"


class Result:
    """The outcome of resolving a Thunk."""

    __slots__ = ("value", "properties")

    def __init__(self, value: Any = None, properties: dict[str, Any] | None = None):
        self.value = value
        self.properties = properties or {}

    def get_value(self) -> Any:
        value = self.value
        while isinstance(value, Result):
            value = value.value
        return value

    def __repr__(self) -> str:
        return f"Result({self.value!r})"


def mk_result(value: Any = None, properties: dict[str, Any] | None = None) -> Result:
    """Wrap ``value`` in a Result unless it already is one."""
    if isinstance(value, Result):
        return value
    return Result(value, properties)


class Thunk:
    """A compiled expression.

    Attributes:
        expression: The AST the Thunk was compiled from, if any
        type: NORMAL, BUILTIN or PROPERTY
        source: Original source text; when set, errors raised while
            resolving are re-raised annotated with it
        path: Declaration path of the content the source came from
    """

    __slots__ = ("_resolve", "expression", "type", "source", "path")

    def __init__(
        self,
        resolve: Callable[[Environment], Result],
        expression: Expression | None = None,
        type: ThunkType = ThunkType.NORMAL,
        source: str | None = None,
        path: str | None = None,
    ):
        self._resolve = resolve
        self.expression = expression
        self.type = type
        self.source = source
        self.path = path

    def resolve(self, env: Environment) -> Result:
        if self.source is None:
            return mk_result(self._resolve(env))
        try:
            return mk_result(self._resolve(env))
        except RUNTIME_ERRORS as e:
            rethrow_execution_error(self.source, e, self.path)

    def __str__(self) -> str:
        if self.source is not None:
            return self.source
        return expr_to_string(self.expression)

    def __repr__(self) -> str:
        return f"Thunk({str(self)!r}, type={self.type.value})"


def mk_thunk(
    resolve: Callable[[Environment], Any],
    expression: Expression | None = None,
    type: ThunkType = ThunkType.NORMAL,
) -> Thunk:
    """Build a Thunk whose resolve function may return a raw value."""
    return Thunk(lambda env: mk_result(resolve(env)), expression, type)
