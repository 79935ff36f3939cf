"""
Error taxonomy for the command-interpretation core.

Two families of failure exist:

    - CompileError: raised while content is being compiled (malformed
      expressions, match expressions without a verb, duplicate rule
      components, invalid builder configuration). These abort compilation
      of the offending content and report its declared source path.
    - ExecutionError: raised while a compiled Thunk is being resolved
      (missing names, type mismatches). These are caught at Thunk and
      PhaseAction boundaries, annotated with the expression text and the
      declaration path, and re-raised with the original as ``__cause__``.

A Matcher or PhaseAction that does not match is not an error.

Example:
    >>> try:
    ...     parse_to_thunk("1 +", path="entities.apple.description")
    ... except CompileError as e:
    ...     print(e.root_message)
"""

from __future__ import annotations

from typing import NoReturn


class EngineError(Exception):
    """Base class for all errors raised by ifcore.

    Attributes:
        expression: Source text of the expression being compiled/executed
        path: Declaration path of the content the expression belongs to
        root_message: Message of the deepest error in the cause chain
    """

    def __init__(
        self,
        message: str,
        *,
        expression: str | None = None,
        path: str | None = None,
        root_message: str | None = None,
    ) -> None:
        super().__init__(message)
        self.expression = expression
        self.path = path
        self.root_message = root_message if root_message is not None else message


class CompileError(EngineError):
    """Content could not be compiled."""


class ExpressionSyntaxError(CompileError):
    """The expression text is not valid syntax.

    Attributes:
        position: Character offset of the offending token
    """

    def __init__(self, message: str, position: int, **kwargs) -> None:
        super().__init__(f"{message} at character {position}", **kwargs)
        self.position = position


class ExecutionError(EngineError):
    """A compiled expression failed while being resolved."""


class UnknownNameError(ExecutionError):
    """A top-level name was looked up that no scope defines."""


def cause_message(error: BaseException) -> str:
    """Get the deepest message carried by an error."""
    if isinstance(error, EngineError):
        return error.root_message
    return str(error) or type(error).__name__


def _annotate(kind: str, expression: str, path: str | None, cause: BaseException) -> str:
    location = f"{path}\n" if path else ""
    return f"{kind} failed: {location}{expression}\n{cause}"


def rethrow_compile_error(
    expression: str, cause: BaseException, path: str | None = None
) -> NoReturn:
    """Re-raise ``cause`` as a CompileError annotated with its source."""
    raise CompileError(
        _annotate("Compilation", expression, path, cause),
        expression=expression,
        path=path,
        root_message=cause_message(cause),
    ) from cause


def rethrow_execution_error(
    expression: str, cause: BaseException, path: str | None = None
) -> NoReturn:
    """Re-raise ``cause`` as an ExecutionError annotated with its source."""
    raise ExecutionError(
        _annotate("Execution", expression, path, cause),
        expression=expression,
        path=path,
        root_message=cause_message(cause),
    ) from cause
