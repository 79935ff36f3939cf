"""
Evaluator - compiles expression ASTs into Thunks.

Each AST node compiles to a Thunk whose resolve function evaluates the node
against the Environment it is given. Compilation happens once; the
resulting Thunk can be resolved any number of times.

Calls:
    The callee is resolved to a function taking an Environment. Arguments
    are resolved and bound, as a list, under ``__args__`` in a child scope;
    ``bind_params`` maps them onto parameter names. Builtins (``if``,
    ``switch``, ``do``, ``set``, ``def``, ``fn``) and the keyword properties
    ``then``/``else``/``case``/``default`` receive their arguments as
    unresolved Thunks instead, so they decide what runs.

Example:
    >>> env = create_root_env({"a": 3, "b": 1})
    >>> parse("a * (b + 3)")(env)
    12
    >>> parse("if(a > 2).then('big').else('small')")(env)
    'big'

Member access on a missing property or a missing object yields the
NotFound sentinel rather than raising, so optional-existence checks such as
``location.exits[dir]`` work as conditions.
"""

from __future__ import annotations

import operator
from collections.abc import Callable, Sequence
from typing import Any

from ifcore.engine.env import ARGS, EnvFn, Environment, NotFound, Reference
from ifcore.engine.path import Path, PossiblePath, path_to_string
from ifcore.engine.properties import get_property, is_object
from ifcore.errors import CompileError, ExecutionError, rethrow_compile_error
from ifcore.script.ast import (
    ArrayExpression,
    AssignmentExpression,
    BinaryExpression,
    CallExpression,
    Compound,
    Expression,
    Identifier,
    Literal,
    MemberExpression,
    ThisExpression,
    UnaryExpression,
    expr_to_string,
)
from ifcore.script.match_parser import evaluate_match
from ifcore.script.parser import MATCH_OPERATOR, parse_to_tree
from ifcore.script.pathparser import parse_path, parse_path_expr
from ifcore.script.thunk import Result, Thunk, ThunkType, mk_result, mk_thunk

KEYWORD_PROPS = frozenset({"then", "else", "case", "default"})


# =============================================================================
# Operators
# =============================================================================


def to_display_string(value: Any) -> str:
    """Render a script value the way ``write`` shows it (true, false, null)."""
    if value is True:
        return "true"
    if value is False:
        return "false"
    if value is None:
        return "null"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _add(left: Any, right: Any) -> Any:
    if isinstance(left, str) or isinstance(right, str):
        return to_display_string(left) + to_display_string(right)
    return left + right


def _unsigned_shift(left: int, right: int) -> int:
    return (left % 2**32) >> right


UNARY_OPERATORS: dict[str, Callable[[Any], Any]] = {
    "-": operator.neg,
    "+": operator.pos,
    "!": operator.not_,
    "~": operator.invert,
}

BINARY_OPERATORS: dict[str, Callable[[Any, Any], Any]] = {
    "+": _add,
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
    "%": operator.mod,
    "**": operator.pow,
    "==": operator.eq,
    "!=": operator.ne,
    "===": operator.eq,
    "!==": operator.ne,
    ">": operator.gt,
    "<": operator.lt,
    ">=": operator.ge,
    "<=": operator.le,
    "&": operator.and_,
    "|": operator.or_,
    "^": operator.xor,
    "<<": operator.lshift,
    ">>": operator.rshift,
    ">>>": _unsigned_shift,
}


# =============================================================================
# Function binding
# =============================================================================


def bind_params(
    params: Sequence[str], fn: EnvFn, closure_env: Environment | None = None
) -> EnvFn:
    """Wrap ``fn`` so positional ``__args__`` are defined as ``params``.

    Missing arguments are bound to None. With ``closure_env`` the parameters
    are bound in a child of that scope instead of the calling scope.

    Example:
        >>> double = bind_params(["x"], lambda env: env.get("x") * 2)
        >>> env.define("double", double)
        >>> parse("double(4)")(env)
        8
    """

    def bound(env: Environment) -> Any:
        args = env.get(ARGS)
        scope = closure_env.new_child() if closure_env is not None else env
        for i, param in enumerate(params):
            scope.define(param, args[i] if i < len(args) else None)
        return fn(scope)

    return bound


def _thunk_args(env: Environment) -> list[Thunk]:
    return env.get(ARGS)


def _name_of(thunk: Thunk, env: Environment) -> Path:
    """The path named by a builtin's name argument (identifier or string)."""
    if isinstance(thunk.expression, (Identifier, MemberExpression)):
        return parse_path_expr(thunk.expression)
    return parse_path(thunk.resolve(env).get_value())


# =============================================================================
# Builtins
# =============================================================================


def _make_if(env: Environment) -> Result:
    condition, *_ = _thunk_args(env)
    matched = bool(condition.resolve(env).get_value())

    def otherwise(branch_env: Environment, chosen: Any) -> Result:
        (expr,) = _thunk_args(branch_env)
        value = chosen if matched else expr.resolve(branch_env).get_value()
        return mk_result(value)

    def then(branch_env: Environment) -> Result:
        (expr,) = _thunk_args(branch_env)
        value = expr.resolve(branch_env).get_value() if matched else None
        return mk_result(value, {"else": lambda else_env: otherwise(else_env, value)})

    return mk_result(matched, {"then": then})


def _make_switch(env: Environment) -> Result:
    subject, *_ = _thunk_args(env)
    value = subject.resolve(env).get_value()

    def case(matched: bool, result: Any) -> Callable[[Environment], Result]:
        def resolve_case(case_env: Environment) -> Result:
            (expr,) = _thunk_args(case_env)
            hit = not matched and expr.resolve(case_env).get_value() == value
            return mk_result(result, {"then": then(matched, hit, result)})

        return resolve_case

    def then(matched: bool, hit: bool, result: Any) -> Callable[[Environment], Result]:
        def resolve_then(then_env: Environment) -> Result:
            (expr,) = _thunk_args(then_env)
            new_result = expr.resolve(then_env).get_value() if hit else result
            now_matched = matched or hit
            return mk_result(
                new_result,
                {"case": case(now_matched, new_result), "default": default(now_matched, new_result)},
            )

        return resolve_then

    def default(matched: bool, result: Any) -> Callable[[Environment], Result]:
        def resolve_default(default_env: Environment) -> Result:
            (expr,) = _thunk_args(default_env)
            return mk_result(result if matched else expr.resolve(default_env).get_value())

        return resolve_default

    return mk_result(None, {"case": case(False, None)})


def _make_do(env: Environment) -> Result:
    result = mk_result(None)
    for thunk in _thunk_args(env):
        result = thunk.resolve(env)
    return result


def _make_set(env: Environment) -> Any:
    name, value = _thunk_args(env)
    resolved = value.resolve(env).get_value()
    env.parent.set(_name_of(name, env), resolved)
    return resolved


def _make_def(env: Environment) -> Any:
    name, value = _thunk_args(env)
    path = _name_of(name, env)
    if len(path) != 1:
        raise ExecutionError(f"def needs a plain name, got {path_to_string(path)}")
    resolved = value.resolve(env).get_value()
    env.parent.define(path[0], resolved)
    return resolved


def _make_fn(env: Environment) -> EnvFn:
    params_thunk, body = _thunk_args(env)
    if isinstance(params_thunk.expression, ArrayExpression):
        params = [parse_path_expr(p)[0] for p in params_thunk.expression.elements]
    else:
        params = list(params_thunk.resolve(env).get_value())
    return bind_params(params, lambda scope: body.resolve(scope), closure_env=env.parent)


BUILTINS: dict[str, EnvFn] = {
    "if": _make_if,
    "switch": _make_switch,
    "do": _make_do,
    "set": _make_set,
    "def": _make_def,
    "fn": _make_fn,
}


# =============================================================================
# Node evaluation
# =============================================================================


def _evaluate_literal(expr: Literal) -> Thunk:
    value = expr.value
    return mk_thunk(lambda env: value, expr)


def _evaluate_identifier(expr: Identifier) -> Thunk:
    name = expr.name
    if name in BUILTINS:
        builtin = BUILTINS[name]
        return mk_thunk(lambda env: builtin, expr, ThunkType.BUILTIN)
    if name in KEYWORD_PROPS:
        return mk_thunk(lambda env: name, expr, ThunkType.PROPERTY)
    path = (name,)
    return mk_thunk(lambda env: env.get(path), expr)


def _evaluate_this(expr: ThisExpression) -> Thunk:
    return mk_thunk(lambda env: env.get(("this",)), expr)


def _evaluate_array(expr: ArrayExpression) -> Thunk:
    elements = [evaluate(e) for e in expr.elements]
    return mk_thunk(lambda env: [e.resolve(env).get_value() for e in elements], expr)


def _evaluate_unary(expr: UnaryExpression) -> Thunk:
    op = UNARY_OPERATORS.get(expr.operator)
    if op is None:
        raise CompileError(f"Unknown unary operator {expr.operator}")
    argument = evaluate(expr.argument)
    return mk_thunk(lambda env: op(argument.resolve(env).get_value()), expr)


def _evaluate_binary(expr: BinaryExpression) -> Thunk:
    if expr.operator == MATCH_OPERATOR:
        return evaluate_match(expr.left, evaluate(expr.right))

    left = evaluate(expr.left)
    right = evaluate(expr.right)

    if expr.operator == "&&":
        def resolve_and(env: Environment) -> Any:
            value = left.resolve(env).get_value()
            return right.resolve(env).get_value() if value else value

        return mk_thunk(resolve_and, expr)

    if expr.operator == "||":
        def resolve_or(env: Environment) -> Any:
            value = left.resolve(env).get_value()
            return value if value else right.resolve(env).get_value()

        return mk_thunk(resolve_or, expr)

    op = BINARY_OPERATORS.get(expr.operator)
    if op is None:
        raise CompileError(f"Unknown binary operator {expr.operator}")
    return mk_thunk(
        lambda env: op(left.resolve(env).get_value(), right.resolve(env).get_value()),
        expr,
    )


def _evaluate_call(expr: CallExpression) -> Thunk:
    callee = evaluate(expr.callee)
    args = [evaluate(arg) for arg in expr.arguments]
    callee_text = expr_to_string(expr.callee)

    def get_fn(env: Environment) -> EnvFn:
        fn = callee.resolve(env).get_value()
        if not callable(fn):
            raise ExecutionError(f"{callee_text} is not a function")
        return fn

    if callee.type is not ThunkType.NORMAL:
        def resolve_builtin(env: Environment) -> Any:
            return get_fn(env)(env.new_child({ARGS: args}))

        return mk_thunk(resolve_builtin, expr)

    def resolve_call(env: Environment) -> Any:
        fn = get_fn(env)
        values = [arg.resolve(env).get_value() for arg in args]
        return fn(env.new_child({ARGS: values}))

    return mk_thunk(resolve_call, expr)


def _evaluate_member(expr: MemberExpression) -> Thunk:
    obj = evaluate(expr.object)

    if not expr.computed and expr.property.name in KEYWORD_PROPS:
        name = expr.property.name

        def resolve_keyword(env: Environment) -> Any:
            result = obj.resolve(env)
            if name not in result.properties:
                raise ExecutionError(
                    f"'{name}' cannot follow {expr_to_string(expr.object)}"
                )
            return result.properties[name]

        return mk_thunk(resolve_keyword, expr, ThunkType.PROPERTY)

    if expr.computed:
        prop = evaluate(expr.property)
        get_key: Callable[[Environment], Any] = lambda env: prop.resolve(env).get_value()
    else:
        key_name = expr.property.name
        get_key = lambda env: key_name

    def resolve_member(env: Environment) -> Any:
        value = obj.resolve(env).get_value()
        key = get_key(env)
        if isinstance(value, Reference):
            value = env.lookup(value.path)
        if not is_object(value) and not isinstance(value, list):
            return NotFound((key,))
        result = get_property(value, key, NotFound((key,)))
        if isinstance(result, Reference):
            result = env.lookup(result.path)
        return result

    return mk_thunk(resolve_member, expr)


def _assignment_target(expr: Expression) -> Callable[[Environment], Path]:
    """Compile the left-hand side of an assignment into a path resolver."""
    if isinstance(expr, Identifier):
        path = (expr.name,)
        return lambda env: path
    if isinstance(expr, ThisExpression):
        return lambda env: ("this",)
    if isinstance(expr, MemberExpression):
        parent = _assignment_target(expr.object)
        if not expr.computed:
            key_name = expr.property.name
            return lambda env: parent(env) + (key_name,)
        prop = evaluate(expr.property)
        return lambda env: parent(env) + (prop.resolve(env).get_value(),)
    raise CompileError(f"Cannot assign to {expr_to_string(expr)}")


def _evaluate_assignment(expr: AssignmentExpression) -> Thunk:
    target = _assignment_target(expr.left)
    right = evaluate(expr.right)
    op = None
    if expr.operator != "=":
        op = BINARY_OPERATORS.get(expr.operator[:-1])
        if op is None:
            raise CompileError(f"Unknown assignment operator {expr.operator}")

    def resolve_assignment(env: Environment) -> Any:
        path = target(env)
        value = right.resolve(env).get_value()
        if op is not None:
            value = op(env.get(path), value)
        env.set(path, value)
        return value

    return mk_thunk(resolve_assignment, expr)


def _evaluate_compound(expr: Compound) -> Thunk:
    body = [evaluate(e) for e in expr.body]

    def resolve_compound(env: Environment) -> Result:
        result = mk_result(None)
        for thunk in body:
            result = thunk.resolve(env)
        return result

    return Thunk(resolve_compound, expr)


EVALUATORS: dict[type, Callable[[Any], Thunk]] = {
    Literal: _evaluate_literal,
    Identifier: _evaluate_identifier,
    ThisExpression: _evaluate_this,
    ArrayExpression: _evaluate_array,
    UnaryExpression: _evaluate_unary,
    BinaryExpression: _evaluate_binary,
    CallExpression: _evaluate_call,
    MemberExpression: _evaluate_member,
    AssignmentExpression: _evaluate_assignment,
    Compound: _evaluate_compound,
}


def evaluate(expr: Expression) -> Thunk:
    """Compile an AST node into a Thunk.

    Raises:
        CompileError: If the node (or an operator in it) is not supported
    """
    evaluator = EVALUATORS.get(type(expr))
    if evaluator is None:
        raise CompileError(f"Unknown expression type: {type(expr).__name__}")
    return evaluator(expr)


def parse_to_thunk(source: str, path: PossiblePath = None) -> Thunk:
    """Parse and compile source text.

    The returned Thunk annotates any error raised while it resolves with
    ``source`` and ``path``.
    """
    path_text = path_to_string(path) or None
    tree = parse_to_tree(source, path)
    try:
        thunk = evaluate(tree)
    except CompileError as e:
        rethrow_compile_error(source, e, path_text)
    return Thunk(thunk.resolve, tree, thunk.type, source=source, path=path_text)


def parse(source: str) -> EnvFn:
    """Compile source text into a function from Environment to value."""
    thunk = parse_to_thunk(source)
    return lambda env: thunk.resolve(env).get_value()
