"""
Match expression compiler.

Compiles the restricted call syntax used on the left of ``=>`` into a
Matcher::

    go                      intransitive verb, no modifiers
    go(north)               verb with a modifier value
    go($direction)          verb, capturing the direction modifier
    eat(apple)              transitive verb with a direct object
    eat($food)              ...capturing the direct object's id as `food`
    push(box, north)        direct object followed by a modifier
    put($item).in(this)     attributed clause with an indirect object

Whether the first argument is a direct object or a modifier depends on the
verb of the command being matched, so two matchers are compiled up front
and the verb's transitivity picks one at match time.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ifcore.engine.command_matcher import (
    ALWAYS_FAIL,
    AttributeMatchBuilder,
    MatchBuilder,
    Matcher,
    capture_indirect_object,
    capture_modifier,
    capture_object,
    match_any_modifier,
    match_attribute,
    match_indirect_object,
    match_object,
    match_verb,
)
from ifcore.errors import CompileError
from ifcore.models.match import FAILED_MATCH, MatchResult
from ifcore.script.ast import (
    CallExpression,
    Expression,
    Identifier,
    MemberExpression,
    ThisExpression,
    expr_to_string,
)
from ifcore.script.thunk import Result, Thunk, mk_result

if TYPE_CHECKING:
    from ifcore.engine.command import SentenceNode
    from ifcore.engine.env import Environment

# Scope key holding the command an `evaluate_match` Thunk is matched against
COMMAND = "__COMMAND__"

CAPTURE_PREFIX = "$"


@dataclass(frozen=True)
class UnitMatch:
    name: str
    is_capture: bool


@dataclass(frozen=True)
class CompoundMatch:
    name_match: UnitMatch
    arg_matches: tuple[UnitMatch, ...] = ()
    member: CompoundMatch | None = None


def _unit(expr: Expression) -> UnitMatch:
    if isinstance(expr, ThisExpression):
        return UnitMatch("this", False)
    if isinstance(expr, Identifier):
        if expr.name.startswith(CAPTURE_PREFIX):
            return UnitMatch(expr.name[len(CAPTURE_PREFIX):], True)
        return UnitMatch(expr.name, False)
    raise CompileError(f"Expected a name in match expression, got {expr_to_string(expr)}")


def _compound(expr: Expression) -> CompoundMatch:
    """Walk ``verb(args).attr(args)`` into a CompoundMatch."""
    if isinstance(expr, (Identifier, ThisExpression)):
        return CompoundMatch(_unit(expr))
    if not isinstance(expr, CallExpression):
        raise CompileError(f"Invalid match expression: {expr_to_string(expr)}")

    args = tuple(_unit(arg) for arg in expr.arguments)
    callee = expr.callee
    if isinstance(callee, (Identifier, ThisExpression)):
        return CompoundMatch(_unit(callee), args)
    if isinstance(callee, MemberExpression) and not callee.computed:
        head = _compound(callee.object)
        if head.member is not None:
            raise CompileError(f"Only one attribute allowed in {expr_to_string(expr)}")
        member = CompoundMatch(_unit(callee.property), args)
        return CompoundMatch(head.name_match, head.arg_matches, member)
    raise CompileError(f"Invalid match expression: {expr_to_string(expr)}")


def _object_matcher(unit: UnitMatch, indirect: bool) -> Matcher:
    if indirect:
        return capture_indirect_object(unit.name) if unit.is_capture else match_indirect_object(unit.name)
    return capture_object(unit.name) if unit.is_capture else match_object(unit.name)


def _modifier_matcher(unit: UnitMatch) -> Matcher:
    return capture_modifier(unit.name) if unit.is_capture else match_any_modifier(unit.name)


def _build_matcher(match: CompoundMatch, transitive: bool) -> Matcher:
    builder = MatchBuilder().with_verb(match_verb(match.name_match.name))

    modifiers = list(match.arg_matches)
    if transitive:
        if modifiers:
            builder.with_object(_object_matcher(modifiers.pop(0), indirect=False))
        else:
            builder.with_object(ALWAYS_FAIL)
    for unit in modifiers:
        builder.with_modifier(_modifier_matcher(unit))

    if match.member is not None:
        if match.member.name_match.is_capture:
            raise CompileError(f"An attribute cannot be captured: ${match.member.name_match.name}")
        attribute = AttributeMatchBuilder().with_attribute(match_attribute(match.member.name_match.name))
        member_args = match.member.arg_matches
        if len(member_args) > 1:
            raise CompileError(f"An attribute takes one indirect object: {match.member.name_match.name}")
        attribute.with_object(_object_matcher(member_args[0], indirect=True) if member_args else ALWAYS_FAIL)
        builder.with_attribute(attribute.build())

    return builder.build()


def evaluate_match_expression(expr: Expression) -> Matcher:
    """Compile a match expression AST into a Matcher.

    Raises:
        CompileError: If the expression has no verb or an invalid shape
    """
    match = _compound(expr)
    if match.name_match.is_capture:
        raise CompileError(f"A verb cannot be captured: ${match.name_match.name}")

    transitive_matcher = _build_matcher(match, transitive=True)
    intransitive_matcher = _build_matcher(match, transitive=False)

    def matcher(command: SentenceNode, obj_id: str) -> MatchResult:
        main_verb = command.get_verb()
        if main_verb is None:
            return FAILED_MATCH
        if main_verb.verb.is_transitive():
            return transitive_matcher(command, obj_id)
        return intransitive_matcher(command, obj_id)

    return Matcher(matcher, expr_to_string(expr))


def evaluate_match(expr: Expression, on_match: Thunk) -> Thunk:
    """Compile ``match => on_match`` into a Thunk.

    The Thunk matches the command bound under COMMAND in its Environment
    and, on a match, resolves ``on_match`` in a child scope holding the
    captures. Otherwise it returns an empty Result.
    """
    matcher = evaluate_match_expression(expr)

    def resolve(env: Environment) -> Result:
        command = env.get(COMMAND)
        this = env.lookup("this")
        obj_id = getattr(this, "id", "") if this else ""
        result = matcher(command, obj_id)
        if not result.is_match:
            return mk_result(None)
        return on_match.resolve(env.new_child(dict(result.captures)))

    return Thunk(resolve, expr)
