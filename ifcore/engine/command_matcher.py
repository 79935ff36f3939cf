"""
Command matcher - scoring combinators over Commands.

A Matcher inspects one part of a command and returns a MatchResult. Exact
matches score higher than captures, and objects weigh more than verbs or
modifiers, so when several actions match the same command the most
specific one wins:

    >>> eat_apple = MatchBuilder().with_verb(match_verb("eat")).with_object(match_object("apple")).build()
    >>> eat_any = MatchBuilder().with_verb(match_verb("eat")).with_object(capture_object("food")).build()
    >>> eat_apple(command, "apple").score > eat_any(command, "apple").score
    True

``"this"`` in an object matcher stands for the id of the object the action
belongs to.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from ifcore.errors import CompileError
from ifcore.models.match import FAILED_MATCH, MatchResult, match_result

if TYPE_CHECKING:
    from ifcore.engine.command import SentenceNode

SCORE_NO_MATCH = 0
SCORE_WILDCARD = 1
SCORE_EXACT = 2
SCORE_OBJ_EXACT = 10

THIS = "this"


class Matcher:
    """A named, callable ``(command, obj_id) -> MatchResult`` function."""

    __slots__ = ("_fn", "description")

    def __init__(self, fn: Callable[[SentenceNode, str], MatchResult], description: str):
        self._fn = fn
        self.description = description

    def __call__(self, command: SentenceNode, obj_id: str = "") -> MatchResult:
        return self._fn(command, obj_id)

    def __str__(self) -> str:
        return self.description

    def __repr__(self) -> str:
        return f"Matcher({self.description})"


def combine_matches(*results: MatchResult) -> MatchResult:
    """AND the matches, sum the scores and merge captures left to right."""
    captures = {}
    for result in results:
        captures.update(result.captures)
    return match_result(
        all(result.is_match for result in results),
        sum(result.score for result in results),
        captures,
    )


def match_all(command: SentenceNode, obj_id: str, *matchers: Matcher) -> MatchResult:
    return combine_matches(*(matcher(command, obj_id) for matcher in matchers))


ALWAYS_FAIL = Matcher(lambda command, obj_id: FAILED_MATCH, "FAIL")


# =============================================================================
# Primitive matchers
# =============================================================================


def _exact(found: bool, score: int) -> MatchResult:
    return match_result(True, score) if found else FAILED_MATCH


def match_verb(verb_id: str) -> Matcher:
    def matcher(command: SentenceNode, obj_id: str) -> MatchResult:
        target = obj_id if verb_id == THIS else verb_id
        return _exact(command.get_verb(target) is not None, SCORE_EXACT)

    return Matcher(matcher, verb_id)


def match_object(entity_id: str) -> Matcher:
    def matcher(command: SentenceNode, obj_id: str) -> MatchResult:
        target = obj_id if entity_id == THIS else entity_id
        return _exact(command.get_direct_object(target) is not None, SCORE_OBJ_EXACT)

    return Matcher(matcher, entity_id)


def capture_object(name: str) -> Matcher:
    def matcher(command: SentenceNode, obj_id: str) -> MatchResult:
        part = command.get_direct_object()
        if part is None:
            return FAILED_MATCH
        return match_result(True, SCORE_WILDCARD, {name: part.obj.id})

    return Matcher(matcher, f"${name}")


def match_attribute(attribute: str) -> Matcher:
    return Matcher(
        lambda command, obj_id: _exact(command.get_preposition(attribute) is not None, SCORE_EXACT),
        attribute,
    )


def match_indirect_object(entity_id: str) -> Matcher:
    def matcher(command: SentenceNode, obj_id: str) -> MatchResult:
        target = obj_id if entity_id == THIS else entity_id
        return _exact(command.get_indirect_object(target) is not None, SCORE_OBJ_EXACT)

    return Matcher(matcher, entity_id)


def capture_indirect_object(name: str) -> Matcher:
    def matcher(command: SentenceNode, obj_id: str) -> MatchResult:
        part = command.get_indirect_object()
        if part is None:
            return FAILED_MATCH
        return match_result(True, SCORE_WILDCARD, {name: part.obj.id})

    return Matcher(matcher, f"${name}")


def match_modifier(mod_type: str, value: str) -> Matcher:
    return Matcher(
        lambda command, obj_id: _exact(command.get_modifier(mod_type, value) is not None, SCORE_EXACT),
        f"{mod_type}:{value}",
    )


def match_any_modifier(value: str) -> Matcher:
    """Match a modifier with this value, whatever its type."""
    return Matcher(
        lambda command, obj_id: _exact(command.get_modifier(value=value) is not None, SCORE_EXACT),
        value,
    )


def capture_modifier(mod_type: str) -> Matcher:
    """Capture the value of the modifier of ``mod_type`` under that name."""

    def matcher(command: SentenceNode, obj_id: str) -> MatchResult:
        part = command.get_modifier(mod_type)
        if part is None:
            return FAILED_MATCH
        return match_result(True, SCORE_WILDCARD, {mod_type: part.value})

    return Matcher(matcher, f"${mod_type}")


def match_no_modifiers() -> Matcher:
    return Matcher(
        lambda command, obj_id: _exact(not command.get_modifiers(), SCORE_NO_MATCH),
        "no modifiers",
    )


def fail_if_provided(pos_type: str) -> Matcher:
    """Match only commands that have no part of ``pos_type``."""
    return Matcher(
        lambda command, obj_id: _exact(command.get_pos(pos_type) is None, SCORE_NO_MATCH),
        f"no {pos_type}",
    )


# =============================================================================
# Builders
# =============================================================================


class AttributeMatchBuilder:
    """Builds a matcher for ``preposition indirect-object``."""

    def __init__(self) -> None:
        self._attribute: Matcher | None = None
        self._object: Matcher | None = None

    def with_attribute(self, matcher: Matcher) -> AttributeMatchBuilder:
        self._attribute = matcher
        return self

    def with_object(self, matcher: Matcher) -> AttributeMatchBuilder:
        self._object = matcher
        return self

    def build(self) -> Matcher:
        if self._attribute is None or self._object is None:
            raise CompileError("An attribute matcher needs both an attribute and an object")
        attribute, obj = self._attribute, self._object
        return Matcher(
            lambda command, obj_id: match_all(command, obj_id, attribute, obj),
            f"{attribute}({obj})",
        )


class MatchBuilder:
    """Builds a matcher for a whole command.

    Parts left unset only match commands that lack them: no direct object,
    no preposition, no modifiers.
    """

    def __init__(self) -> None:
        self._verb: Matcher | None = None
        self._object: Matcher = fail_if_provided("directObject")
        self._attribute: Matcher = fail_if_provided("preposition")
        self._modifiers: list[Matcher] = []

    def with_verb(self, matcher: Matcher) -> MatchBuilder:
        self._verb = matcher
        return self

    def with_object(self, matcher: Matcher) -> MatchBuilder:
        self._object = matcher
        return self

    def with_attribute(self, matcher: Matcher) -> MatchBuilder:
        self._attribute = matcher
        return self

    def with_modifier(self, matcher: Matcher) -> MatchBuilder:
        self._modifiers.append(matcher)
        return self

    def build(self) -> Matcher:
        """Compose the matcher.

        Raises:
            CompileError: If no verb matcher was set
        """
        if self._verb is None:
            raise CompileError("A command matcher needs a verb")
        modifiers = list(self._modifiers) or [match_no_modifiers()]
        parts = [self._verb, self._object, self._attribute, *modifiers]

        description = f"{self._verb}({self._object})"
        if self._modifiers:
            description += "[" + ", ".join(str(m) for m in self._modifiers) + "]"
        return Matcher(lambda command, obj_id: match_all(command, obj_id, *parts), description)
