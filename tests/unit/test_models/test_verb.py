"""Unit tests for the Verb and Entity models.

Tests cover:
- Trait helpers
- Direct and indirect contexts
- Entity extra properties and display names
"""

import pytest
from pydantic import ValidationError

from ifcore.models.entity import Entity, VerbMatcher
from ifcore.models.verb import Verb, VerbTrait


class TestVerb:
    """Tests for Verb."""

    def test_defaults(self) -> None:
        verb = Verb(id="look")
        assert verb.get_name() == "look"
        assert verb.traits == []
        assert not verb.is_transitive()
        assert not verb.is_intransitive()

    def test_traits(self, stir_verb) -> None:
        assert stir_verb.is_transitive()
        assert stir_verb.is_attributed()
        assert stir_verb.is_indirect_optional()
        assert not stir_verb.is_instant()

    def test_traits_from_strings(self) -> None:
        """Traits load from their content spelling."""
        verb = Verb(id="inventory", traits=["intransitive", "instant"])
        assert verb.is_intransitive()
        assert verb.is_instant()

    def test_unknown_trait(self) -> None:
        with pytest.raises(ValidationError):
            Verb(id="jump", traits=["flying"])

    def test_contexts(self) -> None:
        verb = Verb(
            id="put",
            traits=[VerbTrait.TRANSITIVE],
            attributes=["in"],
            contexts=[("direct", "inventory"), ("indirect", "environment"), ("indirect", "inventory")],
        )
        assert verb.get_direct_contexts() == ["inventory"]
        assert verb.get_indirect_contexts() == ["environment", "inventory"]

    def test_bad_context_kind(self) -> None:
        with pytest.raises(ValidationError):
            Verb(id="put", contexts=[("sideways", "inventory")])


class TestEntity:
    """Tests for Entity and VerbMatcher."""

    def test_display_name(self, apple, box) -> None:
        assert apple.get_name() == "red apple"
        assert box.get_name() == "box"

    def test_extra_properties(self) -> None:
        lamp = Entity(id="lamp", lit=False)
        lamp.lit = True
        assert lamp.lit is True
        assert lamp.model_extra == {"lit": True}

    def test_verb_matcher(self, spoon) -> None:
        (matcher,) = spoon.verbs
        assert matcher == VerbMatcher(verb="stir", attribute="with")
        assert matcher.condition is None
