"""Unit tests for the Command (SentenceNode) model.

Tests cover:
- Building commands part by part, including illegal orders
- Part accessors and words
- Validity for each verb shape
- Gathering phase actions from the verb and objects
"""

import pytest

from ifcore.engine.command import Modifier, Preposition, start
from ifcore.errors import CompileError
from ifcore.models.entity import Entity
from ifcore.models.verb import Verb, VerbTrait
from ifcore.models.word import PartOfSpeech


class TestBuilding:
    """Tests for appending parts."""

    def test_object_after_preposition_is_indirect(self, put_verb, ball, bag) -> None:
        command = start().verb(put_verb).object(ball).preposition("in").object(bag)
        assert command.get_direct_object().obj is ball
        assert command.get_indirect_object().obj is bag
        assert command.get_preposition().value == "in"

    def test_branches_share_prefix(self, go_verb) -> None:
        """Appending never mutates the original command."""
        go = start().verb(go_verb)
        north = go.modifier("direction", "north")
        east = go.modifier("direction", "east")
        assert go.size() == 1
        assert north.get_word_ids() == ["go", "north"]
        assert east.get_word_ids() == ["go", "east"]

    def test_object_before_verb_fails(self, apple) -> None:
        with pytest.raises(CompileError):
            start().object(apple)

    def test_two_verbs_fail(self, go_verb, look_verb) -> None:
        with pytest.raises(CompileError):
            start().verb(go_verb).verb(look_verb)

    def test_preposition_after_preposition_fails(self, put_verb, ball) -> None:
        with pytest.raises(CompileError):
            start().verb(put_verb).object(ball).preposition("in").preposition("on")


class TestAccessors:
    """Tests for part lookup."""

    def test_get_verb_by_id(self, go_verb) -> None:
        command = start().verb(go_verb)
        assert command.get_verb().verb is go_verb
        assert command.get_verb("go") is not None
        assert command.get_verb("look") is None

    def test_get_direct_object_by_id(self, eat_verb, apple) -> None:
        command = start().verb(eat_verb).object(apple)
        assert command.get_direct_object("apple") is not None
        assert command.get_direct_object("pear") is None

    def test_get_modifier(self, push_verb, box) -> None:
        command = start().verb(push_verb).object(box).modifier("direction", "north")
        assert command.get_modifier("direction").value == "north"
        assert command.get_modifier(value="north") is not None
        assert command.get_modifier("direction", "south") is None
        assert len(command.get_modifiers()) == 1

    def test_find(self, push_verb, box) -> None:
        command = (
            start().verb(push_verb).object(box).modifier("direction", "north").modifier("speed", "fast")
        )
        is_modifier = lambda part: isinstance(part, Modifier)  # noqa: E731
        assert command.find(is_modifier).value == "fast"
        assert [m.value for m in command.find_all(is_modifier)] == ["north", "fast"]
        assert command.find(lambda part: isinstance(part, Preposition)) is None

    def test_get_pos(self, eat_verb, apple) -> None:
        command = start().verb(eat_verb).object(apple)
        assert command.get_pos("directObject") is not None
        assert command.get_pos("preposition") is None

    def test_words(self, put_verb, ball, bag) -> None:
        command = start().verb(put_verb).object(ball).preposition("in").object(bag)
        words = command.get_words()
        assert [w.id for w in words] == ["put", "ball", "in", "bag"]
        assert [w.part_of_speech for w in words] == [
            PartOfSpeech.VERB,
            PartOfSpeech.DIRECT_OBJECT,
            PartOfSpeech.PREPOSITION,
            PartOfSpeech.INDIRECT_OBJECT,
        ]
        assert [w.position for w in words] == [0, 1, 2, 3]

    def test_word_values_use_names(self, eat_verb, apple) -> None:
        command = start().verb(eat_verb).object(apple)
        assert str(command) == "eat red apple"
        assert repr(command) == "Command('eat apple')"

    def test_modifier_word_type(self, go_verb) -> None:
        word = start().verb(go_verb).modifier("direction", "north").get_words()[-1]
        assert word.part_of_speech is PartOfSpeech.MODIFIER
        assert word.modifier_type == "direction"


class TestValidity:
    """Tests for is_valid()."""

    def test_empty_and_verbless(self) -> None:
        assert not start().is_valid()

    def test_intransitive(self, go_verb, apple) -> None:
        assert start().verb(go_verb).is_valid()
        assert start().verb(go_verb).modifier("direction", "north").is_valid()

    def test_transitive_needs_object(self, eat_verb, apple) -> None:
        assert not start().verb(eat_verb).is_valid()
        assert start().verb(eat_verb).object(apple).is_valid()

    def test_attributed_needs_indirect(self, put_verb, ball, bag) -> None:
        assert not start().verb(put_verb).object(ball).is_valid()
        assert not start().verb(put_verb).object(ball).preposition("in").is_valid()
        assert start().verb(put_verb).object(ball).preposition("in").object(bag).is_valid()

    def test_indirect_optional(self, stir_verb, soup, spoon) -> None:
        assert start().verb(stir_verb).object(soup).is_valid()
        assert start().verb(stir_verb).object(soup).preposition("with").object(spoon).is_valid()

    def test_transitive_rejects_preposition(self, eat_verb, apple, spoon) -> None:
        assert not start().verb(eat_verb).object(apple).preposition("with").object(spoon).is_valid()

    def test_intransitive_attributed(self, spoon) -> None:
        point = Verb(id="point", traits=[VerbTrait.INTRANSITIVE], attributes=["at"])
        assert not start().verb(point).is_valid()
        assert start().verb(point).preposition("at").object(spoon).is_valid()

    def test_verb_without_traits(self, apple) -> None:
        assert not start().verb(Verb(id="wave")).is_valid()


class TestActions:
    """Tests for get_actions()."""

    def test_gathers_from_verb_and_objects(self) -> None:
        verb = Verb(id="eat", traits=[VerbTrait.TRANSITIVE], actions=["verb-main"], after=["verb-after"])
        apple = Entity(id="apple", before=["apple-before"], actions=["apple-main"])
        actions = start().verb(verb).object(apple).get_actions()
        assert actions == {
            "before": ["apple-before"],
            "actions": ["verb-main", "apple-main"],
            "after": ["verb-after"],
        }
