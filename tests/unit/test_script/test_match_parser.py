"""Unit tests for the match expression compiler.

Tests cover:
- Intransitive and transitive verbs, with and without modifiers
- Object, modifier and indirect-object captures
- `this` resolving to the owning object
- Score ordering of literal versus captured parts
- Invalid match expressions
- The `=>` operator inside scripts
"""

import pytest

from ifcore.engine.command import start
from ifcore.errors import CompileError
from ifcore.script.evaluator import parse
from ifcore.script.match_parser import COMMAND, evaluate_match_expression
from ifcore.script.parser import parse_expression


def compile_match(source: str):
    return evaluate_match_expression(parse_expression(source))


class TestIntransitive:
    """Tests for intransitive verbs."""

    def test_bare_verb(self, go_verb) -> None:
        """'go' matches a command with no modifiers."""
        matcher = compile_match("go")
        assert matcher(start().verb(go_verb)).is_match

    def test_bare_verb_rejects_modifier(self, go_verb) -> None:
        matcher = compile_match("go")
        assert not matcher(start().verb(go_verb).modifier("direction", "north")).is_match

    def test_modifier_value(self, go_verb) -> None:
        """'go(north)' matches 'go north' only."""
        matcher = compile_match("go(north)")
        assert matcher(start().verb(go_verb).modifier("direction", "north")).is_match
        assert not matcher(start().verb(go_verb).modifier("direction", "east")).is_match
        assert not matcher(start().verb(go_verb)).is_match

    def test_modifier_capture(self, go_verb) -> None:
        """'go($direction)' captures the direction."""
        result = compile_match("go($direction)")(start().verb(go_verb).modifier("direction", "east"))
        assert result.is_match
        assert result.captures == {"direction": "east"}

    def test_wrong_verb(self, go_verb, look_verb) -> None:
        assert not compile_match("go")(start().verb(look_verb)).is_match


class TestTransitive:
    """Tests for transitive verbs."""

    def test_exact_object(self, eat_verb, apple) -> None:
        """'eat(apple)' matches with no captures."""
        result = compile_match("eat(apple)")(start().verb(eat_verb).object(apple))
        assert result.is_match
        assert result.captures == {}

    def test_captured_object(self, eat_verb, apple) -> None:
        """'eat($food)' captures the object's id."""
        result = compile_match("eat($food)")(start().verb(eat_verb).object(apple))
        assert result.is_match
        assert result.captures == {"food": "apple"}

    def test_missing_object_fails(self, eat_verb, apple) -> None:
        """A transitive verb without an object argument never matches."""
        assert not compile_match("eat")(start().verb(eat_verb).object(apple)).is_match

    def test_this(self, eat_verb, apple) -> None:
        """'this' matches the id of the object owning the action."""
        command = start().verb(eat_verb).object(apple)
        matcher = compile_match("eat(this)")
        assert matcher(command, "apple").is_match
        assert not matcher(command, "pear").is_match

    def test_this_as_verb(self, go_verb, eat_verb, apple) -> None:
        """A verb's own action can name the verb as 'this'."""
        assert compile_match("this")(start().verb(go_verb), "go").is_match
        matcher = compile_match("this($food)")
        command = start().verb(eat_verb).object(apple)
        assert matcher(command, "eat").captures == {"food": "apple"}
        assert not matcher(command, "drink").is_match

    def test_object_and_modifier(self, push_verb, box) -> None:
        """'push(box, north)' matches 'push box north'."""
        matcher = compile_match("push(box, north)")
        assert matcher(start().verb(push_verb).object(box).modifier("direction", "north")).is_match
        assert not matcher(start().verb(push_verb).object(box)).is_match

    def test_attribute(self, put_verb, ball, bag) -> None:
        """'put($item).in(this)' captures the direct object."""
        command = start().verb(put_verb).object(ball).preposition("in").object(bag)
        result = compile_match("put($item).in(this)")(command, "bag")
        assert result.is_match
        assert result.captures == {"item": "ball"}

    def test_attribute_required(self, put_verb, ball, bag) -> None:
        """Without an attribute clause a command with a preposition fails."""
        command = start().verb(put_verb).object(ball).preposition("in").object(bag)
        assert not compile_match("put(ball)")(command).is_match

    def test_attribute_without_object_fails(self, put_verb, ball, bag) -> None:
        command = start().verb(put_verb).object(ball).preposition("in").object(bag)
        assert not compile_match("put(ball).in()")(command).is_match

    def test_empty_command(self) -> None:
        assert not compile_match("eat(apple)")(start()).is_match


class TestScores:
    """Tests for match scores."""

    def test_literal_beats_capture(self, eat_verb, apple) -> None:
        command = start().verb(eat_verb).object(apple)
        literal = compile_match("eat(apple)")(command)
        capture = compile_match("eat($food)")(command)
        assert literal.score > capture.score

    def test_score_values(self, eat_verb, push_verb, apple, box) -> None:
        """Verb scores 2, an exact object 10, a modifier 2."""
        assert compile_match("eat(apple)")(start().verb(eat_verb).object(apple)).score == 12
        assert compile_match("eat($food)")(start().verb(eat_verb).object(apple)).score == 3
        command = start().verb(push_verb).object(box).modifier("direction", "north")
        assert compile_match("push(box, north)")(command).score == 14


class TestInvalidExpressions:
    """Tests for compile errors."""

    def test_captured_verb(self) -> None:
        with pytest.raises(CompileError, match="verb cannot be captured"):
            compile_match("$verb(apple)")

    def test_captured_attribute(self) -> None:
        with pytest.raises(CompileError, match="attribute cannot be captured"):
            compile_match("put(ball).$prep(bag)")

    def test_literal_argument(self) -> None:
        with pytest.raises(CompileError):
            compile_match("eat('apple')")

    def test_not_a_call(self) -> None:
        with pytest.raises(CompileError):
            compile_match("1 + 2")


class TestMatchOperator:
    """Tests for `match => expression` inside scripts."""

    def test_runs_on_match(self, env, eat_verb, apple) -> None:
        scope = env.new_child({COMMAND: start().verb(eat_verb).object(apple)})
        assert parse("eat($food) => 'ate ' + food")(scope) == "ate apple"

    def test_no_match_is_empty(self, env, eat_verb, go_verb, apple) -> None:
        scope = env.new_child({COMMAND: start().verb(go_verb)})
        assert parse("eat($food) => 'ate ' + food")(scope) is None
