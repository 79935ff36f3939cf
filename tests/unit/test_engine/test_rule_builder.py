"""Unit tests for the rule builder.

Tests cover:
- Expression, literal-text and list rules
- Conditions: when/if/unless with otherwise/else
- Actions: all/do/then, switch, repeat, random, once
- State kept under the rule's declaration path
- Compile errors and error paths
"""

import random

import pytest

from ifcore.engine.rule_builder import RuleBuilder, evaluate_rule
from ifcore.errors import CompileError, ExecutionError
from tests.helpers import printed


@pytest.fixture
def rule_env(env):
    """Scope that owns the rule state under `myRule`."""
    return env.new_child({"myRule": {}, "flag": False})


def run(rule, env, path="myRule"):
    return evaluate_rule(rule, path).resolve(env).get_value()


class TestSimpleRules:
    """Tests for string and list rules."""

    def test_expression(self, env) -> None:
        assert run("1 + 1", env) == 2

    def test_literal_text(self, env, output) -> None:
        """A '$' string is written as-is."""
        run("$You hear dripping water.", env)
        assert printed(output) == ["You hear dripping water."]

    def test_list_runs_in_order(self, env, output) -> None:
        assert run(["write('a')", "$b", "3"], env) == 3
        assert printed(output) == ["a", "b"]

    def test_all_aliases(self, env) -> None:
        for key in ("all", "do", "then"):
            assert run({key: ["1", "2"]}, env) == 2


class TestConditions:
    """Tests for when/if/unless and otherwise/else."""

    def test_when_true(self, rule_env) -> None:
        rule_env.set("flag", True)
        assert run({"when": "flag", "then": "'yes'", "otherwise": "'no'"}, rule_env) == "yes"

    def test_when_false(self, rule_env) -> None:
        assert run({"if": "flag", "do": "'yes'", "else": "'no'"}, rule_env) == "no"

    def test_unless(self, rule_env) -> None:
        assert run({"unless": "flag", "then": "'yes'"}, rule_env) == "yes"

    def test_condition_without_otherwise(self, rule_env) -> None:
        assert run({"when": "flag", "then": "'yes'"}, rule_env) is None

    def test_condition_is_a_rule(self, rule_env) -> None:
        """Conditions may themselves be rules."""
        rule = {"when": {"switch": ["flag", "true"]}, "then": "'yes'"}
        assert run(rule, rule_env) == "yes"

    def test_unknown_keys_ignored(self, env) -> None:
        assert run({"then": "1", "comment": "ignored"}, env) == 1


class TestActions:
    """Tests for switch, repeat, random and once."""

    def test_switch_stops_at_first_truthy(self, env, output) -> None:
        rule = {"switch": ["false", "0", "'third'", "write('never')"]}
        assert run(rule, env) == "third"
        assert output == []

    def test_switch_all_falsy(self, env) -> None:
        assert run({"switch": ["false", "0"]}, env) is False

    def test_repeat_cycles(self, rule_env) -> None:
        rule = evaluate_rule({"repeat": ["'foo'", "'bar'", "'baz'"]}, "myRule")
        results = [rule.resolve(rule_env).get_value() for _ in range(4)]
        assert results == ["foo", "bar", "baz", "foo"]

    def test_repeat_state_under_path(self, rule_env) -> None:
        evaluate_rule({"repeat": ["1", "2"]}, "myRule").resolve(rule_env)
        assert rule_env.get("myRule.repeat.index") == 1

    def test_repeat_with_condition(self, rule_env) -> None:
        """The repeat only advances when its condition holds."""
        rule = evaluate_rule(
            {"when": "flag", "repeat": ["'foo'", "'bar'"], "otherwise": "'qux'"},
            "myRule",
        )
        results = []
        for flag in (False, True, False, True, False, True):
            rule_env.set("flag", flag)
            results.append(rule.resolve(rule_env).get_value())
        assert results == ["qux", "foo", "qux", "bar", "qux", "foo"]

    def test_once(self, rule_env, output) -> None:
        rule = evaluate_rule({"once": ["$The door creaks open."]}, "myRule")
        for _ in range(3):
            rule.resolve(rule_env)
        assert printed(output) == ["The door creaks open."]
        assert rule_env.get("myRule.once.count") == 1

    def test_once_fresh_scope_fires_again(self, env, output) -> None:
        rule = evaluate_rule({"once": "$Hello."}, "myRule")
        rule.resolve(env.new_child({"myRule": {}}))
        rule.resolve(env.new_child({"myRule": {}}))
        assert printed(output) == ["Hello.", "Hello."]

    def test_random(self, env) -> None:
        builder = RuleBuilder(rng=random.Random(7))
        rule = builder.evaluate_rule({"random": ["'a'", "'b'", "'c'"]}, "myRule")
        results = {rule.resolve(env).get_value() for _ in range(30)}
        assert results <= {"a", "b", "c"}
        assert len(results) > 1

    def test_random_is_seeded(self, env) -> None:
        def draws(seed: int) -> list[str]:
            rule = RuleBuilder(rng=random.Random(seed)).evaluate_rule({"random": ["'a'", "'b'", "'c'"]})
            return [rule.resolve(env).get_value() for _ in range(10)]

        assert draws(3) == draws(3)


class TestErrors:
    """Tests for compile and execution errors."""

    def test_duplicate_component(self) -> None:
        with pytest.raises(CompileError, match="Duplicate condition"):
            evaluate_rule({"when": "a", "if": "b", "then": "1"}, "myRule")

    def test_duplicate_action(self) -> None:
        with pytest.raises(CompileError, match="Duplicate action"):
            evaluate_rule({"then": "1", "repeat": ["2"]}, "myRule")

    def test_no_component(self) -> None:
        with pytest.raises(CompileError, match="no recognised component"):
            evaluate_rule({"comment": "nothing here"}, "myRule")

    @pytest.mark.parametrize("component", ["repeat", "random"])
    def test_empty_item_list(self, component) -> None:
        with pytest.raises(CompileError, match="needs at least one item") as exc_info:
            evaluate_rule({component: []}, "myRule")
        assert exc_info.value.path == f"myRule.{component}"

    def test_unsupported_type(self) -> None:
        with pytest.raises(CompileError, match="could not be parsed"):
            evaluate_rule(42, "myRule")

    def test_syntax_error_path(self) -> None:
        with pytest.raises(CompileError) as exc_info:
            evaluate_rule({"then": ["1", "1 +"]}, "entities.apple.rules[0]")
        assert exc_info.value.path == "entities.apple.rules[0].then[1]"

    def test_execution_error_path(self, env) -> None:
        rule = evaluate_rule({"then": "missing"}, "entities.apple.rules[0]")
        with pytest.raises(ExecutionError) as exc_info:
            rule.resolve(env)
        assert exc_info.value.path == "entities.apple.rules[0].then[0]"
