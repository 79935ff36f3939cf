"""
Rule builder - compiles declarative rules into Thunks.

A rule is one of:
    - a string: an expression, e.g. ``"write('The door creaks.')"``; a
      string starting with ``$`` is literal text handed to ``write``
    - a list: every item runs in order
    - a dict of components, at most one of each kind:

      | kind      | keys                                          |
      |-----------|-----------------------------------------------|
      | condition | when, if, unless                              |
      | action    | all, do, then, switch, repeat, random, once   |
      | otherwise | otherwise, else                               |

The condition (true when absent) picks the action or the otherwise branch.
``repeat`` and ``once`` keep their state in the Environment under the
rule's declaration path, so they resume where they left off on the next
turn.

Example:
    >>> rule = evaluate_rule(
    ...     {
    ...         "when": "location == 'cave'",
    ...         "repeat": ["write('Drip.')", "write('Drip, drip.')"],
    ...         "otherwise": "$It is quiet.",
    ...     },
    ...     path="entities.cave.rules[0]",
    ... )
    >>> rule.resolve(env)
"""

from __future__ import annotations

import json
import logging
import random
from collections.abc import Callable
from typing import Any, Literal

from ifcore.engine.env import ARGS, Environment, is_found
from ifcore.engine.path import Path, PossiblePath, concat, path_to_string
from ifcore.errors import CompileError
from ifcore.script.evaluator import parse_to_thunk
from ifcore.script.pathparser import parse_path
from ifcore.script.thunk import Result, Thunk, mk_result, mk_thunk

logger = logging.getLogger(__name__)

RuleComponentType = Literal["condition", "action", "otherwise"]
RuleEvaluator = Callable[[Any, Path], Thunk]

LITERAL_TEXT_PREFIX = "$"
INDEX_NAME = "index"
COUNT_NAME = "count"


class RuleBuilder:
    """Compiles rules; ``rng`` drives the ``random`` component."""

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()
        self.components: dict[str, tuple[RuleComponentType, RuleEvaluator]] = {
            "when": ("condition", self._build_condition),
            "if": ("condition", self._build_condition),
            "unless": ("condition", self._build_unless),
            "all": ("action", self._build_all),
            "do": ("action", self._build_all),
            "then": ("action", self._build_all),
            "switch": ("action", self._build_switch),
            "repeat": ("action", self._build_repeat),
            "random": ("action", self._build_random),
            "once": ("action", self._build_once),
            "otherwise": ("otherwise", self._build_condition),
            "else": ("otherwise", self._build_condition),
        }

    def evaluate_rule(self, rule: Any, path: PossiblePath = None) -> Thunk:
        """Compile a rule.

        Raises:
            CompileError: If the rule has an unsupported type, no
                recognised component, or a duplicated component kind
        """
        return self._evaluate(rule, parse_path(path))

    def _evaluate(self, rule: Any, path: Path) -> Thunk:
        if isinstance(rule, str):
            if rule.startswith(LITERAL_TEXT_PREFIX):
                return self._build_text(rule[len(LITERAL_TEXT_PREFIX):])
            return parse_to_thunk(rule, path)
        if isinstance(rule, dict):
            return self._evaluate_components(rule, path)
        if isinstance(rule, list):
            return self._build_all(rule, path)
        raise CompileError(
            f"Rule {json.dumps(rule, default=str)} at {path_to_string(path)} could not be parsed",
            path=path_to_string(path),
        )

    def _evaluate_components(self, rule: dict[str, Any], path: Path) -> Thunk:
        parts: dict[RuleComponentType, Thunk] = {}
        for key, value in rule.items():
            component = self.components.get(key)
            if component is None:
                continue
            kind, builder = component
            if kind in parts:
                raise CompileError(
                    f"Duplicate {kind} declared for {path_to_string(path)}",
                    path=path_to_string(path),
                )
            parts[kind] = builder(value, concat(path, key))

        if not parts:
            raise CompileError(
                f"Rule at {path_to_string(path)} has no recognised component",
                path=path_to_string(path),
            )

        condition = parts.get("condition")
        action = parts.get("action")
        otherwise = parts.get("otherwise")

        def resolve(env: Environment) -> Any:
            scope = env.new_child()
            passed = condition.resolve(scope).get_value() if condition is not None else True
            chosen = action if passed else otherwise
            if chosen is None:
                return None
            return chosen.resolve(scope).get_value()

        return mk_thunk(resolve)

    def _evaluate_list(self, rules: Any, path: Path) -> list[Thunk]:
        items = rules if isinstance(rules, list) else [rules]
        return [self._evaluate(rule, concat(path, index)) for index, rule in enumerate(items)]

    # =========================================================================
    # Components
    # =========================================================================

    def _build_text(self, text: str) -> Thunk:
        return mk_thunk(lambda env: env.execute("write", {ARGS: [text]}))

    def _build_condition(self, rule: Any, path: Path) -> Thunk:
        thunk = self._evaluate(rule, path)
        return Thunk(lambda env: thunk.resolve(env.new_child()))

    def _build_unless(self, rule: Any, path: Path) -> Thunk:
        thunk = self._build_condition(rule, path)
        return mk_thunk(lambda env: not thunk.resolve(env).get_value())

    def _build_all(self, rules: Any, path: Path) -> Thunk:
        thunks = self._evaluate_list(rules, path)

        def resolve(env: Environment) -> Result:
            scope = env.new_child()
            result = mk_result(None)
            for thunk in thunks:
                result = thunk.resolve(scope)
            return result

        return Thunk(resolve)

    def _build_switch(self, rules: Any, path: Path) -> Thunk:
        """Run items in order until one returns a truthy value."""
        thunks = self._evaluate_list(rules, path)

        def resolve(env: Environment) -> Any:
            scope = env.new_child()
            for thunk in thunks:
                value = thunk.resolve(scope).get_value()
                if value:
                    return value
            return False

        return mk_thunk(resolve)

    def _build_repeat(self, rules: Any, path: Path) -> Thunk:
        """Run one item per invocation, cycling through the list."""
        thunks = self._evaluate_list(rules, path)
        self._require_items(thunks, "repeat", path)
        index_path = concat(path, INDEX_NAME)

        def resolve(env: Environment) -> Result:
            index = env.lookup(index_path)
            if not is_found(index) or not isinstance(index, int) or index >= len(thunks):
                index = 0
            result = thunks[index].resolve(env.new_child())
            env.set(index_path, (index + 1) % len(thunks))
            logger.debug(f"repeat {path_to_string(path)} ran item {index}")
            return result

        return Thunk(resolve)

    def _build_random(self, rules: Any, path: Path) -> Thunk:
        thunks = self._evaluate_list(rules, path)
        self._require_items(thunks, "random", path)

        def resolve(env: Environment) -> Result:
            return self.rng.choice(thunks).resolve(env.new_child())

        return Thunk(resolve)

    def _require_items(self, thunks: list[Thunk], kind: str, path: Path) -> None:
        if not thunks:
            raise CompileError(
                f"A {kind} at {path_to_string(path)} needs at least one item",
                path=path_to_string(path),
            )

    def _build_once(self, rules: Any, path: Path) -> Thunk:
        """Run the items the first time only."""
        thunk = self._build_all(rules, path)
        count_path = concat(path, COUNT_NAME)

        def resolve(env: Environment) -> Result:
            count = env.lookup(count_path)
            if is_found(count) and count:
                return mk_result(None)
            env.set(count_path, 1)
            logger.debug(f"once {path_to_string(path)} fired")
            return thunk.resolve(env)

        return Thunk(resolve)


_default_builder = RuleBuilder()


def evaluate_rule(rule: Any, path: PossiblePath = None) -> Thunk:
    """Compile a rule with the default RuleBuilder."""
    return _default_builder.evaluate_rule(rule, path)
