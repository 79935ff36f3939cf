"""
Phase actions - behaviour bound to matched commands.

A PhaseAction pairs a compiled Matcher with an on-match Thunk for one
phase of command handling:

    - before: may intercept a command before it is handled
    - main: handles the command
    - after: reacts to (and may override the output of) a handled command

Content authors declare them as ``match => command`` expressions or as a
match string plus a rule:

    >>> action = (
    ...     PhaseActionBuilder("entities.apple.before[0]")
    ...     .with_phase(Phase.BEFORE)
    ...     .with_expression("eat(this) => if(rotten).then(write('Yuck!'))")
    ...     .build()
    ... )
    >>> action.is_match(command, "apple")
    True

Matching is pure; ``perform`` resolves the on-match Thunk in a scope where
captures, ``this``, the object's own properties and every entity (by bare
name) are visible.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from enum import Enum
from typing import Any

from ifcore.config import EngineConfig
from ifcore.engine.command import SentenceNode
from ifcore.engine.command_matcher import Matcher
from ifcore.engine.env import Environment
from ifcore.engine.path import PossiblePath, path_to_string
from ifcore.engine.rule_builder import RuleBuilder, evaluate_rule
from ifcore.errors import CompileError, rethrow_compile_error, rethrow_execution_error
from ifcore.script.ast import BinaryExpression
from ifcore.script.evaluator import evaluate
from ifcore.script.match_parser import evaluate_match_expression
from ifcore.script.parser import MATCH_OPERATOR, parse_expression, parse_to_tree
from ifcore.script.thunk import RUNTIME_ERRORS, Result, Thunk, mk_result

logger = logging.getLogger(__name__)

DEFAULT_ENTITIES_NAMESPACE = "entities"


class Phase(str, Enum):
    """Stages of handling a command."""

    BEFORE = "before"
    MAIN = "main"
    AFTER = "after"


class PhaseAction:
    """A Matcher and the Thunk to run when it matches.

    Attributes:
        phase: Phase the action belongs to
        matcher: Compiled match expression
        on_match: Thunk resolved when the command matches
        path: Declaration path of the action, for diagnostics
        source: Source text of the action, for diagnostics
    """

    def __init__(
        self,
        phase: Phase,
        matcher: Matcher,
        on_match: Thunk,
        path: str | None = None,
        source: str | None = None,
        entities_namespace: str = DEFAULT_ENTITIES_NAMESPACE,
    ):
        self.phase = phase
        self.matcher = matcher
        self.on_match = on_match
        self.path = path
        self.source = source or f"{matcher} => {on_match}"
        self.entities_namespace = entities_namespace

    def __repr__(self) -> str:
        return f"PhaseAction({self.phase.value}: {self.source})"

    def score(self, command: SentenceNode, obj_id: str) -> int:
        return self.matcher(command, obj_id).score

    def is_match(self, command: SentenceNode, obj_id: str) -> bool:
        return self.matcher(command, obj_id).is_match

    def perform(self, env: Environment, obj: Any, command: SentenceNode) -> Result:
        """Run the action if ``command`` matches, else return an empty Result.

        Raises:
            ExecutionError: If the on-match Thunk fails; the error names the
                phase and the action's declaration path
        """
        result = self.matcher(command, obj.id)
        if not result.is_match:
            return mk_result(None)

        scope = env
        if env.has(self.entities_namespace):
            scope = scope.new_child(env.create_namespace_references(self.entities_namespace))
        scope = (
            scope.new_child(dict(result.captures))
            .new_child({"this": obj})
            .new_child(obj)
        )
        try:
            return self.on_match.resolve(scope)
        except RUNTIME_ERRORS as e:
            rethrow_execution_error(f"{self.phase.value}: {self.source}", e, self.path)


class PhaseActionBuilder:
    """Builds a PhaseAction from content.

    Args:
        path: Declaration path of the action, reported in errors
        entities_namespace: Namespace whose members the action sees by
            bare name
        rule_builder: Compiles rules given to with_matcher_and_command
    """

    def __init__(
        self,
        path: PossiblePath = None,
        entities_namespace: str = DEFAULT_ENTITIES_NAMESPACE,
        rule_builder: RuleBuilder | None = None,
    ):
        self.path = path_to_string(path) or None
        self.entities_namespace = entities_namespace
        self.rule_builder = rule_builder
        self._phase: Phase | None = None
        self._matcher: Matcher | None = None
        self._on_match: Thunk | None = None
        self._source: str | None = None

    @classmethod
    def from_config(
        cls, config: EngineConfig, path: PossiblePath = None, rule_builder: RuleBuilder | None = None
    ) -> PhaseActionBuilder:
        """Builder using the configured entities namespace and random source."""
        return cls(
            path,
            entities_namespace=config.entities_namespace,
            rule_builder=rule_builder or RuleBuilder(rng=config.make_rng()),
        )

    def with_phase(self, phase: Phase | str) -> PhaseActionBuilder:
        self._phase = Phase(phase)
        return self

    def with_expression(self, expression: str) -> PhaseActionBuilder:
        """Use a ``match => command`` expression."""
        tree = parse_to_tree(expression, self.path)
        if not isinstance(tree, BinaryExpression) or tree.operator != MATCH_OPERATOR:
            raise CompileError(
                f"{self._phase_name()} is not of the correct format (Matcher => Command): {expression}",
                expression=expression,
                path=self.path,
            )
        try:
            self._matcher = evaluate_match_expression(tree.left)
            self._on_match = evaluate(tree.right)
        except CompileError as e:
            rethrow_compile_error(expression, e, self.path)
        self._source = expression
        return self

    def with_matcher_and_command(self, match: str, rule: Any) -> PhaseActionBuilder:
        """Use a match expression plus a rule (see the rule builder)."""
        try:
            self._matcher = evaluate_match_expression(parse_expression(match))
        except CompileError as e:
            rethrow_compile_error(match, e, self.path)
        if self.rule_builder is not None:
            self._on_match = self.rule_builder.evaluate_rule(rule, self.path)
        else:
            self._on_match = evaluate_rule(rule, self.path)
        self._source = f"{match} => {rule}"
        return self

    def with_matcher_on_match(self, matcher: Matcher, on_match: Thunk) -> PhaseActionBuilder:
        self._matcher = matcher
        self._on_match = on_match
        return self

    def _phase_name(self) -> str:
        return self._phase.value if self._phase is not None else "action"

    def build(self) -> PhaseAction:
        if self._phase is None:
            raise CompileError("A phase action needs a phase", path=self.path)
        if self._matcher is None or self._on_match is None:
            raise CompileError(
                f"A {self._phase.value} action needs a matcher and a command", path=self.path
            )
        return PhaseAction(
            self._phase,
            self._matcher,
            self._on_match,
            path=self.path,
            source=self._source,
            entities_namespace=self.entities_namespace,
        )


def get_best_match_action(
    actions: Iterable[PhaseAction], command: SentenceNode, obj_id: str
) -> PhaseAction | None:
    """Pick the matching action with the highest score.

    Ties go to the action declared first.
    """
    best: PhaseAction | None = None
    best_score = -1
    for action in actions:
        result = action.matcher(command, obj_id)
        if result.is_match:
            logger.debug(f"{action!r} scored {result.score} against {command!r}")
        if result.is_match and result.score > best_score:
            best, best_score = action, result.score
    return best

