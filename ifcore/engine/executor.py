"""
Command executor - runs a resolved Command through its phase actions.

For one command the executor visits the objects in scope in this order:

    indirect object, direct object, location, remaining context entities
    (most recent first), then the verb

and dispatches:

    1. before: each object's best matching before-action runs in turn; the
       first one returning a truthy value handles the command and stops
       everything else
    2. main: the single best matching main action across all objects runs,
       with its output held in a buffer
    3. after: only if the main action ran; each object's best matching
       after-action runs with a fresh buffer. A truthy result replaces the
       main output with the after output, otherwise the after output is
       appended

The combined output is then flushed to the consumer bound under OUTPUT.

Example:
    >>> executor = CommandExecutor(env)
    >>> outcome = executor.execute(command, location=cave, context_entities=[apple])
    >>> outcome.handled_by
    <Phase.MAIN: 'main'>
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ifcore.config import EngineConfig
from ifcore.engine.command import SentenceNode
from ifcore.engine.env import Environment
from ifcore.output import OUTPUT, OutputMessage, TextBuffer
from ifcore.script.match_parser import COMMAND
from ifcore.script.phase_action import Phase, PhaseAction, get_best_match_action

logger = logging.getLogger(__name__)

PHASE_LISTS = {Phase.BEFORE: "before", Phase.MAIN: "actions", Phase.AFTER: "after"}


class ExecutionOutcome(BaseModel):
    """What happened to a command.

    Attributes:
        handled_by: Phase that handled the command, None if nothing matched
        output: Messages flushed to the output consumer
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    handled_by: Phase | None = None
    output: list[OutputMessage] = Field(default_factory=list)

    @property
    def handled(self) -> bool:
        return self.handled_by is not None


class CommandExecutor:
    """Dispatches commands to the phase actions of the objects in scope.

    Args:
        env: Environment holding the world; its OUTPUT binding receives the
            command's output
        config: Engine settings (entities namespace, match tracing)
    """

    def __init__(self, env: Environment, config: EngineConfig | None = None):
        self.env = env
        self.config = config or EngineConfig()

    def scope_order(
        self,
        command: SentenceNode,
        location: Any = None,
        context_entities: Iterable[Any] = (),
    ) -> list[Any]:
        """Objects whose actions apply to ``command``, in dispatch order."""
        ordered: list[Any] = []
        indirect = command.get_indirect_object()
        direct = command.get_direct_object()
        candidates = [
            indirect.obj if indirect else None,
            direct.obj if direct else None,
            location,
            *reversed(list(context_entities)),
        ]
        seen: set[str] = set()
        for obj in candidates:
            if obj is None or obj.id in seen:
                continue
            seen.add(obj.id)
            ordered.append(obj)
        verb = command.get_verb()
        if verb is not None:
            ordered.append(verb.verb)
        return ordered

    def execute(
        self,
        command: SentenceNode,
        location: Any = None,
        context_entities: Iterable[Any] = (),
    ) -> ExecutionOutcome:
        """Run ``command`` through the before, main and after phases.

        Raises:
            ExecutionError: If an action fails; output buffered so far is
                discarded and entity changes already made are kept
        """
        objects = self.scope_order(command, location, context_entities)
        env = self.env.new_child({COMMAND: command})
        logger.debug(f"Executing {command!r} over {[obj.id for obj in objects]}")

        before = TextBuffer()
        if self._run_before(env, command, objects, before):
            return self._finish(Phase.BEFORE, before)

        main = TextBuffer()
        if not self._run_main(env, command, objects, main):
            logger.debug(f"No action handled {command!r}")
            return self._finish(None, before)

        after = TextBuffer()
        overridden = self._run_after(env, command, objects, after)
        output = TextBuffer()
        output.extend(before.messages)
        if not overridden:
            output.extend(main.messages)
        output.extend(after.messages)
        return self._finish(Phase.MAIN, output)

    def _actions(self, obj: Any, phase: Phase) -> list[PhaseAction]:
        return list(getattr(obj, PHASE_LISTS[phase], []))

    def _best(self, obj: Any, phase: Phase, command: SentenceNode) -> PhaseAction | None:
        action = get_best_match_action(self._actions(obj, phase), command, obj.id)
        if self.config.trace_matching and action is not None:
            logger.debug(f"{phase.value} {obj.id}: {action!r} scored {action.score(command, obj.id)}")
        return action

    def _perform(
        self, env: Environment, action: PhaseAction, obj: Any, command: SentenceNode, buffer: TextBuffer
    ) -> Any:
        scope = env.new_child({OUTPUT: buffer.write})
        return action.perform(scope, obj, command).get_value()

    def _run_before(
        self, env: Environment, command: SentenceNode, objects: list[Any], buffer: TextBuffer
    ) -> bool:
        for obj in objects:
            action = self._best(obj, Phase.BEFORE, command)
            if action is None:
                continue
            if self._perform(env, action, obj, command, buffer):
                logger.debug(f"{command!r} handled before main by {obj.id}")
                return True
        return False

    def _run_main(
        self, env: Environment, command: SentenceNode, objects: list[Any], buffer: TextBuffer
    ) -> bool:
        best: tuple[PhaseAction, Any] | None = None
        best_score = -1
        for obj in objects:
            action = self._best(obj, Phase.MAIN, command)
            if action is None:
                continue
            score = action.score(command, obj.id)
            if score > best_score:
                best, best_score = (action, obj), score
        if best is None:
            return False
        action, obj = best
        logger.debug(f"Main action for {command!r}: {action!r} on {obj.id}")
        self._perform(env, action, obj, command, buffer)
        return True

    def _run_after(
        self, env: Environment, command: SentenceNode, objects: list[Any], buffer: TextBuffer
    ) -> bool:
        overridden = False
        for obj in objects:
            action = self._best(obj, Phase.AFTER, command)
            if action is None:
                continue
            if self._perform(env, action, obj, command, buffer):
                overridden = True
        return overridden

    def _finish(self, handled_by: Phase | None, buffer: TextBuffer) -> ExecutionOutcome:
        outcome = ExecutionOutcome(handled_by=handled_by, output=list(buffer.messages))
        if self.env.has(OUTPUT):
            buffer.flush(self.env.get(OUTPUT))
        return outcome
