"""
Output messages and buffering.

Scripts never print directly: ``write(...)`` sends a PrintMessage to the
output consumer bound under OUTPUT in the Environment. The hosting engine
supplies the consumer; the command executor swaps in TextBuffers to hold
back main-phase output until the after phase has run.

Example:
    >>> buffer = TextBuffer()
    >>> env = create_root_env({OUTPUT: buffer.write})
    >>> install_library(env)
    >>> parse("write('You take the apple.')")(env)
    >>> buffer.texts()
    ['You take the apple.']
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Literal, Union

from pydantic import BaseModel

from ifcore.errors import EngineError

logger = logging.getLogger(__name__)

# Scope key of the output consumer
OUTPUT = "OUTPUT"


class PrintMessage(BaseModel):
    """Text for the player."""

    type: Literal["print"] = "print"
    value: str


class LogMessage(BaseModel):
    """A diagnostic for the hosting engine's log."""

    type: Literal["log"] = "log"
    level: Literal["debug", "info", "warning", "error"] = "info"
    message: str


OutputMessage = Union[PrintMessage, LogMessage]
OutputConsumer = Callable[[OutputMessage], None]


class TextBuffer:
    """Collects output messages so they can be replayed or discarded."""

    def __init__(self) -> None:
        self.messages: list[OutputMessage] = []

    def write(self, message: OutputMessage) -> None:
        self.messages.append(message)

    def extend(self, messages: Iterable[OutputMessage]) -> None:
        self.messages.extend(messages)

    def flush(self, consumer: OutputConsumer) -> None:
        """Send every buffered message to ``consumer`` and clear the buffer."""
        messages, self.messages = self.messages, []
        for message in messages:
            consumer(message)

    def texts(self) -> list[str]:
        return [m.value for m in self.messages if isinstance(m, PrintMessage)]

    def __bool__(self) -> bool:
        return any(isinstance(m, PrintMessage) for m in self.messages)

    def __len__(self) -> int:
        return len(self.messages)


def log_error(output: OutputConsumer, error: Exception) -> None:
    """Report an error raised by the core to the output consumer."""
    logger.warning(f"Command failed: {error}")
    message = error.root_message if isinstance(error, EngineError) else str(error)
    output(LogMessage(level="error", message=message))
