"""Assertion helpers shared by the test suite."""

from __future__ import annotations

from ifcore.output import OutputMessage, PrintMessage


def printed(messages: list[OutputMessage]) -> list[str]:
    """Text of the PrintMessages in ``messages``."""
    return [m.value for m in messages if isinstance(m, PrintMessage)]


def word_ids(commands) -> list[list[str]]:
    """Word ids of each command in a list of word lists."""
    return [[word.id for word in words] for words in commands]
