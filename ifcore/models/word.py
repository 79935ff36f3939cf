"""
Word model - one word of a command as offered to or typed by the player.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, model_validator


class PartOfSpeech(str, Enum):
    """Grammatical role of a word within a command."""

    VERB = "verb"
    DIRECT_OBJECT = "directObject"
    PREPOSITION = "preposition"
    INDIRECT_OBJECT = "indirectObject"
    MODIFIER = "modifier"


class Word(BaseModel):
    """A word of a command.

    Attributes:
        id: Id of the verb/entity, or the preposition/modifier text
        value: Display text
        part_of_speech: Grammatical role
        position: Zero-based position within the command
        modifier_type: Modifier type, required for modifier words
    """

    id: str
    value: str
    part_of_speech: PartOfSpeech
    position: int
    modifier_type: str | None = None

    @model_validator(mode="after")
    def check_modifier_type(self) -> "Word":
        """Ensure modifier words carry their modifier type."""
        if self.part_of_speech is PartOfSpeech.MODIFIER and self.modifier_type is None:
            raise ValueError("modifier_type is required for modifier words")
        return self
