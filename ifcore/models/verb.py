"""
Verb model.

A Verb describes one action a player can type: whether it takes a direct
object, which prepositions (attributes) introduce an indirect object, which
modifier types may follow it, and which entity groups its objects may be
drawn from.

Example:
    >>> put = Verb(
    ...     id="put",
    ...     traits=[VerbTrait.TRANSITIVE],
    ...     attributes=["in"],
    ...     contexts=[("direct", "inventory"), ("indirect", "environment")],
    ... )
    >>> put.is_attributed()
    True
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

ContextType = Literal["direct", "indirect"]


class VerbTrait(str, Enum):
    """Grammatical traits of a verb."""

    TRANSITIVE = "transitive"  # Takes a direct object
    INTRANSITIVE = "intransitive"  # Takes no direct object
    INSTANT = "instant"  # Does not consume a game turn
    MODIFIABLE = "modifiable"  # Accepts modifiers such as a direction
    INDIRECT_OPTIONAL = "indirectOptional"  # The indirect object may be omitted


class Verb(BaseModel):
    """A verb available to the player.

    Attributes:
        id: Unique verb id, also the word the player types
        name: Display name, defaults to the id
        attributes: Prepositions that introduce an indirect object
        traits: Grammatical traits
        modifiers: Modifier types the verb accepts (e.g. "direction")
        contexts: (direct|indirect, context name) pairs restricting which
            entity groups objects may be drawn from
        before: Phase actions run before the main action
        actions: Main phase actions
        after: Phase actions run after a handled main action
    """

    model_config = ConfigDict(extra="allow", arbitrary_types_allowed=True)

    id: str
    name: str | None = None
    attributes: list[str] = Field(default_factory=list)
    traits: list[VerbTrait] = Field(default_factory=list)
    modifiers: list[str] = Field(default_factory=list)
    contexts: list[tuple[ContextType, str]] = Field(default_factory=list)

    # PhaseAction lists; typed loosely since phase actions are compiled later
    before: list[Any] = Field(default_factory=list)
    actions: list[Any] = Field(default_factory=list)
    after: list[Any] = Field(default_factory=list)

    def get_name(self) -> str:
        return self.name or self.id

    def is_transitive(self) -> bool:
        return VerbTrait.TRANSITIVE in self.traits

    def is_intransitive(self) -> bool:
        return VerbTrait.INTRANSITIVE in self.traits

    def is_attributed(self) -> bool:
        return bool(self.attributes)

    def is_indirect_optional(self) -> bool:
        return VerbTrait.INDIRECT_OPTIONAL in self.traits

    def is_instant(self) -> bool:
        return VerbTrait.INSTANT in self.traits

    def get_direct_contexts(self) -> list[str]:
        return [name for kind, name in self.contexts if kind == "direct"]

    def get_indirect_contexts(self) -> list[str]:
        return [name for kind, name in self.contexts if kind == "indirect"]
