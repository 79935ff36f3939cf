"""
Entity models.

An Entity is anything in the game world the player can refer to: items,
rooms, characters. Besides its declared fields it is an open property bag:
content can attach arbitrary extra properties (``sat_on``, ``exits``,
``description``...) which scripts read and mutate in place.

Example:
    >>> chair = Entity(
    ...     id="chair",
    ...     verbs=[
    ...         VerbMatcher(verb="sit", condition=parse_to_thunk("!sat_on")),
    ...         VerbMatcher(verb="stand", condition=parse_to_thunk("sat_on")),
    ...     ],
    ...     sat_on=False,
    ... )
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ifcore.script.thunk import Thunk


class VerbMatcher(BaseModel):
    """Declares that an entity can be the object of a verb.

    Attributes:
        verb: Verb id
        attribute: When set, the entity is an indirect object introduced by
            this preposition (``stir.with``) rather than a direct object
        condition: Optional Thunk resolved in a scope of the entity; the verb
            is only offered while it is truthy
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    verb: str
    attribute: str | None = None
    condition: Thunk | None = None


class Entity(BaseModel):
    """An object in the game world.

    Attributes:
        id: Unique entity id, also the word the player types
        name: Display name, defaults to the id
        verbs: Verbs this entity can be the object of
        verb_modifiers: Modifier values this entity supplies, by modifier
            type (a room's exits supply ``direction`` values)
        before: Phase actions run before the main action
        actions: Main phase actions
        after: Phase actions run after a handled main action
    """

    model_config = ConfigDict(extra="allow", arbitrary_types_allowed=True)

    id: str
    name: str | None = None
    verbs: list[VerbMatcher] = Field(default_factory=list)
    verb_modifiers: dict[str, list[str]] = Field(default_factory=dict)

    # PhaseAction lists; typed loosely since phase actions are compiled later
    before: list[Any] = Field(default_factory=list)
    actions: list[Any] = Field(default_factory=list)
    after: list[Any] = Field(default_factory=list)

    def get_name(self) -> str:
        return self.name or self.id
