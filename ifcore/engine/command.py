"""
Command model - an immutable, backward-linked sentence.

A command is built one part at a time; every step returns a new node that
points at the previous one, so many candidate commands can share a prefix
while the search engine branches:

    >>> take = start().verb(TAKE)
    >>> take_apple = take.object(APPLE)
    >>> take_pear = take.object(PEAR)     # `take` is untouched
    >>> str(take_apple.preposition("from").object(BASKET))
    'take apple from basket'

Sentence shape:
    verb [direct-object] [preposition indirect-object] [modifier...]

Accessors walk the ``previous`` chain; depth is bounded by the grammar.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any, ClassVar, Union

from ifcore.errors import CompileError
from ifcore.models.entity import Entity
from ifcore.models.verb import Verb
from ifcore.models.word import PartOfSpeech, Word


# =============================================================================
# Parts
# =============================================================================


@dataclass(frozen=True)
class Start:
    type: ClassVar[str] = "start"


@dataclass(frozen=True)
class MainVerb:
    type: ClassVar[str] = "verb"
    verb: Verb


@dataclass(frozen=True)
class DirectObject:
    type: ClassVar[str] = "directObject"
    obj: Entity


@dataclass(frozen=True)
class Preposition:
    type: ClassVar[str] = "preposition"
    value: str


@dataclass(frozen=True)
class IndirectObject:
    type: ClassVar[str] = "indirectObject"
    obj: Entity


@dataclass(frozen=True)
class Modifier:
    type: ClassVar[str] = "modifier"
    mod_type: str
    value: str


Part = Union[Start, MainVerb, DirectObject, Preposition, IndirectObject, Modifier]

# Parts that may directly precede each part type
ALLOWED_PREVIOUS: dict[str, tuple[str, ...]] = {
    MainVerb.type: (Start.type,),
    DirectObject.type: (MainVerb.type,),
    Preposition.type: (MainVerb.type, DirectObject.type, Modifier.type),
    IndirectObject.type: (Preposition.type,),
    Modifier.type: (MainVerb.type, DirectObject.type, IndirectObject.type, Modifier.type),
}


# =============================================================================
# Validity
# =============================================================================


def _is_valid_for(verb: Verb, has_direct: bool, has_preposition: bool, has_indirect: bool) -> bool:
    """Check a sentence shape against the verb's traits.

    | verb traits                        | accepted shapes             |
    |------------------------------------|-----------------------------|
    | intransitive                       | verb                        |
    | intransitive, attributed           | verb prep indirect          |
    | transitive                         | verb direct                 |
    | transitive, attributed             | verb direct prep indirect   |
    | transitive, attributed, indirectOptional | either of the above   |
    """
    full_indirect = has_preposition and has_indirect
    no_indirect = not has_preposition and not has_indirect

    if verb.is_intransitive():
        if has_direct:
            return False
        return full_indirect if verb.is_attributed() else no_indirect

    if verb.is_transitive():
        if not has_direct:
            return False
        if not verb.is_attributed():
            return no_indirect
        if verb.is_indirect_optional():
            return full_indirect or no_indirect
        return full_indirect

    return False


# =============================================================================
# Sentence nodes
# =============================================================================


class SentenceNode:
    """One node of an immutable command.

    Attributes:
        part: The command part this node adds
        previous: The node before this one, None for the start node
    """

    __slots__ = ("part", "previous")

    def __init__(self, part: Part, previous: SentenceNode | None = None):
        self.part = part
        self.previous = previous

    def _append(self, part: Part) -> SentenceNode:
        if self.part.type not in ALLOWED_PREVIOUS[part.type]:
            raise CompileError(f"A {part.type} cannot follow a {self.part.type}")
        return SentenceNode(part, self)

    # Builders

    def verb(self, verb: Verb) -> SentenceNode:
        return self._append(MainVerb(verb))

    def object(self, obj: Entity) -> SentenceNode:
        """Add the direct object, or the indirect object after a preposition."""
        if self.part.type == Preposition.type:
            return self._append(IndirectObject(obj))
        return self._append(DirectObject(obj))

    def preposition(self, value: str) -> SentenceNode:
        return self._append(Preposition(value))

    def modifier(self, mod_type: str, value: str) -> SentenceNode:
        return self._append(Modifier(mod_type, value))

    # Traversal

    def parts(self) -> list[Part]:
        """All parts from the first to this one, excluding the start."""
        parts = []
        node: SentenceNode | None = self
        while node is not None:
            if node.part.type != Start.type:
                parts.append(node.part)
            node = node.previous
        parts.reverse()
        return parts

    def __iter__(self) -> Iterator[Part]:
        return iter(self.parts())

    def find(self, predicate: Callable[[Part], bool]) -> Part | None:
        """The most recent part satisfying ``predicate``."""
        node: SentenceNode | None = self
        while node is not None:
            if predicate(node.part):
                return node.part
            node = node.previous
        return None

    def find_all(self, predicate: Callable[[Part], bool]) -> list[Part]:
        """Every part satisfying ``predicate``, oldest first."""
        return [part for part in self.parts() if predicate(part)]

    def size(self) -> int:
        return len(self.parts())

    # Accessors

    def get_pos(self, pos_type: str) -> Part | None:
        return self.find(lambda part: part.type == pos_type)

    def get_verb(self, verb_id: str | None = None) -> MainVerb | None:
        return self.find(
            lambda part: isinstance(part, MainVerb)
            and (verb_id is None or part.verb.id == verb_id)
        )

    def get_direct_object(self, entity_id: str | None = None) -> DirectObject | None:
        return self.find(
            lambda part: isinstance(part, DirectObject)
            and (entity_id is None or part.obj.id == entity_id)
        )

    def get_preposition(self, value: str | None = None) -> Preposition | None:
        return self.find(
            lambda part: isinstance(part, Preposition)
            and (value is None or part.value == value)
        )

    def get_indirect_object(self, entity_id: str | None = None) -> IndirectObject | None:
        return self.find(
            lambda part: isinstance(part, IndirectObject)
            and (entity_id is None or part.obj.id == entity_id)
        )

    def get_modifier(self, mod_type: str | None = None, value: str | None = None) -> Modifier | None:
        return self.find(
            lambda part: isinstance(part, Modifier)
            and (mod_type is None or part.mod_type == mod_type)
            and (value is None or part.value == value)
        )

    def get_modifiers(self) -> list[Modifier]:
        return self.find_all(lambda part: isinstance(part, Modifier))

    def get_words(self) -> list[Word]:
        """The command as a list of words."""
        words = []
        for position, part in enumerate(self.parts()):
            if isinstance(part, MainVerb):
                word = Word(id=part.verb.id, value=part.verb.get_name(),
                            part_of_speech=PartOfSpeech.VERB, position=position)
            elif isinstance(part, DirectObject):
                word = Word(id=part.obj.id, value=part.obj.get_name(),
                            part_of_speech=PartOfSpeech.DIRECT_OBJECT, position=position)
            elif isinstance(part, Preposition):
                word = Word(id=part.value, value=part.value,
                            part_of_speech=PartOfSpeech.PREPOSITION, position=position)
            elif isinstance(part, IndirectObject):
                word = Word(id=part.obj.id, value=part.obj.get_name(),
                            part_of_speech=PartOfSpeech.INDIRECT_OBJECT, position=position)
            else:
                word = Word(id=part.value, value=part.value,
                            part_of_speech=PartOfSpeech.MODIFIER, position=position,
                            modifier_type=part.mod_type)
            words.append(word)
        return words

    def get_word_ids(self) -> list[str]:
        return [word.id for word in self.get_words()]

    def get_actions(self) -> dict[str, list[Any]]:
        """Phase actions of the verb and objects, keyed by phase list name."""
        actions: dict[str, list[Any]] = {"before": [], "actions": [], "after": []}
        for part in self.parts():
            source = getattr(part, "verb", None) or getattr(part, "obj", None)
            if source is None:
                continue
            for key, found in actions.items():
                found.extend(getattr(source, key))
        return actions

    def is_valid(self) -> bool:
        """Whether the command is a complete, grammatical sentence."""
        main_verb = self.get_verb()
        if main_verb is None:
            return False
        return _is_valid_for(
            main_verb.verb,
            has_direct=self.get_direct_object() is not None,
            has_preposition=self.get_preposition() is not None,
            has_indirect=self.get_indirect_object() is not None,
        )

    def __str__(self) -> str:
        return " ".join(word.value for word in self.get_words())

    def __repr__(self) -> str:
        return f"Command({' '.join(self.get_word_ids())!r})"


Command = SentenceNode


def start() -> SentenceNode:
    """Start a new command."""
    return SentenceNode(Start())
