"""
Command search - enumerate, autocomplete and resolve commands.

The grammar is a fixed tree of search functions. Each function extends a
partial command by one word, using the entities and verbs currently in
scope:

    [intransitive-verb]
    [intransitive-verb, modifier]
    [transitive-verb, direct-object]
    [transitive-verb, direct-object, modifier]
    [transitive-verb, direct-object, attribute, indirect-object]

Three walks over the tree are provided:

    - get_all_commands: every complete, valid command
    - get_next_words: the words that can follow a partial command
    - search_exact: the Command matching a word list exactly, or None

Filtering rules:
    - A verb is offered when an in-scope entity declares a VerbMatcher for
      it with no attribute and a truthy (or absent) condition. Conditions
      are resolved in a scope of the entity.
    - Direct objects come from the verb's "direct" contexts, indirect
      objects and attributes from its "indirect" contexts; a verb with no
      such contexts draws on every in-scope entity.
    - Modifier values come from the ``verb_modifiers`` of every in-scope
      entity, for each modifier type the verb declares.
    - A word is only offered if at least one valid command can follow it.

Search never mutates the context.

Example:
    >>> commands = get_all_commands({"environment": [cave]}, [GO, LOOK], env)
    >>> [[word.id for word in command] for command in commands]
    [['go'], ['go', 'north'], ['go', 'east'], ['look']]
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field

from ifcore.engine import multidict
from ifcore.engine.command import SentenceNode, start
from ifcore.engine.env import Environment
from ifcore.engine.multidict import MultiDict
from ifcore.models.entity import Entity, VerbMatcher
from ifcore.models.verb import Verb
from ifcore.models.word import Word

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT = "default"


@dataclass
class SearchContext:
    """The entities and verbs in scope for a search.

    Attributes:
        entities: Entities grouped by context name (inventory, environment...)
        verbs: Verbs by id
        env: Environment used to resolve VerbMatcher conditions
    """

    entities: MultiDict[Entity]
    verbs: dict[str, Verb]
    env: Environment = field(default_factory=Environment)

    def all_entities(self) -> list[Entity]:
        return self.entities_in([])

    def entities_in(self, contexts: list[str]) -> list[Entity]:
        """Entities in the given contexts, or in every context if empty."""
        names = contexts or list(self.entities)
        seen: set[str] = set()
        found = []
        for name in names:
            for entity in multidict.get(self.entities, name):
                if entity.id not in seen:
                    seen.add(entity.id)
                    found.append(entity)
        return found

    def is_enabled(self, entity: Entity, matcher: VerbMatcher) -> bool:
        if matcher.condition is None:
            return True
        return bool(matcher.condition.resolve(self.env.new_child(entity)).get_value())


def build_search_context(
    context_entities: Mapping[str, Iterable[Entity]] | Iterable[Entity],
    verbs: Mapping[str, Verb] | Iterable[Verb],
    env: Environment | None = None,
) -> SearchContext:
    """Build a SearchContext.

    Args:
        context_entities: Entities by context name, or a plain list of
            entities (all placed in the default context)
        verbs: Verbs by id, or a list of verbs
        env: Environment for VerbMatcher conditions
    """
    entities: MultiDict[Entity] = {}
    if isinstance(context_entities, Mapping):
        for name, objs in context_entities.items():
            multidict.add_all(entities, name, objs)
    else:
        multidict.add_all(entities, DEFAULT_CONTEXT, context_entities)

    verb_map = dict(verbs) if isinstance(verbs, Mapping) else {verb.id: verb for verb in verbs}
    return SearchContext(entities, verb_map, env if env is not None else Environment())


# =============================================================================
# Search functions
# =============================================================================

SearchFn = Callable[[SearchContext, SentenceNode], list[SentenceNode]]


def _verb_search(predicate: Callable[[Verb], bool]) -> SearchFn:
    def search(context: SearchContext, command: SentenceNode) -> list[SentenceNode]:
        found: dict[str, Verb] = {}
        for entity in context.all_entities():
            for matcher in entity.verbs:
                verb = context.verbs.get(matcher.verb)
                if (
                    verb is None
                    or verb.id in found
                    or matcher.attribute is not None
                    or not predicate(verb)
                    or not context.is_enabled(entity, matcher)
                ):
                    continue
                found[verb.id] = verb
        return [command.verb(verb) for verb in found.values()]

    return search


def _current_verb(command: SentenceNode) -> Verb:
    return command.get_verb().verb


def direct_object_search(context: SearchContext, command: SentenceNode) -> list[SentenceNode]:
    verb = _current_verb(command)
    return [
        command.object(entity)
        for entity in context.entities_in(verb.get_direct_contexts())
        if any(
            matcher.verb == verb.id
            and matcher.attribute is None
            and context.is_enabled(entity, matcher)
            for matcher in entity.verbs
        )
    ]


def attribute_search(context: SearchContext, command: SentenceNode) -> list[SentenceNode]:
    verb = _current_verb(command)
    attributes: list[str] = []
    for entity in context.entities_in(verb.get_indirect_contexts()):
        for matcher in entity.verbs:
            if (
                matcher.verb == verb.id
                and matcher.attribute in verb.attributes
                and matcher.attribute not in attributes
                and context.is_enabled(entity, matcher)
            ):
                attributes.append(matcher.attribute)
    return [command.preposition(attribute) for attribute in attributes]


def indirect_object_search(context: SearchContext, command: SentenceNode) -> list[SentenceNode]:
    verb = _current_verb(command)
    attribute = command.get_preposition().value
    direct = command.get_direct_object()
    direct_id = direct.obj.id if direct is not None else None
    return [
        command.object(entity)
        for entity in context.entities_in(verb.get_indirect_contexts())
        if entity.id != direct_id
        and any(
            matcher.verb == verb.id
            and matcher.attribute == attribute
            and context.is_enabled(entity, matcher)
            for matcher in entity.verbs
        )
    ]


def modifier_search(context: SearchContext, command: SentenceNode) -> list[SentenceNode]:
    verb = _current_verb(command)
    modifiers: MultiDict[str] = {}
    for mod_type in verb.modifiers:
        for entity in context.all_entities():
            for value in multidict.get(entity.verb_modifiers, mod_type):
                multidict.add_unique(modifiers, mod_type, value)
    return [command.modifier(mod_type, value) for mod_type, value in multidict.entries(modifiers)]


intransitive_verb_search = _verb_search(lambda verb: verb.is_intransitive())
transitive_verb_search = _verb_search(lambda verb: verb.is_transitive())


# =============================================================================
# Grammar tree
# =============================================================================


@dataclass
class SearchNode:
    search: SearchFn | None
    children: list[SearchNode] = field(default_factory=list)
    terminal: bool = False


def build_grammar(paths: Iterable[Iterable[SearchFn]]) -> SearchNode:
    """Merge grammar paths into a tree; the last node of each path is terminal."""
    root = SearchNode(None)
    for path in paths:
        node = root
        for search in path:
            child = next((c for c in node.children if c.search is search), None)
            if child is None:
                child = SearchNode(search)
                node.children.append(child)
            node = child
        node.terminal = True
    return root


GRAMMAR = build_grammar(
    [
        [intransitive_verb_search],
        [intransitive_verb_search, modifier_search],
        [transitive_verb_search, direct_object_search],
        [transitive_verb_search, direct_object_search, modifier_search],
        [transitive_verb_search, direct_object_search, attribute_search, indirect_object_search],
    ]
)


def _expand(context: SearchContext, node: SearchNode, command: SentenceNode) -> Iterator[SentenceNode]:
    """Depth-first walk yielding every valid command at or below ``node``."""
    if node.terminal and command.is_valid():
        yield command
    for child in node.children:
        for candidate in child.search(context, command):
            yield from _expand(context, child, candidate)


def _has_completion(context: SearchContext, node: SearchNode, command: SentenceNode) -> bool:
    return next(_expand(context, node, command), None) is not None


def _last_word_id(command: SentenceNode) -> str:
    return command.get_words()[-1].id


def search_all(context: SearchContext) -> list[SentenceNode]:
    """Every valid command in the context."""
    commands = list(_expand(context, GRAMMAR, start()))
    logger.debug(f"Found {len(commands)} commands")
    return commands


def search_next(partial_words: list[str], context: SearchContext) -> list[Word]:
    """The words that can follow ``partial_words``, de-duplicated by id."""
    found: dict[str, Word] = {}

    def walk(node: SearchNode, command: SentenceNode) -> None:
        position = command.size()
        for child in node.children:
            for candidate in child.search(context, command):
                word = candidate.get_words()[-1]
                if position < len(partial_words):
                    if word.id == partial_words[position]:
                        walk(child, candidate)
                elif word.id not in found and _has_completion(context, child, candidate):
                    found[word.id] = word

    walk(GRAMMAR, start())
    return list(found.values())


def search_exact(words: list[str], context: SearchContext) -> SentenceNode | None:
    """The valid command whose word ids equal ``words``, or None."""

    def walk(node: SearchNode, command: SentenceNode) -> SentenceNode | None:
        position = command.size()
        if position == len(words):
            return command if node.terminal and command.is_valid() else None
        for child in node.children:
            for candidate in child.search(context, command):
                if _last_word_id(candidate) == words[position]:
                    match = walk(child, candidate)
                    if match is not None:
                        return match
        return None

    command = walk(GRAMMAR, start())
    if command is None:
        logger.debug(f"No command matches {words}")
    return command


def get_all_commands(
    context_entities: Mapping[str, Iterable[Entity]] | Iterable[Entity],
    verbs: Mapping[str, Verb] | Iterable[Verb],
    env: Environment | None = None,
) -> list[list[Word]]:
    """Every valid command, as word lists."""
    context = build_search_context(context_entities, verbs, env)
    return [command.get_words() for command in search_all(context)]


def get_next_words(
    partial_words: list[str],
    context_entities: Mapping[str, Iterable[Entity]] | Iterable[Entity],
    verbs: Mapping[str, Verb] | Iterable[Verb],
    env: Environment | None = None,
) -> list[Word]:
    """The words that can follow ``partial_words``."""
    context = build_search_context(context_entities, verbs, env)
    return search_next(partial_words, context)
