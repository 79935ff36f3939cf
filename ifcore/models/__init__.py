"""Pydantic models for ifcore"""

from ifcore.models.entity import Entity, VerbMatcher
from ifcore.models.match import MatchResult, match_result
from ifcore.models.verb import ContextType, Verb, VerbTrait
from ifcore.models.word import PartOfSpeech, Word

__all__ = [
    # World models
    "Entity",
    "VerbMatcher",
    "Verb",
    "VerbTrait",
    "ContextType",
    # Command models
    "PartOfSpeech",
    "Word",
    "MatchResult",
    "match_result",
]
