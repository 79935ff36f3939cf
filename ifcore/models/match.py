"""
Match result model.

Matchers return a MatchResult for every command part they inspect. Results
combine by AND-ing ``is_match``, summing ``score`` and merging ``captures``
left to right.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class MatchResult(BaseModel):
    """Result of matching a command against a Matcher.

    Attributes:
        is_match: Whether the command matched
        score: Specificity of the match; higher wins
        captures: Named bindings extracted from the command
    """

    is_match: bool
    score: int = 0
    captures: dict[str, Any] = Field(default_factory=dict)


def match_result(is_match: bool, score: int, captures: dict[str, Any] | None = None) -> MatchResult:
    """Create a MatchResult."""
    return MatchResult(is_match=is_match, score=score, captures=captures or {})


FAILED_MATCH = MatchResult(is_match=False, score=0)
