"""Helpers for dicts that map a key to a list of values.

Used for entity ``verb_modifiers`` (modifier type -> values) and for the
search context (context name -> entities).
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import TypeVar

T = TypeVar("T")

MultiDict = dict[str, list[T]]


def add_all(multi: MultiDict[T], key: str, values: Iterable[T]) -> None:
    multi.setdefault(key, []).extend(values)


def add_unique(multi: MultiDict[T], key: str, value: T) -> None:
    """Add ``value`` under ``key`` unless it is already there."""
    values = multi.setdefault(key, [])
    if value not in values:
        values.append(value)


def get(multi: MultiDict[T], key: str) -> list[T]:
    return multi.get(key, [])


def entries(multi: MultiDict[T]) -> Iterator[tuple[str, T]]:
    """Iterate over every (key, value) pair."""
    for key, values in multi.items():
        for value in values:
            yield key, value
