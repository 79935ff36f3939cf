"""
Paths into the Environment.

A path is a tuple of keys: strings for object properties and integers for
list indexes. ``("entities", "apple", "rules", 0)`` renders as
``entities.apple.rules[0]``.
"""

from __future__ import annotations

from typing import Union

PathElement = Union[str, int]
Path = tuple[PathElement, ...]

# Content declaration paths may be absent, already split, or a dotted string
PossiblePath = Union[Path, str, None]


def concat(path: Path | None, *elements: PathElement) -> Path:
    """Append elements to a (possibly missing) path."""
    return tuple(path or ()) + elements


def path_to_string(path: PossiblePath) -> str:
    """Render a path the way it would be written in an expression."""
    if path is None:
        return ""
    if isinstance(path, str):
        return path
    text = ""
    for element in path:
        if isinstance(element, int):
            text += f"[{element}]"
        elif text:
            text += f".{element}"
        else:
            text = element
    return text
