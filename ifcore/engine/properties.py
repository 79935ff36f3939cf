"""
Dynamic property access.

Scopes, entities and the values stored in them are open property bags:
plain dicts, lists, or pydantic models that allow extra fields. Every
read or write of a dynamic property goes through the functions here so the
rest of the engine never has to care which of those it is holding.

Example:
    >>> apple = Entity(id="apple", colour="red")
    >>> get_property(apple, "colour")
    'red'
    >>> set_property(apple, "eaten", True)
    >>> has_property({"a": 1}, "b")
    False
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping, MutableSequence, Sequence
from typing import Any

from pydantic import BaseModel

from ifcore.errors import ExecutionError

_MISSING = object()


def is_object(value: Any) -> bool:
    """Whether ``value`` can hold named properties."""
    return isinstance(value, (Mapping, BaseModel))


def _is_list(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def _model_has(model: BaseModel, key: Any) -> bool:
    if not isinstance(key, str):
        return False
    return key in type(model).model_fields or key in (model.model_extra or {})


def has_property(obj: Any, key: Any) -> bool:
    """Check whether ``obj`` directly owns ``key``."""
    if isinstance(obj, BaseModel):
        return _model_has(obj, key)
    if isinstance(obj, Mapping):
        return key in obj
    if _is_list(obj) and isinstance(key, int):
        return -len(obj) <= key < len(obj)
    return False


def get_property(obj: Any, key: Any, default: Any = None) -> Any:
    """Read ``key`` from ``obj``, returning ``default`` when it is absent."""
    if isinstance(obj, BaseModel):
        if not _model_has(obj, key):
            return default
        return getattr(obj, key)
    if isinstance(obj, Mapping):
        value = obj.get(key, _MISSING)
        return default if value is _MISSING else value
    if _is_list(obj) and isinstance(key, int):
        if -len(obj) <= key < len(obj):
            return obj[key]
    return default


def set_property(obj: Any, key: Any, value: Any) -> None:
    """Write ``key`` on ``obj`` in place.

    Raises:
        ExecutionError: If ``obj`` cannot hold the property
    """
    if isinstance(obj, BaseModel):
        setattr(obj, key, value)
    elif isinstance(obj, MutableMapping):
        obj[key] = value
    elif isinstance(obj, MutableSequence) and isinstance(key, int):
        obj[key] = value
    else:
        raise ExecutionError(
            f"Cannot set property '{key}' on {type(obj).__name__}"
        )


def property_names(obj: Any) -> list[Any]:
    """List the property names ``obj`` owns."""
    if isinstance(obj, BaseModel):
        return [*type(obj).model_fields, *(obj.model_extra or {})]
    if isinstance(obj, Mapping):
        return list(obj)
    if _is_list(obj):
        return list(range(len(obj)))
    return []
