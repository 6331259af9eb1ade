"""
Deep structural cloning for data crossing a worker or merge boundary.

``deep_to_plain`` turns an arbitrarily nested, possibly cyclic structure of
dataclasses, mappings, sequences and sets into plain dicts and lists. The
traversal uses an explicit worklist instead of recursion, so depth is bounded
only by memory, and an identity map guarantees that an object reachable
through several paths (or through a cycle) becomes exactly one output node.
"""

import dataclasses
from collections.abc import Mapping
from enum import Enum
from typing import Any

_SCALARS = (str, int, float, bool, bytes, type(None))


def _stub_for(obj: Any) -> dict | list:
    """Empty container that will receive the clone of ``obj``."""
    if isinstance(obj, list | tuple | set | frozenset):
        return []
    return {}


def _entries(obj: Any) -> list[tuple[Any, Any]]:
    """Children of a container as (key, value) pairs."""
    if isinstance(obj, list | tuple):
        return list(enumerate(obj))
    if isinstance(obj, set | frozenset):
        return list(enumerate(obj))
    if isinstance(obj, Mapping):
        return list(obj.items())
    if dataclasses.is_dataclass(obj):
        return [(f.name, getattr(obj, f.name)) for f in dataclasses.fields(obj)]
    return [
        (key, value)
        for key, value in vars(obj).items()
        if not key.startswith("_") and not callable(value)
    ]


def _is_leaf(value: Any) -> bool:
    if isinstance(value, (*_SCALARS, Enum, type)) or callable(value):
        return True
    return not (
        isinstance(value, Mapping | list | tuple | set | frozenset)
        or dataclasses.is_dataclass(value)
        or hasattr(value, "__dict__")
    )


def _leaf(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def deep_to_plain(root: Any) -> Any:
    """Convert ``root`` into plain dicts/lists, preserving shared references.

    Args:
        root: Any structure built from dataclasses, mappings, sequences,
            sets and plain objects

    Returns:
        Equivalent structure of dicts, lists and scalars. Two references to the
        same source object map to the same output object.
    """
    if _is_leaf(root):
        return _leaf(root)

    seen: dict[int, Any] = {}
    # Keeps source objects alive so id() values stay unique during the walk
    keep_alive: list[Any] = [root]

    result = _stub_for(root)
    seen[id(root)] = result
    stack: list[tuple[Any, dict | list]] = [(root, result)]

    while stack:
        obj, clone = stack.pop()
        for key, value in _entries(obj):
            if _is_leaf(value):
                plain: Any = _leaf(value)
            elif id(value) in seen:
                plain = seen[id(value)]
            else:
                plain = _stub_for(value)
                seen[id(value)] = plain
                keep_alive.append(value)
                stack.append((value, plain))

            if isinstance(clone, list):
                clone.append(plain)
            else:
                clone[_leaf(key)] = plain

    return result
