"""Key-path store protocol and nested-document helpers.

A key-path store holds one nested JSON-like document and addresses it with
dot-delimited paths (``"db.public.a.b"``). Writes are staged with ``set`` /
``unset`` and made durable with ``commit``.
"""

from __future__ import annotations

from collections.abc import MutableMapping
from typing import Any, Protocol, runtime_checkable


class _Missing:
    """Sentinel type for absent paths."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _Missing:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> _Missing:
        return self


MISSING: Any = _Missing()


@runtime_checkable
class KeyPathStore(Protocol):
    """Protocol for nested key-path stores.

    Implementations must provide:
    - get(path, default): value at ``path`` or ``default`` when absent
    - set(path, value): stage ``value`` at ``path``, creating intermediate mappings
    - unset(path): stage removal of ``path``
    - commit(): persist staged changes
    """

    def get(self, path: str, default: Any = MISSING) -> Any:
        ...

    def set(self, path: str, value: Any) -> None:
        ...

    def unset(self, path: str) -> bool:
        ...

    def commit(self) -> None:
        ...


def split_path(path: str) -> list[str]:
    """Split a dot-delimited path into segments, dropping empty ones."""
    return [segment for segment in path.split(".") if segment]


def _child(node: Any, segment: str) -> Any:
    if isinstance(node, MutableMapping):
        return node.get(segment, MISSING)
    if isinstance(node, list) and segment.isdigit():
        index = int(segment)
        if index < len(node):
            return node[index]
    return MISSING


def get_in(document: Any, path: str, default: Any = MISSING) -> Any:
    """Read the value at ``path`` inside ``document``.

    An empty path addresses the document itself.
    """
    node = document
    for segment in split_path(path):
        node = _child(node, segment)
        if node is MISSING:
            return default
    return node


def _can_hold(node: Any, segment: str) -> bool:
    """True when ``segment`` can be written directly into ``node``."""
    if isinstance(node, MutableMapping):
        return True
    return isinstance(node, list) and segment.isdigit() and int(segment) <= len(node)


def set_in(document: MutableMapping[str, Any], path: str, value: Any) -> None:
    """Write ``value`` at ``path`` inside ``document``.

    Intermediate nodes that cannot hold the next segment (scalars, or lists
    addressed by a non-index or an index past the end) are replaced with
    empty mappings, so a write always lands at the requested location. An
    index equal to a list's length appends.
    """
    segments = split_path(path)
    if not segments:
        raise ValueError("Cannot set the document root through an empty path")

    node: Any = document
    for segment, next_segment in zip(segments, segments[1:]):
        child = _child(node, segment)
        if not _can_hold(child, next_segment):
            child = {}
            _assign(node, segment, child)
        node = child
    _assign(node, segments[-1], value)


def unset_in(document: MutableMapping[str, Any], path: str) -> bool:
    """Remove the key at ``path``. Returns True when something was removed."""
    segments = split_path(path)
    if not segments:
        return False
    parent = get_in(document, ".".join(segments[:-1]))
    last = segments[-1]
    if isinstance(parent, MutableMapping) and last in parent:
        del parent[last]
        return True
    if isinstance(parent, list) and last.isdigit() and int(last) < len(parent):
        del parent[int(last)]
        return True
    return False


def _assign(node: Any, segment: str, value: Any) -> None:
    # Lists only reach here through _can_hold, so the index is in range.
    if isinstance(node, list):
        index = int(segment)
        if index < len(node):
            node[index] = value
        else:
            node.append(value)
        return
    node[segment] = value
