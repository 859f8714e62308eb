"""In-process key-path store."""

from __future__ import annotations

import copy
import logging
from typing import Any

from .base import MISSING, get_in, set_in, unset_in

logger = logging.getLogger(__name__)


class MemoryKeyPathStore:
    """Dict-backed store.

    Values are deep-copied on the way in and out, so callers never hold a
    reference into the stored document. ``commit`` is a no-op apart from
    counting, which tests use to observe write behaviour.

    Example:
        >>> store = MemoryKeyPathStore()
        >>> store.set("db.public.a", 1)
        >>> store.commit()
        >>> store.get("db.public.a")
        1
    """

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}
        self.commit_count = 0

    def get(self, path: str, default: Any = MISSING) -> Any:
        value = get_in(self._data, path, MISSING)
        if value is MISSING:
            return default
        return copy.deepcopy(value)

    def set(self, path: str, value: Any) -> None:
        set_in(self._data, path, copy.deepcopy(value))

    def unset(self, path: str) -> bool:
        return unset_in(self._data, path)

    def commit(self) -> None:
        self.commit_count += 1
        logger.debug("Memory store commit #%d", self.commit_count)

    def snapshot(self) -> dict[str, Any]:
        """Return a deep copy of the whole document."""
        return copy.deepcopy(self._data)
