"""Validated path initialization.

``ensure_initialized`` is the self-healing step every operation runs before
touching a path: a missing value gets the default, a value the validator
rejects gets replaced by the default, anything else is left alone.

Per-path states:
- Uninitialized -> Valid: first access writes the default
- Invalid -> Valid: the next access rewrites the default
- any -> Valid(default): a NEVER_VALID validator forces the rewrite
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from .errors import StoreIOError
from .observability.logger import scrub_for_log
from .store.base import MISSING, KeyPathStore
from .validators import ALWAYS_VALID, Validator

logger = logging.getLogger(__name__)


@contextmanager
def translate_store_errors(path: str) -> Iterator[None]:
    """Re-raise ``OSError`` from a store call as ``StoreIOError``."""
    try:
        yield
    except StoreIOError:
        raise
    except OSError as e:
        raise StoreIOError(f"Store I/O failed at {path!r}: {e}", path=path) from e


def commit_value(store: KeyPathStore, path: str, value: Any, previous: Any = MISSING) -> None:
    """Write ``value`` at ``path`` and commit it.

    When the commit fails, ``path`` is put back to ``previous`` (removed if
    MISSING) before the error propagates, so no uncommitted value stays
    readable.
    """
    store.set(path, value)
    try:
        store.commit()
    except Exception:
        if previous is MISSING:
            store.unset(path)
        else:
            store.set(path, previous)
        raise


def is_absent(value: Any) -> bool:
    """A path is absent only when it does not exist. A stored None is data."""
    return value is MISSING


def ensure_initialized(
    store: KeyPathStore,
    path: str,
    validator: Validator = ALWAYS_VALID,
    default: Any = "",
) -> str:
    """Make sure ``path`` holds data the validator accepts.

    Args:
        store: Backing key-path store
        path: Canonical path to check
        validator: Decides whether a present value can stay
        default: Value written when the path is absent or rejected

    Returns:
        ``path``, unchanged

    Raises:
        StoreIOError: The store could not be read or written
    """
    with translate_store_errors(path):
        value = store.get(path, MISSING)

        if is_absent(value):
            reason = "missing"
        elif not validator.accepts(value):
            reason = "invalid"
        else:
            return path

        commit_value(store, path, default, previous=value)

    logger.info(
        f"Initialized {path} ({reason}) with {scrub_for_log(default)}",
        extra={"path": path, "reason": reason, "validator": repr(validator)},
    )
    return path
