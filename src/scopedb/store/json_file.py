"""JSON-file backed key-path store.

The whole document lives in memory; ``commit`` writes it to disk
atomically (temporary file + rename) with retries.

Features:
- Atomic writes, never a half-written document on disk
- Retry of transient write failures
- Optional recovery from a corrupted document
- ``OSError`` surfaced as ``StoreIOError``
"""

from __future__ import annotations

import copy
import json
import logging
import os
import threading
from pathlib import Path
from typing import Any

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..errors import StoreCorruptionError, StoreIOError
from .base import MISSING, get_in, set_in, unset_in

logger = logging.getLogger(__name__)


def _get_corrupt_path(filepath: str) -> str:
    """Get the quarantine path for a corrupted document."""
    return f"{filepath}.corrupt"


@retry(
    retry=retry_if_exception_type(OSError),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.1, max=2),
    reraise=True,
)
def _write_file_atomic(filepath: str, data: bytes) -> None:
    """Write data to file atomically using temporary file + rename."""
    temp_path = f"{filepath}.tmp"
    try:
        with open(temp_path, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_path, filepath)
    finally:
        if os.path.exists(temp_path):
            try:
                os.remove(temp_path)
            except OSError:
                logger.debug("Could not remove temp file %s", temp_path)


class JsonFileKeyPathStore:
    """Key-path store persisted as a single JSON document.

    Args:
        filepath: Location of the JSON document. A missing file starts an
            empty document; parent directories are created on first commit.
        recover: When the file holds invalid JSON, move it aside to
            ``<filepath>.corrupt`` and start empty instead of raising.
        indent: Indentation used when writing the document.

    Raises:
        StoreCorruptionError: The file is not a JSON object and ``recover`` is False.
        StoreIOError: The file exists but cannot be read.
    """

    def __init__(self, filepath: str | os.PathLike[str], *, recover: bool = False, indent: int = 2) -> None:
        self.filepath = os.fspath(filepath)
        self.indent = indent
        self.recover = recover
        self._lock = threading.Lock()
        self._data: dict[str, Any] = self._load(recover)
        self._persisted = copy.deepcopy(self._data)

    def _load(self, recover: bool) -> dict[str, Any]:
        if not os.path.exists(self.filepath):
            logger.info(f"No document at {self.filepath}; starting empty")
            return {}

        try:
            with open(self.filepath, "rb") as f:
                raw = f.read()
        except OSError as e:
            raise StoreIOError(f"Failed to read {self.filepath}: {e}", path=self.filepath) from e

        try:
            document = json.loads(raw.decode("utf-8")) if raw.strip() else {}
            if not isinstance(document, dict):
                raise ValueError(f"top-level value is {type(document).__name__}, expected object")
        except ValueError as e:
            if not recover:
                raise StoreCorruptionError(
                    f"Corrupted document at {self.filepath}: {e}", filepath=self.filepath
                ) from e
            corrupt_path = _get_corrupt_path(self.filepath)
            logger.warning(f"Corrupted document at {self.filepath}; moving it to {corrupt_path}")
            try:
                os.replace(self.filepath, corrupt_path)
            except OSError as move_error:
                raise StoreIOError(
                    f"Failed to quarantine {self.filepath}: {move_error}", path=self.filepath
                ) from move_error
            return {}

        logger.debug(f"Loaded document from {self.filepath}")
        return document

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
        """Write the document to disk.

        Raises:
            StoreIOError: The document could not be written after retries.
                Staged changes are discarded first.
        """
        try:
            data = json.dumps(self._data, indent=self.indent, ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as e:
            self._rollback()
            raise StoreIOError(
                f"Document is not JSON serializable: {e}", path=self.filepath, recoverable=False
            ) from e

        with self._lock:
            try:
                Path(self.filepath).parent.mkdir(parents=True, exist_ok=True)
                _write_file_atomic(self.filepath, data)
            except OSError as e:
                self._rollback()
                raise StoreIOError(f"Failed to write {self.filepath}: {e}", path=self.filepath) from e
        self._persisted = json.loads(data)
        logger.debug(f"Committed document to {self.filepath} ({len(data)} bytes)")

    def _rollback(self) -> None:
        """Drop staged changes, back to the last persisted document."""
        logger.warning(f"Commit to {self.filepath} failed; discarding staged changes")
        self._data = copy.deepcopy(self._persisted)

    def reload(self) -> None:
        """Discard uncommitted changes and re-read the file."""
        self._data = self._load(self.recover)
        self._persisted = copy.deepcopy(self._data)

    def snapshot(self) -> dict[str, Any]:
        """Return a deep copy of the whole document."""
        return copy.deepcopy(self._data)
