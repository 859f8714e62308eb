"""
Shared pytest fixtures and configuration for scopedb tests.

This module provides stores, identity providers and accessors wired
together the way the application wires them, plus a failing store double
for exercising I/O error handling.
"""

from __future__ import annotations

import os
from typing import Any

import pytest

from scopedb import (
    JsonFileKeyPathStore,
    MemoryKeyPathStore,
    ScopedDB,
    StaticIdentityProvider,
)
from scopedb.store.base import MISSING

# ============================================================
# Pytest Hooks and Configuration
# ============================================================


def pytest_configure(config: Any) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "property: marks property-based tests")


# ============================================================
# Store Doubles
# ============================================================


class FailingStore(MemoryKeyPathStore):
    """Memory store whose reads or commits raise OSError on demand."""

    def __init__(self, fail_on: str = "commit") -> None:
        super().__init__()
        self.fail_on = fail_on

    def get(self, path: str, default: Any = MISSING) -> Any:
        if self.fail_on == "get":
            raise OSError(28, "No space left on device")
        return super().get(path, default)

    def commit(self) -> None:
        if self.fail_on == "commit":
            raise OSError(30, "Read-only file system")
        super().commit()


# ============================================================
# Fixtures
# ============================================================


@pytest.fixture
def store() -> MemoryKeyPathStore:
    """Empty in-memory store."""
    return MemoryKeyPathStore()


@pytest.fixture
def identity() -> StaticIdentityProvider:
    """Identity provider logged in as 'alice'."""
    return StaticIdentityProvider("alice")


@pytest.fixture
def db(store: MemoryKeyPathStore, identity: StaticIdentityProvider) -> ScopedDB:
    """Accessor over the in-memory store with 'alice' as current user."""
    return ScopedDB(store, identity)


@pytest.fixture
def anonymous_db(store: MemoryKeyPathStore) -> ScopedDB:
    """Accessor without any identity provider."""
    return ScopedDB(store)


@pytest.fixture
def json_path(tmp_path: Any) -> str:
    """Location for a JSON document inside the test's temp dir."""
    return os.path.join(str(tmp_path), "state", "store.json")


@pytest.fixture
def json_store(json_path: str) -> JsonFileKeyPathStore:
    return JsonFileKeyPathStore(json_path)


@pytest.fixture(scope="function")
def isolate_environment() -> Any:
    """Snapshot os.environ and restore it after the test."""
    original_env = dict(os.environ)

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def failing_store() -> type[FailingStore]:
    """The FailingStore class, for tests that pick the failure point."""
    return FailingStore
