"""
scopedb - scoped key-path persistence.

Reads and writes nested data under a namespace, either shared (``public``)
or partitioned by the current user's identity, and repairs missing or
invalid data on access.

Public API:
-----------
- ScopedDB: The accessor (set/get, user-scoped variants, database objects)
- StoreView: Live handle returned by the database operations
- MemoryKeyPathStore / JsonFileKeyPathStore: Store backends
- CookieIdentityProvider / StaticIdentityProvider: Identity sources
- Validator, ALWAYS_VALID, NEVER_VALID: Initialization validators
- SetOptions / GetOptions / PathOptions: Per-operation options
- dispatch: Run an operation by its state-layer name

Quick Start:
-----------
>>> from scopedb import MemoryKeyPathStore, ScopedDB
>>> db = ScopedDB(MemoryKeyPathStore())
>>> db.set("db", "a.b", "x")
>>> db.get("db", "a.b", "default")
'x'
"""

from __future__ import annotations

from .accessor import ScopedDB, StoreView
from .config import ScopeDBConfig, load_config
from .dispatch import OPERATIONS, dispatch
from .errors import (
    ConfigurationError,
    ErrorCode,
    OperationNotFoundError,
    ScopeDBError,
    StoreCorruptionError,
    StoreIOError,
    ValidationError,
)
from .identity import CookieIdentityProvider, IdentityProvider, StaticIdentityProvider
from .initializer import ensure_initialized
from .options import GetOptions, PathOptions, SetOptions
from .paths import resolve_path
from .store import MISSING, JsonFileKeyPathStore, KeyPathStore, MemoryKeyPathStore, create_store
from .validators import ALWAYS_VALID, NEVER_VALID, Validator

__version__ = "0.4.0"

__all__ = [
    "__version__",
    # Accessor
    "ScopedDB",
    "StoreView",
    "dispatch",
    "OPERATIONS",
    # Core algorithm
    "resolve_path",
    "ensure_initialized",
    "Validator",
    "ALWAYS_VALID",
    "NEVER_VALID",
    # Options
    "PathOptions",
    "SetOptions",
    "GetOptions",
    # Stores
    "KeyPathStore",
    "MISSING",
    "MemoryKeyPathStore",
    "JsonFileKeyPathStore",
    "create_store",
    # Identity
    "IdentityProvider",
    "CookieIdentityProvider",
    "StaticIdentityProvider",
    # Config
    "ScopeDBConfig",
    "load_config",
    # Errors
    "ErrorCode",
    "ScopeDBError",
    "StoreIOError",
    "StoreCorruptionError",
    "ValidationError",
    "ConfigurationError",
    "OperationNotFoundError",
]
