"""Key-path store backends.

Public API Exports:
- KeyPathStore: Protocol every backend implements
- MISSING: Sentinel returned for absent paths
- MemoryKeyPathStore: In-process dict-backed store
- JsonFileKeyPathStore: JSON document on disk with atomic commits
- create_store: Build a backend from StoreConfig
"""

from .base import MISSING, KeyPathStore, get_in, set_in, split_path, unset_in
from .factory import create_store
from .json_file import JsonFileKeyPathStore
from .memory import MemoryKeyPathStore

__all__ = [
    "MISSING",
    "KeyPathStore",
    "MemoryKeyPathStore",
    "JsonFileKeyPathStore",
    "create_store",
    "get_in",
    "set_in",
    "unset_in",
    "split_path",
]
