"""Store construction from configuration."""

from __future__ import annotations

import logging

from ..config import StoreConfig
from ..errors import ConfigurationError, ErrorCode
from .base import KeyPathStore
from .json_file import JsonFileKeyPathStore
from .memory import MemoryKeyPathStore

logger = logging.getLogger(__name__)


def create_store(config: StoreConfig) -> KeyPathStore:
    """Build the store backend selected by ``config.backend``."""
    if config.backend == "memory":
        logger.debug("Using in-memory store")
        return MemoryKeyPathStore()
    if config.backend == "json":
        if not config.path:
            raise ConfigurationError(
                ErrorCode.E803_CONFIG_VALIDATION_FAILED,
                "store.path is required for the json backend",
            )
        logger.debug(f"Using JSON file store at {config.path}")
        return JsonFileKeyPathStore(config.path, recover=config.recover_corrupt)
    raise ConfigurationError(
        ErrorCode.E803_CONFIG_VALIDATION_FAILED,
        f"Unknown store backend: {config.backend!r}",
    )
