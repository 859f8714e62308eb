"""Configuration schema and loading for scopedb.

Configuration comes from an optional YAML file, then environment variable
overrides, and is validated with Pydantic before use.

Environment variables are prefixed with ``SCOPEDB_`` and use double
underscores for nested keys. For example:
- SCOPEDB_STORE__BACKEND=json
- SCOPEDB_STORE__PATH=/var/lib/app/state.json
- SCOPEDB_IDENTITY__FALLBACK=anonymous
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from typing_extensions import Self

from .errors import ConfigurationError, ErrorCode

logger = logging.getLogger(__name__)

ENV_PREFIX = "SCOPEDB_"
DEFAULT_NAMESPACE = "db"
DATABASE_NAMESPACE = "database"
FALLBACK_IDENTITY = "ghost-uuid"
DEFAULT_COOKIE_NAME = "uuid"


class StoreConfig(BaseModel):
    """Backing store selection."""

    model_config = ConfigDict(extra="forbid")

    backend: Literal["memory", "json"] = Field(
        default="memory",
        description="Store backend: in-process memory or a JSON file on disk.",
    )
    path: str | None = Field(
        default=None,
        description="Document location for the json backend.",
    )
    recover_corrupt: bool = Field(
        default=False,
        description="Quarantine an undecodable document and start empty instead of failing.",
    )

    @model_validator(mode="after")
    def validate_path_for_json(self) -> Self:
        """The json backend needs somewhere to write."""
        if self.backend == "json" and not self.path:
            raise ValueError("store.path is required when store.backend is 'json'")
        return self


class IdentityConfig(BaseModel):
    """Where the current user's identity comes from."""

    model_config = ConfigDict(extra="forbid")

    cookie_name: str = Field(default=DEFAULT_COOKIE_NAME, min_length=1)
    fallback: str = Field(
        default=FALLBACK_IDENTITY,
        min_length=1,
        description="Identity used for user-scoped paths when none is available.",
    )

    @field_validator("fallback")
    @classmethod
    def validate_fallback_segment(cls, v: str) -> str:
        """The fallback becomes a single path segment, so it cannot contain dots."""
        if "." in v:
            raise ValueError("identity.fallback cannot contain '.'")
        return v


class DefaultsConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    namespace: str = Field(default=DEFAULT_NAMESPACE, min_length=1)


class LoggingConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_format: bool = Field(default=False, alias="json")

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


class ScopeDBConfig(BaseModel):
    """Top-level scopedb configuration."""

    model_config = ConfigDict(extra="forbid")

    store: StoreConfig = Field(default_factory=StoreConfig)
    identity: IdentityConfig = Field(default_factory=IdentityConfig)
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _load_yaml(path: str) -> dict[str, Any]:
    """Load a YAML configuration file."""
    try:
        with open(path, encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(
            ErrorCode.E801_INVALID_CONFIG_FILE, f"Invalid YAML syntax in '{path}': {e}"
        ) from e
    except OSError as e:
        raise ConfigurationError(
            ErrorCode.E801_INVALID_CONFIG_FILE, f"Error reading YAML file '{path}': {e}"
        ) from e
    if not isinstance(config, dict):
        raise ConfigurationError(
            ErrorCode.E801_INVALID_CONFIG_FILE,
            f"Configuration file '{path}' must contain a mapping at the top level",
        )
    return config


def _parse_env_value(value: str) -> Any:
    """Parse an environment variable value to the closest scalar type."""
    if value.lower() in ("true", "yes", "on"):
        return True
    if value.lower() in ("false", "no", "off"):
        return False
    return value


def apply_env_overrides(config: dict[str, Any], environ: dict[str, str] | None = None) -> dict[str, Any]:
    """Apply ``SCOPEDB_`` environment variable overrides to ``config``."""
    environ = dict(os.environ) if environ is None else environ

    for env_key, env_value in environ.items():
        if not env_key.startswith(ENV_PREFIX):
            continue

        parts = [p for p in env_key[len(ENV_PREFIX) :].lower().split("__") if p]
        if not parts:
            continue

        target = config
        path_segments: list[str] = []
        for part in parts[:-1]:
            path_segments.append(part)
            existing = target.get(part)
            if existing is None:
                target[part] = {}
                target = target[part]
            elif isinstance(existing, dict):
                target = existing
            else:
                raise ConfigurationError(
                    ErrorCode.E803_CONFIG_VALIDATION_FAILED,
                    "Environment override target is not a mapping; refusing to overwrite "
                    f"'{'.'.join(path_segments)}' (existing type: {type(existing).__name__})",
                )

        target[parts[-1]] = _parse_env_value(env_value)
        logger.debug("Applied override %s", env_key)

    return config


def load_config(
    path: str | None = None,
    *,
    env_override: bool = True,
    environ: dict[str, str] | None = None,
) -> ScopeDBConfig:
    """Load and validate configuration.

    Args:
        path: Optional YAML file. Without one, defaults are used.
        env_override: Apply ``SCOPEDB_*`` environment overrides.
        environ: Environment mapping to read instead of ``os.environ``.

    Returns:
        Validated ScopeDBConfig

    Raises:
        ConfigurationError: The file is missing, unreadable, or invalid.
    """
    raw: dict[str, Any] = {}
    if path is not None:
        if not Path(path).is_file():
            raise ConfigurationError(
                ErrorCode.E801_INVALID_CONFIG_FILE, f"Configuration file not found: {path}"
            )
        if not path.endswith((".yaml", ".yml")):
            raise ConfigurationError(
                ErrorCode.E801_INVALID_CONFIG_FILE,
                "Unsupported configuration file format. Only YAML (.yaml, .yml) is supported.",
            )
        raw = _load_yaml(path)

    if env_override:
        raw = apply_env_overrides(raw, environ)

    try:
        config = ScopeDBConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(
            ErrorCode.E803_CONFIG_VALIDATION_FAILED,
            f"Configuration validation failed{f' for {path!r}' if path else ''}:\n{e}",
        ) from e

    logger.debug(f"Loaded configuration (backend={config.store.backend})")
    return config
