"""Scoped key-path accessor.

``ScopedDB`` is the façade the application's state layer talks to. Every
operation resolves a canonical path, runs the self-healing initializer on
it, and then reads or writes the store:

- set / set_by_user: write a value (public / per-user)
- get / get_by_user: read a value, initializing it with a default
- database / database_by_user: hand out a StoreView on the ``database`` namespace
- database_clear / database_by_user_clear: reset that namespace to ``{}`` first

Usage:
    from scopedb import MemoryKeyPathStore, ScopedDB, StaticIdentityProvider

    db = ScopedDB(MemoryKeyPathStore(), StaticIdentityProvider("alice"))
    db.set("db", "theme.name", "dark")
    db.get("db", "theme.name", "light")  # -> "dark"
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .config import DATABASE_NAMESPACE, DEFAULT_NAMESPACE, FALLBACK_IDENTITY, ScopeDBConfig
from .errors import ValidationError
from .identity import CookieIdentityProvider, IdentityProvider
from .initializer import commit_value, ensure_initialized, translate_store_errors
from .observability.logger import scrub_for_log
from .options import GetOptions, PathOptions, SetOptions
from .paths import resolve_path
from .store.base import MISSING, KeyPathStore, split_path
from .store.factory import create_store
from .validators import ALWAYS_VALID, NEVER_VALID, Validator

logger = logging.getLogger(__name__)

OptionsT = TypeVar("OptionsT", bound=BaseModel)


def _join(*parts: str) -> str:
    return ".".join(segment for part in parts for segment in split_path(part))


class StoreView:
    """Live handle on a sub-tree of the store.

    Reads and writes are relative to ``path``. Writes are staged until
    ``write()`` commits them. Comparing a view with a plain value compares
    the current content, so ``db.database_clear() == {}`` holds.
    """

    def __init__(self, store: KeyPathStore, path: str) -> None:
        self._store = store
        self.path = path

    def value(self) -> Any:
        """Current content of the bound path (a copy), or None if absent."""
        with translate_store_errors(self.path):
            return self._store.get(self.path, None)

    def get(self, sub_path: str = "", default: Any = None) -> Any:
        target = _join(self.path, sub_path)
        with translate_store_errors(target):
            return self._store.get(target, default)

    def has(self, sub_path: str) -> bool:
        target = _join(self.path, sub_path)
        with translate_store_errors(target):
            return self._store.get(target, MISSING) is not MISSING

    def set(self, sub_path: str, value: Any) -> StoreView:
        target = _join(self.path, sub_path)
        with translate_store_errors(target):
            self._store.set(target, value)
        return self

    def unset(self, sub_path: str) -> StoreView:
        target = _join(self.path, sub_path)
        with translate_store_errors(target):
            self._store.unset(target)
        return self

    def write(self) -> Any:
        """Commit staged writes and return the current content."""
        with translate_store_errors(self.path):
            self._store.commit()
        return self.value()

    def __eq__(self, other: object) -> bool:
        if isinstance(other, StoreView):
            return self._store is other._store and self.path == other.path
        return bool(self.value() == other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"StoreView(path={self.path!r})"


class ScopedDB:
    """Path-addressable persistence façade with per-user partitioning.

    Args:
        store: Backing key-path store
        identity_provider: Source of the current user's identity; None means
            every user-scoped call uses ``fallback_identity``
        fallback_identity: Identity used when none is available
        default_namespace: Namespace used when a call does not name one
    """

    def __init__(
        self,
        store: KeyPathStore,
        identity_provider: IdentityProvider | None = None,
        *,
        fallback_identity: str = FALLBACK_IDENTITY,
        default_namespace: str = DEFAULT_NAMESPACE,
    ) -> None:
        self.store = store
        self.identity_provider = identity_provider
        self.fallback_identity = fallback_identity
        self.default_namespace = default_namespace

    @classmethod
    def from_config(
        cls,
        config: ScopeDBConfig,
        identity_provider: IdentityProvider | None = None,
        *,
        cookies: Any = None,
    ) -> ScopedDB:
        """Build an accessor from configuration.

        When no provider is given but ``cookies`` is, a
        CookieIdentityProvider reading ``config.identity.cookie_name`` is used.
        """
        if identity_provider is None and cookies is not None:
            identity_provider = CookieIdentityProvider(cookies, config.identity.cookie_name)
        return cls(
            create_store(config.store),
            identity_provider,
            fallback_identity=config.identity.fallback,
            default_namespace=config.defaults.namespace,
        )

    # ------------------------------------------------------------------
    # Path handling
    # ------------------------------------------------------------------

    def resolve(self, namespace: str, sub_path: str = "", user_scope: bool = True) -> str:
        """Canonical path for ``namespace``/``sub_path`` in the given scope."""
        return resolve_path(
            namespace,
            sub_path,
            user_scope,
            self.identity_provider,
            fallback_identity=self.fallback_identity,
        )

    def init_path(self, options: PathOptions | None = None, **kwargs: Any) -> str:
        """Resolve a path and make sure it holds valid data.

        Accepts a PathOptions or the same fields as keyword arguments.
        Returns the canonical path, ready to be read or written.
        """
        opts = self._options(PathOptions, options, kwargs)
        path = self.resolve(opts.namespace, opts.sub_path, opts.user_scope)
        return ensure_initialized(self.store, path, opts.validator, opts.default)

    def _options(self, model: type[OptionsT], options: OptionsT | None, kwargs: dict[str, Any]) -> OptionsT:
        if options is not None:
            if kwargs:
                raise ValidationError(
                    "Pass either an options object or keyword arguments, not both",
                    details={"keywords": sorted(kwargs)},
                )
            return options
        if kwargs.get("namespace") is None:
            kwargs["namespace"] = self.default_namespace
        try:
            return model(**kwargs)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid {model.__name__}: {e}") from e

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _write(self, opts: SetOptions, user_scope: bool) -> None:
        # Pre-initialize with "" so intermediate nodes exist before the write.
        path = self.init_path(
            PathOptions(namespace=opts.namespace, sub_path=opts.sub_path, user_scope=user_scope)
        )
        with translate_store_errors(path):
            commit_value(self.store, path, opts.value, previous=self.store.get(path, MISSING))
        logger.debug(f"Set {path} = {scrub_for_log(opts.value)}")

    def set(
        self,
        namespace: str | None = None,
        sub_path: str = "",
        value: Any = "",
        *,
        options: SetOptions | None = None,
    ) -> None:
        """Store ``value`` at a public path. Like ``namespace.sub_path = value``."""
        kwargs = {} if options is not None else {"namespace": namespace, "sub_path": sub_path, "value": value}
        self._write(self._options(SetOptions, options, kwargs), user_scope=False)

    def set_by_user(
        self,
        namespace: str | None = None,
        sub_path: str = "",
        value: Any = "",
        *,
        options: SetOptions | None = None,
    ) -> None:
        """Store ``value`` at the current user's path."""
        kwargs = {} if options is not None else {"namespace": namespace, "sub_path": sub_path, "value": value}
        self._write(self._options(SetOptions, options, kwargs), user_scope=True)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _read(self, opts: GetOptions, user_scope: bool) -> Any:
        path = self.init_path(
            PathOptions(
                namespace=opts.namespace,
                sub_path=opts.sub_path,
                user_scope=user_scope,
                default=opts.default,
            )
        )
        with translate_store_errors(path):
            return self.store.get(path, None)

    def get(
        self,
        namespace: str | None = None,
        sub_path: str = "",
        default: Any = "",
        *,
        options: GetOptions | None = None,
    ) -> Any:
        """Read a public value. Like ``namespace.sub_path or default``.

        The first read of a path stores ``default``; later reads return the
        stored value whatever default they pass.
        """
        kwargs = {} if options is not None else {"namespace": namespace, "sub_path": sub_path, "default": default}
        return self._read(self._options(GetOptions, options, kwargs), user_scope=False)

    def get_by_user(
        self,
        namespace: str | None = None,
        sub_path: str = "",
        default: Any = "",
        *,
        options: GetOptions | None = None,
    ) -> Any:
        """Read a value from the current user's path."""
        kwargs = {} if options is not None else {"namespace": namespace, "sub_path": sub_path, "default": default}
        return self._read(self._options(GetOptions, options, kwargs), user_scope=True)

    # ------------------------------------------------------------------
    # Database objects
    # ------------------------------------------------------------------

    def _database(self, user_scope: bool, validator: Validator) -> StoreView:
        path = self.init_path(
            PathOptions(
                namespace=DATABASE_NAMESPACE,
                user_scope=user_scope,
                validator=validator,
                default={},
            )
        )
        return StoreView(self.store, path)

    def database(self) -> StoreView:
        """Public database object, initialized to ``{}`` on first use."""
        return self._database(user_scope=False, validator=ALWAYS_VALID)

    def database_clear(self) -> StoreView:
        """Reset the public database object to ``{}`` and return it."""
        return self._database(user_scope=False, validator=NEVER_VALID)

    def database_by_user(self) -> StoreView:
        """Current user's database object, initialized to ``{}`` on first use."""
        return self._database(user_scope=True, validator=ALWAYS_VALID)

    def database_by_user_clear(self) -> StoreView:
        """Reset the current user's database object to ``{}`` and return it."""
        return self._database(user_scope=True, validator=NEVER_VALID)
