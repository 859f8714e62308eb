"""
Identity provider abstraction for user-scoped paths.

This module provides an IdentityProvider protocol that lets the accessor ask
"who is the current user?" without knowing where the answer comes from.
The usual source is a session cookie; tests use a fixed identity.

Usage:
    # Production code - read the identity from the request cookies
    provider = CookieIdentityProvider.from_header(request_cookie_header)
    provider.current_identity()  # -> "3f9c..." or None

    # Test code - pin the identity
    provider = StaticIdentityProvider("alice")
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from http.cookies import CookieError, SimpleCookie
from typing import Protocol, runtime_checkable

from .config import DEFAULT_COOKIE_NAME, FALLBACK_IDENTITY


@runtime_checkable
class IdentityProvider(Protocol):
    """Protocol for identity providers.

    ``current_identity()`` returns the current user's identifier, or None
    when no identity is available.
    """

    def current_identity(self) -> str | None:
        ...


class StaticIdentityProvider:
    """Identity provider that always returns the same value.

    ``None`` models a visitor without a session.
    """

    def __init__(self, identity: str | None = None) -> None:
        self.identity = identity

    def current_identity(self) -> str | None:
        return self.identity

    def set_identity(self, identity: str | None) -> None:
        """Switch the current identity (login / logout)."""
        self.identity = identity


class CookieIdentityProvider:
    """Read the identity from a cookie jar.

    ``cookies`` is either a mapping of cookie names to values or a
    zero-argument callable returning one, so the provider can follow a
    request-scoped cookie jar that changes between calls.
    """

    def __init__(
        self,
        cookies: Mapping[str, str] | Callable[[], Mapping[str, str]],
        cookie_name: str = DEFAULT_COOKIE_NAME,
    ) -> None:
        self._cookies = cookies
        self.cookie_name = cookie_name

    @classmethod
    def from_header(cls, header: str, cookie_name: str = DEFAULT_COOKIE_NAME) -> CookieIdentityProvider:
        """Build a provider from a raw ``Cookie:`` header value.

        A malformed header yields a provider with no identity.
        """
        jar = SimpleCookie()
        try:
            jar.load(header)
        except CookieError:
            return cls({}, cookie_name)
        return cls({name: morsel.value for name, morsel in jar.items()}, cookie_name)

    def current_identity(self) -> str | None:
        cookies = self._cookies() if callable(self._cookies) else self._cookies
        value = cookies.get(self.cookie_name)
        return value or None


def resolve_identity(provider: IdentityProvider | None, fallback: str = FALLBACK_IDENTITY) -> str:
    """Return the provider's identity, or ``fallback`` when there is none.

    Never fails: a missing provider or an empty identity both resolve to
    the fallback. The result is a single path segment; see escape_identity.
    """
    identity = provider.current_identity() if provider is not None else None
    return escape_identity(identity if identity else fallback)


def escape_identity(identity: str) -> str:
    """Escape ``%`` and ``.`` so distinct identities map to distinct segments.

    Example:
        >>> escape_identity("a.b")
        'a%2Eb'
    """
    return identity.replace("%", "%25").replace(".", "%2E")
