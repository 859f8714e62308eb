"""
Unit Tests for canonical path resolution.

Tests cover:
- Public and user-scoped layouts
- Empty and nested sub-paths
- Identity fallback
"""

from scopedb.identity import CookieIdentityProvider, StaticIdentityProvider
from scopedb.paths import resolve_path


class TestPublicPaths:
    """Tests for public-scope paths."""

    def test_public_with_sub_path(self):
        assert resolve_path("db", "a.b", user_scope=False) == "db.public.a.b"

    def test_public_without_sub_path(self):
        assert resolve_path("database", "", user_scope=False) == "database.public"

    def test_public_ignores_identity(self):
        """Public paths are the same whoever is logged in."""
        alice = resolve_path("db", "x", False, StaticIdentityProvider("alice"))
        bob = resolve_path("db", "x", False, StaticIdentityProvider("bob"))
        assert alice == bob == "db.public.x"


class TestUserPaths:
    """Tests for user-scoped paths."""

    def test_user_with_identity(self):
        path = resolve_path("db", "theme", True, StaticIdentityProvider("alice"))
        assert path == "db.user.alice.theme"

    def test_user_without_sub_path(self):
        path = resolve_path("database", "", True, StaticIdentityProvider("u-1"))
        assert path == "database.user.u-1"

    def test_user_scope_is_default(self):
        assert resolve_path("db", "k", identity_provider=StaticIdentityProvider("a")) == "db.user.a.k"


class TestIdentityFallback:
    """Tests for the fallback identity."""

    def test_no_provider_uses_sentinel(self):
        assert resolve_path("db", "k", True) == "db.user.ghost-uuid.k"

    def test_provider_without_identity_uses_sentinel(self):
        assert resolve_path("db", "k", True, StaticIdentityProvider(None)) == "db.user.ghost-uuid.k"

    def test_empty_cookie_uses_sentinel(self):
        provider = CookieIdentityProvider({"uuid": ""})
        assert resolve_path("db", "", True, provider) == "db.user.ghost-uuid"

    def test_custom_fallback(self):
        path = resolve_path("db", "k", True, None, fallback_identity="anonymous")
        assert path == "db.user.anonymous.k"

    def test_fallback_is_stable(self):
        """Repeated resolutions without identity give the same path."""
        paths = {resolve_path("db", "a.b", True, StaticIdentityProvider(None)) for _ in range(5)}
        assert paths == {"db.user.ghost-uuid.a.b"}
