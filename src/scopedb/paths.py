"""Canonical path derivation."""

from __future__ import annotations

from .config import FALLBACK_IDENTITY
from .identity import IdentityProvider, resolve_identity

PUBLIC_SEGMENT = "public"
USER_SEGMENT = "user"


def resolve_path(
    namespace: str,
    sub_path: str = "",
    user_scope: bool = True,
    identity_provider: IdentityProvider | None = None,
    *,
    fallback_identity: str = FALLBACK_IDENTITY,
) -> str:
    """Derive the canonical storage path.

    ``<namespace>.public[.<sub_path>]`` for public data and
    ``<namespace>.user.<identity>[.<sub_path>]`` for user-scoped data.
    Identical inputs always give the identical path.

    Example:
        >>> resolve_path("db", "a.b", user_scope=False)
        'db.public.a.b'
        >>> resolve_path("db", "", user_scope=True)
        'db.user.ghost-uuid'
    """
    if user_scope:
        scope = f"{USER_SEGMENT}.{resolve_identity(identity_provider, fallback_identity)}"
    else:
        scope = PUBLIC_SEGMENT
    path = f"{namespace}.{scope}"
    if sub_path:
        path = f"{path}.{sub_path}"
    return path
