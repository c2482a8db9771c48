from __future__ import annotations

from fastapi import Header

from rrs.application.auth import AuthContext
from rrs.application.errors import UnauthenticatedError
from rrs.domain.common.ids import UserId

_TRUTHY = {"1", "true", "yes"}


def _auth_context(user_id: str | None, admin_flag: str | None) -> AuthContext | None:
    if user_id is None or not user_id.strip():
        return None
    is_admin = admin_flag is not None and admin_flag.strip().lower() in _TRUTHY
    return AuthContext(user_id=UserId(user_id.strip()), is_admin=is_admin)


def optional_actor(
    x_user_id: str | None = Header(default=None),
    x_user_admin: str | None = Header(default=None),
) -> AuthContext | None:
    return _auth_context(x_user_id, x_user_admin)


def require_actor(
    x_user_id: str | None = Header(default=None),
    x_user_admin: str | None = Header(default=None),
) -> AuthContext:
    actor = _auth_context(x_user_id, x_user_admin)
    if actor is None:
        raise UnauthenticatedError("X-User-Id header is required")
    return actor
