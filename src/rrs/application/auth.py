from __future__ import annotations

from dataclasses import dataclass

from rrs.domain.common.ids import UserId


@dataclass(frozen=True)
class AuthContext:
    """The authenticated principal behind a workflow call."""

    user_id: UserId
    is_admin: bool = False


@dataclass(frozen=True)
class TrustedTestPrincipal(AuthContext):
    """Admin principal for test harnesses. Never built by request handling."""

    user_id: UserId = UserId("usr_trusted_test")
    is_admin: bool = True
