from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """What the session engine needs to know about a user.

    Accounts themselves are managed elsewhere; this is a read-only view.
    """

    user_id: int
    username: str
    full_name: str
    role: Role
    schedule_hours: int
    is_active: bool = True
