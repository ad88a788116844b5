from __future__ import annotations

from typing import Optional

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import User
from .repository import UserRepository


def _to_user(r: dict) -> User:
    return User(
        user_id=int(r["user_id"]),
        username=r["username"],
        full_name=r.get("full_name") or r["username"],
        role=Role(r.get("role") or Role.USER.value),
        schedule_hours=int(r.get("schedule_hours") or 8),
        is_active=bool(r.get("is_active", 1)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT user_id, username, full_name, role, schedule_hours, is_active FROM users WHERE user_id=%s",
                (int(user_id),),
            )
            r = fetchone(cur)
            return _to_user(r) if r else None

    def get_by_username(self, username: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT user_id, username, full_name, role, schedule_hours, is_active FROM users WHERE username=%s",
                (username,),
            )
            r = fetchone(cur)
            return _to_user(r) if r else None
