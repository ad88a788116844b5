from __future__ import annotations

from datetime import date, datetime
from typing import Sequence

from ..core.enums import ContinuationKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ContinuationPoint
from .repository import ContinuationPointRepository


def _to_point(r: dict) -> ContinuationPoint:
    overtime = r.get("granted_overtime_minutes")
    return ContinuationPoint(
        point_id=int(r["point_id"]),
        username=r["username"],
        user_id=int(r["user_id"]),
        session_date=r["session_date"],
        timestamp=r["timestamp"],
        kind=ContinuationKind(r["kind"]),
        active=bool(r["active"]),
        resolved=bool(r["resolved"]),
        resolved_by=r.get("resolved_by"),
        resolved_at=r.get("resolved_at"),
        granted_overtime_minutes=int(overtime) if overtime is not None else None,
    )


class MySQLContinuationPointRepository(ContinuationPointRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(
        self,
        *,
        username: str,
        user_id: int,
        session_date: date,
        timestamp: datetime,
        kind: ContinuationKind,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO continuation_points(username, user_id, session_date, `timestamp`, kind, active, resolved)
                VALUES(%s,%s,%s,%s,%s,1,0)
                """,
                (username, int(user_id), session_date, timestamp, kind.value),
            )
            return int(cur.lastrowid)

    def list_active(self, username: str, session_date: date) -> Sequence[ContinuationPoint]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT point_id, username, user_id, session_date, `timestamp`, kind, active, resolved,
                       resolved_by, resolved_at, granted_overtime_minutes
                FROM continuation_points
                WHERE username=%s AND session_date=%s AND active=1
                ORDER BY `timestamp` ASC, point_id ASC
                """,
                (username, session_date),
            )
            return [_to_point(r) for r in fetchall(cur)]

    def resolve_active(
        self,
        *,
        username: str,
        session_date: date,
        resolved_by: str,
        resolved_at: datetime,
        overtime_minutes: int,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE continuation_points
                SET active=0, resolved=1, resolved_by=%s, resolved_at=%s, granted_overtime_minutes=%s
                WHERE username=%s AND session_date=%s AND active=1
                """,
                (resolved_by, resolved_at, int(overtime_minutes), username, session_date),
            )
            return int(cur.rowcount or 0)

    def exists_unresolved(self, username: str, kind: ContinuationKind) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT 1 AS found FROM continuation_points
                WHERE username=%s AND kind=%s AND active=1 AND resolved=0
                LIMIT 1
                """,
                (username, kind.value),
            )
            return fetchone(cur) is not None
