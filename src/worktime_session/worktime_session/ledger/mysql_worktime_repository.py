from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import SyncStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import WorkTimeEntry
from .repository import WorkTimeRepository

_COLUMNS = """
    entry_id, user_id, username, work_date, day_start_time, day_end_time, total_worked_minutes,
    total_overtime_minutes, temporary_stop_count, total_temporary_stop_minutes, lunch_break_deducted,
    sync_status
"""


def _to_entry(r: dict) -> WorkTimeEntry:
    return WorkTimeEntry(
        entry_id=int(r["entry_id"]),
        user_id=int(r["user_id"]),
        username=r["username"],
        work_date=r["work_date"],
        day_start_time=r["day_start_time"],
        day_end_time=r["day_end_time"],
        total_worked_minutes=int(r["total_worked_minutes"]),
        total_overtime_minutes=int(r["total_overtime_minutes"]),
        temporary_stop_count=int(r["temporary_stop_count"]),
        total_temporary_stop_minutes=int(r["total_temporary_stop_minutes"]),
        lunch_break_deducted=bool(r["lunch_break_deducted"]),
        sync_status=SyncStatus(r["sync_status"]),
    )


class MySQLWorkTimeRepository(WorkTimeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[WorkTimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM worktime_entries WHERE user_id=%s AND work_date=%s",
                (int(user_id), work_date),
            )
            r = fetchone(cur)
            return _to_entry(r) if r else None

    def add_entry(self, entry: WorkTimeEntry) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO worktime_entries(
                    user_id, username, work_date, day_start_time, day_end_time, total_worked_minutes,
                    total_overtime_minutes, temporary_stop_count, total_temporary_stop_minutes,
                    lunch_break_deducted, sync_status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    entry.user_id,
                    entry.username,
                    entry.work_date,
                    entry.day_start_time,
                    entry.day_end_time,
                    entry.total_worked_minutes,
                    entry.total_overtime_minutes,
                    entry.temporary_stop_count,
                    entry.total_temporary_stop_minutes,
                    1 if entry.lunch_break_deducted else 0,
                    entry.sync_status.value,
                ),
            )
            return int(cur.lastrowid)

    def list_for_user(self, user_id: int, *, start_date: date, end_date: date) -> Sequence[WorkTimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM worktime_entries
                WHERE user_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date ASC
                """,
                (int(user_id), start_date, end_date),
            )
            return [_to_entry(r) for r in fetchall(cur)]
