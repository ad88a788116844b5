from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, timedelta
from typing import Optional

from ..common.datetime_utils import minutes_to_hhmm
from ..core.constants import DEFAULT_LEDGER_HISTORY_DAYS
from ..core.enums import SyncStatus
from ..core.exceptions import DomainError, InconsistentStateError
from ..sessions.model import WorkSession
from ..sessions.store import SessionStore
from .model import WorkTimeEntry
from .repository import WorkTimeRepository

logger = logging.getLogger(__name__)


def entry_from_session(session: WorkSession) -> WorkTimeEntry:
    if not session.workday_completed or session.day_start_time is None or session.day_end_time is None:
        raise InconsistentStateError(f"Session of {session.username} is not finalized")
    return WorkTimeEntry(
        user_id=session.user_id,
        username=session.username,
        work_date=session.day_start_time.date(),
        day_start_time=session.day_start_time,
        day_end_time=session.day_end_time,
        total_worked_minutes=session.total_worked_minutes,
        total_overtime_minutes=session.total_overtime_minutes,
        temporary_stop_count=session.temporary_stop_count,
        total_temporary_stop_minutes=session.total_temporary_stop_minutes,
        lunch_break_deducted=session.lunch_break_deducted,
        sync_status=SyncStatus.USER_INPUT,
    )


class LedgerService:
    def __init__(self, entries: WorkTimeRepository):
        self._entries = entries

    def get_entry(self, user_id: int, work_date: date) -> Optional[WorkTimeEntry]:
        return self._entries.get_for_user_and_date(int(user_id), work_date)

    def record_day(self, session: WorkSession) -> WorkTimeEntry:
        """Write the ledger entry for a finalized session, once per (user, date).

        An entry that already exists for the date is returned as-is.
        """
        entry = entry_from_session(session)
        existing = self._entries.get_for_user_and_date(entry.user_id, entry.work_date)
        if existing:
            logger.warning(
                "Ledger entry for %s on %s already exists; keeping it",
                entry.username,
                entry.work_date,
            )
            return existing

        entry_id = self._entries.add_entry(entry)
        logger.info(
            "Recorded ledger entry for %s on %s: worked=%s overtime=%s",
            entry.username,
            entry.work_date,
            minutes_to_hhmm(entry.total_worked_minutes),
            minutes_to_hhmm(entry.total_overtime_minutes),
        )
        return replace(entry, entry_id=entry_id)

    def commit_day(self, store: SessionStore, previous: WorkSession, finalized: WorkSession) -> WorkTimeEntry:
        """Save the finalized session, then write its ledger entry.

        If the ledger write fails the previous snapshot is put back, so the
        day can be finalized again and the entry always matches the session.
        """
        store.save(finalized.username, finalized)
        try:
            return self.record_day(finalized)
        except DomainError:
            logger.error(
                "Ledger write for %s on %s failed; restoring the open session",
                finalized.username,
                finalized.day_start_time.date(),
            )
            store.save(previous.username, previous)
            raise

    def history_ui(self, user_id: int, *, today: date, days: int = DEFAULT_LEDGER_HISTORY_DAYS) -> list[dict]:
        rows = self._entries.list_for_user(int(user_id), start_date=today - timedelta(days=days), end_date=today)
        return [
            {
                "work_date": e.work_date.strftime("%Y-%m-%d"),
                "start": e.day_start_time.strftime("%H:%M"),
                "end": e.day_end_time.strftime("%H:%M"),
                "worked_hours": minutes_to_hhmm(e.total_worked_minutes),
                "overtime_hours": minutes_to_hhmm(e.total_overtime_minutes),
                "breaks": e.temporary_stop_count,
                "break_hours": minutes_to_hhmm(e.total_temporary_stop_minutes),
                "lunch_break_deducted": e.lunch_break_deducted,
                "sync_status": e.sync_status.value,
            }
            for e in rows
        ]
