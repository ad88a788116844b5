from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import SyncStatus


@dataclass(frozen=True)
class WorkTimeEntry:
    """Immutable per-day summary produced when a session is finalized."""

    user_id: int
    username: str
    work_date: date
    day_start_time: datetime
    day_end_time: datetime
    total_worked_minutes: int
    total_overtime_minutes: int
    temporary_stop_count: int
    total_temporary_stop_minutes: int
    lunch_break_deducted: bool
    sync_status: SyncStatus = SyncStatus.USER_INPUT
    entry_id: Optional[int] = None
