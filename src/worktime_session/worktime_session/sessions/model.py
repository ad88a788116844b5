from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Tuple, Union

from ..core.enums import SessionStatus


@dataclass(frozen=True)
class CompletedStop:
    """A temporary stop that has been resumed (or closed by resolution)."""

    start: datetime
    end: datetime
    duration_minutes: int


@dataclass(frozen=True)
class InProgressStop:
    """The open temporary stop of a session currently on break."""

    start: datetime


TemporaryStop = Union[CompletedStop, InProgressStop]


@dataclass(frozen=True)
class WorkSession:
    """Snapshot of a user's live (or most recent) work day.

    Snapshots are never mutated in place: every command builds a new one with
    `dataclasses.replace` and hands it to the session store.
    """

    user_id: int
    username: str
    status: SessionStatus = SessionStatus.OFFLINE
    day_start_time: Optional[datetime] = None
    current_start_time: Optional[datetime] = None
    last_activity: Optional[datetime] = None
    temporary_stops: Tuple[TemporaryStop, ...] = ()
    temporary_stop_count: int = 0
    total_temporary_stop_minutes: int = 0
    total_worked_minutes: int = 0
    final_worked_minutes: int = 0
    total_overtime_minutes: int = 0
    lunch_break_deducted: bool = False
    day_end_time: Optional[datetime] = None
    workday_completed: bool = False

    @property
    def work_date(self) -> Optional[date]:
        return self.day_start_time.date() if self.day_start_time else None

    @property
    def in_progress_stop(self) -> Optional[InProgressStop]:
        if self.temporary_stops and isinstance(self.temporary_stops[-1], InProgressStop):
            return self.temporary_stops[-1]
        return None

    @property
    def completed_stops(self) -> Tuple[CompletedStop, ...]:
        return tuple(s for s in self.temporary_stops if isinstance(s, CompletedStop))

    @property
    def is_active(self) -> bool:
        return self.status in (SessionStatus.ONLINE, SessionStatus.TEMPORARY_STOP)
