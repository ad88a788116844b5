from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..continuation.model import ContinuationPoint
from ..sessions.model import WorkSession


@dataclass(frozen=True)
class OvertimeOption:
    overtime_minutes: int
    label: str
    total_minutes: int
    needs_lunch_break: bool
    recommended: bool = False

    @property
    def formatted_duration(self) -> str:
        hours, minutes = divmod(self.total_minutes, 60)
        return f"{hours} hours {minutes} minutes" if minutes else f"{hours} hours"


@dataclass(frozen=True)
class ResolutionContext:
    """Everything a resolution page needs to offer the user a choice."""

    session: WorkSession
    work_date: date
    schedule_hours: int
    continuation_points: list[ContinuationPoint]
    has_midnight_end: bool
    default_end_time: Optional[datetime]
    recommended_overtime_minutes: int
    overtime_options: list[OvertimeOption] = field(default_factory=list)
