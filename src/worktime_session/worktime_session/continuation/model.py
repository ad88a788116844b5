from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import ContinuationKind


@dataclass(frozen=True)
class ContinuationPoint:
    """Checkpoint recorded while a session was active.

    Used to estimate when the user actually stopped working if the session
    was abandoned.
    """

    point_id: int
    username: str
    user_id: int
    session_date: date
    timestamp: datetime
    kind: ContinuationKind
    active: bool = True
    resolved: bool = False
    resolved_by: Optional[str] = None
    resolved_at: Optional[datetime] = None
    granted_overtime_minutes: Optional[int] = None
