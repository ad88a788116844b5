from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.validators import require_non_empty
from ..core.enums import ContinuationKind
from .model import ContinuationPoint
from .repository import ContinuationPointRepository

logger = logging.getLogger(__name__)


class ContinuationTracker:
    """Records and queries continuation points. Never touches the session store."""

    def __init__(self, points: ContinuationPointRepository):
        self._points = points

    def record(
        self,
        username: str,
        user_id: int,
        session_date: date,
        kind: ContinuationKind,
        timestamp: datetime,
    ) -> ContinuationPoint:
        username = require_non_empty(username, "username")
        point_id = self._points.add(
            username=username,
            user_id=int(user_id),
            session_date=session_date,
            timestamp=timestamp,
            kind=kind,
        )
        logger.info("Recorded %s continuation point for %s at %s", kind.value, username, timestamp)
        return ContinuationPoint(
            point_id=point_id,
            username=username,
            user_id=int(user_id),
            session_date=session_date,
            timestamp=timestamp,
            kind=kind,
        )

    def active_points(self, username: str, session_date: date) -> list[ContinuationPoint]:
        points = [p for p in self._points.list_active(username, session_date) if not p.resolved]
        points.sort(key=lambda p: (p.timestamp, p.point_id))
        return points

    @staticmethod
    def latest(points: Sequence[ContinuationPoint]) -> Optional[datetime]:
        if not points:
            return None
        return max(p.timestamp for p in points)

    def has_point(self, username: str, session_date: date, kind: ContinuationKind) -> bool:
        return any(p.kind == kind for p in self.active_points(username, session_date))

    def has_unresolved_midnight_end(self, username: str) -> bool:
        return self._points.exists_unresolved(username, ContinuationKind.MIDNIGHT_END)

    def resolve_points(
        self,
        username: str,
        session_date: date,
        *,
        resolved_by: str,
        overtime_minutes: int,
        at: datetime,
    ) -> int:
        count = self._points.resolve_active(
            username=username,
            session_date=session_date,
            resolved_by=resolved_by,
            resolved_at=at,
            overtime_minutes=int(overtime_minutes),
        )
        logger.info(
            "Resolved %d continuation points for %s on %s with %d overtime minutes",
            count,
            username,
            session_date,
            overtime_minutes,
        )
        return count
