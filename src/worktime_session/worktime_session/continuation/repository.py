from __future__ import annotations

from datetime import date, datetime
from typing import Protocol, Sequence

from ..core.enums import ContinuationKind
from .model import ContinuationPoint


class ContinuationPointRepository(Protocol):
    def add(
        self,
        *,
        username: str,
        user_id: int,
        session_date: date,
        timestamp: datetime,
        kind: ContinuationKind,
    ) -> int:
        raise NotImplementedError

    def list_active(self, username: str, session_date: date) -> Sequence[ContinuationPoint]:
        raise NotImplementedError

    def resolve_active(
        self,
        *,
        username: str,
        session_date: date,
        resolved_by: str,
        resolved_at: datetime,
        overtime_minutes: int,
    ) -> int:
        """Mark every active point of the date resolved; returns how many changed."""

        raise NotImplementedError

    def exists_unresolved(self, username: str, kind: ContinuationKind) -> bool:
        raise NotImplementedError
