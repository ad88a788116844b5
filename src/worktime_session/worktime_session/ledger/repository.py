from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import WorkTimeEntry


class WorkTimeRepository(Protocol):
    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[WorkTimeEntry]:
        raise NotImplementedError

    def add_entry(self, entry: WorkTimeEntry) -> int:
        """Insert a new entry; one entry per (user_id, work_date)."""

        raise NotImplementedError

    def list_for_user(self, user_id: int, *, start_date: date, end_date: date) -> Sequence[WorkTimeEntry]:
        raise NotImplementedError
