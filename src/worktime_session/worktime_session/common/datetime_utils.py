from __future__ import annotations

from datetime import date, datetime
from typing import Optional


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value)


def format_iso_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def minutes_between(start: Optional[datetime], end: Optional[datetime]) -> int:
    """Whole minutes from start to end, never negative."""
    if start is None or end is None:
        return 0
    return max(int((end - start).total_seconds() // 60), 0)


def minutes_to_hhmm(minutes: Optional[int]) -> str:
    minutes = int(minutes or 0)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
