from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest

from src.worktime_session.worktime_session.container import assemble_container
from src.worktime_session.worktime_session.continuation.model import ContinuationPoint
from src.worktime_session.worktime_session.core.enums import ContinuationKind, Role
from src.worktime_session.worktime_session.ledger.model import WorkTimeEntry
from src.worktime_session.worktime_session.sessions.model import WorkSession
from src.worktime_session.worktime_session.users.model import User


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class InMemorySessionStore:
    def __init__(self):
        self.sessions: dict[str, WorkSession] = {}
        self.saves = 0
        self._lock = threading.RLock()

    def load(self, username: str) -> Optional[WorkSession]:
        return self.sessions.get(username)

    def save(self, username: str, session: WorkSession) -> None:
        self.sessions[username] = session
        self.saves += 1

    @contextmanager
    def lock(self, username: str):
        with self._lock:
            yield


class InMemoryUsers:
    def __init__(self, users: list[User]):
        self.users_by_id = {u.user_id: u for u in users}

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users_by_id.get(user_id)

    def get_by_username(self, username: str) -> Optional[User]:
        return next((u for u in self.users_by_id.values() if u.username == username), None)


class InMemoryWorkTime:
    def __init__(self):
        self.entries: dict[tuple[int, date], WorkTimeEntry] = {}
        self._id = 0

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[WorkTimeEntry]:
        return self.entries.get((user_id, work_date))

    def add_entry(self, entry: WorkTimeEntry) -> int:
        key = (entry.user_id, entry.work_date)
        if key in self.entries:
            raise AssertionError(f"duplicate ledger entry for {key}")
        self._id += 1
        self.entries[key] = replace(entry, entry_id=self._id)
        return self._id

    def list_for_user(self, user_id: int, *, start_date: date, end_date: date):
        rows = [e for (uid, d), e in self.entries.items() if uid == user_id and start_date <= d <= end_date]
        rows.sort(key=lambda e: e.work_date, reverse=True)
        return rows


class InMemoryContinuationPoints:
    def __init__(self):
        self.points: list[ContinuationPoint] = []
        self._id = 0

    def add(self, *, username: str, user_id: int, session_date: date, timestamp: datetime, kind: ContinuationKind) -> int:
        self._id += 1
        self.points.append(
            ContinuationPoint(
                point_id=self._id,
                username=username,
                user_id=user_id,
                session_date=session_date,
                timestamp=timestamp,
                kind=kind,
            )
        )
        return self._id

    def list_active(self, username: str, session_date: date):
        items = [p for p in self.points if p.username == username and p.session_date == session_date and p.active]
        items.sort(key=lambda p: (p.timestamp, p.point_id))
        return items

    def resolve_active(self, *, username: str, session_date: date, resolved_by: str, resolved_at: datetime, overtime_minutes: int) -> int:
        changed = 0
        for i, p in enumerate(self.points):
            if p.username == username and p.session_date == session_date and p.active:
                self.points[i] = replace(
                    p,
                    active=False,
                    resolved=True,
                    resolved_by=resolved_by,
                    resolved_at=resolved_at,
                    granted_overtime_minutes=overtime_minutes,
                )
                changed += 1
        return changed

    def exists_unresolved(self, username: str, kind: ContinuationKind) -> bool:
        return any(p.username == username and p.kind == kind and p.active and not p.resolved for p in self.points)


DAY_ONE = date(2026, 3, 2)
DAY_TWO = date(2026, 3, 3)


def at(day: date, hour: int, minute: int = 0) -> datetime:
    return datetime(day.year, day.month, day.day, hour, minute)


@pytest.fixture
def clock():
    return FakeClock(at(DAY_ONE, 8))


@pytest.fixture
def users_repo():
    return InMemoryUsers(
        [
            User(user_id=1, username="alice", full_name="Alice A", role=Role.USER, schedule_hours=8),
            User(user_id=2, username="bob", full_name="Bob B", role=Role.USER, schedule_hours=8),
            User(user_id=3, username="carol", full_name="Carol C", role=Role.USER, schedule_hours=6),
        ]
    )


@pytest.fixture
def store():
    return InMemorySessionStore()


@pytest.fixture
def worktime_repo():
    return InMemoryWorkTime()


@pytest.fixture
def points_repo():
    return InMemoryContinuationPoints()


@pytest.fixture
def container(store, users_repo, worktime_repo, points_repo, clock):
    return assemble_container(
        store=store,
        users_repo=users_repo,
        worktime_repo=worktime_repo,
        points_repo=points_repo,
        clock=clock,
    )
