from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Optional

from ..calculation.calculator import (
    DerivedTotals,
    apply_totals,
    calculate_current_work,
    close_in_progress_stop,
    finalize_session,
    open_stop,
)
from ..calculation.rules import WorkRules
from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty, require_user_id
from ..continuation.model import ContinuationPoint
from ..continuation.service import ContinuationTracker
from ..core.enums import SessionStatus
from ..core.exceptions import PreviousDaySessionError, ValidationError
from ..ledger.service import LedgerService
from ..resolution.service import ResolutionService
from ..users.service import ScheduleService
from .model import WorkSession
from .operations import (
    EndDay,
    OperationResult,
    Pause,
    Resolve,
    Resume,
    SessionOperation,
    Skip,
    StartDay,
    operation_from_name,
)
from .store import SessionStore
from .validation import ensure_consistent, ensure_owned_by

logger = logging.getLogger(__name__)


class SessionService:
    """Single entry point for session commands and queries.

    Each command runs under the store's per-user lock: load, check ownership
    and structure, apply the transition, recompute totals, persist.
    """

    def __init__(
        self,
        store: SessionStore,
        ledger: LedgerService,
        tracker: ContinuationTracker,
        resolution: ResolutionService,
        schedules: ScheduleService,
        *,
        rules: Optional[WorkRules] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._store = store
        self._ledger = ledger
        self._tracker = tracker
        self._resolution = resolution
        self._schedules = schedules
        self._rules = rules or WorkRules()
        self._clock = clock

        self._handlers = {
            StartDay: self._start_day,
            Pause: self._pause,
            Resume: self._resume,
            EndDay: self._end_day,
            Resolve: self._resolve,
            Skip: self._skip,
        }

    # ----- queries -----

    def get_current_session(self, username: str, user_id: int) -> Optional[WorkSession]:
        """Stored snapshot, unchanged. Calling it twice returns the same value."""
        username = require_non_empty(username, "username")
        session = self._store.load(username)
        if session is not None:
            ensure_owned_by(session, username, require_user_id(user_id))
        return session

    def current_totals(self, username: str, user_id: int, *, at: Optional[datetime] = None) -> Optional[DerivedTotals]:
        session = self.get_current_session(username, user_id)
        if session is None or session.day_start_time is None:
            return None
        as_of = session.day_end_time if session.workday_completed else (at or self._clock())
        return calculate_current_work(session, self._schedules.schedule_hours_for(session.user_id), self._rules, as_of)

    def needs_resolution(self, session: Optional[WorkSession], *, at: Optional[datetime] = None) -> bool:
        return self._resolution.needs_resolution(session, at or self._clock())

    def active_continuation_points(self, username: str, session_date: date) -> list[ContinuationPoint]:
        return self._tracker.active_points(require_non_empty(username, "username"), session_date)

    # ----- commands -----

    def execute(
        self,
        operation: SessionOperation,
        username: str,
        user_id: int,
        *,
        at: Optional[datetime] = None,
    ) -> OperationResult:
        username = require_non_empty(username, "username")
        user_id = require_user_id(user_id)
        handler = self._handlers.get(type(operation))
        if handler is None:
            raise ValidationError(f"Unsupported session operation: {operation!r}")

        now = at or self._clock()
        with self._store.lock(username):
            session = self._store.load(username)
            if session is not None:
                ensure_owned_by(session, username, user_id)
                ensure_consistent(session)
            return handler(session, operation, username, user_id, now)

    def execute_named(
        self,
        name: str,
        username: str,
        user_id: int,
        *,
        at: Optional[datetime] = None,
        **params,
    ) -> OperationResult:
        return self.execute(operation_from_name(name, **params), username, user_id, at=at)

    # ----- handlers -----

    def _start_day(self, session, operation: StartDay, username: str, user_id: int, now: datetime) -> OperationResult:
        if session is not None:
            if self._resolution.needs_resolution(session, now):
                raise ValidationError(
                    f"Resolve the unfinished session from {session.work_date} before starting a new day"
                )
            if session.is_active:
                raise ValidationError("Work day already started")
            if session.workday_completed and session.work_date == now.date():
                raise ValidationError("Work day already completed today")

        started = WorkSession(
            user_id=user_id,
            username=username,
            status=SessionStatus.ONLINE,
            day_start_time=now,
            current_start_time=now,
            last_activity=now,
        )
        self._store.save(username, started)
        logger.info("Started work day for %s at %s", username, now.strftime("%Y-%m-%d %H:%M"))
        return OperationResult(operation=operation.name, session=started)

    def _pause(self, session, operation: Pause, username: str, user_id: int, now: datetime) -> OperationResult:
        session = self._require_today(session, now)
        if session.status != SessionStatus.ONLINE:
            raise ValidationError("Temporary stop is only possible while online")

        paused = replace(open_stop(session, now), status=SessionStatus.TEMPORARY_STOP, last_activity=now)
        paused = self._refresh(paused, now)
        self._store.save(username, paused)
        logger.info("Temporary stop #%d started for %s", paused.temporary_stop_count, username)
        return OperationResult(operation=operation.name, session=paused)

    def _resume(self, session, operation: Resume, username: str, user_id: int, now: datetime) -> OperationResult:
        session = self._require_today(session, now)
        if session.status != SessionStatus.TEMPORARY_STOP:
            raise ValidationError("Session is not on a temporary stop")

        resumed = replace(
            close_in_progress_stop(session, now),
            status=SessionStatus.ONLINE,
            current_start_time=now,
            last_activity=now,
        )
        resumed = self._refresh(resumed, now)
        self._store.save(username, resumed)
        logger.info(
            "Resumed work for %s; total break %d minutes",
            username,
            resumed.total_temporary_stop_minutes,
        )
        return OperationResult(operation=operation.name, session=resumed)

    def _end_day(self, session, operation: EndDay, username: str, user_id: int, now: datetime) -> OperationResult:
        session = self._require_today(session, now)
        if session.status != SessionStatus.ONLINE:
            raise ValidationError("Resume work before ending the day")

        schedule_hours = self._schedules.schedule_hours_for(user_id)
        finalized = finalize_session(session, now, schedule_hours, self._rules, now=now)
        entry = self._ledger.commit_day(self._store, session, finalized)
        logger.info(
            "Ended work day for %s: worked=%d final=%d overtime=%d",
            username,
            finalized.total_worked_minutes,
            finalized.final_worked_minutes,
            finalized.total_overtime_minutes,
        )
        return OperationResult(operation=operation.name, session=finalized, ledger_entry=entry)

    def _resolve(self, session, operation: Resolve, username: str, user_id: int, now: datetime) -> OperationResult:
        return self._resolution.resolve(session, operation, now=now)

    def _skip(self, session, operation: Skip, username: str, user_id: int, now: datetime) -> OperationResult:
        return self._resolution.skip(session, operation, now=now)

    # ----- helpers -----

    @staticmethod
    def _require_today(session: Optional[WorkSession], now: datetime) -> WorkSession:
        if session is None or not session.is_active:
            raise ValidationError("No active work session")
        if session.day_start_time.date() != now.date():
            raise PreviousDaySessionError(
                f"Session started on {session.day_start_time.date()}; resolve it before continuing"
            )
        return session

    def _refresh(self, session: WorkSession, now: datetime) -> WorkSession:
        totals = calculate_current_work(session, self._schedules.schedule_hours_for(session.user_id), self._rules, now)
        return apply_totals(session, totals)
