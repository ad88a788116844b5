from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..calculation.calculator import expected_end_time, finalize_session, fit_to_schedule
from ..calculation.rules import WorkRules
from ..common.datetime_utils import minutes_between
from ..common.validators import require_hour_minute
from ..continuation.model import ContinuationPoint
from ..continuation.service import ContinuationTracker
from ..core.enums import ResolutionPath
from ..core.exceptions import InconsistentStateError, ValidationError
from ..ledger.service import LedgerService
from ..sessions.model import WorkSession
from ..sessions.operations import OperationResult, Resolve, Skip
from ..sessions.store import SessionStore
from ..users.service import ScheduleService
from .factory import OvertimePolicyFactory
from .model import OvertimeOption, ResolutionContext

logger = logging.getLogger(__name__)


class ResolutionService:
    """Reconciles a session left open on an earlier day (or abandoned today).

    Finalizing paths write exactly one ledger entry for the session date,
    store the completed session and resolve the date's continuation points.
    """

    def __init__(
        self,
        store: SessionStore,
        tracker: ContinuationTracker,
        ledger: LedgerService,
        schedules: ScheduleService,
        *,
        rules: Optional[WorkRules] = None,
        policy_factory: Optional[OvertimePolicyFactory] = None,
    ):
        self._store = store
        self._tracker = tracker
        self._ledger = ledger
        self._schedules = schedules
        self._rules = rules or WorkRules()
        self._policies = policy_factory or OvertimePolicyFactory()

    # ----- queries -----

    def needs_resolution(self, session: Optional[WorkSession], now: datetime) -> bool:
        if session is None or session.workday_completed or session.day_start_time is None:
            return False
        if not session.is_active:
            return False
        if session.day_start_time.date() < now.date():
            return True

        latest = self._tracker.latest(self._tracker.active_points(session.username, session.day_start_time.date()))
        if latest is None:
            return False
        return minutes_between(latest, now) > self._rules.stale_continuation_minutes

    def default_end_time(
        self,
        session: WorkSession,
        points: Sequence[ContinuationPoint],
        schedule_hours: int,
    ) -> Optional[datetime]:
        latest = self._tracker.latest(points)
        if latest is not None:
            return latest
        return expected_end_time(session, schedule_hours, self._rules)

    def recommended_overtime(
        self,
        session: WorkSession,
        points: Sequence[ContinuationPoint],
        schedule_hours: int,
    ) -> int:
        policy = self._policies.for_name(self._rules.overtime_policy)
        return policy.recommend(session=session, points=points, schedule_hours=schedule_hours, rules=self._rules)

    def overtime_options(self, schedule_hours: int, recommended: int) -> list[OvertimeOption]:
        standard = self._rules.schedule_minutes(schedule_hours)
        lunch = self._rules.has_lunch_break(schedule_hours)

        options = [OvertimeOption(0, "Standard Schedule Only", standard, lunch, recommended=recommended == 0)]
        for overtime in self._rules.overtime_tiers():
            hours = overtime // self._rules.hour_minutes
            label = f"{hours} Hour{'s' if hours > 1 else ''} Overtime"
            options.append(OvertimeOption(overtime, label, standard + overtime, lunch, recommended=overtime == recommended))

        options.sort(key=lambda o: (not o.recommended, o.overtime_minutes))
        return options

    def build_context(self, session: Optional[WorkSession], now: datetime) -> Optional[ResolutionContext]:
        if not self.needs_resolution(session, now):
            return None

        work_date = session.day_start_time.date()
        schedule_hours = self._schedules.schedule_hours_for(session.user_id)
        points = self._tracker.active_points(session.username, work_date)
        recommended = self.recommended_overtime(session, points, schedule_hours)

        return ResolutionContext(
            session=session,
            work_date=work_date,
            schedule_hours=schedule_hours,
            continuation_points=points,
            has_midnight_end=self._tracker.has_unresolved_midnight_end(session.username),
            default_end_time=self.default_end_time(session, points, schedule_hours),
            recommended_overtime_minutes=recommended,
            overtime_options=self.overtime_options(schedule_hours, recommended),
        )

    # ----- commands (caller holds the store lock and has checked ownership) -----

    def resolve(self, session: Optional[WorkSession], operation: Resolve, *, now: datetime) -> OperationResult:
        if not self.needs_resolution(session, now):
            return self._no_session(operation.name, session)

        schedule_hours = self._schedules.schedule_hours_for(session.user_id)

        if operation.end_hour is not None or operation.end_minute is not None:
            end_time = self._explicit_end_time(session, operation.end_hour, operation.end_minute, now=now)
            return self._finalize(session, end_time, schedule_hours, now=now, path=ResolutionPath.EXPLICIT)

        if operation.overtime_minutes is not None:
            overtime = self._validate_overtime(operation.overtime_minutes)
            fitted, end_time = self._fitted(session, schedule_hours, now=now, overtime_minutes=overtime)
            return self._finalize(
                fitted,
                end_time,
                schedule_hours,
                now=now,
                path=ResolutionPath.OVERTIME_CHOICE,
                overtime_override=overtime,
                stored=session,
            )

        raise ValidationError("Choose an end time or an overtime option")

    def skip(self, session: Optional[WorkSession], operation: Skip, *, now: datetime) -> OperationResult:
        if not self.needs_resolution(session, now):
            return self._no_session(operation.name, session)

        schedule_hours = self._schedules.schedule_hours_for(session.user_id)
        fitted, end_time = self._fitted(session, schedule_hours, now=now)
        return self._finalize(
            fitted,
            end_time,
            schedule_hours,
            now=now,
            path=ResolutionPath.SKIP,
            overtime_override=0,
            stored=session,
        )

    # ----- internals -----

    def _explicit_end_time(self, session: WorkSession, hour, minute, *, now: datetime) -> datetime:
        chosen = require_hour_minute(hour, minute)
        end_time = datetime.combine(session.day_start_time.date(), chosen)
        if end_time < session.day_start_time:
            raise InconsistentStateError(
                f"End time {end_time:%H:%M} is before the day started ({session.day_start_time:%H:%M})"
            )
        if end_time > now:
            raise ValidationError("End time cannot be in the future")
        if session.temporary_stops and end_time < session.temporary_stops[-1].start:
            raise ValidationError("End time must not be before the last temporary stop began")
        return end_time

    def _fitted(self, session: WorkSession, schedule_hours: int, *, now: datetime, overtime_minutes: int = 0):
        fitted, end_time = fit_to_schedule(session, schedule_hours, self._rules, overtime_minutes=overtime_minutes)
        if end_time > now:
            raise ValidationError(
                f"A day ending at {end_time:%H:%M} has not finished yet; choose an earlier end time"
            )
        return fitted, end_time

    def _validate_overtime(self, overtime_minutes: int) -> int:
        overtime = int(overtime_minutes)
        if overtime != 0 and overtime not in self._rules.overtime_tiers():
            raise ValidationError(f"Overtime must be 0 or one of {self._rules.overtime_tiers()} minutes")
        return overtime

    def _finalize(
        self,
        session: WorkSession,
        end_time: datetime,
        schedule_hours: int,
        *,
        now: datetime,
        path: ResolutionPath,
        overtime_override: Optional[int] = None,
        stored: Optional[WorkSession] = None,
    ) -> OperationResult:
        """Finalize `session` and commit it. `stored` is the snapshot on disk when it differs."""
        finalized = finalize_session(
            session,
            end_time,
            schedule_hours,
            self._rules,
            now=now,
            overtime_override=overtime_override,
        )
        work_date = finalized.day_start_time.date()

        entry = self._ledger.commit_day(self._store, stored or session, finalized)
        self._tracker.resolve_points(
            finalized.username,
            work_date,
            resolved_by=finalized.username,
            overtime_minutes=finalized.total_overtime_minutes,
            at=now,
        )

        logger.info(
            "Resolved session of %s for %s via %s: end=%s overtime=%s",
            finalized.username,
            work_date,
            path.value,
            end_time.strftime("%H:%M"),
            finalized.total_overtime_minutes,
        )
        operation = Skip.name if path == ResolutionPath.SKIP else Resolve.name
        return OperationResult(operation=operation, session=finalized, ledger_entry=entry, resolution_path=path)

    @staticmethod
    def _no_session(operation: str, session: Optional[WorkSession]) -> OperationResult:
        logger.info("No session needs resolution; nothing to %s", operation)
        return OperationResult(operation=operation, session=session, resolution_path=ResolutionPath.NO_SESSION)
