from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, time
from typing import Callable, Optional

from ..calculation.rules import WorkRules
from ..common.datetime_utils import minutes_between, now_local
from ..continuation.model import ContinuationPoint
from ..continuation.service import ContinuationTracker
from ..core.enums import ContinuationKind
from ..sessions.store import SessionStore
from ..sessions.validation import ensure_owned_by
from ..users.service import ScheduleService
from .rules import SessionEndRule, find_applicable_rule

logger = logging.getLogger(__name__)

# Stamp for the rollover point: the last minute of the session's own date.
MIDNIGHT_END_TIME = time(23, 59)


@dataclass(frozen=True)
class MonitorResult:
    rule: Optional[SessionEndRule]
    recorded: Optional[ContinuationPoint] = None


class SessionMonitor:
    """Periodic checker for open sessions.

    Reads the session snapshot and records continuation points. It never
    writes the session store and never notifies anyone; callers decide what
    to do with the returned rule.
    """

    def __init__(
        self,
        store: SessionStore,
        tracker: ContinuationTracker,
        schedules: ScheduleService,
        *,
        rules: Optional[WorkRules] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._store = store
        self._tracker = tracker
        self._schedules = schedules
        self._rules = rules or WorkRules()
        self._clock = clock

    def check(self, username: str, user_id: int, now: Optional[datetime] = None) -> MonitorResult:
        now = now or self._clock()
        session = self._store.load(username)
        if session is None or not session.is_active:
            return MonitorResult(rule=None)
        ensure_owned_by(session, username, user_id)

        schedule_hours = self._schedules.schedule_hours_for(session.user_id)
        rule = find_applicable_rule(session, schedule_hours, self._rules, now)
        if rule is None:
            return MonitorResult(rule=None)

        work_date = session.day_start_time.date()
        recorded = None

        if rule is SessionEndRule.PREVIOUS_DAY_SESSION:
            recorded = self.handle_midnight(username, user_id, now)
        elif rule is SessionEndRule.MAX_TEMP_STOP_REACHED:
            if not self._tracker.has_point(username, work_date, ContinuationKind.TEMP_STOP):
                recorded = self._tracker.record(username, user_id, work_date, ContinuationKind.TEMP_STOP, now)
        elif rule is SessionEndRule.OVERTIME_REACHED:
            if self._hourly_due(username, work_date, now):
                recorded = self._tracker.record(username, user_id, work_date, ContinuationKind.HOURLY, now)
        elif rule is SessionEndRule.SCHEDULE_END_REACHED:
            if not self._tracker.has_point(username, work_date, ContinuationKind.SCHEDULE_END):
                recorded = self._tracker.record(username, user_id, work_date, ContinuationKind.SCHEDULE_END, now)

        return MonitorResult(rule=rule, recorded=recorded)

    def handle_midnight(self, username: str, user_id: int, now: Optional[datetime] = None) -> Optional[ContinuationPoint]:
        """Mark a session still open from an earlier day, once."""
        now = now or self._clock()
        session = self._store.load(username)
        if session is None or not session.is_active or session.day_start_time is None:
            return None
        ensure_owned_by(session, username, user_id)

        work_date = session.day_start_time.date()
        if work_date >= now.date():
            return None
        if self._tracker.has_point(username, work_date, ContinuationKind.MIDNIGHT_END):
            return None

        logger.info("Session of %s from %s is still open after midnight", username, work_date)
        return self._tracker.record(
            username,
            user_id,
            work_date,
            ContinuationKind.MIDNIGHT_END,
            datetime.combine(work_date, MIDNIGHT_END_TIME),
        )

    def _hourly_due(self, username: str, work_date, now: datetime) -> bool:
        hourly = [p for p in self._tracker.active_points(username, work_date) if p.kind == ContinuationKind.HOURLY]
        last = self._tracker.latest(hourly)
        return last is None or minutes_between(last, now) >= self._rules.hour_minutes
