from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from ..calculation.calculator import calculate_current_work
from ..calculation.rules import WorkRules
from ..core.enums import SessionStatus
from ..sessions.model import WorkSession


class SessionEndRule(Enum):
    """Conditions under which an open session should be checked on.

    When several apply, the one with the highest priority wins.
    """

    PREVIOUS_DAY_SESSION = 5
    MAX_TEMP_STOP_REACHED = 4
    OVERTIME_REACHED = 2
    SCHEDULE_END_REACHED = 1

    @property
    def priority(self) -> int:
        return self.value

    def applies(self, session: WorkSession, schedule_hours: int, rules: WorkRules, now: datetime) -> bool:
        if not session.is_active or session.day_start_time is None:
            return False

        if self is SessionEndRule.PREVIOUS_DAY_SESSION:
            return session.day_start_time.date() != now.date()

        totals = calculate_current_work(session, schedule_hours, rules, now)
        full_day = rules.full_day_minutes(schedule_hours)

        if self is SessionEndRule.MAX_TEMP_STOP_REACHED:
            return (
                session.status == SessionStatus.TEMPORARY_STOP
                and totals.break_minutes >= rules.max_temp_stop_hours * rules.hour_minutes
            )
        if self is SessionEndRule.OVERTIME_REACHED:
            return totals.worked_minutes >= full_day + rules.hour_minutes
        # SCHEDULE_END_REACHED
        return full_day <= totals.worked_minutes < full_day + rules.hour_minutes


def find_applicable_rule(
    session: Optional[WorkSession],
    schedule_hours: int,
    rules: WorkRules,
    now: datetime,
) -> Optional[SessionEndRule]:
    if session is None:
        return None
    applicable = [r for r in SessionEndRule if r.applies(session, schedule_hours, rules, now)]
    if not applicable:
        return None
    return max(applicable, key=lambda r: r.priority)
