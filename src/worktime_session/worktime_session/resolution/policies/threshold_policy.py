from __future__ import annotations

from typing import Sequence

from ...calculation.calculator import calculate_current_work
from ...calculation.rules import WorkRules
from ...continuation.model import ContinuationPoint
from ...sessions.model import WorkSession
from .base import OvertimePolicy


class ThresholdOvertimePolicy(OvertimePolicy):
    """Worked minutes at the last checkpoint against fixed full-day thresholds.

    Anything past the full day (schedule plus lunch) counts; every started
    hour is one more tier.
    """

    def recommend(
        self,
        *,
        session: WorkSession,
        points: Sequence[ContinuationPoint],
        schedule_hours: int,
        rules: WorkRules,
    ) -> int:
        if not points or session.day_start_time is None:
            return 0

        latest = max(p.timestamp for p in points)
        worked = calculate_current_work(session, schedule_hours, rules, latest).worked_minutes
        return rules.round_up_to_tier(worked - rules.full_day_minutes(schedule_hours))
