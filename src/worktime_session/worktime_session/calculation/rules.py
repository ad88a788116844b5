from __future__ import annotations

import math
from dataclasses import dataclass

from ..core import constants
from ..core.enums import OvertimePolicyName


@dataclass(frozen=True)
class WorkRules:
    """Tunable business rules for the time calculation engine.

    Passed explicitly into every calculation so each deployment (and each
    test) can swap thresholds without touching module globals.
    """

    hour_minutes: int = constants.HOUR_DURATION
    lunch_break_minutes: int = constants.LUNCH_BREAK_MINUTES
    lunch_schedule_hours: int = constants.LUNCH_SCHEDULE_HOURS
    overtime_grace_minutes: int = constants.OVERTIME_GRACE_MINUTES
    overtime_tier_minutes: int = constants.OVERTIME_TIER_MINUTES
    max_overtime_minutes: int = constants.MAX_OVERTIME_MINUTES
    stale_continuation_minutes: int = constants.STALE_CONTINUATION_MINUTES
    max_temp_stop_hours: int = constants.MAX_TEMP_STOP_HOURS
    overtime_policy: OvertimePolicyName = OvertimePolicyName.THRESHOLD

    @classmethod
    def from_settings(cls, settings) -> "WorkRules":
        return cls(
            overtime_grace_minutes=int(getattr(settings, "OVERTIME_GRACE_MINUTES", constants.OVERTIME_GRACE_MINUTES)),
            stale_continuation_minutes=int(
                getattr(settings, "STALE_CONTINUATION_MINUTES", constants.STALE_CONTINUATION_MINUTES)
            ),
            max_temp_stop_hours=int(getattr(settings, "MAX_TEMP_STOP_HOURS", constants.MAX_TEMP_STOP_HOURS)),
            overtime_policy=OvertimePolicyName(
                getattr(settings, "OVERTIME_POLICY", OvertimePolicyName.THRESHOLD.value)
            ),
        )

    def schedule_minutes(self, schedule_hours: int) -> int:
        return int(schedule_hours) * self.hour_minutes

    def has_lunch_break(self, schedule_hours: int) -> bool:
        return int(schedule_hours) == self.lunch_schedule_hours

    def full_day_minutes(self, schedule_hours: int) -> int:
        """Scheduled minutes plus the lunch break, when the schedule has one."""
        minutes = self.schedule_minutes(schedule_hours)
        if self.has_lunch_break(schedule_hours):
            minutes += self.lunch_break_minutes
        return minutes

    def round_up_to_tier(self, minutes: int) -> int:
        """Round a positive overtime amount up to whole tiers, capped."""
        if minutes <= 0:
            return 0
        tiers = math.ceil(minutes / self.overtime_tier_minutes)
        return min(tiers * self.overtime_tier_minutes, self.max_overtime_minutes)

    def overtime_for(self, final_worked_minutes: int, schedule_hours: int) -> int:
        excess = final_worked_minutes - self.schedule_minutes(schedule_hours) - self.overtime_grace_minutes
        return self.round_up_to_tier(excess)

    def overtime_tiers(self) -> list[int]:
        return list(range(self.overtime_tier_minutes, self.max_overtime_minutes + 1, self.overtime_tier_minutes))
