from __future__ import annotations

from typing import Sequence

from ...calculation.rules import WorkRules
from ...continuation.model import ContinuationPoint
from ...core.constants import MAX_COUNTED_OVERTIME_MINUTES, NON_HOURLY_RECOMMENDED_MINUTES
from ...core.enums import ContinuationKind
from ...sessions.model import WorkSession
from .base import OvertimePolicy


class ContinuationCountOvertimePolicy(OvertimePolicy):
    """One hour per hourly checkpoint, half an hour if only other checkpoints exist."""

    def recommend(
        self,
        *,
        session: WorkSession,
        points: Sequence[ContinuationPoint],
        schedule_hours: int,
        rules: WorkRules,
    ) -> int:
        if not points:
            return 0

        hourly = sum(1 for p in points if p.kind == ContinuationKind.HOURLY)
        if hourly == 0:
            raw = NON_HOURLY_RECOMMENDED_MINUTES
        else:
            raw = min(hourly * rules.hour_minutes, MAX_COUNTED_OVERTIME_MINUTES)
        return rules.round_up_to_tier(raw)
