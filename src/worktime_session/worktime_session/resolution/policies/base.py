from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from ...calculation.rules import WorkRules
from ...continuation.model import ContinuationPoint
from ...sessions.model import WorkSession


class OvertimePolicy(ABC):
    """Strategy Pattern: how much overtime to recommend for an abandoned session."""

    @abstractmethod
    def recommend(
        self,
        *,
        session: WorkSession,
        points: Sequence[ContinuationPoint],
        schedule_hours: int,
        rules: WorkRules,
    ) -> int:
        raise NotImplementedError
