from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import OvertimePolicyName
from .policies.base import OvertimePolicy
from .policies.continuation_count_policy import ContinuationCountOvertimePolicy
from .policies.threshold_policy import ThresholdOvertimePolicy


@dataclass
class OvertimePolicyFactory:
    """Factory Pattern: pick the configured overtime recommendation policy."""

    def for_name(self, name: OvertimePolicyName) -> OvertimePolicy:
        if name == OvertimePolicyName.CONTINUATION_COUNT:
            return ContinuationCountOvertimePolicy()
        return ThresholdOvertimePolicy()
