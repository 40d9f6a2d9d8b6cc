from __future__ import annotations

from ...core.enums import AttendanceStatus
from ..model import ShiftContext
from .base import StatusDecision, StatusRule


class ManualReviewRule(StatusRule):
    """Any extreme scan pattern wins over every other outcome."""

    def applies(self, ctx: ShiftContext) -> bool:
        return bool(ctx.anomalies)

    def decide(self, ctx: ShiftContext) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.NEEDS_MANUAL_REVIEW)
