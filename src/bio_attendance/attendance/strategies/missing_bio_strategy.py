from __future__ import annotations

from ...core.enums import AttendanceStatus, SecondaryStatus
from ..model import ShiftContext
from .base import StatusDecision, StatusRule
from .punctuality_strategy import lateness_status


class NoBioRule(StatusRule):
    """No call, no show."""

    def applies(self, ctx: ShiftContext) -> bool:
        return not ctx.has_in and not ctx.has_out

    def decide(self, ctx: ShiftContext) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.NCNS)


class FailedBioInRule(StatusRule):
    def applies(self, ctx: ShiftContext) -> bool:
        return ctx.has_out and not ctx.has_in

    def decide(self, ctx: ShiftContext) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.FAILED_BIO_IN)


class FailedBioOutRule(StatusRule):
    """Time-in only; a late arrival is still recorded as the secondary status."""

    def applies(self, ctx: ShiftContext) -> bool:
        return ctx.has_in and not ctx.has_out

    def decide(self, ctx: ShiftContext) -> StatusDecision:
        late = lateness_status(ctx.tardy_minutes or 0, ctx.grace_period_minutes)
        secondary = SecondaryStatus(late.value) if late is not AttendanceStatus.ON_TIME else None
        return StatusDecision(status=AttendanceStatus.FAILED_BIO_OUT, secondary_status=secondary)
