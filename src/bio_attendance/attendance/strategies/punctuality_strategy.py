from __future__ import annotations

from typing import Optional

from ...core.constants import TARDY_THRESHOLD_MINUTES, UNDERTIME_HOUR_MINUTES
from ...core.enums import AttendanceStatus, SecondaryStatus
from ..model import ShiftContext
from .base import StatusDecision, StatusRule


def lateness_status(tardy_minutes: int, grace_period_minutes: int) -> AttendanceStatus:
    """on_time below the threshold, tardy up to and including the grace period, else half-day."""
    if tardy_minutes < TARDY_THRESHOLD_MINUTES:
        return AttendanceStatus.ON_TIME
    if tardy_minutes <= grace_period_minutes:
        return AttendanceStatus.TARDY
    return AttendanceStatus.HALF_DAY_ABSENCE


def undertime_status(undertime_minutes: Optional[int]) -> Optional[SecondaryStatus]:
    if not undertime_minutes:
        return None
    if undertime_minutes > UNDERTIME_HOUR_MINUTES:
        return SecondaryStatus.UNDERTIME_MORE_THAN_HOUR
    return SecondaryStatus.UNDERTIME


class OnTimeRule(StatusRule):
    def applies(self, ctx: ShiftContext) -> bool:
        return (ctx.tardy_minutes or 0) < TARDY_THRESHOLD_MINUTES

    def decide(self, ctx: ShiftContext) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.ON_TIME, secondary_status=undertime_status(ctx.undertime_minutes))


class TardyRule(StatusRule):
    def applies(self, ctx: ShiftContext) -> bool:
        return TARDY_THRESHOLD_MINUTES <= (ctx.tardy_minutes or 0) <= ctx.grace_period_minutes

    def decide(self, ctx: ShiftContext) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.TARDY, secondary_status=undertime_status(ctx.undertime_minutes))


class HalfDayAbsenceRule(StatusRule):
    """Fallback row: late past the grace period."""

    def applies(self, ctx: ShiftContext) -> bool:
        return True

    def decide(self, ctx: ShiftContext) -> StatusDecision:
        return StatusDecision(
            status=AttendanceStatus.HALF_DAY_ABSENCE,
            secondary_status=undertime_status(ctx.undertime_minutes),
        )
