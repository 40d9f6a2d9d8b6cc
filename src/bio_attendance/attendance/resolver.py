from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Optional, Sequence

from ..common.datetime_utils import whole_minutes_between
from ..core.constants import DOUBLE_PUNCH_MINUTES, MAX_SHIFT_DURATION_MINUTES
from ..core.enums import AttendanceStatus
from ..directory.model import EmployeeSchedule
from ..directory.repository import SiteRegistry
from ..scans.model import ScanEvent
from ..shifts.classifier import shift_window
from ..shifts.model import ShiftWindow
from .anomaly import detect_extreme_scans
from .factory import StatusRuleFactory
from .model import ResolvedAttendance, ShiftContext

logger = logging.getLogger(__name__)


@dataclass
class StatusResolver:
    """Turns the scans of one shift-date into a full ResolvedAttendance."""

    rule_factory: StatusRuleFactory = field(default_factory=StatusRuleFactory)
    site_registry: Optional[SiteRegistry] = None

    def resolve(
        self,
        *,
        schedule: EmployeeSchedule,
        shift_date: date,
        scans: Sequence[ScanEvent],
        default_site_id: Optional[int] = None,
    ) -> ResolvedAttendance:
        window = shift_window(schedule, shift_date)
        scans = sorted(scans, key=lambda e: e.timestamp)

        if scans and not schedule.works_on(shift_date):
            return self._non_work_day(schedule, window, scans, default_site_id)

        warnings: list[str] = []
        time_in, time_out = self._pair(scans, window)

        if time_in is not None and time_out is not None:
            span = time_out.timestamp - time_in.timestamp
            if span < timedelta(minutes=DOUBLE_PUNCH_MINUTES):
                warnings.append(
                    f"Double punch: time-out {time_out.timestamp:%H:%M:%S} is less than "
                    f"{DOUBLE_PUNCH_MINUTES} minutes after time-in {time_in.timestamp:%H:%M:%S}; time-out ignored"
                )
                time_out = None
            elif span > timedelta(minutes=MAX_SHIFT_DURATION_MINUTES):
                warnings.append(
                    f"Shift duration over {MAX_SHIFT_DURATION_MINUTES // 60}h "
                    f"({time_in.timestamp:%Y-%m-%d %H:%M} to {time_out.timestamp:%Y-%m-%d %H:%M}); time-out ignored"
                )
                time_out = None

        actual_in = time_in.timestamp if time_in else None
        actual_out = time_out.timestamp if time_out else None

        tardy: Optional[int] = None
        if actual_in is not None:
            minutes = whole_minutes_between(window.scheduled_in, actual_in)
            tardy = minutes if minutes > 0 else None

        undertime: Optional[int] = None
        if actual_out is not None:
            minutes = whole_minutes_between(actual_out, window.scheduled_out)
            undertime = minutes if minutes >= 1 else None

        anomalies = detect_extreme_scans([e.timestamp for e in scans], window, actual_in, actual_out)
        ctx = ShiftContext(
            window=window,
            grace_period_minutes=schedule.grace_period_minutes,
            actual_in=actual_in,
            actual_out=actual_out,
            tardy_minutes=tardy,
            undertime_minutes=undertime,
            anomalies=tuple(anomalies),
        )
        decision = self.rule_factory.decide(ctx)
        if decision.status is AttendanceStatus.NEEDS_MANUAL_REVIEW:
            logger.warning(
                "Employee %s shift %s flagged for manual review: %s",
                schedule.employee_id,
                shift_date,
                "; ".join(anomalies),
            )

        in_site = self._site_of(time_in, default_site_id)
        out_site = self._site_of(time_out, default_site_id)
        return ResolvedAttendance(
            employee_id=schedule.employee_id,
            schedule_id=schedule.schedule_id,
            shift_date=shift_date,
            scheduled_time_in=window.scheduled_in,
            scheduled_time_out=window.scheduled_out,
            status=decision.status,
            secondary_status=decision.secondary_status,
            actual_time_in=actual_in,
            actual_time_out=actual_out,
            bio_in_site_id=in_site,
            bio_out_site_id=out_site,
            tardy_minutes=tardy,
            undertime_minutes=undertime,
            is_cross_site_bio=_is_cross_site(schedule, (in_site, out_site)),
            warnings=tuple(warnings + anomalies),
        )

    def _pair(self, scans: Sequence[ScanEvent], window: ShiftWindow) -> tuple[Optional[ScanEvent], Optional[ScanEvent]]:
        # Earliest scan before the midpoint is the time-in; latest at/after it is the time-out.
        midpoint = window.midpoint
        ins = [e for e in scans if e.timestamp < midpoint]
        outs = [e for e in scans if e.timestamp >= midpoint]
        return (ins[0] if ins else None, outs[-1] if outs else None)

    def _non_work_day(
        self,
        schedule: EmployeeSchedule,
        window: ShiftWindow,
        scans: Sequence[ScanEvent],
        default_site_id: Optional[int],
    ) -> ResolvedAttendance:
        first = scans[0]
        last = scans[-1] if len(scans) > 1 else None
        in_site = self._site_of(first, default_site_id)
        out_site = self._site_of(last, default_site_id)
        message = "Scans on a non-work day ({}) for schedule {}".format(
            window.shift_date.strftime("%A"), schedule.schedule_id
        )
        logger.warning("Employee %s: %s", schedule.employee_id, message)
        return ResolvedAttendance(
            employee_id=schedule.employee_id,
            schedule_id=schedule.schedule_id,
            shift_date=window.shift_date,
            scheduled_time_in=window.scheduled_in,
            scheduled_time_out=window.scheduled_out,
            status=AttendanceStatus.NON_WORK_DAY,
            actual_time_in=first.timestamp,
            actual_time_out=last.timestamp if last else None,
            bio_in_site_id=in_site,
            bio_out_site_id=out_site,
            is_cross_site_bio=_is_cross_site(schedule, (in_site, out_site)),
            warnings=(message,),
        )

    def _site_of(self, event: Optional[ScanEvent], default_site_id: Optional[int]) -> Optional[int]:
        if event is None:
            return None
        if self.site_registry is not None:
            site_id = self.site_registry.site_for_device(event.device_id)
            if site_id is not None:
                return site_id
        return default_site_id


def _is_cross_site(schedule: EmployeeSchedule, scan_sites: Sequence[Optional[int]]) -> bool:
    if schedule.site_id is None:
        return False
    return any(site is not None and site != schedule.site_id for site in scan_sites)
