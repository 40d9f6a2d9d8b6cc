"""Assign scans to the logical shift-date they belong to.

A night shift starting 22:00 on the 5th ends 07:00 on the 6th; both scans belong to shift-date
the 5th. Every later stage works from these buckets and never looks at calendar dates again.
"""
from __future__ import annotations

from collections import OrderedDict
from datetime import date, datetime, timedelta
from typing import Iterable

from ..core.constants import (
    EARLY_ARRIVAL_TOLERANCE_MINUTES,
    LATE_START_EARLY_ARRIVAL_FROM_HOUR,
    LATE_START_HOUR,
)
from ..core.enums import ShiftType
from ..directory.model import EmployeeSchedule
from ..scans.model import ScanEvent
from .classifier import profile_for

_EARLY_ARRIVAL = timedelta(minutes=EARLY_ARRIVAL_TOLERANCE_MINUTES)


def group_by_shift_date(events: Iterable[ScanEvent], schedule: EmployeeSchedule) -> "OrderedDict[date, list[ScanEvent]]":
    profile = profile_for(schedule)
    buckets: dict[date, list[ScanEvent]] = {}
    for event in events:
        if profile.is_next_day:
            shift_date = _next_day_shift_date(event.timestamp, schedule)
        else:
            shift_date = _same_day_shift_date(event.timestamp, schedule, profile.shift_type)
        buckets.setdefault(shift_date, []).append(event)

    grouped: OrderedDict[date, list[ScanEvent]] = OrderedDict()
    for shift_date in sorted(buckets):
        grouped[shift_date] = sorted(buckets[shift_date], key=lambda e: e.timestamp)
    return grouped


def _same_day_shift_date(ts: datetime, schedule: EmployeeSchedule, shift_type: ShiftType) -> date:
    if shift_type is ShiftType.GRAVEYARD:
        # 23:45 for a 00:30 start is an early arrival for tomorrow's shift.
        next_start = datetime.combine(ts.date() + timedelta(days=1), schedule.scheduled_time_in)
        if timedelta(0) < next_start - ts <= _EARLY_ARRIVAL:
            return ts.date() + timedelta(days=1)
    return ts.date()


def _next_day_shift_date(ts: datetime, schedule: EmployeeSchedule) -> date:
    start = schedule.scheduled_time_in
    if timedelta(0) <= datetime.combine(ts.date(), start) - ts <= _EARLY_ARRIVAL:
        return ts.date()
    if start.hour >= LATE_START_HOUR and ts.hour >= LATE_START_EARLY_ARRIVAL_FROM_HOUR:
        return ts.date()
    if ts.hour < start.hour:
        return ts.date() - timedelta(days=1)
    return ts.date()
