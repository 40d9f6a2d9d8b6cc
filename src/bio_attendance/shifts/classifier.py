from __future__ import annotations

from datetime import date, datetime, time, timedelta

from ..core.constants import SHIFT_HOUR_BANDS
from ..core.enums import ShiftType
from ..directory.model import EmployeeSchedule
from .model import ShiftProfile, ShiftWindow


def classify_shift_type(time_in: time) -> ShiftType:
    for first_hour, last_hour, shift_type in SHIFT_HOUR_BANDS:
        if first_hour <= time_in.hour <= last_hour:
            return ShiftType(shift_type)
    raise ValueError(f"No shift band covers hour {time_in.hour}")


def is_next_day_shift(time_in: time, time_out: time) -> bool:
    """True when the scheduled time-out falls on the calendar day after time-in.

    Equal times mean a 24h shift ending the next day. Graveyard shifts whose out-hour is past
    the in-hour end the same day ("00:00-09:00").
    """
    if time_in == time_out:
        return True
    if classify_shift_type(time_in) is ShiftType.GRAVEYARD and time_out.hour > time_in.hour:
        return False
    return time_out <= time_in


def profile_for(schedule: EmployeeSchedule) -> ShiftProfile:
    return ShiftProfile(
        shift_type=classify_shift_type(schedule.scheduled_time_in),
        is_next_day=is_next_day_shift(schedule.scheduled_time_in, schedule.scheduled_time_out),
    )


def shift_window(schedule: EmployeeSchedule, shift_date: date) -> ShiftWindow:
    scheduled_in = datetime.combine(shift_date, schedule.scheduled_time_in)
    out_date = shift_date + timedelta(days=1) if profile_for(schedule).is_next_day else shift_date
    return ShiftWindow(
        shift_date=shift_date,
        scheduled_in=scheduled_in,
        scheduled_out=datetime.combine(out_date, schedule.scheduled_time_out),
    )
