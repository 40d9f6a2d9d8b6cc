from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus, SecondaryStatus
from ..shifts.model import ShiftWindow


@dataclass(frozen=True)
class ResolvedAttendance:
    """Complete replacement value for every core-owned field of one attendance record.

    A field that is None here is written as NULL; nothing from a previous pass survives.
    """

    employee_id: int
    schedule_id: int
    shift_date: date
    scheduled_time_in: datetime
    scheduled_time_out: datetime
    status: AttendanceStatus
    actual_time_in: Optional[datetime] = None
    actual_time_out: Optional[datetime] = None
    bio_in_site_id: Optional[int] = None
    bio_out_site_id: Optional[int] = None
    secondary_status: Optional[SecondaryStatus] = None
    tardy_minutes: Optional[int] = None
    undertime_minutes: Optional[int] = None
    is_cross_site_bio: bool = False
    warnings: tuple[str, ...] = ()

    @property
    def key(self) -> tuple[int, date, int]:
        return (self.employee_id, self.shift_date, self.schedule_id)


@dataclass(frozen=True)
class AttendanceRecord:
    """Persisted attendance record (one per employee, shift-date and schedule)."""

    record_id: int
    employee_id: int
    schedule_id: int
    shift_date: date
    scheduled_time_in: datetime
    scheduled_time_out: datetime
    status: AttendanceStatus
    actual_time_in: Optional[datetime] = None
    actual_time_out: Optional[datetime] = None
    bio_in_site_id: Optional[int] = None
    bio_out_site_id: Optional[int] = None
    secondary_status: Optional[SecondaryStatus] = None
    tardy_minutes: Optional[int] = None
    undertime_minutes: Optional[int] = None
    is_cross_site_bio: bool = False
    warnings: tuple[str, ...] = ()
    admin_verified: bool = False

    def to_dict(self) -> dict:
        return {
            "record_id": self.record_id,
            "employee_id": self.employee_id,
            "schedule_id": self.schedule_id,
            "shift_date": self.shift_date.isoformat(),
            "scheduled_time_in": self.scheduled_time_in.isoformat(),
            "scheduled_time_out": self.scheduled_time_out.isoformat(),
            "actual_time_in": self.actual_time_in.isoformat() if self.actual_time_in else None,
            "actual_time_out": self.actual_time_out.isoformat() if self.actual_time_out else None,
            "bio_in_site_id": self.bio_in_site_id,
            "bio_out_site_id": self.bio_out_site_id,
            "status": self.status.value,
            "secondary_status": self.secondary_status.value if self.secondary_status else None,
            "tardy_minutes": self.tardy_minutes,
            "undertime_minutes": self.undertime_minutes,
            "is_cross_site_bio": self.is_cross_site_bio,
            "warnings": list(self.warnings),
            "admin_verified": self.admin_verified,
        }


@dataclass(frozen=True)
class ShiftContext:
    """Everything the status rules look at for one shift-date."""

    window: ShiftWindow
    grace_period_minutes: int
    actual_in: Optional[datetime] = None
    actual_out: Optional[datetime] = None
    tardy_minutes: Optional[int] = None
    undertime_minutes: Optional[int] = None
    anomalies: tuple[str, ...] = ()

    @property
    def has_in(self) -> bool:
        return self.actual_in is not None

    @property
    def has_out(self) -> bool:
        return self.actual_out is not None
