from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import date, datetime, time
from typing import Optional, Sequence

from bio_attendance.attendance.model import AttendanceRecord, ResolvedAttendance
from bio_attendance.core.enums import Weekday
from bio_attendance.directory.model import Employee, EmployeeSchedule
from bio_attendance.scans.model import ScanEvent
from bio_attendance.scans.parser import normalize_name

WEEKDAYS = frozenset(
    [Weekday.MONDAY, Weekday.TUESDAY, Weekday.WEDNESDAY, Weekday.THURSDAY, Weekday.FRIDAY]
)

# 2025-11-05 is a Wednesday, 2025-11-08 a Saturday.
WED = date(2025, 11, 5)
THU = date(2025, 11, 6)
SAT = date(2025, 11, 8)


def at(value: str) -> datetime:
    return datetime.strptime(value, "%Y-%m-%d %H:%M:%S" if value.count(":") == 2 else "%Y-%m-%d %H:%M")


def make_scan(name: str, when: str, *, device_id: str = "1") -> ScanEvent:
    return ScanEvent(raw_name=name, name_token=normalize_name(name), device_id=device_id, timestamp=at(when))


def make_schedule(
    schedule_id: int,
    employee_id: int,
    time_in: str,
    time_out: str,
    *,
    site_id: Optional[int] = 1,
    grace: int = 15,
    work_days=WEEKDAYS,
    effective_date: Optional[date] = None,
) -> EmployeeSchedule:
    return EmployeeSchedule(
        schedule_id=schedule_id,
        employee_id=employee_id,
        site_id=site_id,
        scheduled_time_in=time.fromisoformat(time_in),
        scheduled_time_out=time.fromisoformat(time_out),
        grace_period_minutes=grace,
        work_days=work_days,
        effective_date=effective_date,
    )


@dataclass
class InMemoryDirectory:
    employees: list[Employee]
    schedules: list[EmployeeSchedule]

    def list_employees(self) -> Sequence[Employee]:
        return list(self.employees)

    def get_employee(self, employee_id: int) -> Optional[Employee]:
        return next((e for e in self.employees if e.employee_id == employee_id), None)

    def list_active_schedules(self) -> Sequence[EmployeeSchedule]:
        return [s for s in self.schedules if s.is_active]

    def active_schedules_for_date(self, work_date: date) -> Sequence[EmployeeSchedule]:
        return [s for s in self.schedules if s.is_effective_on(work_date)]


@dataclass
class InMemorySites:
    device_sites: dict[str, int] = field(default_factory=dict)

    def site_for_device(self, device_id: str) -> Optional[int]:
        return self.device_sites.get(device_id)


class InMemoryAttendance:
    """Full-overwrite upsert keyed like the real table; keeps admin_verified."""

    def __init__(self):
        self.records: dict[tuple[int, date, int], AttendanceRecord] = {}
        self.upserts = 0
        self._id = 0

    def upsert(self, resolved: ResolvedAttendance) -> int:
        self.upserts += 1
        existing = self.records.get(resolved.key)
        if existing:
            record_id, admin_verified = existing.record_id, existing.admin_verified
        else:
            self._id += 1
            record_id, admin_verified = self._id, False

        self.records[resolved.key] = AttendanceRecord(
            record_id=record_id,
            admin_verified=admin_verified,
            **{f.name: getattr(resolved, f.name) for f in fields(resolved)},
        )
        return record_id

    def insert_if_absent(self, resolved: ResolvedAttendance) -> Optional[int]:
        if self.list_for_employee_date(resolved.employee_id, resolved.shift_date):
            return None
        return self.upsert(resolved)

    def get(self, employee_id: int, shift_date: date, schedule_id: int) -> Optional[AttendanceRecord]:
        return self.records.get((employee_id, shift_date, schedule_id))

    def list_for_employee_date(self, employee_id: int, shift_date: date) -> Sequence[AttendanceRecord]:
        return [r for (e, d, _), r in sorted(self.records.items()) if e == employee_id and d == shift_date]

    def verify(self, key: tuple[int, date, int]) -> None:
        self.records[key] = replace(self.records[key], admin_verified=True)

