from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..core.constants import DEFAULT_GRACE_PERIOD_MINUTES
from ..core.enums import Weekday
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import Employee, EmployeeSchedule
from .repository import DirectoryRepository, SiteRegistry

_SCHEDULE_COLUMNS = """
    s.schedule_id, s.employee_id, s.site_id, s.scheduled_time_in, s.scheduled_time_out,
    s.grace_period_minutes, s.work_days, s.is_active, s.effective_date, s.end_date
"""


def parse_work_days(value: Optional[str]) -> frozenset[Weekday]:
    """Stored as a comma list ("monday,tuesday"); empty means every day."""
    if not value:
        return frozenset(Weekday)
    return frozenset(Weekday(part.strip().lower()) for part in value.split(",") if part.strip())


def _to_schedule(r: Dict[str, Any], default_grace_minutes: int) -> EmployeeSchedule:
    grace = r.get("grace_period_minutes")
    return EmployeeSchedule(
        schedule_id=int(r["schedule_id"]),
        employee_id=int(r["employee_id"]),
        site_id=int(r["site_id"]) if r.get("site_id") is not None else None,
        scheduled_time_in=normalize_mysql_time(r["scheduled_time_in"]),
        scheduled_time_out=normalize_mysql_time(r["scheduled_time_out"]),
        grace_period_minutes=int(grace) if grace is not None else default_grace_minutes,
        work_days=parse_work_days(r.get("work_days")),
        is_active=bool(r["is_active"]),
        effective_date=r.get("effective_date"),
        end_date=r.get("end_date"),
    )


def _to_employee(r: Dict[str, Any]) -> Employee:
    return Employee(
        employee_id=int(r["employee_id"]),
        first_name=r["first_name"],
        last_name=r["last_name"],
        middle_name=r.get("middle_name"),
    )


class MySQLDirectoryRepository(DirectoryRepository, SiteRegistry):
    """Read-only access to the HR tables; this core never writes them."""

    def __init__(self, conn_factory: DatabaseConnection, *, default_grace_minutes: int = DEFAULT_GRACE_PERIOD_MINUTES):
        self._conn_factory = conn_factory
        self._default_grace_minutes = default_grace_minutes

    def list_employees(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, first_name, last_name, middle_name
                FROM employees
                WHERE is_active=1
                ORDER BY employee_id
                """
            )
            return [_to_employee(r) for r in fetchall(cur)]

    def get_employee(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, first_name, last_name, middle_name
                FROM employees
                WHERE employee_id=%s
                """,
                (employee_id,),
            )
            r = fetchone(cur)
            return _to_employee(r) if r else None

    def list_active_schedules(self) -> Sequence[EmployeeSchedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SCHEDULE_COLUMNS}
                FROM employee_schedules s
                JOIN employees e ON e.employee_id = s.employee_id AND e.is_active=1
                WHERE s.is_active=1
                ORDER BY s.employee_id, s.effective_date DESC, s.schedule_id DESC
                """
            )
            return [_to_schedule(r, self._default_grace_minutes) for r in fetchall(cur)]

    def active_schedules_for_date(self, work_date: date) -> Sequence[EmployeeSchedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SCHEDULE_COLUMNS}
                FROM employee_schedules s
                JOIN employees e ON e.employee_id = s.employee_id AND e.is_active=1
                WHERE s.is_active=1
                  AND (s.effective_date IS NULL OR s.effective_date <= %s)
                  AND (s.end_date IS NULL OR s.end_date >= %s)
                ORDER BY s.employee_id, s.effective_date DESC, s.schedule_id DESC
                """,
                (work_date, work_date),
            )
            return [_to_schedule(r, self._default_grace_minutes) for r in fetchall(cur)]

    def site_for_device(self, device_id: str) -> Optional[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT site_id FROM biometric_devices WHERE device_id=%s", (device_id,))
            r = fetchone(cur)
            return int(r["site_id"]) if r else None
