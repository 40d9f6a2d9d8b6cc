from __future__ import annotations

import json
from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..core.enums import AttendanceStatus, SecondaryStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord, ResolvedAttendance
from .repository import AttendanceRepository

_COLUMNS = """
    record_id, employee_id, schedule_id, shift_date, scheduled_time_in, scheduled_time_out,
    actual_time_in, actual_time_out, bio_in_site_id, bio_out_site_id, status, secondary_status,
    tardy_minutes, undertime_minutes, is_cross_site_bio, warnings, admin_verified
"""


def _core_values(r: ResolvedAttendance) -> tuple:
    return (
        r.scheduled_time_in,
        r.scheduled_time_out,
        r.actual_time_in,
        r.actual_time_out,
        r.bio_in_site_id,
        r.bio_out_site_id,
        r.status.value,
        r.secondary_status.value if r.secondary_status else None,
        r.tardy_minutes,
        r.undertime_minutes,
        1 if r.is_cross_site_bio else 0,
        json.dumps(list(r.warnings)) if r.warnings else None,
    )


def _insert(cur, r: ResolvedAttendance) -> int:
    cur.execute(
        """
        INSERT INTO attendance_records(
            employee_id, shift_date, schedule_id,
            scheduled_time_in, scheduled_time_out, actual_time_in, actual_time_out,
            bio_in_site_id, bio_out_site_id, status, secondary_status,
            tardy_minutes, undertime_minutes, is_cross_site_bio, warnings
        )
        VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
        """,
        r.key + _core_values(r),
    )
    return int(cur.lastrowid)


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=int(r["record_id"]),
        employee_id=int(r["employee_id"]),
        schedule_id=int(r["schedule_id"]),
        shift_date=r["shift_date"],
        scheduled_time_in=r["scheduled_time_in"],
        scheduled_time_out=r["scheduled_time_out"],
        actual_time_in=r.get("actual_time_in"),
        actual_time_out=r.get("actual_time_out"),
        bio_in_site_id=r.get("bio_in_site_id"),
        bio_out_site_id=r.get("bio_out_site_id"),
        status=AttendanceStatus(r["status"]),
        secondary_status=SecondaryStatus(r["secondary_status"]) if r.get("secondary_status") else None,
        tardy_minutes=r.get("tardy_minutes"),
        undertime_minutes=r.get("undertime_minutes"),
        is_cross_site_bio=bool(r.get("is_cross_site_bio")),
        warnings=tuple(json.loads(r["warnings"])) if r.get("warnings") else (),
        admin_verified=bool(r.get("admin_verified")),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert(self, resolved: ResolvedAttendance) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT record_id
                FROM attendance_records
                WHERE employee_id=%s AND shift_date=%s AND schedule_id=%s
                FOR UPDATE
                """,
                resolved.key,
            )
            existing = fetchone(cur)
            if existing:
                record_id = int(existing["record_id"])
                cur.execute(
                    """
                    UPDATE attendance_records
                    SET scheduled_time_in=%s, scheduled_time_out=%s,
                        actual_time_in=%s, actual_time_out=%s,
                        bio_in_site_id=%s, bio_out_site_id=%s,
                        status=%s, secondary_status=%s,
                        tardy_minutes=%s, undertime_minutes=%s,
                        is_cross_site_bio=%s, warnings=%s
                    WHERE record_id=%s
                    """,
                    _core_values(resolved) + (record_id,),
                )
                return record_id

            return _insert(cur, resolved)

    def insert_if_absent(self, resolved: ResolvedAttendance) -> Optional[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT record_id
                FROM attendance_records
                WHERE employee_id=%s AND shift_date=%s
                LIMIT 1
                FOR UPDATE
                """,
                (resolved.employee_id, resolved.shift_date),
            )
            if fetchone(cur):
                return None

            return _insert(cur, resolved)

    def get(self, employee_id: int, shift_date: date, schedule_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s AND shift_date=%s AND schedule_id=%s
                """,
                (employee_id, shift_date, schedule_id),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_for_employee_date(self, employee_id: int, shift_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s AND shift_date=%s
                ORDER BY schedule_id ASC
                """,
                (employee_id, shift_date),
            )
            return [_to_record(r) for r in fetchall(cur)]
