from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord, ResolvedAttendance


class AttendanceRepository(Protocol):
    def upsert(self, resolved: ResolvedAttendance) -> int:
        """Insert or fully overwrite the record for ``resolved.key``; returns its record_id.

        Must run in one transaction holding a row lock on the key and must not touch
        ``admin_verified``.
        """

        raise NotImplementedError

    def insert_if_absent(self, resolved: ResolvedAttendance) -> Optional[int]:
        """Insert ``resolved`` only when the employee has no record for the shift-date yet.

        Returns the new record_id, or None when any record (from any batch or schedule) exists.
        """

        raise NotImplementedError

    def get(self, employee_id: int, shift_date: date, schedule_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_employee_date(self, employee_id: int, shift_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
