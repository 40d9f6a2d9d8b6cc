from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Employee, EmployeeSchedule


class DirectoryRepository(Protocol):
    """Read-only employee/schedule directory owned by another system."""

    def list_employees(self) -> Sequence[Employee]:
        raise NotImplementedError

    def get_employee(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def list_active_schedules(self) -> Sequence[EmployeeSchedule]:
        raise NotImplementedError

    def active_schedules_for_date(self, work_date: date) -> Sequence[EmployeeSchedule]:
        raise NotImplementedError


class SiteRegistry(Protocol):
    def site_for_device(self, device_id: str) -> Optional[int]:
        """Site where a device is installed, or None when the device is unknown."""

        raise NotImplementedError
