from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from typing import Optional

from ..core.constants import DEFAULT_GRACE_PERIOD_MINUTES
from ..core.enums import Weekday


@dataclass(frozen=True)
class Employee:
    """Directory entity: employee (read-only for this core)."""

    employee_id: int
    first_name: str
    last_name: str
    middle_name: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class EmployeeSchedule:
    """Directory entity: an employee's assigned shift at a site."""

    schedule_id: int
    employee_id: int
    site_id: Optional[int]
    scheduled_time_in: time
    scheduled_time_out: time
    grace_period_minutes: int = DEFAULT_GRACE_PERIOD_MINUTES
    work_days: frozenset[Weekday] = field(default_factory=lambda: frozenset(Weekday))
    is_active: bool = True
    effective_date: Optional[date] = None
    end_date: Optional[date] = None

    def works_on(self, day: date) -> bool:
        return Weekday.from_index(day.weekday()) in self.work_days

    def is_effective_on(self, day: date) -> bool:
        if not self.is_active:
            return False
        if self.effective_date and day < self.effective_date:
            return False
        if self.end_date and day > self.end_date:
            return False
        return True
