from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Sequence

from ..scans.parser import normalize_name
from .model import Employee, EmployeeSchedule
from .repository import DirectoryRepository


@dataclass(frozen=True)
class DirectorySnapshot:
    """Immutable view of employees and their active schedules for one batch.

    Passed explicitly to the identity resolver so name matching never reads global state.
    """

    employees: tuple[Employee, ...]
    schedules: tuple[EmployeeSchedule, ...]
    _by_last_name: dict[str, tuple[Employee, ...]] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        index: dict[str, list[Employee]] = {}
        active_ids = {s.employee_id for s in self.schedules if s.is_active}
        for employee in self.employees:
            if active_ids and employee.employee_id not in active_ids:
                continue
            index.setdefault(normalize_name(employee.last_name), []).append(employee)
        object.__setattr__(self, "_by_last_name", {k: tuple(v) for k, v in index.items()})

    @classmethod
    def load(cls, directory: DirectoryRepository) -> "DirectorySnapshot":
        return cls(employees=tuple(directory.list_employees()), schedules=tuple(directory.list_active_schedules()))

    def with_last_name(self, last_name: str) -> tuple[Employee, ...]:
        return self._by_last_name.get(normalize_name(last_name), ())

    def employee(self, employee_id: int) -> Optional[Employee]:
        for e in self.employees:
            if e.employee_id == employee_id:
                return e
        return None

    def schedules_for(self, employee_id: int) -> Sequence[EmployeeSchedule]:
        return [s for s in self.schedules if s.employee_id == employee_id and s.is_active]

    def active_schedule_for(self, employee_id: int, on: Optional[date] = None) -> Optional[EmployeeSchedule]:
        """First active schedule for the employee; restricted to those effective on ``on`` if given."""
        for schedule in self.schedules_for(employee_id):
            if on is None or schedule.is_effective_on(on):
                return schedule
        return None
