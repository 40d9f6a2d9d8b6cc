from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from ..core.enums import ShiftType


@dataclass(frozen=True)
class ShiftProfile:
    shift_type: ShiftType
    is_next_day: bool


@dataclass(frozen=True)
class ShiftWindow:
    """Concrete scheduled window of one logical shift-date.

    ``scheduled_out`` already lies on the following calendar day for next-day shifts.
    """

    shift_date: date
    scheduled_in: datetime
    scheduled_out: datetime

    @property
    def midpoint(self) -> datetime:
        return self.scheduled_in + (self.scheduled_out - self.scheduled_in) / 2
