from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ...core.enums import AttendanceStatus, SecondaryStatus
from ..model import ShiftContext


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    secondary_status: Optional[SecondaryStatus] = None


class StatusRule(ABC):
    """Strategy Pattern: one row of the status table."""

    @abstractmethod
    def applies(self, ctx: ShiftContext) -> bool:
        raise NotImplementedError

    @abstractmethod
    def decide(self, ctx: ShiftContext) -> StatusDecision:
        raise NotImplementedError
