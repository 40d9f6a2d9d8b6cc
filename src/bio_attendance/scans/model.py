from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class ScanEvent:
    """One biometric scan as read from the export file (never persisted directly)."""

    raw_name: str
    name_token: str
    device_id: str
    timestamp: datetime
    line_no: int = 0
    mode: Optional[str] = None
    device_user_id: Optional[str] = None

    @property
    def calendar_date(self) -> date:
        return self.timestamp.date()


@dataclass(frozen=True)
class ParsedScanFile:
    events: tuple[ScanEvent, ...]
    skipped_lines: tuple[str, ...] = ()


@dataclass(frozen=True)
class DateRangeSplit:
    within_range: tuple[ScanEvent, ...]
    outside_range: tuple[ScanEvent, ...]
    extended_date_to: date


@dataclass(frozen=True)
class FileDateCheck:
    dates_found: tuple[date, ...]
    expected_dates: tuple[date, ...]
    warnings: tuple[str, ...] = field(default_factory=tuple)


class AnomalyKind(str, Enum):
    SIMULTANEOUS_SITES = "simultaneous_sites"
    DUPLICATE_SCANS = "duplicate_scans"
    UNUSUAL_HOURS = "unusual_hours"
    EXCESSIVE_SCANS = "excessive_scans"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class ScanAnomaly:
    """Suspicious scan pattern found across a whole file (informational, never fatal)."""

    kind: AnomalyKind
    severity: Severity
    name_token: str
    description: str
    timestamps: tuple[datetime, ...] = ()

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "severity": self.severity.value,
            "name_token": self.name_token,
            "description": self.description,
            "timestamps": [t.isoformat() for t in self.timestamps],
        }
