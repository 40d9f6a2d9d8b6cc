from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..core.enums import WarningKind
from ..scans.model import ScanAnomaly


@dataclass(frozen=True)
class BatchRequest:
    """What the uploader told us about the file."""

    biometric_site_id: Optional[int] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    shift_date: Optional[date] = None


@dataclass(frozen=True)
class BatchWarning:
    kind: WarningKind
    message: str

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "message": self.message}


@dataclass
class BatchResult:
    processed_count: int = 0
    skipped_lines: list[str] = field(default_factory=list)
    unresolved_names: list[str] = field(default_factory=list)
    records_written: list[int] = field(default_factory=list)
    warnings: list[BatchWarning] = field(default_factory=list)
    dates_found: list[date] = field(default_factory=list)
    non_work_day_scans: int = 0
    anomalies: list[ScanAnomaly] = field(default_factory=list)

    def warn(self, kind: WarningKind, message: str) -> None:
        self.warnings.append(BatchWarning(kind=kind, message=message))

    def to_dict(self) -> dict:
        return {
            "processed_count": self.processed_count,
            "skipped_lines": list(self.skipped_lines),
            "unresolved_names": list(self.unresolved_names),
            "records_written": list(self.records_written),
            "warnings": [w.to_dict() for w in self.warnings],
            "dates_found": [d.isoformat() for d in self.dates_found],
            "non_work_day_scans": self.non_work_day_scans,
            "anomalies": [a.to_dict() for a in self.anomalies],
        }
