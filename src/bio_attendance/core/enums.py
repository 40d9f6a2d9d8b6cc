from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Final status of one attendance record (stored as-is in the DB)."""

    ON_TIME = "on_time"
    TARDY = "tardy"
    HALF_DAY_ABSENCE = "half_day_absence"
    NCNS = "ncns"
    FAILED_BIO_IN = "failed_bio_in"
    FAILED_BIO_OUT = "failed_bio_out"
    NEEDS_MANUAL_REVIEW = "needs_manual_review"
    NON_WORK_DAY = "non_work_day"


class SecondaryStatus(str, Enum):
    """Qualifier stored next to the primary status."""

    TARDY = "tardy"
    HALF_DAY_ABSENCE = "half_day_absence"
    UNDERTIME = "undertime"
    UNDERTIME_MORE_THAN_HOUR = "undertime_more_than_hour"


class ShiftType(str, Enum):
    GRAVEYARD = "graveyard"
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"


class Weekday(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def from_index(cls, index: int) -> "Weekday":
        """Map ``date.weekday()`` (Monday=0) to a Weekday."""
        return list(cls)[index]


class WarningKind(str, Enum):
    """Categories of itemized batch warnings."""

    PARSE_ERROR = "parse_error"
    UNRESOLVED_IDENTITY = "unresolved_identity"
    NO_ACTIVE_SCHEDULE = "no_active_schedule"
    ANOMALOUS_SCAN = "anomalous_scan"
    DATE_MISMATCH = "date_mismatch"
    NON_WORK_DAY = "non_work_day"
