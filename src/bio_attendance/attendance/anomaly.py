from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import whole_minutes_between
from ..core.constants import (
    REVIEW_EARLY_IN_MINUTES,
    REVIEW_EARLY_OUT_MINUTES,
    REVIEW_LATE_IN_MINUTES,
    REVIEW_LATE_OUT_MINUTES,
    REVIEW_SPARSE_SCAN_COUNT,
    REVIEW_SPARSE_SCAN_DISTANCE_MINUTES,
)
from ..shifts.model import ShiftWindow


def detect_extreme_scans(
    scan_times: Sequence[datetime],
    window: ShiftWindow,
    actual_in: Optional[datetime],
    actual_out: Optional[datetime],
) -> list[str]:
    """Return one warning per extreme pattern; any warning means the record needs manual review."""
    warnings: list[str] = []
    fmt = "%Y-%m-%d %H:%M"

    if scan_times and len(scan_times) <= REVIEW_SPARSE_SCAN_COUNT:
        far = all(
            abs(whole_minutes_between(t, window.scheduled_in)) > REVIEW_SPARSE_SCAN_DISTANCE_MINUTES
            and abs(whole_minutes_between(t, window.scheduled_out)) > REVIEW_SPARSE_SCAN_DISTANCE_MINUTES
            for t in scan_times
        )
        if far:
            warnings.append(
                "Only {} scan(s) ({}), all more than {}h from scheduled {}-{}".format(
                    len(scan_times),
                    ", ".join(t.strftime(fmt) for t in scan_times),
                    REVIEW_SPARSE_SCAN_DISTANCE_MINUTES // 60,
                    window.scheduled_in.strftime(fmt),
                    window.scheduled_out.strftime(fmt),
                )
            )

    if actual_in is not None:
        early = whole_minutes_between(actual_in, window.scheduled_in)
        if early > REVIEW_EARLY_IN_MINUTES:
            warnings.append(f"Time-in {actual_in.strftime(fmt)} is {early} minutes before scheduled start")
        late = whole_minutes_between(window.scheduled_in, actual_in)
        if late > REVIEW_LATE_IN_MINUTES:
            warnings.append(f"Time-in {actual_in.strftime(fmt)} is {late} minutes after scheduled start")

    if actual_out is not None:
        late = whole_minutes_between(window.scheduled_out, actual_out)
        if late > REVIEW_LATE_OUT_MINUTES:
            warnings.append(f"Time-out {actual_out.strftime(fmt)} is {late} minutes after scheduled end")
        early = whole_minutes_between(actual_out, window.scheduled_out)
        if early > REVIEW_EARLY_OUT_MINUTES:
            warnings.append(f"Time-out {actual_out.strftime(fmt)} is {early} minutes before scheduled end")

    if scan_times and actual_in is None and actual_out is None:
        warnings.append(f"{len(scan_times)} scan(s) could not be paired to a time-in or time-out")

    return warnings
