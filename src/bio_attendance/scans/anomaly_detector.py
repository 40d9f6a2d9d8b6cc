from __future__ import annotations

import logging
from collections import Counter
from typing import Callable, Mapping, Optional, Sequence

from ..core.constants import MAX_SCANS_PER_DAY, MAX_TRAVEL_MINUTES, UNUSUAL_HOUR_END, UNUSUAL_HOUR_START
from .model import AnomalyKind, ScanAnomaly, ScanEvent, Severity

logger = logging.getLogger(__name__)

SiteLookup = Callable[[ScanEvent], Optional[int]]


class ScanAnomalyDetector:
    """Flags suspicious scan patterns per person across a file.

    These are reported alongside the batch result; they do not change any attendance status.
    """

    def __init__(self, site_of: SiteLookup):
        self._site_of = site_of

    def detect(self, events_by_token: Mapping[str, Sequence[ScanEvent]]) -> list[ScanAnomaly]:
        anomalies: list[ScanAnomaly] = []
        for token, events in events_by_token.items():
            ordered = sorted(events, key=lambda e: e.timestamp)
            anomalies.extend(self._simultaneous_sites(token, ordered))
            anomalies.extend(self._duplicate_scans(token, ordered))
            anomalies.extend(self._unusual_hours(token, ordered))
            anomalies.extend(self._excessive_scans(token, ordered))

        if anomalies:
            logger.info("Detected %d scan anomalies across %d names", len(anomalies), len(events_by_token))
        return anomalies

    def _simultaneous_sites(self, token: str, events: Sequence[ScanEvent]) -> list[ScanAnomaly]:
        found: list[ScanAnomaly] = []
        for current, following in zip(events, events[1:]):
            site_a, site_b = self._site_of(current), self._site_of(following)
            if site_a is None or site_b is None or site_a == site_b:
                continue
            minutes_apart = int((following.timestamp - current.timestamp).total_seconds() // 60)
            if minutes_apart < MAX_TRAVEL_MINUTES:
                found.append(
                    ScanAnomaly(
                        kind=AnomalyKind.SIMULTANEOUS_SITES,
                        severity=Severity.HIGH if minutes_apart < 10 else Severity.MEDIUM,
                        name_token=token,
                        description=f"Bio at {minutes_apart} minutes apart at different sites ({site_a}, {site_b})",
                        timestamps=(current.timestamp, following.timestamp),
                    )
                )
        return found

    def _duplicate_scans(self, token: str, events: Sequence[ScanEvent]) -> list[ScanAnomaly]:
        per_minute = Counter(e.timestamp.replace(second=0, microsecond=0) for e in events)
        return [
            ScanAnomaly(
                kind=AnomalyKind.DUPLICATE_SCANS,
                severity=Severity.HIGH if count > 3 else Severity.LOW,
                name_token=token,
                description=f"{count} scans within same minute",
                timestamps=(minute,),
            )
            for minute, count in sorted(per_minute.items())
            if count > 1
        ]

    def _unusual_hours(self, token: str, events: Sequence[ScanEvent]) -> list[ScanAnomaly]:
        return [
            ScanAnomaly(
                kind=AnomalyKind.UNUSUAL_HOURS,
                severity=Severity.LOW,
                name_token=token,
                description=f"Scan at unusual hour ({e.timestamp:%H:%M})",
                timestamps=(e.timestamp,),
            )
            for e in events
            if UNUSUAL_HOUR_START <= e.timestamp.hour < UNUSUAL_HOUR_END
        ]

    def _excessive_scans(self, token: str, events: Sequence[ScanEvent]) -> list[ScanAnomaly]:
        per_day = Counter(e.calendar_date for e in events)
        return [
            ScanAnomaly(
                kind=AnomalyKind.EXCESSIVE_SCANS,
                severity=Severity.HIGH if count > 10 else Severity.MEDIUM,
                name_token=token,
                description=f"{count} scans on {day.isoformat()} (expected <= {MAX_SCANS_PER_DAY})",
            )
            for day, count in sorted(per_day.items())
            if count > MAX_SCANS_PER_DAY
        ]
