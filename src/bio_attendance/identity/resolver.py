"""Name token -> employee resolution.

Biometric devices store truncated names: a bare surname when it is unique, the surname plus
a first initial when it is not ("cabarliza a"), and two letters when initials collide
("robinios je" / "robinios jo"). Resolution narrows candidates in that order and only then
falls back to comparing scan times with each candidate's shift edges.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import circular_minute_distance, minute_of_day
from ..directory.model import Employee, EmployeeSchedule
from ..directory.snapshot import DirectorySnapshot
from ..scans.parser import normalize_name
from .model import IdentityResult, MatchStep, Resolved, Unresolved, UnresolvedReason

logger = logging.getLogger(__name__)


def resolve_identity(
    token: str,
    snapshot: DirectorySnapshot,
    scan_times: Sequence[datetime] = (),
) -> IdentityResult:
    token = normalize_name(token)
    if not token:
        return Unresolved(token=token, reason=UnresolvedReason.EMPTY_TOKEN, detail="empty name token")

    suffix, candidates = _match_last_name(token.split(), snapshot)
    if not candidates:
        return Unresolved(token=token, reason=UnresolvedReason.NO_MATCH, detail="no employee with this last name")
    if len(candidates) == 1:
        return Resolved(token=token, employee=candidates[0], matched_by=MatchStep.LAST_NAME)

    if suffix:
        first_word = suffix.split()[0]
        steps = [(first_word[:1], MatchStep.FIRST_INITIAL), (first_word[:2], MatchStep.FIRST_TWO_LETTERS)]
        if len(first_word) > 2:
            steps.append((first_word, MatchStep.FIRST_NAME_PREFIX))

        for prefix, step in steps:
            narrowed = [c for c in candidates if _first_name_key(c).startswith(prefix)]
            if not narrowed:
                return Unresolved(
                    token=token,
                    reason=UnresolvedReason.NO_MATCH,
                    detail=f"no employee with this last name and first name starting {prefix!r}",
                )
            if len(narrowed) == 1:
                return Resolved(token=token, employee=narrowed[0], matched_by=step)
            candidates = narrowed

    best = _closest_by_shift_time(candidates, snapshot, scan_times)
    if best is not None:
        return Resolved(token=token, employee=best, matched_by=MatchStep.SHIFT_AFFINITY)

    names = ", ".join(sorted(c.full_name for c in candidates))
    return Unresolved(token=token, reason=UnresolvedReason.AMBIGUOUS, detail=f"matches {len(candidates)} employees: {names}")


def shift_affinity_cost(scan_times: Sequence[datetime], schedule: EmployeeSchedule) -> int:
    """Total minutes between each scan and the nearer edge of the shift, on a 24h clock."""
    edges = (minute_of_day(schedule.scheduled_time_in), minute_of_day(schedule.scheduled_time_out))
    return sum(min(circular_minute_distance(minute_of_day(t), edge) for edge in edges) for t in scan_times)


def _match_last_name(words: list[str], snapshot: DirectorySnapshot) -> tuple[str, tuple[Employee, ...]]:
    # "surname [first...]": longest leading run wins so "dela cruz j" matches "Dela Cruz".
    for k in range(len(words), 0, -1):
        found = snapshot.with_last_name(" ".join(words[:k]))
        if found:
            return " ".join(words[k:]), found

    # "first [middle] surname"
    for k in range(1, len(words)):
        found = snapshot.with_last_name(" ".join(words[k:]))
        if found:
            return " ".join(words[:k]), found

    return "", ()


def _first_name_key(employee: Employee) -> str:
    return normalize_name(employee.first_name)


def _closest_by_shift_time(
    candidates: Sequence[Employee],
    snapshot: DirectorySnapshot,
    scan_times: Sequence[datetime],
) -> Optional[Employee]:
    if not scan_times:
        return None

    scored: list[tuple[int, Employee]] = []
    for employee in candidates:
        schedule = snapshot.active_schedule_for(employee.employee_id)
        if schedule is None:
            continue
        scored.append((shift_affinity_cost(scan_times, schedule), employee))

    if not scored:
        return None

    scored.sort(key=lambda pair: pair[0])
    if len(scored) > 1 and scored[0][0] == scored[1][0]:
        logger.debug("Shift affinity tie at %d minutes for %d candidates", scored[0][0], len(scored))
        return None
    return scored[0][1]
