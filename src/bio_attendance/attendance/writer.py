from __future__ import annotations

import logging
import threading
from collections.abc import Hashable
from contextlib import contextmanager
from typing import Iterator, Optional

from .model import ResolvedAttendance
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class KeyedLock:
    """One lock per key; writers on different keys never wait for each other."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[Hashable, threading.Lock] = {}

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
        with lock:
            yield


class AttendanceWriter:
    """Persists ResolvedAttendance values as full overwrites of the stored record."""

    def __init__(self, repo: AttendanceRepository, *, locks: KeyedLock | None = None):
        self._repo = repo
        self._locks = locks or KeyedLock()

    def write(self, resolved: ResolvedAttendance) -> int:
        with self._locks.hold(resolved.key):
            record_id = self._repo.upsert(resolved)
        logger.debug(
            "Wrote record %s for employee %s shift %s: %s",
            record_id,
            resolved.employee_id,
            resolved.shift_date,
            resolved.status.value,
        )
        return record_id

    def write_absence(self, resolved: ResolvedAttendance) -> Optional[int]:
        """Records an absence unless the employee already has a record for that shift-date."""
        with self._locks.hold((resolved.employee_id, resolved.shift_date)):
            record_id = self._repo.insert_if_absent(resolved)
        if record_id is None:
            logger.debug(
                "Employee %s already has a record for %s; absence not written",
                resolved.employee_id,
                resolved.shift_date,
            )
        return record_id
