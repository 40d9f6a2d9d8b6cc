from __future__ import annotations

import pytest

from support import InMemoryAttendance


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()
