from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime

import pytest

from bio_attendance.attendance.model import ResolvedAttendance
from bio_attendance.attendance.mysql_attendance_repository import MySQLAttendanceRepository
from bio_attendance.attendance.writer import AttendanceWriter, KeyedLock
from bio_attendance.core.enums import AttendanceStatus, SecondaryStatus

D = date(2025, 11, 5)

FULL = ResolvedAttendance(
    employee_id=1,
    schedule_id=10,
    shift_date=D,
    scheduled_time_in=datetime(2025, 11, 5, 8, 0),
    scheduled_time_out=datetime(2025, 11, 5, 17, 0),
    status=AttendanceStatus.TARDY,
    actual_time_in=datetime(2025, 11, 5, 8, 20),
    actual_time_out=datetime(2025, 11, 5, 16, 30),
    bio_in_site_id=1,
    bio_out_site_id=2,
    secondary_status=SecondaryStatus.UNDERTIME,
    tardy_minutes=20,
    undertime_minutes=30,
    is_cross_site_bio=True,
    warnings=("Double punch",),
)


def test_rewrite_overwrites_every_field_and_keeps_admin_flag(attendance_repo):
    writer = AttendanceWriter(attendance_repo)
    record_id = writer.write(FULL)
    attendance_repo.verify(FULL.key)

    # Corrected file: time-out is gone.
    less = ResolvedAttendance(
        employee_id=1,
        schedule_id=10,
        shift_date=D,
        scheduled_time_in=FULL.scheduled_time_in,
        scheduled_time_out=FULL.scheduled_time_out,
        status=AttendanceStatus.FAILED_BIO_OUT,
        actual_time_in=FULL.actual_time_in,
        bio_in_site_id=1,
        secondary_status=SecondaryStatus.TARDY,
        tardy_minutes=20,
    )
    assert writer.write(less) == record_id

    rec = attendance_repo.get(1, D, 10)
    assert rec.status == AttendanceStatus.FAILED_BIO_OUT
    assert rec.actual_time_out is None
    assert rec.bio_out_site_id is None
    assert rec.undertime_minutes is None
    assert rec.is_cross_site_bio is False
    assert rec.warnings == ()
    assert rec.admin_verified is True
    assert len(attendance_repo.records) == 1


def test_keyed_lock_serializes_same_key(attendance_repo):
    writer = AttendanceWriter(attendance_repo, locks=KeyedLock())
    ids: list[int] = []

    def work():
        ids.append(writer.write(FULL))

    threads = [threading.Thread(target=work) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert set(ids) == {1}
    assert attendance_repo.upserts == 8


def test_keyed_lock_separates_keys():
    locks = KeyedLock()
    entered = threading.Event()

    with locks.hold((1, D, 10)):
        t = threading.Thread(target=lambda: _enter(locks, (2, D, 10), entered))
        t.start()
        t.join(timeout=2)

    assert entered.is_set()


def _enter(locks: KeyedLock, key, event: threading.Event) -> None:
    with locks.hold(key):
        event.set()


class FakeCursor:
    def __init__(self, existing):
        self._existing = existing
        self.statements: list[tuple[str, tuple]] = []
        self.lastrowid = 42
        self.closed = False

    def execute(self, sql, params=()):
        self.statements.append((" ".join(sql.split()), tuple(params)))

    def fetchone(self):
        return self._existing

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, cursor: FakeCursor):
        self._cursor = cursor
        self.committed = False
        self.rolled_back = False
        self.isolation_level = None

    def start_transaction(self, isolation_level=None):
        self.isolation_level = isolation_level

    def cursor(self, dictionary=False):
        return self._cursor

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        pass


class FakeConnFactory:
    isolation_level = "REPEATABLE READ"

    def __init__(self, existing=None):
        self.cursor = FakeCursor(existing)
        self.conn = FakeConnection(self.cursor)

    def connect(self):
        return self.conn


def test_mysql_upsert_inserts_new_key_under_row_lock():
    factory = FakeConnFactory(existing=None)

    record_id = MySQLAttendanceRepository(factory).upsert(FULL)

    assert record_id == 42
    select_sql, select_params = factory.cursor.statements[0]
    assert select_sql.endswith("FOR UPDATE")
    assert select_params == (1, D, 10)
    assert factory.cursor.statements[1][0].startswith("INSERT INTO attendance_records")
    assert factory.conn.committed is True


def test_mysql_upsert_updates_all_core_fields_but_not_admin_flag():
    factory = FakeConnFactory(existing={"record_id": 7})
    cleared = replace(FULL, actual_time_out=None, undertime_minutes=None, secondary_status=None, warnings=())

    record_id = MySQLAttendanceRepository(factory).upsert(cleared)

    assert record_id == 7
    update_sql, params = factory.cursor.statements[1]
    assert update_sql.startswith("UPDATE attendance_records")
    assert "admin_verified" not in update_sql
    assert "actual_time_out=%s" in update_sql
    # actual_time_out, secondary_status, undertime_minutes and warnings are written as NULL.
    assert params[3] is None
    assert params[7] is None
    assert params[9] is None
    assert params[11] is None
    assert params[-1] == 7


def test_write_absence_skips_employee_with_any_record_that_day(attendance_repo):
    writer = AttendanceWriter(attendance_repo)
    writer.write(FULL)
    absent = ResolvedAttendance(
        employee_id=1,
        schedule_id=11,
        shift_date=D,
        scheduled_time_in=FULL.scheduled_time_in,
        scheduled_time_out=FULL.scheduled_time_out,
        status=AttendanceStatus.NCNS,
    )

    assert writer.write_absence(absent) is None
    assert attendance_repo.get(1, D, 11) is None
    assert writer.write_absence(replace(absent, employee_id=2)) == 2


def test_mysql_insert_if_absent_checks_the_whole_shift_date():
    factory = FakeConnFactory(existing=None)

    record_id = MySQLAttendanceRepository(factory).insert_if_absent(FULL)

    assert record_id == 42
    select_sql, select_params = factory.cursor.statements[0]
    assert select_sql.endswith("FOR UPDATE")
    assert "schedule_id" not in select_sql
    assert select_params == (1, D)
    assert factory.cursor.statements[1][0].startswith("INSERT INTO attendance_records")
    assert factory.conn.isolation_level == "REPEATABLE READ"


def test_mysql_insert_if_absent_leaves_existing_record():
    factory = FakeConnFactory(existing={"record_id": 7})

    assert MySQLAttendanceRepository(factory).insert_if_absent(FULL) is None
    assert len(factory.cursor.statements) == 1
    assert factory.conn.committed is True


def test_failed_write_rolls_back():
    factory = FakeConnFactory(existing=None)

    def fail(sql, params=()):
        raise RuntimeError("deadlock")

    factory.cursor.execute = fail

    with pytest.raises(RuntimeError):
        MySQLAttendanceRepository(factory).upsert(FULL)

    assert factory.conn.rolled_back is True
    assert factory.conn.committed is False
    assert factory.cursor.closed is True
