from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.resolver import StatusResolver
from .attendance.writer import AttendanceWriter, KeyedLock
from .core.constants import DEFAULT_GRACE_PERIOD_MINUTES
from .database.connection import DBConfig, DatabaseConnection
from .directory.mysql_directory_repository import MySQLDirectoryRepository
from .uploads.service import AttendanceBatchProcessor


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    directory_repo: MySQLDirectoryRepository
    attendance_repo: MySQLAttendanceRepository

    status_resolver: StatusResolver
    writer: AttendanceWriter
    batch_processor: AttendanceBatchProcessor


def build_container(*, db_config: dict, default_grace_period_minutes: int = DEFAULT_GRACE_PERIOD_MINUTES) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_settings(db_config))

    directory_repo = MySQLDirectoryRepository(conn, default_grace_minutes=default_grace_period_minutes)
    attendance_repo = MySQLAttendanceRepository(conn)

    status_resolver = StatusResolver(site_registry=directory_repo)
    writer = AttendanceWriter(attendance_repo, locks=KeyedLock())
    batch_processor = AttendanceBatchProcessor(
        directory_repo,
        writer,
        site_registry=directory_repo,
        status_resolver=status_resolver,
    )

    return Container(
        conn=conn,
        directory_repo=directory_repo,
        attendance_repo=attendance_repo,
        status_resolver=status_resolver,
        writer=writer,
        batch_processor=batch_processor,
    )
