from __future__ import annotations

from datetime import date, datetime

import pytest

from bio_attendance.attendance.writer import AttendanceWriter
from bio_attendance.core.enums import AttendanceStatus, WarningKind
from bio_attendance.core.exceptions import BatchReadError, ValidationError
from bio_attendance.directory.model import Employee
from bio_attendance.uploads.model import BatchRequest
from bio_attendance.uploads.service import AttendanceBatchProcessor

from support import SAT, THU, WED, InMemoryDirectory, InMemorySites, make_schedule

HEADER = "No\tDevNo\tUserId\tName\tMode\tDateTime"

FULL_FILE = "\n".join(
    [
        HEADER,
        "1\t1\t10\tNodado A\tFP\t2025-11-05  05:50:25",
        "2\t1\t11\tNodado B\tFP\t2025-11-05  21:55:00",
        "3\t1\t10\tNodado A\tFP\t2025-11-05  15:02:10",
        "4\t1\t99\tSantos X\tFP\t2025-11-05  08:00:00",
        "5\t1\t11\tNodado B\tFP\t2025-11-06  07:01:00",
        "6\t1\t12\tbroken line",
    ]
)

# Same export after a correction: Angelo's time-out was removed.
CORRECTED_FILE = "\n".join(
    [
        HEADER,
        "1\t1\t10\tNodado A\tFP\t2025-11-05  05:50:25",
        "2\t1\t11\tNodado B\tFP\t2025-11-05  21:55:00",
        "5\t1\t11\tNodado B\tFP\t2025-11-06  07:01:00",
    ]
)

ONE_DAY = BatchRequest(biometric_site_id=1, date_from=WED, date_to=WED)


def _directory() -> InMemoryDirectory:
    return InMemoryDirectory(
        employees=[
            Employee(1, "Angelo", "Nodado"),
            Employee(2, "Benedict", "Nodado"),
            Employee(3, "Maria", "Cabarliza"),
        ],
        schedules=[
            make_schedule(1, 1, "06:00", "15:00"),
            make_schedule(2, 2, "22:00", "07:00"),
            make_schedule(3, 3, "08:00", "17:00"),
        ],
    )


def _processor(attendance_repo, directory=None, sites=None) -> AttendanceBatchProcessor:
    return AttendanceBatchProcessor(
        directory or _directory(),
        AttendanceWriter(attendance_repo),
        site_registry=sites or InMemorySites(),
    )


def test_full_batch(attendance_repo):
    result = _processor(attendance_repo).process_content(FULL_FILE, ONE_DAY)

    assert result.processed_count == 4
    assert result.skipped_lines == ["line 7: expected 6 columns, got 4"]
    assert result.unresolved_names == ["santos x"]
    assert len(result.records_written) == 3
    assert result.dates_found == [WED, THU]

    angelo = attendance_repo.get(1, WED, 1)
    assert angelo.status == AttendanceStatus.ON_TIME
    assert angelo.actual_time_in == datetime(2025, 11, 5, 5, 50, 25)
    assert angelo.actual_time_out == datetime(2025, 11, 5, 15, 2, 10)

    benedict = attendance_repo.get(2, WED, 2)
    assert benedict.status == AttendanceStatus.ON_TIME
    assert benedict.actual_time_out == datetime(2025, 11, 6, 7, 1)

    # Maria has no scans on a work day.
    maria = attendance_repo.get(3, WED, 3)
    assert maria.status == AttendanceStatus.NCNS
    assert maria.actual_time_in is None
    assert maria.actual_time_out is None

    kinds = [w.kind for w in result.warnings]
    assert WarningKind.PARSE_ERROR in kinds
    assert WarningKind.UNRESOLVED_IDENTITY in kinds


def test_reprocessing_same_file_is_idempotent(attendance_repo):
    processor = _processor(attendance_repo)

    first = processor.process_content(FULL_FILE, ONE_DAY)
    snapshot = dict(attendance_repo.records)
    second = processor.process_content(FULL_FILE, ONE_DAY)

    assert attendance_repo.records == snapshot
    # Maria's absence already exists, so only the scanned shifts are rewritten.
    assert len(second.records_written) == 2
    assert set(second.records_written) < set(first.records_written)


def test_reprocessing_with_less_data_clears_stale_fields(attendance_repo):
    processor = _processor(attendance_repo)
    processor.process_content(FULL_FILE, ONE_DAY)
    attendance_repo.verify((1, WED, 1))
    before = attendance_repo.get(1, WED, 1)

    processor.process_content(CORRECTED_FILE, ONE_DAY)

    after = attendance_repo.get(1, WED, 1)
    assert after.record_id == before.record_id
    assert after.actual_time_out is None
    assert after.status == AttendanceStatus.FAILED_BIO_OUT
    assert after.admin_verified is True


SITE_TWO_FILE = "\n".join(
    [
        HEADER,
        "1\t5\t20\tCabarliza\tFP\t2025-11-05 07:58:00",
        "2\t5\t20\tCabarliza\tFP\t2025-11-05 17:01:00",
    ]
)


def test_second_site_file_keeps_first_site_records(attendance_repo):
    processor = _processor(attendance_repo)
    processor.process_content(FULL_FILE, ONE_DAY)

    result = processor.process_content(SITE_TWO_FILE, BatchRequest(biometric_site_id=2, date_from=WED, date_to=WED))

    assert attendance_repo.get(1, WED, 1).status == AttendanceStatus.ON_TIME
    assert attendance_repo.get(2, WED, 2).status == AttendanceStatus.ON_TIME
    # Maria's absence from the first file is replaced by her scans at site 2.
    assert attendance_repo.get(3, WED, 3).status == AttendanceStatus.ON_TIME
    assert len(result.records_written) == 1


def test_absence_is_not_written_over_an_existing_record(attendance_repo):
    processor = _processor(attendance_repo)
    processor.process_content(SITE_TWO_FILE, BatchRequest(biometric_site_id=2, date_from=WED, date_to=WED))
    angelo_absent = attendance_repo.get(1, WED, 1)

    processor.process_content(FULL_FILE, ONE_DAY)
    processor.process_content(SITE_TWO_FILE, BatchRequest(biometric_site_id=2, date_from=WED, date_to=WED))

    assert angelo_absent.status == AttendanceStatus.NCNS
    angelo = attendance_repo.get(1, WED, 1)
    assert angelo.record_id == angelo_absent.record_id
    assert angelo.status == AttendanceStatus.ON_TIME


def test_overnight_file_without_range_skips_spill_date(attendance_repo):
    result = _processor(attendance_repo).process_content(FULL_FILE, BatchRequest(biometric_site_id=1))

    assert result.dates_found == [WED, THU]
    assert attendance_repo.get(2, WED, 2).actual_time_out == datetime(2025, 11, 6, 7, 1)
    assert attendance_repo.get(3, WED, 3).status == AttendanceStatus.NCNS
    # Only Benedict's time-out falls on Thursday; nobody is marked absent there.
    assert attendance_repo.get(1, THU, 1) is None
    assert attendance_repo.get(3, THU, 3) is None
    assert len(result.records_written) == 3


def test_bytes_content_is_decoded(attendance_repo):
    result = _processor(attendance_repo).process_content(FULL_FILE.encode("utf-8"), ONE_DAY)

    assert len(result.records_written) == 3


def test_scans_outside_range_are_reported(attendance_repo):
    content = FULL_FILE + "\n7\t1\t10\tNodado A\tFP\t2025-11-09 06:00:00"

    result = _processor(attendance_repo).process_content(content, ONE_DAY)

    assert any(w.kind == WarningKind.DATE_MISMATCH for w in result.warnings)
    assert attendance_repo.get(1, date(2025, 11, 9), 1) is None


def test_shift_date_check_warns_about_unexpected_dates(attendance_repo):
    content = FULL_FILE + "\n7\t1\t10\tNodado A\tFP\t2025-11-09 06:00:00"

    result = _processor(attendance_repo).process_content(content, BatchRequest(biometric_site_id=1, shift_date=WED))

    mismatches = [w for w in result.warnings if w.kind == WarningKind.DATE_MISMATCH]
    assert len(mismatches) == 1
    assert "Nov 09, 2025" in mismatches[0].message


def test_schedule_not_yet_effective_is_warned(attendance_repo):
    directory = _directory()
    directory.schedules[0] = make_schedule(1, 1, "06:00", "15:00", effective_date=date(2025, 12, 1))

    result = _processor(attendance_repo, directory).process_content(FULL_FILE, ONE_DAY)

    assert attendance_repo.get(1, WED, 1) is None
    assert any(w.kind == WarningKind.NO_ACTIVE_SCHEDULE for w in result.warnings)


def test_non_work_day_scans_are_counted(attendance_repo):
    content = "\n".join(
        [
            HEADER,
            "1\t1\t10\tCabarliza\tFP\t2025-11-08 08:00:00",
            "2\t1\t10\tCabarliza\tFP\t2025-11-08 12:00:00",
        ]
    )

    result = _processor(attendance_repo).process_content(content, BatchRequest(biometric_site_id=1, date_from=SAT, date_to=SAT))

    assert result.non_work_day_scans == 2
    assert attendance_repo.get(3, SAT, 3).status == AttendanceStatus.NON_WORK_DAY
    assert any(w.kind == WarningKind.NON_WORK_DAY for w in result.warnings)
    # Nobody works Saturdays, so nobody is NCNS.
    assert len(result.records_written) == 1


def test_manual_review_is_itemized(attendance_repo):
    content = "\n".join([HEADER, "1\t1\t10\tCabarliza\tFP\t2025-11-05 02:10:00"])

    result = _processor(attendance_repo).process_content(content, ONE_DAY)

    assert attendance_repo.get(3, WED, 3).status == AttendanceStatus.NEEDS_MANUAL_REVIEW
    assert any(w.kind == WarningKind.ANOMALOUS_SCAN for w in result.warnings)


def test_cross_site_scans_use_device_registry(attendance_repo):
    sites = InMemorySites({"5": 2})
    content = "\n".join(
        [
            HEADER,
            "1\t5\t10\tCabarliza\tFP\t2025-11-05 07:58:00",
            "2\t5\t10\tCabarliza\tFP\t2025-11-05 17:01:00",
        ]
    )

    _processor(attendance_repo, sites=sites).process_content(content, ONE_DAY)

    maria = attendance_repo.get(3, WED, 3)
    assert maria.status == AttendanceStatus.ON_TIME
    assert maria.is_cross_site_bio is True
    assert maria.bio_in_site_id == 2


def test_invalid_range_is_rejected(attendance_repo):
    with pytest.raises(ValidationError):
        _processor(attendance_repo).process_content(FULL_FILE, BatchRequest(date_from=THU, date_to=WED))


def test_unreadable_file_aborts_before_writing(attendance_repo, tmp_path):
    with pytest.raises(BatchReadError):
        _processor(attendance_repo).process_file(tmp_path / "missing.txt", ONE_DAY)

    assert attendance_repo.upserts == 0


def test_process_file_reads_from_disk(attendance_repo, tmp_path):
    path = tmp_path / "export.txt"
    path.write_text(FULL_FILE, encoding="utf-8")

    result = _processor(attendance_repo).process_file(path, ONE_DAY)

    assert len(result.records_written) == 3
    assert result.to_dict()["unresolved_names"] == ["santos x"]
