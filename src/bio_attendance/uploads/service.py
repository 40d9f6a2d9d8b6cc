from __future__ import annotations

import logging
from collections import OrderedDict
from datetime import date, timedelta
from pathlib import Path
from typing import Iterable, Optional, Sequence

from ..attendance.resolver import StatusResolver
from ..attendance.writer import AttendanceWriter
from ..common.validators import require_date_range
from ..core.enums import AttendanceStatus, WarningKind
from ..core.exceptions import NoActiveScheduleError, UnresolvedIdentityError
from ..directory.model import Employee, EmployeeSchedule
from ..directory.repository import DirectoryRepository, SiteRegistry
from ..directory.snapshot import DirectorySnapshot
from ..identity.model import Unresolved
from ..identity.resolver import resolve_identity
from ..scans.anomaly_detector import ScanAnomalyDetector
from ..scans.model import ParsedScanFile, ScanEvent
from ..scans.parser import ScanFileParser, decode_export
from ..shifts.grouper import group_by_shift_date
from .model import BatchRequest, BatchResult

logger = logging.getLogger(__name__)


class AttendanceBatchProcessor:
    """Runs one export file through parse -> identify -> group -> resolve -> write.

    Only an unreadable file is fatal; every other problem becomes an itemized warning on the
    returned BatchResult and the rest of the file is still processed.
    """

    def __init__(
        self,
        directory: DirectoryRepository,
        writer: AttendanceWriter,
        *,
        site_registry: Optional[SiteRegistry] = None,
        parser: Optional[ScanFileParser] = None,
        status_resolver: Optional[StatusResolver] = None,
    ):
        self._directory = directory
        self._writer = writer
        self._site_registry = site_registry
        self._parser = parser or ScanFileParser()
        self._status_resolver = status_resolver or StatusResolver(site_registry=site_registry)

    def process_file(self, path: str | Path, request: BatchRequest) -> BatchResult:
        require_date_range(request.date_from, request.date_to)
        return self._process(self._parser.parse_file(path), request)

    def process_content(self, content: str | bytes, request: BatchRequest) -> BatchResult:
        require_date_range(request.date_from, request.date_to)
        if isinstance(content, bytes):
            content = decode_export(content)
        return self._process(self._parser.parse_content(content), request)

    def _process(self, parsed: ParsedScanFile, request: BatchRequest) -> BatchResult:
        logger.info(
            "Processing biometric batch: %d scans, %d skipped lines, site=%s",
            len(parsed.events),
            len(parsed.skipped_lines),
            request.biometric_site_id,
        )
        result = BatchResult(skipped_lines=list(parsed.skipped_lines))
        for reason in parsed.skipped_lines:
            result.warn(WarningKind.PARSE_ERROR, reason)

        events = self._apply_date_filters(parsed.events, request, result)
        result.dates_found = sorted({e.calendar_date for e in events})

        groups = self._parser.group_by_token(events)
        result.anomalies = ScanAnomalyDetector(self._site_of(request)).detect(groups)

        snapshot = DirectorySnapshot.load(self._directory)
        by_employee = self._resolve_identities(groups, snapshot, result)

        written: set[tuple[int, date]] = set()
        for employee_id, employee_events in by_employee.items():
            try:
                self._process_employee(employee_id, employee_events, snapshot, request, result, written)
            except NoActiveScheduleError as e:
                logger.warning("Skipping %d scans: %s", len(employee_events), e)
                result.warn(WarningKind.NO_ACTIVE_SCHEDULE, str(e))

        scanned_shift_dates = {day for _, day in written}
        for day in self._target_dates(request, result.dates_found, scanned_shift_dates):
            self._write_absences(day, request, result, written)

        logger.info(
            "Biometric batch done: %d scans processed, %d records written, %d unresolved names, %d warnings",
            result.processed_count,
            len(result.records_written),
            len(result.unresolved_names),
            len(result.warnings),
        )
        return result

    def _apply_date_filters(self, events: Sequence[ScanEvent], request: BatchRequest, result: BatchResult) -> Sequence[ScanEvent]:
        if request.date_from and request.date_to:
            split = self._parser.filter_by_date_range(events, request.date_from, request.date_to)
            if split.outside_range:
                result.warn(
                    WarningKind.DATE_MISMATCH,
                    f"{len(split.outside_range)} scans fall outside {request.date_from.isoformat()} to "
                    f"{split.extended_date_to.isoformat()} and were ignored",
                )
            events = split.within_range

        if request.shift_date:
            check = self._parser.validate_file_dates(events, request.shift_date)
            for message in check.warnings:
                logger.warning(message)
                result.warn(WarningKind.DATE_MISMATCH, message)
        return events

    def _resolve_identities(
        self,
        groups: "OrderedDict[str, list[ScanEvent]]",
        snapshot: DirectorySnapshot,
        result: BatchResult,
    ) -> "OrderedDict[int, list[ScanEvent]]":
        by_employee: OrderedDict[int, list[ScanEvent]] = OrderedDict()
        for token, events in groups.items():
            try:
                employee = self._identify(token, events, snapshot)
            except UnresolvedIdentityError as e:
                message = f"{e}: {len(events)} scans skipped"
                logger.warning(message)
                result.unresolved_names.append(e.token)
                result.warn(WarningKind.UNRESOLVED_IDENTITY, message)
                continue
            by_employee.setdefault(employee.employee_id, []).extend(events)
        return by_employee

    @staticmethod
    def _identify(token: str, events: Sequence[ScanEvent], snapshot: DirectorySnapshot) -> Employee:
        outcome = resolve_identity(token, snapshot, [e.timestamp for e in events])
        if isinstance(outcome, Unresolved):
            reason = outcome.reason.value
            if outcome.detail:
                reason = f"{reason}; {outcome.detail}"
            raise UnresolvedIdentityError(token or events[0].raw_name, reason)
        return outcome.employee

    def _process_employee(
        self,
        employee_id: int,
        events: list[ScanEvent],
        snapshot: DirectorySnapshot,
        request: BatchRequest,
        result: BatchResult,
        written: set[tuple[int, date]],
    ) -> None:
        primary = snapshot.active_schedule_for(employee_id)
        if primary is None:
            raise NoActiveScheduleError(employee_id)

        for shift_date, scans in group_by_shift_date(events, primary).items():
            if not self._in_requested_range(shift_date, request):
                logger.debug("Employee %s: shift %s outside requested range", employee_id, shift_date)
                continue

            try:
                schedule = self._schedule_on(snapshot, employee_id, shift_date)
            except NoActiveScheduleError as e:
                logger.warning("Skipping %d scans: %s", len(scans), e)
                result.warn(WarningKind.NO_ACTIVE_SCHEDULE, str(e))
                continue

            self._write(schedule, shift_date, scans, request, result)
            written.add((employee_id, shift_date))

    @staticmethod
    def _schedule_on(snapshot: DirectorySnapshot, employee_id: int, shift_date: date) -> EmployeeSchedule:
        schedule = snapshot.active_schedule_for(employee_id, on=shift_date)
        if schedule is None:
            raise NoActiveScheduleError(employee_id, f"shift date {shift_date.isoformat()}")
        return schedule

    def _write_absences(
        self,
        day: date,
        request: BatchRequest,
        result: BatchResult,
        written: set[tuple[int, date]],
    ) -> None:
        for schedule in self._directory.active_schedules_for_date(day):
            if (schedule.employee_id, day) in written or not schedule.works_on(day):
                continue
            written.add((schedule.employee_id, day))

            resolved = self._status_resolver.resolve(
                schedule=schedule,
                shift_date=day,
                scans=(),
                default_site_id=request.biometric_site_id,
            )
            # Records from earlier batches (another site's export) are left alone.
            record_id = self._writer.write_absence(resolved)
            if record_id is not None:
                result.records_written.append(record_id)

    def _write(
        self,
        schedule: EmployeeSchedule,
        shift_date: date,
        scans: Sequence[ScanEvent],
        request: BatchRequest,
        result: BatchResult,
    ) -> None:
        resolved = self._status_resolver.resolve(
            schedule=schedule,
            shift_date=shift_date,
            scans=scans,
            default_site_id=request.biometric_site_id,
        )
        result.records_written.append(self._writer.write(resolved))
        result.processed_count += len(scans)

        subject = f"Employee {schedule.employee_id} on {shift_date.isoformat()}"
        if resolved.status is AttendanceStatus.NON_WORK_DAY:
            result.non_work_day_scans += len(scans)
            result.warn(WarningKind.NON_WORK_DAY, f"{subject}: {len(scans)} scans on a non-work day")
        elif resolved.status is AttendanceStatus.NEEDS_MANUAL_REVIEW:
            result.warn(WarningKind.ANOMALOUS_SCAN, f"{subject}: {'; '.join(resolved.warnings)}")

    def _site_of(self, request: BatchRequest):
        def lookup(event: ScanEvent) -> Optional[int]:
            if self._site_registry is not None:
                site_id = self._site_registry.site_for_device(event.device_id)
                if site_id is not None:
                    return site_id
            return request.biometric_site_id

        return lookup

    @staticmethod
    def _in_requested_range(shift_date: date, request: BatchRequest) -> bool:
        if request.date_from and request.date_to:
            return request.date_from <= shift_date <= request.date_to
        if request.shift_date:
            return shift_date == request.shift_date
        return True

    @staticmethod
    def _target_dates(
        request: BatchRequest,
        dates_found: Iterable[date],
        scanned_shift_dates: Iterable[date],
    ) -> list[date]:
        """Dates on which a scheduled employee without scans is recorded as NCNS.

        Without a requested range, only file dates that carry at least one shift are used, so the
        next-morning spill of an overnight export does not mark that morning's workers absent.
        """
        if request.date_from and request.date_to:
            days = (request.date_to - request.date_from).days
            return [request.date_from + timedelta(days=i) for i in range(days + 1)]
        if request.shift_date:
            return [request.shift_date]
        return sorted(set(dates_found) & set(scanned_shift_dates))
