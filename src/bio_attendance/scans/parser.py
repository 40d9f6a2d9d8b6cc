from __future__ import annotations

import logging
import re
from collections import OrderedDict
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Iterable, Sequence

from ..core.constants import DATETIME_FORMAT
from ..core.exceptions import BatchReadError, ParseError
from .model import DateRangeSplit, FileDateCheck, ParsedScanFile, ScanEvent

logger = logging.getLogger(__name__)

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_TIMESTAMP_PREFIX = re.compile(r"^(\d{4}-\d{2}-\d{2}\s+\d{2}:\d{2}:\d{2})")
_EXPECTED_COLUMNS = 6


def normalize_name(name: str) -> str:
    """Normalize a device name for matching.

    "Cabarliza M." -> "cabarliza m", "Ogao-ogao" -> "ogao ogao", "Doe, John" -> "doe john".
    """
    normalized = name.strip().replace(".", "").replace(",", " ").replace("-", " ")
    return re.sub(r"\s+", " ", normalized).strip().lower()


def decode_export(raw: bytes) -> str:
    # Devices on Windows usually export cp1252 rather than UTF-8.
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw.decode("cp1252", errors="replace")


class ScanFileParser:
    """Turns a tab-delimited time-clock export into ScanEvents.

    Format: ``No  DevNo  UserId  Name  Mode  DateTime`` with one header row, e.g.
    ``1\t1\t10\tNodado A\tFP\t2025-11-05  05:50:25``.
    Lines that cannot be parsed are skipped and reported; they never abort the file.
    """

    def parse_file(self, path: str | Path) -> ParsedScanFile:
        try:
            raw = Path(path).read_bytes()
        except OSError as e:
            raise BatchReadError(f"cannot read export file {path}: {e}") from e
        return self.parse_content(decode_export(raw))

    def parse_content(self, content: str) -> ParsedScanFile:
        content = _CONTROL_CHARS.sub("", content.replace("\0", ""))
        content = content.replace("\r\n", "\n").replace("\r", "\n")
        if not content.strip():
            raise BatchReadError("export file is empty")

        events: list[ScanEvent] = []
        skipped: list[str] = []

        # First line is the header.
        for line_no, line in enumerate(content.split("\n")[1:], start=2):
            if not line.strip():
                continue
            try:
                events.append(self.parse_line(line, line_no=line_no))
            except ParseError as e:
                logger.warning("Skipping export line: %s", e)
                skipped.append(str(e))

        return ParsedScanFile(events=tuple(events), skipped_lines=tuple(skipped))

    def parse_line(self, line: str, *, line_no: int = 0) -> ScanEvent:
        columns = self._split_columns(line.strip())
        if len(columns) < _EXPECTED_COLUMNS:
            raise ParseError(line_no, f"expected {_EXPECTED_COLUMNS} columns, got {len(columns)}")

        name = columns[3].strip()
        if not name:
            raise ParseError(line_no, "empty name")

        timestamp = self._parse_timestamp(columns[5], line_no=line_no)
        return ScanEvent(
            raw_name=name,
            name_token=normalize_name(name),
            device_id=columns[1].strip(),
            timestamp=timestamp,
            line_no=line_no,
            mode=columns[4].strip() or None,
            device_user_id=columns[2].strip() or None,
        )

    def _split_columns(self, line: str) -> list[str]:
        columns = line.split("\t")
        if len(columns) >= _EXPECTED_COLUMNS:
            return columns

        # Some exports pad with spaces instead of tabs; the datetime then splits in two.
        parts = re.split(r"\s{2,}", line)
        if len(parts) >= _EXPECTED_COLUMNS:
            return parts[:5] + [" ".join(parts[5:])]
        return columns

    def _parse_timestamp(self, value: str, *, line_no: int) -> datetime:
        cleaned = re.sub(r"[^\d\-\s:]", "", re.sub(r"\s{2,}", " ", value)).strip()
        if not cleaned:
            raise ParseError(line_no, "empty timestamp")

        if len(cleaned) > 19:
            # "2025-01-13 22:26:181" -> trailing digit is noise from the device.
            match = _TIMESTAMP_PREFIX.match(cleaned)
            if match:
                cleaned = re.sub(r"\s+", " ", match.group(1))

        try:
            return datetime.strptime(cleaned, DATETIME_FORMAT)
        except ValueError:
            raise ParseError(line_no, f"invalid timestamp {value.strip()!r}") from None

    def group_by_token(self, events: Iterable[ScanEvent]) -> "OrderedDict[str, list[ScanEvent]]":
        """Group events by normalized name, each group sorted chronologically."""
        groups: OrderedDict[str, list[ScanEvent]] = OrderedDict()
        for event in events:
            groups.setdefault(event.name_token, []).append(event)
        for token in groups:
            groups[token].sort(key=lambda e: e.timestamp)
        return groups

    def filter_by_date_range(self, events: Sequence[ScanEvent], date_from: date, date_to: date) -> DateRangeSplit:
        """Split events by date range; the upper bound gets one extra day for overnight time-outs."""
        extended_to = date_to + timedelta(days=1)
        within: list[ScanEvent] = []
        outside: list[ScanEvent] = []
        for event in events:
            if date_from <= event.calendar_date <= extended_to:
                within.append(event)
            else:
                outside.append(event)

        logger.info(
            "Date range filter %s..%s (+1 day): %d within, %d outside",
            date_from,
            date_to,
            len(within),
            len(outside),
        )
        return DateRangeSplit(within_range=tuple(within), outside_range=tuple(outside), extended_date_to=extended_to)

    def validate_file_dates(self, events: Sequence[ScanEvent], shift_date: date) -> FileDateCheck:
        found: list[date] = []
        for event in events:
            if event.calendar_date not in found:
                found.append(event.calendar_date)

        expected = (shift_date, shift_date + timedelta(days=1))
        unexpected = [d for d in found if d not in expected]

        warnings: list[str] = []
        if unexpected:
            warnings.append(
                "File contains records from unexpected dates: {}. Expected dates: {} for shift date {}.".format(
                    ", ".join(d.strftime("%b %d, %Y") for d in unexpected),
                    ", ".join(d.strftime("%b %d, %Y") for d in expected),
                    shift_date.strftime("%b %d, %Y"),
                )
            )
        return FileDateCheck(dates_found=tuple(found), expected_dates=expected, warnings=tuple(warnings))

