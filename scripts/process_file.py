"""Reprocess a biometric export file from the command line.

Usage:
    python scripts/process_file.py export.txt --site 2 --from 2025-11-05 --to 2025-11-06

Re-running on a corrected file overwrites the previously computed records.
"""

from __future__ import annotations

import argparse
import importlib
import json
import logging
import sys

from dotenv import load_dotenv

from bio_attendance.common.datetime_utils import parse_iso_date
from bio_attendance.config import get_settings_module
from bio_attendance.container import build_container
from bio_attendance.core.exceptions import BatchReadError, ValidationError
from bio_attendance.uploads.model import BatchRequest


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Resolve attendance from a biometric export file.")
    parser.add_argument("path", help="tab-delimited export file")
    parser.add_argument("--site", type=int, default=None, help="biometric site id of the device")
    parser.add_argument("--from", dest="date_from", type=parse_iso_date, default=None)
    parser.add_argument("--to", dest="date_to", type=parse_iso_date, default=None)
    parser.add_argument("--shift-date", type=parse_iso_date, default=None)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    load_dotenv(override=False)
    args = _parse_args(argv)

    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"), format="%(levelname)s %(name)s: %(message)s")

    container = build_container(
        db_config=dict(settings.DB_CONFIG),
        default_grace_period_minutes=int(getattr(settings, "DEFAULT_GRACE_PERIOD_MINUTES", 15)),
    )
    request = BatchRequest(
        biometric_site_id=args.site,
        date_from=args.date_from,
        date_to=args.date_to,
        shift_date=args.shift_date,
    )

    try:
        result = container.batch_processor.process_file(args.path, request)
    except (BatchReadError, ValidationError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    print(json.dumps(result.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
