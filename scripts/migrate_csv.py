"""
Import a historical session export (TSV or CSV) from the command line.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import time
from pathlib import Path
from typing import Callable, Sequence

from app.domain.session_record import MigrationStats, ValidationReport
from app.services.session_import_service import SessionImportService, get_session_import_service


def _print_report(report: ValidationReport) -> None:
    print("=== Validation Results ===")
    print(f"Status: {'valid' if report.is_valid else 'invalid'}")
    print(f"Vessels found: {', '.join(report.vessels_found) or '<none>'}")

    if report.issues:
        print("\n=== Issues Found ===")
        for issue in report.issues:
            print(f"- {issue}")

    for index, sample in enumerate(report.sample_transformations, start=1):
        print(f"\n--- Sample {index} ---")
        print("Original:", json.dumps(sample.original, indent=2))
        print("Transformed:", json.dumps(sample.transformed.to_dict(), indent=2, default=str))


def _print_stats(stats: MigrationStats) -> None:
    print("=== Final Migration Report ===")
    print(f"Total rows processed: {stats.total_rows}")
    print(f"Successful inserts: {stats.successful_inserts}")
    print(f"Errors: {len(stats.errors)}")
    print(f"Geocoding successful: {stats.geocoding_results.successful}")
    print(f"Geocoding failed: {stats.geocoding_results.failed}")
    print(f"Locations resolved: {stats.locations_resolved}")
    print(f"Vessels found: {', '.join(stats.new_vessels) or '<none>'}")

    if stats.errors:
        print("\n=== Error Details ===")
        for error in stats.errors:
            print(f"Row {error.row}: {error.message}")

    print(f"\nSuccess rate: {stats.success_rate:.1f}%")
    if stats.total_rows and stats.success_rate == 100:
        print("Migration completed successfully.")
    elif stats.success_rate >= 90:
        print("Migration mostly successful with minor issues.")
    else:
        print("Migration completed with significant issues. Please review errors.")


def _countdown(seconds: int, sleep: Callable[[float], None]) -> None:
    for remaining in range(seconds, 0, -1):
        print(f"Starting in {remaining} second{'s' if remaining != 1 else ''}... (Ctrl+C to cancel)")
        sleep(1)


def main(
    argv: Sequence[str] | None = None,
    *,
    service: SessionImportService | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    parser = argparse.ArgumentParser(description="Import a historical session export.")
    parser.add_argument("path", help="Path to the TSV or CSV export.")
    parser.add_argument(
        "--dry-run",
        dest="dry_run",
        action="store_true",
        help="Validate headers and print sample transformations without writing anything.",
    )
    parser.add_argument(
        "--countdown",
        dest="countdown",
        type=int,
        default=3,
        help="Seconds to wait before a live import starts (default: 3).",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").strip().upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    source = Path(args.path).resolve()
    if not source.is_file():
        print(f"Error: file not found: {source}")
        return 1

    print(f"File: {source}")
    print(f"Mode: {'DRY RUN (validation only)' if args.dry_run else 'LIVE IMPORT'}\n")

    service = service or get_session_import_service()

    if args.dry_run:
        report = service.validate_file(source)
        _print_report(report)
        if not report.is_valid:
            print("\nPlease fix the issues above before importing.")
            return 1
        print("\nExport is valid. Run without --dry-run to import it.")
        return 0

    try:
        _countdown(max(0, args.countdown), sleep)
    except KeyboardInterrupt:
        print("\nImport cancelled.")
        return 0

    stats = service.commit_file(source)
    _print_stats(stats)
    if any(error.row == 0 for error in stats.errors):
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
