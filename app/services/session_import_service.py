"""
app/services/session_import_service.py

Service layer for importing historical session exports.

Two entry points share one row transformer:

    validate   header check plus a handful of sample transformations;
               never writes to the store and never geocodes
    commit     transform and persist every row independently; a failing row
               is recorded with its 1-based number and raw cells and the run
               moves on to the next one

Geocoding results count transformed rows, not lookups: a row whose record
carries coordinates is a success, any other transformed row a failure.

Only an unreadable or structurally unusable file stops a run. That case is
reported as a single RowError with row 0 and nothing is written.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import date, datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Mapping

from app.config import (
    get_external_http_settings,
    get_geocoding_settings,
    get_import_settings,
)
from app.connectors.geocoding_connector import Geocoder, build_default_geocoder
from app.domain.accessories import normalize_accessory
from app.domain.session_record import (
    GeocodingTally,
    MigrationStats,
    NormalizedSessionRecord,
    RowError,
    SampleTransformation,
    ValidationReport,
)
from app.logging_utils import log_event
from app.mappers.field_parsers import (
    coerce_session_id,
    determine_who_with,
    optional_text,
    parse_boolean,
    parse_quantity_text,
    parse_thc_percentage,
    parse_when,
)
from app.mappers.vessel_classifier import classify_vessel, fix_vessel_typos
from app.parsing.delimited import DelimitedParseError, ParsedTable, parse_delimited_text
from app.repositories.session_store import SessionStore, SessionStoreError, build_session_store
from app.services.geocoding_service import CachedGeocoder, GeocodeCache
from app.services.location_resolver import LocationResolver
from app.validators.header_validator import (
    MissingRequiredColumnsError,
    SessionColumn,
    SessionColumnMapping,
    SessionHeaderValidator,
)

logger = logging.getLogger(__name__)

UNKNOWN_STRAIN = "Unknown"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class SessionImportFatalError(RuntimeError):
    """
    Raised when an input file cannot be read or parsed at all.
    """


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class SessionImportService:
    """
    Coordinates parsing, row transformation, location resolution and persistence.
    """

    def __init__(
        self,
        store: SessionStore,
        *,
        geocoder: Geocoder | None = None,
        sample_size: int = 5,
        max_row_errors: int = 1000,
        log_row_errors: bool = True,
        today: date | None = None,
        header_validator: SessionHeaderValidator | None = None,
    ) -> None:
        self._store = store
        self._geocoder = geocoder
        self._sample_size = max(1, sample_size)
        self._max_row_errors = max(1, max_row_errors)
        self._log_row_errors = log_row_errors
        self._today = today
        self._header_validator = header_validator or SessionHeaderValidator()

    # ------------------------------------------------------------------
    # Validate
    # ------------------------------------------------------------------

    def validate_file(self, path: str | Path) -> ValidationReport:
        try:
            text = self._read_source(path)
        except SessionImportFatalError as exc:
            return ValidationReport(is_valid=False, issues=[str(exc)])
        return self.validate_text(text)

    def validate_text(self, text: str) -> ValidationReport:
        """
        Check headers and transform the first ``sample_size`` rows.
        """

        try:
            table = parse_delimited_text(text)
        except DelimitedParseError as exc:
            return ValidationReport(is_valid=False, issues=[str(exc)])

        issues: list[str] = []
        mapping = self._header_validator.resolve(table.headers)
        for column in mapping.missing_required:
            issues.append(f"Missing required column: {column}")
        if not table.rows:
            issues.append("File contains no data rows.")

        vessels_found = sorted(
            {
                fix_vessel_typos(mapping.canonical_row(row)[SessionColumn.VESSEL])
                for row in table.rows
            }
            - {""}
        )

        samples: list[SampleTransformation] = []
        if not mapping.missing_required:
            resolver = LocationResolver()
            for row_number, raw_row in enumerate(table.rows[: self._sample_size], start=1):
                try:
                    record = self.transform_row(mapping.canonical_row(raw_row), resolver)
                except Exception as exc:  # noqa: BLE001
                    issues.append(f"Row {row_number}: {exc}")
                    continue
                samples.append(SampleTransformation(original=dict(raw_row), transformed=record))

        report = ValidationReport(
            is_valid=not issues,
            sample_transformations=samples,
            vessels_found=vessels_found,
            issues=issues,
        )
        log_event(
            logger,
            logging.INFO,
            "session_import_validated",
            delimiter=table.delimiter_name,
            rows=len(table.rows),
            is_valid=report.is_valid,
            issues=len(issues),
            vessels_found=len(vessels_found),
        )
        return report

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------

    def commit_file(self, path: str | Path) -> MigrationStats:
        try:
            text = self._read_source(path)
        except SessionImportFatalError as exc:
            return self._fatal_stats(exc)
        return self.commit_text(text)

    def commit_text(self, text: str) -> MigrationStats:
        """
        Transform and persist every row, isolating failures per row.
        """

        try:
            table, mapping = self._parse_for_commit(text)
        except SessionImportFatalError as exc:
            return self._fatal_stats(exc)

        resolver = LocationResolver(geocoder=self._geocoder)
        errors: list[RowError] = []
        successful_inserts = 0
        coverage = GeocodingTally()
        vessel_names: set[str] = set()
        vessel_categories: Counter[str] = Counter()

        try:
            with self._store.batch():
                for row_number, raw_row in enumerate(table.rows, start=1):
                    try:
                        record = self.transform_row(mapping.canonical_row(raw_row), resolver)
                        vessel_names.add(record.vessel)
                        vessel_categories[record.vessel_category] += 1
                        coverage.record(success=record.latitude is not None and record.longitude is not None)
                        self._store.put(record)
                        successful_inserts += 1
                    except Exception as exc:  # noqa: BLE001
                        self._record_error(
                            errors,
                            RowError(row=row_number, message=str(exc) or type(exc).__name__, data=dict(raw_row)),
                        )
        except SessionStoreError as exc:
            logger.error("Session import could not be saved: %s", exc)
            errors.insert(0, RowError(row=0, message=f"Fatal error: {exc}"))
            successful_inserts = 0

        stats = MigrationStats(
            total_rows=len(table.rows),
            successful_inserts=successful_inserts,
            errors=errors,
            geocoding_results=coverage,
            new_vessels=sorted(vessel_names),
            vessel_categories=dict(vessel_categories),
            locations_resolved=len(resolver.locations()),
        )
        log_event(
            logger,
            logging.INFO,
            "session_import_committed",
            delimiter=table.delimiter_name,
            total_rows=stats.total_rows,
            successful_inserts=stats.successful_inserts,
            failed_rows=stats.failed_rows,
            geocoded=stats.geocoding_results.successful,
            geocode_failures=stats.geocoding_results.failed,
            geocode_lookups=resolver.tally.successful + resolver.tally.failed,
            locations_resolved=stats.locations_resolved,
        )
        return stats

    # ------------------------------------------------------------------
    # Row transformer
    # ------------------------------------------------------------------

    def transform_row(
        self,
        row: Mapping[str, str],
        resolver: LocationResolver,
    ) -> NormalizedSessionRecord:
        """
        Turn one row keyed by SessionColumn names into a NormalizedSessionRecord.
        """

        when = parse_when(row.get(SessionColumn.WHEN), today=self._today)
        vessel = fix_vessel_typos(row.get(SessionColumn.VESSEL) or "")
        vessel_category = classify_vessel(vessel)
        accessory = normalize_accessory(row.get(SessionColumn.ACCESSORY))

        comments = optional_text(row.get(SessionColumn.COMMENTS))
        if accessory.moved_to_comments:
            comments = f"{comments}; {accessory.moved_to_comments}" if comments else accessory.moved_to_comments

        used_at = datetime.fromisoformat(f"{when.date}T{when.time}").replace(tzinfo=timezone.utc)
        resolved = resolver.resolve(
            row.get(SessionColumn.LOCATION),
            row.get(SessionColumn.CITY),
            row.get(SessionColumn.STATE),
            used_at=used_at,
        )

        return NormalizedSessionRecord(
            id=coerce_session_id(row.get(SessionColumn.INSTANCE)),
            date=when.date,
            time=when.time,
            location=resolved.display_name,
            latitude=resolved.latitude,
            longitude=resolved.longitude,
            who_with=determine_who_with(row.get(SessionColumn.ALONE), row.get(SessionColumn.PEOPLE)),
            vessel=vessel or vessel_category,
            vessel_category=vessel_category,
            accessory_used=accessory.accessory,
            my_vessel=parse_boolean(row.get(SessionColumn.YOUR_VESSEL)),
            my_substance=parse_boolean(row.get(SessionColumn.YOUR_SUBSTANCE)),
            strain_name=optional_text(row.get(SessionColumn.STRAIN)) or UNKNOWN_STRAIN,
            strain_type=optional_text(row.get(SessionColumn.TYPE)),
            thc_percentage=parse_thc_percentage(row.get(SessionColumn.THC)),
            purchased_legally=parse_boolean(row.get(SessionColumn.LEGAL)),
            state_purchased=optional_text(row.get(SessionColumn.STATE_PURCHASED)),
            tobacco=parse_boolean(row.get(SessionColumn.TOBACCO)),
            kief=parse_boolean(row.get(SessionColumn.KIEF)),
            concentrate=parse_boolean(row.get(SessionColumn.CONCENTRATE)),
            lavender=parse_boolean(row.get(SessionColumn.LAVENDER)),
            quantity=parse_quantity_text(row.get(SessionColumn.QUANTITY), vessel_category),
            comments=comments,
            location_ref=resolved.entity,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _read_source(path: str | Path) -> str:
        source = Path(path)
        try:
            return source.read_text(encoding="utf-8-sig")
        except FileNotFoundError as exc:
            raise SessionImportFatalError(f"File not found: {source}") from exc
        except UnicodeDecodeError as exc:
            raise SessionImportFatalError(f"File must be UTF-8 encoded: {source}") from exc
        except OSError as exc:
            raise SessionImportFatalError(f"Could not read {source}: {exc}") from exc

    def _parse_for_commit(self, text: str) -> tuple[ParsedTable, SessionColumnMapping]:
        try:
            table = parse_delimited_text(text)
            mapping = self._header_validator.require(table.headers)
        except (DelimitedParseError, MissingRequiredColumnsError) as exc:
            raise SessionImportFatalError(str(exc)) from exc
        return table, mapping

    def _fatal_stats(self, exc: SessionImportFatalError) -> MigrationStats:
        logger.error("Session import aborted: %s", exc)
        return MigrationStats(
            total_rows=0,
            successful_inserts=0,
            errors=[RowError(row=0, message=f"Fatal error: {exc}")],
        )

    def _record_error(self, errors: list[RowError], error: RowError) -> None:
        if self._log_row_errors:
            logger.warning("Session import row failed row=%s message=%s", error.row, error.message)

        if len(errors) < self._max_row_errors:
            errors.append(error)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_session_import_service() -> SessionImportService:
    """
    Build and cache the import service with env-driven settings.
    """

    settings = get_import_settings()
    geocoder: Geocoder | None = None
    if settings.geocode_enabled:
        geocoding_settings = get_geocoding_settings()
        geocoder = CachedGeocoder(
            build_default_geocoder(
                settings=geocoding_settings,
                http_settings=get_external_http_settings(),
            ),
            cache=GeocodeCache(
                max_entries=geocoding_settings.cache_max_entries,
                ttl_seconds=geocoding_settings.cache_ttl_seconds,
            ),
        )

    return SessionImportService(
        build_session_store(),
        geocoder=geocoder,
        sample_size=settings.sample_size,
        max_row_errors=settings.max_row_errors,
        log_row_errors=settings.log_row_errors,
    )
