"""
app/api/routers/session_import.py

Session import HTTP endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.dependencies import read_upload_text
from app.domain.session_record import MigrationStats, ValidationReport
from app.schemas.session_import import (
    GeocodingResultsResponse,
    MigrationStatsResponse,
    RowErrorResponse,
    SampleTransformationResponse,
    ValidationReportResponse,
)
from app.schemas.sessions import SessionResponse
from app.services.session_import_service import SessionImportService, get_session_import_service

router = APIRouter(prefix="/import", tags=["import"])


@router.post("/validate", response_model=ValidationReportResponse)
def validate_export(
    text: str = Depends(read_upload_text),
    import_service: SessionImportService = Depends(get_session_import_service),
) -> ValidationReportResponse:
    """
    Dry-run an export: header check and sample transformations, nothing stored.
    """

    return _to_report_response(import_service.validate_text(text))


@router.post("", response_model=MigrationStatsResponse)
def commit_export(
    text: str = Depends(read_upload_text),
    import_service: SessionImportService = Depends(get_session_import_service),
) -> MigrationStatsResponse:
    """
    Import every row of an export. Row failures are reported, not raised.
    """

    return _to_stats_response(import_service.commit_text(text))


def _to_report_response(report: ValidationReport) -> ValidationReportResponse:
    return ValidationReportResponse(
        is_valid=report.is_valid,
        sample_transformations=[
            SampleTransformationResponse(
                original=sample.original,
                transformed=SessionResponse.from_record(sample.transformed),
            )
            for sample in report.sample_transformations
        ],
        vessels_found=report.vessels_found,
        issues=report.issues,
    )


def _to_stats_response(stats: MigrationStats) -> MigrationStatsResponse:
    return MigrationStatsResponse(
        total_rows=stats.total_rows,
        successful_inserts=stats.successful_inserts,
        success_rate=stats.success_rate,
        errors=[RowErrorResponse(row=error.row, message=error.message, data=error.data) for error in stats.errors],
        geocoding_results=GeocodingResultsResponse(
            successful=stats.geocoding_results.successful,
            failed=stats.geocoding_results.failed,
        ),
        new_vessels=stats.new_vessels,
        vessel_categories=stats.vessel_categories,
        locations_resolved=stats.locations_resolved,
    )
