"""
app/schemas/session_import.py

Response schemas for session import endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.schemas.sessions import SessionResponse


class RowErrorResponse(BaseModel):
    """
    One failed row; row 0 marks a whole-file failure.
    """

    row: int = Field(..., ge=0)
    message: str
    data: dict[str, str] | None = None


class GeocodingResultsResponse(BaseModel):
    successful: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)


class SampleTransformationResponse(BaseModel):
    original: dict[str, str]
    transformed: SessionResponse


class ValidationReportResponse(BaseModel):
    """
    API response model for a dry-run validation.
    """

    is_valid: bool
    sample_transformations: list[SampleTransformationResponse] = Field(default_factory=list)
    vessels_found: list[str] = Field(default_factory=list)
    issues: list[str] = Field(default_factory=list)


class MigrationStatsResponse(BaseModel):
    """
    API response model for a committed import.
    """

    total_rows: int = Field(..., ge=0)
    successful_inserts: int = Field(..., ge=0)
    success_rate: float = Field(..., ge=0, le=100)
    errors: list[RowErrorResponse] = Field(default_factory=list)
    geocoding_results: GeocodingResultsResponse
    new_vessels: list[str] = Field(default_factory=list)
    vessel_categories: dict[str, int] = Field(default_factory=dict)
    locations_resolved: int = Field(..., ge=0)
