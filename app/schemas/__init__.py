"""
app/schemas package marker.
"""

from app.schemas.health import HealthResponse
from app.schemas.session_import import (
    GeocodingResultsResponse,
    MigrationStatsResponse,
    RowErrorResponse,
    SampleTransformationResponse,
    ValidationReportResponse,
)
from app.schemas.sessions import LocationResponse, QuantityResponse, SessionListResponse, SessionResponse

__all__ = [
    "GeocodingResultsResponse",
    "HealthResponse",
    "LocationResponse",
    "MigrationStatsResponse",
    "QuantityResponse",
    "RowErrorResponse",
    "SampleTransformationResponse",
    "SessionListResponse",
    "SessionResponse",
    "ValidationReportResponse",
]
