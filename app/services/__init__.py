"""
app/services package marker.
"""

from app.services.geocoding_service import CachedGeocoder, GeocodeCache, geocode_batch
from app.services.location_resolver import LocationResolver, ResolvedLocation
from app.services.session_import_service import (
    SessionImportFatalError,
    SessionImportService,
    get_session_import_service,
)

__all__ = [
    "CachedGeocoder",
    "GeocodeCache",
    "LocationResolver",
    "ResolvedLocation",
    "SessionImportFatalError",
    "SessionImportService",
    "geocode_batch",
    "get_session_import_service",
]
