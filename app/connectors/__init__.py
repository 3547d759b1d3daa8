"""
app/connectors package marker.
"""

from app.connectors.base import BaseConnector, ConnectorRequestError
from app.connectors.geocoding_connector import (
    AddressComponents,
    Coordinates,
    FallbackGeocoder,
    GeocodeResult,
    Geocoder,
    MapboxGeocoder,
    NominatimGeocoder,
    build_default_geocoder,
)

__all__ = [
    "AddressComponents",
    "BaseConnector",
    "ConnectorRequestError",
    "Coordinates",
    "FallbackGeocoder",
    "GeocodeResult",
    "Geocoder",
    "MapboxGeocoder",
    "NominatimGeocoder",
    "build_default_geocoder",
]
