"""
app/domain package marker.
"""

from app.domain.accessories import AccessoryConfig, AccessoryMapping, normalize_accessory
from app.domain.quantity import (
    InvalidSizeLabelError,
    QuantityConfig,
    QuantityType,
    QuantityValue,
    VesselCategory,
    format_quantity,
    make_quantity,
    quantity_config_for,
)
from app.domain.session_record import (
    GeocodingTally,
    LocationEntity,
    MigrationStats,
    NormalizedSessionRecord,
    RowError,
    SampleTransformation,
    SessionFilters,
    ValidationReport,
)

__all__ = [
    "AccessoryConfig",
    "AccessoryMapping",
    "GeocodingTally",
    "InvalidSizeLabelError",
    "LocationEntity",
    "MigrationStats",
    "NormalizedSessionRecord",
    "QuantityConfig",
    "QuantityType",
    "QuantityValue",
    "RowError",
    "SampleTransformation",
    "SessionFilters",
    "ValidationReport",
    "VesselCategory",
    "format_quantity",
    "make_quantity",
    "normalize_accessory",
    "quantity_config_for",
]
