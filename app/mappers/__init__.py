"""
app/mappers package marker.
"""

from app.mappers.field_parsers import (
    ParsedWhen,
    coerce_session_id,
    combine_location,
    determine_who_with,
    parse_boolean,
    parse_quantity_text,
    parse_thc_percentage,
    parse_when,
)
from app.mappers.vessel_classifier import VESSEL_RULES, VesselRule, classify_vessel, fix_vessel_typos

__all__ = [
    "ParsedWhen",
    "VESSEL_RULES",
    "VesselRule",
    "classify_vessel",
    "coerce_session_id",
    "combine_location",
    "determine_who_with",
    "fix_vessel_typos",
    "parse_boolean",
    "parse_quantity_text",
    "parse_thc_percentage",
    "parse_when",
]
