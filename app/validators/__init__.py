"""
app/validators package marker.
"""

from app.validators.header_validator import (
    REQUIRED_SESSION_COLUMNS,
    MissingRequiredColumnsError,
    SessionColumn,
    SessionColumnMapping,
    SessionHeaderValidator,
)

__all__ = [
    "MissingRequiredColumnsError",
    "REQUIRED_SESSION_COLUMNS",
    "SessionColumn",
    "SessionColumnMapping",
    "SessionHeaderValidator",
]
