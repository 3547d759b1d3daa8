"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.consumption_session import ConsumptionSession
from db.models.location import Location

__all__ = [
    "ConsumptionSession",
    "Location",
]
