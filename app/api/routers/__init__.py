"""
app/api/routers package marker.
"""

from app.api.routers.session_import import router as session_import_router
from app.api.routers.sessions import router as sessions_router

__all__ = [
    "session_import_router",
    "sessions_router",
]
