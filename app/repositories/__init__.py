"""
app/repositories package marker.
"""

from app.repositories.session_store import (
    DatabaseSessionStore,
    LocalFileSessionStore,
    SessionStore,
    SessionStoreError,
    build_session_store,
)

__all__ = [
    "DatabaseSessionStore",
    "LocalFileSessionStore",
    "SessionStore",
    "SessionStoreError",
    "build_session_store",
]
