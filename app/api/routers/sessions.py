"""
app/api/routers/sessions.py

Session history HTTP endpoints.
"""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.api.dependencies import get_session_store
from app.domain.session_record import SessionFilters
from app.repositories.session_store import SessionStore, SessionStoreError
from app.schemas.sessions import SessionListResponse, SessionResponse

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.get("", response_model=SessionListResponse)
def list_sessions(
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    strain_name: str | None = Query(default=None, description="Case-insensitive substring match"),
    location: str | None = Query(default=None, description="Case-insensitive substring match"),
    vessel: str | None = Query(default=None, description="Exact vessel name or vessel category"),
    limit: int | None = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    store: SessionStore = Depends(get_session_store),
) -> SessionListResponse:
    filters = SessionFilters(
        start_date=start_date.isoformat() if start_date else None,
        end_date=end_date.isoformat() if end_date else None,
        strain_name=strain_name,
        location=location,
        vessel=vessel,
        limit=limit,
        offset=offset,
    )
    try:
        records = store.list(filters)
    except SessionStoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to load sessions.",
        ) from exc

    return SessionListResponse(
        items=[SessionResponse.from_record(record) for record in records],
        count=len(records),
        limit=limit,
        offset=offset,
    )


@router.get("/{session_id}", response_model=SessionResponse)
def get_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
) -> SessionResponse:
    try:
        record = store.get(session_id)
    except SessionStoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to load session.",
        ) from exc

    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found.")
    return SessionResponse.from_record(record)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
) -> Response:
    try:
        deleted = store.delete(session_id)
    except SessionStoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to delete session.",
        ) from exc

    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found.")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
