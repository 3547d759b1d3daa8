"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation.
"""

from __future__ import annotations

from fastapi import Depends, File, HTTPException, UploadFile, status

from app.repositories.session_store import SessionStore, build_session_store

EXPORT_EXTENSIONS = (".csv", ".tsv", ".txt")

EXPORT_CONTENT_TYPES = {
    "text/csv",
    "application/csv",
    "application/vnd.ms-excel",
    "text/tab-separated-values",
    "text/plain",
}


def get_export_upload(file: UploadFile = File(...)) -> UploadFile:
    """
    Validate that the uploaded file is a CSV/TSV export by extension or MIME type.
    """

    filename = (file.filename or "").strip().lower()
    content_type = (file.content_type or "").strip().lower()

    if not filename.endswith(EXPORT_EXTENSIONS) and content_type not in EXPORT_CONTENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only CSV or TSV files are allowed.",
        )

    return file


def read_upload_text(file: UploadFile = Depends(get_export_upload)) -> str:
    """
    Decode an uploaded export as UTF-8 (a leading BOM is tolerated).
    """

    try:
        return file.file.read().decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="File must be UTF-8 encoded.",
        ) from exc
    finally:
        file.file.close()


def get_session_store() -> SessionStore:
    return build_session_store()
