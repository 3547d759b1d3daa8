from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI

from app.config import get_storage_settings
from app.schemas.health import HealthResponse


def _validate_env() -> None:
    """
    Validate storage configuration at startup.

    Raises RuntimeError listing every problem so the operator can fix them in
    one restart cycle.
    """

    from db.config import load_env_files

    load_env_files()

    errors: list[str] = []

    backend = os.getenv("SESSION_STORE_BACKEND", "database").strip().lower()
    if backend not in {"database", "local"}:
        errors.append(
            f"SESSION_STORE_BACKEND='{backend}' is not valid. Allowed values: ['database', 'local']."
        )

    if backend == "database":
        database_url = os.getenv("DATABASE_URL", "").strip()
        local_database_url = os.getenv("LOCAL_DATABASE_URL", "").strip()
        if not database_url and not local_database_url:
            errors.append(
                "No database URL configured. Set DATABASE_URL or LOCAL_DATABASE_URL, "
                "or use SESSION_STORE_BACKEND=local."
            )

    if errors:
        raise RuntimeError(
            "Startup validation failed, missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _check_db() -> None:
    """Open a session and run SELECT 1. Raises RuntimeError if the DB is unreachable."""
    from sqlalchemy import text
    from sqlalchemy.exc import SQLAlchemyError

    from db.session import SessionLocal

    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
    except SQLAlchemyError as exc:
        raise RuntimeError("Database unavailable.") from exc


def _check_schema() -> None:
    """
    Every table registered on Base.metadata must exist in the database.

    Does NOT auto-migrate.
    """
    from sqlalchemy import inspect as sa_inspect

    import db.models  # noqa: F401  registers ORM models on Base.metadata
    from db.base import Base
    from db.session import get_engine

    inspector = sa_inspect(get_engine())
    actual: set[str] = set(inspector.get_table_names())
    expected: set[str] = set(Base.metadata.tables.keys())
    missing = expected - actual

    if missing:
        logging.getLogger(__name__).critical(
            "Schema mismatch: %d table(s) absent from the database: %s. "
            "Run 'alembic upgrade head' and restart.",
            len(missing),
            ", ".join(sorted(missing)),
        )
        raise RuntimeError(
            f"Schema mismatch: {len(missing)} table(s) missing from the database "
            f"({', '.join(sorted(missing))}). Run migrations and restart."
        )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Validate DB connectivity and schema on boot when the database store is in use."""
    log = logging.getLogger(__name__)
    if get_storage_settings().backend == "database":
        _check_db()
        log.info("Database connectivity confirmed")
        _check_schema()
        log.info("Database schema validated")
    else:
        log.info("Local session store in use; skipping database checks")
    yield


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Session Tracker API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import session_import_router, sessions_router

    application.include_router(session_import_router)
    application.include_router(sessions_router)

    @application.get("/health", response_model=HealthResponse)
    def healthcheck() -> HealthResponse:
        return HealthResponse(status="ok", storage_backend=get_storage_settings().backend)

    return application


app = create_app()
