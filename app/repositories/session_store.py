"""
app/repositories/session_store.py

Session persistence backends.

Two interchangeable stores implement the SessionStore protocol: a SQLAlchemy
store for the relational database and a single JSON document on disk for
offline use. The backend is chosen once, at construction time, by
build_session_store; callers never fall back from one to the other at runtime.
"""

from __future__ import annotations

import json
import logging
import os
import threading
import uuid
from contextlib import contextmanager
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Callable, ContextManager, Iterator, Protocol

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.config import StorageSettings, get_storage_settings
from app.domain.quantity import QuantityValue
from app.domain.session_record import LocationEntity, NormalizedSessionRecord, SessionFilters
from db.models.consumption_session import ConsumptionSession
from db.models.location import Location

logger = logging.getLogger(__name__)


class SessionStoreError(RuntimeError):
    """
    Raised when a store cannot read or write a session.
    """


class SessionStore(Protocol):
    """
    Minimal persistence contract for normalized sessions.
    """

    def get(self, session_id: str) -> NormalizedSessionRecord | None:
        ...

    def put(self, record: NormalizedSessionRecord) -> NormalizedSessionRecord:
        ...

    def delete(self, session_id: str) -> bool:
        ...

    def list(self, filters: SessionFilters | None = None) -> list[NormalizedSessionRecord]:
        ...

    def batch(self) -> ContextManager[None]:
        ...


def _parse_uuid(value: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def _sort_key(record: NormalizedSessionRecord) -> tuple[str, str]:
    return (record.date, record.time)


# ---------------------------------------------------------------------------
# Database store
# ---------------------------------------------------------------------------


class DatabaseSessionStore:
    """
    SQLAlchemy-backed store.

    Writing a session also upserts the place it references: an existing
    Location row is matched by id or by (name, city, state), gets its usage
    count bumped, and has missing address parts and coordinates filled in.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    @contextmanager
    def batch(self) -> Iterator[None]:
        # each put commits its own transaction
        yield

    def get(self, session_id: str) -> NormalizedSessionRecord | None:
        parsed_id = _parse_uuid(session_id)
        if parsed_id is None:
            return None

        with self._session_factory() as db:
            try:
                row = db.get(
                    ConsumptionSession,
                    parsed_id,
                    options=[selectinload(ConsumptionSession.location_entry)],
                )
            except SQLAlchemyError as exc:
                raise SessionStoreError(f"Failed to load session {session_id}.") from exc
            return self._to_record(row) if row is not None else None

    def put(self, record: NormalizedSessionRecord) -> NormalizedSessionRecord:
        session_id = _parse_uuid(record.id)
        if session_id is None:
            raise SessionStoreError(f"Session id {record.id!r} is not a UUID.")

        with self._session_factory() as db:
            try:
                row = db.get(ConsumptionSession, session_id)
                previous_location_id = row.location_id if row is not None else None

                location_row = None
                if record.location_ref is not None:
                    location_row = self._merge_location(
                        db,
                        record.location_ref,
                        count_use=previous_location_id is None,
                    )

                if row is None:
                    row = ConsumptionSession(id=session_id)
                    db.add(row)
                self._apply(row, record, location_row)
                db.commit()
            except SQLAlchemyError as exc:
                db.rollback()
                raise SessionStoreError(f"Failed to persist session {record.id}.") from exc
        return record

    def delete(self, session_id: str) -> bool:
        parsed_id = _parse_uuid(session_id)
        if parsed_id is None:
            return False

        with self._session_factory() as db:
            try:
                row = db.get(ConsumptionSession, parsed_id)
                if row is None:
                    return False
                db.delete(row)
                db.commit()
            except SQLAlchemyError as exc:
                db.rollback()
                raise SessionStoreError(f"Failed to delete session {session_id}.") from exc
        return True

    def list(self, filters: SessionFilters | None = None) -> list[NormalizedSessionRecord]:
        filters = filters or SessionFilters()
        stmt = (
            select(ConsumptionSession)
            .options(selectinload(ConsumptionSession.location_entry))
            .order_by(ConsumptionSession.session_date.desc(), ConsumptionSession.session_time.desc())
        )
        if filters.start_date:
            stmt = stmt.where(ConsumptionSession.session_date >= date.fromisoformat(filters.start_date))
        if filters.end_date:
            stmt = stmt.where(ConsumptionSession.session_date <= date.fromisoformat(filters.end_date))
        if filters.strain_name:
            stmt = stmt.where(ConsumptionSession.strain_name.ilike(f"%{filters.strain_name}%"))
        if filters.location:
            stmt = stmt.where(ConsumptionSession.location.ilike(f"%{filters.location}%"))
        if filters.vessel:
            stmt = stmt.where(
                or_(
                    ConsumptionSession.vessel == filters.vessel,
                    ConsumptionSession.vessel_category == filters.vessel,
                )
            )
        if filters.offset:
            stmt = stmt.offset(filters.offset)
        if filters.limit is not None:
            stmt = stmt.limit(filters.limit)

        with self._session_factory() as db:
            try:
                rows = db.scalars(stmt).all()
            except SQLAlchemyError as exc:
                raise SessionStoreError("Failed to list sessions.") from exc
            return [self._to_record(row) for row in rows]

    def _merge_location(self, db: Session, entity: LocationEntity, *, count_use: bool) -> Location:
        row = None
        entity_id = _parse_uuid(entity.id)
        if entity_id is not None:
            row = db.get(Location, entity_id)
        if row is None:
            stmt = select(Location).where(
                Location.name == entity.name,
                Location.city.is_(None) if entity.city is None else Location.city == entity.city,
                Location.state.is_(None) if entity.state is None else Location.state == entity.state,
            )
            row = db.scalars(stmt.limit(1)).first()

        if row is None:
            row = Location(
                id=entity_id or uuid.uuid4(),
                name=entity.name,
                is_favorite=entity.is_favorite,
                is_private=entity.is_private,
                nickname=entity.nickname,
                usage_count=0,
            )
            db.add(row)

        row.full_address = row.full_address or entity.full_address
        row.city = row.city or entity.city
        row.state = row.state or entity.state
        row.country = row.country or entity.country
        if row.latitude is None or row.longitude is None:
            row.latitude = entity.latitude
            row.longitude = entity.longitude
        if count_use:
            row.usage_count = (row.usage_count or 0) + 1
        row.last_used_at = entity.last_used_at or datetime.now(timezone.utc)
        db.flush()
        return row

    @staticmethod
    def _apply(row: ConsumptionSession, record: NormalizedSessionRecord, location_row: Location | None) -> None:
        row.session_date = date.fromisoformat(record.date)
        row.session_time = record.time
        row.location = record.location
        row.latitude = record.latitude
        row.longitude = record.longitude
        row.who_with = record.who_with
        row.vessel = record.vessel
        row.vessel_category = record.vessel_category
        row.accessory_used = record.accessory_used
        row.my_vessel = record.my_vessel
        row.my_substance = record.my_substance
        row.strain_name = record.strain_name
        row.strain_type = record.strain_type
        row.thc_percentage = record.thc_percentage
        row.purchased_legally = record.purchased_legally
        row.state_purchased = record.state_purchased
        row.tobacco = record.tobacco
        row.kief = record.kief
        row.concentrate = record.concentrate
        row.lavender = record.lavender
        row.quantity = record.quantity.to_json()
        row.comments = record.comments
        row.location_id = location_row.id if location_row is not None else None

    @staticmethod
    def _to_record(row: ConsumptionSession) -> NormalizedSessionRecord:
        location_ref = None
        if row.location_entry is not None:
            entry = row.location_entry
            location_ref = LocationEntity(
                id=str(entry.id),
                name=entry.name,
                full_address=entry.full_address,
                city=entry.city,
                state=entry.state,
                country=entry.country,
                latitude=entry.latitude,
                longitude=entry.longitude,
                is_favorite=entry.is_favorite,
                is_private=entry.is_private,
                nickname=entry.nickname,
                usage_count=entry.usage_count,
                last_used_at=entry.last_used_at,
            )

        return NormalizedSessionRecord(
            id=str(row.id),
            date=row.session_date.isoformat(),
            time=row.session_time,
            location=row.location,
            latitude=row.latitude,
            longitude=row.longitude,
            who_with=row.who_with,
            vessel=row.vessel,
            vessel_category=row.vessel_category,
            accessory_used=row.accessory_used,
            my_vessel=row.my_vessel,
            my_substance=row.my_substance,
            strain_name=row.strain_name,
            strain_type=row.strain_type,
            thc_percentage=row.thc_percentage,
            purchased_legally=row.purchased_legally,
            state_purchased=row.state_purchased,
            tobacco=row.tobacco,
            kief=row.kief,
            concentrate=row.concentrate,
            lavender=row.lavender,
            quantity=QuantityValue.from_json(row.quantity),
            comments=row.comments,
            location_ref=location_ref,
        )


# ---------------------------------------------------------------------------
# Local file store
# ---------------------------------------------------------------------------


class LocalFileSessionStore:
    """
    Keeps every session in one JSON document keyed by session id.

    Inside batch() the document is loaded once, puts and deletes change it in
    memory, and it is written back a single time when the block exits. A block
    that raises writes nothing.
    """

    def __init__(self, path: str | Path = "data/sessions.json") -> None:
        self._path = Path(path)
        self._lock = threading.RLock()
        self._pending: dict[str, Any] | None = None

    @property
    def path(self) -> Path:
        return self._path

    @contextmanager
    def batch(self) -> Iterator[None]:
        with self._lock:
            if self._pending is not None:
                yield
                return

            self._pending = self._load()
            try:
                yield
                self._save(self._pending)
            finally:
                self._pending = None

    def get(self, session_id: str) -> NormalizedSessionRecord | None:
        with self._lock:
            payload = self._current()
        raw = payload.get(str(session_id).lower())
        return NormalizedSessionRecord.from_dict(raw) if raw is not None else None

    def put(self, record: NormalizedSessionRecord) -> NormalizedSessionRecord:
        with self._lock:
            if self._pending is not None:
                self._pending[record.id.lower()] = record.to_dict()
                return record
            payload = self._load()
            payload[record.id.lower()] = record.to_dict()
            self._save(payload)
        return record

    def delete(self, session_id: str) -> bool:
        with self._lock:
            payload = self._current()
            if payload.pop(str(session_id).lower(), None) is None:
                return False
            if self._pending is None:
                self._save(payload)
        return True

    def list(self, filters: SessionFilters | None = None) -> list[NormalizedSessionRecord]:
        filters = filters or SessionFilters()
        with self._lock:
            payload = dict(self._current())

        records = [NormalizedSessionRecord.from_dict(raw) for raw in payload.values()]
        matched = sorted((record for record in records if filters.matches(record)), key=_sort_key, reverse=True)
        end = filters.offset + filters.limit if filters.limit is not None else None
        return matched[filters.offset:end]

    def _current(self) -> dict[str, Any]:
        return self._pending if self._pending is not None else self._load()

    def _load(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            document = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise SessionStoreError(f"Failed to read session file {self._path}.") from exc
        sessions = document.get("sessions") if isinstance(document, dict) else None
        if not isinstance(sessions, dict):
            raise SessionStoreError(f"Session file {self._path} has no 'sessions' object.")
        return sessions

    def _save(self, sessions: dict[str, Any]) -> None:
        temp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(json.dumps({"sessions": sessions}, indent=2), encoding="utf-8")
            os.replace(temp_path, self._path)
        except OSError as exc:
            raise SessionStoreError(f"Failed to write session file {self._path}.") from exc


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def build_session_store(
    settings: StorageSettings | None = None,
    *,
    session_factory: Callable[[], Session] | None = None,
) -> SessionStore:
    """
    Construct the configured backend.
    """

    settings = settings or get_storage_settings()
    if settings.backend == "local":
        logger.info("Using local session store path=%s", settings.local_path)
        return LocalFileSessionStore(settings.local_path)
    if settings.backend == "database":
        if session_factory is None:
            from db.session import SessionLocal

            session_factory = SessionLocal
        return DatabaseSessionStore(session_factory)
    raise ValueError(f"Unknown session store backend {settings.backend!r}.")
