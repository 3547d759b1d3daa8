"""
tests/test_session_store.py

Pytest tests for both session store backends.

The database store runs against in-memory SQLite.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import replace
from pathlib import Path

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.pool import StaticPool

from app.config import StorageSettings
from app.domain.quantity import VesselCategory, make_quantity
from app.domain.session_record import LocationEntity, NormalizedSessionRecord, SessionFilters
from app.repositories.session_store import (
    DatabaseSessionStore,
    LocalFileSessionStore,
    SessionStoreError,
    build_session_store,
)
from db.base import Base
from db.models import ConsumptionSession, Location
from db.session import create_session_factory


def _record(
    *,
    session_date: str = "2023-01-05",
    session_time: str = "15:07",
    strain: str = "Blue Dream",
    vessel: str = "V4 Engine Bong",
    category: str = VesselCategory.BONG,
    location: str = "Home",
    location_ref: LocationEntity | None = None,
) -> NormalizedSessionRecord:
    return NormalizedSessionRecord(
        id=str(uuid.uuid4()),
        date=session_date,
        time=session_time,
        location=location,
        who_with="Alone",
        vessel=vessel,
        vessel_category=category,
        accessory_used="None",
        my_vessel=True,
        my_substance=True,
        strain_name=strain,
        purchased_legally=True,
        tobacco=False,
        kief=False,
        concentrate=False,
        lavender=False,
        quantity=make_quantity(VesselCategory.BONG, "small"),
        thc_percentage=21.5,
        location_ref=location_ref,
    )


def _home(**overrides: object) -> LocationEntity:
    entity = LocationEntity(id=str(uuid.uuid4()), name="Home", city="Denver", state="CO")
    return replace(entity, **overrides)


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    try:
        yield create_session_factory(engine)
    finally:
        engine.dispose()


@pytest.fixture()
def db_store(session_factory) -> DatabaseSessionStore:
    return DatabaseSessionStore(session_factory)


@pytest.fixture()
def file_store(tmp_path: Path) -> LocalFileSessionStore:
    return LocalFileSessionStore(tmp_path / "nested" / "sessions.json")


# ---------------------------------------------------------------------------
# Database store
# ---------------------------------------------------------------------------


class TestDatabaseSessionStore:
    def test_put_then_get_round_trips_the_record(self, db_store: DatabaseSessionStore) -> None:
        record = _record(location_ref=_home())

        db_store.put(record)
        loaded = db_store.get(record.id)

        assert loaded is not None
        assert loaded.quantity == record.quantity
        assert loaded.thc_percentage == 21.5
        assert loaded.location_ref is not None
        assert loaded.location_ref.name == "Home"
        assert loaded.location_ref.usage_count == 1

    def test_shared_location_is_stored_once(self, db_store: DatabaseSessionStore, session_factory) -> None:
        home = _home()
        db_store.put(_record(location_ref=home))
        db_store.put(_record(location_ref=replace(home, usage_count=2)))

        with session_factory() as db:
            assert db.scalar(select(func.count()).select_from(Location)) == 1
            assert db.scalars(select(Location)).one().usage_count == 2

    def test_location_matched_by_name_city_and_state(
        self, db_store: DatabaseSessionStore, session_factory
    ) -> None:
        db_store.put(_record(location_ref=_home()))
        db_store.put(_record(location_ref=_home(latitude=39.7, longitude=-104.9, country="United States")))

        with session_factory() as db:
            location = db.scalars(select(Location)).one()
        assert location.usage_count == 2
        assert (location.latitude, location.longitude) == (39.7, -104.9)
        assert location.country == "United States"

    def test_rewriting_a_session_does_not_recount_its_location(
        self, db_store: DatabaseSessionStore, session_factory
    ) -> None:
        record = _record(location_ref=_home())
        db_store.put(record)
        db_store.put(replace(record, strain_name="Sour Diesel"))

        with session_factory() as db:
            assert db.scalars(select(Location)).one().usage_count == 1
            assert db.scalar(select(func.count()).select_from(ConsumptionSession)) == 1
        assert db_store.get(record.id).strain_name == "Sour Diesel"  # type: ignore[union-attr]

    def test_session_without_location_entity(self, db_store: DatabaseSessionStore) -> None:
        record = _record(location="Unknown")

        db_store.put(record)

        loaded = db_store.get(record.id)
        assert loaded is not None
        assert loaded.location_ref is None

    def test_list_is_newest_first_and_filterable(self, db_store: DatabaseSessionStore) -> None:
        db_store.put(_record(session_date="2023-01-01", strain="Blue Dream"))
        db_store.put(_record(session_date="2023-02-01", strain="Sour Diesel"))
        db_store.put(
            _record(session_date="2023-03-01", strain="Gummies", vessel="Raspberry Gummie", category="Edible")
        )

        assert [r.date for r in db_store.list()] == ["2023-03-01", "2023-02-01", "2023-01-01"]
        assert [r.strain_name for r in db_store.list(SessionFilters(strain_name="dream"))] == ["Blue Dream"]
        assert len(db_store.list(SessionFilters(start_date="2023-01-15", end_date="2023-02-15"))) == 1
        assert len(db_store.list(SessionFilters(vessel="Edible"))) == 1
        assert [r.date for r in db_store.list(SessionFilters(limit=1, offset=1))] == ["2023-02-01"]

    def test_delete(self, db_store: DatabaseSessionStore) -> None:
        record = _record()
        db_store.put(record)

        assert db_store.delete(record.id) is True
        assert db_store.get(record.id) is None
        assert db_store.delete(record.id) is False

    def test_put_inside_batch_is_visible_immediately(self, db_store: DatabaseSessionStore) -> None:
        record = _record()

        with db_store.batch():
            db_store.put(record)
            assert db_store.get(record.id) is not None

    def test_non_uuid_ids(self, db_store: DatabaseSessionStore) -> None:
        assert db_store.get("42") is None
        assert db_store.delete("42") is False
        with pytest.raises(SessionStoreError):
            db_store.put(replace(_record(), id="42"))


# ---------------------------------------------------------------------------
# Local file store
# ---------------------------------------------------------------------------


class TestLocalFileSessionStore:
    def test_missing_file_reads_as_empty(self, file_store: LocalFileSessionStore) -> None:
        assert file_store.list() == []
        assert file_store.get(str(uuid.uuid4())) is None

    def test_put_writes_sessions_document(self, file_store: LocalFileSessionStore) -> None:
        record = _record(location_ref=_home(usage_count=1))

        file_store.put(record)

        document = json.loads(file_store.path.read_text(encoding="utf-8"))
        assert list(document["sessions"]) == [record.id]
        assert document["sessions"][record.id]["quantity"] == {
            "amount": 1,
            "unit": "bowl size",
            "type": "size_category",
        }
        assert file_store.get(record.id) == record

    def test_list_filters_and_delete(self, file_store: LocalFileSessionStore) -> None:
        older = _record(session_date="2023-01-01", location="Home")
        newer = _record(session_date="2023-02-01", location="Red Rocks Park")
        file_store.put(older)
        file_store.put(newer)

        assert [r.id for r in file_store.list()] == [newer.id, older.id]
        assert [r.id for r in file_store.list(SessionFilters(location="rocks"))] == [newer.id]

        assert file_store.delete(older.id) is True
        assert file_store.delete(older.id) is False
        assert [r.id for r in file_store.list()] == [newer.id]

    def test_batch_writes_the_document_once_on_exit(self, file_store: LocalFileSessionStore) -> None:
        records = [_record(strain=f"Strain {index}") for index in range(20)]

        with file_store.batch():
            for record in records:
                file_store.put(record)
            assert not file_store.path.exists()
            assert len(file_store.list()) == 20

        document = json.loads(file_store.path.read_text(encoding="utf-8"))
        assert len(document["sessions"]) == 20

    def test_batch_keeps_existing_sessions(self, file_store: LocalFileSessionStore) -> None:
        existing = _record()
        file_store.put(existing)
        added = _record(strain="Sour Diesel")

        with file_store.batch():
            file_store.put(added)
            assert file_store.delete(existing.id) is True

        assert [r.id for r in file_store.list()] == [added.id]

    def test_batch_that_raises_writes_nothing(self, file_store: LocalFileSessionStore) -> None:
        with pytest.raises(RuntimeError):
            with file_store.batch():
                file_store.put(_record())
                raise RuntimeError("stop")

        assert not file_store.path.exists()
        assert file_store.list() == []

    def test_corrupt_file_raises(self, file_store: LocalFileSessionStore) -> None:
        file_store.path.parent.mkdir(parents=True)
        file_store.path.write_text("{not json", encoding="utf-8")

        with pytest.raises(SessionStoreError):
            file_store.list()


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


class TestBuildSessionStore:
    def test_local_backend(self, tmp_path: Path) -> None:
        store = build_session_store(StorageSettings(backend="local", local_path=str(tmp_path / "s.json")))
        assert isinstance(store, LocalFileSessionStore)

    def test_database_backend_uses_given_factory(self, session_factory) -> None:
        store = build_session_store(StorageSettings(backend="database"), session_factory=session_factory)
        assert isinstance(store, DatabaseSessionStore)

    def test_unknown_backend(self) -> None:
        with pytest.raises(ValueError):
            build_session_store(StorageSettings(backend="s3"))
