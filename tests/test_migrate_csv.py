"""
tests/test_migrate_csv.py

Tests for the command-line import entry point.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from app.repositories.session_store import LocalFileSessionStore
from app.services.session_import_service import SessionImportService
from scripts.migrate_csv import main

EXPORT = (
    "Instance (Blake Tracking)\tWhen\tLocation\tVessel\tStrain\tQuantity\n"
    "\t10/17/22 11:39 AM\tHome\tJoint\tBlue Dream\t0.5\n"
    "\t1/5/23 3:07 PM\tPark\tStizzy\tSour Diesel\thits_3\n"
)


@pytest.fixture()
def store(tmp_path: Path) -> LocalFileSessionStore:
    return LocalFileSessionStore(tmp_path / "sessions.json")


@pytest.fixture()
def service(store: LocalFileSessionStore) -> SessionImportService:
    return SessionImportService(store, today=date(2024, 3, 9))


@pytest.fixture()
def export_path(tmp_path: Path) -> Path:
    path = tmp_path / "export.tsv"
    path.write_text(EXPORT, encoding="utf-8")
    return path


def test_missing_file_exits_with_error(tmp_path: Path, service: SessionImportService, capsys) -> None:
    assert main([str(tmp_path / "absent.tsv")], service=service) == 1
    assert "Error: file not found" in capsys.readouterr().out


def test_dry_run_prints_report_and_writes_nothing(
    export_path: Path,
    service: SessionImportService,
    store: LocalFileSessionStore,
    capsys,
) -> None:
    assert main([str(export_path), "--dry-run"], service=service) == 0

    out = capsys.readouterr().out
    assert "=== Validation Results ===" in out
    assert "Vessels found: Joint, Stizzy" in out
    assert store.list() == []


def test_dry_run_with_bad_headers_fails(tmp_path: Path, service: SessionImportService) -> None:
    path = tmp_path / "bad.csv"
    path.write_text("When,Vessel\n10/17/22 1:00 PM,Joint\n", encoding="utf-8")

    assert main([str(path), "--dry-run"], service=service) == 1


def test_live_import_counts_down_then_commits(
    export_path: Path,
    service: SessionImportService,
    store: LocalFileSessionStore,
    capsys,
) -> None:
    sleeps: list[float] = []

    assert main([str(export_path)], service=service, sleep=sleeps.append) == 0

    out = capsys.readouterr().out
    assert sleeps == [1, 1, 1]
    assert "Successful inserts: 2" in out
    assert "Success rate: 100.0%" in out
    assert len(store.list()) == 2


def test_cancelled_countdown_writes_nothing(
    export_path: Path,
    service: SessionImportService,
    store: LocalFileSessionStore,
) -> None:
    def interrupt(_: float) -> None:
        raise KeyboardInterrupt

    assert main([str(export_path)], service=service, sleep=interrupt) == 0
    assert store.list() == []


def test_fatal_import_exits_with_error(tmp_path: Path, service: SessionImportService) -> None:
    path = tmp_path / "bad.tsv"
    path.write_text("When\tVessel\n10/17/22 1:00 PM\tJoint\n", encoding="utf-8")

    assert main([str(path), "--countdown", "0"], service=service) == 1
