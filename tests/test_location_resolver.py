"""
tests/test_location_resolver.py

Pytest unit tests for per-run location deduplication.
"""

from __future__ import annotations

from datetime import datetime, timezone

from app.connectors.geocoding_connector import AddressComponents, Coordinates, GeocodeResult
from app.services.location_resolver import LocationResolver


class CountingGeocoder:
    def __init__(self, results: dict[str, GeocodeResult] | None = None, *, raises: bool = False) -> None:
        self._results = results or {}
        self._raises = raises
        self.calls: list[str] = []

    def geocode(self, location: str) -> GeocodeResult:
        self.calls.append(location)
        if self._raises:
            raise RuntimeError("provider exploded")
        return self._results.get(location, GeocodeResult(coordinates=None, error="No results found"))

    def reverse(self, coordinates: Coordinates) -> GeocodeResult:
        return GeocodeResult(coordinates=coordinates, error="unused")


HOME = GeocodeResult(
    coordinates=Coordinates(39.74, -104.99),
    formatted_address="123 Main St, Denver, Colorado",
    address_components=AddressComponents(city="Denver", state="Colorado", country="United States"),
)


def test_repeat_references_share_one_entity() -> None:
    geocoder = CountingGeocoder({"Home": HOME})
    resolver = LocationResolver(geocoder)

    first = resolver.resolve("Home", "Denver", "CO")
    second = resolver.resolve("Home", "Denver", "CO")

    assert first.entity is not None and second.entity is not None
    assert first.entity.id == second.entity.id
    assert second.entity.usage_count == 2
    assert geocoder.calls == ["Home"]
    assert len(resolver.locations()) == 1


def test_same_name_in_different_city_is_a_new_entity() -> None:
    resolver = LocationResolver()

    a = resolver.resolve("Home", "Denver", "CO")
    b = resolver.resolve("Home", "Austin", "TX")

    assert a.entity is not None and b.entity is not None
    assert a.entity.id != b.entity.id


def test_geocoded_coordinates_and_address_are_applied() -> None:
    resolver = LocationResolver(CountingGeocoder({"Home": HOME}))

    resolved = resolver.resolve("Home", "Denver", "CO")

    assert resolved.geocoded is True
    assert (resolved.latitude, resolved.longitude) == (39.74, -104.99)
    assert resolved.entity is not None
    assert resolved.entity.state == "CO"
    assert resolved.entity.country == "United States"
    assert resolved.entity.full_address == "123 Main St, Denver, Colorado"
    assert (resolver.tally.successful, resolver.tally.failed) == (1, 0)


def test_incomplete_location_is_looked_up_only_once() -> None:
    geocoder = CountingGeocoder()
    resolver = LocationResolver(geocoder)

    for _ in range(3):
        resolver.resolve("Cabin", "", "")

    assert geocoder.calls == ["Cabin"]
    assert resolver.tally.failed == 1
    assert resolver.tally.successful == 0


def test_geocoder_exception_is_tallied_not_raised() -> None:
    resolver = LocationResolver(CountingGeocoder(raises=True))

    resolved = resolver.resolve("Somewhere", None, None)

    assert resolved.entity is not None
    assert resolved.latitude is None
    assert resolver.tally.failed == 1


def test_unknown_location_has_no_entity() -> None:
    geocoder = CountingGeocoder()
    resolver = LocationResolver(geocoder)

    resolved = resolver.resolve("", None, "  ")

    assert resolved.display_name == "Unknown"
    assert resolved.entity is None
    assert geocoder.calls == []
    assert resolver.locations() == []


def test_snapshot_is_detached_from_live_entity() -> None:
    resolver = LocationResolver()
    used_at = datetime(2023, 1, 5, 15, 7, tzinfo=timezone.utc)

    first = resolver.resolve("Park", None, None, used_at=used_at)
    resolver.resolve("Park", None, None)

    assert first.entity is not None
    assert first.entity.usage_count == 1
    assert first.entity.last_used_at == used_at
    assert resolver.locations()[0].usage_count == 2


def test_without_geocoder_nothing_is_tallied() -> None:
    resolver = LocationResolver()

    resolver.resolve("Park", "Denver", "CO")

    assert (resolver.tally.successful, resolver.tally.failed) == (0, 0)
