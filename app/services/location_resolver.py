"""
app/services/location_resolver.py

Per-run location deduplication and geocoding.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from app.connectors.geocoding_connector import GeocodeResult, Geocoder
from app.domain.session_record import GeocodingTally, LocationEntity
from app.mappers.field_parsers import combine_location
from app.services.geocoding_service import CachedGeocoder, GeocodeCache

logger = logging.getLogger(__name__)

UNKNOWN_LOCATION = "Unknown"


@dataclass(frozen=True)
class ResolvedLocation:
    display_name: str
    entity: LocationEntity | None
    latitude: float | None = None
    longitude: float | None = None
    geocoded: bool = False


class LocationResolver:
    """
    Collapses repeated (name, city, state) references onto one LocationEntity.

    A resolver is scoped to one import run. New places are geocoded once;
    places seen again only trigger a lookup if their address parts are still
    incomplete and have not been looked up yet. Geocoding failures are tallied
    and never raised.
    """

    def __init__(
        self,
        geocoder: Geocoder | None = None,
        cache: GeocodeCache[GeocodeResult] | None = None,
    ) -> None:
        if geocoder is not None and not isinstance(geocoder, CachedGeocoder):
            geocoder = CachedGeocoder(geocoder, cache=cache)
        self._geocoder = geocoder
        self._entities: dict[tuple[str, str, str], LocationEntity] = {}
        self._backfill_attempted: set[str] = set()
        self.tally = GeocodingTally()

    def resolve(
        self,
        location: str | None,
        city: str | None,
        state: str | None,
        *,
        used_at: datetime | None = None,
    ) -> ResolvedLocation:
        display_name = combine_location(location, city, state)
        if display_name == UNKNOWN_LOCATION:
            return ResolvedLocation(display_name=display_name, entity=None)

        city = (city or "").strip() or None
        state = (state or "").strip() or None
        key = (display_name, city or "", state or "")
        used_at = used_at or datetime.now(timezone.utc)

        entity = self._entities.get(key)
        geocoded = False
        if entity is None:
            entity = LocationEntity(id=str(uuid.uuid4()), name=display_name, city=city, state=state)
            self._entities[key] = entity
            geocoded = self._geocode_into(entity)
        elif entity.needs_backfill and entity.id not in self._backfill_attempted:
            geocoded = self._geocode_into(entity)

        entity.usage_count += 1
        entity.last_used_at = used_at

        return ResolvedLocation(
            display_name=display_name,
            entity=entity.snapshot(),
            latitude=entity.latitude,
            longitude=entity.longitude,
            geocoded=geocoded,
        )

    def locations(self) -> list[LocationEntity]:
        return list(self._entities.values())

    def _geocode_into(self, entity: LocationEntity) -> bool:
        if self._geocoder is None:
            return False

        self._backfill_attempted.add(entity.id)
        try:
            result = self._geocoder.geocode(entity.name)
        except Exception as exc:  # noqa: BLE001
            self.tally.record(success=False)
            logger.warning("Geocoder raised location=%r error=%s", entity.name, exc)
            return False

        if not result.succeeded:
            self.tally.record(success=False)
            logger.info("Geocoding failed location=%r error=%s", entity.name, result.error)
            return False

        self.tally.record(success=True)
        if entity.latitude is None or entity.longitude is None:
            entity.latitude = result.coordinates.latitude
            entity.longitude = result.coordinates.longitude
        components = result.address_components
        entity.full_address = entity.full_address or result.formatted_address
        entity.city = entity.city or components.city
        entity.state = entity.state or components.state
        entity.country = entity.country or components.country
        return True
