"""
app/connectors/geocoding_connector.py

Forward and reverse geocoding against Mapbox and OpenStreetMap Nominatim.

Providers never raise for an unreachable or empty lookup; they return a
GeocodeResult carrying ``error`` so callers can tally the failure and move on.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol, Sequence
from urllib.parse import quote

import requests

from app.config import ExternalHTTPSettings, GeocodingSettings
from app.connectors.base import BaseConnector, ConnectorRequestError

logger = logging.getLogger(__name__)

NO_RESULTS = "No results found"


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float

    @property
    def is_valid(self) -> bool:
        return -90 <= self.latitude <= 90 and -180 <= self.longitude <= 180

    @property
    def cache_key(self) -> str:
        return f"{self.latitude:.6f},{self.longitude:.6f}"


@dataclass(frozen=True)
class AddressComponents:
    city: str | None = None
    state: str | None = None
    country: str | None = None
    county: str | None = None
    postal_code: str | None = None


@dataclass(frozen=True)
class GeocodeResult:
    """
    Outcome of one geocoding lookup; ``error`` is set when nothing usable came back.
    """

    coordinates: Coordinates | None
    formatted_address: str | None = None
    address_components: AddressComponents = field(default_factory=AddressComponents)
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.coordinates is not None and self.error is None


class Geocoder(Protocol):
    def geocode(self, location: str) -> GeocodeResult: ...

    def reverse(self, coordinates: Coordinates) -> GeocodeResult: ...


class MapboxGeocoder(BaseConnector):
    """
    Mapbox Places API. Requires an access token.
    """

    def __init__(
        self,
        *,
        settings: GeocodingSettings,
        http_settings: ExternalHTTPSettings,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        super().__init__(provider="mapbox", http_settings=http_settings, session=session, sleep=sleep)
        self._settings = settings

    def geocode(self, location: str) -> GeocodeResult:
        if not self._settings.mapbox_access_token:
            return GeocodeResult(coordinates=None, error="Mapbox token not configured")

        try:
            payload = self._request_json(
                method="GET",
                url=f"{self._settings.mapbox_base_url}/{quote(location, safe='')}.json",
                params={"access_token": self._settings.mapbox_access_token, "limit": 1},
            )
            feature = self._first_feature(payload)
            if feature is None:
                return GeocodeResult(coordinates=None, error=NO_RESULTS)

            longitude, latitude = feature["center"]
            components = self._parse_context(feature)
            if components.city is None and "place" in (feature.get("place_type") or []):
                components = AddressComponents(
                    city=feature.get("text"),
                    state=components.state,
                    country=components.country,
                    postal_code=components.postal_code,
                )
            return GeocodeResult(
                coordinates=Coordinates(latitude=float(latitude), longitude=float(longitude)),
                formatted_address=feature.get("place_name"),
                address_components=components,
            )
        except ConnectorRequestError as exc:
            return GeocodeResult(coordinates=None, error=str(exc))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Unexpected Mapbox payload location=%r error=%s", location, exc)
            return GeocodeResult(coordinates=None, error=f"mapbox: malformed response ({exc})")

    def reverse(self, coordinates: Coordinates) -> GeocodeResult:
        if not self._settings.mapbox_access_token:
            return GeocodeResult(coordinates=coordinates, error="Mapbox token not configured")

        try:
            payload = self._request_json(
                method="GET",
                url=f"{self._settings.mapbox_base_url}/{coordinates.longitude},{coordinates.latitude}.json",
                params={"access_token": self._settings.mapbox_access_token, "limit": 1},
            )
        except ConnectorRequestError as exc:
            return GeocodeResult(coordinates=coordinates, error=str(exc))

        feature = self._first_feature(payload)
        if feature is None:
            return GeocodeResult(coordinates=coordinates, error=NO_RESULTS)
        return GeocodeResult(
            coordinates=coordinates,
            formatted_address=feature.get("place_name"),
            address_components=self._parse_context(feature),
        )

    @staticmethod
    def _first_feature(payload: Any) -> dict[str, Any] | None:
        features = payload.get("features") if isinstance(payload, dict) else None
        if not features:
            return None
        return features[0]

    @staticmethod
    def _parse_context(feature: dict[str, Any]) -> AddressComponents:
        parts: dict[str, str] = {}
        for item in feature.get("context") or []:
            item_id = str(item.get("id") or "")
            text = item.get("text")
            if item_id.startswith("place."):
                parts["city"] = text
            elif item_id.startswith("region."):
                parts["state"] = text
            elif item_id.startswith("country."):
                parts["country"] = text
            elif item_id.startswith("postcode."):
                parts["postal_code"] = text
        return AddressComponents(**parts)


class NominatimGeocoder(BaseConnector):
    """
    OpenStreetMap Nominatim. Free, but requires an identifying User-Agent.
    """

    def __init__(
        self,
        *,
        settings: GeocodingSettings,
        http_settings: ExternalHTTPSettings,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        super().__init__(provider="nominatim", http_settings=http_settings, session=session, sleep=sleep)
        self._settings = settings
        self._headers = {"User-Agent": settings.user_agent}

    def geocode(self, location: str) -> GeocodeResult:
        try:
            payload = self._request_json(
                method="GET",
                url=f"{self._settings.nominatim_base_url}/search",
                params={"format": "json", "q": location, "limit": 1, "addressdetails": 1},
                headers=self._headers,
            )
            if not isinstance(payload, list) or not payload:
                return GeocodeResult(coordinates=None, error=NO_RESULTS)

            result = payload[0]
            return GeocodeResult(
                coordinates=Coordinates(latitude=float(result["lat"]), longitude=float(result["lon"])),
                formatted_address=result.get("display_name"),
                address_components=self._parse_address(result.get("address")),
            )
        except ConnectorRequestError as exc:
            return GeocodeResult(coordinates=None, error=str(exc))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Unexpected Nominatim payload location=%r error=%s", location, exc)
            return GeocodeResult(coordinates=None, error=f"nominatim: malformed response ({exc})")

    def reverse(self, coordinates: Coordinates) -> GeocodeResult:
        try:
            payload = self._request_json(
                method="GET",
                url=f"{self._settings.nominatim_base_url}/reverse",
                params={
                    "format": "json",
                    "lat": coordinates.latitude,
                    "lon": coordinates.longitude,
                    "addressdetails": 1,
                },
                headers=self._headers,
            )
        except ConnectorRequestError as exc:
            return GeocodeResult(coordinates=coordinates, error=str(exc))

        if not isinstance(payload, dict) or not payload.get("display_name"):
            return GeocodeResult(coordinates=coordinates, error=NO_RESULTS)
        return GeocodeResult(
            coordinates=coordinates,
            formatted_address=payload["display_name"],
            address_components=self._parse_address(payload.get("address")),
        )

    @staticmethod
    def _parse_address(address: Any) -> AddressComponents:
        if not isinstance(address, dict):
            return AddressComponents()
        return AddressComponents(
            city=address.get("city") or address.get("town") or address.get("village"),
            state=address.get("state"),
            country=address.get("country"),
            county=address.get("county"),
            postal_code=address.get("postcode"),
        )


class FallbackGeocoder:
    """
    Try each provider in order and return the first usable answer.
    """

    def __init__(self, providers: Sequence[Geocoder]) -> None:
        if not providers:
            raise ValueError("FallbackGeocoder needs at least one provider.")
        self._providers = list(providers)

    def geocode(self, location: str) -> GeocodeResult:
        cleaned = (location or "").strip()
        if not cleaned:
            return GeocodeResult(coordinates=None, error="Empty location string")

        errors: list[str] = []
        for index, provider in enumerate(self._providers):
            result = provider.geocode(cleaned)
            if result.succeeded:
                return result
            errors.append(result.error or "failed")
            if index + 1 < len(self._providers):
                logger.info("Geocode fallback location=%r after error=%s", cleaned, result.error)

        return GeocodeResult(
            coordinates=None,
            error=f'Failed to geocode "{cleaned}": {", ".join(errors)}',
        )

    def reverse(self, coordinates: Coordinates) -> GeocodeResult:
        if not coordinates.is_valid:
            return GeocodeResult(coordinates=coordinates, error="Invalid coordinates")

        errors: list[str] = []
        for provider in self._providers:
            result = provider.reverse(coordinates)
            if result.formatted_address and result.error is None:
                return result
            errors.append(result.error or "failed")

        return GeocodeResult(
            coordinates=coordinates,
            error=f"Failed to reverse geocode coordinates: {', '.join(errors)}",
        )


def build_default_geocoder(
    *,
    settings: GeocodingSettings,
    http_settings: ExternalHTTPSettings,
) -> FallbackGeocoder:
    """
    Mapbox first when a token is configured, then Nominatim.
    """

    providers: list[Geocoder] = []
    if settings.mapbox_access_token:
        providers.append(MapboxGeocoder(settings=settings, http_settings=http_settings))
    providers.append(NominatimGeocoder(settings=settings, http_settings=http_settings))
    return FallbackGeocoder(providers)
