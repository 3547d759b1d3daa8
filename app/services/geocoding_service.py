"""
app/services/geocoding_service.py

Caching and batching on top of the geocoding connectors.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from typing import Callable, Generic, Iterable, TypeVar

from app.connectors.geocoding_connector import Coordinates, GeocodeResult, Geocoder

logger = logging.getLogger(__name__)

T = TypeVar("T")


class GeocodeCache(Generic[T]):
    """
    Bounded LRU map with an optional per-entry time to live.

    Keys are normalised with ``lower().strip()`` so "Denver, CO" and
    " denver, co" share an entry.
    """

    def __init__(
        self,
        *,
        max_entries: int = 2048,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1.")
        self._max_entries = max_entries
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, T]] = OrderedDict()
        self._lock = threading.Lock()

    @staticmethod
    def normalize_key(key: str) -> str:
        return key.lower().strip()

    def get(self, key: str) -> T | None:
        normalized = self.normalize_key(key)
        with self._lock:
            entry = self._entries.get(normalized)
            if entry is None:
                return None
            stored_at, value = entry
            if self._ttl_seconds is not None and self._clock() - stored_at > self._ttl_seconds:
                del self._entries[normalized]
                return None
            self._entries.move_to_end(normalized)
            return value

    def put(self, key: str, value: T) -> None:
        normalized = self.normalize_key(key)
        with self._lock:
            self._entries[normalized] = (self._clock(), value)
            self._entries.move_to_end(normalized)
            while len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None


class CachedGeocoder:
    """
    Geocoder wrapper that memoises forward and reverse lookups.
    """

    def __init__(
        self,
        geocoder: Geocoder,
        *,
        cache: GeocodeCache[GeocodeResult] | None = None,
        reverse_cache: GeocodeCache[GeocodeResult] | None = None,
    ) -> None:
        self._geocoder = geocoder
        self.cache = cache if cache is not None else GeocodeCache()
        self.reverse_cache = reverse_cache if reverse_cache is not None else GeocodeCache()

    def geocode(self, location: str) -> GeocodeResult:
        cached = self.cache.get(location)
        if cached is not None:
            return cached

        result = self._geocoder.geocode(location)
        self.cache.put(location, result)
        return result

    def reverse(self, coordinates: Coordinates) -> GeocodeResult:
        key = coordinates.cache_key
        cached = self.reverse_cache.get(key)
        if cached is not None:
            return cached

        result = self._geocoder.reverse(coordinates)
        self.reverse_cache.put(key, result)
        return result


def geocode_batch(
    geocoder: Geocoder,
    locations: Iterable[str],
    *,
    delay_seconds: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> dict[str, GeocodeResult]:
    """
    Geocode locations one at a time, pausing ``delay_seconds`` between calls.
    """

    pending = list(locations)
    results: dict[str, GeocodeResult] = {}
    for index, location in enumerate(pending):
        logger.info("Geocoding %s/%s location=%r", index + 1, len(pending), location)
        results[location] = geocoder.geocode(location)
        if index < len(pending) - 1 and delay_seconds > 0:
            sleep(delay_seconds)
    return results
