"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

_ALLOWED_STORE_BACKENDS = {"database", "local"}


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


@dataclass(frozen=True)
class ImportSettings:
    """
    Runtime settings for session CSV/TSV imports.
    """

    sample_size: int = 5
    max_row_errors: int = 1000
    log_row_errors: bool = True
    geocode_enabled: bool = True


@dataclass(frozen=True)
class ExternalHTTPSettings:
    """
    Shared HTTP behavior settings for external connectors.
    """

    timeout_seconds: float = 10.0
    max_retries: int = 2
    backoff_initial_seconds: float = 0.5
    backoff_multiplier: float = 2.0
    rate_limit_per_second: float = 1.0


@dataclass(frozen=True)
class GeocodingSettings:
    """
    Geocoding provider settings. Mapbox is tried first when a token is set.
    """

    mapbox_access_token: str | None = None
    mapbox_base_url: str = "https://api.mapbox.com/geocoding/v5/mapbox.places"
    nominatim_base_url: str = "https://nominatim.openstreetmap.org"
    user_agent: str = "Session-Tracker/1.0"
    batch_delay_seconds: float = 1.0
    cache_max_entries: int = 2048
    cache_ttl_seconds: float | None = None


@dataclass(frozen=True)
class StorageSettings:
    """
    Session storage backend selection.
    """

    backend: str = "database"
    local_path: str = "data/sessions.json"


@lru_cache(maxsize=1)
def get_import_settings() -> ImportSettings:
    """
    Return cached import settings from environment variables.
    """

    return ImportSettings(
        sample_size=max(1, _get_int_env("SESSION_IMPORT_SAMPLE_SIZE", 5)),
        max_row_errors=max(1, _get_int_env("SESSION_IMPORT_MAX_ROW_ERRORS", 1000)),
        log_row_errors=_get_bool_env("SESSION_IMPORT_LOG_ROW_ERRORS", True),
        geocode_enabled=_get_bool_env("SESSION_IMPORT_GEOCODE", True),
    )


@lru_cache(maxsize=1)
def get_external_http_settings() -> ExternalHTTPSettings:
    """
    Return shared connector HTTP settings from environment variables.
    """

    return ExternalHTTPSettings(
        timeout_seconds=max(1.0, _get_float_env("EXTERNAL_HTTP_TIMEOUT_SECONDS", 10.0)),
        max_retries=max(0, _get_int_env("EXTERNAL_HTTP_MAX_RETRIES", 2)),
        backoff_initial_seconds=max(0.1, _get_float_env("EXTERNAL_HTTP_BACKOFF_INITIAL_SECONDS", 0.5)),
        backoff_multiplier=max(1.0, _get_float_env("EXTERNAL_HTTP_BACKOFF_MULTIPLIER", 2.0)),
        rate_limit_per_second=max(0.1, _get_float_env("EXTERNAL_HTTP_RATE_LIMIT_PER_SECOND", 1.0)),
    )


@lru_cache(maxsize=1)
def get_geocoding_settings() -> GeocodingSettings:
    """
    Return geocoding settings from environment variables.
    """

    ttl = _get_float_env("GEOCODE_CACHE_TTL_SECONDS", 0.0)
    return GeocodingSettings(
        mapbox_access_token=_get_optional_str_env("MAPBOX_ACCESS_TOKEN"),
        mapbox_base_url=_get_str_env(
            "MAPBOX_GEOCODING_URL",
            "https://api.mapbox.com/geocoding/v5/mapbox.places",
        ),
        nominatim_base_url=_get_str_env("NOMINATIM_BASE_URL", "https://nominatim.openstreetmap.org"),
        user_agent=_get_str_env("GEOCODE_USER_AGENT", "Session-Tracker/1.0"),
        batch_delay_seconds=max(0.0, _get_float_env("GEOCODE_BATCH_DELAY_SECONDS", 1.0)),
        cache_max_entries=max(1, _get_int_env("GEOCODE_CACHE_MAX_ENTRIES", 2048)),
        cache_ttl_seconds=ttl if ttl > 0 else None,
    )


@lru_cache(maxsize=1)
def get_storage_settings() -> StorageSettings:
    """
    Return the storage backend selection.

    Raises RuntimeError for an unknown SESSION_STORE_BACKEND so a typo never
    silently routes writes to the wrong place.
    """

    backend = _get_str_env("SESSION_STORE_BACKEND", "database").lower()
    if backend not in _ALLOWED_STORE_BACKENDS:
        raise RuntimeError(
            f"SESSION_STORE_BACKEND '{backend}' is not valid. "
            f"Allowed values: {sorted(_ALLOWED_STORE_BACKENDS)}."
        )
    return StorageSettings(
        backend=backend,
        local_path=_get_str_env("SESSION_STORE_LOCAL_PATH", "data/sessions.json"),
    )
