"""
app/domain/session_record.py

Domain models used by the session import flow.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from datetime import date, datetime
from typing import Any, Mapping

from app.domain.quantity import QuantityValue


@dataclass
class LocationEntity:
    """
    A deduplicated place referenced by one or more sessions.

    Mutable while a run is in progress: the resolver increments
    ``usage_count`` and backfills address parts as it sees repeat references.
    """

    id: str
    name: str
    full_address: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    is_favorite: bool = False
    is_private: bool = False
    nickname: str | None = None
    usage_count: int = 0
    last_used_at: datetime | None = None

    @property
    def dedup_key(self) -> tuple[str, str, str]:
        return (self.name, self.city or "", self.state or "")

    @property
    def needs_backfill(self) -> bool:
        return not (self.city and self.state and self.country)

    def snapshot(self) -> LocationEntity:
        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["last_used_at"] = self.last_used_at.isoformat() if self.last_used_at else None
        return payload

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> LocationEntity:
        last_used_raw = payload.get("last_used_at")
        return cls(
            id=str(payload["id"]),
            name=str(payload.get("name") or ""),
            full_address=payload.get("full_address"),
            city=payload.get("city"),
            state=payload.get("state"),
            country=payload.get("country"),
            latitude=payload.get("latitude"),
            longitude=payload.get("longitude"),
            is_favorite=bool(payload.get("is_favorite", False)),
            is_private=bool(payload.get("is_private", False)),
            nickname=payload.get("nickname"),
            usage_count=int(payload.get("usage_count") or 0),
            last_used_at=datetime.fromisoformat(last_used_raw) if last_used_raw else None,
        )


@dataclass(frozen=True)
class NormalizedSessionRecord:
    """
    One consumption session prepared for persistence.
    """

    id: str
    date: str
    time: str
    location: str
    who_with: str
    vessel: str
    vessel_category: str
    accessory_used: str
    my_vessel: bool
    my_substance: bool
    strain_name: str
    purchased_legally: bool
    tobacco: bool
    kief: bool
    concentrate: bool
    lavender: bool
    quantity: QuantityValue
    latitude: float | None = None
    longitude: float | None = None
    strain_type: str | None = None
    thc_percentage: float | None = None
    state_purchased: str | None = None
    comments: str | None = None
    location_ref: LocationEntity | None = None

    @property
    def session_date(self) -> date:
        return date.fromisoformat(self.date)

    def to_dict(self) -> dict[str, Any]:
        payload = {
            "id": self.id,
            "date": self.date,
            "time": self.time,
            "location": self.location,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "who_with": self.who_with,
            "vessel": self.vessel,
            "vessel_category": self.vessel_category,
            "accessory_used": self.accessory_used,
            "my_vessel": self.my_vessel,
            "my_substance": self.my_substance,
            "strain_name": self.strain_name,
            "strain_type": self.strain_type,
            "thc_percentage": self.thc_percentage,
            "purchased_legally": self.purchased_legally,
            "state_purchased": self.state_purchased,
            "tobacco": self.tobacco,
            "kief": self.kief,
            "concentrate": self.concentrate,
            "lavender": self.lavender,
            "quantity": self.quantity.to_dict(),
            "comments": self.comments,
            "location_ref": self.location_ref.to_dict() if self.location_ref else None,
        }
        return payload

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> NormalizedSessionRecord:
        quantity_raw = payload.get("quantity") or {}
        if isinstance(quantity_raw, str):
            quantity = QuantityValue.from_json(quantity_raw)
        else:
            quantity = QuantityValue.from_dict(quantity_raw)

        location_raw = payload.get("location_ref")
        return cls(
            id=str(payload["id"]),
            date=str(payload["date"]),
            time=str(payload["time"]),
            location=str(payload.get("location") or ""),
            latitude=payload.get("latitude"),
            longitude=payload.get("longitude"),
            who_with=str(payload.get("who_with") or ""),
            vessel=str(payload.get("vessel") or ""),
            vessel_category=str(payload.get("vessel_category") or ""),
            accessory_used=str(payload.get("accessory_used") or ""),
            my_vessel=bool(payload.get("my_vessel", False)),
            my_substance=bool(payload.get("my_substance", False)),
            strain_name=str(payload.get("strain_name") or ""),
            strain_type=payload.get("strain_type"),
            thc_percentage=payload.get("thc_percentage"),
            purchased_legally=bool(payload.get("purchased_legally", False)),
            state_purchased=payload.get("state_purchased"),
            tobacco=bool(payload.get("tobacco", False)),
            kief=bool(payload.get("kief", False)),
            concentrate=bool(payload.get("concentrate", False)),
            lavender=bool(payload.get("lavender", False)),
            quantity=quantity,
            comments=payload.get("comments"),
            location_ref=LocationEntity.from_dict(location_raw) if location_raw else None,
        )


@dataclass(frozen=True)
class RowError:
    """
    One failed row. ``row`` is 1-based; 0 marks a whole-file failure.
    """

    row: int
    message: str
    data: dict[str, str] | None = None


@dataclass
class GeocodingTally:
    successful: int = 0
    failed: int = 0

    def record(self, *, success: bool) -> None:
        if success:
            self.successful += 1
        else:
            self.failed += 1


@dataclass(frozen=True)
class SampleTransformation:
    original: dict[str, str]
    transformed: NormalizedSessionRecord


@dataclass(frozen=True)
class ValidationReport:
    """
    Dry-run outcome: header check plus a handful of sample transformations.
    """

    is_valid: bool
    sample_transformations: list[SampleTransformation] = field(default_factory=list)
    vessels_found: list[str] = field(default_factory=list)
    issues: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class MigrationStats:
    """
    End-of-run commit summary.
    """

    total_rows: int
    successful_inserts: int
    errors: list[RowError] = field(default_factory=list)
    geocoding_results: GeocodingTally = field(default_factory=GeocodingTally)
    new_vessels: list[str] = field(default_factory=list)
    vessel_categories: dict[str, int] = field(default_factory=dict)
    locations_resolved: int = 0

    @property
    def failed_rows(self) -> int:
        return self.total_rows - self.successful_inserts

    @property
    def success_rate(self) -> float:
        if self.total_rows == 0:
            return 0.0
        return round(self.successful_inserts / self.total_rows * 100, 1)


@dataclass(frozen=True)
class SessionFilters:
    """
    History view filters; all optional, combined with AND.
    """

    start_date: str | None = None
    end_date: str | None = None
    strain_name: str | None = None
    location: str | None = None
    vessel: str | None = None
    limit: int | None = None
    offset: int = 0

    def matches(self, record: NormalizedSessionRecord) -> bool:
        if self.start_date and record.date < self.start_date:
            return False
        if self.end_date and record.date > self.end_date:
            return False
        if self.strain_name and self.strain_name.lower() not in record.strain_name.lower():
            return False
        if self.location and self.location.lower() not in record.location.lower():
            return False
        if self.vessel and self.vessel != record.vessel and self.vessel != record.vessel_category:
            return False
        return True
