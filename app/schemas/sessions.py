"""
app/schemas/sessions.py

Response schemas for session history endpoints.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from app.domain.quantity import format_quantity
from app.domain.session_record import LocationEntity, NormalizedSessionRecord


class QuantityResponse(BaseModel):
    amount: float
    unit: str
    type: str
    display: str


class LocationResponse(BaseModel):
    id: str
    name: str
    full_address: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    usage_count: int = Field(0, ge=0)
    last_used_at: datetime | None = None

    @classmethod
    def from_entity(cls, entity: LocationEntity) -> LocationResponse:
        return cls(
            id=entity.id,
            name=entity.name,
            full_address=entity.full_address,
            city=entity.city,
            state=entity.state,
            country=entity.country,
            latitude=entity.latitude,
            longitude=entity.longitude,
            usage_count=entity.usage_count,
            last_used_at=entity.last_used_at,
        )


class SessionResponse(BaseModel):
    """
    API response model for one consumption session.
    """

    id: str
    date: str
    time: str
    location: str
    latitude: float | None = None
    longitude: float | None = None
    who_with: str
    vessel: str
    vessel_category: str
    accessory_used: str
    my_vessel: bool
    my_substance: bool
    strain_name: str
    strain_type: str | None = None
    thc_percentage: float | None = Field(None, ge=0, le=100)
    purchased_legally: bool
    state_purchased: str | None = None
    tobacco: bool
    kief: bool
    concentrate: bool
    lavender: bool
    quantity: QuantityResponse
    comments: str | None = None
    location_ref: LocationResponse | None = None

    @classmethod
    def from_record(cls, record: NormalizedSessionRecord) -> SessionResponse:
        payload = record.to_dict()
        payload["quantity"] = QuantityResponse(
            amount=record.quantity.amount,
            unit=record.quantity.unit,
            type=record.quantity.type,
            display=format_quantity(record.quantity),
        )
        payload["location_ref"] = (
            LocationResponse.from_entity(record.location_ref) if record.location_ref else None
        )
        return cls(**payload)


class SessionListResponse(BaseModel):
    items: list[SessionResponse] = Field(default_factory=list)
    count: int = Field(..., ge=0)
    limit: int | None = None
    offset: int = Field(0, ge=0)
