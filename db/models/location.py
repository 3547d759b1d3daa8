"""
db/models/location.py

Location model: a deduplicated place that sessions point at.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, Float, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.consumption_session import ConsumptionSession


class Location(Base, TimestampMixin):
    """
    One named place, optionally geocoded.

    usage_count and last_used_at are maintained by the session store each time
    a session referencing the place is written.
    """

    __tablename__ = "locations"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    full_address: Mapped[str | None] = mapped_column(String(500), nullable=True)

    city: Mapped[str | None] = mapped_column(String(120), nullable=True)

    state: Mapped[str | None] = mapped_column(String(120), nullable=True)

    country: Mapped[str | None] = mapped_column(String(120), nullable=True)

    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)

    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)

    is_favorite: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    is_private: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    nickname: Mapped[str | None] = mapped_column(String(120), nullable=True)

    usage_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    last_used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # ── Relationships ──────────────────────────────────────────────────────────

    sessions: Mapped[list["ConsumptionSession"]] = relationship(
        "ConsumptionSession",
        back_populates="location_entry",
        passive_deletes=True,
    )

    # ── Indexes ────────────────────────────────────────────────────────────────

    __table_args__ = (
        Index("ix_locations_name_city_state", "name", "city", "state"),
        Index("ix_locations_usage_count", "usage_count"),
    )

    def __repr__(self) -> str:
        return f"<Location id={self.id} name={self.name!r} usage_count={self.usage_count}>"
