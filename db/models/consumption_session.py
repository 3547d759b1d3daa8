"""
db/models/consumption_session.py

ConsumptionSession model: one logged session.
"""

import uuid
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Date, Float, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.location import Location


class ConsumptionSession(Base, TimestampMixin):
    """
    Persisted form of a normalized session record.

    quantity holds the serialized tagged quantity (amount, unit, type) as JSON
    text. location keeps the display string even when location_id is set.
    """

    __tablename__ = "consumption_sessions"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    session_date: Mapped[date] = mapped_column(Date, nullable=False)

    session_time: Mapped[str] = mapped_column(String(5), nullable=False, comment="HH:MM, 24h")

    location: Mapped[str] = mapped_column(String(255), nullable=False)

    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)

    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)

    who_with: Mapped[str] = mapped_column(String(255), nullable=False, default="Unknown")

    vessel: Mapped[str] = mapped_column(String(255), nullable=False)

    vessel_category: Mapped[str] = mapped_column(String(32), nullable=False)

    accessory_used: Mapped[str] = mapped_column(String(255), nullable=False, default="None")

    my_vessel: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    my_substance: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    strain_name: Mapped[str] = mapped_column(String(255), nullable=False)

    strain_type: Mapped[str | None] = mapped_column(String(64), nullable=True)

    thc_percentage: Mapped[float | None] = mapped_column(Float, nullable=True)

    purchased_legally: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    state_purchased: Mapped[str | None] = mapped_column(String(120), nullable=True)

    tobacco: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    kief: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    concentrate: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    lavender: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    quantity: Mapped[str] = mapped_column(Text, nullable=False)

    comments: Mapped[str | None] = mapped_column(Text, nullable=True)

    location_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("locations.id", ondelete="SET NULL"),
        nullable=True,
    )

    # ── Relationships ──────────────────────────────────────────────────────────

    location_entry: Mapped["Location | None"] = relationship(
        "Location",
        back_populates="sessions",
    )

    # ── Indexes ────────────────────────────────────────────────────────────────

    __table_args__ = (
        Index("ix_consumption_sessions_session_date", "session_date"),
        Index("ix_consumption_sessions_strain_name", "strain_name"),
        Index("ix_consumption_sessions_vessel_category", "vessel_category"),
        Index("ix_consumption_sessions_location_id", "location_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<ConsumptionSession id={self.id} date={self.session_date} "
            f"vessel={self.vessel!r} strain={self.strain_name!r}>"
        )
