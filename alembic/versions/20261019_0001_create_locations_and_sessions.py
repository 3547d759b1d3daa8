"""create locations and consumption_sessions tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 10:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "locations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("full_address", sa.String(length=500), nullable=True),
        sa.Column("city", sa.String(length=120), nullable=True),
        sa.Column("state", sa.String(length=120), nullable=True),
        sa.Column("country", sa.String(length=120), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("is_favorite", sa.Boolean(), nullable=False),
        sa.Column("is_private", sa.Boolean(), nullable=False),
        sa.Column("nickname", sa.String(length=120), nullable=True),
        sa.Column("usage_count", sa.Integer(), nullable=False),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_locations"),
    )
    op.create_index("ix_locations_name_city_state", "locations", ["name", "city", "state"], unique=False)
    op.create_index("ix_locations_usage_count", "locations", ["usage_count"], unique=False)

    op.create_table(
        "consumption_sessions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("session_date", sa.Date(), nullable=False),
        sa.Column("session_time", sa.String(length=5), nullable=False, comment="HH:MM, 24h"),
        sa.Column("location", sa.String(length=255), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("who_with", sa.String(length=255), nullable=False),
        sa.Column("vessel", sa.String(length=255), nullable=False),
        sa.Column("vessel_category", sa.String(length=32), nullable=False),
        sa.Column("accessory_used", sa.String(length=255), nullable=False),
        sa.Column("my_vessel", sa.Boolean(), nullable=False),
        sa.Column("my_substance", sa.Boolean(), nullable=False),
        sa.Column("strain_name", sa.String(length=255), nullable=False),
        sa.Column("strain_type", sa.String(length=64), nullable=True),
        sa.Column("thc_percentage", sa.Float(), nullable=True),
        sa.Column("purchased_legally", sa.Boolean(), nullable=False),
        sa.Column("state_purchased", sa.String(length=120), nullable=True),
        sa.Column("tobacco", sa.Boolean(), nullable=False),
        sa.Column("kief", sa.Boolean(), nullable=False),
        sa.Column("concentrate", sa.Boolean(), nullable=False),
        sa.Column("lavender", sa.Boolean(), nullable=False),
        sa.Column("quantity", sa.Text(), nullable=False),
        sa.Column("comments", sa.Text(), nullable=True),
        sa.Column("location_id", sa.Uuid(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(
            ["location_id"],
            ["locations.id"],
            name="fk_consumption_sessions_location_id_locations",
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_consumption_sessions"),
    )
    op.create_index(
        "ix_consumption_sessions_session_date", "consumption_sessions", ["session_date"], unique=False
    )
    op.create_index(
        "ix_consumption_sessions_strain_name", "consumption_sessions", ["strain_name"], unique=False
    )
    op.create_index(
        "ix_consumption_sessions_vessel_category", "consumption_sessions", ["vessel_category"], unique=False
    )
    op.create_index(
        "ix_consumption_sessions_location_id", "consumption_sessions", ["location_id"], unique=False
    )


def downgrade() -> None:
    op.drop_index("ix_consumption_sessions_location_id", table_name="consumption_sessions")
    op.drop_index("ix_consumption_sessions_vessel_category", table_name="consumption_sessions")
    op.drop_index("ix_consumption_sessions_strain_name", table_name="consumption_sessions")
    op.drop_index("ix_consumption_sessions_session_date", table_name="consumption_sessions")
    op.drop_table("consumption_sessions")
    op.drop_index("ix_locations_usage_count", table_name="locations")
    op.drop_index("ix_locations_name_city_state", table_name="locations")
    op.drop_table("locations")
