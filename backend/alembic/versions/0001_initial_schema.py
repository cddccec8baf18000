"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Creates all tables for the guest list service:
organizers, events, guests, invitations.
Guests have no soft-delete column; removal is permanent.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _in(column: str, *values: str) -> str:
    quoted = ", ".join(f"'{v}'" for v in values)
    return f"{column} IN ({quoted})"


def upgrade() -> None:
    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        # similarity() for fuzzy Hebrew name search
        op.execute("CREATE EXTENSION IF NOT EXISTS pg_trgm")

    # --- organizers ---
    op.create_table(
        "organizers",
        sa.Column("organizer_id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("display_name", sa.String(100), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="organizer"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- events ---
    op.create_table(
        "events",
        sa.Column("event_id", sa.String(36), primary_key=True),
        sa.Column("organizer_id", sa.String(36), sa.ForeignKey("organizers.organizer_id"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("event_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("venue_name", sa.String(255), nullable=False),
        sa.Column("venue_address", sa.String(500), nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("max_guests", sa.Integer, nullable=True),
        sa.Column("venue_capacity", sa.Integer, nullable=True),
        sa.Column("max_plus_ones_buffer", sa.Integer, nullable=False, server_default="30"),
        sa.Column("kashrut_level", sa.String(20), nullable=False, server_default="none"),
        sa.Column("noise_curfew_time", sa.String(5), nullable=False, server_default="23:00"),
        sa.Column("language_pref", sa.String(20), nullable=False, server_default="hebrew"),
        sa.Column("budget", sa.Numeric(12, 2), nullable=True),
        sa.Column("retention_policy_days", sa.Integer, nullable=False, server_default="365"),
        sa.Column("compliance_dismissed", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint(_in("status", "draft", "published", "cancelled", "completed"), name="ck_events_status"),
        sa.CheckConstraint(_in("kashrut_level", "none", "regular", "mehadrin", "chalav_yisrael"), name="ck_events_kashrut"),
        sa.CheckConstraint(_in("language_pref", "hebrew", "arabic", "english"), name="ck_events_language"),
    )
    op.create_index("ix_events_organizer_id", "events", ["organizer_id"])

    # --- guests ---
    op.create_table(
        "guests",
        sa.Column("guest_id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.event_id", ondelete="CASCADE"), nullable=False),
        sa.Column("name_hebrew", sa.String(255), nullable=False),
        sa.Column("name_transliteration", sa.String(255), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("rsvp_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("dietary_preference", sa.String(20), nullable=False, server_default="none"),
        sa.Column("dietary_notes", sa.Text, nullable=True),
        sa.Column("accessibility_needs", sa.Text, nullable=True),
        sa.Column("table_number", sa.Integer, nullable=True),
        sa.Column("seat_number", sa.Integer, nullable=True),
        sa.Column("relationship_group", sa.String(20), nullable=True),
        sa.Column("plus_one_of", sa.String(36), sa.ForeignKey("guests.guest_id", ondelete="SET NULL"), nullable=True),
        sa.Column("plus_one_allowance", sa.Integer, nullable=False, server_default="0"),
        sa.Column("source", sa.String(20), nullable=False, server_default="registered"),
        sa.Column("privacy_accepted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint(_in("rsvp_status", "pending", "confirmed", "declined"), name="ck_guests_rsvp_status"),
        sa.CheckConstraint(
            _in("dietary_preference", "none", "vegetarian", "vegan", "kosher_regular", "kosher_mehadrin"),
            name="ck_guests_dietary",
        ),
        sa.CheckConstraint(
            "relationship_group IS NULL OR "
            + _in("relationship_group", "family_bride", "family_groom", "friends", "work", "community", "other"),
            name="ck_guests_relationship",
        ),
        sa.CheckConstraint(_in("source", "registered", "imported"), name="ck_guests_source"),
    )
    op.create_index("ix_guests_event_status", "guests", ["event_id", "rsvp_status"])
    op.create_index("ix_guests_event_created", "guests", ["event_id", "created_at"])
    if bind.dialect.name == "postgresql":
        op.execute("CREATE INDEX ix_guests_name_trgm ON guests USING gin (name_hebrew gin_trgm_ops)")

    # --- invitations ---
    op.create_table(
        "invitations",
        sa.Column("invitation_id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.event_id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "guest_id", sa.String(36), sa.ForeignKey("guests.guest_id", ondelete="CASCADE"),
            nullable=False, unique=True,
        ),
        sa.Column("token", sa.String(64), nullable=False),
        sa.Column("channel", sa.String(20), nullable=False, server_default="whatsapp"),
        sa.Column("whatsapp_link", sa.Text, nullable=True),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("opened_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_invitations_token", "invitations", ["token"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_invitations_token", table_name="invitations")
    op.drop_table("invitations")
    op.drop_table("guests")
    op.drop_index("ix_events_organizer_id", table_name="events")
    op.drop_table("events")
    op.drop_table("organizers")
