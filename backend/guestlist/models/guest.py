"""Guest ORM model.

Guests are hard-deleted; there is deliberately no soft-delete column here.
"""
import uuid
from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from guestlist.database import Base
from guestlist.models.enums import DietaryPreference, GuestSource, RelationshipGroup, RSVPStatus


class Guest(Base):
    __tablename__ = "guests"
    __table_args__ = (
        Index("ix_guests_event_status", "event_id", "rsvp_status"),
        Index("ix_guests_event_created", "event_id", "created_at"),
    )

    guest_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.event_id", ondelete="CASCADE"), nullable=False)
    name_hebrew = Column(String(255), nullable=False)
    name_transliteration = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(32), nullable=True)  # canonical +972XXXXXXXXX only
    rsvp_status = Column(SAEnum(RSVPStatus, native_enum=False, length=20), nullable=False, default=RSVPStatus.pending)
    dietary_preference = Column(SAEnum(DietaryPreference, native_enum=False, length=20), nullable=False, default=DietaryPreference.none)
    dietary_notes = Column(Text, nullable=True)
    accessibility_needs = Column(Text, nullable=True)
    table_number = Column(Integer, nullable=True)
    seat_number = Column(Integer, nullable=True)
    relationship_group = Column(SAEnum(RelationshipGroup, native_enum=False, length=20), nullable=True)
    plus_one_of = Column(String(36), ForeignKey("guests.guest_id", ondelete="SET NULL"), nullable=True)
    plus_one_allowance = Column(Integer, nullable=False, default=0)
    source = Column(SAEnum(GuestSource, native_enum=False, length=20), nullable=False, default=GuestSource.registered)
    privacy_accepted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    event = relationship("Event", back_populates="guests")
    invitation = relationship(
        "Invitation", back_populates="guest", uselist=False, cascade="all, delete-orphan",
    )

    # Flattened invitation fields for listings and exports
    @property
    def token(self):
        return self.invitation.token if self.invitation else None

    @property
    def whatsapp_link(self):
        return self.invitation.whatsapp_link if self.invitation else None

    @property
    def sent_at(self):
        return self.invitation.sent_at if self.invitation else None

    @property
    def opened_at(self):
        return self.invitation.opened_at if self.invitation else None
