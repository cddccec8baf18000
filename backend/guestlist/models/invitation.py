"""Invitation ORM model: one per guest, holds the RSVP capability token."""
import uuid
from sqlalchemy import Column, DateTime, ForeignKey, String, Text, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from guestlist.database import Base
from guestlist.models.enums import InvitationChannel


class Invitation(Base):
    __tablename__ = "invitations"

    invitation_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.event_id", ondelete="CASCADE"), nullable=False)
    guest_id = Column(
        String(36), ForeignKey("guests.guest_id", ondelete="CASCADE"), nullable=False, unique=True,
    )
    token = Column(String(64), nullable=False, unique=True, index=True)
    channel = Column(SAEnum(InvitationChannel, native_enum=False, length=20), nullable=False, default=InvitationChannel.whatsapp)
    whatsapp_link = Column(Text, nullable=True)
    sent_at = Column(DateTime(timezone=True), nullable=True)
    opened_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    guest = relationship("Guest", back_populates="invitation")
