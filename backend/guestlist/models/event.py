"""Event ORM model."""
import uuid
from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, Text, Enum as SAEnum,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from guestlist.database import Base
from guestlist.models.enums import EventLanguage, EventStatus, KashrutLevel


class Event(Base):
    __tablename__ = "events"

    event_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    organizer_id = Column(String(36), ForeignKey("organizers.organizer_id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    event_date = Column(DateTime(timezone=True), nullable=False)
    venue_name = Column(String(255), nullable=False)
    venue_address = Column(String(500), nullable=True)
    description = Column(Text, nullable=True)
    max_guests = Column(Integer, nullable=True)
    venue_capacity = Column(Integer, nullable=True)
    max_plus_ones_buffer = Column(Integer, nullable=False, default=30)
    kashrut_level = Column(SAEnum(KashrutLevel, native_enum=False, length=20), nullable=False, default=KashrutLevel.none)
    noise_curfew_time = Column(String(5), nullable=False, default="23:00")
    language_pref = Column(SAEnum(EventLanguage, native_enum=False, length=20), nullable=False, default=EventLanguage.hebrew)
    budget = Column(Numeric(12, 2), nullable=True)
    retention_policy_days = Column(Integer, nullable=False, default=365)
    compliance_dismissed = Column(Boolean, nullable=False, default=False)
    status = Column(SAEnum(EventStatus, native_enum=False, length=20), nullable=False, default=EventStatus.draft)
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    guests = relationship("Guest", back_populates="event", cascade="all, delete-orphan")
