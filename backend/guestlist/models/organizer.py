"""Organizer ORM model: the event owner identity."""
import uuid
from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from guestlist.database import Base


class Organizer(Base):
    __tablename__ = "organizers"

    organizer_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), nullable=False, unique=True)
    display_name = Column(String(100), nullable=False)
    role = Column(String(20), nullable=False, default="organizer")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
