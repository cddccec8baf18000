"""Pydantic schemas for Events."""
from __future__ import annotations
from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from guestlist.models.enums import EventLanguage, EventStatus, KashrutLevel


class EventCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str
    event_date: datetime
    venue_name: str
    venue_address: Optional[str] = None
    description: Optional[str] = None
    max_guests: Optional[int] = Field(None, ge=0)
    venue_capacity: Optional[int] = Field(None, gt=0)
    max_plus_ones_buffer: Optional[int] = Field(None, ge=0)
    kashrut_level: Optional[KashrutLevel] = None
    noise_curfew_time: Optional[str] = Field(None, pattern=r"^\d{2}:\d{2}$")
    language_pref: Optional[EventLanguage] = None
    budget: Optional[Decimal] = None
    retention_policy_days: Optional[int] = Field(None, gt=0)
    compliance_dismissed: bool = False


class EventUpdate(BaseModel):
    """Partial update: only fields present in the payload are applied."""

    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = None
    event_date: Optional[datetime] = None
    venue_name: Optional[str] = None
    venue_address: Optional[str] = None
    description: Optional[str] = None
    max_guests: Optional[int] = Field(None, ge=0)
    venue_capacity: Optional[int] = Field(None, gt=0)
    max_plus_ones_buffer: Optional[int] = Field(None, ge=0)
    kashrut_level: Optional[KashrutLevel] = None
    noise_curfew_time: Optional[str] = Field(None, pattern=r"^\d{2}:\d{2}$")
    language_pref: Optional[EventLanguage] = None
    budget: Optional[Decimal] = None
    status: Optional[EventStatus] = None
    compliance_dismissed: Optional[bool] = None


class EventOut(BaseModel):
    event_id: str
    organizer_id: str
    title: str
    event_date: datetime
    venue_name: str
    venue_address: Optional[str] = None
    description: Optional[str] = None
    max_guests: Optional[int] = None
    venue_capacity: Optional[int] = None
    max_plus_ones_buffer: int
    kashrut_level: KashrutLevel
    noise_curfew_time: str
    language_pref: EventLanguage
    budget: Optional[Decimal] = None
    retention_policy_days: int
    compliance_dismissed: bool
    status: EventStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    rsvp_confirmed: int = 0
    rsvp_pending: int = 0
    rsvp_declined: int = 0
    rsvp_total: int = 0

    model_config = {"from_attributes": True}


class EventEnvelope(BaseModel):
    event: EventOut
    compliance_checklist: Optional[bool] = None


class EventListOut(BaseModel):
    events: list[EventOut]
    total: int
    page: int
    limit: int
