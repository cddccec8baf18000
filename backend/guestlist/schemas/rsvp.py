"""Pydantic schemas for the public RSVP flow."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict

from guestlist.models.enums import DietaryPreference, EventLanguage, KashrutLevel, RSVPStatus


class RSVPGuestOut(BaseModel):
    guest_id: str
    name_hebrew: str
    name_transliteration: Optional[str] = None
    rsvp_status: RSVPStatus
    dietary_preference: DietaryPreference
    dietary_notes: Optional[str] = None

    model_config = {"from_attributes": True}


class RSVPEventOut(BaseModel):
    event_id: str
    title: str
    event_date: datetime
    venue_name: str
    venue_address: Optional[str] = None
    kashrut_level: KashrutLevel
    language_pref: EventLanguage

    model_config = {"from_attributes": True}


class RSVPFetchOut(BaseModel):
    guest: RSVPGuestOut
    event: RSVPEventOut


class RSVPSubmit(BaseModel):
    model_config = ConfigDict(extra="forbid")

    rsvp_status: str
    dietary_preference: Optional[DietaryPreference] = None
    dietary_notes: Optional[str] = None


class RSVPSubmitOut(BaseModel):
    message: str
    guest: RSVPGuestOut
