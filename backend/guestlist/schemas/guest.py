"""Pydantic schemas for Guests."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from guestlist.models.enums import DietaryPreference, GuestSource, RelationshipGroup, RSVPStatus
from guestlist.validators import clean_email


class GuestCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name_hebrew: str
    name_transliteration: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    relationship_group: Optional[RelationshipGroup] = None
    dietary_preference: Optional[DietaryPreference] = None
    dietary_notes: Optional[str] = None
    accessibility_needs: Optional[str] = None
    table_number: Optional[int] = Field(None, ge=0)
    seat_number: Optional[int] = Field(None, ge=0)
    plus_one_of: Optional[str] = None
    plus_one_allowance: Optional[int] = Field(None, ge=0)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return clean_email(v)


class GuestUpdate(BaseModel):
    """Partial update: only fields present in the payload are applied."""

    model_config = ConfigDict(extra="forbid")

    name_hebrew: Optional[str] = None
    name_transliteration: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    rsvp_status: Optional[RSVPStatus] = None
    table_number: Optional[int] = Field(None, ge=0)
    seat_number: Optional[int] = Field(None, ge=0)
    relationship_group: Optional[RelationshipGroup] = None
    dietary_preference: Optional[DietaryPreference] = None
    dietary_notes: Optional[str] = None
    accessibility_needs: Optional[str] = None
    plus_one_allowance: Optional[int] = Field(None, ge=0)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return clean_email(v)


class CapacityWarning(BaseModel):
    type: str = "capacity_warning"
    message: str
    confirmed: int
    capacity: int
    percent: int


class GuestOut(BaseModel):
    guest_id: str
    event_id: str
    name_hebrew: str
    name_transliteration: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    rsvp_status: RSVPStatus
    dietary_preference: DietaryPreference
    dietary_notes: Optional[str] = None
    accessibility_needs: Optional[str] = None
    table_number: Optional[int] = None
    seat_number: Optional[int] = None
    relationship_group: Optional[RelationshipGroup] = None
    plus_one_of: Optional[str] = None
    plus_one_allowance: int
    source: GuestSource
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # Invitation fields, flattened
    token: Optional[str] = None
    whatsapp_link: Optional[str] = None
    sent_at: Optional[datetime] = None
    opened_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class GuestCreateOut(BaseModel):
    guest: GuestOut
    rsvp_url: str
    whatsapp_link: Optional[str] = None
    warning: Optional[CapacityWarning] = None


class GuestUpdateOut(BaseModel):
    guest: GuestOut
    warning: Optional[CapacityWarning] = None


class RSVPSummary(BaseModel):
    pending: int = 0
    confirmed: int = 0
    declined: int = 0
    total: int = 0


class GuestListOut(BaseModel):
    guests: list[GuestOut]
    summary: RSVPSummary
    total: int
    page: int
    limit: int
    warning: Optional[CapacityWarning] = None


class SkippedRow(BaseModel):
    row: int
    reason: str


class WarningRow(BaseModel):
    row: int
    name: str
    warning: str


class ImportDetails(BaseModel):
    skipped: list[SkippedRow] = []
    warnings: list[WarningRow] = []


class ImportResultOut(BaseModel):
    imported: int
    skipped: int
    warnings: int
    message: str
    details: ImportDetails
