"""Guest repository: CRUD and search over an organizer's guests.

Every operation first proves the caller owns the event (see
event_service.get_owned_event); a guest of someone else's event is simply
"not found". Writes that can move the confirmed count re-run the capacity
monitor after commit.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from guestlist.auth import OrganizerIdentity
from guestlist.config import settings
from guestlist.errors import NotFoundError, ValidationError, map_store_error
from guestlist.models.enums import (
    DietaryPreference, GuestSource, RelationshipGroup, RSVPStatus, parse_enum,
)
from guestlist.models.event import Event
from guestlist.models.guest import Guest
from guestlist.models.invitation import Invitation
from guestlist.services import capacity_service, invitation_service
from guestlist.services.event_service import get_owned_event
from guestlist.services.phone import normalize_phone

logger = logging.getLogger(__name__)

_ENUM_FIELDS = {
    "rsvp_status": (RSVPStatus, "סטטוס RSVP לא תקין"),
    "dietary_preference": (DietaryPreference, "סוג תזונה לא תקין"),
    "relationship_group": (RelationshipGroup, "קבוצת יחסים לא תקינה"),
}
_NON_NULLABLE = {"name_hebrew", "rsvp_status", "dietary_preference", "plus_one_allowance"}
_TEXT_FIELDS = {"name_transliteration", "dietary_notes", "accessibility_needs"}
_UPDATABLE = {
    "name_hebrew", "name_transliteration", "email", "phone", "rsvp_status",
    "table_number", "seat_number", "relationship_group", "dietary_preference",
    "dietary_notes", "accessibility_needs", "plus_one_allowance",
}


def _clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _escape_like(text: str) -> str:
    # LIKE wildcards in user input match literally
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def clean_guest_fields(fields: dict[str, Any], partial: bool = False) -> dict[str, Any]:
    """Validate and canonicalize guest fields.

    With partial=False the result is a full insert payload with defaults
    applied; with partial=True only the keys present in `fields` come back.
    Raises ValidationError naming the offending field.
    """
    cleaned: dict[str, Any] = {}

    if "name_hebrew" in fields or not partial:
        name = _clean_text(fields.get("name_hebrew"))
        if not name:
            raise ValidationError("שם בעברית הוא שדה חובה")
        cleaned["name_hebrew"] = name

    for field, value in fields.items():
        if field == "name_hebrew":
            continue
        if partial and value is None and field in _NON_NULLABLE:
            raise ValidationError(f"השדה {field} אינו יכול להיות ריק")
        if field in _ENUM_FIELDS:
            enum_cls, message = _ENUM_FIELDS[field]
            if value is None:
                cleaned[field] = None
                continue
            member = parse_enum(enum_cls, value)
            if member is None:
                raise ValidationError(f"{message} ({field})")
            cleaned[field] = member
        elif field == "phone":
            cleaned["phone"] = normalize_phone(value)
        elif field == "email":
            email = _clean_text(value)
            cleaned["email"] = email.lower() if email else None
        elif field in _TEXT_FIELDS:
            cleaned[field] = _clean_text(value)
        else:
            cleaned[field] = value

    if not partial:
        if cleaned.get("dietary_preference") is None:
            cleaned["dietary_preference"] = DietaryPreference.none
        if cleaned.get("plus_one_allowance") is None:
            cleaned["plus_one_allowance"] = 0
        cleaned.pop("rsvp_status", None)
    return cleaned


def add_guest(
    db: Session,
    event: Event,
    fields: dict[str, Any],
    source: GuestSource = GuestSource.registered,
) -> tuple[Guest, Invitation]:
    """Insert a guest and issue its invitation. Flushes, does not commit."""
    values = clean_guest_fields(fields)

    plus_one_of = values.get("plus_one_of")
    if plus_one_of is not None:
        host = (
            db.query(Guest.guest_id)
            .filter(Guest.guest_id == str(plus_one_of), Guest.event_id == event.event_id)
            .first()
        )
        if host is None:
            raise ValidationError("האורח המלווה לא נמצא (plus_one_of)")

    guest = Guest(
        event_id=event.event_id,
        source=source,
        privacy_accepted_at=datetime.now(timezone.utc),
        **values,
    )
    db.add(guest)
    db.flush()
    invitation = invitation_service.issue_invitation(
        db, event.event_id, guest.guest_id, event.title, guest.phone,
    )
    return guest, invitation


def create_guest(
    db: Session, organizer: OrganizerIdentity, event_id: str, fields: dict[str, Any]
) -> tuple[Guest, Invitation, Optional[dict]]:
    """Create a guest + invitation, then evaluate capacity."""
    event = get_owned_event(db, organizer, event_id)
    try:
        guest, invitation = add_guest(db, event, fields)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise map_store_error(exc, "הוספת האורח נכשלה") from exc

    db.refresh(guest)
    logger.info("Added guest %s to event %s", guest.guest_id, event.event_id)
    warning = capacity_service.evaluate(db, event.event_id, event.venue_capacity)
    return guest, invitation, warning


def list_guests(
    db: Session,
    organizer: OrganizerIdentity,
    event_id: str,
    status_filter: Optional[str] = None,
    search: Optional[str] = None,
    page: int = 1,
    limit: int = 100,
) -> dict[str, Any]:
    """Filtered, paginated guests plus whole-event RSVP summary and capacity warning.

    The page, the filtered count and the summary are separate reads and may
    disagree briefly under concurrent writes.
    """
    event = get_owned_event(db, organizer, event_id)

    query = db.query(Guest).filter(Guest.event_id == event.event_id)
    rsvp_status = parse_enum(RSVPStatus, status_filter) if status_filter else None
    if rsvp_status is not None:
        query = query.filter(Guest.rsvp_status == rsvp_status)

    search = (search or "").strip()
    if search:
        pattern = _escape_like(search)
        query = query.filter(
            or_(
                func.similarity(Guest.name_hebrew, search) >= settings.SEARCH_SIMILARITY_THRESHOLD,
                Guest.name_transliteration.ilike(f"%{pattern}%", escape="\\"),
            )
        )

    total = query.count()
    guests = (
        query.options(joinedload(Guest.invitation))
        .order_by(Guest.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return {
        "guests": guests,
        "summary": capacity_service.rsvp_summary(db, event.event_id),
        "total": total,
        "page": page,
        "limit": limit,
        "warning": capacity_service.evaluate(db, event.event_id, event.venue_capacity),
    }


def get_owned_guest(db: Session, organizer: OrganizerIdentity, guest_id: str) -> Guest:
    guest = (
        db.query(Guest)
        .join(Event, Event.event_id == Guest.event_id)
        .filter(
            Guest.guest_id == str(guest_id),
            Event.organizer_id == organizer.id,
            Event.deleted_at.is_(None),
        )
        .first()
    )
    if guest is None:
        raise NotFoundError("האורח לא נמצא")
    return guest


def update_guest(
    db: Session, organizer: OrganizerIdentity, guest_id: str, updates: dict[str, Any]
) -> tuple[Guest, Optional[dict]]:
    """Apply only the supplied fields; re-evaluate capacity after commit."""
    guest = get_owned_guest(db, organizer, guest_id)

    unknown = set(updates) - _UPDATABLE
    if unknown:
        raise ValidationError(f"שדות לא מוכרים: {', '.join(sorted(unknown))}")

    for field, value in clean_guest_fields(updates, partial=True).items():
        setattr(guest, field, value)
    guest.updated_at = datetime.now(timezone.utc)

    invitation = guest.invitation
    if "phone" in updates and invitation is not None:
        invitation.whatsapp_link = invitation_service.build_whatsapp_link(
            guest.phone,
            guest.event.title,
            invitation_service.build_rsvp_url(invitation.token),
        )

    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise map_store_error(exc, "עדכון האורח נכשל") from exc
    db.refresh(guest)
    logger.info("Updated guest %s (%s)", guest.guest_id, ", ".join(sorted(updates)) or "no fields")

    event = guest.event
    warning = capacity_service.evaluate(db, event.event_id, event.venue_capacity)
    return guest, warning


def delete_guest(db: Session, organizer: OrganizerIdentity, guest_id: str) -> None:
    """Permanent removal of the guest and its invitation. No tombstone is kept."""
    guest = get_owned_guest(db, organizer, guest_id)
    db.delete(guest)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise map_store_error(exc, "מחיקת האורח נכשלה") from exc
    logger.info("Hard-deleted guest %s", guest_id)
