"""Core event service: ownership, status state machine, soft delete.

Responsibilities:
- Ownership proof: every organizer-facing lookup is scoped to the caller;
  a foreign, missing or soft-deleted event is reported as not found
- Status transitions follow EVENT_STATUS_TRANSITIONS; cancelling also
  soft-deletes, which makes the event's RSVP tokens inert
- Cancelled events are read-only
"""
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from guestlist.auth import OrganizerIdentity
from guestlist.errors import NotFoundError, ValidationError, map_store_error
from guestlist.models.enums import EventStatus, can_transition
from guestlist.models.event import Event

logger = logging.getLogger(__name__)

COMPLIANCE_GUEST_THRESHOLD = 100

_UPDATABLE_FIELDS = {
    "title", "event_date", "venue_name", "venue_address", "description",
    "max_guests", "venue_capacity", "max_plus_ones_buffer", "kashrut_level",
    "noise_curfew_time", "language_pref", "budget", "status", "compliance_dismissed",
}
_REQUIRED_TEXT_FIELDS = ("title", "venue_name")
_NULLABLE_FIELDS = {"venue_address", "description", "max_guests", "venue_capacity", "budget"}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _as_aware(value: datetime) -> datetime:
    """Naive input is taken as UTC; aware input is converted to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def get_owned_event(
    db: Session, organizer: OrganizerIdentity, event_id: str, include_cancelled: bool = False
) -> Event:
    """Load an event the caller owns. Anything else is indistinguishable from absence.

    include_cancelled also returns the caller's own cancelled (soft-deleted)
    events, so edits to them can be refused explicitly.
    """
    query = db.query(Event).filter(
        Event.event_id == str(event_id),
        Event.organizer_id == organizer.id,
    )
    if include_cancelled:
        query = query.filter(or_(Event.deleted_at.is_(None), Event.status == EventStatus.cancelled))
    else:
        query = query.filter(Event.deleted_at.is_(None))
    event = query.first()
    if event is None:
        raise NotFoundError("האירוע לא נמצא")
    return event


def needs_compliance_checklist(event: Event, dismissed: bool = False) -> bool:
    return (event.max_guests or 0) >= COMPLIANCE_GUEST_THRESHOLD and not (
        dismissed or event.compliance_dismissed
    )


def create_event(db: Session, organizer: OrganizerIdentity, fields: dict[str, Any]) -> Event:
    """Create a draft event after validating required fields and the date."""
    for name in _REQUIRED_TEXT_FIELDS:
        if not (fields.get(name) or "").strip():
            raise ValidationError(f"השדה {name} הוא שדה חובה")

    event_date = _as_aware(fields["event_date"])
    if event_date < _now():
        raise ValidationError("לא ניתן ליצור אירוע בתאריך עבר")

    values = {k: v for k, v in fields.items() if v is not None}
    values["title"] = values["title"].strip()
    values["venue_name"] = values["venue_name"].strip()
    values["event_date"] = event_date
    if values.get("compliance_dismissed") and (values.get("max_guests") or 0) < COMPLIANCE_GUEST_THRESHOLD:
        values["compliance_dismissed"] = False

    event = Event(organizer_id=organizer.id, status=EventStatus.draft, **values)
    db.add(event)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise map_store_error(exc, "יצירת האירוע נכשלה") from exc
    db.refresh(event)
    logger.info("Created event '%s' (%s) by organizer %s", event.title, event.event_id, organizer.id)
    return event


def list_events(
    db: Session,
    organizer: OrganizerIdentity,
    status_filter: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
) -> tuple[list[Event], int]:
    query = db.query(Event).filter(Event.organizer_id == organizer.id, Event.deleted_at.is_(None))
    if status_filter in EventStatus.__members__:
        query = query.filter(Event.status == EventStatus(status_filter))
    total = query.count()
    events = (
        query.order_by(Event.event_date.asc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return events, total


def update_event(
    db: Session, organizer: OrganizerIdentity, event_id: str, updates: dict[str, Any]
) -> Event:
    """Apply a partial update; status changes must follow the transition table."""
    event = get_owned_event(db, organizer, event_id, include_cancelled=True)

    if event.status == EventStatus.cancelled:
        raise ValidationError("לא ניתן לערוך אירוע שבוטל")

    unknown = set(updates) - _UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"שדות לא מוכרים: {', '.join(sorted(unknown))}")

    for name in _REQUIRED_TEXT_FIELDS:
        if name in updates and not (updates[name] or "").strip():
            raise ValidationError(f"השדה {name} הוא שדה חובה")

    for field, value in updates.items():
        if value is None and field not in _NULLABLE_FIELDS and field not in _REQUIRED_TEXT_FIELDS:
            raise ValidationError(f"השדה {field} אינו יכול להיות ריק")

    new_status = updates.get("status")
    if new_status is not None:
        new_status = EventStatus(new_status)
        if not can_transition(event.status, new_status):
            raise ValidationError(f"לא ניתן לשנות מ-{event.status.value} ל-{new_status.value}")

    if updates.get("event_date") is not None:
        updates["event_date"] = _as_aware(updates["event_date"])
        if updates["event_date"] < _now() and new_status not in (EventStatus.cancelled, EventStatus.completed):
            raise ValidationError("לא ניתן לקבוע תאריך בעבר")

    for field, value in updates.items():
        if isinstance(value, str) and field in _REQUIRED_TEXT_FIELDS:
            value = value.strip()
        setattr(event, field, value)

    if new_status == EventStatus.cancelled:
        event.deleted_at = _now()

    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise map_store_error(exc, "עדכון האירוע נכשל") from exc
    db.refresh(event)
    logger.info("Updated event %s (status=%s)", event.event_id, event.status.value)
    return event


def delete_event(db: Session, organizer: OrganizerIdentity, event_id: str) -> None:
    """Soft delete: the event leaves organizer listings and its tokens become inert."""
    event = get_owned_event(db, organizer, event_id)
    event.status = EventStatus.cancelled
    event.deleted_at = _now()
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise map_store_error(exc, "מחיקת האירוע נכשלה") from exc
    logger.info("Soft-deleted event %s", event_id)
