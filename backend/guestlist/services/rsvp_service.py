"""Public RSVP flow: token possession is the only credential.

fetch() stamps the invitation's first-open time exactly once. submit() is
last-write-wins: any number of answers are accepted and simply overwrite the
previous one.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from guestlist.errors import GoneError, NotFoundError, ValidationError, map_store_error
from guestlist.models.enums import RSVP_ANSWERS, DietaryPreference, RSVPStatus, parse_enum
from guestlist.models.event import Event
from guestlist.models.guest import Guest
from guestlist.models.invitation import Invitation

logger = logging.getLogger(__name__)

_UNSET: Any = object()


def _resolve(db: Session, token: str) -> Optional[tuple[Invitation, Guest, Event]]:
    return (
        db.query(Invitation, Guest, Event)
        .join(Guest, Guest.guest_id == Invitation.guest_id)
        .join(Event, Event.event_id == Guest.event_id)
        .filter(Invitation.token == token)
        .first()
    )


def fetch(db: Session, token: str) -> tuple[Guest, Event]:
    """Resolve a token to its guest and event, marking the invitation opened."""
    row = _resolve(db, token)
    if row is None or row[2].deleted_at is not None:
        raise NotFoundError("קישור ההזמנה לא נמצא")
    invitation, guest, event = row

    if invitation.opened_at is None:
        # Conditional update: concurrent first opens cannot overwrite each other
        try:
            db.execute(
                update(Invitation)
                .where(Invitation.invitation_id == invitation.invitation_id, Invitation.opened_at.is_(None))
                .values(opened_at=datetime.now(timezone.utc))
            )
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise map_store_error(exc, "שגיאה בטעינת ההזמנה") from exc
        logger.info("Invitation %s… opened for the first time", token[:8])

    return guest, event


def submit(
    db: Session,
    token: str,
    rsvp_status: Any,
    dietary_preference: Any = _UNSET,
    dietary_notes: Any = _UNSET,
) -> Guest:
    """Record the guest's answer. Optional fields left as _UNSET stay untouched."""
    answer = parse_enum(RSVPStatus, rsvp_status) if rsvp_status is not None else None
    if answer not in RSVP_ANSWERS:
        raise ValidationError("נא לבחור אישור או דחייה")

    changes: dict[str, Any] = {"rsvp_status": answer}
    if dietary_preference is not _UNSET and dietary_preference is not None:
        preference = parse_enum(DietaryPreference, dietary_preference)
        if preference is None:
            raise ValidationError("סוג תזונה לא תקין")
        changes["dietary_preference"] = preference
    if dietary_notes is not _UNSET:
        changes["dietary_notes"] = dietary_notes

    row = _resolve(db, token)
    if row is None:
        raise NotFoundError("קישור ההזמנה לא נמצא")
    _, guest, event = row
    if event.deleted_at is not None:
        raise GoneError("האירוע בוטל")

    for field, value in changes.items():
        setattr(guest, field, value)
    guest.updated_at = datetime.now(timezone.utc)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise map_store_error(exc, "שגיאה בעדכון ה-RSVP") from exc
    db.refresh(guest)
    logger.info("Guest %s answered %s for event %s", guest.guest_id, answer.value, event.event_id)
    return guest


def thank_you_message(rsvp_status: RSVPStatus) -> str:
    if rsvp_status == RSVPStatus.confirmed:
        return "תודה! הגעתך אושרה."
    return "תודה! עדכנו את מצבך."
