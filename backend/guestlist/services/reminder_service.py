"""Reminder link refresh, driven by the external daily scheduler.

Only invitation links are written; guest and event rows are never touched.
A run with nothing due is a logged no-op.
"""
import logging
from datetime import date, datetime, timezone
from typing import Optional

import pytz
from sqlalchemy.orm import Session

from guestlist.config import settings
from guestlist.database import SessionLocal
from guestlist.models.enums import RSVPStatus
from guestlist.models.event import Event
from guestlist.models.guest import Guest
from guestlist.models.invitation import Invitation
from guestlist.services.invitation_service import refresh_reminder_link

logger = logging.getLogger(__name__)


def _local_date(value: datetime, tz) -> date:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(tz).date()


def generate_reminders(db: Session, now: Optional[datetime] = None) -> int:
    """Refresh reminder links for pending guests whose event is 7 or 2 days out.

    Day distance is counted in calendar days in EVENT_TIMEZONE. Returns the
    number of links refreshed.
    """
    tz = pytz.timezone(settings.EVENT_TIMEZONE)
    now = now or datetime.now(timezone.utc)
    today = _local_date(now, tz)

    rows = (
        db.query(Invitation.token, Event.title, Event.event_date)
        .join(Guest, Guest.guest_id == Invitation.guest_id)
        .join(Event, Event.event_id == Guest.event_id)
        .filter(
            Guest.rsvp_status == RSVPStatus.pending,
            Guest.phone.isnot(None),
            Event.deleted_at.is_(None),
            Event.event_date > now,
        )
        .all()
    )

    refreshed = 0
    for token, title, event_date in rows:
        days_until = (_local_date(event_date, tz) - today).days
        if days_until not in settings.REMINDER_DAYS:
            continue
        if refresh_reminder_link(db, token, title, days_until) is not None:
            refreshed += 1

    if refreshed == 0:
        logger.info("No pending reminders due today")
        return 0

    db.commit()
    logger.info("Updated %d pending reminder links", refreshed)
    return refreshed


def main() -> None:
    """Console entry point: run one reminder batch and exit."""

    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    db = SessionLocal()
    try:
        generate_reminders(db)
    finally:
        db.close()


if __name__ == "__main__":
    main()
