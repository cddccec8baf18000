"""CSV export of an event's guest list.

Column order and Hebrew labels are fixed; spreadsheets rely on them. The
output starts with a UTF-8 BOM so Excel renders Hebrew correctly.
"""
import csv
import io
import logging
from datetime import datetime
from enum import Enum

from sqlalchemy.orm import Session, joinedload

from guestlist.auth import OrganizerIdentity
from guestlist.models.guest import Guest
from guestlist.services.event_service import get_owned_event

logger = logging.getLogger(__name__)

UTF8_BOM = "\ufeff"

EXPORT_COLUMNS = [
    ("שם בעברית", "name_hebrew"),
    ("תעתיק", "name_transliteration"),
    ("אימייל", "email"),
    ("טלפון", "phone"),
    ("סטטוס RSVP", "rsvp_status"),
    ("מספר שולחן", "table_number"),
    ("מספר מושב", "seat_number"),
    ("קבוצת יחסים", "relationship_group"),
    ("העדפה תזונתית", "dietary_preference"),
    ("הערות תזונה", "dietary_notes"),
    ("צרכי נגישות", "accessibility_needs"),
    ("מלווים מורשים", "plus_one_allowance"),
    ("קישור WhatsApp", "whatsapp_link"),
    ("הוזמנות נשלחה", "sent_at"),
    ("הוזמנות נפתחה", "opened_at"),
    ("תאריך הוספה", "created_at"),
]


def _format(value) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def render_csv(guests: list[Guest]) -> str:
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\r\n")
    writer.writerow([label for label, _ in EXPORT_COLUMNS])
    for guest in guests:
        writer.writerow([_format(getattr(guest, field)) for _, field in EXPORT_COLUMNS])
    return UTF8_BOM + output.getvalue()


def export_guests(db: Session, organizer: OrganizerIdentity, event_id: str) -> str:
    """Read-only snapshot of the event's guests as CSV text."""
    event = get_owned_event(db, organizer, event_id)
    guests = (
        db.query(Guest)
        .options(joinedload(Guest.invitation))
        .filter(Guest.event_id == event.event_id)
        .order_by(Guest.name_hebrew)
        .all()
    )
    logger.info("Exported %d guests of event %s", len(guests), event.event_id)
    return render_csv(guests)
