"""Invitation token issuer and WhatsApp deep-link builder.

The RSVP token is the only credential the public RSVP flow accepts, so it is
drawn from `secrets` (CSPRNG) and is never derived from ids or time. Once
issued it stays with the guest; reminders only rewrite the link.
"""
import logging
import secrets
from typing import Optional
from urllib.parse import quote

from sqlalchemy.orm import Session

from guestlist.config import settings
from guestlist.models.enums import InvitationChannel
from guestlist.models.invitation import Invitation

logger = logging.getLogger(__name__)

WHATSAPP_BASE = "https://wa.me"


def generate_rsvp_token() -> str:
    """128 random bits as a fixed-length (32 char) hex string."""
    return secrets.token_hex(settings.RSVP_TOKEN_BYTES)


def build_rsvp_url(token: str) -> str:
    return f"{settings.APP_BASE_URL.rstrip('/')}/rsvp/{token}"


def _wa_link(phone: str, message: str) -> str:
    digits = phone.replace("+", "")
    text = quote(message, safe="!*'()")
    return f"{WHATSAPP_BASE}/{digits}?text={text}"


def build_whatsapp_link(phone: Optional[str], event_title: str, rsvp_url: str) -> Optional[str]:
    """Invitation deep-link, or None when the guest has no phone."""
    if not phone:
        return None
    message = f'הוזמנת לאירוע "{event_title}". לאישור הגעה: {rsvp_url}'
    return _wa_link(phone, message)


def build_reminder_link(
    phone: Optional[str], event_title: str, rsvp_url: str, days_until_event: int
) -> Optional[str]:
    """Reminder deep-link with urgency wording for the 7-day / 2-day thresholds."""
    if not phone:
        return None
    urgency = "עוד 2 ימים" if days_until_event <= 2 else "עוד שבוע"
    message = f'תזכורת: {urgency} לאירוע "{event_title}". אנא אשר/י הגעה: {rsvp_url}'
    return _wa_link(phone, message)


def issue_invitation(
    db: Session,
    event_id: str,
    guest_id: str,
    event_title: str,
    phone: Optional[str],
) -> Invitation:
    """Create the guest's invitation row. Flushes, does not commit."""
    token = generate_rsvp_token()
    rsvp_url = build_rsvp_url(token)
    invitation = Invitation(
        event_id=event_id,
        guest_id=guest_id,
        token=token,
        channel=InvitationChannel.whatsapp,
        whatsapp_link=build_whatsapp_link(phone, event_title, rsvp_url),
    )
    db.add(invitation)
    db.flush()
    logger.info("Issued invitation %s… for guest %s", token[:8], guest_id)
    return invitation


def refresh_reminder_link(
    db: Session, token: str, event_title: str, days_until_event: int
) -> Optional[Invitation]:
    """Regenerate the deep-link with reminder wording; the token never changes.

    Unknown tokens and guests without a phone are a silent no-op.
    """
    invitation = db.query(Invitation).filter(Invitation.token == token).first()
    if invitation is None:
        logger.debug("Reminder refresh skipped, unknown token %s…", token[:8])
        return None
    link = build_reminder_link(
        invitation.guest.phone, event_title, build_rsvp_url(token), days_until_event,
    )
    if link is None:
        return None
    invitation.whatsapp_link = link
    return invitation
