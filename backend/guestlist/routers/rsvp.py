"""Public RSVP routes: no organizer identity, the token is the capability."""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from guestlist.database import get_db
from guestlist.schemas.rsvp import RSVPFetchOut, RSVPSubmit, RSVPSubmitOut
from guestlist.services import rsvp_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/{token}", response_model=RSVPFetchOut)
def get_rsvp(token: str, db: Session = Depends(get_db)):
    """Invitation page data; marks the invitation opened on first view."""
    guest, event = rsvp_service.fetch(db, token)
    return {"guest": guest, "event": event}


@router.post("/{token}", response_model=RSVPSubmitOut)
def submit_rsvp(token: str, payload: RSVPSubmit, db: Session = Depends(get_db)):
    """Record a confirm/decline answer. Safe to repeat; the last answer wins."""
    optional = payload.model_dump(exclude_unset=True, include={"dietary_preference", "dietary_notes"})
    guest = rsvp_service.submit(db, token, payload.rsvp_status, **optional)
    return {"message": rsvp_service.thank_you_message(guest.rsvp_status), "guest": guest}
