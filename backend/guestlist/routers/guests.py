"""Guest management API routes (organizer only)."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, File, Query, Response, UploadFile, status
from sqlalchemy.orm import Session

from guestlist.auth import OrganizerIdentity, get_current_organizer, require_organizer_role
from guestlist.config import settings
from guestlist.database import get_db
from guestlist.schemas.guest import (
    GuestCreate, GuestCreateOut, GuestListOut, GuestUpdate, GuestUpdateOut, ImportResultOut,
)
from guestlist.services import export_service, guest_service, import_service
from guestlist.services.invitation_service import build_rsvp_url

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "/events/{event_id}/guests", response_model=GuestCreateOut, status_code=status.HTTP_201_CREATED,
)
def create_guest(
    event_id: str,
    payload: GuestCreate,
    organizer: OrganizerIdentity = Depends(get_current_organizer),
    db: Session = Depends(get_db),
):
    """Add a guest, issue their invitation link and report capacity."""
    require_organizer_role(organizer)
    guest, invitation, warning = guest_service.create_guest(
        db, organizer, event_id, payload.model_dump(exclude_unset=True),
    )
    return {
        "guest": guest,
        "rsvp_url": build_rsvp_url(invitation.token),
        "whatsapp_link": invitation.whatsapp_link,
        "warning": warning,
    }


@router.get("/events/{event_id}/guests", response_model=GuestListOut)
def list_guests(
    event_id: str,
    status_filter: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = Query(None, max_length=200),
    page: int = Query(1, ge=1),
    limit: int = Query(100, ge=1, le=500),
    organizer: OrganizerIdentity = Depends(get_current_organizer),
    db: Session = Depends(get_db),
):
    """List guests newest first, with RSVP summary. Polled by the guest list view."""
    return guest_service.list_guests(db, organizer, event_id, status_filter, search, page, limit)


@router.get("/events/{event_id}/guests/export")
def export_guests(
    event_id: str,
    organizer: OrganizerIdentity = Depends(get_current_organizer),
    db: Session = Depends(get_db),
):
    """Download the guest list as a BOM-prefixed UTF-8 CSV."""
    body = export_service.export_guests(db, organizer, event_id)
    return Response(
        content=body.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="guests-{event_id}.csv"'},
    )


@router.post("/events/{event_id}/guests/import", response_model=ImportResultOut)
def import_guests(
    event_id: str,
    file: UploadFile = File(...),
    organizer: OrganizerIdentity = Depends(get_current_organizer),
    db: Session = Depends(get_db),
):
    """Import guests from a CSV or XLSX upload with a per-row report."""
    require_organizer_role(organizer)
    content = file.file.read(settings.IMPORT_MAX_BYTES + 1)
    return import_service.import_guests(db, organizer, event_id, file.filename or "", content)


@router.put("/guests/{guest_id}", response_model=GuestUpdateOut)
def update_guest(
    guest_id: str,
    payload: GuestUpdate,
    organizer: OrganizerIdentity = Depends(get_current_organizer),
    db: Session = Depends(get_db),
):
    """Partial update: unsupplied fields are left as they are."""
    guest, warning = guest_service.update_guest(
        db, organizer, guest_id, payload.model_dump(exclude_unset=True),
    )
    return {"guest": guest, "warning": warning}


@router.delete("/guests/{guest_id}")
def delete_guest(
    guest_id: str,
    organizer: OrganizerIdentity = Depends(get_current_organizer),
    db: Session = Depends(get_db),
):
    """Permanently delete a guest and their invitation."""
    guest_service.delete_guest(db, organizer, guest_id)
    return {"message": "האורח נמחק לצמיתות"}
