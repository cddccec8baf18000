"""Event API routes: delegates to event_service for invariant enforcement."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from guestlist.auth import OrganizerIdentity, get_current_organizer, require_organizer_role
from guestlist.database import get_db
from guestlist.models.event import Event
from guestlist.schemas.event import EventCreate, EventEnvelope, EventListOut, EventOut, EventUpdate
from guestlist.services import capacity_service, event_service

logger = logging.getLogger(__name__)
router = APIRouter()


def _event_out(db: Session, event: Event) -> EventOut:
    summary = capacity_service.rsvp_summary(db, event.event_id)
    return EventOut.model_validate(event).model_copy(update={
        "rsvp_confirmed": summary["confirmed"],
        "rsvp_pending": summary["pending"],
        "rsvp_declined": summary["declined"],
        "rsvp_total": summary["total"],
    })


@router.post("/", response_model=EventEnvelope, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    organizer: OrganizerIdentity = Depends(get_current_organizer),
    db: Session = Depends(get_db),
):
    """Create a draft event owned by the caller."""
    require_organizer_role(organizer)
    event = event_service.create_event(db, organizer, payload.model_dump())
    checklist = event_service.needs_compliance_checklist(event, payload.compliance_dismissed)
    return EventEnvelope(event=_event_out(db, event), compliance_checklist=checklist or None)


@router.get("/", response_model=EventListOut)
def list_events(
    status_filter: Optional[str] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    organizer: OrganizerIdentity = Depends(get_current_organizer),
    db: Session = Depends(get_db),
):
    """List the caller's events (soft-deleted ones excluded)."""
    events, total = event_service.list_events(db, organizer, status_filter, page, limit)
    return EventListOut(
        events=[_event_out(db, e) for e in events], total=total, page=page, limit=limit,
    )


@router.get("/{event_id}", response_model=EventEnvelope)
def get_event(
    event_id: str,
    organizer: OrganizerIdentity = Depends(get_current_organizer),
    db: Session = Depends(get_db),
):
    """Fetch a single event with RSVP counts."""
    event = event_service.get_owned_event(db, organizer, event_id)
    return EventEnvelope(event=_event_out(db, event))


@router.put("/{event_id}", response_model=EventEnvelope)
def update_event(
    event_id: str,
    payload: EventUpdate,
    organizer: OrganizerIdentity = Depends(get_current_organizer),
    db: Session = Depends(get_db),
):
    """Partial update; status changes follow the draft/published/completed/cancelled graph."""
    updates = payload.model_dump(exclude_unset=True)
    event = event_service.update_event(db, organizer, event_id, updates)
    checklist = event_service.needs_compliance_checklist(event, bool(updates.get("compliance_dismissed")))
    return EventEnvelope(event=_event_out(db, event), compliance_checklist=checklist or None)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(
    event_id: str,
    organizer: OrganizerIdentity = Depends(get_current_organizer),
    db: Session = Depends(get_db),
):
    """Cancel (soft delete) an event."""
    event_service.delete_event(db, organizer, event_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
