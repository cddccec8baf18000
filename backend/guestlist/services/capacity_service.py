"""Capacity monitor: confirmed RSVPs against venue capacity.

Pure read, recomputed on every call. It may see a slightly stale count while
writes are in flight, which is acceptable for a warning signal.
"""
import logging
from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from guestlist.config import settings
from guestlist.models.enums import RSVPStatus
from guestlist.models.guest import Guest

logger = logging.getLogger(__name__)


def count_confirmed(db: Session, event_id: str) -> int:
    return (
        db.query(func.count(Guest.guest_id))
        .filter(Guest.event_id == event_id, Guest.rsvp_status == RSVPStatus.confirmed)
        .scalar()
    ) or 0


def evaluate(db: Session, event_id: str, venue_capacity: Optional[int]) -> Optional[dict[str, Any]]:
    """Return a capacity warning when confirmed/capacity >= the threshold, else None."""
    if not venue_capacity:
        return None

    confirmed = count_confirmed(db, event_id)
    ratio = confirmed / venue_capacity
    if ratio < settings.CAPACITY_WARNING_RATIO:
        return None

    percent = round(ratio * 100)
    logger.info("Event %s at %d%% capacity (%d/%d)", event_id, percent, confirmed, venue_capacity)
    return {
        "type": "capacity_warning",
        "message": f"אזהרה: {confirmed} מתוך {venue_capacity} מקומות מאושרים ({percent}%)",
        "confirmed": confirmed,
        "capacity": venue_capacity,
        "percent": percent,
    }


def rsvp_summary(db: Session, event_id: str) -> dict[str, int]:
    """Per-status guest counts plus the total for an event."""
    rows = (
        db.query(Guest.rsvp_status, func.count(Guest.guest_id))
        .filter(Guest.event_id == event_id)
        .group_by(Guest.rsvp_status)
        .all()
    )
    summary = {s.value: 0 for s in RSVPStatus}
    for rsvp_status, count in rows:
        summary[RSVPStatus(rsvp_status).value] = count
    summary["total"] = sum(summary.values())
    return summary
