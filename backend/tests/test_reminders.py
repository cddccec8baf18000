"""Tests for the daily reminder link refresh."""
from datetime import datetime, timedelta, timezone
from urllib.parse import unquote

from guestlist.models.invitation import Invitation
from guestlist.services.reminder_service import generate_reminders
from tests.conftest import create_test_event, create_test_guest


def _run_day():
    # 09:00 UTC keeps the Asia/Jerusalem calendar date equal to the UTC date
    return (datetime.now(timezone.utc) + timedelta(days=1)).replace(hour=9, minute=0, second=0, microsecond=0)


def _link(db, token):
    return unquote(db.query(Invitation).filter(Invitation.token == token).one().whatsapp_link or "")


class TestGenerateReminders:

    def test_week_and_two_day_reminders(self, client, db, organizer):
        headers = organizer["headers"]
        now = _run_day()
        week = create_test_event(client, headers, title="חתונה", event_date=(now + timedelta(days=7)).isoformat())
        soon = create_test_event(client, headers, title="ברית", event_date=(now + timedelta(days=2)).isoformat())
        later = create_test_event(client, headers, title="כנס", event_date=(now + timedelta(days=30)).isoformat())

        week_guest = create_test_guest(client, headers, week["event_id"])["guest"]
        soon_guest = create_test_guest(client, headers, soon["event_id"])["guest"]
        later_guest = create_test_guest(client, headers, later["event_id"])["guest"]

        assert generate_reminders(db, now=now) == 2

        assert "עוד שבוע" in _link(db, week_guest["token"])
        assert "עוד 2 ימים" in _link(db, soon_guest["token"])
        assert "תזכורת" not in _link(db, later_guest["token"])
        # Tokens are never rotated by reminders
        assert week_guest["token"] in _link(db, week_guest["token"])

    def test_answered_and_phoneless_guests_skipped(self, client, db, organizer):
        headers = organizer["headers"]
        now = _run_day()
        event = create_test_event(client, headers, event_date=(now + timedelta(days=2)).isoformat())
        answered = create_test_guest(client, headers, event["event_id"], name_hebrew="ענה")["guest"]
        create_test_guest(client, headers, event["event_id"], name_hebrew="בלי טלפון", phone=None)
        client.post(f"/api/rsvp/{answered['token']}", json={"rsvp_status": "declined"})

        assert generate_reminders(db, now=now) == 0
        assert "תזכורת" not in _link(db, answered["token"])

    def test_cancelled_event_skipped(self, client, db, organizer):
        headers = organizer["headers"]
        now = _run_day()
        event = create_test_event(client, headers, event_date=(now + timedelta(days=7)).isoformat())
        create_test_guest(client, headers, event["event_id"])
        client.delete(f"/api/events/{event['event_id']}", headers=headers)

        assert generate_reminders(db, now=now) == 0

    def test_nothing_due_is_noop(self, db):
        assert generate_reminders(db) == 0
