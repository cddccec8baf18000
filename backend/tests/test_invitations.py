"""Tests for RSVP token issuance and WhatsApp deep-links."""
import re
from urllib.parse import unquote

from guestlist.config import settings
from guestlist.models.invitation import Invitation
from guestlist.services import invitation_service
from tests.conftest import create_test_event, create_test_guest


class TestTokens:

    def test_token_is_32_hex_chars(self):
        token = invitation_service.generate_rsvp_token()
        assert re.fullmatch(r"[0-9a-f]{32}", token)

    def test_tokens_do_not_collide(self):
        tokens = {invitation_service.generate_rsvp_token() for _ in range(10_000)}
        assert len(tokens) == 10_000

    def test_rsvp_url(self):
        assert invitation_service.build_rsvp_url("abc") == f"{settings.APP_BASE_URL.rstrip('/')}/rsvp/abc"


class TestWhatsAppLinks:

    def test_invitation_link(self):
        link = invitation_service.build_whatsapp_link("+972501234567", "חתונה", "https://x.test/rsvp/t")
        assert link.startswith("https://wa.me/972501234567?text=")
        text = unquote(link.split("?text=", 1)[1])
        assert text == 'הוזמנת לאירוע "חתונה". לאישור הגעה: https://x.test/rsvp/t'

    def test_no_phone_no_link(self):
        assert invitation_service.build_whatsapp_link(None, "חתונה", "https://x.test/rsvp/t") is None
        assert invitation_service.build_reminder_link("", "חתונה", "https://x.test/rsvp/t", 2) is None

    def test_reminder_urgency_wording(self):
        two_days = unquote(invitation_service.build_reminder_link("+972501234567", "ברית", "u", 2))
        week = unquote(invitation_service.build_reminder_link("+972501234567", "ברית", "u", 7))
        assert "עוד 2 ימים" in two_days
        assert "עוד שבוע" in week


class TestIssuedInvitation:

    def test_create_guest_issues_invitation(self, client, organizer):
        event = create_test_event(client, organizer["headers"], title="בר מצווה")
        data = create_test_guest(client, organizer["headers"], event["event_id"])

        token = data["guest"]["token"]
        assert re.fullmatch(r"[0-9a-f]{32}", token)
        assert data["rsvp_url"].endswith(f"/rsvp/{token}")
        assert data["whatsapp_link"].startswith("https://wa.me/972501234567?text=")
        assert data["guest"]["whatsapp_link"] == data["whatsapp_link"]

    def test_guest_without_phone_has_no_link(self, client, organizer):
        event = create_test_event(client, organizer["headers"])
        data = create_test_guest(client, organizer["headers"], event["event_id"], phone=None)
        assert data["guest"]["token"]
        assert data["whatsapp_link"] is None

    def test_refresh_keeps_token(self, client, db, organizer):
        event = create_test_event(client, organizer["headers"], title="אירוסין")
        data = create_test_guest(client, organizer["headers"], event["event_id"])
        token = data["guest"]["token"]

        invitation = invitation_service.refresh_reminder_link(db, token, "אירוסין", 2)
        db.commit()

        assert invitation.token == token
        assert "עוד 2 ימים" in unquote(invitation.whatsapp_link)
        stored = db.query(Invitation).filter(Invitation.guest_id == data["guest"]["guest_id"]).one()
        assert stored.token == token

    def test_refresh_unknown_token_is_noop(self, db):
        assert invitation_service.refresh_reminder_link(db, "0" * 32, "x", 7) is None
