"""Tests for the CSV guest export."""
import csv
import io

from guestlist.services.export_service import EXPORT_COLUMNS
from tests.conftest import create_test_event, create_test_guest, create_test_organizer


def _rows(body: bytes) -> list[list[str]]:
    return list(csv.reader(io.StringIO(body.decode("utf-8-sig"))))


class TestExport:

    def test_empty_event_exports_header_only(self, client, organizer):
        event = create_test_event(client, organizer["headers"])
        resp = client.get(
            f"/api/events/{event['event_id']}/guests/export", headers=organizer["headers"],
        )
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        assert resp.headers["content-disposition"] == f'attachment; filename="guests-{event["event_id"]}.csv"'
        assert resp.content.startswith(b"\xef\xbb\xbf")
        assert _rows(resp.content) == [[label for label, _ in EXPORT_COLUMNS]]

    def test_guest_rows(self, client, organizer):
        headers = organizer["headers"]
        event = create_test_event(client, headers)
        created = create_test_guest(
            client, headers, event["event_id"],
            name_hebrew="ליאת, \"הגדולה\"", dietary_preference="vegan", table_number=4,
        )

        rows = _rows(client.get(f"/api/events/{event['event_id']}/guests/export", headers=headers).content)
        assert len(rows) == 2
        record = dict(zip([field for _, field in EXPORT_COLUMNS], rows[1]))
        assert record["name_hebrew"] == "ליאת, \"הגדולה\""
        assert record["phone"] == "+972501234567"
        assert record["rsvp_status"] == "pending"
        assert record["dietary_preference"] == "vegan"
        assert record["table_number"] == "4"
        assert record["seat_number"] == ""
        assert record["whatsapp_link"] == created["whatsapp_link"]
        assert record["opened_at"] == ""

    def test_sorted_by_hebrew_name(self, client, organizer):
        headers = organizer["headers"]
        event = create_test_event(client, headers)
        for name in ("תמר", "אלון", "משה"):
            create_test_guest(client, headers, event["event_id"], name_hebrew=name)

        rows = _rows(client.get(f"/api/events/{event['event_id']}/guests/export", headers=headers).content)
        assert [r[0] for r in rows[1:]] == ["אלון", "משה", "תמר"]

    def test_foreign_event_not_found(self, client, db, organizer):
        event = create_test_event(client, organizer["headers"])
        other = create_test_organizer(db, name="Other")
        resp = client.get(f"/api/events/{event['event_id']}/guests/export", headers=other["headers"])
        assert resp.status_code == 404
