"""Tests for bulk guest import (CSV and XLSX)."""
import io

from openpyxl import Workbook

from guestlist.config import settings
from guestlist.models.guest import Guest
from tests.conftest import create_test_event, create_test_organizer


def _upload(client, headers, event_id, content: bytes, filename: str = "guests.csv"):
    return client.post(
        f"/api/events/{event_id}/guests/import",
        files={"file": (filename, content, "application/octet-stream")},
        headers=headers,
    )


def _csv(*lines: str) -> bytes:
    return ("\r\n".join(lines) + "\r\n").encode("utf-8")


class TestImportCSV:

    def test_partial_success_report(self, client, db, organizer):
        event = create_test_event(client, organizer["headers"])
        content = _csv(
            "name_hebrew,phone,email",
            "אבי כהן,050-111-2222,avi@example.com",
            ",050-333-4444,",
            "דנה לוי,052-555-6666,",
        )
        resp = _upload(client, organizer["headers"], event["event_id"], content)
        assert resp.status_code == 200
        data = resp.json()
        assert data["imported"] == 2
        assert data["skipped"] == 1
        assert data["warnings"] == 0
        assert data["details"]["skipped"] == [{"row": 2, "reason": "חסר שם בעברית"}]
        assert data["message"] == "יובאו 2 אורחים, דולגו 1"

        guests = db.query(Guest).filter(Guest.event_id == event["event_id"]).all()
        assert {g.name_hebrew for g in guests} == {"אבי כהן", "דנה לוי"}
        assert all(g.source.value == "imported" for g in guests)
        assert all(g.invitation is not None for g in guests)
        assert {g.phone for g in guests} == {"+972501112222", "+972525556666"}

    def test_missing_phone_skipped(self, client, organizer):
        event = create_test_event(client, organizer["headers"])
        content = _csv("name_hebrew,phone", "אבי כהן,")
        data = _upload(client, organizer["headers"], event["event_id"], content).json()
        assert data["imported"] == 0
        assert data["details"]["skipped"] == [{"row": 1, "reason": "חסר מספר טלפון"}]

    def test_phone_without_digits_skipped(self, client, db, organizer):
        event = create_test_event(client, organizer["headers"])
        content = _csv("name_hebrew,phone", "אבי כהן,אין טלפון", "דנה לוי,0525556666")
        data = _upload(client, organizer["headers"], event["event_id"], content).json()
        assert data["imported"] == 1
        assert data["details"]["skipped"] == [{"row": 1, "reason": "מספר טלפון לא תקין"}]
        assert db.query(Guest).filter(Guest.phone.is_(None)).count() == 0

    def test_row_numbers_survive_blank_rows(self, client, organizer):
        event = create_test_event(client, organizer["headers"])
        content = _csv("name_hebrew,phone", "אבי,0501112222", ",", ",0503334444")
        data = _upload(client, organizer["headers"], event["event_id"], content).json()
        assert data["imported"] == 1
        assert data["details"]["skipped"] == [{"row": 3, "reason": "חסר שם בעברית"}]

    def test_bad_optional_values_become_warnings(self, client, organizer):
        event = create_test_event(client, organizer["headers"])
        content = _csv(
            "name_hebrew,phone,email,dietary_preference,transliteration",
            "אבי כהן,0501112222,not-an-email,paleo,Avi Cohen",
        )
        data = _upload(client, organizer["headers"], event["event_id"], content).json()
        assert data["imported"] == 1
        assert data["warnings"] == 1
        warning = data["details"]["warnings"][0]
        assert warning["row"] == 1
        assert warning["name"] == "אבי כהן"
        assert "not-an-email" in warning["warning"]
        assert "paleo" in warning["warning"]

        guest = client.get(
            f"/api/events/{event['event_id']}/guests", headers=organizer["headers"],
        ).json()["guests"][0]
        assert guest["email"] is None
        assert guest["dietary_preference"] == "none"
        assert guest["name_transliteration"] == "Avi Cohen"

    def test_bom_prefixed_header(self, client, organizer):
        event = create_test_event(client, organizer["headers"])
        content = b"\xef\xbb\xbf" + _csv("name_hebrew,phone", "אבי,0501112222")
        data = _upload(client, organizer["headers"], event["event_id"], content).json()
        assert data["imported"] == 1

    def test_missing_required_column(self, client, organizer):
        event = create_test_event(client, organizer["headers"])
        resp = _upload(client, organizer["headers"], event["event_id"], _csv("name_hebrew", "אבי"))
        assert resp.status_code == 400

    def test_row_cap(self, client, organizer):
        event = create_test_event(client, organizer["headers"])
        rows = [f"אורח {i},050{i:07d}" for i in range(settings.IMPORT_MAX_ROWS + 1)]
        resp = _upload(client, organizer["headers"], event["event_id"], _csv("name_hebrew,phone", *rows))
        assert resp.status_code == 400
        assert resp.json() == {"error": f"ניתן לייבא עד {settings.IMPORT_MAX_ROWS} שורות"}

    def test_empty_file_rejected(self, client, organizer):
        event = create_test_event(client, organizer["headers"])
        assert _upload(client, organizer["headers"], event["event_id"], b"").status_code == 400

    def test_unsupported_extension(self, client, organizer):
        event = create_test_event(client, organizer["headers"])
        resp = _upload(client, organizer["headers"], event["event_id"], b"x", filename="guests.txt")
        assert resp.status_code == 400

    def test_foreign_event_not_found(self, client, db, organizer):
        event = create_test_event(client, organizer["headers"])
        other = create_test_organizer(db, name="Other")
        resp = _upload(client, other["headers"], event["event_id"], _csv("name_hebrew,phone", "אבי,050"))
        assert resp.status_code == 404


class TestImportXLSX:

    def test_xlsx_upload(self, client, organizer):
        workbook = Workbook()
        sheet = workbook.active
        sheet.append(["name_hebrew", "phone", "relationship_group"])
        sheet.append(["נועה ברק", 972541234567, "friends"])
        sheet.append([None, None, None])
        sheet.append(["עומר גל", "054-765-4321", None])
        sheet.append([None, "054-000-0000", None])
        buffer = io.BytesIO()
        workbook.save(buffer)

        event = create_test_event(client, organizer["headers"])
        data = _upload(
            client, organizer["headers"], event["event_id"], buffer.getvalue(), filename="guests.xlsx",
        ).json()
        assert data["imported"] == 2
        assert data["details"]["skipped"] == [{"row": 4, "reason": "חסר שם בעברית"}]

        guests = client.get(
            f"/api/events/{event['event_id']}/guests", headers=organizer["headers"],
        ).json()["guests"]
        by_name = {g["name_hebrew"]: g for g in guests}
        assert by_name["נועה ברק"]["phone"] == "+972541234567"
        assert by_name["נועה ברק"]["relationship_group"] == "friends"
        assert by_name["עומר גל"]["phone"] == "+972547654321"

    def test_corrupt_xlsx_rejected(self, client, organizer):
        event = create_test_event(client, organizer["headers"])
        resp = _upload(
            client, organizer["headers"], event["event_id"], b"not a zip file", filename="guests.xlsx",
        )
        assert resp.status_code == 400
