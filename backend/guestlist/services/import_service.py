"""Bulk guest import from CSV / Excel uploads.

Rows are independent units of work: each one is validated, inserted inside
its own SAVEPOINT and committed, so a bad row is recorded in the report and
never aborts the rest of the batch.
"""
import csv
import io
import logging
from typing import Any, Optional

from openpyxl import load_workbook
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from guestlist.auth import OrganizerIdentity
from guestlist.config import settings
from guestlist.errors import AppError, ValidationError
from guestlist.models.enums import DietaryPreference, GuestSource, RelationshipGroup, parse_enum
from guestlist.services.event_service import get_owned_event
from guestlist.services.guest_service import add_guest
from guestlist.services.phone import normalize_phone
from guestlist.validators import is_valid_email

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("name_hebrew", "phone")
COLUMN_ALIASES = {"transliteration": "name_transliteration"}


def _cell_to_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def _normalize_header(header: Any) -> str:
    name = (_cell_to_text(header) or "").lower().lstrip("\ufeff")
    return COLUMN_ALIASES.get(name, name)


def _rows_from_csv(content: bytes) -> tuple[list[str], list[list[Any]]]:
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ValidationError("הקובץ חייב להיות בקידוד UTF-8") from exc
    reader = csv.reader(io.StringIO(text))
    rows = list(reader)
    if not rows:
        return [], []
    return [_normalize_header(h) for h in rows[0]], rows[1:]


def _rows_from_xlsx(content: bytes) -> tuple[list[str], list[list[Any]]]:
    try:
        workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except Exception as exc:  # openpyxl raises several unrelated types for corrupt files
        raise ValidationError("לא ניתן לקרוא את קובץ ה-Excel") from exc
    try:
        sheet = workbook.worksheets[0]
        rows = [list(r) for r in sheet.iter_rows(values_only=True)]
    finally:
        workbook.close()
    if not rows:
        return [], []
    return [_normalize_header(h) for h in rows[0]], rows[1:]


def parse_upload(filename: str, content: bytes) -> list[tuple[int, dict[str, Optional[str]]]]:
    """Parse an uploaded file into (row_number, header-keyed row) pairs.

    Row numbers are 1-based data-row positions in the file (header excluded).
    Blank rows are dropped without renumbering the rows after them.
    """
    extension = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if extension == "csv":
        headers, raw_rows = _rows_from_csv(content)
    elif extension == "xlsx":
        headers, raw_rows = _rows_from_xlsx(content)
    else:
        raise ValidationError("פורמט קובץ לא נתמך (CSV או XLSX בלבד)")

    missing = [c for c in REQUIRED_COLUMNS if c not in headers]
    if not headers or missing:
        raise ValidationError(f"עמודות חובה חסרות: {', '.join(missing or REQUIRED_COLUMNS)}")

    rows = []
    for row_number, raw in enumerate(raw_rows, start=1):
        record = {
            header: _cell_to_text(raw[i]) if i < len(raw) else None
            for i, header in enumerate(headers)
            if header
        }
        if any(record.values()):
            rows.append((row_number, record))
    return rows


def _row_fields(row: dict[str, Optional[str]]) -> tuple[dict[str, Any], list[str]]:
    """Build guest fields from a row, downgrading bad optional values to warnings."""
    fields: dict[str, Any] = {
        "name_hebrew": row.get("name_hebrew"),
        "phone": row.get("phone"),
        "name_transliteration": row.get("name_transliteration"),
    }
    warnings = []

    email = row.get("email")
    if email:
        if is_valid_email(email):
            fields["email"] = email
        else:
            warnings.append(f"אימייל לא תקין ({email}), לא נשמר")

    dietary = row.get("dietary_preference")
    if dietary:
        member = parse_enum(DietaryPreference, dietary.lower())
        if member is None:
            warnings.append(f"סוג תזונה לא מוכר ({dietary}), הוגדר 'none'")
        else:
            fields["dietary_preference"] = member

    relationship = row.get("relationship_group")
    if relationship:
        member = parse_enum(RelationshipGroup, relationship.lower())
        if member is None:
            warnings.append(f"קבוצת יחסים לא מוכרת ({relationship}), לא נשמרה")
        else:
            fields["relationship_group"] = member

    return fields, warnings


def _summary_message(imported: int, skipped: int, warned: int) -> str:
    message = f"יובאו {imported} אורחים"
    if skipped:
        message += f", דולגו {skipped}"
    if warned:
        message += f", {warned} אזהרות"
    return message


def import_guests(
    db: Session,
    organizer: OrganizerIdentity,
    event_id: str,
    filename: str,
    content: bytes,
) -> dict[str, Any]:
    """Import guests row by row and return the partial-success report."""
    event = get_owned_event(db, organizer, event_id)

    if not content:
        raise ValidationError("הקובץ ריק")
    if len(content) > settings.IMPORT_MAX_BYTES:
        raise ValidationError("הקובץ גדול מדי")

    rows = parse_upload(filename or "", content)
    if not rows:
        raise ValidationError("לא נמצאו שורות בקובץ")
    if len(rows) > settings.IMPORT_MAX_ROWS:
        raise ValidationError(f"ניתן לייבא עד {settings.IMPORT_MAX_ROWS} שורות")

    imported = 0
    skipped: list[dict[str, Any]] = []
    warnings: list[dict[str, Any]] = []

    for row_number, row in rows:
        if not row.get("name_hebrew"):
            skipped.append({"row": row_number, "reason": "חסר שם בעברית"})
            continue
        if not row.get("phone"):
            skipped.append({"row": row_number, "reason": "חסר מספר טלפון"})
            continue
        phone = normalize_phone(row["phone"])
        if phone is None:
            skipped.append({"row": row_number, "reason": "מספר טלפון לא תקין"})
            continue

        fields, row_warnings = _row_fields(row)
        fields["phone"] = phone
        try:
            with db.begin_nested():
                guest, _ = add_guest(db, event, fields, source=GuestSource.imported)
            db.commit()
        except AppError as exc:
            skipped.append({"row": row_number, "reason": exc.message})
            continue
        except SQLAlchemyError as exc:
            db.rollback()
            logger.warning("Import row %d for event %s failed: %s", row_number, event_id, exc)
            skipped.append({"row": row_number, "reason": "שגיאה בשמירת השורה"})
            continue

        imported += 1
        if row_warnings:
            warnings.append({"row": row_number, "name": guest.name_hebrew, "warning": "; ".join(row_warnings)})

    logger.info(
        "Imported %d guests into event %s (%d skipped, %d with warnings)",
        imported, event_id, len(skipped), len(warnings),
    )
    return {
        "imported": imported,
        "skipped": len(skipped),
        "warnings": len(warnings),
        "message": _summary_message(imported, len(skipped), len(warnings)),
        "details": {"skipped": skipped, "warnings": warnings},
    }
