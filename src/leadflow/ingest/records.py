"""Turn CSV, spreadsheet and JSON uploads into canonical lead records.

Parsing happens in one synchronous pass: the whole file is materialised
into raw rows, then every row is normalised. A file with any invalid row is
rejected as a whole, so nothing reaches the store from a half-good file.
"""

from __future__ import annotations

import csv
import io
import json
import logging
import zipfile
from datetime import date, datetime
from pathlib import Path
from typing import Any, Mapping, Optional

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from leadflow.errors import UnsupportedFormat, ValidationError
from leadflow.ingest.enums import normalize_priority, normalize_status
from leadflow.ingest.readers import ContentKind, read_upload
from leadflow.models.task import LeadRecord

logger = logging.getLogger(__name__)

RawRow = Mapping[str, Optional[str]]

# Primary spelling first; later spellings are only used when earlier ones are blank.
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "first_name": ("FirstName", "firstName", "first_name", "First Name", "name", "Name"),
    "phone": ("Phone", "phone", "PhoneNumber", "phoneNumber", "phone_number", "Mobile", "mobile"),
    "notes": ("Notes", "notes", "Note", "note"),
    "status": ("Status", "status"),
    "priority": ("Priority", "priority"),
}

_OLE2_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"


def _coerce_cell(value: Any) -> str | None:
    """Render one loosely typed cell as text; blanks become ``None``."""
    if value is None:
        return None
    if isinstance(value, bool):
        text = "true" if value else "false"
    elif isinstance(value, float) and value.is_integer():
        # Spreadsheets store phone numbers as floats
        text = str(int(value))
    elif isinstance(value, (datetime, date)):
        text = value.isoformat()
    else:
        text = str(value)
    text = text.strip()
    return text or None


def _clean_row(row: Mapping[Any, Any]) -> dict[str, str | None]:
    cleaned: dict[str, str | None] = {}
    for key, value in row.items():
        header = _coerce_cell(key)
        if header is None:
            continue
        cleaned[header] = _coerce_cell(value)
    return cleaned


def _decode_text(data: bytes) -> str:
    if data.startswith(_OLE2_MAGIC):
        raise UnsupportedFormat(
            "Binary .xls workbooks are not supported; save the sheet as .xlsx or .csv"
        )
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise UnsupportedFormat(f"File is not UTF-8 text: {e}") from e


def _parse_csv(data: bytes) -> list[dict[str, str | None]]:
    text = _decode_text(data)
    # No field can be longer than the file itself
    if len(text) > csv.field_size_limit():
        csv.field_size_limit(len(text))

    reader = csv.DictReader(io.StringIO(text, newline=""), strict=True)
    rows = []
    try:
        for row in reader:
            cleaned = _clean_row(row)
            if any(v is not None for v in cleaned.values()):
                rows.append(cleaned)
    except csv.Error as e:
        raise ValidationError(
            f"Malformed CSV at line {reader.line_num}: {e}", line=reader.line_num
        ) from e
    return rows


def _parse_spreadsheet(data: bytes) -> list[dict[str, str | None]]:
    try:
        workbook = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
        raise UnsupportedFormat(f"Could not read spreadsheet: {e}") from e

    try:
        if not workbook.worksheets:
            return []
        values = workbook.worksheets[0].iter_rows(values_only=True)
        header = next(values, None)
        if header is None:
            return []
        headers = [_coerce_cell(h) for h in header]

        rows = []
        for cells in values:
            cleaned = _clean_row(
                {h: v for h, v in zip(headers, cells) if h is not None}
            )
            if any(v is not None for v in cleaned.values()):
                rows.append(cleaned)
        return rows
    finally:
        workbook.close()


def _parse_json(data: bytes) -> list[dict[str, str | None]]:
    try:
        payload = json.loads(data.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValidationError(f"Invalid JSON: {e}") from e

    if not isinstance(payload, list):
        raise ValidationError("JSON upload must be an array of objects")

    rows = []
    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            raise ValidationError(
                f"JSON item {index} is not an object", row=index + 1
            )
        cleaned = _clean_row(item)
        if any(v is not None for v in cleaned.values()):
            rows.append(cleaned)
    return rows


_PARSERS = {
    ContentKind.CSV: _parse_csv,
    ContentKind.SPREADSHEET: _parse_spreadsheet,
    ContentKind.JSON: _parse_json,
}


def parse_rows(data: bytes, kind: ContentKind | str) -> list[dict[str, str | None]]:
    """Decode raw file bytes into an ordered list of raw rows."""
    try:
        parser = _PARSERS[ContentKind(kind)]
    except ValueError as e:
        raise UnsupportedFormat(content_type=str(kind)) from e
    return parser(data)


def pick_field(row: RawRow, field: str) -> str | None:
    """Return the first non-blank value among the aliases of ``field``."""
    for alias in FIELD_ALIASES[field]:
        value = row.get(alias)
        if value:
            return value
    return None


def normalize_records(rows: list[RawRow]) -> list[LeadRecord]:
    """Map raw rows to canonical records, rejecting the batch on any invalid row."""
    records: list[LeadRecord] = []
    invalid_rows: list[int] = []

    for number, row in enumerate(rows, start=1):
        first_name = pick_field(row, "first_name")
        phone = pick_field(row, "phone")
        if not first_name or not phone:
            invalid_rows.append(number)
            continue
        records.append(
            LeadRecord(
                first_name=first_name,
                phone=phone,
                notes=pick_field(row, "notes") or "",
                status=normalize_status(pick_field(row, "status")),
                priority=normalize_priority(pick_field(row, "priority")),
            )
        )

    if invalid_rows:
        raise ValidationError(
            f"{len(invalid_rows)} row(s) are missing a first name or phone",
            rows=invalid_rows,
        )
    return records


def parse_file(
    path: str | Path,
    content_type: str | None,
    max_bytes: int | None = None,
) -> list[LeadRecord]:
    """Read a stored upload and return its canonical records."""
    kind, data = read_upload(path, content_type, max_bytes)
    records = normalize_records(parse_rows(data, kind))
    logger.info("Parsed %d record(s) from %s (%s)", len(records), Path(path).name, kind.value)
    return records
