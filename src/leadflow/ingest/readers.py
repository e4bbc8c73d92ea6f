"""Upload file typing and raw byte access."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path

from leadflow.errors import FileTooLarge, UnsupportedFormat

logger = logging.getLogger(__name__)


class ContentKind(str, Enum):
    CSV = "csv"
    SPREADSHEET = "spreadsheet"
    JSON = "json"


# Browsers commonly label .csv files as application/vnd.ms-excel, so the
# legacy Excel type is read as delimited text.
MIME_KINDS: dict[str, ContentKind] = {
    "text/csv": ContentKind.CSV,
    "application/csv": ContentKind.CSV,
    "application/vnd.ms-excel": ContentKind.CSV,
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": ContentKind.SPREADSHEET,
    "application/json": ContentKind.JSON,
}

EXTENSION_KINDS: dict[str, ContentKind] = {
    ".csv": ContentKind.CSV,
    ".xls": ContentKind.CSV,
    ".xlsx": ContentKind.SPREADSHEET,
    ".json": ContentKind.JSON,
}

_GENERIC_TYPES = {"", "application/octet-stream", "binary/octet-stream"}


def detect_content_kind(content_type: str | None, filename: str | None = None) -> ContentKind:
    """Resolve the declared MIME type (or, if generic, the file extension).

    Raises :class:`UnsupportedFormat` for anything else.
    """
    mime = (content_type or "").split(";", 1)[0].strip().lower()
    if mime in MIME_KINDS:
        return MIME_KINDS[mime]
    if mime in _GENERIC_TYPES and filename:
        kind = EXTENSION_KINDS.get(Path(filename).suffix.lower())
        if kind is not None:
            return kind
    logger.warning("Rejected upload %r with content type %r", filename, content_type)
    raise UnsupportedFormat(content_type=content_type or None)


def check_size(size: int, max_bytes: int | None) -> None:
    if max_bytes is not None and size > max_bytes:
        raise FileTooLarge(
            f"File exceeds the upload limit of {max_bytes} bytes", max_bytes=max_bytes
        )


def read_upload(
    path: str | Path,
    content_type: str | None,
    max_bytes: int | None = None,
) -> tuple[ContentKind, bytes]:
    """Return the content kind and raw bytes of a stored upload."""
    path = Path(path)
    kind = detect_content_kind(content_type, path.name)
    check_size(path.stat().st_size, max_bytes)
    return kind, path.read_bytes()
