from __future__ import annotations

from pathlib import Path

import pytest

from leadflow.errors import FileTooLarge, UnsupportedFormat
from leadflow.ingest.readers import ContentKind, detect_content_kind, read_upload

XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class TestDetectContentKind:
    @pytest.mark.parametrize(
        "content_type, expected",
        [
            ("text/csv", ContentKind.CSV),
            ("text/csv; charset=utf-8", ContentKind.CSV),
            ("application/vnd.ms-excel", ContentKind.CSV),
            (XLSX, ContentKind.SPREADSHEET),
            ("application/json", ContentKind.JSON),
        ],
    )
    def test_declared_types(self, content_type: str, expected: ContentKind) -> None:
        assert detect_content_kind(content_type, "leads") is expected

    def test_generic_type_uses_extension(self) -> None:
        assert detect_content_kind("application/octet-stream", "leads.xlsx") is ContentKind.SPREADSHEET
        assert detect_content_kind(None, "leads.JSON") is ContentKind.JSON

    @pytest.mark.parametrize(
        "content_type, filename",
        [
            ("text/plain", "leads.txt"),
            ("text/plain", "leads.csv"),
            ("application/pdf", "leads.pdf"),
            ("application/octet-stream", "leads.txt"),
            (None, None),
        ],
    )
    def test_rejects_other_types(self, content_type, filename) -> None:
        with pytest.raises(UnsupportedFormat):
            detect_content_kind(content_type, filename)


class TestReadUpload:
    def test_returns_kind_and_bytes(self, tmp_path: Path) -> None:
        path = tmp_path / "leads.csv"
        path.write_bytes(b"FirstName,Phone\nAnn,1\n")

        kind, data = read_upload(path, "text/csv")
        assert kind is ContentKind.CSV
        assert data == b"FirstName,Phone\nAnn,1\n"

    def test_enforces_size_limit(self, tmp_path: Path) -> None:
        path = tmp_path / "leads.csv"
        path.write_bytes(b"x" * 101)

        with pytest.raises(FileTooLarge):
            read_upload(path, "text/csv", max_bytes=100)
