from leadflow.ingest.enums import EnumDomain, normalize_enum, normalize_priority, normalize_status
from leadflow.ingest.readers import ContentKind, detect_content_kind, read_upload
from leadflow.ingest.records import normalize_records, parse_file, parse_rows

__all__ = [
    "ContentKind",
    "EnumDomain",
    "detect_content_kind",
    "normalize_enum",
    "normalize_priority",
    "normalize_records",
    "normalize_status",
    "parse_file",
    "parse_rows",
    "read_upload",
]
