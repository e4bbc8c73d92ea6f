"""Error taxonomy shared by the services and the HTTP layer.

Every error carries the HTTP status it maps to so the API can render it
without a lookup table.
"""

from __future__ import annotations

from typing import Any


class LeadflowError(Exception):
    status_code: int = 500
    code: str = "internal_error"
    default_message: str = "Internal error"

    def __init__(self, message: str | None = None, **details: Any):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "error": self.code, **self.details}


class ValidationError(LeadflowError):
    status_code = 400
    code = "validation_error"
    default_message = "Invalid input"


class UnsupportedFormat(LeadflowError):
    status_code = 400
    code = "unsupported_format"
    default_message = "Invalid file type. Only .csv, .xls, .xlsx and .json are allowed"


class FileTooLarge(LeadflowError):
    status_code = 413
    code = "file_too_large"
    default_message = "File exceeds the maximum upload size"


class NoAgentsAvailable(LeadflowError):
    status_code = 400
    code = "no_agents_available"
    default_message = "No agents available"


class NotFound(LeadflowError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class Conflict(LeadflowError):
    # 400 rather than 409: existing clients check for 400 on duplicate agents
    status_code = 400
    code = "conflict"
    default_message = "Agent already exists"


class AuthRejected(LeadflowError):
    status_code = 401
    code = "auth_rejected"
    default_message = "Not authorized"


class DistributionFailed(LeadflowError):
    status_code = 500
    code = "distribution_failed"
    default_message = "Distribution failed; no tasks were kept"
