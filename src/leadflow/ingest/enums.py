"""Map free-form status/priority strings onto the task vocabularies.

These functions are total: any input, including ``None``, non-strings and
garbage, yields a member of the target domain.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Any

from leadflow.models.task import (
    DEFAULT_PRIORITY,
    DEFAULT_STATUS,
    TaskPriority,
    TaskStatus,
)

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"[\s_\-]+")


class EnumDomain(str, Enum):
    STATUS = "status"
    PRIORITY = "priority"


_STATUS_SPELLINGS: dict[str, TaskStatus] = {
    "pending": TaskStatus.PENDING,
    "new": TaskStatus.PENDING,
    "open": TaskStatus.PENDING,
    "todo": TaskStatus.PENDING,
    "inprogress": TaskStatus.IN_PROGRESS,
    "progress": TaskStatus.IN_PROGRESS,
    "active": TaskStatus.IN_PROGRESS,
    "started": TaskStatus.IN_PROGRESS,
    "ongoing": TaskStatus.IN_PROGRESS,
    "completed": TaskStatus.COMPLETED,
    "complete": TaskStatus.COMPLETED,
    "done": TaskStatus.COMPLETED,
    "closed": TaskStatus.COMPLETED,
    "finished": TaskStatus.COMPLETED,
}

_PRIORITY_SPELLINGS: dict[str, TaskPriority] = {
    "low": TaskPriority.LOW,
    "medium": TaskPriority.MEDIUM,
    "med": TaskPriority.MEDIUM,
    "mid": TaskPriority.MEDIUM,
    "normal": TaskPriority.MEDIUM,
    "high": TaskPriority.HIGH,
    "urgent": TaskPriority.HIGH,
}

_DOMAINS: dict[EnumDomain, tuple[dict[str, Any], Enum]] = {
    EnumDomain.STATUS: (_STATUS_SPELLINGS, DEFAULT_STATUS),
    EnumDomain.PRIORITY: (_PRIORITY_SPELLINGS, DEFAULT_PRIORITY),
}


def _spelling_key(value: Any) -> str:
    if isinstance(value, Enum):
        value = value.value
    if value is None:
        return ""
    return _SEPARATORS.sub("", str(value).strip().lower())


def normalize_enum(value: Any, domain: EnumDomain | str) -> Enum:
    """Return the canonical member of ``domain`` for ``value``, or its default."""
    spellings, default = _DOMAINS[EnumDomain(domain)]
    key = _spelling_key(value)
    if not key:
        return default
    member = spellings.get(key)
    if member is None:
        logger.debug("Unrecognised %s %r, using %s", EnumDomain(domain).value, value, default.value)
        return default
    return member


def normalize_status(value: Any) -> TaskStatus:
    return normalize_enum(value, EnumDomain.STATUS)  # type: ignore[return-value]


def normalize_priority(value: Any) -> TaskPriority:
    return normalize_enum(value, EnumDomain.PRIORITY)  # type: ignore[return-value]
