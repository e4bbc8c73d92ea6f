from __future__ import annotations

import pytest

from leadflow.ingest.enums import (
    EnumDomain,
    normalize_enum,
    normalize_priority,
    normalize_status,
)
from leadflow.models.task import TaskPriority, TaskStatus


class TestStatusNormalization:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("completed", TaskStatus.COMPLETED),
            ("  COMPLETED ", TaskStatus.COMPLETED),
            ("done", TaskStatus.COMPLETED),
            ("In Progress", TaskStatus.IN_PROGRESS),
            ("in_progress", TaskStatus.IN_PROGRESS),
            ("In-Progress", TaskStatus.IN_PROGRESS),
            ("InProgress", TaskStatus.IN_PROGRESS),
            ("pending", TaskStatus.PENDING),
        ],
    )
    def test_known_spellings(self, raw: str, expected: TaskStatus) -> None:
        assert normalize_status(raw) is expected

    @pytest.mark.parametrize("raw", ["", "   ", "banana", None, 42, "completed!"])
    def test_unknown_falls_back_to_pending(self, raw) -> None:
        assert normalize_status(raw) is TaskStatus.PENDING

    def test_enum_member_passes_through(self) -> None:
        assert normalize_status(TaskStatus.COMPLETED) is TaskStatus.COMPLETED


class TestPriorityNormalization:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("high", TaskPriority.HIGH),
            ("LOW", TaskPriority.LOW),
            ("Medium", TaskPriority.MEDIUM),
            ("normal", TaskPriority.MEDIUM),
            (" Normal ", TaskPriority.MEDIUM),
        ],
    )
    def test_known_spellings(self, raw: str, expected: TaskPriority) -> None:
        assert normalize_priority(raw) is expected

    @pytest.mark.parametrize("raw", ["", "critical-ish", None, "\t"])
    def test_unknown_falls_back_to_medium(self, raw) -> None:
        assert normalize_priority(raw) is TaskPriority.MEDIUM


def test_normalization_is_total_over_arbitrary_strings() -> None:
    samples = ["", " ", "x" * 500, "ñandú", "\x00", "Pending\n", "HIGH", "in progress", "💥"]
    for sample in samples:
        assert normalize_enum(sample, EnumDomain.STATUS) in set(TaskStatus)
        assert normalize_enum(sample, "priority") in set(TaskPriority)
