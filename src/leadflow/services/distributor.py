from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from leadflow.db.database import Database
from leadflow.errors import DistributionFailed, NoAgentsAvailable
from leadflow.models.agent import Agent
from leadflow.models.task import LeadRecord, Task
from leadflow.services.agent_directory import AgentDirectory
from leadflow.services.task_repository import TaskRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Assignment:
    index: int
    record: LeadRecord
    agent: Agent


@dataclass
class WriteResult:
    index: int
    agent_id: str
    task: Task | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.task is not None


class BatchOutcome(str, Enum):
    COMPLETE = "complete"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass
class DistributionReport:
    results: list[WriteResult] = field(default_factory=list)

    @property
    def tasks(self) -> list[Task]:
        return [r.task for r in self.results if r.task is not None]

    @property
    def distributed_count(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failed_indices(self) -> list[int]:
        return [r.index for r in self.results if not r.ok]

    @property
    def outcome(self) -> BatchOutcome:
        if not self.failed_indices:
            return BatchOutcome.COMPLETE
        if self.distributed_count:
            return BatchOutcome.PARTIAL
        return BatchOutcome.FAILED


def plan_round_robin(
    records: Sequence[LeadRecord], pool: Sequence[Agent]
) -> list[Assignment]:
    """Pair record ``i`` with ``pool[i % len(pool)]``."""
    if not pool:
        raise NoAgentsAvailable()
    size = len(pool)
    return [
        Assignment(index=i, record=record, agent=pool[i % size])
        for i, record in enumerate(records)
    ]


class BatchWriter:
    """Persist assignments with bounded concurrency, one result per item."""

    def __init__(self, tasks: TaskRepository, concurrency: int = 8):
        self.tasks = tasks
        self.concurrency = max(1, concurrency)

    async def write(
        self, assignments: Sequence[Assignment], upload_id: str | None = None
    ) -> list[WriteResult]:
        semaphore = asyncio.Semaphore(self.concurrency)

        async def _write_one(assignment: Assignment) -> Task:
            async with semaphore:
                return await self.tasks.create(
                    assignment.record, assignment.agent.id, upload_id
                )

        outcomes = await asyncio.gather(
            *(_write_one(a) for a in assignments),
            return_exceptions=True,
        )

        results: list[WriteResult] = []
        for assignment, outcome in zip(assignments, outcomes):
            if isinstance(outcome, Exception):
                logger.error("Failed to persist record %d: %s", assignment.index, outcome)
                results.append(
                    WriteResult(assignment.index, assignment.agent.id, error=str(outcome))
                )
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                results.append(WriteResult(assignment.index, assignment.agent.id, task=outcome))
        return results


class RoundRobinDistributor:
    """Assign canonical records to the agent pool in round-robin order.

    The pool is snapshotted once per run. When ``rollback_partial`` is set a
    batch with any failed write is undone and :class:`DistributionFailed`
    raised; otherwise the partial result is reported.
    """

    def __init__(
        self,
        db: Database,
        agents: AgentDirectory,
        tasks: TaskRepository,
        *,
        concurrency: int = 8,
        rollback_partial: bool = True,
    ):
        self.db = db
        self.agents = agents
        self.tasks = tasks
        self.writer = BatchWriter(tasks, concurrency)
        self.rollback_partial = rollback_partial

    async def distribute(
        self,
        records: Sequence[LeadRecord],
        *,
        upload_id: str | None = None,
        pool: Sequence[Agent] | None = None,
    ) -> DistributionReport:
        if pool is None:
            pool = await self.agents.snapshot()
        assignments = plan_round_robin(records, pool)
        logger.info("Distributing %d record(s) across %d agent(s)", len(assignments), len(pool))

        report = DistributionReport(await self.writer.write(assignments, upload_id))

        if report.failed_indices:
            if self.rollback_partial:
                removed = await self.tasks.discard([t.id for t in report.tasks])
                logger.error(
                    "Rolled back %d task(s) after %d failed write(s) at %s",
                    removed,
                    len(report.failed_indices),
                    report.failed_indices,
                )
                raise DistributionFailed(
                    failed_indices=report.failed_indices,
                    attempted=len(assignments),
                )
            logger.warning(
                "Partial distribution: %d stored, failed at %s",
                report.distributed_count,
                report.failed_indices,
            )

        await self.db.log_event(
            "tasks_distributed",
            None,
            {
                "upload_id": upload_id,
                "distributed": report.distributed_count,
                "failed": report.failed_indices,
                "agents": [a.id for a in pool],
            },
        )
        return report
