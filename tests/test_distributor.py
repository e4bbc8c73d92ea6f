from __future__ import annotations

import pytest

from leadflow.db.database import Database
from leadflow.errors import DistributionFailed, NoAgentsAvailable
from leadflow.models.agent import Agent
from leadflow.models.task import LeadRecord
from leadflow.services.agent_directory import AgentDirectory
from leadflow.services.distributor import (
    BatchOutcome,
    RoundRobinDistributor,
    plan_round_robin,
)
from leadflow.services.task_repository import TaskRepository


def _records(n: int) -> list[LeadRecord]:
    return [LeadRecord(first_name=f"Lead {i}", phone=f"555-{i:04d}") for i in range(n)]


def _pool(m: int) -> list[Agent]:
    return [
        Agent(id=f"agent-{j}", name=f"Agent {j}", email=f"a{j}@example.com", mobile="1", password_hash="x")
        for j in range(m)
    ]


class FlakyTaskRepository(TaskRepository):
    """Fails to persist records whose first name is listed in ``fail_names``."""

    def __init__(self, db: Database, fail_names: set[str]):
        super().__init__(db)
        self.fail_names = fail_names

    async def create(self, record, agent_id, upload_id=None):
        if record.first_name in self.fail_names:
            raise RuntimeError(f"write failed for {record.first_name}")
        return await super().create(record, agent_id, upload_id)


class TestPlanRoundRobin:
    @pytest.mark.parametrize("n, m", [(0, 1), (1, 1), (3, 2), (7, 3), (10, 10), (5, 8)])
    def test_record_i_goes_to_pool_i_mod_m(self, n: int, m: int) -> None:
        records, pool = _records(n), _pool(m)
        plan = plan_round_robin(records, pool)

        assert len(plan) == n
        for i, assignment in enumerate(plan):
            assert assignment.index == i
            assert assignment.record is records[i]
            assert assignment.agent is pool[i % m]

    def test_is_deterministic(self) -> None:
        records, pool = _records(9), _pool(4)
        first = [(a.index, a.agent.id) for a in plan_round_robin(records, pool)]
        second = [(a.index, a.agent.id) for a in plan_round_robin(records, pool)]
        assert first == second

    @pytest.mark.parametrize("n", [0, 3])
    def test_empty_pool_fails(self, n: int) -> None:
        with pytest.raises(NoAgentsAvailable):
            plan_round_robin(_records(n), [])


@pytest.mark.asyncio
class TestRoundRobinDistributor:
    async def test_three_records_two_agents(
        self, distributor: RoundRobinDistributor, task_repository: TaskRepository, two_agents
    ) -> None:
        alice, bob = two_agents
        report = await distributor.distribute(_records(3))

        assert report.distributed_count == 3
        assert report.outcome is BatchOutcome.COMPLETE
        by_name = {t.first_name: t.agent_id for t in await task_repository.list_all()}
        assert by_name == {"Lead 0": alice.id, "Lead 1": bob.id, "Lead 2": alice.id}

    async def test_no_agents_persists_nothing(
        self, distributor: RoundRobinDistributor, db: Database
    ) -> None:
        with pytest.raises(NoAgentsAvailable):
            await distributor.distribute(_records(4))
        assert await db.count_tasks() == 0

    async def test_empty_input_succeeds(
        self, distributor: RoundRobinDistributor, db: Database, two_agents
    ) -> None:
        report = await distributor.distribute([])
        assert report.distributed_count == 0
        assert report.outcome is BatchOutcome.COMPLETE
        assert await db.count_tasks() == 0

    async def test_existing_tasks_are_never_reassigned(
        self, distributor: RoundRobinDistributor, task_repository: TaskRepository, two_agents
    ) -> None:
        await distributor.distribute(_records(1))
        before = {t.id: t.agent_id for t in await task_repository.list_all()}

        await distributor.distribute(_records(3))
        after = {t.id: t.agent_id for t in await task_repository.list_all()}

        assert len(after) == 4
        for task_id, agent_id in before.items():
            assert after[task_id] == agent_id

    async def test_uses_given_pool_snapshot(
        self,
        distributor: RoundRobinDistributor,
        agent_directory: AgentDirectory,
        task_repository: TaskRepository,
        two_agents,
    ) -> None:
        pool = await agent_directory.snapshot()
        await agent_directory.create("Late", "late@example.com", "3", "pw")

        await distributor.distribute(_records(4), pool=pool)
        owners = {t.agent_id for t in await task_repository.list_all()}
        assert owners == {a.id for a in two_agents}

    async def test_failed_write_rolls_back_batch(
        self, db: Database, agent_directory: AgentDirectory, two_agents
    ) -> None:
        repo = FlakyTaskRepository(db, {"Lead 2"})
        distributor = RoundRobinDistributor(db, agent_directory, repo, concurrency=2)

        with pytest.raises(DistributionFailed) as exc_info:
            await distributor.distribute(_records(5))

        assert exc_info.value.details["failed_indices"] == [2]
        assert await db.count_tasks() == 0

    async def test_partial_batch_is_reported_when_rollback_disabled(
        self, db: Database, agent_directory: AgentDirectory, two_agents
    ) -> None:
        repo = FlakyTaskRepository(db, {"Lead 1", "Lead 3"})
        distributor = RoundRobinDistributor(
            db, agent_directory, repo, concurrency=2, rollback_partial=False
        )

        report = await distributor.distribute(_records(5))

        assert report.outcome is BatchOutcome.PARTIAL
        assert report.distributed_count == 3
        assert report.failed_indices == [1, 3]
        assert [r.error for r in report.results if not r.ok] == [
            "write failed for Lead 1",
            "write failed for Lead 3",
        ]
        assert await db.count_tasks() == 3

    async def test_all_writes_failing(
        self, db: Database, agent_directory: AgentDirectory, two_agents
    ) -> None:
        repo = FlakyTaskRepository(db, {"Lead 0", "Lead 1"})
        distributor = RoundRobinDistributor(
            db, agent_directory, repo, rollback_partial=False
        )

        report = await distributor.distribute(_records(2))
        assert report.outcome is BatchOutcome.FAILED

    async def test_logs_distribution_event(
        self, distributor: RoundRobinDistributor, db: Database, two_agents
    ) -> None:
        await distributor.distribute(_records(2), upload_id="upload-1")

        events = await db.get_events("tasks_distributed")
        assert events[0]["details"]["distributed"] == 2
        assert events[0]["details"]["upload_id"] == "upload-1"
