from __future__ import annotations

import pytest

from leadflow.db.database import Database
from leadflow.errors import Conflict, NotFound
from leadflow.services.agent_directory import AgentDirectory
from leadflow.utils.passwords import verify_password


@pytest.mark.asyncio
class TestAgentDirectory:
    async def test_create_stores_only_a_hash(
        self, agent_directory: AgentDirectory, db: Database
    ) -> None:
        agent = await agent_directory.create("Alice", "Alice@Example.com", "+1555", "s3cret")

        assert agent.email == "alice@example.com"
        row = await db.get_agent(agent.id)
        assert row["password_hash"] != "s3cret"
        assert verify_password("s3cret", row["password_hash"])
        assert not verify_password("wrong", row["password_hash"])

    async def test_hash_is_not_serialized(self, agent_directory: AgentDirectory) -> None:
        agent = await agent_directory.create("Alice", "alice@example.com", "+1555", "s3cret")
        dumped = agent.model_dump(by_alias=True)
        assert "passwordHash" not in dumped
        assert "password_hash" not in dumped

    async def test_duplicate_email_conflicts(self, agent_directory: AgentDirectory) -> None:
        await agent_directory.create("Alice", "alice@example.com", "+1555", "a")
        with pytest.raises(Conflict):
            await agent_directory.create("Other Alice", "ALICE@example.com", "+1666", "b")

    async def test_list_preserves_registration_order(
        self, agent_directory: AgentDirectory
    ) -> None:
        for name in ["Ann", "Ben", "Cat"]:
            await agent_directory.create(name, f"{name.lower()}@example.com", "1", "pw")

        agents = await agent_directory.list_all()
        assert [a.name for a in agents] == ["Ann", "Ben", "Cat"]

    async def test_snapshot_is_frozen(self, agent_directory: AgentDirectory) -> None:
        await agent_directory.create("Ann", "ann@example.com", "1", "pw")
        snapshot = await agent_directory.snapshot()
        await agent_directory.create("Ben", "ben@example.com", "2", "pw")

        assert isinstance(snapshot, tuple)
        assert [a.name for a in snapshot] == ["Ann"]

    async def test_get_unknown_agent(self, agent_directory: AgentDirectory) -> None:
        with pytest.raises(NotFound):
            await agent_directory.get("nope")

    async def test_create_logs_event(self, agent_directory: AgentDirectory, db: Database) -> None:
        agent = await agent_directory.create("Ann", "ann@example.com", "1", "pw")
        events = await db.get_events("agent_created")
        assert events[0]["agent_id"] == agent.id
