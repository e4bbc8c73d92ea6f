from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import pytest

from leadflow.db.database import Database
from leadflow.services.agent_directory import AgentDirectory
from leadflow.services.distributor import RoundRobinDistributor
from leadflow.services.ingestion import UploadService
from leadflow.services.task_repository import TaskRepository
from leadflow.utils.config import Config

# Fast hashing keeps agent creation cheap in tests
TEST_PASSWORD_ITERATIONS = 1_000


@pytest.fixture
def config(tmp_path: Path) -> Config:
    return replace(
        Config(),
        db_path=tmp_path / "test.db",
        upload_dir=tmp_path / "uploads",
        api_tokens=(),
        password_iterations=TEST_PASSWORD_ITERATIONS,
        write_concurrency=4,
        rollback_partial_batch=True,
        max_upload_bytes=10 * 1024 * 1024,
    )


@pytest.fixture
async def db(config: Config) -> Database:
    database = Database(config.db_path)
    await database.initialize()
    yield database  # type: ignore[misc]
    await database.close()


@pytest.fixture
def agent_directory(db: Database) -> AgentDirectory:
    return AgentDirectory(db, password_iterations=TEST_PASSWORD_ITERATIONS)


@pytest.fixture
def task_repository(db: Database) -> TaskRepository:
    return TaskRepository(db)


@pytest.fixture
def distributor(
    db: Database, agent_directory: AgentDirectory, task_repository: TaskRepository
) -> RoundRobinDistributor:
    return RoundRobinDistributor(db, agent_directory, task_repository, concurrency=4)


@pytest.fixture
def upload_service(
    config: Config,
    db: Database,
    agent_directory: AgentDirectory,
    distributor: RoundRobinDistributor,
) -> UploadService:
    return UploadService(config, db, agent_directory, distributor)


@pytest.fixture
async def two_agents(agent_directory: AgentDirectory):
    alice = await agent_directory.create("Alice", "alice@example.com", "+15550001", "secret-a")
    bob = await agent_directory.create("Bob", "bob@example.com", "+15550002", "secret-b")
    return [alice, bob]
