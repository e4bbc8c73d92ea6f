from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from leadflow.db.database import Database
from leadflow.services.agent_directory import AgentDirectory
from leadflow.services.distributor import RoundRobinDistributor
from leadflow.services.ingestion import UploadService
from leadflow.services.task_repository import TaskRepository
from leadflow.utils.config import Config


@dataclass
class Services:
    config: Config
    db: Database
    agents: AgentDirectory
    tasks: TaskRepository
    distributor: RoundRobinDistributor
    uploads: UploadService


async def build_services(config: Config) -> Services:
    """Open the database and wire every service to it."""
    db = Database(config.db_path)
    await db.initialize()

    agents = AgentDirectory(db, password_iterations=config.password_iterations)
    tasks = TaskRepository(db)
    distributor = RoundRobinDistributor(
        db,
        agents,
        tasks,
        concurrency=config.write_concurrency,
        rollback_partial=config.rollback_partial_batch,
    )
    uploads = UploadService(config, db, agents, distributor)
    return Services(
        config=config,
        db=db,
        agents=agents,
        tasks=tasks,
        distributor=distributor,
        uploads=uploads,
    )


def get_services(request: Request) -> Services:
    return request.app.state.services
