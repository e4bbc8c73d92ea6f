from __future__ import annotations

import asyncio
import logging
import sqlite3
import uuid
from datetime import datetime

from leadflow.db.database import Database
from leadflow.errors import Conflict, NotFound
from leadflow.models.agent import Agent
from leadflow.utils.passwords import hash_password

logger = logging.getLogger(__name__)


class AgentDirectory:
    """Registers agents and serves the distribution pool."""

    def __init__(self, db: Database, password_iterations: int | None = None):
        self.db = db
        self.password_iterations = password_iterations

    async def create(self, name: str, email: str, mobile: str, password: str) -> Agent:
        email = email.strip().lower()
        if await self.db.get_agent_by_email(email):
            raise Conflict()

        agent = Agent(
            id=uuid.uuid4().hex,
            name=name.strip(),
            email=email,
            mobile=mobile.strip(),
            password_hash=await asyncio.to_thread(self._hash, password),
            created_at=datetime.now(),
        )
        row = agent.model_dump(exclude={"password_hash"})
        row["password_hash"] = agent.password_hash
        row["created_at"] = agent.created_at.isoformat()
        try:
            await self.db.insert_agent(row)
        except sqlite3.IntegrityError as e:
            # Lost a race with a concurrent create for the same email
            raise Conflict() from e

        await self.db.log_event("agent_created", agent.id, {"email": email})
        logger.info("Created agent %s <%s>", agent.id, email)
        return agent

    def _hash(self, password: str) -> str:
        if self.password_iterations:
            return hash_password(password, iterations=self.password_iterations)
        return hash_password(password)

    async def get(self, agent_id: str) -> Agent:
        row = await self.db.get_agent(agent_id)
        if not row:
            raise NotFound("Agent not found", id=agent_id)
        return Agent(**row)

    async def list_all(self) -> list[Agent]:
        return [Agent(**row) for row in await self.db.list_agents()]

    async def snapshot(self) -> tuple[Agent, ...]:
        """Freeze the current pool; agents added later are not part of it."""
        return tuple(await self.list_all())
