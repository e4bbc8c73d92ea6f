from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any

from leadflow.db.database import Database
from leadflow.errors import NotFound, ValidationError
from leadflow.ingest.enums import normalize_priority, normalize_status
from leadflow.models.agent import AgentRef
from leadflow.models.task import LeadRecord, Task

logger = logging.getLogger(__name__)


def _task_from_row(row: dict[str, Any]) -> Task:
    agent = None
    if row.get("agent_name") is not None:
        agent = AgentRef(id=row["agent_id"], name=row["agent_name"], email=row["agent_email"])
    return Task(
        id=row["id"],
        first_name=row["first_name"],
        phone=row["phone"],
        notes=row["notes"] or "",
        status=normalize_status(row["status"]),
        priority=normalize_priority(row["priority"]),
        agent_id=row["agent_id"],
        agent=agent,
        upload_id=row.get("upload_id"),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class TaskRepository:
    """Create, list, update and delete distributed tasks."""

    def __init__(self, db: Database):
        self.db = db

    async def create(
        self, record: LeadRecord, agent_id: str, upload_id: str | None = None
    ) -> Task:
        if not record.first_name or not record.phone:
            raise ValidationError("firstName and phone are required")
        if not agent_id:
            raise ValidationError("A task needs an owning agent")

        now = datetime.now()
        task = Task(
            id=uuid.uuid4().hex,
            first_name=record.first_name,
            phone=record.phone,
            notes=record.notes or "",
            status=normalize_status(record.status),
            priority=normalize_priority(record.priority),
            agent_id=agent_id,
            upload_id=upload_id,
            created_at=now,
            updated_at=now,
        )
        await self.db.insert_task(
            {
                "id": task.id,
                "first_name": task.first_name,
                "phone": task.phone,
                "notes": task.notes,
                "status": task.status.value,
                "priority": task.priority.value,
                "agent_id": task.agent_id,
                "upload_id": task.upload_id,
                "created_at": now.isoformat(),
                "updated_at": now.isoformat(),
            }
        )
        return task

    async def get(self, task_id: str) -> Task:
        row = await self.db.get_task(task_id)
        if not row:
            raise NotFound("Task not found", id=task_id)
        return _task_from_row(row)

    async def list_all(self, agent_id: str | None = None) -> list[Task]:
        """All tasks newest first, with the owning agent joined in."""
        return [_task_from_row(row) for row in await self.db.list_tasks(agent_id)]

    async def update_status_priority(
        self,
        task_id: str,
        status: str | None = None,
        priority: str | None = None,
    ) -> Task:
        fields: dict[str, Any] = {}
        if status is not None:
            fields["status"] = normalize_status(status).value
        if priority is not None:
            fields["priority"] = normalize_priority(priority).value
        if fields:
            fields["updated_at"] = datetime.now().isoformat()

        if not await self.db.update_task(task_id, fields):
            raise NotFound("Task not found", id=task_id)

        task = await self.get(task_id)
        if fields:
            await self.db.log_event(
                "task_updated",
                task.agent_id,
                {"task_id": task_id, "status": task.status.value, "priority": task.priority.value},
            )
            logger.info(
                "Updated task %s: status=%s priority=%s",
                task_id,
                task.status.value,
                task.priority.value,
            )
        return task

    async def delete(self, task_id: str) -> Task:
        task = await self.get(task_id)
        if not await self.db.delete_task(task_id):
            raise NotFound("Task not found", id=task_id)
        await self.db.log_event("task_deleted", task.agent_id, {"task_id": task_id})
        logger.info("Deleted task %s", task_id)
        return task

    async def discard(self, task_ids: list[str]) -> int:
        """Remove tasks written by a batch that is being rolled back."""
        return await self.db.delete_tasks(task_ids)
