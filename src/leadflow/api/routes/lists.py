"""Lead list upload and task management API routes."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Query, UploadFile

from leadflow.api.auth import require_auth
from leadflow.api.deps import Services, get_services
from leadflow.errors import ValidationError
from leadflow.ingest.readers import check_size, detect_content_kind
from leadflow.models.task import Task, TaskUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/lists", tags=["Lists"], dependencies=[Depends(require_auth)])


@router.post("/upload", status_code=201)
async def api_upload_list(
    file: UploadFile | None = File(None),
    services: Services = Depends(get_services),
) -> dict:
    """Upload a CSV, spreadsheet or JSON file and distribute its rows."""
    if file is None or not file.filename:
        raise ValidationError("No file uploaded")

    # Reject on declared type and size before reading the body into memory
    detect_content_kind(file.content_type, file.filename)
    max_bytes = services.config.max_upload_bytes
    if file.size is not None:
        check_size(file.size, max_bytes)
    data = await file.read(max_bytes + 1)
    check_size(len(data), max_bytes)

    logger.info("Upload received: %s (%s, %d bytes)", file.filename, file.content_type, len(data))
    result = await services.uploads.ingest(file.filename, file.content_type, data)
    report = result.report
    return {
        "message": "File uploaded & distributed successfully",
        "distributedCount": report.distributed_count,
        "failedCount": len(report.failed_indices),
        "failedIndices": report.failed_indices,
        "outcome": report.outcome.value,
        "file": result.upload.model_dump(mode="json", by_alias=True),
    }


@router.get("", response_model=list[Task])
@router.get("/tasks", response_model=list[Task])
async def api_list_tasks(
    agent: str | None = Query(None, description="Only tasks owned by this agent id"),
    services: Services = Depends(get_services),
) -> list[Task]:
    """List all tasks, newest first, with the owning agent joined in."""
    return await services.tasks.list_all(agent_id=agent)


@router.patch("/{task_id}", response_model=Task)
async def api_update_task(
    task_id: str, body: TaskUpdate, services: Services = Depends(get_services)
) -> Task:
    """Update status and/or priority; unknown spellings fall back to the defaults."""
    return await services.tasks.update_status_priority(
        task_id, status=body.status, priority=body.priority
    )


@router.delete("/{task_id}")
async def api_delete_task(task_id: str, services: Services = Depends(get_services)) -> dict:
    """Delete a task."""
    deleted = await services.tasks.delete(task_id)
    return {
        "message": "Task deleted successfully",
        "deletedItem": deleted.model_dump(mode="json", by_alias=True),
    }
