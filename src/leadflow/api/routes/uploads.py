"""Upload history API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from leadflow.api.auth import require_auth
from leadflow.api.deps import Services, get_services
from leadflow.models.upload import UploadInfo

router = APIRouter(tags=["Uploads"], dependencies=[Depends(require_auth)])


@router.get("/api/uploads", response_model=list[UploadInfo])
@router.get("/api/upload", response_model=list[UploadInfo], include_in_schema=False)
@router.get("/api/upload/", response_model=list[UploadInfo], include_in_schema=False)
async def api_list_uploads(services: Services = Depends(get_services)) -> list[UploadInfo]:
    """List stored uploads, newest first. ``/api/upload`` is kept for older clients."""
    return await services.uploads.list_uploads()
