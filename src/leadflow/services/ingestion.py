from __future__ import annotations

import logging
import mimetypes
import time
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from leadflow.db.database import Database
from leadflow.errors import NoAgentsAvailable
from leadflow.ingest.readers import check_size, detect_content_kind
from leadflow.ingest.records import parse_file
from leadflow.models.upload import UploadInfo
from leadflow.services.agent_directory import AgentDirectory
from leadflow.services.distributor import DistributionReport, RoundRobinDistributor
from leadflow.utils.config import Config

logger = logging.getLogger(__name__)


@dataclass
class IngestResult:
    upload: UploadInfo
    report: DistributionReport


class UploadService:
    """Store an uploaded file, parse it, and distribute its records."""

    def __init__(
        self,
        config: Config,
        db: Database,
        agents: AgentDirectory,
        distributor: RoundRobinDistributor,
    ):
        self.config = config
        self.db = db
        self.agents = agents
        self.distributor = distributor

    def _store(self, original_name: str, data: bytes) -> Path:
        upload_dir = self.config.upload_dir
        upload_dir.mkdir(parents=True, exist_ok=True)
        safe_name = Path(original_name).name or "upload"
        path = upload_dir / f"{int(time.time() * 1000)}-{safe_name}"
        if path.exists():
            path = upload_dir / f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}-{safe_name}"
        path.write_bytes(data)
        return path

    async def ingest(
        self, original_name: str, content_type: str | None, data: bytes
    ) -> IngestResult:
        detect_content_kind(content_type, original_name)
        check_size(len(data), self.config.max_upload_bytes)

        pool = await self.agents.snapshot()
        if not pool:
            raise NoAgentsAvailable()

        path = self._store(original_name, data)
        upload_id = uuid.uuid4().hex
        logger.info("Stored upload %s as %s (%d bytes)", original_name, path, len(data))
        try:
            records = parse_file(path, content_type, self.config.max_upload_bytes)
            report = await self.distributor.distribute(records, upload_id=upload_id, pool=pool)
        except Exception:
            path.unlink(missing_ok=True)
            raise

        upload = UploadInfo(
            id=upload_id,
            original_name=original_name,
            stored_name=path.name,
            content_type=content_type,
            size=len(data),
            path=str(path),
            uploaded_at=datetime.now(),
            distributed_count=report.distributed_count,
        )
        row = upload.model_dump()
        row["uploaded_at"] = upload.uploaded_at.isoformat()
        await self.db.insert_upload(row)
        return IngestResult(upload=upload, report=report)

    async def ingest_path(self, path: str | Path, content_type: str | None = None) -> IngestResult:
        """Ingest a local file, guessing its type from the extension if needed."""
        path = Path(path)
        if content_type is None:
            content_type, _ = mimetypes.guess_type(path.name)
        return await self.ingest(path.name, content_type, path.read_bytes())

    async def list_uploads(self) -> list[UploadInfo]:
        return [UploadInfo(**row) for row in await self.db.list_uploads()]
