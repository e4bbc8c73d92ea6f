from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class UploadInfo(BaseModel):
    """Metadata of a stored upload file."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    original_name: str
    stored_name: str
    content_type: Optional[str] = None
    size: int
    path: str
    uploaded_at: datetime = Field(default_factory=datetime.now)
    distributed_count: int = 0
