from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from leadflow.models.agent import AgentRef


class TaskStatus(str, Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class TaskPriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


DEFAULT_STATUS = TaskStatus.PENDING
DEFAULT_PRIORITY = TaskPriority.MEDIUM


class LeadRecord(BaseModel):
    """Canonical record produced from one input row, whatever the file format."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    first_name: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    notes: str = ""
    status: TaskStatus = DEFAULT_STATUS
    priority: TaskPriority = DEFAULT_PRIORITY


class Task(BaseModel):
    """A distributed lead owned by exactly one agent."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    first_name: str
    phone: str
    notes: str = ""
    status: TaskStatus = DEFAULT_STATUS
    priority: TaskPriority = DEFAULT_PRIORITY
    agent_id: str
    agent: Optional[AgentRef] = None
    upload_id: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)


class TaskUpdate(BaseModel):
    """Body of ``PATCH /api/lists/{id}``; values are normalized, never rejected."""

    status: Optional[str] = None
    priority: Optional[str] = None
