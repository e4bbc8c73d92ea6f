from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Agent(BaseModel):
    """A sales agent eligible to receive distributed leads."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    email: str
    mobile: str
    password_hash: str = Field(exclude=True, repr=False)
    created_at: datetime = Field(default_factory=datetime.now)


class AgentCreate(BaseModel):
    """Body of ``POST /api/agents``."""

    name: str = Field(min_length=1)
    email: str = Field(min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    mobile: str = Field(min_length=1)
    password: str = Field(min_length=1)


class AgentRef(BaseModel):
    """The agent fields joined onto a task listing."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    email: str
