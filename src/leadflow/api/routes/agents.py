"""Agent directory API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from leadflow.api.auth import require_auth
from leadflow.api.deps import Services, get_services
from leadflow.models.agent import Agent, AgentCreate
from leadflow.models.task import Task

router = APIRouter(prefix="/api/agents", tags=["Agents"], dependencies=[Depends(require_auth)])


@router.post("", status_code=201)
async def api_create_agent(
    body: AgentCreate, services: Services = Depends(get_services)
) -> dict:
    """Register a new agent; the password is stored only as a salted hash."""
    agent = await services.agents.create(body.name, body.email, body.mobile, body.password)
    return {
        "message": "Agent created successfully",
        "agent": agent.model_dump(mode="json", by_alias=True),
    }


@router.get("", response_model=list[Agent])
async def api_list_agents(services: Services = Depends(get_services)) -> list[Agent]:
    """List agents in distribution order."""
    return await services.agents.list_all()


@router.get("/{agent_id}/tasks", response_model=list[Task])
async def api_list_agent_tasks(
    agent_id: str, services: Services = Depends(get_services)
) -> list[Task]:
    """List the tasks owned by one agent, newest first."""
    await services.agents.get(agent_id)
    return await services.tasks.list_all(agent_id=agent_id)
