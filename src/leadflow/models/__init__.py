from leadflow.models.agent import Agent, AgentCreate, AgentRef
from leadflow.models.task import LeadRecord, Task, TaskPriority, TaskStatus, TaskUpdate
from leadflow.models.upload import UploadInfo

__all__ = [
    "Agent",
    "AgentCreate",
    "AgentRef",
    "LeadRecord",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "TaskUpdate",
    "UploadInfo",
]
