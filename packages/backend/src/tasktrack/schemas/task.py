"""Pydantic schemas for tasks.

Learn: Separate schemas for create/update/read keep the API clean.
- TaskCreate: what you POST to create a task
- TaskUpdate: what you PUT to modify a task (all optional, partial merge)
- StatusChange: dedicated schema for complete/reopen
- TaskRead: what the API returns, including server-assigned fields

Client-supplied `id`, `userId` and `createdAt` are not fields on the input
schemas, so pydantic drops them before they reach the service.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class Priority(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class TaskStatus(str, Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"


class TaskCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=5000)
    priority: Priority = Priority.MEDIUM
    deadline: Optional[date] = None
    owner: str = Field(default="", max_length=200)
    status: TaskStatus = TaskStatus.PENDING


class TaskUpdate(BaseModel):
    """Partial update. Only fields present in the request body are applied;
    null clears description/owner to "" and is ignored for name/priority/status.
    """
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    priority: Optional[Priority] = None
    deadline: Optional[date] = None
    owner: Optional[str] = Field(None, max_length=200)
    status: Optional[TaskStatus] = None


class StatusChange(BaseModel):
    status: TaskStatus


class TaskRead(BaseModel):
    id: str
    name: str
    description: str = ""
    priority: Priority
    status: TaskStatus
    deadline: Optional[date] = None
    owner: str = ""
    user_id: str = Field(..., alias="userId")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    model_config = {"populate_by_name": True}

    @field_validator("description", "owner", mode="before")
    @classmethod
    def _null_text_is_empty(cls, v):
        # files written by older versions may hold null here
        return "" if v is None else v


class TaskResult(BaseModel):
    """Confirmation message plus the task as stored after a write."""
    message: str
    task: TaskRead
