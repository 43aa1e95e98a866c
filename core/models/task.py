"""Task domain models."""

from datetime import date, datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from core.models.common import FormModel


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskStatus(str, Enum):
    TO_DO = "to_do"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TaskCreate(FormModel):
    """Data required to create a task."""

    title: str = Field(..., min_length=1, max_length=255)
    priority: TaskPriority
    status: TaskStatus
    description: str | None = Field(None, max_length=10000)
    due_date: date | None = None
    linked_contract_id: UUID | None = None
    linked_client_id: UUID | None = None
    assigned_to_user_id: UUID | None = None

    @model_validator(mode="after")
    def link_to_one_record_at_most(self) -> "TaskCreate":
        """A task hangs off a contract or a client, never both."""
        if self.linked_contract_id and self.linked_client_id:
            raise ValueError(
                "A task can only be linked to one contract OR one client, not both."
            )
        return self


class TaskUpdate(TaskCreate):
    """Full replacement payload for PUT. Same rules as create."""


class Task(BaseModel):
    """Task as stored, plus display fields joined on read."""

    id: UUID
    title: str
    priority: TaskPriority
    status: TaskStatus
    description: str | None
    due_date: date | None
    linked_contract_id: UUID | None
    linked_client_id: UUID | None
    assigned_to_user_id: UUID | None
    created_at: datetime
    updated_at: datetime

    # Joined for display
    contract_number: str | None = None
    client_name: str | None = None
    assigned_user_email: str | None = None

    model_config = {"from_attributes": True}
