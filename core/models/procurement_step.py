"""Procurement step domain models."""

from datetime import date, datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field

from core.models.common import FormModel


class ProcurementStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"


class ProcurementStepCreate(FormModel):
    """Data required to create a procurement step."""

    step_name: str = Field(..., min_length=1, max_length=255)
    contract_id: UUID
    status: ProcurementStatus
    step_description: str | None = Field(None, max_length=10000)
    due_date: date | None = None
    assigned_to_user_id: UUID | None = None


class ProcurementStepUpdate(ProcurementStepCreate):
    """Full replacement payload for PUT. Same rules as create."""


class ProcurementStep(BaseModel):
    """Procurement step as stored, plus display fields joined on read."""

    id: UUID
    step_name: str
    contract_id: UUID
    status: ProcurementStatus
    step_description: str | None
    due_date: date | None
    assigned_to_user_id: UUID | None
    created_at: datetime
    updated_at: datetime

    # Joined for display
    contract_number: str | None = None
    assigned_user_email: str | None = None

    model_config = {"from_attributes": True}
