"""Contract domain models."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field

from core.models.common import FormModel


class ContractStatus(str, Enum):
    """Where the contracted goods are in the delivery pipeline."""

    PROCUREMENT = "procurement"
    CLEARING_CUSTOMS = "clearing_customs"
    DELIVERED = "delivered"


class PaymentType(str, Enum):
    WIRE = "wire"
    TRAITE = "traite"
    CHECK = "check"


class ContractCreate(FormModel):
    """Data required to create a contract."""

    contract_number: str = Field(..., min_length=1, max_length=100)
    client_id: UUID
    contract_status: ContractStatus
    payment_type: PaymentType
    is_moins_disant: bool = False
    bc_date: date | None = None
    delivery_deadline_date: date | None = None
    tuneps_number: str | None = Field(None, max_length=100)
    contract_value: Decimal | None = Field(None, ge=0, max_digits=14, decimal_places=2)
    description: str | None = Field(None, max_length=10000)
    assigned_user_id: UUID | None = None


class ContractUpdate(ContractCreate):
    """Full replacement payload for PUT. Same rules as create."""


class Contract(BaseModel):
    """Full contract entity as stored."""

    id: UUID
    contract_number: str
    client_id: UUID
    contract_status: ContractStatus
    payment_type: PaymentType
    is_moins_disant: bool
    bc_date: date | None
    delivery_deadline_date: date | None
    tuneps_number: str | None
    contract_value: Decimal | None
    description: str | None
    assigned_user_id: UUID | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
