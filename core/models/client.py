"""Client (customer organization) domain models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from core.models.common import FormModel


class ClientCreate(FormModel):
    """Data required to create a client."""

    name: str = Field(..., min_length=1, max_length=255)
    contact_person: str | None = Field(None, max_length=255)
    contact_email: EmailStr | None = None
    contact_phone: str | None = Field(None, max_length=50)
    address: str | None = Field(None, max_length=500)


class ClientUpdate(ClientCreate):
    """Full replacement payload for PUT. Same rules as create."""


class Client(BaseModel):
    """Full client entity as stored."""

    id: UUID
    name: str
    contact_person: str | None
    contact_email: str | None
    contact_phone: str | None
    address: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
