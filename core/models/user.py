"""Application user (role holder) model."""

from uuid import UUID

from pydantic import BaseModel


class AppUser(BaseModel):
    """Row in the users table mirroring an identity-provider account."""

    id: UUID
    email: str | None
    role: str

    model_config = {"from_attributes": True}
