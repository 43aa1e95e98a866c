"""Pydantic models for auth domain."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class AuthUser(BaseModel):
    """The principal an identity-provider session belongs to."""

    id: UUID
    email: str | None = None


class Session(BaseModel):
    """An identity-provider session resolved for the current request."""

    access_token: str = Field(..., description="Bearer token (opaque string)")
    refresh_token: str
    expires_at: datetime
    user: AuthUser


class CookieOptions(BaseModel):
    """Attributes applied when a cookie is written or removed."""

    path: str = "/"
    max_age: int | None = None
    domain: str | None = None
    secure: bool = True
    httponly: bool = True
    samesite: str = "lax"


class PathClass(Enum):
    """Route table classification of a request path."""

    PROTECTED = "protected"
    AUTH = "auth"
    UNCLASSIFIED = "unclassified"


class GuardAction(Enum):
    """What the guard tells the middleware to do with a request."""

    FORWARD = "forward"
    REDIRECT = "redirect"


@dataclass(frozen=True)
class GuardDecision:
    """Outcome of one guard evaluation."""

    action: GuardAction
    path_class: PathClass
    session: Session | None
    reason: str
    location: str | None = None

    @property
    def is_redirect(self) -> bool:
        return self.action is GuardAction.REDIRECT


class Credentials(BaseModel):
    """Request payload for password sign-in and signup."""

    email: EmailStr
    password: str = Field(..., min_length=6, max_length=256)


class RecoverRequest(BaseModel):
    """Request payload for a password reset email."""

    email: EmailStr


class PasswordUpdate(BaseModel):
    """Request payload for setting a new password."""

    password: str = Field(..., min_length=6, max_length=256)


class SessionTokens(BaseModel):
    """Tokens delivered to the callback page in the URL fragment."""

    access_token: str = Field(..., min_length=1)
    refresh_token: str = Field(..., min_length=1)
    expires_in: int | None = Field(None, ge=0)
    expires_at: int | None = Field(None, ge=0)
