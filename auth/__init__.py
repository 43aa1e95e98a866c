"""Authentication: session guard, identity-provider sessions and auth routes."""

from auth.exceptions import AuthError, MalformedSessionCookieError
from auth.types import (
    AuthUser,
    Session,
    CookieOptions,
    PathClass,
    GuardAction,
    GuardDecision,
)
from auth.config import GuardConfig, IdentityConfig
from auth.cookies import CookieStore, RequestCookieStore
from auth.provider import SessionProvider, SupabaseSessionProvider
from auth.guard import SessionGuard
from auth.security_middleware import SessionGuardMiddleware
from auth.api import create_auth_router
