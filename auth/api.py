"""HTTP routes for authentication.

Every route that changes the session writes cookies through a
RequestCookieStore and copies them onto the JSON response, the same way the
guard middleware does for page requests.
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.base import error_json, message_response, ErrorCodes
from auth.config import GuardConfig
from auth.cookies import RequestCookieStore
from auth.provider import SupabaseSessionProvider
from auth.types import AuthUser, Credentials, PasswordUpdate, RecoverRequest, SessionTokens
from clients.identity_client import IdentityRejectedError
from core.services.user_service import UserService

logger = logging.getLogger(__name__)


def _user_json(user: AuthUser) -> dict:
    return {"id": str(user.id), "email": user.email}


def _absolute(request: Request, path: str) -> str:
    return str(request.url.replace(path=path, query="", fragment=""))


def create_auth_router(
    provider: SupabaseSessionProvider,
    user_service: UserService,
    guard_config: GuardConfig,
) -> APIRouter:
    """Create auth router with injected provider and services."""
    router = APIRouter(tags=["auth"])

    @router.post("/login")
    def login(request: Request, body: Credentials):
        """Password sign-in. Sets session cookies on success."""
        cookies = RequestCookieStore(request.cookies)
        try:
            session = provider.sign_in_with_password(cookies, body.email, body.password)
        except IdentityRejectedError:
            return error_json(401, ErrorCodes.INVALID_CREDENTIALS, "Invalid email or password")

        response = JSONResponse({
            "user": _user_json(session.user),
            "redirect_to": guard_config.landing_path,
        })
        return cookies.apply(response)

    @router.post("/signup")
    def signup(request: Request, body: Credentials):
        """Register. Signs in immediately when the provider needs no email confirmation."""
        cookies = RequestCookieStore(request.cookies)
        try:
            user, session = provider.sign_up(
                cookies,
                body.email,
                body.password,
                redirect_to=_absolute(request, guard_config.callback_path),
            )
        except IdentityRejectedError as e:
            return error_json(400, ErrorCodes.INVALID_REQUEST, f"Signup failed: {e}")

        response = JSONResponse(
            status_code=201,
            content={
                "user": _user_json(user),
                "confirmation_required": session is None,
            },
        )
        return cookies.apply(response)

    @router.post("/recover")
    def recover(request: Request, body: RecoverRequest):
        """Send a password reset email.

        Same answer whether or not the address is registered.
        """
        try:
            provider.send_password_reset(
                body.email,
                redirect_to=_absolute(request, "/reset-password"),
            )
        except IdentityRejectedError as e:
            logger.info(f"Password recovery rejected by provider ({e.status_code})")

        return message_response("If the address is registered, a reset link has been sent.")

    @router.post("/session")
    def establish_session(request: Request, body: SessionTokens):
        """Callback exchange: tokens from the URL fragment become a cookie session."""
        cookies = RequestCookieStore(request.cookies)
        try:
            session = provider.establish_session(
                cookies,
                access_token=body.access_token,
                refresh_token=body.refresh_token,
                expires_in=body.expires_in,
                expires_at=body.expires_at,
            )
        except IdentityRejectedError:
            return error_json(401, ErrorCodes.INVALID_TOKEN, "Invalid or expired token")

        response = JSONResponse({
            "user": _user_json(session.user),
            "redirect_to": guard_config.landing_path,
        })
        return cookies.apply(response)

    @router.post("/password")
    def update_password(request: Request, body: PasswordUpdate):
        """Set a new password (reset-password flow). Requires a session."""
        session = getattr(request.state, "session", None)
        if session is None:
            return error_json(401, ErrorCodes.NOT_AUTHENTICATED, "Authentication required")

        try:
            provider.update_password(session, body.password)
        except IdentityRejectedError as e:
            return error_json(400, ErrorCodes.INVALID_REQUEST, f"Password update failed: {e}")

        return message_response("Password updated successfully")

    @router.post("/logout")
    def logout(request: Request):
        """Logout - revoke the session with the provider and clear cookies."""
        cookies = RequestCookieStore(request.cookies)
        provider.sign_out(cookies, session=getattr(request.state, "session", None))
        response = JSONResponse(message_response(
            "Logged out successfully",
            redirect_to=guard_config.login_path,
        ))
        return cookies.apply(response)

    @router.get("/me")
    def get_current_user(request: Request):
        """Current user with their application role.

        Requires authentication (guard middleware resolves request.state.session).
        """
        session = getattr(request.state, "session", None)
        if session is None:
            return error_json(401, ErrorCodes.NOT_AUTHENTICATED, "Authentication required")

        app_user = user_service.get_by_id(session.user.id)
        return {
            "id": str(session.user.id),
            "email": session.user.email,
            "role": app_user.role if app_user else None,
        }

    return router
