"""Session lookup against the identity provider.

The session provider is the only component that understands the session
cookie. It is injected into the guard behind the one-method SessionProvider
interface so guard logic can be exercised with fakes.

Cookie format (compatible with Supabase SSR clients):
    name   sb-<project-ref>-auth-token, or chunks <name>.0, <name>.1, ...
    value  JSON session, optionally encoded as "base64-" + urlsafe base64
"""

import base64
import binascii
import json
import logging
from datetime import timedelta
from typing import Any, Protocol

from pydantic import ValidationError

from auth.config import IdentityConfig
from auth.cookies import CookieStore
from auth.exceptions import MalformedSessionCookieError
from auth.types import AuthUser, CookieOptions, Session
from clients.identity_client import IdentityClient, IdentityProviderError, IdentityRejectedError
from utils.timezone import from_epoch, now_utc, to_epoch

logger = logging.getLogger(__name__)

BASE64_PREFIX = "base64-"

# Upper bound on chunk cookies scanned when reading or clearing.
MAX_CHUNKS = 10

DEFAULT_TOKEN_LIFETIME_SECONDS = 3600


class SessionProvider(Protocol):
    """What the guard needs from the identity provider."""

    def lookup_session(self, cookies: CookieStore) -> Session | None: ...


class SupabaseSessionProvider:
    """Resolves, refreshes, stores and clears identity-provider sessions in cookies.

    lookup_session runs on every guarded request:
    1. Read and decode the session cookie (missing/malformed -> None)
    2. Refresh via the refresh-token grant if the access token is near expiry,
       otherwise validate the access token with the provider
    3. Rewrite the cookie (rotated tokens and/or sliding max-age)

    Provider rejection (4xx) clears the cookies and returns None.
    Transport failures raise IdentityProviderError for the caller to handle.
    """

    def __init__(self, identity: IdentityClient, config: IdentityConfig):
        self._identity = identity
        self._config = config

    # ------------------------------------------------------------------
    # Cookie codec
    # ------------------------------------------------------------------

    def _cookie_options(self) -> CookieOptions:
        return CookieOptions(
            path=self._config.cookie_path,
            max_age=self._config.cookie_max_age_seconds,
            secure=self._config.cookie_secure,
            httponly=True,
            samesite=self._config.cookie_samesite,
        )

    def _removal_options(self) -> CookieOptions:
        return CookieOptions(
            path=self._config.cookie_path,
            max_age=0,
            secure=self._config.cookie_secure,
            httponly=True,
            samesite=self._config.cookie_samesite,
        )

    def _read_raw(self, cookies: CookieStore) -> str | None:
        """Return the cookie value, joining chunks if the value was split."""
        name = self._config.cookie_name
        whole = cookies.get(name)
        if whole:
            return whole

        chunks = []
        for index in range(MAX_CHUNKS):
            chunk = cookies.get(f"{name}.{index}")
            if not chunk:
                break
            chunks.append(chunk)

        return "".join(chunks) if chunks else None

    def _decode(self, raw: str) -> dict[str, Any]:
        text = raw
        if raw.startswith(BASE64_PREFIX):
            encoded = raw[len(BASE64_PREFIX):]
            padding = "=" * (-len(encoded) % 4)
            try:
                text = base64.urlsafe_b64decode(encoded + padding).decode("utf-8")
            except (binascii.Error, UnicodeDecodeError) as e:
                raise MalformedSessionCookieError("Session cookie is not valid base64") from e

        try:
            payload = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedSessionCookieError("Session cookie is not valid JSON") from e

        if not isinstance(payload, dict):
            raise MalformedSessionCookieError("Session cookie does not hold an object")
        if not payload.get("access_token") or not payload.get("refresh_token"):
            raise MalformedSessionCookieError("Session cookie is missing tokens")
        return payload

    def _encode(self, payload: dict[str, Any]) -> str:
        text = json.dumps(payload, separators=(",", ":"))
        encoded = base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")
        return f"{BASE64_PREFIX}{encoded}"

    def _write(self, cookies: CookieStore, payload: dict[str, Any]) -> None:
        """Store payload, splitting into chunks when it exceeds the chunk size."""
        name = self._config.cookie_name
        value = self._encode(payload)
        size = self._config.cookie_chunk_size
        options = self._cookie_options()
        removal = self._removal_options()

        if len(value) <= size:
            cookies.set(name, value, options)
            for index in range(MAX_CHUNKS):
                if cookies.get(f"{name}.{index}"):
                    cookies.remove(f"{name}.{index}", removal)
            return

        chunks = [value[i:i + size] for i in range(0, len(value), size)]
        if len(chunks) > MAX_CHUNKS:
            raise ValueError(f"Session payload too large for {MAX_CHUNKS} cookie chunks")

        if cookies.get(name):
            cookies.remove(name, removal)
        for index, chunk in enumerate(chunks):
            cookies.set(f"{name}.{index}", chunk, options)
        for index in range(len(chunks), MAX_CHUNKS):
            if cookies.get(f"{name}.{index}"):
                cookies.remove(f"{name}.{index}", removal)

    def clear_session(self, cookies: CookieStore) -> None:
        """Remove the session cookie and any chunks."""
        name = self._config.cookie_name
        removal = self._removal_options()
        if cookies.get(name):
            cookies.remove(name, removal)
        for index in range(MAX_CHUNKS):
            if cookies.get(f"{name}.{index}"):
                cookies.remove(f"{name}.{index}", removal)

    # ------------------------------------------------------------------
    # Payload <-> Session
    # ------------------------------------------------------------------

    def _normalize(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Fill expires_at from expires_in when the provider only sent a lifetime."""
        normalized = dict(payload)
        if not normalized.get("expires_at"):
            lifetime = normalized.get("expires_in") or DEFAULT_TOKEN_LIFETIME_SECONDS
            normalized["expires_at"] = to_epoch(now_utc()) + int(lifetime)
        return normalized

    def _to_session(self, payload: dict[str, Any], user: dict[str, Any] | None = None) -> Session:
        user_data = user if user is not None else payload.get("user") or {}
        try:
            return Session(
                access_token=payload["access_token"],
                refresh_token=payload["refresh_token"],
                expires_at=from_epoch(payload["expires_at"]),
                user=AuthUser(id=user_data.get("id"), email=user_data.get("email")),
            )
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            raise MalformedSessionCookieError("Session payload is incomplete") from e

    def _store(self, cookies: CookieStore, payload: dict[str, Any]) -> Session:
        normalized = self._normalize(payload)
        session = self._to_session(normalized)
        self._write(cookies, normalized)
        return session

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def lookup_session(self, cookies: CookieStore) -> Session | None:
        """Resolve the request's session with a fresh provider round-trip.

        Raises:
            IdentityProviderError: Provider unreachable or answered 5xx.
        """
        raw = self._read_raw(cookies)
        if raw is None:
            return None

        try:
            payload = self._decode(raw)
            expires_at = from_epoch(payload["expires_at"]) if payload.get("expires_at") else None
        except (MalformedSessionCookieError, TypeError, ValueError, OverflowError) as e:
            logger.warning(f"Ignoring unreadable session cookie: {e}")
            return None

        margin = timedelta(seconds=self._config.refresh_margin_seconds)
        needs_refresh = expires_at is None or expires_at - margin <= now_utc()

        try:
            if needs_refresh:
                refreshed = self._identity.refresh_session(payload["refresh_token"])
                session = self._store(cookies, refreshed)
                logger.info(f"Session refreshed for user {session.user.id}")
                return session

            user = self._identity.get_user(payload["access_token"])
        except IdentityRejectedError as e:
            logger.info(f"Identity provider rejected session ({e.status_code}); clearing cookies")
            self.clear_session(cookies)
            return None
        except MalformedSessionCookieError as e:
            logger.warning(f"Identity provider returned an unusable session: {e}")
            self.clear_session(cookies)
            return None

        try:
            session = self._to_session(payload, user)
        except MalformedSessionCookieError as e:
            logger.warning(f"Ignoring session with unusable user data: {e}")
            return None

        # Sliding cookie lifetime: rewrite with refreshed user data.
        self._write(cookies, {**payload, "user": user})
        return session

    def sign_in_with_password(self, cookies: CookieStore, email: str, password: str) -> Session:
        """Password sign-in; stores the new session in cookies.

        Raises:
            IdentityRejectedError: Invalid credentials.
            IdentityProviderError: Provider unavailable.
        """
        payload = self._identity.sign_in_with_password(email, password)
        session = self._store(cookies, payload)
        logger.info(f"User {session.user.id} signed in")
        return session

    def sign_up(
        self,
        cookies: CookieStore,
        email: str,
        password: str,
        redirect_to: str | None = None,
    ) -> tuple[AuthUser, Session | None]:
        """Register a user. Stores a session when the provider issues one immediately."""
        payload = self._identity.sign_up(email, password, redirect_to=redirect_to)

        if payload.get("access_token"):
            session = self._store(cookies, payload)
            logger.info(f"User {session.user.id} signed up and signed in")
            return session.user, session

        user_data = payload.get("user") or payload
        user = AuthUser(id=user_data["id"], email=user_data.get("email"))
        logger.info(f"User {user.id} signed up; confirmation pending")
        return user, None

    def establish_session(
        self,
        cookies: CookieStore,
        access_token: str,
        refresh_token: str,
        expires_in: int | None = None,
        expires_at: int | None = None,
    ) -> Session:
        """Turn tokens from the callback fragment into a cookie session.

        The access token is validated with the provider before anything is stored.
        """
        user = self._identity.get_user(access_token)
        payload = {
            "access_token": access_token,
            "refresh_token": refresh_token,
            "expires_in": expires_in,
            "expires_at": expires_at,
            "token_type": "bearer",
            "user": user,
        }
        session = self._store(cookies, payload)
        logger.info(f"Session established from callback for user {session.user.id}")
        return session

    def send_password_reset(self, email: str, redirect_to: str | None = None) -> None:
        self._identity.recover(email, redirect_to=redirect_to)
        logger.info("Password reset requested")

    def update_password(self, session: Session, password: str) -> None:
        self._identity.update_password(session.access_token, password)
        logger.info(f"Password updated for user {session.user.id}")

    def sign_out(self, cookies: CookieStore, session: Session | None = None) -> None:
        """Revoke the session with the provider and clear cookies.

        Pass the session already resolved for this request when there is one:
        its lookup may have rotated the tokens the cookie still carries.
        Cookies are cleared even if the provider call fails.
        """
        raw = self._read_raw(cookies)
        try:
            if session is not None:
                self._identity.sign_out(session.access_token)
            elif raw is not None:
                payload = self._decode(raw)
                self._identity.sign_out(payload["access_token"])
        except MalformedSessionCookieError:
            logger.warning("Sign-out with unreadable session cookie; clearing only")
        except IdentityProviderError as e:
            logger.warning(f"Provider sign-out failed, clearing cookies anyway: {e}")
        finally:
            self.clear_session(cookies)
