"""
Identity provider client (GoTrue / Supabase Auth REST API).

Thin wrapper over the provider's /auth/v1 endpoints. Every call carries the
project's anon key and a bounded timeout. Responses are returned as plain
dicts; interpreting tokens and cookies is the session provider's job.

Failures:
    IdentityRejectedError  - provider answered 4xx (bad credentials, expired
                             or revoked token). Carries status_code.
    IdentityProviderError  - transport failure, timeout, 5xx, non-JSON body.
"""

import json
import logging
from typing import Any

import requests

logger = logging.getLogger(__name__)


class IdentityProviderError(Exception):
    """Identity provider unreachable or returned an unusable response."""


class IdentityRejectedError(IdentityProviderError):
    """Identity provider refused the request (4xx)."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        super().__init__(f"Identity provider rejected request ({status_code}): {message}")


class IdentityClient:
    """Calls the identity provider's auth REST endpoints."""

    def __init__(self, project_url: str, anon_key: str, timeout_seconds: float = 5.0):
        """
        Args:
            project_url: Provider project URL, e.g. https://abcd.supabase.co
            anon_key: Public API key sent as the `apikey` header
            timeout_seconds: Connect/read timeout applied to every call

        Raises:
            ValueError: If project_url or anon_key is empty
        """
        if not project_url:
            raise ValueError("project_url is required")
        if not anon_key:
            raise ValueError("anon_key is required")

        self.base_url = f"{project_url.rstrip('/')}/auth/v1"
        self.anon_key = anon_key
        self.timeout_seconds = timeout_seconds

    def _request(
        self,
        method: str,
        path: str,
        access_token: str | None = None,
        params: dict | None = None,
        payload: dict | None = None,
    ) -> dict[str, Any]:
        headers = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {access_token or self.anon_key}",
        }

        try:
            response = requests.request(
                method,
                f"{self.base_url}{path}",
                params=params,
                json=payload,
                headers=headers,
                timeout=self.timeout_seconds,
            )
        except (requests.exceptions.RequestException, ConnectionError) as e:
            logger.error(f"Identity provider connection failed: {e}")
            raise IdentityProviderError(f"Connection failed: {e}") from e

        if 400 <= response.status_code < 500:
            raise IdentityRejectedError(response.status_code, _error_message(response))

        if response.status_code >= 500:
            logger.error(f"Identity provider error {response.status_code}: {response.text}")
            raise IdentityProviderError(f"Provider error: {response.status_code}")

        if response.status_code == 204 or not response.content:
            return {}

        try:
            return response.json()
        except json.JSONDecodeError as e:
            logger.error(f"Identity provider returned invalid JSON: {response.text}")
            raise IdentityProviderError("Invalid response from identity provider") from e

    def get_user(self, access_token: str) -> dict[str, Any]:
        """Return the user the access token belongs to. Validates the token server-side."""
        return self._request("GET", "/user", access_token=access_token)

    def refresh_session(self, refresh_token: str) -> dict[str, Any]:
        """Exchange a refresh token for a new session (rotates both tokens)."""
        return self._request(
            "POST",
            "/token",
            params={"grant_type": "refresh_token"},
            payload={"refresh_token": refresh_token},
        )

    def sign_in_with_password(self, email: str, password: str) -> dict[str, Any]:
        """Password grant. Returns a session payload."""
        return self._request(
            "POST",
            "/token",
            params={"grant_type": "password"},
            payload={"email": email, "password": password},
        )

    def sign_up(self, email: str, password: str, redirect_to: str | None = None) -> dict[str, Any]:
        """Register a user.

        Returns a session payload when email confirmation is disabled,
        otherwise the bare user object.
        """
        params = {"redirect_to": redirect_to} if redirect_to else None
        return self._request(
            "POST",
            "/signup",
            params=params,
            payload={"email": email, "password": password},
        )

    def recover(self, email: str, redirect_to: str | None = None) -> None:
        """Send a password reset email."""
        params = {"redirect_to": redirect_to} if redirect_to else None
        self._request("POST", "/recover", params=params, payload={"email": email})

    def update_password(self, access_token: str, password: str) -> dict[str, Any]:
        """Set a new password for the token's user."""
        return self._request(
            "PUT",
            "/user",
            access_token=access_token,
            payload={"password": password},
        )

    def sign_out(self, access_token: str) -> None:
        """Revoke the session server-side."""
        self._request("POST", "/logout", access_token=access_token)


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except json.JSONDecodeError:
        return response.text or "unknown error"
    if not isinstance(body, dict):
        return str(body)
    return (
        body.get("error_description")
        or body.get("msg")
        or body.get("message")
        or body.get("error")
        or "unknown error"
    )
