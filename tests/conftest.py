"""Shared test fixtures for CRM test suite."""

import base64
import json
from unittest.mock import Mock
from uuid import UUID

import pytest

# Reset vault client singleton so no test sees secrets cached by another
import clients.vault_client as vault_module

from auth.config import GuardConfig, IdentityConfig
from clients.identity_client import IdentityClient
from clients.postgres_client import PostgresClient
from utils.timezone import now_utc, to_epoch


# =============================================================================
# TEST USER CONSTANTS
# =============================================================================

TEST_USER_ID = UUID("00000000-0000-0000-0000-000000000001")
TEST_USER_EMAIL = "testuser@test.local"

PROJECT_URL = "https://abcd.supabase.co"
ANON_KEY = "test-anon-key"
COOKIE_NAME = "sb-abcd-auth-token"


@pytest.fixture(autouse=True)
def reset_vault():
    vault_module.reset_vault_cache()
    yield
    vault_module.reset_vault_cache()


@pytest.fixture
def test_user_id() -> UUID:
    """The primary test user's ID."""
    return TEST_USER_ID


@pytest.fixture
def test_user_email() -> str:
    return TEST_USER_EMAIL


@pytest.fixture
def cookie_name() -> str:
    """Session cookie name derived from PROJECT_URL."""
    return COOKIE_NAME


# =============================================================================
# CONFIG FIXTURES
# =============================================================================


@pytest.fixture
def identity_config() -> IdentityConfig:
    """Identity config for tests. TestClient talks plain http, so no Secure flag."""
    return IdentityConfig(
        project_url=PROJECT_URL,
        anon_key=ANON_KEY,
        cookie_secure=False,
    )


@pytest.fixture
def guard_config() -> GuardConfig:
    return GuardConfig()


# =============================================================================
# SESSION COOKIE HELPERS
# =============================================================================


@pytest.fixture
def make_session_payload():
    """Build a provider session payload expiring `expires_in` seconds from now."""

    def _make(
        expires_in: int = 3600,
        access_token: str = "access-token",
        refresh_token: str = "refresh-token",
        user_id: UUID = TEST_USER_ID,
        email: str = TEST_USER_EMAIL,
    ) -> dict:
        return {
            "access_token": access_token,
            "refresh_token": refresh_token,
            "expires_in": expires_in,
            "expires_at": to_epoch(now_utc()) + expires_in,
            "token_type": "bearer",
            "user": {"id": str(user_id), "email": email},
        }

    return _make


@pytest.fixture
def encode_cookie():
    """Encode a payload the way browser-side clients store it."""

    def _encode(payload: dict) -> str:
        text = json.dumps(payload)
        return "base64-" + base64.urlsafe_b64encode(text.encode()).decode().rstrip("=")

    return _encode


@pytest.fixture
def decode_cookie():
    """Decode a cookie value written by the session provider."""

    def _decode(value: str) -> dict:
        encoded = value[len("base64-"):]
        padding = "=" * (-len(encoded) % 4)
        return json.loads(base64.urlsafe_b64decode(encoded + padding))

    return _decode


# =============================================================================
# MOCKED INFRASTRUCTURE
# =============================================================================


@pytest.fixture
def mock_identity():
    """Mock identity provider client."""
    return Mock(spec=IdentityClient)


@pytest.fixture
def mock_postgres():
    """Mock PostgresClient - services are exercised without a database."""
    return Mock(spec=PostgresClient)
