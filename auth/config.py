"""Authentication configuration."""

from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator


DEFAULT_PROTECTED_PREFIXES = [
    "/dashboard",
    "/contracts",
    "/clients",
    "/procurement",
    "/tasks",
    "/reports",
]

DEFAULT_AUTH_PREFIXES = [
    "/login",
    "/signup",
    "/forgot-password",
    "/reset-password",
    "/callback",
]

# Static assets and common static file extensions never reach the guard.
DEFAULT_EXCLUDED_PATH_PATTERN = (
    r"^/(?:_next/static|_next/image|static/|favicon\.ico"
    r"|.*\.(?:svg|png|jpg|jpeg|gif|webp|css|js)$)"
)


class GuardConfig(BaseModel):
    """
    Route table and decision settings for the session guard.

    Prefix lists are matched with str.startswith against the request path.
    """

    protected_prefixes: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PROTECTED_PREFIXES),
        description="Paths that require an active session",
    )
    auth_prefixes: list[str] = Field(
        default_factory=lambda: list(DEFAULT_AUTH_PREFIXES),
        description="Paths meant for unauthenticated flows only",
    )
    callback_path: str = Field(
        default="/callback",
        description="Path the identity provider redirects back to after external login",
    )
    login_path: str = Field(default="/login", description="Where unauthenticated users land")
    landing_path: str = Field(default="/dashboard", description="Where authenticated users land")
    token_fragment_marker: str = Field(
        default="access_token=",
        description="Substring in the URL fragment that signals token delivery",
    )
    excluded_path_pattern: str = Field(
        default=DEFAULT_EXCLUDED_PATH_PATTERN,
        description="Regex of paths the guard never runs on",
    )

    @field_validator("callback_path", "login_path", "landing_path")
    @classmethod
    def require_absolute_path(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("Paths must start with '/'")
        return value


class IdentityConfig(BaseModel):
    """
    Identity provider connection and session cookie settings.

    Durations are in seconds; cookie names are derived from the project URL.
    """

    project_url: str = Field(..., description="Identity provider project URL")
    anon_key: str = Field(..., description="Public API key for the project")

    request_timeout_seconds: float = Field(
        default=5.0,
        description="Timeout for each identity provider call (session lookup included)",
        gt=0,
        le=30,
    )
    refresh_margin_seconds: int = Field(
        default=60,
        description="Refresh the access token when it expires within this window",
        ge=0,
        le=3600,
    )

    # Cookie settings
    cookie_path: str = Field(default="/")
    cookie_max_age_seconds: int = Field(
        default=400 * 24 * 3600,
        description="Browser lifetime of the session cookie (sliding)",
        ge=60,
    )
    cookie_secure: bool = Field(default=True)
    cookie_samesite: str = Field(default="lax", pattern="^(lax|strict|none)$")
    cookie_chunk_size: int = Field(
        default=3180,
        description="Maximum characters per cookie before the value is split",
        ge=100,
    )

    @property
    def project_ref(self) -> str:
        """First DNS label of the project URL, e.g. 'abcd' for https://abcd.supabase.co."""
        host = urlparse(self.project_url).hostname or ""
        return host.split(".")[0]

    @property
    def cookie_name(self) -> str:
        """Name of the session cookie (chunks append '.0', '.1', ...)."""
        return f"sb-{self.project_ref}-auth-token"
