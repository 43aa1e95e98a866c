"""Typed exceptions for auth failures."""


class AuthError(Exception):
    """Base class for authentication/authorization errors."""


class MalformedSessionCookieError(AuthError):
    """
    Session cookie exists but cannot be decoded.

    Treated exactly like a missing cookie by the session provider.
    """
