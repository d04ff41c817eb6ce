"""Typed exceptions for admin auth failures."""


class AuthError(Exception):
    """Base class for authentication/authorization errors."""


class UnauthorizedError(AuthError):
    """No valid admin session. Maps to 401."""


class InvalidCredentialsError(UnauthorizedError):
    """
    Email/password did not match an active admin.

    Deliberately does not say which part was wrong.
    """


class SessionExpiredError(UnauthorizedError):
    """Session has expired or was revoked; the admin must log in again."""


class ForbiddenError(AuthError):
    """Authenticated, but the role or tenant scope does not allow this. Maps to 403."""


class RateLimitedError(AuthError):
    """Too many attempts. Client should wait before retrying."""

    def __init__(self, retry_after_seconds: int):
        self.retry_after_seconds = retry_after_seconds
        super().__init__(f"Rate limited. Retry after {retry_after_seconds} seconds.")
