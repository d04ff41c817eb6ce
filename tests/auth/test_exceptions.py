"""Tests for typed exceptions - hierarchy drives HTTP mapping."""

import pytest

from auth.exceptions import (
    AuthError,
    ForbiddenError,
    InvalidCredentialsError,
    RateLimitedError,
    SessionExpiredError,
    UnauthorizedError,
)
from core.exceptions import (
    DependencyFailureError,
    DispatchError,
    DomainError,
    LinkAlreadyUsedError,
    LinkExpiredError,
    LinkGoneError,
    NotFoundError,
    ValidationFailedError,
)


class TestAuthExceptionInheritance:
    """All auth exceptions should inherit from AuthError."""

    @pytest.mark.parametrize("exc", [UnauthorizedError, ForbiddenError, RateLimitedError])
    def test_inherits_auth_error(self, exc):
        assert issubclass(exc, AuthError)

    def test_credentials_and_session_are_unauthorized(self):
        assert issubclass(InvalidCredentialsError, UnauthorizedError)
        assert issubclass(SessionExpiredError, UnauthorizedError)

    def test_forbidden_is_not_unauthorized(self):
        assert not issubclass(ForbiddenError, UnauthorizedError)


class TestDomainExceptionInheritance:
    """Expected outcomes are DomainErrors; dependency failures are not."""

    @pytest.mark.parametrize("exc", [ValidationFailedError, NotFoundError, LinkExpiredError, LinkAlreadyUsedError])
    def test_expected_outcomes_are_domain_errors(self, exc):
        assert issubclass(exc, DomainError)

    def test_terminal_link_states_share_base(self):
        assert issubclass(LinkExpiredError, LinkGoneError)
        assert issubclass(LinkAlreadyUsedError, LinkGoneError)

    def test_dispatch_error_is_dependency_failure(self):
        assert issubclass(DispatchError, DependencyFailureError)
        assert not issubclass(DispatchError, DomainError)


class TestRateLimitedError:
    """RateLimitedError should carry retry timing info."""

    def test_stores_retry_seconds(self):
        err = RateLimitedError(30)
        assert err.retry_after_seconds == 30

    def test_message_includes_seconds(self):
        assert "30" in str(RateLimitedError(30))
