"""Typed exceptions for domain failures.

Each maps to one HTTP status in api/errors.py. Expected outcomes
(validation, not found, expired, already used) are returned to the client
as-is; DispatchError and anything untyped are logged and masked.
"""


class DomainError(Exception):
    """Base class for expected, client-facing domain failures."""


class ValidationFailedError(DomainError):
    """Input is well-formed but violates a domain rule."""


class NotFoundError(DomainError):
    """Unknown video, token, access log, admin user or company tag."""


class LinkGoneError(DomainError):
    """A magic link reached a terminal state and can never be redeemed."""


class LinkExpiredError(LinkGoneError):
    """The link's expiry instant has passed."""


class LinkAlreadyUsedError(LinkGoneError):
    """The link was consumed by an earlier redemption."""


class DependencyFailureError(Exception):
    """An external collaborator (email provider, store) failed."""


class DispatchError(DependencyFailureError):
    """The magic-link email could not be sent."""
