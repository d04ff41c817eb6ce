"""Authorization guards.

The plain functions take the principal explicitly so services can enforce
role rules without a web request. The require_* functions are FastAPI
dependencies that read the principal AuthMiddleware put on request.state.
"""

from fastapi import Request

from auth.exceptions import ForbiddenError, UnauthorizedError
from auth.types import AdminUser


def ensure_admin(principal: AdminUser | None) -> AdminUser:
    """Raise UnauthorizedError unless an active admin is present."""
    if principal is None or not principal.is_active:
        raise UnauthorizedError("Admin authentication required")
    return principal


def ensure_super_admin(principal: AdminUser | None) -> AdminUser:
    """Raise UnauthorizedError without a principal, ForbiddenError without the role."""
    principal = ensure_admin(principal)
    if not principal.is_super_admin:
        raise ForbiddenError("Super admin access required")
    return principal


def ensure_in_scope(principal: AdminUser, company_tag: str | None) -> None:
    """Raise ForbiddenError if the row's tenant is outside the principal's scope."""
    if not principal.scope.allows(company_tag):
        raise ForbiddenError("Access denied")


def require_admin(request: Request) -> AdminUser:
    """Dependency: the authenticated admin for this request."""
    return ensure_admin(getattr(request.state, "principal", None))


def require_super_admin(request: Request) -> AdminUser:
    """Dependency: the authenticated admin, who must be a SUPER_ADMIN."""
    return ensure_super_admin(getattr(request.state, "principal", None))
