"""Admin authentication and authorization modules."""

from auth.exceptions import (
    AuthError,
    UnauthorizedError,
    InvalidCredentialsError,
    SessionExpiredError,
    ForbiddenError,
    RateLimitedError,
)
from auth.types import (
    Role,
    AdminUser,
    AdminUserCreate,
    AdminUserUpdate,
    LoginRequest,
    Session,
    AuthenticatedAdmin,
)
from auth.config import AuthConfig, Environment
from auth.guards import (
    ensure_admin,
    ensure_super_admin,
    ensure_in_scope,
    require_admin,
    require_super_admin,
)
