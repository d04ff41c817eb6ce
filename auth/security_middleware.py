"""Security middleware for FastAPI - admin session validation."""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from auth.service import AdminAuthService
from auth.exceptions import SessionExpiredError, UnauthorizedError
from api.base import error_response, get_request_id, ErrorCodes

SESSION_COOKIE = "session_token"


class AuthMiddleware(BaseHTTPMiddleware):
    """Middleware that resolves the admin principal for protected routes.

    For paths under /api/admin:
    1. Extracts session token from the 'session_token' cookie
    2. Resolves it to an active AdminUser via AdminAuthService
    3. Sets request.state.principal and request.state.session_token

    Every other path, and the login route, bypasses authentication.
    """

    PROTECTED_PREFIX = "/api/admin"
    PUBLIC_PATHS = [
        "/api/admin/login",
    ]

    def __init__(self, app, auth_service: AdminAuthService):
        super().__init__(app)
        self._auth_service = auth_service

    def _is_protected(self, path: str) -> bool:
        if path in self.PUBLIC_PATHS:
            return False
        return path == self.PROTECTED_PREFIX or path.startswith(self.PROTECTED_PREFIX + "/")

    def _unauthorized(self, request: Request, code: str, message: str) -> JSONResponse:
        return JSONResponse(
            status_code=401,
            content=error_response(
                code,
                message,
                request_id=get_request_id(request),
            ).model_dump(mode="json"),
        )

    async def dispatch(self, request: Request, call_next):
        """Process request through middleware."""
        if not self._is_protected(request.url.path):
            return await call_next(request)

        session_token = request.cookies.get(SESSION_COOKIE)
        if not session_token:
            return self._unauthorized(request, ErrorCodes.NOT_AUTHENTICATED, "Authentication required")

        try:
            principal = self._auth_service.resolve_principal(session_token)
        except SessionExpiredError:
            return self._unauthorized(request, ErrorCodes.SESSION_EXPIRED, "Session has expired")
        except UnauthorizedError as e:
            return self._unauthorized(request, ErrorCodes.NOT_AUTHENTICATED, str(e))

        request.state.principal = principal
        request.state.session_token = session_token
        return await call_next(request)
