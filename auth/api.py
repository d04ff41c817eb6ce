"""HTTP routes for admin authentication."""

from fastapi import APIRouter, Depends, Request, Response

from api.base import get_client_ip, get_request_id, success_response
from auth.config import AuthConfig
from auth.guards import require_admin
from auth.security_middleware import SESSION_COOKIE
from auth.service import AdminAuthService
from auth.types import AdminUser, LoginRequest


def create_admin_auth_router(auth_service: AdminAuthService, config: AuthConfig) -> APIRouter:
    """Create admin auth router with injected service."""
    router = APIRouter(tags=["admin-auth"])

    @router.post("/login")
    async def login(request: Request, response: Response, body: LoginRequest):
        """Verify email and password, then set the session cookie."""
        result = auth_service.login(
            email=body.email,
            password=body.password,
            ip_address=get_client_ip(request),
            user_agent=request.headers.get("User-Agent"),
        )

        response.set_cookie(
            key=SESSION_COOKIE,
            value=result.session.token,
            httponly=True,
            secure=config.is_production,
            samesite="lax",
            max_age=config.session_expiry_hours * 3600,
        )

        return success_response(
            {"user": result.user.model_dump(mode="json", by_alias=True)},
            request_id=get_request_id(request),
        ).model_dump(mode="json")

    @router.post("/logout")
    async def logout(request: Request, response: Response, principal: AdminUser = Depends(require_admin)):
        """Logout - revoke session and clear cookie."""
        auth_service.logout(
            session_token=request.state.session_token,
            principal=principal,
            ip_address=get_client_ip(request),
        )
        response.delete_cookie(key=SESSION_COOKIE)
        return success_response(
            {"message": "Logged out successfully"},
            request_id=get_request_id(request),
        ).model_dump(mode="json")

    @router.get("/me")
    async def get_current_admin(request: Request, principal: AdminUser = Depends(require_admin)):
        """Sanitized current principal."""
        return success_response(
            {"user": principal.model_dump(mode="json", by_alias=True)},
            request_id=get_request_id(request),
        ).model_dump(mode="json")

    return router
