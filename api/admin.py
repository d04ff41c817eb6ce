"""Admin routes: videos, completions, admin users and company tags.

Every route receives the principal through require_admin or
require_super_admin and hands it to the service, which applies the
tenant scope.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Request

from api.base import get_request_id, success_response
from auth.guards import require_admin, require_super_admin
from auth.types import AdminUser, AdminUserCreate, AdminUserUpdate
from core.models import CompanyTagCreate, CompanyTagUpdate, VideoCreate, VideoUpdate


def _ok(request: Request, data) -> dict:
    return success_response(data, request_id=get_request_id(request)).model_dump(mode="json")


def _dump(model) -> dict:
    return model.model_dump(mode="json", by_alias=True)


def create_admin_router(services: dict) -> APIRouter:
    router = APIRouter(tags=["admin"])

    video_svc = services["video"]
    access_svc = services["access"]
    admin_user_svc = services["admin_user"]
    company_tag_svc = services["company_tag"]

    # -------------------------------------------------------------------------
    # Videos (scoped)
    # -------------------------------------------------------------------------

    @router.get("/videos")
    async def list_videos(request: Request, principal: AdminUser = Depends(require_admin)):
        return _ok(request, [_dump(v) for v in video_svc.list_for(principal)])

    @router.post("/videos", status_code=201)
    async def create_video(request: Request, body: VideoCreate, principal: AdminUser = Depends(require_admin)):
        return _ok(request, _dump(video_svc.create(principal, body)))

    @router.get("/videos/{video_id}")
    async def get_video(request: Request, video_id: UUID, principal: AdminUser = Depends(require_admin)):
        return _ok(request, _dump(video_svc.get_for(principal, video_id)))

    @router.patch("/videos/{video_id}")
    async def update_video(
        request: Request,
        video_id: UUID,
        body: VideoUpdate,
        principal: AdminUser = Depends(require_admin),
    ):
        return _ok(request, _dump(video_svc.update(principal, video_id, body)))

    @router.delete("/videos/{video_id}")
    async def delete_video(request: Request, video_id: UUID, principal: AdminUser = Depends(require_admin)):
        video_svc.delete(principal, video_id)
        return _ok(request, {"id": str(video_id), "deleted": True})

    @router.get("/videos/{video_id}/analytics")
    async def video_analytics(request: Request, video_id: UUID, principal: AdminUser = Depends(require_admin)):
        analytics, recent = video_svc.analytics(principal, video_id)
        data = _dump(analytics)
        data["recentAccess"] = [_dump(log) for log in recent]
        return _ok(request, data)

    # -------------------------------------------------------------------------
    # Completions (scoped)
    # -------------------------------------------------------------------------

    @router.get("/completions")
    async def list_completions(request: Request, principal: AdminUser = Depends(require_admin)):
        return _ok(request, [_dump(c) for c in access_svc.list_completions(principal)])

    # -------------------------------------------------------------------------
    # Admin users (super admin)
    # -------------------------------------------------------------------------

    @router.get("/users")
    async def list_users(request: Request, principal: AdminUser = Depends(require_super_admin)):
        return _ok(request, [_dump(u) for u in admin_user_svc.list_admins(principal)])

    @router.post("/users", status_code=201)
    async def create_user(
        request: Request,
        body: AdminUserCreate,
        principal: AdminUser = Depends(require_super_admin),
    ):
        return _ok(request, _dump(admin_user_svc.create(principal, body)))

    @router.patch("/users/{admin_user_id}")
    async def update_user(
        request: Request,
        admin_user_id: UUID,
        body: AdminUserUpdate,
        principal: AdminUser = Depends(require_super_admin),
    ):
        return _ok(request, _dump(admin_user_svc.update(principal, admin_user_id, body)))

    @router.delete("/users/{admin_user_id}")
    async def delete_user(
        request: Request,
        admin_user_id: UUID,
        principal: AdminUser = Depends(require_super_admin),
    ):
        admin_user_svc.deactivate(principal, admin_user_id)
        return _ok(request, {"id": str(admin_user_id), "deactivated": True})

    # -------------------------------------------------------------------------
    # Company tags (super admin)
    # -------------------------------------------------------------------------

    @router.get("/company-tags")
    async def list_company_tags(request: Request, principal: AdminUser = Depends(require_super_admin)):
        return _ok(request, [_dump(t) for t in company_tag_svc.list_active(principal)])

    @router.post("/company-tags", status_code=201)
    async def create_company_tag(
        request: Request,
        body: CompanyTagCreate,
        principal: AdminUser = Depends(require_super_admin),
    ):
        return _ok(request, _dump(company_tag_svc.create(principal, body)))

    @router.patch("/company-tags/{tag_id}")
    async def update_company_tag(
        request: Request,
        tag_id: UUID,
        body: CompanyTagUpdate,
        principal: AdminUser = Depends(require_super_admin),
    ):
        return _ok(request, _dump(company_tag_svc.update(principal, tag_id, body)))

    @router.delete("/company-tags/{tag_id}")
    async def delete_company_tag(
        request: Request,
        tag_id: UUID,
        principal: AdminUser = Depends(require_super_admin),
    ):
        company_tag_svc.deactivate(principal, tag_id)
        return _ok(request, {"id": str(tag_id), "deactivated": True})

    return router
