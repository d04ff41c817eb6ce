"""Public magic-link routes: request, redeem, progress, completion view."""

from uuid import UUID

from fastapi import APIRouter, Request

from api.base import get_client_ip, get_request_id, success_response
from core.models import AccessRequest, ProgressUpdate


def create_access_router(services: dict) -> APIRouter:
    router = APIRouter(tags=["access"])

    access_svc = services["access"]
    video_svc = services["video"]

    @router.post("/request-access")
    async def request_access(request: Request, body: AccessRequest):
        """Issue a magic link for a video and email it to the requester."""
        access_svc.issue_magic_link(
            body,
            ip_address=get_client_ip(request),
            user_agent=request.headers.get("User-Agent"),
        )
        return success_response(
            {"message": "Access link sent to your email"},
            request_id=get_request_id(request),
        ).model_dump(mode="json")

    @router.get("/access/{token}")
    async def redeem_access(request: Request, token: str):
        """Consume a magic link and open a viewing session."""
        redemption = access_svc.redeem(
            token,
            ip_address=get_client_ip(request),
            user_agent=request.headers.get("User-Agent"),
        )
        return success_response(
            redemption.model_dump(mode="json", by_alias=True),
            request_id=get_request_id(request),
        ).model_dump(mode="json")

    @router.patch("/access/{access_log_id}/progress")
    async def update_progress(request: Request, access_log_id: UUID, body: ProgressUpdate):
        access_log = access_svc.update_progress(access_log_id, body)
        return success_response(
            access_log.model_dump(mode="json", by_alias=True),
            request_id=get_request_id(request),
        ).model_dump(mode="json")

    @router.get("/access-logs/{access_log_id}")
    async def get_access_log(request: Request, access_log_id: UUID):
        detail = access_svc.get_access_log_detail(access_log_id)
        return success_response(
            detail.model_dump(mode="json", by_alias=True),
            request_id=get_request_id(request),
        ).model_dump(mode="json")

    @router.get("/videos/{video_id}")
    async def get_public_video(request: Request, video_id: UUID):
        video = video_svc.get_public(video_id)
        return success_response(
            video.model_dump(mode="json", by_alias=True),
            request_id=get_request_id(request),
        ).model_dump(mode="json")

    return router
