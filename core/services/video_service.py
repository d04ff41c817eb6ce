"""
Video service.

Public lookups (the landing page and magic-link issuance) are unscoped.
Admin operations take the acting principal and apply its Scope: a
SUPER_ADMIN sees and edits every video, an ADMIN only their tenant's.
Videos are hard-deleted; is_active = false is how a video stops being
offered.
"""

import logging
from uuid import UUID

from auth.guards import ensure_admin, ensure_in_scope
from auth.types import AdminUser
from clients.postgres_client import PostgresClient
from core.audit import AuditLogger
from core.exceptions import NotFoundError, ValidationFailedError
from core.models import AccessLog, PublicVideo, Video, VideoAnalytics, VideoCreate, VideoUpdate
from core.scope import scope_filter
from core.services.company_tag_service import CompanyTagService

logger = logging.getLogger(__name__)

RECENT_ACCESS_LIMIT = 10


class VideoService:
    """Service for video operations."""

    def __init__(self, postgres: PostgresClient, audit: AuditLogger, tags: CompanyTagService):
        self.postgres = postgres
        self.audit = audit
        self.tags = tags

    # -------------------------------------------------------------------------
    # Public lookups
    # -------------------------------------------------------------------------

    def get_by_id(self, video_id: UUID) -> Video | None:
        row = self.postgres.execute_single(
            "SELECT * FROM videos WHERE id = %s",
            (video_id,)
        )
        return Video.model_validate(row) if row else None

    def get_latest_active(self) -> Video | None:
        """Most recently created active video."""
        row = self.postgres.execute_single(
            """
            SELECT * FROM videos
            WHERE is_active = true
            ORDER BY created_at DESC
            LIMIT 1
            """
        )
        return Video.model_validate(row) if row else None

    def get_public(self, video_id: UUID) -> PublicVideo:
        """
        Anonymous projection of an active video.

        Raises:
            NotFoundError: If missing or inactive
        """
        video = self.get_by_id(video_id)
        if video is None or not video.is_active:
            raise NotFoundError("Video not found")
        return PublicVideo.from_video(video)

    def resolve_for_access(self, video_id: UUID | None) -> Video:
        """
        Pick the video a magic link will open.

        An explicit id must name an active video; without one, the most
        recently created active video is used.

        Raises:
            NotFoundError: If no such active video exists
        """
        video = self.get_by_id(video_id) if video_id else self.get_latest_active()
        if video is None or not video.is_active:
            raise NotFoundError("Training video not found or not available")
        return video

    def insert(self, data: VideoCreate) -> Video:
        """Insert a video as given. No scope checks; see create()."""
        row = self.postgres.execute_returning(
            """
            INSERT INTO videos (
                title, description, thumbnail_url, video_url,
                duration, category, company_tag, is_active
            ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING *
            """,
            (
                data.title, data.description, data.thumbnail_url, data.video_url,
                data.duration, data.category, data.company_tag, data.is_active
            )
        )[0]
        return Video.model_validate(row)

    # -------------------------------------------------------------------------
    # Admin operations (scoped)
    # -------------------------------------------------------------------------

    def list_for(self, principal: AdminUser) -> list[Video]:
        """Videos visible to the principal, newest first."""
        ensure_admin(principal)
        condition, params = scope_filter(principal.scope, "company_tag")
        rows = self.postgres.execute(
            f"""
            SELECT * FROM videos
            WHERE {condition}
            ORDER BY created_at DESC
            """,
            params
        )
        return [Video.model_validate(row) for row in rows]

    def get_for(self, principal: AdminUser, video_id: UUID) -> Video:
        """
        One video, if the principal may see it.

        Raises:
            NotFoundError: If the video does not exist
            ForbiddenError: If it belongs to another tenant
        """
        ensure_admin(principal)
        video = self.get_by_id(video_id)
        if video is None:
            raise NotFoundError("Video not found")
        ensure_in_scope(principal, video.company_tag)
        return video

    def create(self, principal: AdminUser, data: VideoCreate) -> Video:
        """
        Publish a video.

        A non-super admin always creates into their own tenant, whatever
        company_tag the payload names.
        """
        ensure_admin(principal)
        if not principal.is_super_admin and principal.company_tag:
            data = data.model_copy(update={"company_tag": principal.company_tag})
        self.tags.ensure_assignable(data.company_tag)

        video = self.insert(data)

        self.audit.record_created(principal.id, "video", video)
        logger.info(f"Video {video.id} created by {principal.email}")
        return video

    def update(self, principal: AdminUser, video_id: UUID, data: VideoUpdate) -> Video:
        """
        Update video fields.

        Raises:
            NotFoundError: If the video does not exist
            ForbiddenError: If a non-super admin targets another tenant's video
        """
        current = self.get_for(principal, video_id)

        updates = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None or field == "company_tag"
        }
        if not principal.is_super_admin:
            # Tenant admins cannot move a video out of their tenant
            updates.pop("company_tag", None)
        elif "company_tag" in updates:
            self.tags.ensure_assignable(updates["company_tag"])

        if not updates:
            return current

        set_parts = [f"{field} = %s" for field in updates]
        params = list(updates.values()) + [video_id]

        row = self.postgres.execute_returning(
            f"""
            UPDATE videos
            SET {', '.join(set_parts)}
            WHERE id = %s
            RETURNING *
            """,
            tuple(params)
        )[0]
        updated = Video.model_validate(row)

        self.audit.record_updated(principal.id, "video", current, updated)
        return updated

    def delete(self, principal: AdminUser, video_id: UUID) -> None:
        """
        Hard delete a video that has never been requested.

        Raises:
            NotFoundError: If the video does not exist
            ForbiddenError: If a non-super admin targets another tenant's video
            ValidationFailedError: If magic links reference it
        """
        current = self.get_for(principal, video_id)

        link_count = self.postgres.execute_scalar(
            "SELECT count(*) FROM magic_links WHERE video_id = %s",
            (video_id,)
        )
        if link_count:
            raise ValidationFailedError(
                "Video has viewing history and cannot be deleted; deactivate it instead"
            )

        self.postgres.execute_returning(
            "DELETE FROM videos WHERE id = %s RETURNING id",
            (video_id,)
        )
        self.audit.record_deleted(principal.id, "video", current)
        logger.info(f"Video {video_id} deleted by {principal.email}")

    def analytics(self, principal: AdminUser, video_id: UUID) -> tuple[VideoAnalytics, list[AccessLog]]:
        """
        Viewing totals and the most recent access logs for a video.

        Raises:
            NotFoundError: If the video does not exist
            ForbiddenError: If it belongs to another tenant
        """
        self.get_for(principal, video_id)

        row = self.postgres.execute_single(
            """
            SELECT
                count(*) AS total_views,
                COALESCE(sum(watch_duration), 0) AS total_watch_time,
                COALESCE(round(avg(completion_percentage)), 0) AS average_completion,
                count(DISTINCT email) AS unique_viewers
            FROM access_logs
            WHERE video_id = %s
            """,
            (video_id,)
        )
        analytics = VideoAnalytics(
            total_views=int(row["total_views"]),
            total_watch_time=int(row["total_watch_time"]),
            average_completion=int(row["average_completion"]),
            unique_viewers=int(row["unique_viewers"]),
        )

        recent_rows = self.postgres.execute(
            """
            SELECT * FROM access_logs
            WHERE video_id = %s
            ORDER BY accessed_at DESC
            LIMIT %s
            """,
            (video_id, RECENT_ACCESS_LIMIT)
        )
        return analytics, [AccessLog.model_validate(r) for r in recent_rows]
