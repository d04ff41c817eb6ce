"""
Magic-link access service.

Owns the magic_links and access_logs tables:
- issue_magic_link: rate limit, resolve video, mint token, persist, dispatch
- redeem: one-shot consume of a token into an access log
- update_progress: monotonic watch progress for an access log
- list_completions: scoped admin report

A link moves ISSUED -> CONSUMED exactly once. Consumption and the access
log insert happen in one SQL statement, so two concurrent redemptions of
the same token cannot both succeed.
"""

import logging
import secrets
from datetime import timedelta
from uuid import UUID

from auth.exceptions import RateLimitedError
from auth.guards import ensure_admin
from auth.rate_limiter import RateLimiter
from auth.security_logger import SecurityEvent, SecurityLogger
from auth.types import AdminUser
from clients.postgres_client import PostgresClient
from core.exceptions import DispatchError, LinkAlreadyUsedError, LinkExpiredError, NotFoundError
from core.models import (
    AccessLog,
    AccessLogDetail,
    AccessRequest,
    Completion,
    MagicLink,
    MagicLinkState,
    ProgressUpdate,
    Redemption,
)
from core.notifications import MagicLinkDispatcher
from core.scope import scope_filter
from core.services.video_service import VideoService
from utils.timezone import expires_after, now_utc

logger = logging.getLogger(__name__)

MAGIC_LINK_TTL = timedelta(hours=24)


class AccessService:
    """Service for magic-link issuance, redemption and viewing progress."""

    def __init__(
        self,
        postgres: PostgresClient,
        videos: VideoService,
        dispatcher: MagicLinkDispatcher,
        rate_limiter: RateLimiter,
        security_logger: SecurityLogger,
    ):
        self.postgres = postgres
        self.videos = videos
        self.dispatcher = dispatcher
        self.rate_limiter = rate_limiter
        self.security_logger = security_logger

    # -------------------------------------------------------------------------
    # Issuance
    # -------------------------------------------------------------------------

    def issue_magic_link(
        self,
        request: AccessRequest,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> MagicLink:
        """
        Mint a magic link for a video and email it to the requester.

        If the email cannot be sent, the unused link is deleted again and
        DispatchError propagates.

        Raises:
            RateLimitedError: Too many requests for this email
            NotFoundError: No matching active video
            DispatchError: Email provider failure
        """
        email = request.email

        try:
            self.rate_limiter.check_rate_limit(email)
        except RateLimitedError:
            self.security_logger.log(
                SecurityEvent.RATE_LIMITED,
                email=email,
                ip_address=ip_address,
                user_agent=user_agent,
            )
            raise

        video = self.videos.resolve_for_access(request.video_id)

        row = self.postgres.execute_returning(
            """
            INSERT INTO magic_links (token, email, user_name, video_id, expires_at, is_used)
            VALUES (%s, %s, %s, %s, %s, false)
            RETURNING *
            """,
            (
                secrets.token_hex(32),
                email,
                request.user_name,
                video.id,
                expires_after(MAGIC_LINK_TTL),
            )
        )[0]
        link = MagicLink.model_validate(row)

        self.security_logger.log(
            SecurityEvent.ACCESS_REQUESTED,
            email=email,
            ip_address=ip_address,
            user_agent=user_agent,
            details={"video_id": str(video.id), "magic_link_id": str(link.id)},
        )

        try:
            self.dispatcher.dispatch(email, link.token, video.title)
        except DispatchError:
            self.postgres.execute(
                "DELETE FROM magic_links WHERE id = %s AND is_used = false",
                (link.id,)
            )
            self.security_logger.log(
                SecurityEvent.ACCESS_LINK_SEND_FAILED,
                email=email,
                ip_address=ip_address,
                user_agent=user_agent,
                details={"video_id": str(video.id)},
            )
            raise

        self.security_logger.log(
            SecurityEvent.ACCESS_LINK_SENT,
            email=email,
            ip_address=ip_address,
            user_agent=user_agent,
            details={"magic_link_id": str(link.id)},
        )
        logger.info(f"Magic link {link.id} issued for video {video.id}")
        return link

    # -------------------------------------------------------------------------
    # Redemption
    # -------------------------------------------------------------------------

    def get_link_by_token(self, token: str) -> MagicLink | None:
        row = self.postgres.execute_single(
            "SELECT * FROM magic_links WHERE token = %s",
            (token,)
        )
        return MagicLink.model_validate(row) if row else None

    def _reject(self, link: MagicLink, state: MagicLinkState, ip_address: str | None, user_agent: str | None):
        """Raise the terminal-state error for a link that cannot be consumed."""
        if state == MagicLinkState.EXPIRED:
            event, error = SecurityEvent.ACCESS_EXPIRED, LinkExpiredError("Access link has expired")
        else:
            event, error = SecurityEvent.ACCESS_ALREADY_USED, LinkAlreadyUsedError("Access link has already been used")
        self.security_logger.log(
            event,
            email=link.email,
            ip_address=ip_address,
            user_agent=user_agent,
            details={"magic_link_id": str(link.id)},
        )
        raise error

    def redeem(
        self,
        token: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> Redemption:
        """
        Consume a magic link and open a viewing session.

        Raises:
            NotFoundError: Unknown token, or its video no longer exists
            LinkExpiredError: now >= expires_at
            LinkAlreadyUsedError: The link was consumed earlier
        """
        link = self.get_link_by_token(token)
        if link is None:
            self.security_logger.log(
                SecurityEvent.ACCESS_NOT_FOUND,
                ip_address=ip_address,
                user_agent=user_agent,
            )
            raise NotFoundError("Invalid access link")

        now = now_utc()
        state = link.state_at(now)
        if state != MagicLinkState.ISSUED:
            self._reject(link, state, ip_address, user_agent)

        video = self.videos.get_by_id(link.video_id)
        if video is None:
            raise NotFoundError("Video not found")

        # Compare-and-set on is_used; the insert only runs if this request won
        rows = self.postgres.execute_returning(
            """
            WITH consumed AS (
                UPDATE magic_links
                SET is_used = true, used_at = %s
                WHERE id = %s AND is_used = false AND expires_at > %s
                RETURNING id, email, user_name, video_id
            )
            INSERT INTO access_logs (
                magic_link_id, email, user_name, video_id, accessed_at,
                watch_duration, completion_percentage, company_tag,
                ip_address, user_agent
            )
            SELECT id, email, user_name, video_id, %s, 0, 0, %s, %s, %s
            FROM consumed
            RETURNING *
            """,
            (now, link.id, now, now, video.company_tag, ip_address, user_agent)
        )

        if not rows:
            # Lost a race with another redemption, or expired in between
            current = self.get_link_by_token(token)
            if current is None:
                raise NotFoundError("Invalid access link")
            state = current.state_at(now_utc())
            if state == MagicLinkState.ISSUED:
                state = MagicLinkState.CONSUMED
            self._reject(current, state, ip_address, user_agent)

        access_log = AccessLog.model_validate(rows[0])
        self.security_logger.log(
            SecurityEvent.ACCESS_REDEEMED,
            email=link.email,
            ip_address=ip_address,
            user_agent=user_agent,
            details={"magic_link_id": str(link.id), "access_log_id": str(access_log.id)},
        )
        return Redemption(video=video, access_log=access_log, token=token)

    # -------------------------------------------------------------------------
    # Progress
    # -------------------------------------------------------------------------

    def update_progress(self, access_log_id: UUID, progress: ProgressUpdate) -> AccessLog:
        """
        Record player progress. Stored values never decrease.

        Raises:
            NotFoundError: Unknown access log
        """
        row = self.postgres.execute_returning(
            """
            UPDATE access_logs
            SET watch_duration = GREATEST(watch_duration, %s),
                completion_percentage = GREATEST(completion_percentage, %s)
            WHERE id = %s
            RETURNING *
            """,
            (progress.watch_duration, progress.completion_percentage, access_log_id)
        )
        if not row:
            raise NotFoundError("Access log not found")
        return AccessLog.model_validate(row[0])

    def get_access_log_detail(self, access_log_id: UUID) -> AccessLogDetail:
        """Access log with video title, duration and category."""
        row = self.postgres.execute_single(
            """
            SELECT a.*,
                   v.title AS video_title,
                   v.duration AS video_duration,
                   v.category AS video_category
            FROM access_logs a
            LEFT JOIN videos v ON v.id = a.video_id
            WHERE a.id = %s
            """,
            (access_log_id,)
        )
        if row is None:
            raise NotFoundError("Access log not found")
        return AccessLogDetail.model_validate(row)

    # -------------------------------------------------------------------------
    # Admin report and maintenance
    # -------------------------------------------------------------------------

    def list_completions(self, principal: AdminUser) -> list[Completion]:
        """Access logs visible to the principal with video titles, newest first."""
        ensure_admin(principal)
        condition, params = scope_filter(principal.scope, "a.company_tag")
        rows = self.postgres.execute(
            f"""
            SELECT a.*, v.title AS video_title
            FROM access_logs a
            LEFT JOIN videos v ON v.id = a.video_id
            WHERE {condition}
            ORDER BY a.accessed_at DESC
            """,
            params
        )
        return [Completion.model_validate(row) for row in rows]

    def cleanup_expired_links(self) -> int:
        """Delete expired links that were never redeemed. Returns the count."""
        rows = self.postgres.execute_returning(
            """
            DELETE FROM magic_links
            WHERE is_used = false AND expires_at <= %s
            RETURNING id
            """,
            (now_utc(),)
        )
        if rows:
            logger.info(f"Removed {len(rows)} expired magic links")
        return len(rows)
