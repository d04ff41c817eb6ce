"""Access log (viewing session) domain models."""

import math
from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from core.models.base import CamelModel
from core.models.video import Video


class AccessLog(CamelModel):
    """One redeemed magic link's viewing session."""

    id: UUID
    magic_link_id: UUID
    email: str
    user_name: str
    video_id: UUID
    accessed_at: datetime
    watch_duration: int = Field(0, description="Seconds watched")
    completion_percentage: int = Field(0, ge=0, le=100)
    company_tag: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None


class AccessLogDetail(AccessLog):
    """Access log with the video fields shown on the completion page."""

    video_title: str | None = None
    video_duration: str | None = None
    video_category: str | None = None


class Completion(AccessLog):
    """Row of the admin completions report."""

    video_title: str | None = None


# Upper bound of the INTEGER columns in access_logs
MAX_WATCH_SECONDS = 2_147_483_647


class ProgressUpdate(CamelModel):
    """Periodic progress report from the player."""

    watch_duration: int = Field(..., ge=0, le=MAX_WATCH_SECONDS)
    completion_percentage: int = Field(..., ge=0, le=100)

    @field_validator("watch_duration", "completion_percentage", mode="before")
    @classmethod
    def truncate_fractions(cls, value):
        """Players report fractional seconds and percentages; store whole numbers."""
        if isinstance(value, float):
            if not math.isfinite(value):
                raise ValueError("Progress values must be finite numbers")
            return int(value)
        return value


class Redemption(CamelModel):
    """Result of redeeming a magic link."""

    video: Video
    access_log: AccessLog
    token: str
