"""Training video domain models."""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from core.models.base import CamelModel


class VideoCreate(CamelModel):
    """Data required to publish a video."""

    title: str = Field(..., min_length=1, max_length=500)
    description: str = Field(..., min_length=1, max_length=10000)
    thumbnail_url: str = Field(..., min_length=1, max_length=2000)
    video_url: str = Field(..., min_length=1, max_length=2000)
    duration: str = Field(..., min_length=1, max_length=50, description="Free text, e.g. '12:34'")
    category: str = Field(..., min_length=1, max_length=255)
    company_tag: str | None = Field(None, max_length=255)
    is_active: bool = True


class VideoUpdate(CamelModel):
    """Fields that can be changed on a video. All optional."""

    title: str | None = Field(None, min_length=1, max_length=500)
    description: str | None = Field(None, min_length=1, max_length=10000)
    thumbnail_url: str | None = Field(None, min_length=1, max_length=2000)
    video_url: str | None = Field(None, min_length=1, max_length=2000)
    duration: str | None = Field(None, min_length=1, max_length=50)
    category: str | None = Field(None, min_length=1, max_length=255)
    company_tag: str | None = Field(None, max_length=255)
    is_active: bool | None = None


class Video(CamelModel):
    """Full video entity as stored."""

    id: UUID
    title: str
    description: str
    thumbnail_url: str
    video_url: str
    duration: str
    category: str
    company_tag: str | None
    is_active: bool
    created_at: datetime


class PublicVideo(CamelModel):
    """What an anonymous visitor may see before redeeming a link.

    The playable URL is deliberately absent.
    """

    id: UUID
    title: str
    description: str
    thumbnail_url: str
    duration: str
    category: str

    @classmethod
    def from_video(cls, video: Video) -> "PublicVideo":
        return cls(
            id=video.id,
            title=video.title,
            description=video.description,
            thumbnail_url=video.thumbnail_url,
            duration=video.duration,
            category=video.category,
        )


class VideoAnalytics(CamelModel):
    """Aggregate viewing figures for one video."""

    total_views: int = 0
    total_watch_time: int = 0
    average_completion: int = 0
    unique_viewers: int = 0
