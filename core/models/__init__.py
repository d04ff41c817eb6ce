"""Core domain models."""

from core.models.base import CamelModel
from core.models.video import Video, VideoCreate, VideoUpdate, PublicVideo, VideoAnalytics
from core.models.magic_link import MagicLink, MagicLinkState, AccessRequest
from core.models.access_log import (
    AccessLog,
    AccessLogDetail,
    Completion,
    ProgressUpdate,
    Redemption,
)
from core.models.company_tag import CompanyTag, CompanyTagCreate, CompanyTagUpdate

__all__ = [
    "CamelModel",
    # Video
    "Video", "VideoCreate", "VideoUpdate", "PublicVideo", "VideoAnalytics",
    # MagicLink
    "MagicLink", "MagicLinkState", "AccessRequest",
    # AccessLog
    "AccessLog", "AccessLogDetail", "Completion", "ProgressUpdate", "Redemption",
    # CompanyTag
    "CompanyTag", "CompanyTagCreate", "CompanyTagUpdate",
]
