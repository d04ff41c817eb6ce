"""Magic link domain models."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from core.models.base import CamelModel
from utils.timezone import has_expired


class MagicLinkState(str, Enum):
    """Where a link sits in its one-shot lifecycle."""

    ISSUED = "issued"
    CONSUMED = "consumed"
    EXPIRED = "expired"


class AccessRequest(CamelModel):
    """Request payload for a magic link to a training video."""

    email: EmailStr
    user_name: str = Field(..., min_length=1, max_length=255)
    video_id: UUID | None = None

    @field_validator("user_name")
    @classmethod
    def strip_user_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Please enter your name")
        return value


class MagicLink(CamelModel):
    """A single-use, time-boxed access token for one video."""

    id: UUID
    token: str
    email: str
    user_name: str
    video_id: UUID
    expires_at: datetime
    is_used: bool  # Required - fail closed, no default
    created_at: datetime

    def state_at(self, now: datetime) -> MagicLinkState:
        """Lifecycle state at the given instant.

        Expiry wins over use so an expired link always reports EXPIRED.
        """
        if has_expired(self.expires_at, now):
            return MagicLinkState.EXPIRED
        if self.is_used:
            return MagicLinkState.CONSUMED
        return MagicLinkState.ISSUED
