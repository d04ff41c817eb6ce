"""Company tag (tenant label) domain models."""

from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from core.models.base import CamelModel


def _strip_name(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError("Tag name must not be blank")
    return value


class CompanyTagCreate(CamelModel):
    """Data required to create a company tag."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def strip_name(cls, value):
        return _strip_name(value)


class CompanyTagUpdate(CamelModel):
    """Fields that can be changed on a company tag. All optional."""

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)
    is_active: bool | None = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, value):
        return _strip_name(value)


class CompanyTag(CamelModel):
    """Full company tag entity as stored."""

    id: UUID
    name: str
    description: str | None
    is_active: bool
    created_at: datetime
