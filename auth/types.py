"""Pydantic models for the admin auth domain."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, model_validator

from core.models.base import CamelModel
from core.scope import GlobalScope, Scope, TenantScope


class Role(str, Enum):
    """Admin roles."""

    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"


class AdminUser(CamelModel):
    """An administrator, without credentials.

    Also serves as the authenticated principal passed into scoped services.
    """

    id: UUID
    email: str
    role: Role
    company_tag: str | None = None
    is_active: bool = True
    created_at: datetime

    @property
    def is_super_admin(self) -> bool:
        return self.role == Role.SUPER_ADMIN

    @property
    def scope(self) -> Scope:
        """Which tenants' rows this admin may see and change."""
        if self.is_super_admin:
            return GlobalScope()
        return TenantScope(self.company_tag)


class AdminUserCreate(CamelModel):
    """Data required to create an admin user."""

    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)
    role: Role
    company_tag: str | None = Field(None, max_length=255)

    @model_validator(mode="after")
    def tag_matches_role(self) -> "AdminUserCreate":
        """ADMINs belong to exactly one tenant; SUPER_ADMINs to none."""
        if self.role == Role.SUPER_ADMIN:
            self.company_tag = None
        elif not self.company_tag:
            raise ValueError("company_tag is required for ADMIN users")
        return self


class AdminUserUpdate(CamelModel):
    """Fields that can be changed on an admin user. All optional."""

    email: EmailStr | None = None
    password: str | None = Field(None, min_length=6, max_length=72)
    role: Role | None = None
    company_tag: str | None = Field(None, max_length=255)
    is_active: bool | None = None


class LoginRequest(BaseModel):
    """Request payload for admin login."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class Session(BaseModel):
    """An active admin session."""

    token: str = Field(..., description="Session token (opaque string)")
    admin_user_id: UUID
    created_at: datetime
    expires_at: datetime
    last_activity_at: datetime


class AuthenticatedAdmin(BaseModel):
    """Admin and session returned after a successful login."""

    user: AdminUser
    session: Session
