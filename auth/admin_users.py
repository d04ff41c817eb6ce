"""Admin user management (SUPER_ADMIN only).

Passwords are hashed here before anything reaches AdminUserDatabase, and
never appear in audit entries.
"""

import logging
from uuid import UUID

from auth.config import AuthConfig
from auth.database import AdminUserDatabase
from auth.guards import ensure_super_admin
from auth.passwords import hash_password
from auth.types import AdminUser, AdminUserCreate, AdminUserUpdate, Role
from core.audit import AuditLogger
from core.exceptions import NotFoundError, ValidationFailedError
from core.services.company_tag_service import CompanyTagService

logger = logging.getLogger(__name__)


class AdminUserService:
    """Create, update, list and deactivate admin users."""

    def __init__(
        self,
        config: AuthConfig,
        auth_db: AdminUserDatabase,
        tags: CompanyTagService,
        audit: AuditLogger,
    ):
        self._config = config
        self._auth_db = auth_db
        self._tags = tags
        self._audit = audit

    def list_admins(self, principal: AdminUser) -> list[AdminUser]:
        ensure_super_admin(principal)
        return self._auth_db.list_active()

    def create(self, principal: AdminUser, data: AdminUserCreate) -> AdminUser:
        """Create an admin with a hashed password.

        Raises:
            ValidationFailedError: Duplicate email or unknown company tag.
        """
        ensure_super_admin(principal)
        if self._auth_db.get_by_email(data.email) is not None:
            raise ValidationFailedError("An admin with this email already exists")
        self._tags.ensure_assignable(data.company_tag)

        user = self._auth_db.create(
            email=data.email,
            password_hash=hash_password(data.password, self._config.password_hash_rounds),
            role=data.role.value,
            company_tag=data.company_tag,
        )

        self._audit.record_created(principal.id, "admin_user", user)
        logger.info(f"Admin {user.email} ({user.role.value}) created by {principal.email}")
        return user

    def update(self, principal: AdminUser, admin_user_id: UUID, data: AdminUserUpdate) -> AdminUser:
        """Apply a partial update.

        The resulting role/tag pair must be consistent: SUPER_ADMINs carry
        no tag, ADMINs must carry an active one.

        Raises:
            NotFoundError: Unknown admin.
            ValidationFailedError: Email taken, missing or unknown tag.
        """
        ensure_super_admin(principal)
        current = self._auth_db.get_by_id(admin_user_id)
        if current is None:
            raise NotFoundError("Admin user not found")

        # company_tag is the only column where an explicit null means something
        updates = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None or field == "company_tag"
        }

        email = updates.get("email")
        if email is not None and email.lower() != current.email:
            if self._auth_db.get_by_email(email) is not None:
                raise ValidationFailedError("An admin with this email already exists")

        if "role" in updates or "company_tag" in updates:
            role = updates.get("role") or current.role
            company_tag = updates["company_tag"] if "company_tag" in updates else current.company_tag
            if role == Role.SUPER_ADMIN:
                company_tag = None
            elif not company_tag:
                raise ValidationFailedError("company_tag is required for ADMIN users")
            updates["role"] = Role(role).value
            updates["company_tag"] = self._tags.ensure_assignable(company_tag)

        if updates.get("is_active") is False and admin_user_id == principal.id:
            raise ValidationFailedError("You cannot deactivate your own account")

        password = updates.pop("password", None)
        if password is not None:
            updates["password_hash"] = hash_password(password, self._config.password_hash_rounds)

        updated = self._auth_db.update(admin_user_id, updates)
        if updated is None:
            raise NotFoundError("Admin user not found")

        self._audit.record_updated(
            principal.id,
            "admin_user",
            current,
            updated,
            extra_changes={"password": {"old": None, "new": "[changed]"}} if password is not None else None,
        )
        return updated

    def deactivate(self, principal: AdminUser, admin_user_id: UUID) -> None:
        """Soft delete an admin.

        Raises:
            NotFoundError: Unknown admin.
            ValidationFailedError: Deactivating yourself.
        """
        ensure_super_admin(principal)
        if admin_user_id == principal.id:
            raise ValidationFailedError("You cannot deactivate your own account")

        current = self._auth_db.get_by_id(admin_user_id)
        if current is None or not self._auth_db.deactivate(admin_user_id):
            raise NotFoundError("Admin user not found")

        self._audit.record_deleted(principal.id, "admin_user", current)
