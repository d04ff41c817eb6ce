"""
Company tag service.

Tags are the tenant labels shared by videos, admin users and access logs.
Management is SUPER_ADMIN-only; deletion is soft (is_active = false) so
existing rows keep a valid reference.
"""

import logging
from uuid import UUID

from auth.guards import ensure_super_admin
from auth.types import AdminUser
from clients.postgres_client import PostgresClient
from core.audit import AuditLogger
from core.exceptions import NotFoundError, ValidationFailedError
from core.models import CompanyTag, CompanyTagCreate, CompanyTagUpdate

logger = logging.getLogger(__name__)


class CompanyTagService:
    """Service for company tag operations."""

    def __init__(self, postgres: PostgresClient, audit: AuditLogger):
        self.postgres = postgres
        self.audit = audit

    def get_by_id(self, tag_id: UUID) -> CompanyTag | None:
        row = self.postgres.execute_single(
            "SELECT * FROM company_tags WHERE id = %s",
            (tag_id,)
        )
        return CompanyTag.model_validate(row) if row else None

    def get_by_name(self, name: str) -> CompanyTag | None:
        row = self.postgres.execute_single(
            "SELECT * FROM company_tags WHERE name = %s",
            (name,)
        )
        return CompanyTag.model_validate(row) if row else None

    def ensure_assignable(self, name: str | None) -> str | None:
        """
        Check that a tag may be written onto a video or admin user.

        None (untagged) is always assignable.

        Raises:
            ValidationFailedError: If the tag is unknown or inactive
        """
        if name is None:
            return None
        tag = self.get_by_name(name)
        if tag is None or not tag.is_active:
            raise ValidationFailedError(f"Unknown company tag '{name}'")
        return tag.name

    def list_active(self, principal: AdminUser) -> list[CompanyTag]:
        """Active tags, newest first."""
        ensure_super_admin(principal)
        rows = self.postgres.execute(
            """
            SELECT * FROM company_tags
            WHERE is_active = true
            ORDER BY created_at DESC
            """
        )
        return [CompanyTag.model_validate(row) for row in rows]

    def create(self, principal: AdminUser, data: CompanyTagCreate) -> CompanyTag:
        """
        Create a tag.

        Raises:
            ValidationFailedError: If a tag with that name already exists
        """
        ensure_super_admin(principal)
        if self.get_by_name(data.name) is not None:
            raise ValidationFailedError(f"Company tag '{data.name}' already exists")

        row = self.postgres.execute_returning(
            """
            INSERT INTO company_tags (name, description, is_active)
            VALUES (%s, %s, %s)
            RETURNING *
            """,
            (data.name, data.description, data.is_active)
        )[0]
        tag = CompanyTag.model_validate(row)

        self.audit.record_created(principal.id, "company_tag", tag)
        logger.info(f"Company tag '{tag.name}' created by {principal.email}")
        return tag

    def update(self, principal: AdminUser, tag_id: UUID, data: CompanyTagUpdate) -> CompanyTag:
        """
        Update a tag. Renames cascade to tagged rows through the foreign key.

        Raises:
            NotFoundError: If the tag does not exist
            ValidationFailedError: If renaming onto an existing name
        """
        ensure_super_admin(principal)
        current = self.get_by_id(tag_id)
        if current is None:
            raise NotFoundError(f"Company tag {tag_id} not found")

        updates = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None or field == "description"
        }
        if not updates:
            return current

        new_name = updates.get("name")
        if new_name is not None and new_name != current.name and self.get_by_name(new_name):
            raise ValidationFailedError(f"Company tag '{new_name}' already exists")

        set_parts = [f"{field} = %s" for field in updates]
        params = list(updates.values()) + [tag_id]

        row = self.postgres.execute_returning(
            f"""
            UPDATE company_tags
            SET {', '.join(set_parts)}
            WHERE id = %s
            RETURNING *
            """,
            tuple(params)
        )[0]
        updated = CompanyTag.model_validate(row)

        self.audit.record_updated(principal.id, "company_tag", current, updated)
        return updated

    def deactivate(self, principal: AdminUser, tag_id: UUID) -> None:
        """
        Soft delete a tag.

        Raises:
            NotFoundError: If the tag does not exist
        """
        ensure_super_admin(principal)
        current = self.get_by_id(tag_id)
        if current is None:
            raise NotFoundError(f"Company tag {tag_id} not found")

        self.postgres.execute_returning(
            "UPDATE company_tags SET is_active = false WHERE id = %s RETURNING id",
            (tag_id,)
        )
        self.audit.record_deleted(principal.id, "company_tag", current)
