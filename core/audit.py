"""
Entity audit trail for admin-side changes.

Every create/update/delete of a video, admin user or company tag made
through the admin API lands in audit_log:
- Append-only (entries never modified or deleted)
- Attributed to the acting admin
- Field-level for updates, full snapshots for creates and deletes

Security events (logins, link redemptions) are a separate trail; see
auth/security_logger.py.
"""

from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from psycopg2.extras import Json
from pydantic import BaseModel

from clients.postgres_client import PostgresClient
from utils.timezone import now_utc


class AuditAction(Enum):
    """Type of change made to an entity."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


def compute_changes(
    old: dict[str, Any],
    new: dict[str, Any],
    exclude_fields: set[str] | None = None
) -> dict[str, dict[str, Any]]:
    """
    Field-level diff between two entity snapshots.

    Args:
        old: Previous state of entity
        new: New state of entity
        exclude_fields: Fields to ignore (defaults to {"created_at"})

    Returns:
        {field: {"old": old_val, "new": new_val}} for changed fields, or {}.
    """
    exclude = exclude_fields or {"created_at"}
    changes = {}

    for key in set(old.keys()) | set(new.keys()):
        if key in exclude:
            continue

        old_val = old.get(key)
        new_val = new.get(key)

        if old_val != new_val:
            changes[key] = {"old": old_val, "new": new_val}

    return changes


def snapshot(entity: BaseModel) -> dict[str, Any]:
    """JSON-safe dump of an entity (UUIDs and datetimes as strings)."""
    return entity.model_dump(mode="json")


class AuditLogger:
    """
    Writes audit_log rows on behalf of the admin services.

    Usage:
        audit = AuditLogger(postgres)
        audit.record_created(principal.id, "video", video)
        audit.record_updated(principal.id, "video", before, after)
        audit.record_deleted(principal.id, "video", video)
    """

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def log_change(
        self,
        actor_id: UUID,
        entity_type: str,
        entity_id: UUID,
        action: AuditAction,
        changes: dict[str, Any],
    ) -> None:
        """
        Insert one audit entry.

        Changes format by action:
        - CREATE: {"created": {full entity data}}
        - UPDATE: {"field": {"old": old_val, "new": new_val}, ...}
        - DELETE: {"deleted": {full entity data at deletion}}
        """
        self.postgres.execute(
            """
            INSERT INTO audit_log (id, actor_id, entity_type, entity_id, action, changes, created_at)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            """,
            (
                uuid4(),
                actor_id,
                entity_type,
                entity_id,
                action.value,
                Json(changes),
                now_utc()
            )
        )

    def record_created(self, actor_id: UUID, entity_type: str, entity: BaseModel) -> None:
        self.log_change(actor_id, entity_type, entity.id, AuditAction.CREATE, {"created": snapshot(entity)})

    def record_updated(
        self,
        actor_id: UUID,
        entity_type: str,
        before: BaseModel,
        after: BaseModel,
        extra_changes: dict[str, dict[str, Any]] | None = None,
    ) -> dict[str, dict[str, Any]]:
        """
        Log the diff between two snapshots, if there is one.

        extra_changes covers fields the entity model does not carry
        (a changed password, for instance).

        Returns:
            The changes that were logged ({} when nothing changed).
        """
        changes = compute_changes(snapshot(before), snapshot(after))
        if extra_changes:
            changes.update(extra_changes)
        if changes:
            self.log_change(actor_id, entity_type, after.id, AuditAction.UPDATE, changes)
        return changes

    def record_deleted(self, actor_id: UUID, entity_type: str, entity: BaseModel) -> None:
        self.log_change(actor_id, entity_type, entity.id, AuditAction.DELETE, {"deleted": snapshot(entity)})
