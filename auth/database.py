"""Database operations for admin users.

The admin_users table is owned by the auth package; nothing else reads
password hashes.
"""

from typing import Any
from uuid import UUID

from clients.postgres_client import PostgresClient
from auth.types import AdminUser

_ADMIN_COLUMNS = "id, email, role, company_tag, is_active, created_at"

# Columns an update may touch; password arrives already hashed
_UPDATABLE_COLUMNS = {"email", "password_hash", "role", "company_tag", "is_active"}


class UnknownColumnError(Exception):
    """An update named a column outside _UPDATABLE_COLUMNS (a caller bug; surfaces as a 500)."""


def _to_admin_user(row: dict[str, Any]) -> AdminUser:
    return AdminUser(
        id=UUID(row["id"]) if isinstance(row["id"], str) else row["id"],
        email=row["email"],
        role=row["role"],
        company_tag=row["company_tag"],
        is_active=row["is_active"],
        created_at=row["created_at"],
    )


class AdminUserDatabase:
    """Database operations for admin users."""

    def __init__(self, postgres: PostgresClient):
        self._db = postgres

    def get_by_email(self, email: str) -> AdminUser | None:
        """Find admin by email (case-insensitive)."""
        row = self._db.execute_single(
            f"SELECT {_ADMIN_COLUMNS} FROM admin_users WHERE email = lower(%s)",
            (email,),
        )
        return _to_admin_user(row) if row else None

    def get_by_id(self, admin_user_id: UUID) -> AdminUser | None:
        """Find admin by ID."""
        row = self._db.execute_single(
            f"SELECT {_ADMIN_COLUMNS} FROM admin_users WHERE id = %s",
            (admin_user_id,),
        )
        return _to_admin_user(row) if row else None

    def get_credentials(self, email: str) -> tuple[AdminUser, str] | None:
        """Admin and stored password hash, for login only."""
        row = self._db.execute_single(
            f"SELECT {_ADMIN_COLUMNS}, password_hash FROM admin_users WHERE email = lower(%s)",
            (email,),
        )
        if row is None:
            return None
        return _to_admin_user(row), row["password_hash"]

    def list_active(self) -> list[AdminUser]:
        """Active admins, newest first."""
        rows = self._db.execute(
            f"""SELECT {_ADMIN_COLUMNS} FROM admin_users
                WHERE is_active = true
                ORDER BY created_at DESC""",
        )
        return [_to_admin_user(row) for row in rows]

    def create(
        self,
        email: str,
        password_hash: str,
        role: str,
        company_tag: str | None,
    ) -> AdminUser:
        """Insert a new admin (email lowercased)."""
        rows = self._db.execute_returning(
            f"""INSERT INTO admin_users (email, password_hash, role, company_tag)
                VALUES (lower(%s), %s, %s, %s)
                RETURNING {_ADMIN_COLUMNS}""",
            (email, password_hash, role, company_tag),
        )
        return _to_admin_user(rows[0])

    def update(self, admin_user_id: UUID, fields: dict[str, Any]) -> AdminUser | None:
        """Apply column updates.

        Returns:
            Updated admin, or None if not found.

        Raises:
            UnknownColumnError: If fields names a column that cannot be updated.
        """
        unknown = set(fields) - _UPDATABLE_COLUMNS
        if unknown:
            raise UnknownColumnError(f"Cannot update admin user fields: {', '.join(sorted(unknown))}")
        if not fields:
            return self.get_by_id(admin_user_id)

        set_parts = []
        params: list[Any] = []
        for column, value in fields.items():
            if column == "email":
                set_parts.append("email = lower(%s)")
            else:
                set_parts.append(f"{column} = %s")
            params.append(value)
        params.append(admin_user_id)

        rows = self._db.execute_returning(
            f"""UPDATE admin_users
                SET {', '.join(set_parts)}
                WHERE id = %s
                RETURNING {_ADMIN_COLUMNS}""",
            tuple(params),
        )
        return _to_admin_user(rows[0]) if rows else None

    def deactivate(self, admin_user_id: UUID) -> bool:
        """Soft delete: set admin as inactive.

        Returns:
            True if admin was found and deactivated, False if not found.
        """
        rows = self._db.execute_returning(
            "UPDATE admin_users SET is_active = false WHERE id = %s RETURNING id",
            (admin_user_id,),
        )
        return len(rows) > 0
