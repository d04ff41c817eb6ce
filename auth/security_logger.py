"""Security event logging for the access and admin-login audit trail.

Append-only log to the security_events table. Complements core/audit.py,
which records entity changes; this records who tried to get in, from
where, and what happened.
"""

import logging
from enum import Enum
from typing import Any
from uuid import UUID

from psycopg2.extras import Json

from clients.postgres_client import PostgresClient
from utils.timezone import now_utc

logger = logging.getLogger(__name__)


class SecurityEvent(Enum):
    """Security event types."""

    ACCESS_REQUESTED = "access_requested"
    ACCESS_LINK_SENT = "access_link_sent"
    ACCESS_LINK_SEND_FAILED = "access_link_send_failed"
    ACCESS_REDEEMED = "access_redeemed"
    ACCESS_NOT_FOUND = "access_not_found"
    ACCESS_EXPIRED = "access_expired"
    ACCESS_ALREADY_USED = "access_already_used"
    ADMIN_LOGIN_SUCCEEDED = "admin_login_succeeded"
    ADMIN_LOGIN_FAILED = "admin_login_failed"
    SESSION_CREATED = "session_created"
    SESSION_REVOKED = "session_revoked"
    RATE_LIMITED = "rate_limited"


class SecurityLogger:
    """Append-only security event logger."""

    def __init__(self, postgres: PostgresClient):
        self._db = postgres

    def log(
        self,
        event: SecurityEvent,
        email: str | None = None,
        admin_user_id: UUID | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Log security event to database."""
        logger.info(f"Security event {event.value} email={email} ip={ip_address}")
        self._db.execute_returning(
            """INSERT INTO security_events
               (event_type, email, admin_user_id, ip_address, user_agent, details, created_at)
               VALUES (%s, %s, %s, %s, %s, %s, %s)
               RETURNING id""",
            (
                event.value,
                email,
                str(admin_user_id) if admin_user_id else None,
                ip_address,
                user_agent,
                Json(details) if details else None,
                now_utc(),
            ),
        )

