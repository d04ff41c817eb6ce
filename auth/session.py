"""Admin session lifecycle.

Sessions are stored in Valkey with TTL matching session expiry. The record
holds only the admin id; role and company tag are re-read from the
database on each request so a deactivated or re-scoped admin loses access
immediately.
"""

import secrets
from datetime import timedelta
from uuid import UUID

from clients.valkey_client import ValkeyClient
from auth.config import AuthConfig
from auth.types import Session
from auth.exceptions import SessionExpiredError
from utils.timezone import expires_after, has_expired, now_utc, parse_iso


class SessionManager:
    """Admin session tokens backed by Valkey, with a sliding expiry."""

    KEY_PREFIX = "admin_session:"

    def __init__(self, valkey: ValkeyClient, config: AuthConfig):
        self._valkey = valkey
        self._config = config

    def _key(self, token: str) -> str:
        return f"{self.KEY_PREFIX}{token}"

    @property
    def _lifetime(self) -> timedelta:
        return timedelta(hours=self._config.session_expiry_hours)

    @property
    def _ttl_seconds(self) -> int:
        return int(self._lifetime.total_seconds())

    def _store(self, session: Session) -> None:
        self._valkey.set_json(
            self._key(session.token),
            {
                "admin_user_id": str(session.admin_user_id),
                "created_at": session.created_at.isoformat(),
                "expires_at": session.expires_at.isoformat(),
                "last_activity_at": session.last_activity_at.isoformat(),
            },
            expire_seconds=self._ttl_seconds,
        )

    def create_session(self, admin_user_id: UUID) -> Session:
        """Create a new session with a cryptographically random token."""
        now = now_utc()
        session = Session(
            token=secrets.token_urlsafe(32),
            admin_user_id=admin_user_id,
            created_at=now,
            expires_at=expires_after(self._lifetime, now),
            last_activity_at=now,
        )
        self._store(session)
        return session

    def validate_session(self, token: str) -> Session:
        """Return the session for a token, extending its expiry.

        Raises:
            SessionExpiredError: If the token is unknown or expired.
        """
        data = self._valkey.get_json(self._key(token))
        if data is None:
            raise SessionExpiredError("Session not found or expired")

        session = Session(
            token=token,
            admin_user_id=UUID(data["admin_user_id"]),
            created_at=parse_iso(data["created_at"]),
            expires_at=parse_iso(data["expires_at"]),
            last_activity_at=parse_iso(data["last_activity_at"]),
        )

        now = now_utc()
        # Valkey TTL should already have dropped it
        if has_expired(session.expires_at, now):
            self._valkey.delete(self._key(token))
            raise SessionExpiredError("Session expired")

        extended = session.model_copy(update={
            "expires_at": expires_after(self._lifetime, now),
            "last_activity_at": now,
        })
        self._store(extended)
        return extended

    def revoke_session(self, token: str) -> None:
        """Revoke session (logout). Safe to call with a nonexistent token."""
        self._valkey.delete(self._key(token))
