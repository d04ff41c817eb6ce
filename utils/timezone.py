"""UTC-everywhere time handling. Magic-link and session expiry compare in UTC only."""

from datetime import datetime, timedelta, timezone


def now_utc() -> datetime:
    """
    Current time in UTC.

    Use this instead of datetime.now() everywhere.
    """
    return datetime.now(timezone.utc)


def expires_after(lifetime: timedelta, start: datetime | None = None) -> datetime:
    """Expiry instant `lifetime` after `start` (default: now)."""
    return (start or now_utc()) + lifetime


def has_expired(expires_at: datetime, now: datetime | None = None) -> bool:
    """
    True once `now` has reached `expires_at`.

    The expiry instant itself already counts as expired.
    """
    return (now or now_utc()) >= expires_at


def parse_iso(iso_string: str) -> datetime:
    """
    Parse an ISO 8601 string (as stored in Valkey) to a UTC datetime.

    Raises ValueError if string has no timezone info.
    """
    dt = datetime.fromisoformat(iso_string)
    if dt.tzinfo is None:
        raise ValueError(
            "Cannot parse naive datetime string. "
            "Include timezone offset (e.g., 'Z' or '+00:00')."
        )
    return dt.astimezone(timezone.utc)
