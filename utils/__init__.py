"""Utility modules for cross-cutting concerns."""

from utils.timezone import now_utc, expires_after, has_expired, parse_iso
