"""Rate limiting for magic link requests.

Counter per email in Valkey; the TTL resets on every attempt, so a client
that keeps hammering keeps extending its own lockout.
"""

from clients.valkey_client import ValkeyClient
from auth.config import AuthConfig
from auth.exceptions import RateLimitedError


class RateLimiter:
    """Per-email sliding-window limit on access requests."""

    KEY_PREFIX = "ratelimit:access_request:"

    def __init__(self, valkey: ValkeyClient, config: AuthConfig):
        self._valkey = valkey
        self._config = config
        self._window_seconds = config.rate_limit_window_minutes * 60

    def _key(self, email: str) -> str:
        """Generate rate limit key for email (normalized to lowercase)."""
        return f"{self.KEY_PREFIX}{email.lower()}"

    def check_rate_limit(self, email: str) -> None:
        """Count this attempt and reject it if over the limit.

        Raises:
            RateLimitedError: If rate limit exceeded.
        """
        key = self._key(email)
        count = self._valkey.incr_with_expiry(key, self._window_seconds)

        if count > self._config.rate_limit_attempts:
            retry_after = max(self._valkey.ttl(key), 1)
            raise RateLimitedError(retry_after_seconds=retry_after)

