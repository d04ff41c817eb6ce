"""Tests for ValkeyClient against a live Valkey."""

import time
from uuid import uuid4

import pytest

pytestmark = pytest.mark.integration


@pytest.fixture
def key(valkey):
    """A fresh key, removed after the test."""
    name = f"test:{uuid4().hex}"
    yield name
    valkey.delete(name)


def test_ping(valkey):
    assert valkey.ping() is True


class TestStrings:

    def test_set_then_get(self, valkey, key):
        valkey.set(key, "hello")

        assert valkey.get(key) == "hello"

    def test_missing_key_reads_none(self, valkey, key):
        assert valkey.get(key) is None

    def test_delete_reports_existence(self, valkey, key):
        valkey.set(key, "value")

        assert valkey.delete(key) is True
        assert valkey.delete(key) is False


class TestExpiry:

    def test_value_gone_after_expiry(self, valkey, key):
        valkey.set(key, "value", expire_seconds=1)
        time.sleep(1.1)

        assert valkey.get(key) is None

    def test_ttl_counts_down(self, valkey, key):
        valkey.set(key, "value", expire_seconds=100)

        assert 95 <= valkey.ttl(key) <= 100

    def test_ttl_sentinels(self, valkey, key):
        """-2 for a missing key, -1 for a key without expiry."""
        assert valkey.ttl(key) == -2

        valkey.set(key, "value")
        assert valkey.ttl(key) == -1


class TestCounter:
    """incr_with_expiry backs the access-request rate limit."""

    def test_first_hit_starts_window(self, valkey, key):
        assert valkey.incr_with_expiry(key, 60) == 1
        assert 55 <= valkey.ttl(key) <= 60

    def test_every_hit_extends_window(self, valkey, key):
        valkey.incr_with_expiry(key, 10)
        valkey.incr_with_expiry(key, 10)

        assert valkey.incr_with_expiry(key, 100) == 3
        assert valkey.ttl(key) > 10


class TestJson:
    """Session payloads are stored as JSON."""

    def test_session_payload_survives(self, valkey, key):
        payload = {"admin_user_id": str(uuid4()), "expires_at": "2026-01-02T00:00:00+00:00"}
        valkey.set_json(key, payload, expire_seconds=60)

        assert valkey.get_json(key) == payload

    def test_missing_reads_none(self, valkey, key):
        assert valkey.get_json(key) is None

    def test_corrupt_value_raises(self, valkey, key):
        valkey.set(key, "not valid json {")

        with pytest.raises(ValueError, match="Invalid JSON"):
            valkey.get_json(key)
