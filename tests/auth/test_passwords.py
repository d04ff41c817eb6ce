"""Tests for bcrypt password hashing."""

import pytest

from auth.passwords import hash_password, verify_password


class TestHashPassword:

    def test_hash_is_not_plaintext(self):
        hashed = hash_password("secret123", rounds=10)

        assert "secret123" not in hashed
        assert hashed.startswith("$2")

    def test_cost_factor_recorded(self):
        assert hash_password("secret123", rounds=10).split("$")[2] == "10"

    def test_fresh_salt_each_time(self):
        assert hash_password("secret123", rounds=10) != hash_password("secret123", rounds=10)

    def test_rejects_over_72_bytes(self):
        with pytest.raises(ValueError, match="72 bytes"):
            hash_password("x" * 73, rounds=10)


class TestVerifyPassword:

    def test_exact_plaintext_verifies(self):
        hashed = hash_password("secret123", rounds=10)

        assert verify_password("secret123", hashed) is True

    def test_other_plaintext_fails(self):
        hashed = hash_password("secret123", rounds=10)

        assert verify_password("wrong", hashed) is False
        assert verify_password("Secret123", hashed) is False

    def test_malformed_hash_fails_closed(self):
        assert verify_password("secret123", "not-a-bcrypt-hash") is False

    def test_over_long_password_fails_closed(self):
        hashed = hash_password("secret123", rounds=10)

        assert verify_password("x" * 100, hashed) is False
