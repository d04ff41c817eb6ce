"""Tests for VaultClient - HashiCorp Vault secrets management."""

from unittest.mock import patch

import pytest
from hvac.exceptions import Forbidden, InvalidPath

import clients.vault_client as vault_module
from clients.vault_client import VaultClient, VaultError, get_database_url, get_email_config, get_valkey_url


@pytest.fixture
def vault_env(monkeypatch):
    monkeypatch.setenv("VAULT_ADDR", "https://vault.example.com")
    monkeypatch.setenv("VAULT_ROLE_ID", "role")
    monkeypatch.setenv("VAULT_SECRET_ID", "secret")
    monkeypatch.delenv("VAULT_NAMESPACE", raising=False)


@pytest.fixture
def hvac_client(vault_env):
    """hvac.Client double that authenticates successfully."""
    with patch("clients.vault_client.hvac.Client") as client_cls:
        client = client_cls.return_value
        client.auth.approle.login.return_value = {"auth": {"client_token": "s.token"}}
        client.is_authenticated.return_value = True
        yield client


@pytest.fixture
def reset_singleton():
    vault_module._vault_client_instance = None
    vault_module._secret_cache.clear()
    yield
    vault_module._vault_client_instance = None
    vault_module._secret_cache.clear()


class TestVaultClientInit:
    """Initialization and authentication."""

    def test_missing_vault_addr_raises(self, monkeypatch):
        """VAULT_ADDR required."""
        monkeypatch.delenv("VAULT_ADDR", raising=False)
        with pytest.raises(VaultError, match="VAULT_ADDR"):
            VaultClient()

    def test_missing_approle_credentials_raises(self, vault_env, monkeypatch):
        """VAULT_ROLE_ID and VAULT_SECRET_ID required."""
        monkeypatch.delenv("VAULT_SECRET_ID")
        with pytest.raises(VaultError, match="VAULT_ROLE_ID"):
            VaultClient()

    def test_approle_token_applied(self, hvac_client):
        client = VaultClient()

        assert client.client.token == "s.token"
        hvac_client.auth.approle.login.assert_called_once_with(role_id="role", secret_id="secret")

    def test_rejected_approle_raises(self, hvac_client):
        hvac_client.auth.approle.login.side_effect = Forbidden("permission denied")

        with pytest.raises(VaultError, match="AppRole authentication failed"):
            VaultClient()


class TestGetSecret:
    """Secret retrieval - paths automatically scoped to tasksafe/."""

    def test_path_prefixed(self, hvac_client):
        hvac_client.secrets.kv.v2.read_secret_version.return_value = {
            "data": {"data": {"url": "postgresql://db/tasksafe"}},
        }

        assert VaultClient().get_secret("database", "url") == "postgresql://db/tasksafe"
        kwargs = hvac_client.secrets.kv.v2.read_secret_version.call_args.kwargs
        assert kwargs["path"] == "tasksafe/database"

    def test_missing_path_raises(self, hvac_client):
        hvac_client.secrets.kv.v2.read_secret_version.side_effect = InvalidPath()

        with pytest.raises(VaultError, match="not found"):
            VaultClient().get_secret("nonexistent", "field")

    def test_missing_field_raises_keyerror(self, hvac_client):
        hvac_client.secrets.kv.v2.read_secret_version.return_value = {"data": {"data": {"url": "x"}}}

        with pytest.raises(KeyError, match="not found"):
            VaultClient().get_secret("database", "password")


class TestConvenienceFunctions:
    """Module-level convenience functions."""

    def test_secrets_cached(self, hvac_client, reset_singleton):
        hvac_client.secrets.kv.v2.read_secret_version.return_value = {
            "data": {"data": {"url": "redis://valkey:6379/0"}},
        }

        assert get_valkey_url() == "redis://valkey:6379/0"
        assert get_valkey_url() == "redis://valkey:6379/0"
        assert hvac_client.secrets.kv.v2.read_secret_version.call_count == 1

    def test_email_config_fields_optional(self, hvac_client, reset_singleton):
        hvac_client.secrets.kv.v2.read_secret_version.return_value = {"data": {"data": {"api_key": ""}}}

        assert get_email_config() == {"api_key": None, "from_address": None}


@pytest.mark.integration
class TestLiveVault:
    """Against the Vault named by VAULT_ADDR."""

    def test_get_database_url_returns_postgresql(self):
        assert get_database_url().startswith("postgresql://")

    def test_get_valkey_url_returns_redis(self):
        assert get_valkey_url().startswith("redis://")
