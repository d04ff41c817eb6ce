"""Shared test fixtures for the TaskSafe test suite."""

import os
from pathlib import Path
from unittest.mock import Mock

import pytest
from dotenv import load_dotenv

# Load .env file BEFORE any other imports that might use env vars
# override=True ensures .env takes precedence over shell env vars
load_dotenv(Path(__file__).parent.parent / ".env", override=True)

# Reset vault client singleton to pick up env vars
import clients.vault_client as vault_module
vault_module._vault_client_instance = None
vault_module._secret_cache.clear()

from auth.config import AuthConfig
from auth.types import AdminUser, Role
from factories import (
    ACME_ADMIN_ID,
    OTHER_ADMIN_ID,
    SUPER_ADMIN_ID,
    access_log_row,
    magic_link_row,
    make_admin,
    video_row,
)
from clients.postgres_client import PostgresClient
from clients.valkey_client import ValkeyClient
from core.models import AccessLog, MagicLink, Video


def pytest_collection_modifyitems(config, items):
    """Skip store-backed tests unless Vault is configured."""
    if os.getenv("VAULT_ADDR"):
        return
    skip = pytest.mark.skip(reason="VAULT_ADDR not set; integration tests need Postgres and Valkey")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


# =============================================================================
# CONFIG AND PRINCIPALS
# =============================================================================


@pytest.fixture
def config():
    """Test config: low bcrypt cost, fixed base URL."""
    return AuthConfig(
        password_hash_rounds=10,
        app_base_url="https://training.example.com",
    )


@pytest.fixture
def super_admin() -> AdminUser:
    return make_admin(SUPER_ADMIN_ID, Role.SUPER_ADMIN, None, "root@tasksafe.test")


@pytest.fixture
def acme_admin() -> AdminUser:
    return make_admin(ACME_ADMIN_ID, Role.ADMIN, "acme", "x@y.com")


@pytest.fixture
def other_admin() -> AdminUser:
    return make_admin(OTHER_ADMIN_ID, Role.ADMIN, "other", "ops@other.test")


@pytest.fixture
def video() -> Video:
    return Video.model_validate(video_row())


@pytest.fixture
def magic_link() -> MagicLink:
    return MagicLink.model_validate(magic_link_row())


@pytest.fixture
def access_log() -> AccessLog:
    return AccessLog.model_validate(access_log_row())


# =============================================================================
# STORE DOUBLES
# =============================================================================


@pytest.fixture
def mock_db():
    """PostgresClient double. Tests set return values per query."""
    return Mock(spec=PostgresClient)


@pytest.fixture
def memory_valkey():
    """ValkeyClient double backed by a dict, with TTLs recorded but not enforced."""
    store: dict[str, object] = {}
    ttls: dict[str, int] = {}
    valkey = Mock(spec=ValkeyClient)

    def set_json(key, value, expire_seconds=None):
        store[key] = value
        if expire_seconds is not None:
            ttls[key] = expire_seconds

    def delete(key):
        ttls.pop(key, None)
        return store.pop(key, None) is not None

    def incr_with_expiry(key, expire_seconds):
        store[key] = int(store.get(key, 0)) + 1
        ttls[key] = expire_seconds
        return store[key]

    valkey.set_json.side_effect = set_json
    valkey.get_json.side_effect = lambda key: store.get(key)
    valkey.delete.side_effect = delete
    valkey.incr_with_expiry.side_effect = incr_with_expiry
    valkey.ttl.side_effect = lambda key: ttls.get(key, -2)
    valkey.ping.return_value = True
    valkey.store = store
    valkey.ttls = ttls
    return valkey


# =============================================================================
# INTEGRATION FIXTURES (real Postgres / Valkey via Vault)
# =============================================================================


@pytest.fixture(scope="session")
def db():
    """Session-scoped PostgresClient."""
    from clients.vault_client import get_database_url

    client = PostgresClient(get_database_url())
    yield client
    client.close()


@pytest.fixture(scope="session")
def valkey():
    """Session-scoped ValkeyClient."""
    from clients.vault_client import get_valkey_url

    client = ValkeyClient(get_valkey_url())
    yield client
    client.close()


# =============================================================================
# APP FIXTURES (routes over service doubles)
# =============================================================================


@pytest.fixture
def mock_services():
    """Service doubles keyed the way build_services keys the real ones."""
    from auth.admin_users import AdminUserService
    from auth.service import AdminAuthService
    from core.services.access_service import AccessService
    from core.services.company_tag_service import CompanyTagService
    from core.services.video_service import VideoService

    return {
        "company_tag": Mock(spec=CompanyTagService),
        "video": Mock(spec=VideoService),
        "access": Mock(spec=AccessService),
        "admin_user": Mock(spec=AdminUserService),
        "auth": Mock(spec=AdminAuthService),
    }


@pytest.fixture
def api_client(config, mock_services):
    """TestClient over the full app with stores and services doubled."""
    from fastapi.testclient import TestClient

    from api.app import build_app

    postgres = Mock(spec=PostgresClient)
    postgres.ping.return_value = True
    valkey = Mock(spec=ValkeyClient)
    valkey.ping.return_value = True

    app = build_app(config, postgres, valkey, mock_services)
    client = TestClient(app, raise_server_exceptions=False)
    client.postgres = postgres
    client.valkey = valkey
    return client
