"""Tests for admin auth API routes."""

from datetime import timedelta

import pytest

from auth.exceptions import InvalidCredentialsError
from auth.types import AuthenticatedAdmin, Session
from factories import sign_in
from utils.timezone import now_utc


@pytest.fixture
def authenticated(acme_admin):
    now = now_utc()
    return AuthenticatedAdmin(
        user=acme_admin,
        session=Session(
            token="new-session-token",
            admin_user_id=acme_admin.id,
            created_at=now,
            expires_at=now + timedelta(hours=24),
            last_activity_at=now,
        ),
    )


class TestLogin:

    def test_sets_session_cookie(self, api_client, mock_services, authenticated):
        mock_services["auth"].login.return_value = authenticated

        response = api_client.post("/api/admin/login", json={"email": "x@y.com", "password": "secret123"})

        assert response.status_code == 200
        assert response.cookies["session_token"] == "new-session-token"
        set_cookie = response.headers["set-cookie"].lower()
        assert "httponly" in set_cookie
        assert "samesite=lax" in set_cookie
        assert "max-age=86400" in set_cookie
        assert "secure" not in set_cookie

    def test_returns_sanitized_user(self, api_client, mock_services, authenticated):
        mock_services["auth"].login.return_value = authenticated

        body = api_client.post("/api/admin/login", json={"email": "x@y.com", "password": "secret123"}).json()

        assert body["success"] is True
        user = body["data"]["user"]
        assert user["email"] == "x@y.com"
        assert user["companyTag"] == "acme"
        assert "passwordHash" not in user
        assert "password_hash" not in user

    def test_passes_credentials_through(self, api_client, mock_services, authenticated):
        mock_services["auth"].login.return_value = authenticated

        api_client.post(
            "/api/admin/login",
            json={"email": "x@y.com", "password": "secret123"},
            headers={"User-Agent": "pytest-agent"},
        )

        kwargs = mock_services["auth"].login.call_args.kwargs
        assert kwargs["email"] == "x@y.com"
        assert kwargs["password"] == "secret123"
        assert kwargs["user_agent"] == "pytest-agent"

    def test_bad_credentials_return_401(self, api_client, mock_services):
        mock_services["auth"].login.side_effect = InvalidCredentialsError("Invalid email or password")

        response = api_client.post("/api/admin/login", json={"email": "x@y.com", "password": "nope"})

        assert response.status_code == 401
        assert response.json()["error"] == {
            "code": "NOT_AUTHENTICATED",
            "message": "Invalid email or password",
        }
        assert "session_token" not in response.cookies

    def test_malformed_body_returns_422(self, api_client):
        response = api_client.post("/api/admin/login", json={"email": "not-an-email"})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"


class TestLogout:

    def test_revokes_session_and_clears_cookie(self, api_client, mock_services, acme_admin):
        sign_in(api_client, mock_services, acme_admin)

        response = api_client.post("/api/admin/logout")

        assert response.status_code == 200
        kwargs = mock_services["auth"].logout.call_args.kwargs
        assert kwargs["session_token"] == f"session-{acme_admin.id}"
        assert kwargs["principal"] == acme_admin
        assert "max-age=0" in response.headers["set-cookie"].lower()

    def test_requires_session(self, api_client, mock_services):
        response = api_client.post("/api/admin/logout")

        assert response.status_code == 401
        mock_services["auth"].logout.assert_not_called()


class TestMe:

    def test_returns_current_principal(self, api_client, mock_services, super_admin):
        sign_in(api_client, mock_services, super_admin)

        body = api_client.get("/api/admin/me").json()

        assert body["data"]["user"]["role"] == "SUPER_ADMIN"
        assert body["data"]["user"]["companyTag"] is None

    def test_request_id_header(self, api_client, mock_services, super_admin):
        sign_in(api_client, mock_services, super_admin)

        response = api_client.get("/api/admin/me")

        assert response.headers["X-Request-ID"] == response.json()["meta"]["request_id"]
