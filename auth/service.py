"""Admin authentication service - password login, logout and principal lookup."""

from auth.config import AuthConfig
from auth.database import AdminUserDatabase
from auth.exceptions import InvalidCredentialsError, SessionExpiredError, UnauthorizedError
from auth.passwords import verify_password
from auth.security_logger import SecurityEvent, SecurityLogger
from auth.session import SessionManager
from auth.types import AdminUser, AuthenticatedAdmin


class AdminAuthService:
    """Orchestrates admin password authentication.

    Handles:
    - Login (email + bcrypt password check, session creation)
    - Logout
    - Resolving a session token to the current principal
    """

    def __init__(
        self,
        config: AuthConfig,
        auth_db: AdminUserDatabase,
        session_manager: SessionManager,
        security_logger: SecurityLogger,
    ):
        self._config = config
        self._auth_db = auth_db
        self._session_manager = session_manager
        self._security_logger = security_logger

    def login(
        self,
        email: str,
        password: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuthenticatedAdmin:
        """Verify credentials and open a session.

        Unknown email, inactive account and wrong password all fail the
        same way so the response does not reveal which admins exist.

        Raises:
            InvalidCredentialsError: If the credentials do not match an active admin.
        """
        email = email.lower().strip()
        credentials = self._auth_db.get_credentials(email)

        reason = None
        if credentials is None:
            reason = "unknown_email"
        else:
            user, password_hash = credentials
            if not user.is_active:
                reason = "inactive"
            elif not verify_password(password, password_hash):
                reason = "wrong_password"

        if reason is not None:
            self._security_logger.log(
                SecurityEvent.ADMIN_LOGIN_FAILED,
                email=email,
                ip_address=ip_address,
                user_agent=user_agent,
                details={"reason": reason},
            )
            raise InvalidCredentialsError("Invalid email or password")

        session = self._session_manager.create_session(user.id)

        self._security_logger.log(
            SecurityEvent.ADMIN_LOGIN_SUCCEEDED,
            email=user.email,
            admin_user_id=user.id,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        self._security_logger.log(
            SecurityEvent.SESSION_CREATED,
            email=user.email,
            admin_user_id=user.id,
            ip_address=ip_address,
            user_agent=user_agent,
        )

        return AuthenticatedAdmin(user=user, session=session)

    def logout(self, session_token: str, principal: AdminUser | None = None, ip_address: str | None = None) -> None:
        """Revoke session (logout). Safe to call with an invalid token."""
        self._session_manager.revoke_session(session_token)

        self._security_logger.log(
            SecurityEvent.SESSION_REVOKED,
            email=principal.email if principal else None,
            admin_user_id=principal.id if principal else None,
            ip_address=ip_address,
        )

    def resolve_principal(self, session_token: str) -> AdminUser:
        """Current admin for a session token, re-read from the database.

        Raises:
            SessionExpiredError: If the session is unknown or expired.
            UnauthorizedError: If the admin was removed or deactivated.
        """
        session = self._session_manager.validate_session(session_token)
        user = self._auth_db.get_by_id(session.admin_user_id)

        if user is None:
            self._session_manager.revoke_session(session_token)
            raise SessionExpiredError("Session no longer valid")
        if not user.is_active:
            self._session_manager.revoke_session(session_token)
            raise UnauthorizedError("Account is deactivated")

        return user
