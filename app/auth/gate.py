# =============================================================================
# app/auth/gate.py - Admin Authentication Gate
# =============================================================================
# Two-state machine per session: unauthenticated <-> authenticated.
# The only way in is the pre-shared ADMIN_KEY. With no key configured the
# transition is unavailable, so every mutating endpoint stays closed.
# =============================================================================

import logging
import secrets

from app.auth.models import AuthState, AuthStatusResponse, SessionRecord
from app.auth.sessions import SessionStore
from app.exceptions import AdminNotConfiguredError, UnauthorizedError

logger = logging.getLogger(__name__)


class AuthGate:
    """
    Admin login/logout and the authenticated-state check.

    Example:
        gate = AuthGate(sessions, admin_key=settings.ADMIN_KEY)
        session = gate.login(session, "secret")
        gate.require(session)
    """

    def __init__(self, sessions: SessionStore, admin_key: str | None):
        self.sessions = sessions
        self._admin_key = admin_key or None

    @property
    def configured(self) -> bool:
        return self._admin_key is not None

    def login(self, session: SessionRecord, key: str | None) -> SessionRecord:
        """
        Authenticate a session with the admin key.

        Returns:
            The authenticated session (under a new id)

        Raises:
            AdminNotConfiguredError: If no admin key is configured
            UnauthorizedError: If the key does not match exactly
        """
        if not self.configured:
            logger.warning("Login attempted but ADMIN_KEY is not configured")
            raise AdminNotConfiguredError()

        if not key or not secrets.compare_digest(
            key.encode("utf-8"), self._admin_key.encode("utf-8")
        ):
            logger.warning("Login failed: invalid admin key")
            raise UnauthorizedError("Invalid admin key")

        authenticated = self.sessions.rotate(session)
        authenticated.state = AuthState.AUTHENTICATED
        logger.info("Admin logged in")
        return authenticated

    def logout(self, session: SessionRecord) -> None:
        """End the session; the next request starts unauthenticated."""
        self.sessions.destroy(session.id)
        logger.info("Admin logged out")

    @staticmethod
    def require(session: SessionRecord) -> None:
        """
        Raises:
            UnauthorizedError: Unless the session is authenticated
        """
        if not session.authenticated:
            raise UnauthorizedError()

    def status(self, session: SessionRecord) -> AuthStatusResponse:
        return AuthStatusResponse(
            authenticated=session.authenticated,
            configured=self.configured,
        )
