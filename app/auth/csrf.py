# =============================================================================
# app/auth/csrf.py - Double-Submit CSRF Guard
# =============================================================================
# Each session gets one CSRF token. It is sent to the browser in a cookie on
# every response (and in the body of GET /api/csrf-token); state-changing
# requests must echo it back in the X-CSRF-Token header. The header must
# match both the cookie and the token bound to the session.
# =============================================================================

import logging
import secrets

from app.auth.models import SessionRecord
from app.exceptions import CsrfRejectedError

logger = logging.getLogger(__name__)


def _same(a: str, b: str) -> bool:
    return secrets.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


class CsrfGuard:
    """Token issuance and verification."""

    @staticmethod
    def issue(session: SessionRecord) -> str:
        """
        Token for this session, minted on first use.

        Idempotent: repeated calls return the same token.
        """
        if not session.csrf_token:
            session.csrf_token = secrets.token_urlsafe(32)
        return session.csrf_token

    @staticmethod
    def verify(
        session: SessionRecord,
        cookie_token: str | None,
        header_token: str | None,
    ) -> None:
        """
        Check the double-submitted token.

        Raises:
            CsrfRejectedError: If the header or cookie token is missing, or
                either differs from the session's token
        """
        if not header_token:
            logger.warning("CSRF rejected: missing header token")
            raise CsrfRejectedError("missing token header")
        if not cookie_token:
            logger.warning("CSRF rejected: missing cookie token")
            raise CsrfRejectedError("missing token cookie")
        if not session.csrf_token:
            logger.warning("CSRF rejected: no token issued for session")
            raise CsrfRejectedError("no token issued for this session")

        if not (_same(header_token, cookie_token) and _same(header_token, session.csrf_token)):
            logger.warning("CSRF rejected: token mismatch")
            raise CsrfRejectedError("token mismatch")
