# =============================================================================
# app/auth/sessions.py - Session Store
# =============================================================================
# The session cookie holds an HS256 JWT ({"sid", "csrf", "iat", "exp"})
# signed with SECRET_KEY.
#
# Anonymous sessions live only in that cookie: nothing is kept server-side
# until a login rotates the session into the store. Logout then takes effect
# immediately, and unauthenticated traffic costs no memory. A forged or
# expired token simply yields a fresh anonymous session.
# =============================================================================

import logging
import secrets
import time
from typing import Any, Callable

from jose import ExpiredSignatureError, JWTError, jwt

from app.auth.models import SessionRecord

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


class SessionStore:
    """
    Issues session cookies and holds authenticated sessions.

    Example:
        store = SessionStore(secret_key="...", max_age_seconds=3600)
        session = store.resolve(request.cookies.get("portfolio_session"))
        cookie_value = store.encode(session)
    """

    def __init__(
        self,
        secret_key: str,
        max_age_seconds: int,
        clock: Callable[[], float] = time.time,
    ):
        self.secret_key = secret_key
        self.max_age_seconds = max_age_seconds
        self._clock = clock
        self._sessions: dict[str, SessionRecord] = {}

    def __len__(self) -> int:
        """Number of sessions held server-side (authenticated only)."""
        return len(self._sessions)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def create(self) -> SessionRecord:
        """Start a new anonymous session. It is not stored."""
        now = self._clock()
        return SessionRecord(
            id=secrets.token_urlsafe(32),
            created_at=now,
            expires_at=now + self.max_age_seconds,
        )

    def get(self, session_id: str) -> SessionRecord | None:
        """Get a stored session; expired sessions are dropped."""
        record = self._sessions.get(session_id)
        if record is None:
            return None
        if record.is_expired(self._clock()):
            logger.debug("Session expired")
            self._sessions.pop(session_id, None)
            return None
        return record

    def destroy(self, session_id: str) -> None:
        """Forget a session (logout)."""
        self._sessions.pop(session_id, None)

    def rotate(self, record: SessionRecord) -> SessionRecord:
        """
        Move a session to a fresh id and keep it server-side.

        Keeps the session's state and CSRF token. Used on login so an id
        issued before authentication can't be reused.
        """
        now = self._clock()
        self._prune(now)
        self._sessions.pop(record.id, None)
        rotated = record.model_copy(update={
            "id": secrets.token_urlsafe(32),
            "created_at": now,
            "expires_at": now + self.max_age_seconds,
        })
        self._sessions[rotated.id] = rotated
        return rotated

    def _prune(self, now: float) -> None:
        expired = [sid for sid, record in self._sessions.items() if record.is_expired(now)]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.debug(f"Pruned {len(expired)} expired sessions")

    # -------------------------------------------------------------------------
    # Cookie tokens
    # -------------------------------------------------------------------------

    def encode(self, record: SessionRecord) -> str:
        """Sign a cookie value carrying the session id and CSRF token."""
        claims: dict[str, Any] = {
            "sid": record.id,
            "iat": int(record.created_at),
            "exp": int(record.expires_at),
        }
        if record.csrf_token:
            claims["csrf"] = record.csrf_token
        return jwt.encode(claims, self.secret_key, algorithm=ALGORITHM)

    def _claims(self, token: str) -> dict[str, Any] | None:
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[ALGORITHM])
        except ExpiredSignatureError:
            logger.debug("Session token has expired")
            return None
        except JWTError as e:
            logger.warning(f"Session token validation failed: {e}")
            return None

        if not isinstance(payload.get("sid"), str):
            return None
        return payload

    def decode(self, token: str) -> str | None:
        """
        Verify a cookie value.

        Returns:
            The session id, or None if the token is invalid or expired
        """
        claims = self._claims(token)
        return claims["sid"] if claims else None

    def resolve(self, token: str | None) -> SessionRecord:
        """
        Session for a cookie value.

        A stored (authenticated) session wins. Otherwise a valid token is
        read back as an anonymous session, and anything else starts a new one.
        """
        claims = self._claims(token) if token else None
        if claims is None:
            return self.create()

        record = self.get(claims["sid"])
        if record is not None:
            return record

        now = self._clock()
        csrf_token = claims.get("csrf")
        return SessionRecord(
            id=claims["sid"],
            csrf_token=csrf_token if isinstance(csrf_token, str) else None,
            created_at=float(claims.get("iat", now)),
            expires_at=float(claims.get("exp", now + self.max_age_seconds)),
        )
