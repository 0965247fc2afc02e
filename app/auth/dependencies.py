# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for sessions, the admin gate and CSRF.
#
# Mutating endpoints depend on `require_admin_write`, which checks, in order:
#   1. the session is authenticated   -> UnauthorizedError (401)
#   2. the CSRF token is echoed back  -> CsrfRejectedError (403)
#
# Usage:
#   from app.auth import require_admin_write
#
#   @router.delete("/{project_id}")
#   async def delete(project_id: str, session = Depends(require_admin_write)):
#       ...
# =============================================================================

import logging
from functools import lru_cache

from fastapi import Depends, Request

from app.auth.csrf import CsrfGuard
from app.auth.gate import AuthGate
from app.auth.models import SessionRecord
from app.auth.sessions import SessionStore
from app.config import settings

logger = logging.getLogger(__name__)


@lru_cache
def get_session_store() -> SessionStore:
    """Process-wide session store."""
    return SessionStore(
        secret_key=settings.SECRET_KEY,
        max_age_seconds=settings.SESSION_MAX_AGE_SECONDS,
    )


@lru_cache
def get_auth_gate() -> AuthGate:
    """Process-wide admin gate."""
    return AuthGate(get_session_store(), settings.ADMIN_KEY)


def get_session(request: Request) -> SessionRecord:
    """
    Current session.

    Normally attached by the session middleware in app.main; resolved from
    the cookie here when the middleware is not installed.
    """
    session = getattr(request.state, "session", None)
    if session is None:
        session = get_session_store().resolve(
            request.cookies.get(settings.SESSION_COOKIE_NAME)
        )
        request.state.session = session
    return session


async def verify_csrf(
    request: Request,
    session: SessionRecord = Depends(get_session),
) -> SessionRecord:
    """
    Require a valid double-submitted CSRF token.

    Raises:
        CsrfRejectedError: 403 if the token is missing or stale
    """
    CsrfGuard.verify(
        session,
        cookie_token=request.cookies.get(settings.CSRF_COOKIE_NAME),
        header_token=request.headers.get(settings.CSRF_HEADER_NAME),
    )
    return session


async def require_admin(
    session: SessionRecord = Depends(get_session),
) -> SessionRecord:
    """
    Require an authenticated admin session.

    Raises:
        UnauthorizedError: 401 if the session is not logged in
    """
    AuthGate.require(session)
    return session


async def require_admin_write(
    request: Request,
    session: SessionRecord = Depends(require_admin),
) -> SessionRecord:
    """
    Gate for every state-changing endpoint: authenticated session, then CSRF.
    """
    return await verify_csrf(request, session)
