# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Session-based admin authentication with double-submit CSRF protection.
#
# Usage:
#   from app.auth import require_admin_write, SessionRecord
#
#   @router.post("/protected")
#   async def protected(session: SessionRecord = Depends(require_admin_write)):
#       ...
# =============================================================================

from app.auth.csrf import CsrfGuard
from app.auth.dependencies import (
    get_auth_gate,
    get_session,
    get_session_store,
    require_admin,
    require_admin_write,
    verify_csrf,
)
from app.auth.gate import AuthGate
from app.auth.models import AuthState, SessionRecord
from app.auth.sessions import SessionStore

__all__ = [
    "AuthGate",
    "AuthState",
    "CsrfGuard",
    "SessionRecord",
    "SessionStore",
    "get_auth_gate",
    "get_session",
    "get_session_store",
    "require_admin",
    "require_admin_write",
    "verify_csrf",
]
