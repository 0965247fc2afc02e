# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for session state and the admin endpoints.
# =============================================================================

from enum import Enum

from pydantic import BaseModel, Field


class AuthState(str, Enum):
    """
    Authentication state of a browser session.

    Flow: unauthenticated -> (login with admin key) -> authenticated
          authenticated -> (logout or expiry) -> unauthenticated
    """
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


class SessionRecord(BaseModel):
    """
    Server-side session.

    The cookie only carries a signed reference to `id`; state and the CSRF
    token live here, so logout takes effect immediately.
    """
    id: str
    state: AuthState = AuthState.UNAUTHENTICATED
    csrf_token: str | None = None
    created_at: float
    expires_at: float

    @property
    def authenticated(self) -> bool:
        return self.state == AuthState.AUTHENTICATED

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class LoginRequest(BaseModel):
    """Admin login payload."""
    key: str | None = Field(default=None, description="Admin key")


class AuthStatusResponse(BaseModel):
    """Whether this session is logged in and whether login is possible at all."""
    authenticated: bool
    configured: bool


class CsrfTokenResponse(BaseModel):
    """CSRF token to echo in the X-CSRF-Token header."""
    token: str
