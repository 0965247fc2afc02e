# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Admin login/logout, login status and CSRF token retrieval.
#
# Login and logout are CSRF-protected but need no prior session; they are
# the AuthGate transitions.
# =============================================================================

import logging

from fastapi import APIRouter, Depends, Request

from app.auth.csrf import CsrfGuard
from app.auth.dependencies import get_auth_gate, get_session, verify_csrf
from app.auth.gate import AuthGate
from app.auth.models import (
    AuthStatusResponse,
    CsrfTokenResponse,
    LoginRequest,
    SessionRecord,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/csrf-token", response_model=CsrfTokenResponse)
async def get_csrf_token(
    session: SessionRecord = Depends(get_session),
) -> CsrfTokenResponse:
    """
    Get the CSRF token for this session.

    Send it back in the X-CSRF-Token header on every POST/PATCH/DELETE.
    """
    return CsrfTokenResponse(token=CsrfGuard.issue(session))


@router.post("/admin/login")
async def login(
    request: Request,
    payload: LoginRequest,
    session: SessionRecord = Depends(verify_csrf),
    gate: AuthGate = Depends(get_auth_gate),
) -> dict:
    """
    Log in with the admin key.

    Raises:
        403: If ADMIN_KEY is not configured
        401: If the key is wrong
    """
    request.state.session = gate.login(session, payload.key)
    return {"success": True}


@router.post("/admin/logout")
async def logout(
    request: Request,
    session: SessionRecord = Depends(verify_csrf),
    gate: AuthGate = Depends(get_auth_gate),
) -> dict:
    """
    Log out and discard the session.
    """
    gate.logout(session)
    request.state.session = None
    return {"success": True}


@router.get("/admin/status", response_model=AuthStatusResponse)
async def auth_status(
    session: SessionRecord = Depends(get_session),
    gate: AuthGate = Depends(get_auth_gate),
) -> AuthStatusResponse:
    """
    Whether this session is logged in, and whether admin login is configured.
    """
    return gate.status(session)
