# =============================================================================
# tests/test_auth.py - Session, Login Gate and CSRF Tests
# =============================================================================
# Unit tests for SessionStore / AuthGate / CsrfGuard, plus API tests for
# the admin endpoints and the write gate (401 before 403).
#
# Run with: pytest tests/test_auth.py -v
# =============================================================================

import pytest

from app.auth import (
    AuthGate,
    AuthState,
    CsrfGuard,
    SessionStore,
    get_auth_gate,
    get_session_store,
)
from app.config import settings
from app.exceptions import AdminNotConfiguredError, CsrfRejectedError, UnauthorizedError
from tests.conftest import csrf_headers, login

SECRET = "unit-test-secret-key-0123456789"


class FakeClock:
    """Manually advanced clock for expiry tests."""

    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


# =============================================================================
# SessionStore Tests
# =============================================================================

class TestSessionStore:
    """Tests for SessionStore."""

    def test_new_session_is_anonymous_and_not_stored(self):
        store = SessionStore(SECRET, max_age_seconds=60)

        session = store.create()

        assert session.state == AuthState.UNAUTHENTICATED
        assert session.csrf_token is None
        assert store.get(session.id) is None
        assert len(store) == 0

    def test_anonymous_session_round_trips_through_cookie(self):
        """Id and CSRF token come back from the signed token alone."""
        store = SessionStore(SECRET, max_age_seconds=3600)
        session = store.create()
        token = CsrfGuard.issue(session)

        resolved = store.resolve(store.encode(session))

        assert resolved.id == session.id
        assert resolved.csrf_token == token
        assert not resolved.authenticated
        assert len(store) == 0

    def test_stored_session_expires(self):
        clock = FakeClock()
        store = SessionStore(SECRET, max_age_seconds=60, clock=clock)
        session = store.rotate(store.create())

        clock.now += 61

        assert store.get(session.id) is None
        assert len(store) == 0

    def test_rotate_prunes_expired_sessions(self):
        clock = FakeClock()
        store = SessionStore(SECRET, max_age_seconds=60, clock=clock)
        store.rotate(store.create())
        store.rotate(store.create())

        clock.now += 120
        store.rotate(store.create())

        assert len(store) == 1

    def test_token_round_trip_for_stored_session(self):
        store = SessionStore(SECRET, max_age_seconds=3600)
        session = store.rotate(store.create())

        token = store.encode(session)

        assert store.decode(token) == session.id
        assert store.resolve(token) is session

    def test_token_signed_with_other_key_is_rejected(self):
        store = SessionStore(SECRET, max_age_seconds=3600)
        other = SessionStore("another-secret-key-9876543210", max_age_seconds=3600)
        token = other.encode(other.create())

        assert store.decode(token) is None

    def test_garbage_token_resolves_to_new_session(self):
        store = SessionStore(SECRET, max_age_seconds=3600)

        session = store.resolve("not-a-jwt")

        assert session.state == AuthState.UNAUTHENTICATED
        assert len(store) == 0

    def test_destroyed_session_token_is_no_longer_authenticated(self):
        store = SessionStore(SECRET, max_age_seconds=3600)
        session = store.rotate(store.create())
        session.state = AuthState.AUTHENTICATED
        token = store.encode(session)

        store.destroy(session.id)

        assert not store.resolve(token).authenticated

    def test_rotate_keeps_state_and_csrf_token(self):
        store = SessionStore(SECRET, max_age_seconds=3600)
        session = store.create()
        token = CsrfGuard.issue(session)

        rotated = store.rotate(session)

        assert rotated.id != session.id
        assert rotated.csrf_token == token
        assert store.get(session.id) is None
        assert store.get(rotated.id) is rotated


# =============================================================================
# AuthGate Tests
# =============================================================================

class TestAuthGate:
    """Tests for the admin login state machine."""

    def test_login_with_correct_key(self):
        sessions = SessionStore(SECRET, max_age_seconds=3600)
        gate = AuthGate(sessions, admin_key="s3cret")

        session = gate.login(sessions.create(), "s3cret")

        assert session.authenticated
        AuthGate.require(session)

    @pytest.mark.parametrize("key", [None, "", "wrong", "s3cret ", "S3CRET"])
    def test_login_with_wrong_key(self, key):
        sessions = SessionStore(SECRET, max_age_seconds=3600)
        gate = AuthGate(sessions, admin_key="s3cret")
        session = sessions.create()

        with pytest.raises(UnauthorizedError):
            gate.login(session, key)

        assert not session.authenticated

    @pytest.mark.parametrize("admin_key", [None, ""])
    def test_login_without_configured_key(self, admin_key):
        sessions = SessionStore(SECRET, max_age_seconds=3600)
        gate = AuthGate(sessions, admin_key=admin_key)

        with pytest.raises(AdminNotConfiguredError):
            gate.login(sessions.create(), "anything")

        assert not gate.configured

    def test_logout_destroys_session(self):
        sessions = SessionStore(SECRET, max_age_seconds=3600)
        gate = AuthGate(sessions, admin_key="s3cret")
        session = gate.login(sessions.create(), "s3cret")

        gate.logout(session)

        assert sessions.get(session.id) is None

    def test_require_rejects_anonymous_session(self):
        sessions = SessionStore(SECRET, max_age_seconds=3600)

        with pytest.raises(UnauthorizedError):
            AuthGate.require(sessions.create())


# =============================================================================
# CsrfGuard Tests
# =============================================================================

class TestCsrfGuard:
    """Tests for double-submit token verification."""

    @pytest.fixture
    def session(self):
        return SessionStore(SECRET, max_age_seconds=3600).create()

    def test_issue_is_idempotent(self, session):
        assert CsrfGuard.issue(session) == CsrfGuard.issue(session)

    def test_matching_tokens_pass(self, session):
        token = CsrfGuard.issue(session)

        CsrfGuard.verify(session, cookie_token=token, header_token=token)

    @pytest.mark.parametrize("cookie,header,reason", [
        ("t", None, "missing token header"),
        (None, "t", "missing token cookie"),
    ])
    def test_missing_tokens(self, session, cookie, header, reason):
        CsrfGuard.issue(session)

        with pytest.raises(CsrfRejectedError) as exc_info:
            CsrfGuard.verify(session, cookie_token=cookie, header_token=header)

        assert exc_info.value.details["reason"] == reason

    def test_no_token_issued(self, session):
        with pytest.raises(CsrfRejectedError) as exc_info:
            CsrfGuard.verify(session, cookie_token="t", header_token="t")

        assert exc_info.value.details["reason"] == "no token issued for this session"

    def test_stale_token_is_rejected(self, session):
        """A token from another session matches neither the session's token."""
        CsrfGuard.issue(session)

        with pytest.raises(CsrfRejectedError) as exc_info:
            CsrfGuard.verify(session, cookie_token="stale", header_token="stale")

        assert exc_info.value.details["reason"] == "token mismatch"


# =============================================================================
# Admin Endpoint Tests
# =============================================================================

class TestAdminEndpoints:
    """API tests for /api/admin/* and /api/csrf-token."""

    def test_csrf_token_endpoint_sets_cookies(self, client):
        response = client.get("/api/csrf-token")

        assert response.status_code == 200
        token = response.json()["token"]
        assert client.cookies.get(settings.CSRF_COOKIE_NAME) == token
        assert client.cookies.get(settings.SESSION_COOKIE_NAME)
        set_cookies = " ".join(response.headers.get_list("set-cookie"))
        assert "HttpOnly" in set_cookies

    def test_csrf_token_is_stable_within_session(self, client):
        first = client.get("/api/csrf-token").json()["token"]
        second = client.get("/api/csrf-token").json()["token"]

        assert first == second

    def test_login_and_status(self, client):
        before = client.get("/api/admin/status").json()
        old_cookie = client.cookies.get(settings.SESSION_COOKIE_NAME)

        login(client)

        after = client.get("/api/admin/status").json()
        assert before == {"authenticated": False, "configured": True}
        assert after == {"authenticated": True, "configured": True}
        # Login moves the session to a new id
        assert client.cookies.get(settings.SESSION_COOKIE_NAME) != old_cookie

    def test_login_with_wrong_key(self, client):
        headers = csrf_headers(client)

        response = client.post("/api/admin/login", json={"key": "wrong"}, headers=headers)

        assert response.status_code == 401
        assert response.json()["code"] == "UNAUTHORIZED"

    def test_login_requires_csrf(self, client):
        client.get("/api/csrf-token")

        response = client.post("/api/admin/login", json={"key": settings.ADMIN_KEY})

        assert response.status_code == 403
        assert response.json()["code"] == "CSRF_REJECTED"

    def test_login_without_configured_key(self, client):
        from app.main import app

        app.dependency_overrides[get_auth_gate] = lambda: AuthGate(get_session_store(), None)
        headers = csrf_headers(client)

        response = client.post("/api/admin/login", json={"key": "anything"}, headers=headers)

        assert response.status_code == 403
        assert response.json()["code"] == "ADMIN_NOT_CONFIGURED"

    def test_logout(self, client, admin_headers):
        response = client.post("/api/admin/logout", headers=admin_headers)

        assert response.status_code == 200
        assert client.get("/api/admin/status").json()["authenticated"] is False
        # The old CSRF token belonged to the discarded session
        stale = client.post(
            "/api/projects",
            json={"title": "A", "description": "a"},
            headers=admin_headers,
        )
        assert stale.status_code == 401


# =============================================================================
# Session Retention Tests
# =============================================================================

class TestSessionRetention:
    """Only logged-in sessions are held server-side."""

    def test_cookieless_requests_store_no_sessions(self, client):
        # Arrange
        sessions = get_session_store()
        before = len(sessions)

        # Act: Every request arrives without cookies, like a crawler or load balancer check
        for _ in range(200):
            client.cookies.clear()
            assert client.get("/api/health").status_code == 200

        # Assert
        assert len(sessions) == before

    def test_anonymous_csrf_flow_stores_no_sessions(self, client):
        sessions = get_session_store()
        before = len(sessions)

        first = csrf_headers(client)
        second = csrf_headers(client)

        assert first == second
        assert len(sessions) == before

    def test_login_stores_one_session_and_logout_releases_it(self, client):
        sessions = get_session_store()
        before = len(sessions)

        headers = login(client)
        assert len(sessions) == before + 1

        client.post("/api/admin/logout", headers=headers)
        assert len(sessions) == before


# =============================================================================
# Write Gate Tests
# =============================================================================

class TestWriteGate:
    """Every mutating endpoint checks auth first, then CSRF."""

    WRITES = [
        ("post", "/api/projects", {"json": {"title": "A", "description": "a"}}),
        ("patch", "/api/projects/some-id", {"json": {"title": "A"}}),
        ("delete", "/api/projects/some-id", {}),
        ("post", "/api/profile", {"data": {"name": "Ada"}}),
        ("post", "/api/projects/upload-image", {}),
    ]

    @pytest.mark.parametrize("method,path,kwargs", WRITES)
    def test_anonymous_write_is_unauthorized(self, client, method, path, kwargs):
        headers = csrf_headers(client)

        response = getattr(client, method)(path, headers=headers, **kwargs)

        assert response.status_code == 401
        assert response.json()["code"] == "UNAUTHORIZED"

    @pytest.mark.parametrize("method,path,kwargs", WRITES)
    def test_authenticated_write_without_csrf_header_is_forbidden(self, client, method, path, kwargs):
        login(client)

        response = getattr(client, method)(path, **kwargs)

        assert response.status_code == 403
        assert response.json()["code"] == "CSRF_REJECTED"

    def test_authenticated_write_with_wrong_token_is_forbidden(self, client):
        login(client)

        response = client.post(
            "/api/projects",
            json={"title": "A", "description": "a"},
            headers={"X-CSRF-Token": "stale-token"},
        )

        assert response.status_code == 403
        assert response.json()["details"]["reason"] == "token mismatch"

    def test_auth_is_checked_before_body_validation(self, client):
        headers = csrf_headers(client)

        response = client.post("/api/projects", json={"title": ""}, headers=headers)

        assert response.status_code == 401

    def test_authenticated_write_with_token_succeeds(self, client, admin_headers):
        response = client.post(
            "/api/projects",
            json={"title": "A", "description": "a"},
            headers=admin_headers,
        )

        assert response.status_code == 200
