"""Session store and access gate."""

from flask import make_response

from cashglitch.constants import AUTH_CONFIG
from cashglitch.services import (
    clear_session_cookie,
    get_session,
    grant_access,
    has_access,
    is_admin_email,
    set_session_cookie,
)


def test_no_session_by_default(app):
    with app.test_request_context("/"):
        assert get_session() is None


def test_set_session_preserves_case_and_flags_admin(app):
    with app.test_request_context("/"):
        set_session_cookie("Admin@CashGlitch.ORG")
        identity = get_session()
        assert identity is not None
        assert identity.email == "Admin@CashGlitch.ORG"
        assert identity.is_admin is True


def test_non_admin_session(app):
    with app.test_request_context("/"):
        set_session_cookie("someone@example.com")
        identity = get_session()
        assert identity.email == "someone@example.com"
        assert identity.is_admin is False


def test_clear_session(app):
    with app.test_request_context("/"):
        set_session_cookie("someone@example.com")
        clear_session_cookie()
        assert get_session() is None


def test_empty_admin_email_matches_nobody(app):
    app.config["ADMIN_EMAIL"] = ""
    with app.test_request_context("/"):
        assert is_admin_email("") is False
        assert is_admin_email("admin@cashglitch.org") is False
        set_session_cookie("admin@cashglitch.org")
        assert get_session().is_admin is False


def test_session_survives_round_trip_through_cookie(client, login):
    login(client, "Visitor@Example.com")
    data = client.get("/api/auth/session").get_json()
    assert data == {
        "authenticated": True,
        "hasAccess": True,
        "email": "Visitor@Example.com",
        "isAdmin": False,
    }


def test_tampered_cookie_reads_as_anonymous(client):
    client.set_cookie(AUTH_CONFIG.SESSION_COOKIE_NAME, "not-a-signed-value")
    data = client.get("/api/auth/session").get_json()
    assert data["authenticated"] is False
    assert data["email"] is None
    assert data["isAdmin"] is False


def test_access_cookie_is_independent_of_identity(client):
    client.set_cookie(AUTH_CONFIG.ACCESS_COOKIE_NAME, AUTH_CONFIG.ACCESS_GRANTED)
    data = client.get("/api/auth/session").get_json()
    assert data["hasAccess"] is True
    assert data["authenticated"] is False


def test_grant_access_sets_long_lived_httponly_cookie(app):
    with app.test_request_context("/"):
        assert has_access() is False
        resp = grant_access(make_response("ok"))
        header = next(h for h in resp.headers.getlist("Set-Cookie") if h.startswith(AUTH_CONFIG.ACCESS_COOKIE_NAME))
        assert "granted" in header
        assert "HttpOnly" in header
        assert "Max-Age=31536000" in header


def test_has_access_reads_request_cookie(app):
    cookie = f"{AUTH_CONFIG.ACCESS_COOKIE_NAME}={AUTH_CONFIG.ACCESS_GRANTED}"
    with app.test_request_context("/", headers={"Cookie": cookie}):
        assert has_access() is True
