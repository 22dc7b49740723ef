from __future__ import annotations

"""
CashGlitch: auth API (/api/auth/*)

Identity is the signed session cookie; site access is the separate
``cashglitch_access`` cookie. Both are set together on login and cleared
together on logout.
"""

from flask import Blueprint, current_app, jsonify

from cashglitch.services import (
    clear_session_cookie,
    get_session,
    grant_access,
    has_access,
    revoke_access,
    set_session_cookie,
)
from cashglitch.services.auth_tokens import (
    create_magic_link_token,
    send_magic_link_email,
    verify_magic_link_token,
)

from . import get_payload, handles_errors, json_error, safe_redirect_path, valid_email

bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@bp.post("/dev-login")
def dev_login():
    """Log in as any email without verification. Disabled in production."""
    if current_app.config.get("ENV") == "production":
        return json_error("Dev login is disabled in production", 403)
    return _dev_login()


@handles_errors("Dev login failed")
def _dev_login():
    email = get_payload().get("email")
    if not email or not isinstance(email, str):
        return json_error("Email is required", 400)

    identity = set_session_cookie(email)
    current_app.logger.info("[DEV LOGIN] %s (admin: %s)", identity.email, identity.is_admin)

    resp = jsonify(
        {
            "success": True,
            "email": identity.email,
            "isAdmin": identity.is_admin,
            "message": "Dev login successful",
        }
    )
    return grant_access(resp)


@bp.post("/logout")
@handles_errors("Failed to logout")
def logout():
    clear_session_cookie()
    # Dropping access too sends the visitor back through the gate
    return revoke_access(jsonify({"success": True}))


@bp.get("/session")
def session_status():
    identity = get_session()
    return jsonify(
        {
            "authenticated": identity is not None,
            "hasAccess": has_access(),
            "email": identity.email if identity else None,
            "isAdmin": identity.is_admin if identity else False,
        }
    )


@bp.post("/magic-link")
@handles_errors("Failed to send magic link")
def magic_link():
    payload = get_payload()
    email = payload.get("email")
    if not email or not isinstance(email, str):
        return json_error("Email is required", 400)
    if not valid_email(email):
        return json_error("Invalid email format", 400)

    token = create_magic_link_token(email)
    result = send_magic_link_email(email, token, safe_redirect_path(payload.get("redirect")))
    if not result.success:
        current_app.logger.error("Failed to send magic link: %s", result.error)
        return json_error("Failed to send email. Please try again.", 500)

    if result.dev_mode_url:
        return jsonify(
            {
                "success": True,
                "message": "Magic link generated (dev mode - check logs)",
                "devModeUrl": result.dev_mode_url,
            }
        )
    return jsonify({"success": True, "message": "Magic link sent"})


@bp.post("/verify")
@handles_errors("Failed to verify token")
def verify():
    token = get_payload().get("token")
    if not token or not isinstance(token, str):
        return json_error("Token is required", 400)

    email = verify_magic_link_token(token)
    if email is None:
        return json_error("Invalid or expired token", 400)

    identity = set_session_cookie(email)
    resp = jsonify({"success": True, "email": identity.email, "isAdmin": identity.is_admin})
    return grant_access(resp)
