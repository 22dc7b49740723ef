"""
Visitor identity and the site access gate.

Identity lives in Flask's signed session cookie (``cashglitch_session``):
``email`` plus an ``is_admin`` flag computed when the session is created.
The access gate is a separate plain cookie (``cashglitch_access=granted``)
that says nothing about who the visitor is.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from flask import current_app, request, session

from cashglitch.constants import AUTH_CONFIG

_EMAIL_KEY = "email"
_ADMIN_KEY = "is_admin"


@dataclass(frozen=True)
class SessionData:
    email: str
    is_admin: bool = False


def is_admin_email(email: Optional[str]) -> bool:
    admin = (current_app.config.get("ADMIN_EMAIL") or "").strip().lower()
    if not admin or not email:
        return False
    return email.strip().lower() == admin


def get_session() -> Optional[SessionData]:
    """Current identity, or None. Never raises; errors read as anonymous."""
    try:
        email = session.get(_EMAIL_KEY)
        if not isinstance(email, str) or not email:
            return None
        return SessionData(email=email, is_admin=bool(session.get(_ADMIN_KEY, False)))
    except Exception:  # noqa: BLE001
        current_app.logger.debug("session lookup failed", exc_info=True)
        return None


def set_session_cookie(email: str) -> SessionData:
    """Start a fresh 7-day session for ``email`` (case preserved)."""
    session.clear()
    session.permanent = True
    session[_EMAIL_KEY] = email
    session[_ADMIN_KEY] = is_admin_email(email)
    return SessionData(email=email, is_admin=session[_ADMIN_KEY])


def clear_session_cookie() -> None:
    # An emptied session makes Flask delete the cookie on the response
    session.clear()


def _cookie_secure() -> bool:
    return bool(current_app.config.get("SESSION_COOKIE_SECURE", False))


def has_access() -> bool:
    return request.cookies.get(AUTH_CONFIG.ACCESS_COOKIE_NAME) == AUTH_CONFIG.ACCESS_GRANTED


def grant_access(response):
    response.set_cookie(
        AUTH_CONFIG.ACCESS_COOKIE_NAME,
        AUTH_CONFIG.ACCESS_GRANTED,
        max_age=int(timedelta(days=AUTH_CONFIG.ACCESS_EXPIRY_DAYS).total_seconds()),
        path="/",
        httponly=True,
        secure=_cookie_secure(),
        samesite="Lax",
    )
    return response


def revoke_access(response):
    response.delete_cookie(
        AUTH_CONFIG.ACCESS_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=_cookie_secure(),
        samesite="Lax",
    )
    return response


__all__ = [
    "SessionData",
    "clear_session_cookie",
    "get_session",
    "grant_access",
    "has_access",
    "is_admin_email",
    "revoke_access",
    "set_session_cookie",
]
