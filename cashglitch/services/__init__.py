from .session import (
    SessionData,
    clear_session_cookie,
    get_session,
    grant_access,
    has_access,
    is_admin_email,
    revoke_access,
    set_session_cookie,
)

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
