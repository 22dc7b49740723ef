from __future__ import annotations

"""
CashGlitch: blueprint loader + shared JSON route helpers.

Blueprints are registered from an explicit list; every module exposes ``bp``.
"""

import logging
import re
from dataclasses import dataclass
from functools import wraps
from importlib import import_module
from typing import Any, Dict, Optional, Tuple

from flask import Flask, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from cashglitch.extensions import db

log = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


# ─── Blueprint registry ─────────────────────────────────────────────────────
@dataclass(frozen=True)
class BlueprintSpec:
    alias: str
    module: str
    attr: str = "bp"


BLUEPRINTS: Tuple[BlueprintSpec, ...] = (
    BlueprintSpec("content", "cashglitch.routes.content"),
    BlueprintSpec("auth", "cashglitch.routes.auth"),
    BlueprintSpec("payments", "cashglitch.routes.payments"),
    BlueprintSpec("admin", "cashglitch.admin.routes", "admin"),
    BlueprintSpec("admin_api", "cashglitch.admin.routes", "admin_api"),
    BlueprintSpec("pages", "cashglitch.admin.routes", "pages"),
)


def register_blueprints(app: Flask) -> None:
    for entry in BLUEPRINTS:
        bp = getattr(import_module(entry.module), entry.attr)
        app.register_blueprint(bp)
        log.debug("Registered blueprint %s (%s.%s)", entry.alias, entry.module, entry.attr)

    if app.debug:
        for rule in sorted(app.url_map.iter_rules(), key=lambda r: r.rule):
            log.debug("route %-40s %s", rule.rule, ",".join(sorted(rule.methods - {"HEAD", "OPTIONS"})))


# ─── Helpers ────────────────────────────────────────────────────────────────
def json_error(message: str, status: int):
    return jsonify({"error": message}), status


def handles_errors(message: str):
    """
    Log any unexpected failure in the wrapped view and answer 500 with a
    generic ``message``. HTTP exceptions (abort) pass through untouched.

        @bp.get("/blog")
        @handles_errors("Failed to fetch posts")
        def list_posts(): ...
    """

    def decorator(fn):
        @wraps(fn)
        def wrapped(*args, **kwargs):
            try:
                return fn(*args, **kwargs)
            except HTTPException:
                raise
            except Exception:
                current_app.logger.exception("%s (%s)", message, request.path)
                db.session.rollback()
                return json_error(message, 500)

        return wrapped

    return decorator


def get_payload() -> Dict[str, Any]:
    """JSON object body, or {} for anything else (bad JSON, arrays, form posts)."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def valid_email(value: Any) -> bool:
    return isinstance(value, str) and bool(EMAIL_RE.match(value.strip()))


def safe_redirect_path(target: Any) -> str:
    """Same-site absolute path or "/". Blocks //host and /\\host, which browsers treat as off-site."""
    if not isinstance(target, str) or not target.startswith("/"):
        return "/"
    if target[1:2] in ("/", "\\") or any(c in target for c in "\\\r\n\t"):
        return "/"
    return target


def client_ip() -> Optional[str]:
    # Prefer access_route (proxied deployments), fall back to remote_addr
    if request.access_route:
        return request.access_route[0]
    return request.remote_addr


def user_agent() -> Optional[str]:
    ua = request.user_agent
    return ua.string if ua and ua.string else None


def parse_int(value: Any) -> Optional[int]:
    """Query-string ints: '12' -> 12, anything else -> None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None
