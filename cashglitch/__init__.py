# cashglitch/__init__.py
# CashGlitch: Flask app factory
# - env-first config, fail-fast in production
# - proxy-correct (reverse proxy / platform router)
# - JSON error shape {"error": ...} for /api, HTML for pages

from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, List, Optional, Type, Union
from uuid import uuid4

import sentry_sdk
from dotenv import load_dotenv
from flask import Flask, g, has_request_context, jsonify, request
from flask_talisman import Talisman
from sentry_sdk.integrations.flask import FlaskIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from sqlalchemy import text
from werkzeug.exceptions import HTTPException, InternalServerError
from werkzeug.middleware.proxy_fix import ProxyFix
from werkzeug.utils import import_string

# IMPORTANT: never override real env vars in prod
load_dotenv(override=False)

from cashglitch.extensions import db, init_all_extensions  # noqa: E402

ConfigLike = Union[str, Type[Any]]

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s [rid=%(request_id)s %(method)s %(path)s]: %(message)s"

__all__ = ["create_app", "env_mode"]


# -----------------------------------------------------------------------------
# Config selection
# -----------------------------------------------------------------------------
_ENV_ALIASES = {"prod": "production", "dev": "development", "test": "testing"}


def env_mode() -> str:
    """First of APP_ENV / ENV / NODE_ENV / FLASK_ENV that is set; default development."""
    for key in ("APP_ENV", "ENV", "NODE_ENV", "FLASK_ENV"):
        name = (os.getenv(key) or "").strip().lower()
        if name:
            return _ENV_ALIASES.get(name, name)
    return "development"


def _load_config(target: Optional[ConfigLike]) -> Type[Any]:
    """
    Accepts a config class, a dotted path, or None. None falls back to
    FLASK_CONFIG, then to the class registered for the current env mode.
    """
    from cashglitch.config import CONFIG_BY_NAME, DevelopmentConfig

    target = target or (os.getenv("FLASK_CONFIG") or "").strip() or None
    if target is None:
        return CONFIG_BY_NAME.get(env_mode(), DevelopmentConfig)
    if isinstance(target, str):
        return import_string(target)
    return target


def _is_prod(app: Flask) -> bool:
    return str(app.config.get("ENV", "")).lower() == "production"


def _parse_cors_origins(raw: Optional[str]) -> Union[str, List[str]]:
    origins = [o.strip() for o in (raw or "").split(",") if o.strip()]
    if not origins or "*" in origins:
        return "*"
    return origins if len(origins) > 1 else origins[0]


# -----------------------------------------------------------------------------
# Logging: every record carries the request id, method and path
# -----------------------------------------------------------------------------
class _RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if has_request_context():
            record.request_id = g.get("request_id", "-")
            record.method = request.method
            record.path = request.path
        else:
            record.request_id = record.method = record.path = "-"
        return True


def _configure_logging(app: Flask) -> None:
    root = logging.getLogger()
    if not root.handlers:
        root.addHandler(logging.StreamHandler())

    for handler in root.handlers:
        if not any(isinstance(f, _RequestContextFilter) for f in handler.filters):
            handler.addFilter(_RequestContextFilter())
        handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root.setLevel(str(app.config.get("LOG_LEVEL", "INFO")).upper())
    logging.getLogger("werkzeug").setLevel(str(app.config.get("WERKZEUG_LOG_LEVEL", "WARNING")).upper())
    app.logger.info(
        "Config %s loaded (ENV=%s, DEBUG=%s)", app.config.get("CONFIG_NAME"), app.config.get("ENV"), app.debug
    )


# -----------------------------------------------------------------------------
# Middleware + integrations
# -----------------------------------------------------------------------------
def _apply_proxyfix(app: Flask) -> None:
    if app.config.get("TRUST_PROXY"):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1, x_prefix=1)
        app.logger.info("ProxyFix enabled; client IPs come from X-Forwarded-For")


def _init_sentry(app: Flask) -> None:
    dsn = app.config.get("SENTRY_DSN")
    if not dsn:
        return
    sentry_sdk.init(
        dsn=dsn,
        integrations=[
            FlaskIntegration(),
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
            SqlalchemyIntegration(),
        ],
        environment=app.config.get("ENV", "development"),
        traces_sample_rate=float(app.config.get("SENTRY_TRACES_SAMPLE_RATE") or 0.0),
        # Visitor emails and session cookies stay out of error reports
        send_default_pii=False,
        release=app.config.get("RELEASE"),
    )
    app.logger.info("Sentry enabled for %s", app.config.get("ENV"))


def _init_talisman(app: Flask) -> None:
    if not _is_prod(app):
        return
    # TLS is terminated upstream; inline scripts in the auth pages need CSP off
    Talisman(
        app,
        content_security_policy=None,
        force_https=False,
        session_cookie_secure=bool(app.config.get("SESSION_COOKIE_SECURE", True)),
    )


# -----------------------------------------------------------------------------
# Request lifecycle + errors
# -----------------------------------------------------------------------------
def _register_request_lifecycle(app: Flask) -> None:
    @app.before_request
    def _start_request():
        g.request_id = request.headers.get("X-Request-ID") or uuid4().hex
        g.started_at = time.perf_counter()

    @app.after_request
    def _finish_request(resp):
        resp.headers["X-Request-ID"] = g.get("request_id", "-")
        started = g.get("started_at")
        if started is not None:
            resp.headers["X-Response-Time-ms"] = str(int((time.perf_counter() - started) * 1000))
        return resp


def _wants_json() -> bool:
    if request.path.startswith("/api/"):
        return True
    accept = request.accept_mimetypes
    return accept["application/json"] > accept["text/html"]


def _error_body(message: str, status: int):
    payload: Dict[str, Any] = {"error": message}
    if g.get("request_id"):
        payload["requestId"] = g.request_id
    return jsonify(payload), status


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(HTTPException)
    def _http_error(err: HTTPException):
        if (err.code or 500) >= 400 and _wants_json():
            return _error_body(err.description or err.name, err.code or 500)
        return err

    @app.errorhandler(Exception)
    def _unhandled_error(err: Exception):
        app.logger.exception("Unhandled error")
        db.session.rollback()
        if _wants_json():
            return _error_body("Internal Server Error", 500)
        return InternalServerError()


# -----------------------------------------------------------------------------
# Health
# -----------------------------------------------------------------------------
def _database_ok(app: Flask) -> bool:
    try:
        db.session.execute(text("SELECT 1"))
        return True
    except Exception:  # noqa: BLE001
        app.logger.warning("Health check: database unreachable", exc_info=True)
        db.session.rollback()
        return False


def _register_health_endpoint(app: Flask) -> None:
    @app.get("/healthz")
    def healthz():
        database = _database_ok(app)
        body = {
            "status": "ok" if database else "degraded",
            "env": app.config.get("ENV", "unknown"),
            "database": database,
            "stripe": app.extensions.get("stripe") is not None,
            "request_id": g.get("request_id", "-"),
        }
        return jsonify(body), 200 if database else 503


# -----------------------------------------------------------------------------
# App Factory
# -----------------------------------------------------------------------------
def create_app(config_class: Optional[ConfigLike] = None) -> Flask:
    app = Flask(__name__, static_folder=None)

    cfg = _load_config(config_class)
    app.config.from_object(cfg)
    app.config["CONFIG_NAME"] = cfg.__name__
    cfg.init_app(app)
    app.url_map.strict_slashes = False

    _apply_proxyfix(app)
    _configure_logging(app)
    _init_sentry(app)
    _init_talisman(app)

    # db, mail, stripe, cors
    init_all_extensions(app, cors_origins=_parse_cors_origins(app.config.get("CORS_ORIGINS")))

    _register_request_lifecycle(app)
    _register_error_handlers(app)

    from cashglitch.cli import content_cli
    from cashglitch.routes import register_blueprints

    register_blueprints(app)
    _register_health_endpoint(app)
    app.cli.add_command(content_cli)

    return app
