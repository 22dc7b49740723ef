# cashglitch/config/config.py
# CashGlitch configuration. Every value can come from the environment; the
# defaults are only good enough for a laptop.

from __future__ import annotations

import logging
import os
from datetime import timedelta
from typing import Optional

from cashglitch.constants import AUTH_CONFIG

log = logging.getLogger(__name__)

_INSECURE_SECRET = "dev-change-me"


# ----------------------------
# Env readers
# ----------------------------
def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    """Stripped value of ``name``; blank counts as unset."""
    value = (os.environ.get(name) or "").strip()
    return value or default


def _flag(name: str, default: bool = False) -> bool:
    value = _env(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on", "y"}


def _int(name: str, default: int) -> int:
    value = _env(name)
    if value is None or not value.lstrip("-").isdigit():
        return default
    return int(value)


def _first_env(*names: str, default: Optional[str] = None) -> Optional[str]:
    for name in names:
        value = _env(name)
        if value:
            return value
    return default


def _database_uri(default: str) -> str:
    """
    DATABASE_URL wins over SQLALCHEMY_DATABASE_URI.
    Hosted Postgres providers still hand out postgres:// URLs, which
    SQLAlchemy no longer accepts.
    """
    uri = _first_env("DATABASE_URL", "SQLALCHEMY_DATABASE_URI", default=default)
    if uri.startswith("postgres://"):
        uri = "postgresql://" + uri[len("postgres://"):]
    return uri


# ----------------------------
# Config classes
# ----------------------------
class BaseConfig:
    ENV = (_first_env("APP_ENV", "ENV", "NODE_ENV", "FLASK_ENV", default="base")).lower()
    DEBUG = _flag("FLASK_DEBUG")
    TESTING = _flag("TESTING")

    # ── Identity ──────────────────────────────────────────────
    SECRET_KEY = _env("SECRET_KEY", _INSECURE_SECRET)
    # The one address that gets an admin session; blank means no admin
    ADMIN_EMAIL = _env("ADMIN_EMAIL", "")

    # Flask signs this cookie with SECRET_KEY
    SESSION_COOKIE_NAME = AUTH_CONFIG.SESSION_COOKIE_NAME
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = _env("SESSION_COOKIE_SAMESITE", "Lax")
    SESSION_COOKIE_SECURE = True
    PERMANENT_SESSION_LIFETIME = timedelta(days=AUTH_CONFIG.SESSION_EXPIRY_DAYS)

    # ── URLs / proxy ──────────────────────────────────────────
    # Magic links and Stripe return URLs are built from APP_URL
    APP_URL = (_first_env("APP_URL", "PUBLIC_BASE_URL", default="https://cashglitch.org")).rstrip("/")
    PREFERRED_URL_SCHEME = _env("PREFERRED_URL_SCHEME", "https")
    TRUST_PROXY = _flag("TRUST_PROXY")

    # ── Database ──────────────────────────────────────────────
    SQLALCHEMY_DATABASE_URI = _database_uri("sqlite:///cashglitch-dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}

    # ── Stripe ────────────────────────────────────────────────
    STRIPE_SECRET_KEY = _env("STRIPE_SECRET_KEY", "")
    STRIPE_WEBHOOK_SECRET = _env("STRIPE_WEBHOOK_SECRET", "")

    # ── Mail (magic links) ────────────────────────────────────
    # No MAIL_SERVER means dev mode: links are logged, not sent
    MAIL_SERVER = _env("MAIL_SERVER", "")
    MAIL_PORT = _int("MAIL_PORT", 587)
    MAIL_USE_TLS = _flag("MAIL_USE_TLS", True)
    MAIL_USE_SSL = _flag("MAIL_USE_SSL")
    MAIL_USERNAME = _env("MAIL_USERNAME")
    MAIL_PASSWORD = _env("MAIL_PASSWORD")
    MAIL_DEFAULT_SENDER = _env("MAIL_DEFAULT_SENDER", "CashGlitch <no-reply@cashglitch.org>")

    # ── Observability / CORS ──────────────────────────────────
    LOG_LEVEL = _env("LOG_LEVEL", "INFO")
    WERKZEUG_LOG_LEVEL = _env("WERKZEUG_LOG_LEVEL", "WARNING")
    SENTRY_DSN = _env("SENTRY_DSN")
    SENTRY_TRACES_SAMPLE_RATE = _env("SENTRY_TRACES_SAMPLE_RATE", "0.0")
    RELEASE = _first_env("GIT_COMMIT", "RELEASE")
    CORS_ORIGINS = _env("CORS_ORIGINS", "*")

    JSON_SORT_KEYS = False

    @classmethod
    def init_app(cls, app) -> None:
        """Called by create_app() once the class has been loaded."""
        uri = str(app.config.get("SQLALCHEMY_DATABASE_URI") or "")
        if not uri.startswith("sqlite:"):
            return

        # The dev server hands the pooled SQLite connection across threads
        opts = dict(app.config.get("SQLALCHEMY_ENGINE_OPTIONS") or {})
        opts["connect_args"] = {"check_same_thread": False, **(opts.get("connect_args") or {})}
        app.config["SQLALCHEMY_ENGINE_OPTIONS"] = opts


class DevelopmentConfig(BaseConfig):
    ENV = "development"
    DEBUG = True

    SESSION_COOKIE_SECURE = False
    PREFERRED_URL_SCHEME = _env("PREFERRED_URL_SCHEME", "http")
    APP_URL = (_env("APP_URL", "http://localhost:5000")).rstrip("/")


class TestingConfig(BaseConfig):
    ENV = "testing"
    TESTING = True
    DEBUG = False

    SECRET_KEY = "testing-secret"
    ADMIN_EMAIL = "admin@cashglitch.org"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SESSION_COOKIE_SECURE = False
    APP_URL = "http://localhost"

    STRIPE_SECRET_KEY = ""
    STRIPE_WEBHOOK_SECRET = ""
    MAIL_SERVER = ""
    MAIL_SUPPRESS_SEND = True
    SENTRY_DSN = None


class ProductionConfig(BaseConfig):
    ENV = "production"
    DEBUG = False

    SESSION_COOKIE_SECURE = True
    PREFERRED_URL_SCHEME = "https"
    TRUST_PROXY = _flag("TRUST_PROXY", True)

    @classmethod
    def init_app(cls, app) -> None:
        super().init_app(app)

        # Refuse to boot with settings that would leak sessions
        if app.config.get("SECRET_KEY") in (None, "", _INSECURE_SECRET):
            raise RuntimeError("SECRET_KEY must be set to a strong random value in production.")
        if str(app.config.get("APP_URL") or "").startswith("http://"):
            raise RuntimeError("APP_URL must be https:// in production.")
        if _flag("FLASK_DEBUG"):
            raise RuntimeError("FLASK_DEBUG must be 0 in production.")

        # Degraded but bootable
        if not app.config.get("ADMIN_EMAIL"):
            log.warning("ADMIN_EMAIL is not set; nobody can reach /admin")
        if not app.config.get("MAIL_SERVER"):
            log.warning("MAIL_SERVER is not set; magic-link login will answer 500")
        if app.config.get("STRIPE_SECRET_KEY") and not app.config.get("STRIPE_WEBHOOK_SECRET"):
            log.warning("STRIPE_WEBHOOK_SECRET is not set; Stripe webhooks will answer 500")
