# cashglitch/extensions.py
# Extension singletons, bound to the app in create_app() via init_all_extensions().

from typing import Any, Optional

import stripe
from flask_cors import CORS
from flask_mail import Mail
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
mail = Mail()
cors = CORS()

_STRIPE_KEY = "stripe"


# ─────────────────────────────────────────────────────────────
# Stripe
# ─────────────────────────────────────────────────────────────
def stripe_mode(api_key: Optional[str]) -> str:
    """'live', 'test', 'disabled' or 'unknown', judged from the key prefix."""
    if not api_key:
        return "disabled"
    prefix = api_key.split("_", 2)[:2]
    if len(prefix) == 2 and prefix[0] in ("sk", "rk") and prefix[1] in ("live", "test"):
        return prefix[1]
    return "unknown"


def init_stripe(app: Any) -> None:
    """
    Payments are optional. Without STRIPE_SECRET_KEY the extension slot
    holds None and the payment routes answer 503.
    """
    api_key = (app.config.get("STRIPE_SECRET_KEY") or "").strip()
    mode = stripe_mode(api_key)

    if mode == "disabled":
        app.logger.warning("Stripe disabled: STRIPE_SECRET_KEY is not set")
        app.extensions[_STRIPE_KEY] = None
        return

    stripe.api_key = api_key
    app.extensions[_STRIPE_KEY] = stripe
    app.logger.info("Stripe ready (%s mode)", mode)


def get_stripe(app: Any) -> Any:
    return app.extensions.get(_STRIPE_KEY)


# ─────────────────────────────────────────────────────────────
# Wiring
# ─────────────────────────────────────────────────────────────
def init_all_extensions(app: Any, *, cors_origins: Any = "*") -> None:
    db.init_app(app)
    mail.init_app(app)
    init_stripe(app)

    # Credentialed CORS is only allowed with explicit origins
    cors.init_app(
        app,
        resources={r"/api/*": {"origins": cors_origins}},
        supports_credentials=cors_origins != "*",
        allow_headers=["Content-Type", "Stripe-Signature", "X-Request-ID"],
        expose_headers=["X-Request-ID", "X-Response-Time-ms"],
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    )


__all__ = ["cors", "db", "get_stripe", "init_all_extensions", "init_stripe", "mail", "stripe_mode"]
