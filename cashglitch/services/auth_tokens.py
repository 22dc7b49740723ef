"""
Magic-link login: one-time tokens stored in ``auth_tokens`` and the email
that delivers them. Without MAIL_SERVER the link is logged and handed back
to the caller instead of being sent, except in production.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
from urllib.parse import urlencode

from flask import current_app, render_template
from flask_mail import Message
from sqlalchemy import select

from cashglitch.constants import AUTH_CONFIG
from cashglitch.extensions import db, mail
from cashglitch.models import AuthToken

from .content import initialize_auth_tokens

TOKEN_BYTES = 24  # 32 url-safe characters


@dataclass(frozen=True)
class MagicLinkResult:
    success: bool
    error: Optional[str] = None
    dev_mode_url: Optional[str] = None


def generate_token() -> str:
    return secrets.token_urlsafe(TOKEN_BYTES)


def create_magic_link_token(email: str) -> str:
    initialize_auth_tokens()

    token = generate_token()
    db.session.add(
        AuthToken(
            email=email.strip().lower(),
            token=token,
            expires_at=datetime.utcnow() + timedelta(minutes=AUTH_CONFIG.TOKEN_EXPIRY_MINUTES),
        )
    )
    db.session.commit()
    return token


def verify_magic_link_token(token: str) -> Optional[str]:
    """
    Consume ``token`` and return its email, or None when it is unknown,
    expired or already used.
    """
    initialize_auth_tokens()

    now = datetime.utcnow()
    row = db.session.scalars(
        select(AuthToken)
        .where(AuthToken.token == token, AuthToken.used_at.is_(None), AuthToken.expires_at > now)
        .limit(1)
    ).first()
    if row is None:
        return None

    row.used_at = now
    db.session.commit()
    return row.email


def magic_link_url(token: str, redirect_to: str = "/") -> str:
    base = (current_app.config.get("APP_URL") or "http://localhost:5000").rstrip("/")
    query = {"token": token}
    if redirect_to != "/":
        query["redirect"] = redirect_to
    return f"{base}/verify?{urlencode(query)}"


def send_magic_link_email(email: str, token: str, redirect_to: str = "/") -> MagicLinkResult:
    url = magic_link_url(token, redirect_to)
    log = current_app.logger

    if not current_app.config.get("MAIL_SERVER"):
        # Handing the link back is an unverified login; production must mail it
        if current_app.config.get("ENV") == "production":
            log.error("MAIL_SERVER is not set; refusing to return a magic link in production")
            return MagicLinkResult(success=False, error="Mail is not configured")
        log.warning("DEV MODE magic link (no email sent) email=%s link=%s", email, url)
        return MagicLinkResult(success=True, dev_mode_url=url)

    ctx = {"magic_link_url": url, "expiry_minutes": AUTH_CONFIG.TOKEN_EXPIRY_MINUTES}
    msg = Message(
        subject="Your CashGlitch Access Link",
        recipients=[email],
        html=render_template("email/magic_link.html", **ctx),
        body=render_template("email/magic_link.txt", **ctx),
    )
    try:
        mail.send(msg)
    except Exception as e:  # noqa: BLE001
        log.exception("Magic link email failed", extra={"recipients": msg.recipients})
        return MagicLinkResult(success=False, error=str(e) or "Failed to send email")

    log.info("Magic link email sent", extra={"recipients": msg.recipients})
    return MagicLinkResult(success=True)
