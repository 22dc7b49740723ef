# cashglitch/services/payments.py
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import stripe
from flask import current_app
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from cashglitch.constants import (
    CURRENCY,
    DEFAULT_DONATION_CENTS,
    DONATION_AMOUNTS,
    MIN_DONATION_CENTS,
)
from cashglitch.extensions import db, get_stripe
from cashglitch.models import Donation, Sweepstake

from .content import initialize_donations, initialize_sweepstakes
from .session import SessionData


class PaymentError(ValueError):
    """A checkout request the caller can fix; carries the HTTP status to answer with."""

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class StripeNotConfigured(PaymentError):
    def __init__(self) -> None:
        super().__init__("Stripe is not configured", 503)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def resolve_donation_amount(amount: Any = None, custom_amount: Any = None) -> int:
    """customAmount (cents, >= $1) wins, then a preset amount, then the $25 default."""
    if isinstance(custom_amount, (int, float)) and not isinstance(custom_amount, bool):
        if custom_amount >= MIN_DONATION_CENTS:
            return int(custom_amount)
    if _is_int(amount) and amount in DONATION_AMOUNTS:
        return amount
    return DEFAULT_DONATION_CENTS


class PaymentService:
    """Stripe Checkout for donations and raffle tickets, plus webhook recording."""

    @staticmethod
    def _stripe():
        client = get_stripe(current_app)
        if client is None:
            raise StripeNotConfigured()
        return client

    @staticmethod
    def _app_url() -> str:
        return (current_app.config.get("APP_URL") or "https://cashglitch.org").strip().rstrip("/")

    # ---------------- DONATIONS ----------------
    @staticmethod
    def create_donation_checkout(data: Mapping[str, Any]) -> Dict[str, Any]:
        client = PaymentService._stripe()
        cents = resolve_donation_amount(data.get("amount"), data.get("customAmount"))
        app_url = PaymentService._app_url()

        checkout = client.checkout.Session.create(
            payment_method_types=["card"],
            line_items=[
                {
                    "price_data": {
                        "currency": CURRENCY,
                        "product_data": {
                            "name": "CashGlitch Donation",
                            "description": "Support the CashGlitch mission to connect people with free resources and opportunities",
                            "images": [f"{app_url}/images/logo-transparent.png"],
                        },
                        "unit_amount": cents,
                    },
                    "quantity": 1,
                }
            ],
            mode="payment",
            success_url=f"{app_url}/donate/success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{app_url}/donate/cancel",
            metadata={"donation_type": "one_time", "source": "website"},
        )
        current_app.logger.info("Donation checkout created (%s cents) id=%s", cents, checkout["id"])
        return {"sessionId": checkout["id"], "url": checkout["url"]}

    # ---------------- RAFFLE ----------------
    @staticmethod
    def create_raffle_checkout(data: Mapping[str, Any], session: Optional[SessionData]) -> Dict[str, Any]:
        client = PaymentService._stripe()
        if session is None:
            raise PaymentError("Login required to purchase raffle tickets", 401)

        sweepstake_id = data.get("sweepstakeId")
        ticket_count = data.get("ticketCount")
        if not _is_int(sweepstake_id) or not sweepstake_id or not _is_int(ticket_count) or ticket_count < 1:
            raise PaymentError("Valid sweepstakeId and ticketCount required")

        initialize_sweepstakes()
        sweepstake = db.session.scalars(
            select(Sweepstake).where(Sweepstake.id == sweepstake_id, Sweepstake.status == "active")
        ).first()
        if sweepstake is None:
            raise PaymentError("Sweepstake not found or inactive", 404)
        if not sweepstake.can_sell(ticket_count):
            raise PaymentError("Not enough tickets available")

        app_url = PaymentService._app_url()
        checkout = client.checkout.Session.create(
            payment_method_types=["card"],
            customer_email=session.email,
            line_items=[
                {
                    "price_data": {
                        "currency": CURRENCY,
                        "product_data": {
                            "name": f"Raffle Ticket: {sweepstake.title}",
                            "description": sweepstake.prize_description
                            or sweepstake.description
                            or "Raffle ticket",
                        },
                        "unit_amount": sweepstake.ticket_price_cents,
                    },
                    "quantity": ticket_count,
                }
            ],
            mode="payment",
            success_url=f"{app_url}/sweepstakes/success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{app_url}/sweepstakes/cancel",
            metadata={
                "purchase_type": "raffle",
                "sweepstake_id": str(sweepstake_id),
                "ticket_count": str(ticket_count),
                "buyer_email": session.email,
            },
        )
        current_app.logger.info(
            "Raffle checkout created sweepstake=%s tickets=%s id=%s",
            sweepstake_id,
            ticket_count,
            checkout["id"],
        )
        return {"sessionId": checkout["id"], "url": checkout["url"]}

    # ---------------- WEBHOOKS ----------------
    @staticmethod
    def construct_event(payload: bytes, signature: Optional[str]) -> Any:
        client = PaymentService._stripe()
        secret = current_app.config.get("STRIPE_WEBHOOK_SECRET")
        if not secret:
            current_app.logger.error("STRIPE_WEBHOOK_SECRET is not set")
            raise PaymentError("Webhook secret not configured", 500)
        if not signature:
            raise PaymentError("Missing stripe-signature header")
        try:
            event = client.Webhook.construct_event(payload, signature, secret)
        except (ValueError, stripe.SignatureVerificationError) as e:
            current_app.logger.warning("Webhook signature verification failed: %s", e)
            raise PaymentError(f"Webhook Error: {e}") from e
        # StripeObject is not a dict; hand plain nested dicts to the handler
        return event.to_dict()

    @staticmethod
    def handle_webhook_event(event: Mapping[str, Any]) -> Optional[Donation]:
        """
        Record one-time donation outcomes. Replays of the same Checkout
        session are ignored (stripe_session_id is unique).
        """
        event_type = event.get("type")
        if event_type not in ("checkout.session.completed", "checkout.session.expired"):
            return None

        obj = event["data"]["object"]
        metadata = dict(obj.get("metadata") or {})
        if metadata.get("donation_type") != "one_time":
            return None

        initialize_donations()
        existing = db.session.scalars(
            select(Donation).where(Donation.stripe_session_id == obj["id"])
        ).first()
        if existing is not None:
            return existing

        completed = event_type == "checkout.session.completed"
        details = (obj.get("customer_details") or {}) if completed else {}
        intent = obj.get("payment_intent") if completed else None

        donation = Donation(
            stripe_session_id=obj["id"],
            stripe_payment_intent=intent if isinstance(intent, str) else None,
            amount_cents=obj.get("amount_total") or 0,
            currency=obj.get("currency") or CURRENCY,
            donor_email=details.get("email"),
            donor_name=details.get("name"),
            status="completed" if completed else "expired",
            donation_type=metadata.get("donation_type") or "one_time",
            meta=metadata,
        )
        db.session.add(donation)
        try:
            db.session.commit()
        except IntegrityError:
            # Concurrent delivery of the same event won the insert
            db.session.rollback()
            return db.session.scalars(
                select(Donation).where(Donation.stripe_session_id == obj["id"])
            ).first()

        current_app.logger.info(
            "Donation recorded session=%s status=%s amount=%s",
            donation.stripe_session_id,
            donation.status,
            donation.amount_cents,
        )
        return donation
