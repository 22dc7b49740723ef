# cashglitch/routes/payments.py
from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from cashglitch.extensions import db
from cashglitch.services import get_session
from cashglitch.services.payments import PaymentError, PaymentService

from . import get_payload, json_error

bp = Blueprint("payments", __name__, url_prefix="/api")


def _checkout_failed(e: Exception):
    current_app.logger.exception("Checkout error: %s", e)
    return jsonify({"error": "Failed to create checkout session", "detail": str(e)}), 500


@bp.post("/donate")
def donate():
    try:
        return jsonify(PaymentService.create_donation_checkout(get_payload()))
    except PaymentError as e:
        return json_error(e.message, e.status_code)
    except Exception as e:  # noqa: BLE001
        return _checkout_failed(e)


@bp.post("/raffle/checkout")
def raffle_checkout():
    try:
        return jsonify(PaymentService.create_raffle_checkout(get_payload(), get_session()))
    except PaymentError as e:
        return json_error(e.message, e.status_code)
    except Exception as e:  # noqa: BLE001
        return _checkout_failed(e)


@bp.post("/stripe/webhooks")
def stripe_webhook():
    try:
        event = PaymentService.construct_event(
            request.get_data(), request.headers.get("Stripe-Signature")
        )
    except PaymentError as e:
        return json_error(e.message, e.status_code)

    try:
        PaymentService.handle_webhook_event(event)
    except Exception:  # noqa: BLE001
        current_app.logger.exception("Webhook handler error")
        db.session.rollback()
        return json_error("Webhook handler failed", 500)

    return jsonify({"received": True})
