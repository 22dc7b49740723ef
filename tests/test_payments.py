"""Donations, raffle checkout and the Stripe webhook."""

import pytest
from sqlalchemy import select

from cashglitch.extensions import db, stripe_mode
from cashglitch.models import Donation, Sweepstake
from cashglitch.services import content as initializer
from cashglitch.services.payments import PaymentService, resolve_donation_amount

VALID_SIG = {"Stripe-Signature": "t=1,v1=valid"}


def _sweepstake(app, **kwargs):
    kwargs.setdefault("title", "Laptop Raffle")
    kwargs.setdefault("status", "active")
    with app.app_context():
        initializer.initialize_sweepstakes()
        row = Sweepstake(**kwargs)
        db.session.add(row)
        db.session.commit()
        return row.id


def _completed_event(session_id="cs_live_1", **overrides):
    obj = {
        "id": session_id,
        "amount_total": 2500,
        "currency": "usd",
        "payment_intent": "pi_123",
        "customer_details": {"email": "donor@example.com", "name": "Dee Donor"},
        "metadata": {"donation_type": "one_time", "source": "website"},
    }
    obj.update(overrides)
    return {"type": "checkout.session.completed", "data": {"object": obj}}


def _donations(app):
    with app.app_context():
        initializer.initialize_donations()
        return db.session.scalars(select(Donation)).all()


# ── Amount resolution ────────────────────────────────────────────────────────
@pytest.mark.parametrize(
    "amount, custom, expected",
    [
        (None, None, 2500),
        (1000, None, 1000),
        (1234, None, 2500),
        ("1000", None, 2500),
        (1000, 750, 750),
        (1000, 99, 1000),
        (None, 100, 100),
        (True, None, 2500),
    ],
)
def test_resolve_donation_amount(amount, custom, expected):
    assert resolve_donation_amount(amount, custom) == expected


# ── Stripe disabled ──────────────────────────────────────────────────────────
@pytest.mark.parametrize("path", ["/api/donate", "/api/raffle/checkout", "/api/stripe/webhooks"])
def test_payment_routes_503_without_stripe(client, path):
    resp = client.post(path, json={})
    assert resp.status_code == 503
    assert resp.get_json() == {"error": "Stripe is not configured"}


# ── Donations ────────────────────────────────────────────────────────────────
def test_donate_creates_checkout(client, fake_stripe):
    resp = client.post("/api/donate", json={"amount": 5000})
    assert resp.status_code == 200
    assert resp.get_json() == {
        "sessionId": "cs_test_1",
        "url": "https://checkout.stripe.test/cs_test_1",
    }

    kwargs = fake_stripe.created[0]
    assert kwargs["mode"] == "payment"
    assert kwargs["line_items"][0]["price_data"]["unit_amount"] == 5000
    assert kwargs["metadata"] == {"donation_type": "one_time", "source": "website"}
    assert kwargs["success_url"] == "http://localhost/donate/success?session_id={CHECKOUT_SESSION_ID}"


def test_donate_stripe_failure_is_500(client, fake_stripe, monkeypatch):
    def _fail(**kwargs):
        raise RuntimeError("card network down")

    monkeypatch.setattr(fake_stripe.checkout.Session, "create", _fail)
    resp = client.post("/api/donate", json={})
    assert resp.status_code == 500
    assert resp.get_json()["error"] == "Failed to create checkout session"


# ── Raffle ───────────────────────────────────────────────────────────────────
def test_raffle_requires_login(client, fake_stripe):
    resp = client.post("/api/raffle/checkout", json={"sweepstakeId": 1, "ticketCount": 1})
    assert resp.status_code == 401
    assert not fake_stripe.created


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"sweepstakeId": 1},
        {"sweepstakeId": 1, "ticketCount": 0},
        {"sweepstakeId": "1", "ticketCount": 1},
        {"sweepstakeId": 1, "ticketCount": True},
    ],
)
def test_raffle_validates_body(user_client, fake_stripe, body):
    resp = user_client.post("/api/raffle/checkout", json=body)
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Valid sweepstakeId and ticketCount required"}


def test_raffle_unknown_or_inactive_sweepstake(app, user_client, fake_stripe):
    draft_id = _sweepstake(app, status="draft")
    for sid in (draft_id, 9999):
        resp = user_client.post("/api/raffle/checkout", json={"sweepstakeId": sid, "ticketCount": 1})
        assert resp.status_code == 404


def test_raffle_not_enough_tickets(app, user_client, fake_stripe):
    sid = _sweepstake(app, max_tickets=10, tickets_sold=9)
    resp = user_client.post("/api/raffle/checkout", json={"sweepstakeId": sid, "ticketCount": 2})
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Not enough tickets available"}
    assert not fake_stripe.created


def test_raffle_checkout(app, user_client, fake_stripe):
    sid = _sweepstake(app, ticket_price_cents=500, prize_description="A new laptop")
    resp = user_client.post("/api/raffle/checkout", json={"sweepstakeId": sid, "ticketCount": 3})
    assert resp.status_code == 200
    assert resp.get_json()["sessionId"] == "cs_test_1"

    kwargs = fake_stripe.created[0]
    assert kwargs["customer_email"] == "visitor@example.com"
    item = kwargs["line_items"][0]
    assert item["quantity"] == 3
    assert item["price_data"]["unit_amount"] == 500
    assert item["price_data"]["product_data"]["name"] == "Raffle Ticket: Laptop Raffle"
    assert kwargs["metadata"] == {
        "purchase_type": "raffle",
        "sweepstake_id": str(sid),
        "ticket_count": "3",
        "buyer_email": "visitor@example.com",
    }


# ── Webhook ──────────────────────────────────────────────────────────────────
def test_webhook_without_secret_is_500(client, fake_stripe):
    resp = client.post("/api/stripe/webhooks", data=b"{}", headers=VALID_SIG)
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Webhook secret not configured"}


def test_webhook_signature_checks(app, client, fake_stripe):
    app.config["STRIPE_WEBHOOK_SECRET"] = "whsec_test"
    missing = client.post("/api/stripe/webhooks", data=b"{}")
    assert missing.status_code == 400
    assert missing.get_json() == {"error": "Missing stripe-signature header"}

    bad = client.post("/api/stripe/webhooks", data=b"{}", headers={"Stripe-Signature": "t=1,v1=forged"})
    assert bad.status_code == 400
    assert bad.get_json()["error"].startswith("Webhook Error:")


def test_webhook_records_completed_donation_once(app, client, fake_stripe):
    app.config["STRIPE_WEBHOOK_SECRET"] = "whsec_test"
    fake_stripe.event = _completed_event()

    for _ in range(2):
        resp = client.post("/api/stripe/webhooks", data=b"{}", headers=VALID_SIG)
        assert resp.status_code == 200
        assert resp.get_json() == {"received": True}

    rows = _donations(app)
    assert len(rows) == 1
    donation = rows[0]
    assert donation.stripe_session_id == "cs_live_1"
    assert donation.stripe_payment_intent == "pi_123"
    assert donation.amount_cents == 2500
    assert donation.donor_email == "donor@example.com"
    assert donation.donor_name == "Dee Donor"
    assert donation.status == "completed"
    assert donation.meta == {"donation_type": "one_time", "source": "website"}


def test_construct_event_returns_plain_dicts(app, fake_stripe):
    app.config["STRIPE_WEBHOOK_SECRET"] = "whsec_test"
    fake_stripe.event = _completed_event("cs_live_9")

    with app.test_request_context():
        event = PaymentService.construct_event(b"{}", VALID_SIG["Stripe-Signature"])

    assert type(event) is dict
    obj = event["data"]["object"]
    assert type(obj) is dict
    assert type(obj["metadata"]) is dict
    assert obj["customer_details"]["email"] == "donor@example.com"


def test_webhook_records_expired_session(app, client, fake_stripe):
    app.config["STRIPE_WEBHOOK_SECRET"] = "whsec_test"
    event = _completed_event("cs_live_2")
    event["type"] = "checkout.session.expired"
    fake_stripe.event = event

    assert client.post("/api/stripe/webhooks", data=b"{}", headers=VALID_SIG).status_code == 200
    (donation,) = _donations(app)
    assert donation.status == "expired"
    assert donation.donor_email is None
    assert donation.stripe_payment_intent is None


@pytest.mark.parametrize(
    "event",
    [
        _completed_event(metadata={"purchase_type": "raffle", "sweepstake_id": "1"}),
        {"type": "payment_intent.succeeded", "data": {"object": {"id": "pi_1"}}},
    ],
)
def test_webhook_ignores_other_events(app, client, fake_stripe, event):
    app.config["STRIPE_WEBHOOK_SECRET"] = "whsec_test"
    fake_stripe.event = event
    assert client.post("/api/stripe/webhooks", data=b"{}", headers=VALID_SIG).status_code == 200
    assert _donations(app) == []


def test_raffle_webhook_does_not_touch_tickets_sold(app, client, fake_stripe):
    app.config["STRIPE_WEBHOOK_SECRET"] = "whsec_test"
    sid = _sweepstake(app, max_tickets=10)
    fake_stripe.event = _completed_event(
        metadata={"purchase_type": "raffle", "sweepstake_id": str(sid), "ticket_count": "2"}
    )
    client.post("/api/stripe/webhooks", data=b"{}", headers=VALID_SIG)

    with app.app_context():
        assert db.session.get(Sweepstake, sid).tickets_sold == 0
    assert _donations(app) == []


@pytest.mark.parametrize(
    "key, mode",
    [("", "disabled"), (None, "disabled"), ("sk_live_abc", "live"), ("rk_test_abc", "test"), ("pk_test_abc", "unknown")],
)
def test_stripe_mode(key, mode):
    assert stripe_mode(key) == mode
