"""Pytest configuration and fixtures."""

from types import SimpleNamespace

import pytest
import stripe

from cashglitch import create_app
from cashglitch.config import TestingConfig
from cashglitch.extensions import db

ADMIN_EMAIL = TestingConfig.ADMIN_EMAIL


@pytest.fixture
def app():
    """Fresh app bound to its own in-memory SQLite database."""
    app = create_app(TestingConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


def _login(client, email):
    resp = client.post("/api/auth/dev-login", json={"email": email})
    assert resp.status_code == 200, resp.get_json()
    return resp


@pytest.fixture
def login():
    """Log a test client in through the dev-login route: login(client, email)."""
    return _login


@pytest.fixture
def admin_client(client):
    _login(client, ADMIN_EMAIL)
    return client


@pytest.fixture
def user_client(client):
    _login(client, "visitor@example.com")
    return client


class FakeStripe:
    """Stands in for the stripe module stored in app.extensions["stripe"]."""

    def __init__(self):
        self.created = []
        self.event = None
        outer = self

        class _Session:
            @staticmethod
            def create(**kwargs):
                outer.created.append(kwargs)
                sid = f"cs_test_{len(outer.created)}"
                return {"id": sid, "url": f"https://checkout.stripe.test/{sid}"}

        class _Webhook:
            @staticmethod
            def construct_event(payload, signature, secret):
                if signature != "t=1,v1=valid":
                    raise ValueError("No signatures found matching the expected signature")
                # Real SDK objects, so handlers see what Stripe actually returns
                return stripe.Event.construct_from(outer.event, "sk_test")

        self.checkout = SimpleNamespace(Session=_Session)
        self.Webhook = _Webhook


@pytest.fixture
def fake_stripe(app):
    fake = FakeStripe()
    app.extensions["stripe"] = fake
    return fake
