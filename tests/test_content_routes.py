"""Public content API."""

from datetime import datetime, timedelta

import pytest
from sqlalchemy import select

from cashglitch.extensions import db
from cashglitch.models import BlogPost, Category, Subscriber, Sweepstake
from cashglitch.services import content as initializer


@pytest.fixture
def seeded(app):
    with app.app_context():
        initializer.initialize_and_seed()
    return app


def _add(app, *rows):
    with app.app_context():
        initializer.initialize_all_tables()
        db.session.add_all(rows)
        db.session.commit()
        return [r.id for r in rows]


# ── Blog ─────────────────────────────────────────────────────────────────────
def test_blog_lists_only_published_newest_first(app, client):
    now = datetime.utcnow()
    _add(
        app,
        BlogPost(slug="old", title="Old", content="x", published=True,
                 author_email="a@b.co", created_at=now - timedelta(days=2)),
        BlogPost(slug="new", title="New", content="x", published=True,
                 author_email="a@b.co", created_at=now),
        BlogPost(slug="draft", title="Draft", content="x", published=False, author_email="a@b.co"),
    )
    slugs = [p["slug"] for p in client.get("/api/blog").get_json()]
    assert slugs == ["new", "old"]


def test_blog_post_by_slug(app, client):
    _add(
        app,
        BlogPost(slug="hello", title="Hello", content="body", published=True, author_email="a@b.co"),
        BlogPost(slug="hidden", title="Hidden", content="body", published=False, author_email="a@b.co"),
    )
    post = client.get("/api/blog/hello").get_json()
    assert post["title"] == "Hello"
    assert post["authorEmail"] == "a@b.co"

    resp = client.get("/api/blog/hidden")
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Post not found"}


def test_blog_empty_table_is_created_on_demand(client):
    assert client.get("/api/blog").get_json() == []


# ── Categories ───────────────────────────────────────────────────────────────
def test_categories_seed_on_first_read(client):
    data = client.get("/api/categories").get_json()
    assert len(data) == 7
    assert data[0]["title"] == "NPO Directory"
    assert data[0]["icon"] == "Heart"
    assert "clickCount" not in data[0]


def test_inactive_categories_are_hidden(app, client):
    _add(
        app,
        Category(title="Shown", href="/a", sort_order=1),
        Category(title="Hidden", href="/b", is_active=False),
    )
    titles = [c["title"] for c in client.get("/api/categories").get_json()]
    assert titles == ["Shown"]


def test_track_increments_click_count(app, client):
    cid, other = _add(app, Category(title="Jobs", href="/jobs"), Category(title="Grants", href="/grants"))
    for _ in range(3):
        resp = client.post("/api/categories/track", json={"id": cid})
        assert resp.status_code == 200
        assert resp.get_json() == {"success": True}

    with app.app_context():
        assert db.session.get(Category, cid).click_count == 3
        assert db.session.get(Category, other).click_count == 0


@pytest.mark.parametrize("body", [{}, {"id": 0}, {"id": "1"}, {"id": True}, {"id": None}, {"id": 1.5}])
def test_track_rejects_invalid_ids(app, client, body):
    (cid,) = _add(app, Category(title="Jobs", href="/jobs"))
    resp = client.post("/api/categories/track", json=body)
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Valid category ID required"}

    with app.app_context():
        assert db.session.get(Category, cid).click_count == 0


def test_track_unknown_id_is_a_no_op(client):
    client.get("/api/categories")
    assert client.post("/api/categories/track", json={"id": 9999}).status_code == 200


# ── Sweepstakes / intro / settings ───────────────────────────────────────────
def test_sweepstakes_active_featured_first(app, client):
    now = datetime.utcnow()
    _add(
        app,
        Sweepstake(title="Older", status="active", created_at=now - timedelta(days=3)),
        Sweepstake(title="Newer", status="active", created_at=now - timedelta(days=1)),
        Sweepstake(title="Featured", status="active", is_featured=True, created_at=now - timedelta(days=5)),
        Sweepstake(title="Draft", status="draft", created_at=now),
        Sweepstake(title="Closed", status="closed", created_at=now),
    )
    titles = [s["title"] for s in client.get("/api/sweepstakes").get_json()]
    assert titles == ["Featured", "Newer", "Older"]


def test_intro_screens_seed(client):
    data = client.get("/api/intro-screens").get_json()
    assert [s["screenType"] for s in data] == ["question", "email"]
    assert data[0]["title"] == "Are you ok?"
    assert [o["value"] for o in data[0]["options"]] == ["yes", "no"]


def test_site_settings_defaults(client):
    data = client.get("/api/site-settings").get_json()
    assert data["siteTitle"] == "CashGlitch"
    assert data["featureBlog"] is True
    assert data["featureAccessGate"] is True
    assert data["instagramUrl"] == ""


# ── Editable pages ───────────────────────────────────────────────────────────
def test_page_content_by_slug(client):
    data = client.get("/api/page-content?slug=jobs").get_json()
    assert data["pageSlug"] == "jobs"
    assert data["heroTitle"] == "Jobs & Career Opportunities"


def test_page_content_errors(client):
    assert client.get("/api/page-content").status_code == 400
    assert client.get("/api/page-content?slug=nope").status_code == 404


def test_page_items_for_slug_featured_first(client):
    data = client.get("/api/page-items?slug=npo").get_json()
    assert [i["title"] for i in data] == ["Reparations Foundation", "Community Wealth Builders"]
    assert data[0]["tags"] == ["reparations", "advocacy"]
    assert client.get("/api/page-items").status_code == 400


# ── Subscribe ────────────────────────────────────────────────────────────────
def test_subscribe_upserts_by_lowercase_email(app, client):
    assert client.post("/api/subscribe", json={"email": "Fan@Example.com", "response": "yes"}).status_code == 200
    assert client.post("/api/subscribe", json={"email": "fan@example.com", "response": "no"}).status_code == 200
    # no response keeps the previous answer
    assert client.post("/api/subscribe", json={"email": "fan@example.com"}).status_code == 200

    with app.app_context():
        rows = db.session.scalars(select(Subscriber)).all()
        assert len(rows) == 1
        assert rows[0].email == "fan@example.com"
        assert rows[0].response == "no"


@pytest.mark.parametrize(
    "body, message",
    [
        ({}, "Email is required"),
        ({"email": "nope"}, "Invalid email format"),
        ({"email": "a@b.co", "response": "maybe"}, "Invalid response"),
    ],
)
def test_subscribe_validation(client, body, message):
    resp = client.post("/api/subscribe", json=body)
    assert resp.status_code == 400
    assert resp.get_json() == {"error": message}


# ── Init / errors / health ───────────────────────────────────────────────────
@pytest.mark.parametrize("method", ["get", "post"])
def test_init_endpoint(client, method):
    resp = getattr(client, method)("/api/init")
    assert resp.status_code == 200
    assert resp.get_json()["success"] is True
    assert len(client.get("/api/categories").get_json()) == 7


def test_unknown_api_route_is_json(client):
    resp = client.get("/api/does-not-exist", headers={"X-Request-ID": "rid-123"})
    assert resp.status_code == 404
    data = resp.get_json()
    assert data["requestId"] == "rid-123"
    assert "error" in data


def test_healthz_echoes_request_id(client):
    resp = client.get("/healthz", headers={"X-Request-ID": "abc"})
    assert resp.status_code == 200
    assert resp.headers["X-Request-ID"] == "abc"
    assert "X-Response-Time-ms" in resp.headers
    assert resp.get_json()["stripe"] is False
    assert resp.get_json()["database"] is True
    assert resp.get_json()["request_id"] == "abc"


def test_request_id_is_generated(client):
    assert len(client.get("/healthz").headers["X-Request-ID"]) == 32


def test_handles_errors_rolls_back_and_answers_500(client, monkeypatch):
    def _broken():
        raise RuntimeError("db down")

    monkeypatch.setattr(initializer, "initialize_blog_posts", _broken)
    resp = client.get("/api/blog")
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Failed to fetch posts"}


def test_seeded_fixture_categories(seeded, client):
    assert len(client.get("/api/categories").get_json()) == 7
