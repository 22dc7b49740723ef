from __future__ import annotations

"""
CashGlitch: public content API
────────────────────────────────────────────────────────────
• GET  /api/blog, /api/blog/<slug>      → published posts only
• GET  /api/categories                  → active homepage tiles
• POST /api/categories/track            → atomic click counter
• GET  /api/sweepstakes                 → active, featured first
• GET  /api/intro-screens, /api/site-settings
• GET  /api/page-content?slug=, /api/page-items?slug=
• POST /api/subscribe                   → intro-sequence email capture
• GET|POST /api/init                    → create tables + seed defaults
"""

from flask import Blueprint, jsonify, request
from sqlalchemy import select, update

from cashglitch.constants import RESPONSE_OPTIONS
from cashglitch.extensions import db
from cashglitch.models import (
    BlogPost,
    Category,
    IntroScreen,
    PageContent,
    PageItem,
    SiteSetting,
    Subscriber,
    Sweepstake,
    settings_to_dict,
)
from cashglitch.services import content as initializer

from . import client_ip, get_payload, handles_errors, json_error, user_agent, valid_email

bp = Blueprint("content", __name__, url_prefix="/api")


# ─────────────────────────────────────────────────────────────
# Blog
# ─────────────────────────────────────────────────────────────
@bp.get("/blog")
@handles_errors("Failed to fetch posts")
def list_posts():
    initializer.initialize_blog_posts()
    rows = db.session.scalars(
        select(BlogPost)
        .where(BlogPost.published.is_(True))
        .order_by(BlogPost.created_at.desc(), BlogPost.id.desc())
    )
    return jsonify([p.as_dict() for p in rows])


@bp.get("/blog/<slug>")
@handles_errors("Failed to fetch post")
def get_post(slug: str):
    initializer.initialize_blog_posts()
    post = db.session.scalars(
        select(BlogPost).where(BlogPost.slug == slug, BlogPost.published.is_(True)).limit(1)
    ).first()
    if post is None:
        return json_error("Post not found", 404)
    return jsonify(post.as_dict())


# ─────────────────────────────────────────────────────────────
# Categories
# ─────────────────────────────────────────────────────────────
@bp.get("/categories")
@handles_errors("Failed to fetch categories")
def list_categories():
    initializer.initialize_categories()
    initializer.seed_default_categories()
    rows = db.session.scalars(
        select(Category)
        .where(Category.is_active.is_(True))
        .order_by(Category.sort_order.asc(), Category.id.asc())
    )
    return jsonify([c.as_dict() for c in rows])


@bp.post("/categories/track")
@handles_errors("Failed to track click")
def track_category():
    category_id = get_payload().get("id")
    # bool is an int subclass; `true` is not an id
    if isinstance(category_id, bool) or not isinstance(category_id, int) or not category_id:
        return json_error("Valid category ID required", 400)

    initializer.initialize_categories()
    db.session.execute(
        update(Category)
        .where(Category.id == category_id)
        .values(click_count=Category.click_count + 1)
    )
    db.session.commit()
    return jsonify({"success": True})


# ─────────────────────────────────────────────────────────────
# Sweepstakes / intro / settings
# ─────────────────────────────────────────────────────────────
@bp.get("/sweepstakes")
@handles_errors("Failed to fetch sweepstakes")
def list_sweepstakes():
    initializer.initialize_sweepstakes()
    rows = db.session.scalars(
        select(Sweepstake)
        .where(Sweepstake.status == "active")
        .order_by(Sweepstake.is_featured.desc(), Sweepstake.created_at.desc(), Sweepstake.id.desc())
    )
    return jsonify([s.as_dict() for s in rows])


@bp.get("/intro-screens")
@handles_errors("Failed to fetch intro screens")
def list_intro_screens():
    initializer.initialize_intro_screens()
    initializer.seed_default_intro_screens()
    rows = db.session.scalars(
        select(IntroScreen)
        .where(IntroScreen.is_active.is_(True))
        .order_by(IntroScreen.sort_order.asc(), IntroScreen.id.asc())
    )
    return jsonify([s.as_dict() for s in rows])


@bp.get("/site-settings")
@handles_errors("Failed to fetch settings")
def site_settings():
    initializer.initialize_site_settings()
    initializer.seed_default_site_settings()
    return jsonify(settings_to_dict(db.session.scalars(select(SiteSetting))))


# ─────────────────────────────────────────────────────────────
# Editable pages
# ─────────────────────────────────────────────────────────────
@bp.get("/page-content")
@handles_errors("Failed to fetch page content")
def page_content():
    slug = (request.args.get("slug") or "").strip()
    if not slug:
        return json_error("slug parameter is required", 400)

    initializer.initialize_page_content()
    initializer.seed_default_page_content()
    row = db.session.scalars(
        select(PageContent).where(PageContent.page_slug == slug, PageContent.is_active.is_(True))
    ).first()
    if row is None:
        return json_error("Page not found", 404)
    return jsonify(row.as_dict())


@bp.get("/page-items")
@handles_errors("Failed to fetch page items")
def page_items():
    slug = (request.args.get("slug") or "").strip()
    if not slug:
        return json_error("slug parameter is required", 400)

    initializer.initialize_page_items()
    initializer.seed_default_page_items()
    rows = db.session.scalars(
        select(PageItem)
        .where(PageItem.page_slug == slug, PageItem.is_active.is_(True))
        .order_by(PageItem.is_featured.desc(), PageItem.sort_order.asc(), PageItem.id.asc())
    )
    return jsonify([i.as_dict() for i in rows])


# ─────────────────────────────────────────────────────────────
# Subscribe
# ─────────────────────────────────────────────────────────────
@bp.post("/subscribe")
@handles_errors("Failed to subscribe")
def subscribe():
    payload = get_payload()
    raw_email = payload.get("email")
    if not raw_email or not isinstance(raw_email, str):
        return json_error("Email is required", 400)
    if not valid_email(raw_email):
        return json_error("Invalid email format", 400)

    answer = payload.get("response") or None
    if answer is not None and answer not in RESPONSE_OPTIONS:
        return json_error("Invalid response", 400)

    email = raw_email.strip().lower()
    initializer.initialize_subscribers()

    row = db.session.scalars(select(Subscriber).where(Subscriber.email == email)).first()
    if row is None:
        row = Subscriber(email=email, response=answer)
        db.session.add(row)
    elif answer is not None:
        row.response = answer
    row.ip_address = client_ip() or "unknown"
    row.user_agent = user_agent() or "unknown"
    db.session.commit()

    return jsonify({"success": True})


# ─────────────────────────────────────────────────────────────
# Init
# ─────────────────────────────────────────────────────────────
@bp.route("/init", methods=["GET", "POST"])
@handles_errors("Failed to initialize database")
def init_database():
    initializer.initialize_and_seed()
    return jsonify({"success": True, "message": "Database initialized and seeded successfully"})
