from __future__ import annotations

"""
Admin blueprints

- ``admin``      /admin/*      server-rendered shell; before_request redirects
                               anyone without an admin session to /login
- ``admin_api``  /api/admin/*  JSON CRUD; before_request answers 401
- ``pages``      /, /login, /verify   minimal public pages used by the auth flow

Admin status is fixed when the session is created (see services.session).
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Mapping, Optional, Type

from flask import Blueprint, abort, current_app, jsonify, redirect, render_template, request, url_for
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError

from cashglitch.constants import PAGE_LABELS, PAGINATION, RESPONSE_OPTIONS
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
    settings_from_payload,
    settings_to_dict,
    slugify,
)
from cashglitch.routes import get_payload, handles_errors, json_error, parse_int, safe_redirect_path
from cashglitch.services import content as initializer
from cashglitch.services import get_session

# ── Blueprints ───────────────────────────────────────────────────────────────
admin = Blueprint("admin", __name__, url_prefix="/admin")
admin_api = Blueprint("admin_api", __name__, url_prefix="/api/admin")
pages = Blueprint("pages", __name__)

bp = admin
__all__ = ["bp", "admin", "admin_api", "pages"]

ADMIN_SECTIONS = ("blog", "categories", "sweepstakes", "intro-screens", "pages", "subscribers", "settings")


# ── Guards ───────────────────────────────────────────────────────────────────
@admin.before_request
def _admin_guard():
    identity = get_session()
    if identity is None or not identity.is_admin:
        return redirect(url_for("pages.login", redirect=request.path))
    return None


@admin_api.before_request
def _admin_api_guard():
    identity = get_session()
    if identity is None or not identity.is_admin:
        return json_error("Unauthorized", 401)
    return None


# ── Helpers ─────────────────────────────────────────────────────────────────
def _parse_datetime(value: Any) -> Optional[datetime]:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    # Stored naive UTC like every other timestamp column
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _apply_fields(row: Any, payload: Mapping[str, Any], fields: Mapping[str, str]) -> None:
    """Copy camelCase payload keys onto snake_case attributes; None/absent means keep."""
    for key, attr in fields.items():
        if key in payload and payload[key] is not None:
            setattr(row, attr, payload[key])


def _find(model: Type[db.Model], row_id: Any):
    pk = parse_int(row_id)
    return db.session.get(model, pk) if pk is not None else None


def _delete_by_query_id(model: Type[db.Model], ensure_table: Callable[[], None]):
    row_id = parse_int(request.args.get("id"))
    if row_id is None:
        return json_error("ID is required", 400)
    ensure_table()
    db.session.execute(delete(model).where(model.id == row_id))
    db.session.commit()
    return jsonify({"success": True})


def _count(model: Type[db.Model], *where: Any) -> int:
    stmt = select(func.count()).select_from(model)
    if where:
        stmt = stmt.where(*where)
    return int(db.session.scalar(stmt) or 0)


def dashboard_stats() -> Dict[str, Any]:
    initializer.initialize_subscribers()
    initializer.initialize_blog_posts()
    initializer.initialize_categories()
    initializer.seed_default_categories()

    week_ago = datetime.utcnow() - timedelta(days=7)
    return {
        "totalSubscribers": _count(Subscriber),
        "recentSignups": _count(Subscriber, Subscriber.created_at > week_ago),
        "responseBreakdown": {
            "yes": _count(Subscriber, Subscriber.response == "yes"),
            "no": _count(Subscriber, Subscriber.response == "no"),
            "noResponse": _count(Subscriber, Subscriber.response.is_(None)),
        },
        "totalPosts": _count(BlogPost),
        "publishedPosts": _count(BlogPost, BlogPost.published.is_(True)),
        "totalCategories": _count(Category),
        "activeCategories": _count(Category, Category.is_active.is_(True)),
    }


# ───────────────────────────────
# Public pages used by the auth flow
# ───────────────────────────────
@pages.get("/")
def home():
    initializer.initialize_site_settings()
    initializer.seed_default_site_settings()
    settings = settings_to_dict(db.session.scalars(select(SiteSetting)))
    return render_template("home.html", settings=settings, identity=get_session())


@pages.get("/login")
def login():
    if get_session() is not None:
        return redirect("/")
    return render_template("auth/login.html", redirect_to=safe_redirect_path(request.args.get("redirect")))


@pages.get("/verify")
def verify_page():
    return render_template(
        "auth/verify.html",
        token=request.args.get("token", ""),
        redirect_to=safe_redirect_path(request.args.get("redirect")),
    )


# ───────────────────────────────
# 🧭 ADMIN SHELL
# ───────────────────────────────
@admin.get("/")
def dashboard():
    return render_template(
        "admin/index.html",
        stats=dashboard_stats(),
        identity=get_session(),
        sections=ADMIN_SECTIONS,
    )


@admin.get("/<section>")
def section(section: str):
    if section not in ADMIN_SECTIONS:
        abort(404)
    return render_template(
        "admin/section.html",
        section=section,
        identity=get_session(),
        sections=ADMIN_SECTIONS,
        page_labels=PAGE_LABELS,
    )


# ───────────────────────────────
# 📰 Blog
# ───────────────────────────────
_BLOG_FIELDS = {"content": "content", "excerpt": "excerpt", "published": "published", "imageUrl": "image_url"}


@admin_api.get("/blog")
@handles_errors("Failed to fetch posts")
def blog_list():
    initializer.initialize_blog_posts()
    rows = db.session.scalars(select(BlogPost).order_by(BlogPost.created_at.desc(), BlogPost.id.desc()))
    return jsonify([p.as_dict() for p in rows])


@admin_api.post("/blog")
@handles_errors("Failed to create post")
def blog_create():
    payload = get_payload()
    title, content = payload.get("title"), payload.get("content")
    if not title or not content:
        return json_error("Title and content are required", 400)

    initializer.initialize_blog_posts()
    post = BlogPost(
        slug=slugify(title),
        title=title,
        content=content,
        excerpt=payload.get("excerpt") or None,
        published=bool(payload.get("published", False)),
        author_email=get_session().email,
        image_url=payload.get("imageUrl") or None,
    )
    db.session.add(post)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return json_error("A post with this slug already exists", 409)
    return jsonify(post.as_dict())


@admin_api.put("/blog")
@handles_errors("Failed to update post")
def blog_update():
    payload = get_payload()
    if not payload.get("id"):
        return json_error("ID is required", 400)
    initializer.initialize_blog_posts()
    post = _find(BlogPost, payload["id"])
    if post is None:
        return json_error("Post not found", 404)

    if payload.get("title"):
        post.title = payload["title"]
        post.slug = slugify(payload["title"])
    _apply_fields(post, payload, _BLOG_FIELDS)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return json_error("A post with this slug already exists", 409)
    return jsonify(post.as_dict())


@admin_api.delete("/blog")
@handles_errors("Failed to delete post")
def blog_delete():
    return _delete_by_query_id(BlogPost, initializer.initialize_blog_posts)


# ───────────────────────────────
# 🧩 Categories
# ───────────────────────────────
_CATEGORY_FIELDS = {
    "title": "title",
    "description": "description",
    "href": "href",
    "icon": "icon",
    "sortOrder": "sort_order",
    "isActive": "is_active",
}


@admin_api.get("/categories")
@handles_errors("Failed to fetch categories")
def categories_list():
    initializer.initialize_categories()
    initializer.seed_default_categories()
    rows = db.session.scalars(select(Category).order_by(Category.sort_order.asc(), Category.id.asc()))
    return jsonify([c.as_dict(include_stats=True) for c in rows])


@admin_api.post("/categories")
@handles_errors("Failed to create category")
def categories_create():
    payload = get_payload()
    if not payload.get("title") or not payload.get("href"):
        return json_error("Title and href are required", 400)

    initializer.initialize_categories()
    try:
        category = Category(
            title=payload["title"],
            description=payload.get("description") or None,
            href=payload["href"],
            icon=payload.get("icon") or None,
            sort_order=payload.get("sortOrder") or 0,
            is_active=payload.get("isActive", True) is not False,
        )
    except ValueError as e:
        return json_error(str(e), 400)
    db.session.add(category)
    db.session.commit()
    return jsonify(category.as_dict(include_stats=True))


@admin_api.put("/categories")
@handles_errors("Failed to update category")
def categories_update():
    payload = get_payload()
    if not payload.get("id"):
        return json_error("ID is required", 400)
    initializer.initialize_categories()
    category = _find(Category, payload["id"])
    if category is None:
        return json_error("Category not found", 404)

    try:
        _apply_fields(category, payload, _CATEGORY_FIELDS)
    except ValueError as e:
        db.session.rollback()
        return json_error(str(e), 400)
    db.session.commit()
    return jsonify(category.as_dict(include_stats=True))


@admin_api.delete("/categories")
@handles_errors("Failed to delete category")
def categories_delete():
    return _delete_by_query_id(Category, initializer.initialize_categories)


# ───────────────────────────────
# 🎟️ Sweepstakes
# ───────────────────────────────
_SWEEPSTAKE_FIELDS = {
    "title": "title",
    "description": "description",
    "prizeDescription": "prize_description",
    "ticketPriceCents": "ticket_price_cents",
    "maxTickets": "max_tickets",
    "ticketsSold": "tickets_sold",
    "status": "status",
    "imageUrl": "image_url",
    "isFeatured": "is_featured",
}


@admin_api.get("/sweepstakes")
@handles_errors("Failed to fetch sweepstakes")
def sweepstakes_list():
    initializer.initialize_sweepstakes()
    rows = db.session.scalars(select(Sweepstake).order_by(Sweepstake.created_at.desc(), Sweepstake.id.desc()))
    return jsonify([s.as_dict() for s in rows])


@admin_api.post("/sweepstakes")
@handles_errors("Failed to create sweepstake")
def sweepstakes_create():
    payload = get_payload()
    if not payload.get("title"):
        return json_error("Title is required", 400)

    initializer.initialize_sweepstakes()
    try:
        sweepstake = Sweepstake(title=payload["title"])
        _apply_fields(sweepstake, payload, _SWEEPSTAKE_FIELDS)
        sweepstake.draw_date = _parse_datetime(payload.get("drawDate"))
    except ValueError as e:
        return json_error(str(e), 400)
    db.session.add(sweepstake)
    db.session.commit()
    return jsonify(sweepstake.as_dict())


@admin_api.put("/sweepstakes")
@handles_errors("Failed to update sweepstake")
def sweepstakes_update():
    payload = get_payload()
    if not payload.get("id"):
        return json_error("ID is required", 400)
    initializer.initialize_sweepstakes()
    sweepstake = _find(Sweepstake, payload["id"])
    if sweepstake is None:
        return json_error("Sweepstake not found", 404)

    try:
        _apply_fields(sweepstake, payload, _SWEEPSTAKE_FIELDS)
        if "drawDate" in payload:
            sweepstake.draw_date = _parse_datetime(payload["drawDate"])
    except ValueError as e:
        db.session.rollback()
        return json_error(str(e), 400)
    db.session.commit()
    return jsonify(sweepstake.as_dict())


@admin_api.delete("/sweepstakes")
@handles_errors("Failed to delete sweepstake")
def sweepstakes_delete():
    return _delete_by_query_id(Sweepstake, initializer.initialize_sweepstakes)


# ───────────────────────────────
# 👋 Intro screens
# ───────────────────────────────
_INTRO_FIELDS = {
    "screenType": "screen_type",
    "title": "title",
    "subtitle": "subtitle",
    "options": "options",
    "sortOrder": "sort_order",
    "isActive": "is_active",
}


@admin_api.get("/intro-screens")
@handles_errors("Failed to fetch intro screens")
def intro_screens_list():
    initializer.initialize_intro_screens()
    initializer.seed_default_intro_screens()
    rows = db.session.scalars(select(IntroScreen).order_by(IntroScreen.sort_order.asc(), IntroScreen.id.asc()))
    return jsonify([s.as_dict() for s in rows])


@admin_api.post("/intro-screens")
@handles_errors("Failed to create intro screen")
def intro_screens_create():
    payload = get_payload()
    if not payload.get("screenType") or not payload.get("title"):
        return json_error("Screen type and title are required", 400)

    initializer.initialize_intro_screens()
    try:
        screen = IntroScreen(screen_type=payload["screenType"], title=payload["title"])
        _apply_fields(screen, payload, _INTRO_FIELDS)
    except ValueError as e:
        return json_error(str(e), 400)
    db.session.add(screen)
    db.session.commit()
    return jsonify(screen.as_dict())


@admin_api.put("/intro-screens")
@handles_errors("Failed to update intro screen")
def intro_screens_update():
    payload = get_payload()
    if not payload.get("id"):
        return json_error("ID is required", 400)
    initializer.initialize_intro_screens()
    screen = _find(IntroScreen, payload["id"])
    if screen is None:
        return json_error("Intro screen not found", 404)

    try:
        _apply_fields(screen, payload, _INTRO_FIELDS)
    except ValueError as e:
        db.session.rollback()
        return json_error(str(e), 400)
    db.session.commit()
    return jsonify(screen.as_dict())


@admin_api.delete("/intro-screens")
@handles_errors("Failed to delete intro screen")
def intro_screens_delete():
    return _delete_by_query_id(IntroScreen, initializer.initialize_intro_screens)


# ───────────────────────────────
# 📄 Page content + page items
# ───────────────────────────────
_PAGE_FIELDS = {
    "heroTitle": "hero_title",
    "heroSubtitle": "hero_subtitle",
    "heroDescription": "hero_description",
    "heroBadgeText": "hero_badge_text",
    "ctaTitle": "cta_title",
    "ctaDescription": "cta_description",
    "ctaButtonText": "cta_button_text",
    "ctaButtonLink": "cta_button_link",
    "metaTitle": "meta_title",
    "metaDescription": "meta_description",
    "metaKeywords": "meta_keywords",
    "isActive": "is_active",
}

_ITEM_FIELDS = {
    "title": "title",
    "description": "description",
    "category": "category",
    "location": "location",
    "deadline": "deadline",
    "value": "value",
    "website": "website",
    "imageUrl": "image_url",
    "tags": "tags",
    "isFeatured": "is_featured",
    "sortOrder": "sort_order",
    "isActive": "is_active",
}


@admin_api.get("/pages")
@handles_errors("Failed to fetch page content")
def pages_list():
    initializer.initialize_page_content()
    initializer.seed_default_page_content()

    slug = request.args.get("slug")
    if slug:
        row = db.session.scalars(select(PageContent).where(PageContent.page_slug == slug)).first()
        if row is None:
            return json_error("Page not found", 404)
        return jsonify(row.as_dict())

    rows = db.session.scalars(select(PageContent).order_by(PageContent.page_slug.asc()))
    return jsonify([p.as_dict() for p in rows])


@admin_api.put("/pages")
@handles_errors("Failed to update page content")
def pages_update():
    payload = get_payload()
    slug = payload.get("pageSlug")
    if not slug:
        return json_error("pageSlug is required", 400)

    initializer.initialize_page_content()
    row = db.session.scalars(select(PageContent).where(PageContent.page_slug == slug)).first()
    if row is None:
        return json_error("Page not found", 404)
    _apply_fields(row, payload, _PAGE_FIELDS)
    db.session.commit()
    return jsonify(row.as_dict())


@admin_api.get("/page-items")
@handles_errors("Failed to fetch page items")
def page_items_list():
    initializer.initialize_page_items()
    stmt = select(PageItem)
    slug = request.args.get("pageSlug")
    if slug:
        stmt = stmt.where(PageItem.page_slug == slug)
    else:
        stmt = stmt.order_by(PageItem.page_slug.asc())
    stmt = stmt.order_by(PageItem.is_featured.desc(), PageItem.sort_order.asc(), PageItem.id.asc())
    return jsonify([i.as_dict() for i in db.session.scalars(stmt)])


@admin_api.post("/page-items")
@handles_errors("Failed to create page item")
def page_items_create():
    payload = get_payload()
    if not payload.get("pageSlug") or not payload.get("title"):
        return json_error("pageSlug and title are required", 400)

    initializer.initialize_page_items()
    item = PageItem(page_slug=payload["pageSlug"], title=payload["title"])
    _apply_fields(item, payload, _ITEM_FIELDS)
    db.session.add(item)
    db.session.commit()
    return jsonify(item.as_dict())


@admin_api.put("/page-items")
@handles_errors("Failed to update page item")
def page_items_update():
    payload = get_payload()
    if not payload.get("id"):
        return json_error("id is required", 400)
    initializer.initialize_page_items()
    item = _find(PageItem, payload["id"])
    if item is None:
        return json_error("Item not found", 404)
    _apply_fields(item, payload, _ITEM_FIELDS)
    db.session.commit()
    return jsonify(item.as_dict())


@admin_api.delete("/page-items")
@handles_errors("Failed to delete page item")
def page_items_delete():
    return _delete_by_query_id(PageItem, initializer.initialize_page_items)


# ───────────────────────────────
# ⚙️ Settings
# ───────────────────────────────
@admin_api.get("/settings")
@handles_errors("Failed to fetch settings")
def settings_get():
    initializer.initialize_site_settings()
    initializer.seed_default_site_settings()
    return jsonify(settings_to_dict(db.session.scalars(select(SiteSetting))))


@admin_api.put("/settings")
@handles_errors("Failed to update settings")
def settings_update():
    updates = settings_from_payload(get_payload())
    initializer.initialize_site_settings()

    for key, value in updates.items():
        row = db.session.get(SiteSetting, key)
        if row is None:
            db.session.add(SiteSetting(key=key, value=value))
        else:
            row.value = value
            row.updated_at = datetime.utcnow()
    db.session.commit()
    current_app.logger.info("Site settings updated: %s", ", ".join(sorted(updates)) or "(none)")
    return jsonify(settings_to_dict(db.session.scalars(select(SiteSetting))))


# ───────────────────────────────
# 📊 Stats + subscribers
# ───────────────────────────────
@admin_api.get("/stats")
@handles_errors("Failed to fetch stats")
def stats():
    return jsonify(dashboard_stats())


@admin_api.get("/subscribers")
@handles_errors("Failed to fetch subscribers")
def subscribers():
    initializer.initialize_subscribers()

    page = max(1, parse_int(request.args.get("page")) or 1)
    page_size = parse_int(request.args.get("pageSize")) or PAGINATION.DEFAULT_PAGE_SIZE
    page_size = min(PAGINATION.MAX_PAGE_SIZE, max(1, page_size))
    search = (request.args.get("search") or "").strip()
    response_filter = request.args.get("response")

    filters = []
    if search:
        filters.append(Subscriber.email.ilike(f"%{search}%"))
    if response_filter == "null":
        filters.append(Subscriber.response.is_(None))
    elif response_filter in RESPONSE_OPTIONS:
        filters.append(Subscriber.response == response_filter)

    total = _count(Subscriber, *filters)
    stmt = select(Subscriber)
    if filters:
        stmt = stmt.where(*filters)
    rows = db.session.scalars(
        stmt.order_by(Subscriber.created_at.desc(), Subscriber.id.desc())
        .limit(page_size)
        .offset((page - 1) * page_size)
    )
    return jsonify(
        {
            "items": [s.as_dict() for s in rows],
            "total": total,
            "page": page,
            "pageSize": page_size,
            "totalPages": -(-total // page_size),
        }
    )
