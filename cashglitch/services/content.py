"""
Content initializer.

``initialize_*`` create a table when it is absent (``checkfirst``) and are
cheap enough to call on every request. ``seed_default_*`` insert the
canonical rows only when the table has none of them; site settings are
seeded per missing key so an admin's edits are never overwritten.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Type

from sqlalchemy import func, select

from cashglitch.constants import DEFAULT_SETTINGS, Icon
from cashglitch.extensions import db
from cashglitch.models import (
    AuthToken,
    BlogPost,
    Category,
    Donation,
    IntroScreen,
    PageContent,
    PageItem,
    SiteSetting,
    Subscriber,
    Sweepstake,
    available_models,
)

log = logging.getLogger(__name__)

# ── Canonical defaults ───────────────────────────────────────────────────────
DEFAULT_CATEGORIES: List[Dict[str, Any]] = [
    {"title": "NPO Directory", "description": "Non-profit organizations creating systemic change",
     "href": "/npo", "icon": Icon.HEART},
    {"title": "Giveaways", "description": "Grants, scholarships & free resources",
     "href": "/giveaway", "icon": Icon.GIFT},
    {"title": "Free Travel", "description": "Travel programs & cultural exchanges",
     "href": "/free-travel", "icon": Icon.PLANE},
    {"title": "Jobs", "description": "Career opportunities with equity-focused orgs",
     "href": "/jobs", "icon": Icon.BRIEFCASE},
    {"title": "Partner", "description": "Partner or advertise with us",
     "href": "/partner", "icon": Icon.HANDSHAKE},
    {"title": "Donate PC", "description": "Give the gift of technology",
     "href": "/donate-computer", "icon": Icon.LAPTOP},
    {"title": "Get Free PC", "description": "Apply for a free computer",
     "href": "/get-computer", "icon": Icon.MONITOR},
]

DEFAULT_INTRO_SCREENS: List[Dict[str, Any]] = [
    {
        "screen_type": "question",
        "title": "Are you ok?",
        "subtitle": "// SYSTEM CHECK REQUIRED",
        "options": [
            {"label": "YES", "value": "yes", "style": "primary"},
            {"label": "NO", "value": "no", "style": "secondary"},
        ],
    },
    {
        "screen_type": "email",
        "title": "Enter the Matrix",
        "subtitle": "// EMAIL REQUIRED FOR ACCESS",
        "options": {"showSkipButton": False, "skipButtonText": "Skip"},
    },
]

DEFAULT_PAGE_CONTENT: List[Dict[str, Any]] = [
    {
        "page_slug": "npo",
        "hero_title": "Non-Profit Organizations",
        "hero_description": "Discover organizations driving reparations initiatives and creating systemic change.",
        "hero_badge_text": "NPO Directory",
        "cta_title": "Know an Organization We Should Feature?",
        "cta_description": "Help us grow our directory by suggesting nonprofits that are making a difference in their communities.",
        "cta_button_text": "Submit an Organization",
        "cta_button_link": "/contact",
    },
    {
        "page_slug": "sweepstakes",
        "hero_title": "Sweepstakes & Raffles",
        "hero_description": "Enter to win prizes while supporting the CashGlitch mission.",
        "hero_badge_text": "Sweepstakes",
    },
    {
        "page_slug": "free-travel",
        "hero_title": "See the World for Free",
        "hero_description": "Discover travel programs, cultural exchanges, and study abroad opportunities that cover your costs.",
        "hero_badge_text": "Free Travel",
        "cta_title": "Ready to Start Your Journey?",
        "cta_description": "Most programs require advance planning. Start your application early and don't miss deadlines.",
        "cta_button_text": "Browse Sweepstakes",
        "cta_button_link": "/sweepstakes",
    },
    {
        "page_slug": "jobs",
        "hero_title": "Jobs & Career Opportunities",
        "hero_description": "Find meaningful employment with organizations committed to equity, diversity, and creating positive change.",
        "hero_badge_text": "Careers",
        "cta_title": "Want to Post a Job?",
        "cta_description": "If your organization is committed to equity and fair wages, we'd love to feature your openings.",
        "cta_button_text": "Partner With Us",
        "cta_button_link": "/partner",
    },
    {
        "page_slug": "partner",
        "hero_title": "Partner With CashGlitch",
        "hero_description": "Join our mission to create pathways to abundance.",
        "hero_badge_text": "Partnership",
    },
    {
        "page_slug": "donate-computer",
        "hero_title": "Donate a Computer",
        "hero_description": "Your old laptop or desktop could be someone's gateway to education, employment, and opportunity.",
        "hero_badge_text": "Give Back",
    },
    {
        "page_slug": "get-computer",
        "hero_title": "Get a Free Computer",
        "hero_description": "Technology should never be a barrier to opportunity. If you need a computer for school, work, or personal development, we may be able to help.",
        "hero_badge_text": "Apply Now",
    },
]

DEFAULT_PAGE_ITEMS: List[Dict[str, Any]] = [
    {"page_slug": "npo", "title": "Reparations Foundation", "category": "Advocacy",
     "description": "Funding community-led reparations initiatives.",
     "tags": ["reparations", "advocacy"], "is_featured": True},
    {"page_slug": "npo", "title": "Community Wealth Builders", "category": "Economic Justice",
     "description": "Financial literacy and cooperative ownership programs.",
     "tags": ["finance", "education"]},
    {"page_slug": "free-travel", "title": "Cultural Exchange Fellowship", "category": "Exchange",
     "location": "International", "value": "Fully funded",
     "description": "Live abroad for a semester with travel and housing covered.",
     "tags": ["exchange", "fellowship"], "is_featured": True},
    {"page_slug": "jobs", "title": "Community Organizer", "category": "Nonprofit",
     "location": "Remote", "description": "Help grow local chapters and volunteer networks.",
     "tags": ["remote", "full-time"]},
]


# ── Table creation ───────────────────────────────────────────────────────────
def _ensure_table(model: Type[db.Model]) -> None:
    model.__table__.create(bind=db.engine, checkfirst=True)


def initialize_subscribers() -> None:
    _ensure_table(Subscriber)


def initialize_blog_posts() -> None:
    _ensure_table(BlogPost)


def initialize_categories() -> None:
    _ensure_table(Category)


def initialize_sweepstakes() -> None:
    _ensure_table(Sweepstake)


def initialize_intro_screens() -> None:
    _ensure_table(IntroScreen)


def initialize_site_settings() -> None:
    _ensure_table(SiteSetting)


def initialize_page_content() -> None:
    _ensure_table(PageContent)


def initialize_page_items() -> None:
    _ensure_table(PageItem)


def initialize_auth_tokens() -> None:
    _ensure_table(AuthToken)


def initialize_donations() -> None:
    _ensure_table(Donation)


def initialize_all_tables() -> None:
    for model in available_models().values():
        _ensure_table(model)


# ── Seeding ──────────────────────────────────────────────────────────────────
def _is_empty(model: Type[db.Model]) -> bool:
    return not db.session.scalar(select(func.count()).select_from(model))


def _seed_rows(model: Type[db.Model], rows: List[Dict[str, Any]]) -> int:
    if not _is_empty(model):
        return 0
    for i, data in enumerate(rows):
        data = dict(data)
        data.setdefault("sort_order", i)
        db.session.add(model(**data))
    db.session.commit()
    log.info("Seeded %d default %s rows", len(rows), model.__tablename__)
    return len(rows)


def seed_default_categories() -> int:
    return _seed_rows(Category, DEFAULT_CATEGORIES)


def seed_default_intro_screens() -> int:
    return _seed_rows(IntroScreen, DEFAULT_INTRO_SCREENS)


def seed_default_page_content() -> int:
    if not _is_empty(PageContent):
        return 0
    for data in DEFAULT_PAGE_CONTENT:
        db.session.add(PageContent(**data))
    db.session.commit()
    log.info("Seeded %d default page_content rows", len(DEFAULT_PAGE_CONTENT))
    return len(DEFAULT_PAGE_CONTENT)


def seed_default_page_items() -> int:
    return _seed_rows(PageItem, DEFAULT_PAGE_ITEMS)


def seed_default_site_settings() -> int:
    existing = set(db.session.scalars(select(SiteSetting.key)))
    missing = [k for k in DEFAULT_SETTINGS if k not in existing]
    for key in missing:
        db.session.add(SiteSetting(key=key, value=DEFAULT_SETTINGS[key]))
    if missing:
        db.session.commit()
        log.info("Seeded site settings: %s", ", ".join(missing))
    return len(missing)


def initialize_and_seed() -> Dict[str, int]:
    """Create every table and insert every default; returns rows inserted per table."""
    initialize_all_tables()
    return {
        "categories": seed_default_categories(),
        "intro_screens": seed_default_intro_screens(),
        "site_settings": seed_default_site_settings(),
        "page_content": seed_default_page_content(),
        "page_items": seed_default_page_items(),
    }
