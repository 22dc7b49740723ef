from __future__ import annotations

from typing import Dict, Type

from cashglitch.extensions import db

from .auth_token import AuthToken
from .blog_post import BlogPost, slugify
from .category import Category
from .donation import Donation
from .intro_screen import IntroScreen
from .mixins import TimestampMixin, iso
from .page_content import PageContent
from .page_item import PageItem, parse_tags
from .site_setting import SiteSetting, settings_from_payload, settings_to_dict
from .subscriber import Subscriber
from .sweepstake import Sweepstake

# --- Registry (table name -> model) --------------------------------------------
_MODEL_MAP: Dict[str, Type[db.Model]] = {
    "blog_posts": BlogPost,
    "categories": Category,
    "sweepstakes": Sweepstake,
    "intro_screens": IntroScreen,
    "site_settings": SiteSetting,
    "page_content": PageContent,
    "page_items": PageItem,
    "emails": Subscriber,
    "auth_tokens": AuthToken,
    "donations": Donation,
}


def available_models() -> Dict[str, Type[db.Model]]:
    """Return {table_name: model_class} for every table the app owns."""
    return dict(_MODEL_MAP)


__all__ = [
    "db",
    "AuthToken",
    "BlogPost",
    "Category",
    "Donation",
    "IntroScreen",
    "PageContent",
    "PageItem",
    "SiteSetting",
    "Subscriber",
    "Sweepstake",
    "TimestampMixin",
    "available_models",
    "iso",
    "parse_tags",
    "settings_from_payload",
    "settings_to_dict",
    "slugify",
]
