# ──────────────────────────────────────────────────────────────────────────────
# Shared constants: cookie names, setting keys, pagination, Stripe amounts
# and the closed icon set used by homepage categories.
# ──────────────────────────────────────────────────────────────────────────────
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Final, Optional


@dataclass(frozen=True)
class AuthConfig:
    TOKEN_EXPIRY_MINUTES: int = 15
    SESSION_EXPIRY_DAYS: int = 7
    ACCESS_EXPIRY_DAYS: int = 365
    SESSION_COOKIE_NAME: str = "cashglitch_session"
    ACCESS_COOKIE_NAME: str = "cashglitch_access"
    ACCESS_GRANTED: str = "granted"


AUTH_CONFIG: Final = AuthConfig()


@dataclass(frozen=True)
class Pagination:
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100


PAGINATION: Final = Pagination()

# ── Intro "Are you ok?" answers ──────────────────────────────────────────────
RESPONSE_OPTIONS: Final[tuple[str, ...]] = ("yes", "no")

# ── Site settings ────────────────────────────────────────────────────────────
SETTING_KEYS: Final[Dict[str, str]] = {
    "siteTitle": "site_title",
    "siteTagline": "site_tagline",
    "siteDescription": "site_description",
    "twitterUrl": "twitter_url",
    "instagramUrl": "instagram_url",
    "featureBlog": "feature_blog",
    "featureAccessGate": "feature_access_gate",
    "ogTitle": "og_title",
    "ogDescription": "og_description",
    "metaKeywords": "meta_keywords",
}

BOOLEAN_SETTINGS: Final[frozenset[str]] = frozenset({"feature_blog", "feature_access_gate"})

DEFAULT_SETTINGS: Final[Dict[str, str]] = {
    "site_title": "CashGlitch",
    "site_tagline": "Organizing a broken system. Let's fix it.",
    "twitter_url": "https://twitter.com/cashglitch",
    "instagram_url": "",
    "feature_blog": "true",
    "feature_access_gate": "true",
}

# ── Stripe ───────────────────────────────────────────────────────────────────
MIN_DONATION_CENTS: Final = 100
DEFAULT_DONATION_CENTS: Final = 2500
DONATION_AMOUNTS: Final[tuple[int, ...]] = (500, 1000, 2500, 5000, 10000)
CURRENCY: Final = "usd"
DEFAULT_TICKET_PRICE_CENTS: Final = 500

# ── Sweepstakes ──────────────────────────────────────────────────────────────
SWEEPSTAKE_STATUSES: Final[tuple[str, ...]] = ("active", "draft", "closed", "drawn")

# ── Editable pages ───────────────────────────────────────────────────────────
PAGE_LABELS: Final[Dict[str, str]] = {
    "npo": "NPO Directory",
    "sweepstakes": "Sweepstakes",
    "free-travel": "Free Travel",
    "jobs": "Jobs",
    "partner": "Partner",
    "donate-computer": "Donate PC",
    "get-computer": "Get PC",
}

INTRO_SCREEN_TYPES: Final[tuple[str, ...]] = ("question", "email", "info", "custom")


class Icon(str, Enum):
    """Icons a category may display. Anything else is rejected on write."""

    HEART = "Heart"
    GIFT = "Gift"
    TROPHY = "Trophy"
    PLANE = "Plane"
    BRIEFCASE = "Briefcase"
    HANDSHAKE = "Handshake"
    LAPTOP = "Laptop"
    MONITOR = "Monitor"
    HOME = "Home"
    USERS = "Users"
    DOLLAR_SIGN = "DollarSign"
    BOOK_OPEN = "BookOpen"
    GRADUATION_CAP = "GraduationCap"
    BUILDING = "Building"
    GLOBE = "Globe"
    STAR = "Star"
    AWARD = "Award"
    SHIELD = "Shield"
    ZAP = "Zap"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Icon":
        """Strict lookup by display name; raises ValueError for unknown icons."""
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unknown icon: {value!r}") from None

    @classmethod
    def coerce(cls, value: Optional[str]) -> "Icon":
        """Lenient lookup for reads: unknown names fall back to GIFT."""
        try:
            return cls(value)
        except ValueError:
            return DEFAULT_ICON


DEFAULT_ICON: Final = Icon.GIFT
