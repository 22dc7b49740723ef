"""Model-level helpers and validators."""

import pytest

from cashglitch.constants import DEFAULT_ICON, Icon
from cashglitch.models import Category, Sweepstake, parse_tags, settings_from_payload, settings_to_dict, slugify
from cashglitch.models.site_setting import SiteSetting


def test_icon_parse_is_strict():
    assert Icon.parse("Laptop") is Icon.LAPTOP
    with pytest.raises(ValueError):
        Icon.parse("laptop")
    with pytest.raises(ValueError):
        Icon.parse("Rocket")


def test_icon_coerce_falls_back_to_gift():
    assert Icon.coerce("Star") is Icon.STAR
    assert Icon.coerce("Rocket") is DEFAULT_ICON
    assert Icon.coerce(None) is Icon.GIFT


def test_category_icon_validation():
    assert Category(title="t", href="/", icon="Zap").icon == "Zap"
    assert Category(title="t", href="/", icon=None).icon == "Gift"
    with pytest.raises(ValueError):
        Category(title="t", href="/", icon="Rocket")


def test_sweepstake_status_and_capacity():
    with pytest.raises(ValueError):
        Sweepstake(title="x", status="paused")

    s = Sweepstake(title="x", status="ACTIVE", max_tickets=5, tickets_sold=3)
    assert s.status == "active"
    assert s.tickets_remaining == 2
    assert s.can_sell(2)
    assert not s.can_sell(3)

    unlimited = Sweepstake(title="y", tickets_sold=100)
    assert unlimited.tickets_remaining is None
    assert unlimited.can_sell(10_000)


@pytest.mark.parametrize(
    "title, slug",
    [
        ("Hello, World!", "hello-world"),
        ("  Free   PCs 2024 ", "free-pcs-2024"),
        ("Ça va?", "a-va"),
        ("---", ""),
    ],
)
def test_slugify(title, slug):
    assert slugify(title) == slug


@pytest.mark.parametrize(
    "raw, tags",
    [
        (None, None),
        ("", None),
        (["a", 1], ["a", "1"]),
        ('["x", "y"]', ["x", "y"]),
        ("remote, full-time,", ["remote", "full-time"]),
        ('"solo"', ['"solo"']),
        (42, None),
    ],
)
def test_parse_tags(raw, tags):
    assert parse_tags(raw) == tags


def test_settings_from_payload_maps_and_stringifies():
    updates = settings_from_payload(
        {"siteTitle": "New", "featureBlog": False, "instagramUrl": None, "unknown": "x"}
    )
    assert updates == {"site_title": "New", "feature_blog": "false"}


def test_settings_to_dict_fallbacks():
    data = settings_to_dict([SiteSetting(key="feature_blog", value="true")])
    assert data["siteTitle"] == "CashGlitch"
    assert data["featureBlog"] is True
    assert data["featureAccessGate"] is False
    assert data["ogTitle"] == ""
