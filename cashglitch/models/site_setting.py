from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cashglitch.constants import BOOLEAN_SETTINGS, SETTING_KEYS
from cashglitch.extensions import db

# Fallbacks used when a key has no row (matches what the site renders)
_FALLBACKS = {
    "site_title": "CashGlitch",
    "site_tagline": "The only Glitch is how much help you'll find",
}


class SiteSetting(db.Model):
    __tablename__ = "site_settings"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False, default="")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<SiteSetting {self.key}={self.value!r}>"


def settings_to_dict(rows: Iterable[SiteSetting]) -> Dict[str, Any]:
    """Collapse key/value rows into the camelCase settings object."""
    values = {r.key: r.value for r in rows}
    out: Dict[str, Any] = {}
    for field, key in SETTING_KEYS.items():
        raw = values.get(key) or ""
        if key in BOOLEAN_SETTINGS:
            out[field] = raw == "true"
        else:
            out[field] = raw or _FALLBACKS.get(key, "")
    return out


def settings_from_payload(payload: Dict[str, Any]) -> Dict[str, str]:
    """Map a camelCase body onto snake_case keys; absent fields are skipped."""
    updates: Dict[str, str] = {}
    for field, key in SETTING_KEYS.items():
        if field not in payload or payload[field] is None:
            continue
        value = payload[field]
        if isinstance(value, bool):
            value = "true" if value else "false"
        updates[key] = str(value)
    return updates
