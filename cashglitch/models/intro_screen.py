from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, validates

from cashglitch.constants import INTRO_SCREEN_TYPES
from cashglitch.extensions import db

from .mixins import TimestampMixin


class IntroScreen(db.Model, TimestampMixin):
    """One step of the intro sequence shown before the access gate opens."""

    __tablename__ = "intro_screens"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    screen_type: Mapped[str] = mapped_column(String(32), nullable=False, default="info")
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    subtitle: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # question: [{label, value, style}], email: {showSkipButton, skipButtonText}
    options: Mapped[Optional[Any]] = mapped_column(db.JSON, nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)

    @validates("screen_type")
    def _validate_screen_type(self, key: str, value: str) -> str:
        if value not in INTRO_SCREEN_TYPES:
            raise ValueError(f"Unknown intro screen type: {value!r}")
        return value

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "screenType": self.screen_type,
            "title": self.title,
            "subtitle": self.subtitle,
            "options": self.options,
            "sortOrder": self.sort_order,
            "isActive": self.is_active,
            **self.timestamps(),
        }
