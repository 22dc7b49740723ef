from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cashglitch.extensions import db

from .mixins import TimestampMixin


class PageContent(db.Model, TimestampMixin):
    """Hero / CTA / meta copy for one editable page (keyed by page_slug)."""

    __tablename__ = "page_content"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    page_slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)

    hero_title: Mapped[str] = mapped_column(String(255), nullable=False)
    hero_subtitle: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    hero_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    hero_badge_text: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    cta_title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    cta_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cta_button_text: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    cta_button_link: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    meta_title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    meta_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    meta_keywords: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "pageSlug": self.page_slug,
            "heroTitle": self.hero_title,
            "heroSubtitle": self.hero_subtitle,
            "heroDescription": self.hero_description,
            "heroBadgeText": self.hero_badge_text,
            "ctaTitle": self.cta_title,
            "ctaDescription": self.cta_description,
            "ctaButtonText": self.cta_button_text,
            "ctaButtonLink": self.cta_button_link,
            "metaTitle": self.meta_title,
            "metaDescription": self.meta_description,
            "metaKeywords": self.meta_keywords,
            "isActive": self.is_active,
            **self.timestamps(),
        }
