from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from sqlalchemy import Boolean, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cashglitch.extensions import db

from .mixins import TimestampMixin


def parse_tags(raw: Any) -> Optional[List[str]]:
    """
    Tags arrive as a list, a JSON-encoded list, or a comma-separated string.
    """
    if not raw:
        return None
    if isinstance(raw, list):
        return [str(t) for t in raw]
    if isinstance(raw, str):
        try:
            parsed = json.loads(raw)
        except ValueError:
            return [t.strip() for t in raw.split(",") if t.strip()]
        return [str(t) for t in parsed] if isinstance(parsed, list) else [raw]
    return None


class PageItem(db.Model, TimestampMixin):
    """A listing (organization, program, job...) shown on an editable page."""

    __tablename__ = "page_items"
    __table_args__ = (Index("ix_page_items_slug_active", "page_slug", "is_active"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    page_slug: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    deadline: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    value: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    tags: Mapped[Optional[Any]] = mapped_column(db.JSON, nullable=True)
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "pageSlug": self.page_slug,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "location": self.location,
            "deadline": self.deadline,
            "value": self.value,
            "website": self.website,
            "imageUrl": self.image_url,
            "tags": parse_tags(self.tags),
            "isFeatured": self.is_featured,
            "sortOrder": self.sort_order,
            "isActive": self.is_active,
            **self.timestamps(),
        }
