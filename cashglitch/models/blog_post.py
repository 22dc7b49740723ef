from __future__ import annotations

import re
from typing import Any, Dict, Optional

from sqlalchemy import Boolean, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cashglitch.extensions import db

from .mixins import TimestampMixin

_SLUG_STRIP = re.compile(r"[^a-z0-9]+")


def slugify(title: str) -> str:
    """'Hello, World!' -> 'hello-world'"""
    return _SLUG_STRIP.sub("-", (title or "").lower()).strip("-")


class BlogPost(db.Model, TimestampMixin):
    __tablename__ = "blog_posts"
    __table_args__ = (Index("ix_blog_posts_published_created", "published", "created_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    excerpt: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    author_email: Mapped[str] = mapped_column(String(255), nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "slug": self.slug,
            "title": self.title,
            "content": self.content,
            "excerpt": self.excerpt,
            "published": self.published,
            "authorEmail": self.author_email,
            "imageUrl": self.image_url,
            **self.timestamps(),
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"<BlogPost {self.slug} published={self.published}>"
