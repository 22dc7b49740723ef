from __future__ import annotations

# -----------------------------------------------------------------------------
# Category: editable homepage tiles.
# - icon is one of constants.Icon (validated on assignment)
# - click_count only ever moves through an atomic UPDATE (see routes.content);
#   the admin API treats it as read-only
# -----------------------------------------------------------------------------
from typing import Any, Dict, Optional

from sqlalchemy import Boolean, CheckConstraint, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, validates

from cashglitch.constants import DEFAULT_ICON, Icon
from cashglitch.extensions import db

from .mixins import TimestampMixin


class Category(db.Model, TimestampMixin):
    __tablename__ = "categories"
    __table_args__ = (
        CheckConstraint("click_count >= 0", name="ck_categories_click_count_nonneg"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    href: Mapped[str] = mapped_column(String(500), nullable=False)
    icon: Mapped[str] = mapped_column(String(50), nullable=False, default=DEFAULT_ICON.value)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    click_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    @validates("icon")
    def _validate_icon(self, key: str, value: Any) -> str:
        if value is None:
            return DEFAULT_ICON.value
        if isinstance(value, Icon):
            return value.value
        return Icon.parse(value).value

    def as_dict(self, include_stats: bool = False) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "href": self.href,
            "icon": Icon.coerce(self.icon).value,
            "sortOrder": self.sort_order,
            "isActive": self.is_active,
        }
        if include_stats:
            data["clickCount"] = self.click_count
        data.update(self.timestamps())
        return data

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Category {self.id} {self.title!r} clicks={self.click_count}>"
