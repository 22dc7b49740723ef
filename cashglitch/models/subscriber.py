from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cashglitch.extensions import db

from .mixins import iso


class Subscriber(db.Model):
    """Email captured by the intro sequence (table name kept as `emails`)."""

    __tablename__ = "emails"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    response: Mapped[Optional[str]] = mapped_column(String(10), nullable=True, doc="yes | no | NULL")
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, index=True
    )
    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True, doc="IPv4/IPv6")
    user_agent: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "response": self.response,
            "createdAt": iso(self.created_at),
            "ipAddress": self.ip_address,
            "userAgent": self.user_agent,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Subscriber {self.email} response={self.response}>"
