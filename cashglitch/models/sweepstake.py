from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, validates

from cashglitch.constants import DEFAULT_TICKET_PRICE_CENTS, SWEEPSTAKE_STATUSES
from cashglitch.extensions import db

from .mixins import TimestampMixin, iso


class Sweepstake(db.Model, TimestampMixin):
    __tablename__ = "sweepstakes"
    __table_args__ = (
        CheckConstraint("ticket_price_cents >= 0", name="ck_sweepstakes_price_nonneg"),
        CheckConstraint("tickets_sold >= 0", name="ck_sweepstakes_sold_nonneg"),
        Index("ix_sweepstakes_status_featured", "status", "is_featured"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    prize_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # ── Tickets (cents) ─────────────────────────────────────────
    ticket_price_cents: Mapped[int] = mapped_column(
        Integer, nullable=False, default=DEFAULT_TICKET_PRICE_CENTS, doc="Ticket price in cents"
    )
    max_tickets: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, doc="NULL = unlimited")
    tickets_sold: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    draw_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default="active",
        index=True,
        doc=f"Status: {', '.join(SWEEPSTAKE_STATUSES)}",
    )
    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    @validates("status")
    def _validate_status(self, key: str, value: Optional[str]) -> str:
        status = (value or "active").strip().lower()
        if status not in SWEEPSTAKE_STATUSES:
            raise ValueError(f"Unknown sweepstake status: {value!r}")
        return status

    @property
    def tickets_remaining(self) -> Optional[int]:
        if not self.max_tickets:
            return None
        return max(0, self.max_tickets - (self.tickets_sold or 0))

    def can_sell(self, count: int) -> bool:
        remaining = self.tickets_remaining
        return remaining is None or count <= remaining

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "prizeDescription": self.prize_description,
            "ticketPriceCents": self.ticket_price_cents,
            "maxTickets": self.max_tickets,
            "ticketsSold": self.tickets_sold,
            "drawDate": iso(self.draw_date),
            "status": self.status,
            "imageUrl": self.image_url,
            "isFeatured": self.is_featured,
            **self.timestamps(),
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Sweepstake {self.id} {self.title!r} status={self.status}>"
