from __future__ import annotations

from typing import Any, Dict, Final, Optional

from sqlalchemy import CheckConstraint, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from cashglitch.extensions import db

from .mixins import TimestampMixin

DONATION_STATUSES: Final[tuple[str, ...]] = ("completed", "expired")


class Donation(db.Model, TimestampMixin):
    """A Stripe Checkout session outcome, written by the webhook."""

    __tablename__ = "donations"
    __table_args__ = (
        CheckConstraint("amount_cents >= 0", name="ck_donations_amount_nonneg"),
        Index("ix_donations_status_created", "status", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    stripe_session_id: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True, doc="Checkout session id (cs_...)"
    )
    stripe_payment_intent: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    currency: Mapped[str] = mapped_column(String(10), nullable=False, default="usd")
    donor_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    donor_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="completed", doc=f"{' | '.join(DONATION_STATUSES)}"
    )
    donation_type: Mapped[str] = mapped_column(String(32), nullable=False, default="one_time")
    meta: Mapped[Optional[Dict[str, Any]]] = mapped_column("metadata", db.JSON, nullable=True)

    @property
    def amount_dollars(self) -> float:
        return (self.amount_cents or 0) / 100.0

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Donation {self.stripe_session_id} ${self.amount_dollars:.2f} {self.status}>"
