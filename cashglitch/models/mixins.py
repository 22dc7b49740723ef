# cashglitch/models/mixins.py
"""Shared SQLAlchemy mixins and serialization helpers."""

from datetime import date, datetime
from typing import Any, Dict, Optional

from sqlalchemy import event

from cashglitch.extensions import db


def iso(value: Optional[date]) -> Optional[str]:
    """ISO-8601 string for a date/datetime column, None when unset."""
    return value.isoformat() if value is not None else None


class TimestampMixin:
    """Adds created_at and updated_at columns with auto-refresh behavior."""

    created_at = db.Column(
        db.DateTime, default=datetime.utcnow, nullable=False, index=True
    )
    updated_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    @staticmethod
    def _set_updated_at(mapper, connection, target):
        """Ensure updated_at is always refreshed before update."""
        target.updated_at = datetime.utcnow()

    @classmethod
    def __declare_last__(cls):
        event.listen(cls, "before_update", cls._set_updated_at)

    def timestamps(self) -> Dict[str, Any]:
        return {
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }
