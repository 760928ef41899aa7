"""
Key-value blob model backing the request stores.

Each store keeps its whole collection as one JSON document under a fixed key.
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import String, JSON
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoreBlob(Base):
    """
    SQLAlchemy model for one stored collection.

    Attributes:
        key: Store key (e.g. ``requestHistory``)
        payload: The JSON-serialized collection
        updated_at: Timestamp of the last write
    """
    __tablename__ = "store_blobs"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    payload: Mapped[Any] = mapped_column(JSON, default=list)
    updated_at: Mapped[datetime] = mapped_column(default=_utcnow, onupdate=_utcnow)
