"""AppSetting ORM — local key-value store backing the config fallback.

Invariants:
    - key is the primary key (one row per AppSettingKey)
    - value holds the JSON document as-is (dict or str)
    - updated_at refreshed on every write

Design Decisions:
    - JSON column over typed columns: the remote store is schemaless JSON and
      the local copy mirrors it byte for byte
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import String, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from thaiat.db.base import Base


class AppSetting(Base):
    """One cached setting (app config document or override URL)."""
    __tablename__ = "app_settings"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[Any] = mapped_column(JSON, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
