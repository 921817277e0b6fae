"""Org database models: organization-wide settings (single row)."""

from datetime import date, datetime

from sqlalchemy import Boolean, Date, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from paratransit.db.base import OrgBase, utcnow


class OrgSettings(OrgBase):
    """Singleton row (id=1) holding digest scheduling preferences."""

    __tablename__ = "org_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)
    timezone: Mapped[str] = mapped_column(String(50), nullable=False)
    close_time: Mapped[str] = mapped_column(String(5), nullable=False)  # HH:MM, org-local
    digest_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    last_digest_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow, nullable=False)
