"""Org database models: riders (clients)."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import JSON, Boolean, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from paratransit.db.base import OrgBase, new_id, utcnow
from paratransit.db.enums import ContactPreference
from paratransit.db.models.locations import Location


class Client(OrgBase):
    """Person who receives rides. Soft-deleted by clearing is_active."""

    __tablename__ = "clients"
    __table_args__ = (
        Index("clients_address_idx", "address_location"),
        Index("clients_last_name_idx", "last_name"),
        Index("clients_created_at_idx", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_id)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    phone_is_cell: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    secondary_phone: Mapped[str | None] = mapped_column(Text, nullable=True)
    secondary_phone_is_cell: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    contact_preference: Mapped[str] = mapped_column(
        String(10), default=ContactPreference.PHONE.value, nullable=False
    )
    allow_messages: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    gender: Mapped[str] = mapped_column(String(10), nullable=False)
    birth_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    birth_month: Mapped[int | None] = mapped_column(Integer, nullable=True)
    lives_alone: Mapped[bool] = mapped_column(Boolean, nullable=False)
    address_location: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("locations.id", ondelete="RESTRICT"), nullable=False
    )

    # Accessibility
    mobility_equipment: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    vehicle_types: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    has_oxygen: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    has_service_animal: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    other_limitations: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    pickup_instructions: Mapped[str | None] = mapped_column(Text, nullable=True)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow, nullable=False)

    address: Mapped[Location] = relationship()

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
