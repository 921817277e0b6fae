"""Org database models: rides and driver unavailability."""

from __future__ import annotations

import uuid
from datetime import date, datetime, time
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Time,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from paratransit.db.base import OrgBase, new_id, utcnow
from paratransit.db.enums import DEFAULT_APPOINTMENT_STATUS, DonationType
from paratransit.db.models.auth import User
from paratransit.db.models.clients import Client
from paratransit.db.models.locations import Location


class Appointment(OrgBase):
    """
    A ride: client, optional driver, dispatcher, pickup and destination.

    status follows APPOINTMENT_TRANSITIONS. Scheduled and Completed rides
    always have a driver_id; returning to Unassigned clears it, while
    Cancelled and Withdrawn rides keep whichever driver they had.
    """

    __tablename__ = "appointments"
    __table_args__ = (
        Index("idx_appointments_start_date", "start_date"),
        Index("idx_appointments_driver_date", "driver_id", "start_date"),
        Index("idx_appointments_status", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_id)
    client_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("clients.id"), nullable=False
    )
    driver_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=True
    )
    dispatcher_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    created_by_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20), default=DEFAULT_APPOINTMENT_STATUS.value, nullable=False
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    estimated_duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    pickup_location: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("locations.id"), nullable=False
    )
    destination_location: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("locations.id"), nullable=False
    )
    has_additional_rider: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    trip_count: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    trip_purpose: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    donation_type: Mapped[str] = mapped_column(
        String(20), default=DonationType.NONE.value, nullable=False
    )
    donation_amount: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    miles_driven: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow, nullable=False)

    client: Mapped[Client] = relationship()
    driver: Mapped[User | None] = relationship(foreign_keys=[driver_id])
    dispatcher: Mapped[User] = relationship(foreign_keys=[dispatcher_id])
    pickup: Mapped[Location] = relationship(foreign_keys=[pickup_location])
    destination: Mapped[Location] = relationship(foreign_keys=[destination_location])


class Unavailability(OrgBase):
    """
    Block of time a user cannot drive.

    Non-recurring blocks cover start_date..end_date. Recurring blocks repeat
    every recurring_day_of_week. Blocks without is_all_day use
    start_time..end_time on each covered day.
    """

    __tablename__ = "unavailability"
    __table_args__ = (
        Index("idx_unavailability_user", "user_id"),
        Index("idx_unavailability_dates", "start_date", "end_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_id)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    end_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    is_all_day: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_recurring: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    recurring_day_of_week: Mapped[str | None] = mapped_column(String(10), nullable=True)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow, nullable=False)
