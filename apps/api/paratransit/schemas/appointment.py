"""Appointment (ride) schemas."""

from datetime import date, datetime, time
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from paratransit.db.enums import AppointmentStatus, DonationType


class AppointmentCreate(BaseModel):
    """
    Request schema for creating a ride.

    Supplying driver_id schedules the ride immediately.
    dispatcher_id defaults to the caller.
    """
    model_config = {"use_enum_values": True}

    client_id: UUID
    driver_id: UUID | None = None
    dispatcher_id: UUID | None = None
    start_date: date
    start_time: time
    estimated_duration_minutes: int | None = Field(None, ge=1, le=1440)
    pickup_location: UUID
    destination_location: UUID
    has_additional_rider: bool = False
    trip_count: int = Field(1, ge=1, le=10)
    trip_purpose: str | None = None
    notes: str | None = None
    donation_type: DonationType = DonationType.NONE
    donation_amount: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)


class AppointmentUpdate(BaseModel):
    """Partial update of ride details (status and driver have their own endpoints)."""
    model_config = {"use_enum_values": True}

    start_date: date | None = None
    start_time: time | None = None
    estimated_duration_minutes: int | None = Field(None, ge=1, le=1440)
    pickup_location: UUID | None = None
    destination_location: UUID | None = None
    dispatcher_id: UUID | None = None
    has_additional_rider: bool | None = None
    trip_count: int | None = Field(None, ge=1, le=10)
    trip_purpose: str | None = None
    notes: str | None = None
    donation_type: DonationType | None = None
    donation_amount: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)
    miles_driven: int | None = Field(None, ge=0)


class AppointmentAssign(BaseModel):
    """Assign (driver_id set) or unassign (driver_id null) a driver."""
    driver_id: UUID | None


class AppointmentStatusChange(BaseModel):
    status: AppointmentStatus
    reason: str | None = Field(None, max_length=500)


class AppointmentRead(BaseModel):
    id: UUID
    client_id: UUID
    client_name: str | None = None
    driver_id: UUID | None
    driver_name: str | None = None
    dispatcher_id: UUID
    created_by_user_id: UUID
    status: AppointmentStatus
    start_date: date
    start_time: time
    estimated_duration_minutes: int | None
    pickup_location: UUID
    destination_location: UUID
    has_additional_rider: bool
    trip_count: int
    trip_purpose: str | None
    notes: str | None
    donation_type: str
    donation_amount: Decimal | None
    miles_driven: int | None
    created_at: datetime
    updated_at: datetime


class AppointmentListResponse(BaseModel):
    items: list[AppointmentRead]
    total: int
    page: int
    per_page: int
    pages: int
