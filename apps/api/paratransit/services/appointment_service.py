"""Appointment (ride) service - scheduling, driver assignment, status flow."""

import logging
from datetime import date
from uuid import UUID

from sqlalchemy.orm import Session, joinedload

from paratransit.db.enums import (
    APPOINTMENT_TRANSITIONS,
    AppointmentStatus,
    AuditAction,
    TERMINAL_APPOINTMENT_STATUSES,
)
from paratransit.db.models import Appointment, Client, Location, User
from paratransit.schemas.appointment import (
    AppointmentCreate,
    AppointmentRead,
    AppointmentUpdate,
)
from paratransit.services import audit_service
from paratransit.services.errors import InvalidTransitionError
from paratransit.utils.pagination import (
    PaginationParams,
    SortParams,
    apply_sort,
    paginate_query,
)

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = {
    "start_date": Appointment.start_date,
    "start_time": Appointment.start_time,
    "status": Appointment.status,
    "created_at": Appointment.created_at,
}


# =============================================================================
# Queries
# =============================================================================

def list_appointments(
    db: Session,
    pagination: PaginationParams,
    sort: SortParams,
    status: AppointmentStatus | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    driver_id: UUID | None = None,
    client_id: UUID | None = None,
) -> tuple[list[Appointment], int]:
    """
    List rides with optional filters.

    Callers limited to their own rides pass their id as driver_id.
    """
    query = db.query(Appointment).options(
        joinedload(Appointment.client),
        joinedload(Appointment.driver),
    )
    if status:
        query = query.filter(Appointment.status == status.value)
    if start_date:
        query = query.filter(Appointment.start_date >= start_date)
    if end_date:
        query = query.filter(Appointment.start_date <= end_date)
    if driver_id:
        query = query.filter(Appointment.driver_id == driver_id)
    if client_id:
        query = query.filter(Appointment.client_id == client_id)

    if sort.sort_by:
        query = apply_sort(query, sort, SORTABLE_COLUMNS, Appointment.start_date)
    else:
        query = query.order_by(Appointment.start_date, Appointment.start_time)
    return paginate_query(query, pagination)


def get_appointment(db: Session, appointment_id: UUID) -> Appointment | None:
    return (
        db.query(Appointment)
        .options(joinedload(Appointment.client), joinedload(Appointment.driver))
        .filter(Appointment.id == appointment_id)
        .first()
    )


def to_read(appointment: Appointment) -> AppointmentRead:
    """Response schema with client and driver display names."""
    return AppointmentRead(
        id=appointment.id,
        client_id=appointment.client_id,
        client_name=appointment.client.full_name if appointment.client else None,
        driver_id=appointment.driver_id,
        driver_name=appointment.driver.full_name if appointment.driver else None,
        dispatcher_id=appointment.dispatcher_id,
        created_by_user_id=appointment.created_by_user_id,
        status=appointment.status,
        start_date=appointment.start_date,
        start_time=appointment.start_time,
        estimated_duration_minutes=appointment.estimated_duration_minutes,
        pickup_location=appointment.pickup_location,
        destination_location=appointment.destination_location,
        has_additional_rider=appointment.has_additional_rider,
        trip_count=appointment.trip_count,
        trip_purpose=appointment.trip_purpose,
        notes=appointment.notes,
        donation_type=appointment.donation_type,
        donation_amount=appointment.donation_amount,
        miles_driven=appointment.miles_driven,
        created_at=appointment.created_at,
        updated_at=appointment.updated_at,
    )


# =============================================================================
# Reference Checks
# =============================================================================

def _require_client(db: Session, client_id: UUID) -> Client:
    client = db.get(Client, client_id)
    if not client or not client.is_active:
        raise ValueError("Client not found or inactive")
    return client


def _require_location(db: Session, location_id: UUID, label: str) -> None:
    if not db.get(Location, location_id):
        raise ValueError(f"{label} location not found")


def _require_staff(db: Session, user_id: UUID) -> User:
    user = db.get(User, user_id)
    if not user or user.is_deleted or not user.is_active:
        raise ValueError("Dispatcher not found or inactive")
    return user


def _require_driver(db: Session, driver_id: UUID) -> User:
    driver = db.get(User, driver_id)
    if not driver or driver.is_deleted or not driver.is_active or not driver.is_driver:
        raise ValueError("Driver not found, inactive, or not a driver")
    return driver


def _ensure_mutable(appointment: Appointment) -> None:
    if AppointmentStatus(appointment.status) in TERMINAL_APPOINTMENT_STATUSES:
        raise ValueError(f"Appointment is {appointment.status} and can no longer change")


# =============================================================================
# Mutations
# =============================================================================

def create_appointment(db: Session, data: AppointmentCreate, actor_id: UUID) -> Appointment:
    """
    Create a ride. A driver in the payload schedules it immediately.

    Raises:
        ValueError: Unknown client, location, dispatcher or driver
    """
    _require_client(db, data.client_id)
    _require_location(db, data.pickup_location, "Pickup")
    _require_location(db, data.destination_location, "Destination")
    dispatcher_id = data.dispatcher_id or actor_id
    _require_staff(db, dispatcher_id)
    if data.driver_id:
        _require_driver(db, data.driver_id)

    values = data.model_dump(exclude={"dispatcher_id"})
    appointment = Appointment(
        **values,
        dispatcher_id=dispatcher_id,
        created_by_user_id=actor_id,
        status=(
            AppointmentStatus.SCHEDULED.value
            if data.driver_id
            else AppointmentStatus.UNASSIGNED.value
        ),
    )
    db.add(appointment)
    db.flush()
    audit_service.log_action(
        db,
        AuditAction.ADD,
        user_id=actor_id,
        object_id=appointment.id,
        message="Appointment created",
        details={"client_id": data.client_id, "driver_id": data.driver_id},
    )
    db.commit()
    db.refresh(appointment)
    logger.info("Created appointment %s (%s)", appointment.id, appointment.status)
    return appointment


def update_appointment(
    db: Session,
    appointment: Appointment,
    data: AppointmentUpdate,
    actor_id: UUID,
) -> Appointment:
    """
    Raises:
        ValueError: Ride is terminal, or a referenced record is missing
    """
    _ensure_mutable(appointment)
    updates = data.model_dump(exclude_unset=True)
    for field in ("start_date", "start_time", "pickup_location", "destination_location",
                  "dispatcher_id", "has_additional_rider", "trip_count", "donation_type"):
        if field in updates and updates[field] is None:
            raise ValueError(f"{field} cannot be cleared")

    if "pickup_location" in updates:
        _require_location(db, updates["pickup_location"], "Pickup")
    if "destination_location" in updates:
        _require_location(db, updates["destination_location"], "Destination")
    if "dispatcher_id" in updates:
        _require_staff(db, updates["dispatcher_id"])

    before = {field: getattr(appointment, field) for field in updates}
    for field, value in updates.items():
        setattr(appointment, field, value)
    audit_service.log_action(
        db,
        AuditAction.CHANGE,
        user_id=actor_id,
        object_id=appointment.id,
        message="Appointment updated",
        details=audit_service.diff_changes(before, updates),
    )
    db.commit()
    db.refresh(appointment)
    return appointment


def assign_driver(
    db: Session,
    appointment: Appointment,
    driver_id: UUID | None,
    actor_id: UUID,
) -> Appointment:
    """
    Assign (Scheduled) or clear (Unassigned) the driver.

    Raises:
        ValueError: Ride is terminal or the driver is not eligible
    """
    _ensure_mutable(appointment)
    previous_driver = appointment.driver_id
    if driver_id is None:
        appointment.driver_id = None
        appointment.status = AppointmentStatus.UNASSIGNED.value
    else:
        _require_driver(db, driver_id)
        appointment.driver_id = driver_id
        appointment.status = AppointmentStatus.SCHEDULED.value

    audit_service.log_action(
        db,
        AuditAction.CHANGE,
        user_id=actor_id,
        object_id=appointment.id,
        message="Driver assigned" if driver_id else "Driver unassigned",
        details={"driver_id": {"from": previous_driver, "to": driver_id}},
    )
    db.commit()
    db.refresh(appointment)
    return appointment


def change_status(
    db: Session,
    appointment: Appointment,
    target: AppointmentStatus,
    actor_id: UUID,
    reason: str | None = None,
) -> Appointment:
    """
    Move a ride along the status flow.

    Scheduled requires an assigned driver; returning to Unassigned clears it.

    Raises:
        InvalidTransitionError: Transition not allowed from the current status
        ValueError: Scheduling a ride that has no driver
    """
    current = AppointmentStatus(appointment.status)
    if target not in APPOINTMENT_TRANSITIONS.get(current, frozenset()):
        raise InvalidTransitionError(current.value, target.value)

    if target == AppointmentStatus.SCHEDULED and not appointment.driver_id:
        raise ValueError("Assign a driver before scheduling")
    if target == AppointmentStatus.UNASSIGNED:
        appointment.driver_id = None

    appointment.status = target.value
    audit_service.log_action(
        db,
        AuditAction.CHANGE,
        user_id=actor_id,
        object_id=appointment.id,
        message=f"Status changed to {target.value}",
        details={"status": {"from": current.value, "to": target.value}, "reason": reason},
    )
    db.commit()
    db.refresh(appointment)
    return appointment
