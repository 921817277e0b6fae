"""Driver matching backed by the org database.

Loads candidate drivers, weekly loads, concurrent rides and unavailability
for one appointment, then hands them to the scorer in services.matching.
"""

import logging
from datetime import date, timedelta
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from paratransit.db.enums import AppointmentStatus, LOAD_COUNTED_STATUSES
from paratransit.db.models import Appointment, Client, Unavailability, User
from paratransit.schemas.matching import (
    BaseScoreRead,
    PenaltiesRead,
    ScoreBreakdownRead,
    ScoredDriverRead,
    WarningsRead,
)
from paratransit.services import unavailability_service, user_service
from paratransit.services.matching import (
    AppointmentDetails,
    ClientNeeds,
    DriverProfile,
    MatchingContext,
    ScoredDriver,
    UnavailabilityBlock,
    rank_drivers,
)
from paratransit.services.matching.availability import appointment_window, time_overlaps

logger = logging.getLogger(__name__)


# =============================================================================
# Conversions
# =============================================================================

def driver_profile(user: User) -> DriverProfile:
    return DriverProfile(
        id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        phone=user.phone,
        vehicle_type=user.vehicle_type,
        can_accommodate_mobility_equipment=list(user.can_accommodate_mobility_equipment or []),
        can_accommodate_oxygen=user.can_accommodate_oxygen,
        can_accommodate_service_animal=user.can_accommodate_service_animal,
        can_accommodate_additional_rider=user.can_accommodate_additional_rider,
        max_rides_per_week=user.max_rides_per_week or 0,
    )


def client_needs(client: Client) -> ClientNeeds:
    return ClientNeeds(
        mobility_equipment=list(client.mobility_equipment or []),
        vehicle_types=list(client.vehicle_types or []),
        has_oxygen=client.has_oxygen,
        has_service_animal=client.has_service_animal,
    )


def appointment_details(appointment: Appointment) -> AppointmentDetails:
    destination = appointment.destination
    return AppointmentDetails(
        id=appointment.id,
        start_date=appointment.start_date,
        start_time=appointment.start_time,
        estimated_duration_minutes=appointment.estimated_duration_minutes,
        has_additional_rider=appointment.has_additional_rider,
        destination_city=destination.city if destination else None,
        destination_state=destination.state if destination else None,
    )


def unavailability_block(row: Unavailability) -> UnavailabilityBlock:
    return UnavailabilityBlock(
        user_id=row.user_id,
        start_date=row.start_date,
        end_date=row.end_date,
        start_time=row.start_time,
        end_time=row.end_time,
        is_all_day=row.is_all_day,
        is_recurring=row.is_recurring,
        recurring_day_of_week=row.recurring_day_of_week,
    )


# =============================================================================
# Context
# =============================================================================

def week_bounds(on: date) -> tuple[date, date]:
    """Monday and Sunday of the week containing a date."""
    monday = on - timedelta(days=on.weekday())
    return monday, monday + timedelta(days=6)


def weekly_ride_counts(
    db: Session,
    on: date,
    exclude_appointment_id: UUID | None = None,
    driver_ids: list[UUID] | None = None,
) -> dict[UUID, int]:
    """
    Scheduled/Completed rides per driver in the Monday-Sunday week of a date.

    driver_ids limits the counts to those drivers (the matching candidates).
    """
    monday, sunday = week_bounds(on)
    query = (
        db.query(Appointment.driver_id, func.count(Appointment.id))
        .filter(
            Appointment.driver_id.is_not(None),
            Appointment.status.in_(LOAD_COUNTED_STATUSES),
            Appointment.start_date >= monday,
            Appointment.start_date <= sunday,
        )
    )
    if exclude_appointment_id:
        query = query.filter(Appointment.id != exclude_appointment_id)
    if driver_ids is not None:
        query = query.filter(Appointment.driver_id.in_(driver_ids))
    rows = query.group_by(Appointment.driver_id).all()
    return {driver_id: count for driver_id, count in rows}


def concurrent_ride_drivers(db: Session, details: AppointmentDetails) -> set[UUID]:
    """Drivers with another Scheduled ride on the same date whose window overlaps."""
    target_start, target_end = appointment_window(details)
    rows = (
        db.query(Appointment)
        .filter(
            Appointment.id != details.id,
            Appointment.driver_id.is_not(None),
            Appointment.status == AppointmentStatus.SCHEDULED.value,
            Appointment.start_date == details.start_date,
        )
        .all()
    )
    busy: set[UUID] = set()
    for other in rows:
        other_start, other_end = appointment_window(AppointmentDetails(
            id=other.id,
            start_date=other.start_date,
            start_time=other.start_time,
            estimated_duration_minutes=other.estimated_duration_minutes,
        ))
        if time_overlaps(target_start, target_end, other_start, other_end):
            busy.add(other.driver_id)
    return busy


def build_context(
    db: Session,
    appointment: Appointment,
    drivers: list[User],
) -> MatchingContext:
    """Assemble everything the scorer needs for one appointment."""
    details = appointment_details(appointment)
    blocks: dict[UUID, list[UnavailabilityBlock]] = {}
    rows = unavailability_service.list_for_drivers_on(
        db, [d.id for d in drivers], appointment.start_date
    )
    for row in rows:
        blocks.setdefault(row.user_id, []).append(unavailability_block(row))

    return MatchingContext(
        appointment=details,
        client=client_needs(appointment.client),
        unavailability=blocks,
        week_rides=weekly_ride_counts(
            db, appointment.start_date, appointment.id, driver_ids=[d.id for d in drivers]
        ),
        concurrent_rides=concurrent_ride_drivers(db, details),
        all_drivers_max_rides=[d.max_rides_per_week or 0 for d in drivers],
    )


def get_matching_drivers(
    db: Session,
    appointment: Appointment,
    limit: int | None = None,
) -> list[ScoredDriver]:
    """Ranked candidate drivers for an appointment (hard filter applied)."""
    drivers = user_service.list_active_drivers(db)
    context = build_context(db, appointment, drivers)
    ranked = rank_drivers([driver_profile(d) for d in drivers], context, limit)
    logger.info(
        "Ranked drivers for appointment",
        extra={"context": {
            "appointment_id": str(appointment.id),
            "candidates": len(drivers),
            "returned": len(ranked),
        }},
    )
    return ranked


def to_read(scored: ScoredDriver) -> ScoredDriverRead:
    driver = scored.driver
    breakdown = scored.score_breakdown
    return ScoredDriverRead(
        id=driver.id,
        first_name=driver.first_name,
        last_name=driver.last_name,
        email=driver.email,
        phone=driver.phone,
        vehicle_type=driver.vehicle_type,
        can_accommodate_mobility_equipment=driver.can_accommodate_mobility_equipment,
        can_accommodate_oxygen=driver.can_accommodate_oxygen,
        can_accommodate_service_animal=driver.can_accommodate_service_animal,
        can_accommodate_additional_rider=driver.can_accommodate_additional_rider,
        max_rides_per_week=driver.max_rides_per_week,
        match_score=scored.match_score,
        match_reasons=scored.match_reasons,
        weekly_ride_count=scored.weekly_ride_count,
        is_perfect_match=scored.is_perfect_match,
        score_breakdown=ScoreBreakdownRead(
            total=breakdown.total,
            base_score=BaseScoreRead(**vars(breakdown.base_score)),
            penalties=PenaltiesRead(**vars(breakdown.penalties)),
            warnings=WarningsRead(**vars(breakdown.warnings)),
        ),
    )
