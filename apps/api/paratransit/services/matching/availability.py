"""Unavailability conflict checks."""

from datetime import date, time

from paratransit.services.matching.types import (
    AppointmentDetails,
    DriverProfile,
    MatchingContext,
    UnavailabilityBlock,
)


DEFAULT_DURATION_MINUTES = 60


def _minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def weekday_name(value: date) -> str:
    """Monday..Sunday for a calendar date (locale-independent)."""
    return ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")[
        value.weekday()
    ]


def appointment_window(appointment: AppointmentDetails) -> tuple[int, int]:
    """
    Appointment start/end as minutes from midnight.

    The end is not wrapped at midnight, so a late ride still overlaps
    blocks later that evening.
    """
    start = _minutes(appointment.start_time)
    duration = appointment.estimated_duration_minutes or DEFAULT_DURATION_MINUTES
    return start, start + duration


def time_overlaps(start1: int, end1: int, start2: int, end2: int) -> bool:
    """Half-open interval overlap: touching endpoints do not conflict."""
    return start1 < end2 and start2 < end1


def block_conflicts(block: UnavailabilityBlock, appointment: AppointmentDetails) -> bool:
    """
    Whether one unavailability block covers the appointment.

    Recurring blocks apply on their weekday; other blocks on every date from
    start_date to end_date inclusive. All-day blocks conflict outright; timed
    blocks conflict when their window overlaps the ride. A timed block
    missing either time never conflicts.
    """
    if block.is_recurring:
        applies = block.recurring_day_of_week == weekday_name(appointment.start_date)
    else:
        applies = block.start_date <= appointment.start_date <= block.end_date
    if not applies:
        return False

    if block.is_all_day:
        return True
    if block.start_time is None or block.end_time is None:
        return False

    ride_start, ride_end = appointment_window(appointment)
    return time_overlaps(ride_start, ride_end, _minutes(block.start_time), _minutes(block.end_time))


def check_availability(driver: DriverProfile, context: MatchingContext) -> bool:
    """True when none of the driver's blocks overlap the appointment."""
    for block in context.unavailability.get(driver.id, []):
        if block_conflicts(block, context.appointment):
            return False
    return True
