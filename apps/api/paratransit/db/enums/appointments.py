"""Appointment (ride) enums."""

from enum import Enum


class AppointmentStatus(str, Enum):
    """
    Ride lifecycle status.

    Flow: Unassigned ⇄ Scheduled → Completed
              ↘ Cancelled
              ↘ Withdrawn
    """

    UNASSIGNED = "Unassigned"  # No driver yet
    SCHEDULED = "Scheduled"  # Driver assigned
    CANCELLED = "Cancelled"  # Cancelled by client or staff
    COMPLETED = "Completed"  # Ride took place
    WITHDRAWN = "Withdrawn"  # Request withdrawn before the ride


class DonationType(str, Enum):
    """How the client donated for a ride."""

    CASH = "Cash"
    CHECK = "Check"
    ENVELOPE = "Envelope"
    ELECTRONIC = "Electronic"
    NONE = "None"


# Statuses that can no longer change
TERMINAL_APPOINTMENT_STATUSES = frozenset({
    AppointmentStatus.CANCELLED,
    AppointmentStatus.COMPLETED,
    AppointmentStatus.WITHDRAWN,
})

# Statuses that count toward a driver's weekly load
LOAD_COUNTED_STATUSES = (
    AppointmentStatus.SCHEDULED.value,
    AppointmentStatus.COMPLETED.value,
)

# Allowed status transitions (source -> targets)
APPOINTMENT_TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    AppointmentStatus.UNASSIGNED: frozenset({
        AppointmentStatus.SCHEDULED,
        AppointmentStatus.CANCELLED,
        AppointmentStatus.WITHDRAWN,
    }),
    AppointmentStatus.SCHEDULED: frozenset({
        AppointmentStatus.UNASSIGNED,
        AppointmentStatus.COMPLETED,
        AppointmentStatus.CANCELLED,
        AppointmentStatus.WITHDRAWN,
    }),
}

DEFAULT_APPOINTMENT_STATUS = AppointmentStatus.UNASSIGNED
