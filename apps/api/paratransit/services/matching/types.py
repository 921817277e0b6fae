"""Value types consumed and produced by the driver-matching scorer."""

from dataclasses import dataclass, field
from datetime import date, time
from uuid import UUID


@dataclass
class DriverProfile:
    """The subset of a driver's record the scorer looks at."""
    id: UUID
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
    vehicle_type: str | None = None
    can_accommodate_mobility_equipment: list[str] = field(default_factory=list)
    can_accommodate_oxygen: bool = False
    can_accommodate_service_animal: bool = False
    can_accommodate_additional_rider: bool = False
    max_rides_per_week: int = 0  # 0 = unlimited


@dataclass
class ClientNeeds:
    mobility_equipment: list[str] = field(default_factory=list)
    vehicle_types: list[str] = field(default_factory=list)  # Preferred; empty = no preference
    has_oxygen: bool = False
    has_service_animal: bool = False


@dataclass
class AppointmentDetails:
    id: UUID
    start_date: date
    start_time: time
    estimated_duration_minutes: int | None = None
    has_additional_rider: bool = False
    destination_city: str | None = None
    destination_state: str | None = None


@dataclass
class UnavailabilityBlock:
    user_id: UUID
    start_date: date
    end_date: date
    start_time: time | None = None
    end_time: time | None = None
    is_all_day: bool = False
    is_recurring: bool = False
    recurring_day_of_week: str | None = None  # "Monday".."Sunday"


@dataclass
class MatchingContext:
    """
    Everything the scorer needs about one appointment.

    week_rides holds counts for the appointment's Monday-Sunday week and
    covers every driver, so it also drives the load-balancing scale.
    all_drivers_max_rides lists each driver's max_rides_per_week.
    """
    appointment: AppointmentDetails
    client: ClientNeeds
    unavailability: dict[UUID, list[UnavailabilityBlock]] = field(default_factory=dict)
    week_rides: dict[UUID, int] = field(default_factory=dict)
    concurrent_rides: set[UUID] = field(default_factory=set)
    all_drivers_max_rides: list[int] = field(default_factory=list)

    def rides_for(self, driver_id: UUID) -> int:
        return self.week_rides.get(driver_id, 0)


@dataclass
class BaseScores:
    load_balancing: float
    vehicle_match: float
    mobility_equipment: float
    special_accommodations: float


@dataclass
class Penalties:
    unavailable: float
    concurrent_ride: float
    over_max_rides: float


@dataclass
class Warnings:
    has_unavailability: bool
    has_concurrent_ride: bool
    is_over_max_rides: bool
    has_vehicle_mismatch: bool

    def any(self) -> bool:
        return (
            self.has_unavailability
            or self.has_concurrent_ride
            or self.is_over_max_rides
            or self.has_vehicle_mismatch
        )


@dataclass
class ScoreBreakdown:
    total: float
    base_score: BaseScores
    penalties: Penalties
    warnings: Warnings


@dataclass
class ScoredDriver:
    driver: DriverProfile
    match_score: float
    match_reasons: list[str]
    weekly_ride_count: int
    score_breakdown: ScoreBreakdown
    is_perfect_match: bool
