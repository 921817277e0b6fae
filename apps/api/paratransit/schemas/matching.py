"""Driver-matching response schemas."""

from uuid import UUID

from pydantic import BaseModel


class BaseScoreRead(BaseModel):
    load_balancing: float
    vehicle_match: float
    mobility_equipment: float
    special_accommodations: float


class PenaltiesRead(BaseModel):
    unavailable: float
    concurrent_ride: float
    over_max_rides: float


class WarningsRead(BaseModel):
    has_unavailability: bool
    has_concurrent_ride: bool
    is_over_max_rides: bool
    has_vehicle_mismatch: bool


class ScoreBreakdownRead(BaseModel):
    total: float
    base_score: BaseScoreRead
    penalties: PenaltiesRead
    warnings: WarningsRead


class ScoredDriverRead(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    email: str
    phone: str | None
    vehicle_type: str | None
    can_accommodate_mobility_equipment: list[str]
    can_accommodate_oxygen: bool
    can_accommodate_service_animal: bool
    can_accommodate_additional_rider: bool
    max_rides_per_week: int
    match_score: float
    match_reasons: list[str]
    weekly_ride_count: int
    is_perfect_match: bool
    score_breakdown: ScoreBreakdownRead


class MatchingDriversResponse(BaseModel):
    appointment_id: UUID
    drivers: list[ScoredDriverRead]
