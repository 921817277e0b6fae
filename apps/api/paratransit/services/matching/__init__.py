"""Driver-matching scorer: ranks candidate drivers for a ride."""

from paratransit.services.matching.availability import block_conflicts, check_availability
from paratransit.services.matching.criteria import (
    best_attainable_score,
    meets_accessibility_requirements,
    score_mobility_equipment,
    score_special_accommodations,
    score_vehicle_match,
)
from paratransit.services.matching.load_balancing import round_half_up, score_load_balancing
from paratransit.services.matching.scoring import (
    calculate_driver_score,
    calculate_score_breakdown,
    generate_match_reasons,
    is_perfect_match,
    rank_drivers,
    score_driver,
)
from paratransit.services.matching.types import (
    AppointmentDetails,
    ClientNeeds,
    DriverProfile,
    MatchingContext,
    ScoreBreakdown,
    ScoredDriver,
    UnavailabilityBlock,
)


__all__ = [
    "AppointmentDetails",
    "ClientNeeds",
    "DriverProfile",
    "MatchingContext",
    "ScoreBreakdown",
    "ScoredDriver",
    "UnavailabilityBlock",
    "best_attainable_score",
    "block_conflicts",
    "calculate_driver_score",
    "calculate_score_breakdown",
    "check_availability",
    "generate_match_reasons",
    "is_perfect_match",
    "meets_accessibility_requirements",
    "rank_drivers",
    "round_half_up",
    "score_driver",
    "score_load_balancing",
    "score_mobility_equipment",
    "score_special_accommodations",
    "score_vehicle_match",
]
