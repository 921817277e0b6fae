"""Driver scoring, explanation and ranking.

Points: load balancing (0..40), vehicle type (-15..25), mobility equipment
(20), special accommodations (0..15). Penalties: unavailable (-30),
concurrent ride (-25), at/over weekly cap (-20). Totals fall in [-90, 100].
"""

from paratransit.services.matching.availability import check_availability
from paratransit.services.matching.criteria import (
    best_attainable_score,
    meets_accessibility_requirements,
    score_mobility_equipment,
    score_special_accommodations,
    score_vehicle_match,
)
from paratransit.services.matching.load_balancing import score_load_balancing
from paratransit.services.matching.types import (
    BaseScores,
    ClientNeeds,
    DriverProfile,
    MatchingContext,
    Penalties,
    ScoreBreakdown,
    ScoredDriver,
    Warnings,
)


UNAVAILABLE_PENALTY = -30
CONCURRENT_RIDE_PENALTY = -25
OVER_MAX_RIDES_PENALTY = -20
WARNING_PREFIX = "⚠️ "


def is_at_ride_limit(driver: DriverProfile, context: MatchingContext) -> bool:
    cap = driver.max_rides_per_week or 0
    return cap > 0 and context.rides_for(driver.id) >= cap


def calculate_score_breakdown(driver: DriverProfile, context: MatchingContext) -> ScoreBreakdown:
    """Itemized score; does not apply the accessibility hard filter."""
    base = BaseScores(
        load_balancing=score_load_balancing(driver, context),
        vehicle_match=score_vehicle_match(driver, context.client),
        mobility_equipment=score_mobility_equipment(driver, context.client),
        special_accommodations=score_special_accommodations(driver, context.client),
    )
    penalties = Penalties(
        unavailable=0 if check_availability(driver, context) else UNAVAILABLE_PENALTY,
        concurrent_ride=CONCURRENT_RIDE_PENALTY if driver.id in context.concurrent_rides else 0,
        over_max_rides=OVER_MAX_RIDES_PENALTY if is_at_ride_limit(driver, context) else 0,
    )
    total = (
        base.load_balancing
        + base.vehicle_match
        + base.mobility_equipment
        + base.special_accommodations
        + penalties.unavailable
        + penalties.concurrent_ride
        + penalties.over_max_rides
    )
    warnings = Warnings(
        has_unavailability=penalties.unavailable < 0,
        has_concurrent_ride=penalties.concurrent_ride < 0,
        is_over_max_rides=penalties.over_max_rides < 0,
        has_vehicle_mismatch=base.vehicle_match < 0,
    )
    return ScoreBreakdown(total=total, base_score=base, penalties=penalties, warnings=warnings)


def calculate_driver_score(driver: DriverProfile, context: MatchingContext) -> float | None:
    """Total score, or None when the driver fails the accessibility hard filter."""
    if not meets_accessibility_requirements(driver, context):
        return None
    return calculate_score_breakdown(driver, context).total


def generate_match_reasons(driver: DriverProfile, context: MatchingContext) -> list[str]:
    """Human-readable reasons, positives first, then warnings."""
    reasons: list[str] = []
    client = context.client

    rides = context.rides_for(driver.id)
    if rides == 0:
        reasons.append("No rides this week")
    elif rides <= 2:
        reasons.append(f"Low weekly load ({rides} rides)")

    if client.has_oxygen and driver.can_accommodate_oxygen:
        reasons.append("Can accommodate oxygen")
    if client.has_service_animal and driver.can_accommodate_service_animal:
        reasons.append("Can accommodate service animal")
    if driver.vehicle_type and driver.vehicle_type in (client.vehicle_types or []):
        reasons.append(f"Vehicle type matches preference ({driver.vehicle_type})")

    if not check_availability(driver, context):
        reasons.append(f"{WARNING_PREFIX}Unavailable during appointment time")
    if driver.id in context.concurrent_rides:
        reasons.append(f"{WARNING_PREFIX}Has concurrent ride scheduled")
    if is_at_ride_limit(driver, context):
        reasons.append(f"{WARNING_PREFIX}At weekly ride limit ({rides}/{driver.max_rides_per_week})")

    return reasons


def is_perfect_match(breakdown: ScoreBreakdown, client: ClientNeeds) -> bool:
    """No warnings and the highest total attainable for this client."""
    return not breakdown.warnings.any() and breakdown.total == best_attainable_score(client)


def score_driver(driver: DriverProfile, context: MatchingContext) -> ScoredDriver | None:
    if not meets_accessibility_requirements(driver, context):
        return None
    breakdown = calculate_score_breakdown(driver, context)
    return ScoredDriver(
        driver=driver,
        match_score=breakdown.total,
        match_reasons=generate_match_reasons(driver, context),
        weekly_ride_count=context.rides_for(driver.id),
        score_breakdown=breakdown,
        is_perfect_match=is_perfect_match(breakdown, context.client),
    )


def rank_drivers(
    drivers: list[DriverProfile],
    context: MatchingContext,
    limit: int | None = None,
) -> list[ScoredDriver]:
    """
    Score and order qualifying drivers.

    Order: score desc, weekly rides asc, then last and first name. Drivers
    failing the hard filter are dropped.
    """
    scored = [s for s in (score_driver(d, context) for d in drivers) if s is not None]
    scored.sort(key=lambda s: (
        -s.match_score,
        s.weekly_ride_count,
        s.driver.last_name.lower(),
        s.driver.first_name.lower(),
    ))
    if limit is not None:
        scored = scored[:limit]
    return scored
