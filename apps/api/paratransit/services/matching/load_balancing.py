"""Load-balancing score: prefer drivers with fewer rides this week."""

import math

from paratransit.services.matching.types import DriverProfile, MatchingContext


MAX_LOAD_BALANCING_POINTS = 40
MIN_UNLIMITED_SCALE = 5


def round_half_up(value: float) -> int:
    """Round .5 toward +infinity (Python's round() is banker's rounding)."""
    return math.floor(value + 0.5)


def organization_scale(context: MatchingContext) -> int:
    """
    Ride count at which a driver scores zero.

    The highest positive max_rides_per_week across drivers. When every driver
    is unlimited, twice the busiest driver's rides this week, floored at 5.
    """
    caps = [cap for cap in context.all_drivers_max_rides if cap > 0]
    if caps:
        return max(caps)
    busiest = max(context.week_rides.values(), default=0)
    return max(busiest * 2, MIN_UNLIMITED_SCALE)


def score_load_balancing(driver: DriverProfile, context: MatchingContext) -> int:
    """0..40 points, decreasing linearly with this week's rides."""
    points_per_ride = MAX_LOAD_BALANCING_POINTS / organization_scale(context)
    score = max(0.0, MAX_LOAD_BALANCING_POINTS - context.rides_for(driver.id) * points_per_ride)
    return round_half_up(score)
