"""Unit tests for the driver-matching scorer (no database)."""

import uuid
from datetime import date, time

import pytest

from paratransit.services.matching import (
    AppointmentDetails,
    ClientNeeds,
    DriverProfile,
    MatchingContext,
    UnavailabilityBlock,
    best_attainable_score,
    block_conflicts,
    calculate_driver_score,
    calculate_score_breakdown,
    check_availability,
    generate_match_reasons,
    meets_accessibility_requirements,
    rank_drivers,
    round_half_up,
    score_driver,
    score_load_balancing,
    score_special_accommodations,
    score_vehicle_match,
)
from paratransit.services.matching.availability import appointment_window, weekday_name
from paratransit.services.matching.load_balancing import organization_scale


RIDE_DATE = date(2026, 3, 11)  # Wednesday


def _driver(**overrides) -> DriverProfile:
    values = {
        "id": uuid.uuid4(),
        "first_name": "Sam",
        "last_name": "Driver",
        "email": f"{uuid.uuid4().hex[:6]}@test.com",
    }
    values.update(overrides)
    return DriverProfile(**values)


def _context(client: ClientNeeds | None = None, **overrides) -> MatchingContext:
    appointment = overrides.pop("appointment", None) or AppointmentDetails(
        id=uuid.uuid4(),
        start_date=RIDE_DATE,
        start_time=time(10, 0),
        estimated_duration_minutes=60,
    )
    return MatchingContext(appointment=appointment, client=client or ClientNeeds(), **overrides)


# =============================================================================
# Load balancing
# =============================================================================

def test_round_half_up_differs_from_bankers_rounding():
    assert round_half_up(32.5) == 33
    assert round_half_up(37.5) == 38
    assert round_half_up(0.4) == 0


def test_load_balancing_uses_highest_cap_as_scale():
    driver = _driver()
    context = _context(week_rides={driver.id: 3}, all_drivers_max_rides=[5, 10, 0])

    assert organization_scale(context) == 10
    assert score_load_balancing(driver, context) == 28


def test_load_balancing_rounds_half_up():
    driver = _driver()
    context = _context(week_rides={driver.id: 3}, all_drivers_max_rides=[16])

    # 40 - 3 * 2.5 = 32.5
    assert score_load_balancing(driver, context) == 33


def test_load_balancing_unlimited_drivers_scale_on_busiest():
    busy, quiet = _driver(), _driver()
    context = _context(week_rides={busy.id: 4, quiet.id: 1}, all_drivers_max_rides=[0, 0])

    assert organization_scale(context) == 8
    assert score_load_balancing(busy, context) == 20
    assert score_load_balancing(quiet, context) == 35


def test_load_balancing_scale_floor_when_nobody_has_rides():
    driver = _driver()
    context = _context(all_drivers_max_rides=[0])

    assert organization_scale(context) == 5
    assert score_load_balancing(driver, context) == 40


def test_load_balancing_never_negative():
    driver = _driver()
    context = _context(week_rides={driver.id: 12}, all_drivers_max_rides=[10])

    assert score_load_balancing(driver, context) == 0


# =============================================================================
# Vehicle and accommodations
# =============================================================================

@pytest.mark.parametrize(
    "vehicle_type,preferences,expected",
    [
        ("sedan", [], 20),
        ("sedan", ["sedan", "small_suv"], 25),
        ("large_truck", ["sedan"], -15),
        (None, ["sedan"], -15),
    ],
)
def test_vehicle_match(vehicle_type, preferences, expected):
    driver = _driver(vehicle_type=vehicle_type)
    assert score_vehicle_match(driver, ClientNeeds(vehicle_types=preferences)) == expected


def test_special_accommodations_only_count_needed_items():
    driver = _driver(can_accommodate_oxygen=True, can_accommodate_service_animal=True)

    assert score_special_accommodations(driver, ClientNeeds()) == 0
    assert score_special_accommodations(driver, ClientNeeds(has_oxygen=True)) == 7.5
    assert score_special_accommodations(
        driver, ClientNeeds(has_oxygen=True, has_service_animal=True)
    ) == 15


def test_hard_filter_requires_every_piece_of_equipment():
    client = ClientNeeds(mobility_equipment=["cane", "rollator"])
    partial = _driver(can_accommodate_mobility_equipment=["cane"])
    full = _driver(can_accommodate_mobility_equipment=["cane", "rollator", "crutches"])

    assert not meets_accessibility_requirements(partial, _context(client))
    assert meets_accessibility_requirements(full, _context(client))


def test_hard_filter_oxygen_service_animal_and_additional_rider():
    appointment = AppointmentDetails(
        id=uuid.uuid4(),
        start_date=RIDE_DATE,
        start_time=time(10, 0),
        has_additional_rider=True,
    )
    client = ClientNeeds(has_oxygen=True, has_service_animal=True)
    capable = _driver(
        can_accommodate_oxygen=True,
        can_accommodate_service_animal=True,
        can_accommodate_additional_rider=True,
    )

    assert meets_accessibility_requirements(capable, _context(client, appointment=appointment))
    for missing in (
        "can_accommodate_oxygen",
        "can_accommodate_service_animal",
        "can_accommodate_additional_rider",
    ):
        driver = _driver(**{
            "can_accommodate_oxygen": True,
            "can_accommodate_service_animal": True,
            "can_accommodate_additional_rider": True,
            missing: False,
        })
        assert not meets_accessibility_requirements(driver, _context(client, appointment=appointment))


def test_vehicle_mismatch_is_scored_not_filtered():
    driver = _driver(vehicle_type="sedan")
    context = _context(ClientNeeds(vehicle_types=["large_suv"]))

    assert meets_accessibility_requirements(driver, context)
    assert calculate_driver_score(driver, context) == 40 - 15 + 20


# =============================================================================
# Availability
# =============================================================================

def _block(**overrides) -> UnavailabilityBlock:
    values = {
        "user_id": uuid.uuid4(),
        "start_date": RIDE_DATE,
        "end_date": RIDE_DATE,
    }
    values.update(overrides)
    return UnavailabilityBlock(**values)


def test_weekday_name():
    assert weekday_name(RIDE_DATE) == "Wednesday"


def test_appointment_window_defaults_to_one_hour_and_does_not_wrap():
    late = AppointmentDetails(id=uuid.uuid4(), start_date=RIDE_DATE, start_time=time(23, 30))
    assert appointment_window(late) == (23 * 60 + 30, 24 * 60 + 30)


def test_all_day_block_conflicts_on_every_covered_date():
    appointment = _context().appointment
    block = _block(start_date=date(2026, 3, 9), end_date=date(2026, 3, 13), is_all_day=True)

    assert block_conflicts(block, appointment)
    assert not block_conflicts(
        _block(start_date=date(2026, 3, 12), end_date=date(2026, 3, 13), is_all_day=True),
        appointment,
    )


def test_timed_block_overlap_is_half_open():
    appointment = _context().appointment  # 10:00-11:00

    assert block_conflicts(_block(start_time=time(9, 30), end_time=time(10, 30)), appointment)
    assert not block_conflicts(_block(start_time=time(11, 0), end_time=time(12, 0)), appointment)
    assert not block_conflicts(_block(start_time=time(8, 0), end_time=time(10, 0)), appointment)


def test_timed_block_missing_a_time_never_conflicts():
    appointment = _context().appointment
    assert not block_conflicts(_block(start_time=time(9, 0), end_time=None), appointment)


def test_recurring_block_matches_weekday_only():
    appointment = _context().appointment
    long_ago = date(2020, 1, 1)

    wednesday = _block(
        start_date=long_ago, end_date=long_ago,
        is_recurring=True, recurring_day_of_week="Wednesday", is_all_day=True,
    )
    thursday = _block(
        start_date=long_ago, end_date=long_ago,
        is_recurring=True, recurring_day_of_week="Thursday", is_all_day=True,
    )
    assert block_conflicts(wednesday, appointment)
    assert not block_conflicts(thursday, appointment)


def test_check_availability_looks_only_at_the_drivers_blocks():
    driver, other = _driver(), _driver()
    context = _context(unavailability={other.id: [_block(user_id=other.id, is_all_day=True)]})

    assert check_availability(driver, context)
    assert not check_availability(other, context)


# =============================================================================
# Breakdown, reasons and ranking
# =============================================================================

def test_penalties_stack_and_raise_warnings():
    driver = _driver(max_rides_per_week=2)
    context = _context(
        unavailability={driver.id: [_block(user_id=driver.id, is_all_day=True)]},
        week_rides={driver.id: 2},
        concurrent_rides={driver.id},
        all_drivers_max_rides=[2],
    )

    breakdown = calculate_score_breakdown(driver, context)

    assert breakdown.base_score.load_balancing == 0
    assert breakdown.penalties.unavailable == -30
    assert breakdown.penalties.concurrent_ride == -25
    assert breakdown.penalties.over_max_rides == -20
    assert breakdown.total == 0 + 20 + 20 + 0 - 30 - 25 - 20
    assert breakdown.warnings.has_unavailability
    assert breakdown.warnings.has_concurrent_ride
    assert breakdown.warnings.is_over_max_rides
    assert not breakdown.warnings.has_vehicle_mismatch


def test_unlimited_driver_is_never_over_max():
    driver = _driver(max_rides_per_week=0)
    context = _context(week_rides={driver.id: 30})

    assert calculate_score_breakdown(driver, context).penalties.over_max_rides == 0


def test_match_reasons_positives_then_warnings():
    driver = _driver(vehicle_type="sedan", can_accommodate_oxygen=True, max_rides_per_week=2)
    context = _context(
        ClientNeeds(vehicle_types=["sedan"], has_oxygen=True),
        week_rides={driver.id: 2},
        concurrent_rides={driver.id},
        all_drivers_max_rides=[2],
    )

    assert generate_match_reasons(driver, context) == [
        "Low weekly load (2 rides)",
        "Can accommodate oxygen",
        "Vehicle type matches preference (sedan)",
        "⚠️ Has concurrent ride scheduled",
        "⚠️ At weekly ride limit (2/2)",
    ]


def test_match_reasons_for_idle_driver():
    driver = _driver()
    assert generate_match_reasons(driver, _context()) == ["No rides this week"]


def test_perfect_match_requires_best_attainable_total():
    client = ClientNeeds(vehicle_types=["sedan"], has_service_animal=True)
    ideal = _driver(vehicle_type="sedan", can_accommodate_service_animal=True)
    busy = _driver(vehicle_type="sedan", can_accommodate_service_animal=True)
    context = _context(client, week_rides={busy.id: 1}, all_drivers_max_rides=[0, 0])

    assert best_attainable_score(client) == 40 + 25 + 20 + 7.5
    assert score_driver(ideal, context).is_perfect_match
    assert not score_driver(busy, context).is_perfect_match


def test_filtered_driver_has_no_score():
    driver = _driver()
    context = _context(ClientNeeds(has_oxygen=True))

    assert calculate_driver_score(driver, context) is None
    assert score_driver(driver, context) is None


def test_rank_drivers_orders_by_score_then_load_then_name():
    alpha = _driver(first_name="Al", last_name="Zeta")
    bravo = _driver(first_name="Bo", last_name="Adams")
    charlie = _driver(first_name="Cy", last_name="Brown")
    blocked = _driver(first_name="Di", last_name="Able")
    no_oxygen_needed = ClientNeeds()
    context = _context(
        no_oxygen_needed,
        week_rides={charlie.id: 1},
        unavailability={blocked.id: [_block(user_id=blocked.id, is_all_day=True)]},
        all_drivers_max_rides=[0, 0, 0, 0],
    )

    ranked = rank_drivers([alpha, bravo, charlie, blocked], context)

    assert [s.driver.last_name for s in ranked] == ["Adams", "Zeta", "Brown", "Able"]
    assert ranked[0].match_score == ranked[1].match_score == 80
    assert ranked[-1].match_score == 50


def test_rank_drivers_drops_filtered_and_applies_limit():
    capable = [_driver(can_accommodate_oxygen=True) for _ in range(3)]
    incapable = _driver()
    context = _context(ClientNeeds(has_oxygen=True))

    ranked = rank_drivers(capable + [incapable], context, limit=2)

    assert len(ranked) == 2
    assert incapable.id not in {s.driver.id for s in ranked}
