"""Vehicle and accessibility scoring criteria."""

from paratransit.services.matching.types import ClientNeeds, DriverProfile, MatchingContext


VEHICLE_NO_PREFERENCE = 20
VEHICLE_MATCH = 25
VEHICLE_MISMATCH = -15
MOBILITY_EQUIPMENT_POINTS = 20
OXYGEN_POINTS = 7.5
SERVICE_ANIMAL_POINTS = 7.5


def meets_accessibility_requirements(driver: DriverProfile, context: MatchingContext) -> bool:
    """
    Hard filter: can the driver carry this client on this ride at all?

    Every piece of the client's mobility equipment, oxygen, a service animal
    and the appointment's additional rider must be accommodated. Vehicle type
    is scored, not filtered.
    """
    client, appointment = context.client, context.appointment

    driver_equipment = set(driver.can_accommodate_mobility_equipment or [])
    if not set(client.mobility_equipment or []) <= driver_equipment:
        return False
    if client.has_oxygen and not driver.can_accommodate_oxygen:
        return False
    if client.has_service_animal and not driver.can_accommodate_service_animal:
        return False
    if appointment.has_additional_rider and not driver.can_accommodate_additional_rider:
        return False
    return True


def score_vehicle_match(driver: DriverProfile, client: ClientNeeds) -> int:
    """20 with no preference, 25 on a match, -15 on a mismatch."""
    if not client.vehicle_types:
        return VEHICLE_NO_PREFERENCE
    if driver.vehicle_type and driver.vehicle_type in client.vehicle_types:
        return VEHICLE_MATCH
    return VEHICLE_MISMATCH


def score_mobility_equipment(driver: DriverProfile, client: ClientNeeds) -> int:
    # Drivers reaching this point already accommodate all equipment
    return MOBILITY_EQUIPMENT_POINTS


def score_special_accommodations(driver: DriverProfile, client: ClientNeeds) -> float:
    """0..15 points for needed and accommodated oxygen / service animal."""
    score = 0.0
    if client.has_oxygen and driver.can_accommodate_oxygen:
        score += OXYGEN_POINTS
    if client.has_service_animal and driver.can_accommodate_service_animal:
        score += SERVICE_ANIMAL_POINTS
    return score


def best_attainable_score(client: ClientNeeds) -> float:
    """Highest total any driver could reach for this client."""
    vehicle = VEHICLE_MATCH if client.vehicle_types else VEHICLE_NO_PREFERENCE
    special = (OXYGEN_POINTS if client.has_oxygen else 0) + (
        SERVICE_ANIMAL_POINTS if client.has_service_animal else 0
    )
    return 40 + vehicle + MOBILITY_EQUIPMENT_POINTS + special
