"""Vehicle and accessibility enums shared by clients and drivers."""

from enum import Enum


class VehicleType(str, Enum):
    SEDAN = "sedan"
    SMALL_SUV = "small_suv"
    MEDIUM_SUV = "medium_suv"
    LARGE_SUV = "large_suv"
    SMALL_TRUCK = "small_truck"
    LARGE_TRUCK = "large_truck"


class MobilityEquipment(str, Enum):
    CANE = "cane"
    CRUTCHES = "crutches"
    LIGHTWEIGHT_WALKER = "lightweight_walker"
    ROLLATOR = "rollator"
    OTHER = "other"


class OtherLimitation(str, Enum):
    VISION = "vision"
    HEARING = "hearing"
    COGNITIVE = "cognitive"
    OTHER = "other"


class Weekday(str, Enum):
    """Weekday names as used by recurring unavailability."""

    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"
