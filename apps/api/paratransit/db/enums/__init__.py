"""Enum definitions for application constants."""

from paratransit.db.enums.accessibility import (
    MobilityEquipment,
    OtherLimitation,
    VehicleType,
    Weekday,
)
from paratransit.db.enums.appointments import (
    APPOINTMENT_TRANSITIONS,
    AppointmentStatus,
    DEFAULT_APPOINTMENT_STATUS,
    DonationType,
    LOAD_COUNTED_STATUSES,
    TERMINAL_APPOINTMENT_STATUSES,
)
from paratransit.db.enums.audit import AuditAction
from paratransit.db.enums.forms import (
    CustomFieldType,
    CustomFormTarget,
    OPTION_FIELD_TYPES,
)
from paratransit.db.enums.messages import (
    DEFAULT_MESSAGE_STATUS,
    MessageStatus,
    MessageType,
)
from paratransit.db.enums.people import ContactPreference, Gender
from paratransit.db.enums.permissions import PermissionAction


__all__ = [
    "APPOINTMENT_TRANSITIONS",
    "AppointmentStatus",
    "AuditAction",
    "ContactPreference",
    "CustomFieldType",
    "CustomFormTarget",
    "DEFAULT_APPOINTMENT_STATUS",
    "DEFAULT_MESSAGE_STATUS",
    "DonationType",
    "Gender",
    "LOAD_COUNTED_STATUSES",
    "MessageStatus",
    "MessageType",
    "MobilityEquipment",
    "OPTION_FIELD_TYPES",
    "OtherLimitation",
    "PermissionAction",
    "TERMINAL_APPOINTMENT_STATUSES",
    "VehicleType",
    "Weekday",
]
