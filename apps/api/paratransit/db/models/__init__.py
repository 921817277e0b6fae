"""SQLAlchemy ORM models for the system and organization databases."""

from paratransit.db.models.system import Organization, SystemAuditLog, SystemUser
from paratransit.db.models.locations import Location
from paratransit.db.models.auth import Permission, Role, RolePermission, User, UserPermission
from paratransit.db.models.clients import Client
from paratransit.db.models.appointments import Appointment, Unavailability
from paratransit.db.models.activity import CallLog, CallLogType, VolunteerRecord
from paratransit.db.models.forms import CustomForm, CustomFormField, CustomFormResponse
from paratransit.db.models.messages import Message, MessageRecipient
from paratransit.db.models.settings import OrgSettings
from paratransit.db.models.audit import AuditLog


__all__ = [
    "Appointment",
    "AuditLog",
    "CallLog",
    "CallLogType",
    "Client",
    "CustomForm",
    "CustomFormField",
    "CustomFormResponse",
    "Location",
    "Message",
    "MessageRecipient",
    "OrgSettings",
    "Organization",
    "Permission",
    "Role",
    "RolePermission",
    "SystemAuditLog",
    "SystemUser",
    "Unavailability",
    "User",
    "UserPermission",
    "VolunteerRecord",
]
