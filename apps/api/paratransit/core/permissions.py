"""Permission registry, default roles and permission matching.

Keys follow ``resource.action``. Scoped resources come in pairs:
``all{resource}`` applies to every user's records, ``own{resource}`` only to
the caller's own.

Precedence: user revoke > user grant > role grant
"""

import re
from dataclasses import dataclass
from uuid import UUID

from paratransit.db.enums import PermissionAction


SLUG_PATTERN = re.compile(r"^[a-z0-9][a-z0-9.-]*$")

SYSTEM_ADMIN = "system.admin"
WILDCARD = "*"


@dataclass(frozen=True)
class PermissionDef:
    """Permission definition with metadata."""
    perm_key: str
    resource: str
    action: str
    name: str
    description: str


def _perm(resource: str, action: PermissionAction, name: str, description: str) -> PermissionDef:
    return PermissionDef(f"{resource}.{action.value}", resource, action.value, name, description)


_R, _C, _U, _D, _E = (
    PermissionAction.READ,
    PermissionAction.CREATE,
    PermissionAction.UPDATE,
    PermissionAction.DELETE,
    PermissionAction.EXPORT,
)


# =============================================================================
# Permission Registry
# =============================================================================

ORG_PERMISSIONS: list[PermissionDef] = [
    # Dashboard
    _perm("dashboard", _R, "View Dashboard", "Access the main dashboard"),

    # Users
    _perm("users", _R, "View Users", "View user list and details"),
    _perm("users", _C, "Create Users", "Create new user accounts"),
    _perm("users", _U, "Update Users", "Modify user information"),
    _perm("users", _D, "Delete Users", "Deactivate user accounts"),

    # Clients
    _perm("clients", _R, "View Clients", "View client information"),
    _perm("clients", _C, "Create Clients", "Add new clients"),
    _perm("clients", _U, "Update Clients", "Modify client information"),
    _perm("clients", _D, "Delete Clients", "Deactivate clients"),

    # Locations
    _perm("locations", _R, "View Locations", "View saved addresses"),
    _perm("locations", _C, "Create Locations", "Add new addresses"),
    _perm("locations", _U, "Update Locations", "Modify saved addresses"),

    # Appointments
    _perm("allappointments", _R, "View All Appointments", "View every ride"),
    _perm("allappointments", _C, "Create Appointments", "Schedule new rides"),
    _perm("allappointments", _U, "Update All Appointments", "Modify any ride"),
    _perm("ownappointments", _R, "View Own Appointments", "View rides assigned to you"),
    _perm("ownappointments", _U, "Update Own Appointments", "Modify rides assigned to you"),

    # Unavailability
    _perm("allunavailability", _R, "View All Unavailability", "View unavailability periods for all users"),
    _perm("allunavailability", _C, "Create All Unavailability", "Create unavailability periods for any user"),
    _perm("allunavailability", _U, "Update All Unavailability", "Modify unavailability periods for all users"),
    _perm("allunavailability", _D, "Delete All Unavailability", "Delete unavailability periods for all users"),
    _perm("ownunavailability", _R, "View Own Unavailability", "View your own unavailability periods"),
    _perm("ownunavailability", _C, "Create Own Unavailability", "Create your own unavailability periods"),
    _perm("ownunavailability", _U, "Update Own Unavailability", "Modify your own unavailability periods"),
    _perm("ownunavailability", _D, "Delete Own Unavailability", "Delete your own unavailability periods"),

    # Call logs
    _perm("calllogs", _R, "View Call Logs", "View call log entries"),
    _perm("calllogs", _C, "Create Call Logs", "Record calls"),
    _perm("calllogs", _U, "Update Call Logs", "Modify call log entries"),
    _perm("calllogs", _D, "Delete Call Logs", "Remove call log entries"),

    # Volunteer records
    _perm("allvolunteer-records", _R, "View All Volunteer Records", "View hours for all users"),
    _perm("allvolunteer-records", _C, "Create All Volunteer Records", "Log hours for any user"),
    _perm("allvolunteer-records", _U, "Update All Volunteer Records", "Modify hours for any user"),
    _perm("allvolunteer-records", _D, "Delete All Volunteer Records", "Delete hours for any user"),
    _perm("ownvolunteer-records", _R, "View Own Volunteer Records", "View your own hours"),
    _perm("ownvolunteer-records", _C, "Create Own Volunteer Records", "Log your own hours"),
    _perm("ownvolunteer-records", _U, "Update Own Volunteer Records", "Modify your own hours"),
    _perm("ownvolunteer-records", _D, "Delete Own Volunteer Records", "Delete your own hours"),

    # Notifications
    _perm("allnotifications", _R, "View All Notifications", "View every outbound message"),
    _perm("allnotifications", _U, "Update All Notifications", "Retry or cancel outbound messages"),
    _perm("ownnotifications", _R, "View Own Notifications", "View messages sent to you"),

    # Reports
    _perm("reports", _R, "View Reports", "Access reports"),
    _perm("reports", _E, "Export Reports", "Export report data to external formats"),

    # Roles & permissions
    _perm("roles", _R, "View Roles", "View roles and their permissions"),
    _perm("roles", _C, "Create Roles", "Create custom roles"),
    _perm("roles", _U, "Update Roles", "Modify custom roles"),
    _perm("roles", _D, "Delete Roles", "Delete custom roles"),
    _perm("permissions", _R, "View Permissions", "View the permission registry"),

    # Settings & audit
    _perm("settings", _R, "View Settings", "View organization settings"),
    _perm("settings", _U, "Update Settings", "Modify organization settings"),
    _perm("auditlog", _R, "View Audit Log", "Access audit trail"),
]

SYSTEM_PERMISSIONS: list[PermissionDef] = [
    _perm("organizations", _R, "View Organizations", "View registered organizations"),
    _perm("organizations", _C, "Create Organizations", "Register new organizations"),
    _perm("organizations", _U, "Update Organizations", "Modify organization details"),
    PermissionDef(SYSTEM_ADMIN, "system", "admin", "System Administrator", "Full platform access"),
]

PERMISSION_REGISTRY: dict[str, PermissionDef] = {p.perm_key: p for p in ORG_PERMISSIONS}


# =============================================================================
# Default Roles
# =============================================================================

@dataclass(frozen=True)
class RoleDef:
    role_key: str
    name: str
    description: str
    permissions: tuple[str, ...]


SUPER_ADMIN_ROLE = RoleDef(
    "super-admin",
    "Super Administrator",
    "Platform operator",
    ("organizations.read", "organizations.create", "organizations.update"),
)

DEFAULT_ORG_ROLES: list[RoleDef] = [
    RoleDef(
        "admin",
        "Administrator",
        "Full access to the organization",
        (
            "dashboard.read",
            "users.read", "users.create", "users.update",
            "clients.read", "clients.create", "clients.update",
            "locations.read", "locations.create", "locations.update",
            "allappointments.create", "allappointments.read", "allappointments.update",
            "allunavailability.read",
            "calllogs.read", "calllogs.create", "calllogs.update", "calllogs.delete",
            "reports.export", "reports.read",
            "roles.read", "roles.create", "roles.update", "roles.delete",
            "permissions.read",
            "settings.read", "settings.update",
            "auditlog.read",
            "allvolunteer-records.read", "allvolunteer-records.update",
            "allnotifications.read", "allnotifications.update",
        ),
    ),
    RoleDef(
        "dispatcher",
        "Dispatcher",
        "Schedules rides and manages riders",
        (
            "dashboard.read",
            "users.read", "users.create", "users.update", "users.delete",
            "clients.read", "clients.create", "clients.update", "clients.delete",
            "locations.read", "locations.create", "locations.update",
            "allappointments.create", "allappointments.read", "allappointments.update",
            "allunavailability.read",
            "calllogs.read", "calllogs.create", "calllogs.update", "calllogs.delete",
            "ownvolunteer-records.read", "ownvolunteer-records.create",
            "ownvolunteer-records.update", "ownvolunteer-records.delete",
            "allnotifications.read", "allnotifications.update",
        ),
    ),
    RoleDef(
        "driver",
        "Driver",
        "Volunteer driver",
        (
            "ownappointments.read",
            "clients.read",
            "ownunavailability.read", "ownunavailability.create",
            "ownunavailability.update", "ownunavailability.delete",
            "ownvolunteer-records.read", "ownvolunteer-records.create",
            "ownvolunteer-records.update", "ownvolunteer-records.delete",
            "ownnotifications.read",
        ),
    ),
]


# =============================================================================
# Helper Functions
# =============================================================================

def get_all_permissions() -> list[PermissionDef]:
    """Get all org permissions sorted by resource."""
    return sorted(PERMISSION_REGISTRY.values(), key=lambda p: (p.resource, p.action))


def is_valid_permission(key: str) -> bool:
    """Check if permission key exists."""
    return key in PERMISSION_REGISTRY


def is_valid_slug(value: str) -> bool:
    return bool(SLUG_PATTERN.match(value))


def get_default_role(role_key: str) -> RoleDef | None:
    for role in DEFAULT_ORG_ROLES:
        if role.role_key == role_key:
            return role
    return None


def has_permission(granted: set[str] | frozenset[str], required: str) -> bool:
    """
    Check a required key against granted keys.

    Matches exact keys, system.admin, resource.* and *.action grants, and *.*.
    """
    if required in granted or SYSTEM_ADMIN in granted:
        return True
    resource, _, action = required.rpartition(".")
    return (
        f"{resource}.{WILDCARD}" in granted
        or f"{WILDCARD}.{action}" in granted
        or f"{WILDCARD}.{WILDCARD}" in granted
    )


def resolve_effective_permissions(
    role_grants: dict[str, bool],
    user_overrides: dict[str, bool],
) -> set[str]:
    """
    Effective permission keys for a user.

    Role rows with grant_access=True are granted; user overrides are applied
    on top (True adds, False revokes).
    """
    effective = {key for key, granted in role_grants.items() if granted}
    for key, granted in user_overrides.items():
        if granted:
            effective.add(key)
        else:
            effective.discard(key)
    return effective


def can_access_scoped(
    granted: set[str] | frozenset[str],
    resource: str,
    action: str,
    *,
    caller_id: str,
    target_user_id: str | None,
) -> bool:
    """
    Own/all check for per-user resources.

    all{resource}.{action} always allows. own{resource}.{action} allows only
    when the target user is the caller.
    """
    if has_permission(granted, f"all{resource}.{action}"):
        return True
    if not has_permission(granted, f"own{resource}.{action}"):
        return False
    if target_user_id is None:
        return False
    try:
        return UUID(str(target_user_id)) == UUID(str(caller_id))
    except ValueError:
        return False
