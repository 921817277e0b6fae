"""API routers."""

from paratransit.routers.appointments import router as appointments_router
from paratransit.routers.audit import router as audit_router
from paratransit.routers.call_logs import router as call_logs_router
from paratransit.routers.clients import router as clients_router
from paratransit.routers.custom_forms import router as custom_forms_router
from paratransit.routers.dashboard import router as dashboard_router
from paratransit.routers.internal import router as internal_router
from paratransit.routers.locations import router as locations_router
from paratransit.routers.notifications import router as notifications_router
from paratransit.routers.organizations import router as organizations_router
from paratransit.routers.roles import router as roles_router
from paratransit.routers.settings import router as settings_router
from paratransit.routers.unavailability import router as unavailability_router
from paratransit.routers.users import router as users_router
from paratransit.routers.volunteer_records import router as volunteer_records_router

# Mounted under /o/{org}; unavailability precedes users so
# /users/unavailability is not read as a user id.
ORG_ROUTERS = [
    dashboard_router,
    unavailability_router,
    users_router,
    clients_router,
    locations_router,
    appointments_router,
    call_logs_router,
    volunteer_records_router,
    notifications_router,
    settings_router,
    custom_forms_router,
    roles_router,
    audit_router,
]

__all__ = [
    "ORG_ROUTERS",
    "appointments_router",
    "audit_router",
    "call_logs_router",
    "clients_router",
    "custom_forms_router",
    "dashboard_router",
    "internal_router",
    "locations_router",
    "notifications_router",
    "organizations_router",
    "roles_router",
    "settings_router",
    "unavailability_router",
    "users_router",
    "volunteer_records_router",
]
