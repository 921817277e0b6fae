"""Appointments router - rides, driver assignment and driver matching.

Callers with allappointments.* see and change every ride; callers with only
ownappointments.* are limited to rides assigned to them.
"""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from paratransit.core.config import settings
from paratransit.core.deps import get_org_db, require_csrf_header, require_permission
from paratransit.db.enums import AppointmentStatus
from paratransit.schemas.appointment import (
    AppointmentAssign,
    AppointmentCreate,
    AppointmentListResponse,
    AppointmentRead,
    AppointmentStatusChange,
    AppointmentUpdate,
)
from paratransit.schemas.auth import OrgSession
from paratransit.schemas.matching import MatchingDriversResponse
from paratransit.services import appointment_service, matching_service
from paratransit.utils.pagination import (
    PaginationParams,
    SortParams,
    get_pagination,
    get_sort_params,
)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


def _get_visible_or_404(db: Session, session: OrgSession, appointment_id: UUID, action: str):
    """Load a ride the caller may {action}; other drivers' rides look missing."""
    appointment = appointment_service.get_appointment(db, appointment_id)
    if not appointment:
        raise HTTPException(status_code=404, detail="Appointment not found")
    if session.can(f"allappointments.{action}"):
        return appointment
    if session.can(f"ownappointments.{action}") and appointment.driver_id == session.user_id:
        return appointment
    if session.can(f"ownappointments.{action}"):
        raise HTTPException(status_code=404, detail="Appointment not found")
    raise HTTPException(status_code=403, detail=f"Missing permission: allappointments.{action}")


@router.get("", response_model=AppointmentListResponse)
def list_appointments(
    status: AppointmentStatus | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    driver_id: UUID | None = None,
    client_id: UUID | None = None,
    pagination: PaginationParams = Depends(get_pagination),
    sort: SortParams = Depends(get_sort_params),
    session: OrgSession = Depends(
        require_permission("allappointments.read", "ownappointments.read")
    ),
    db: Session = Depends(get_org_db),
):
    """List rides. Drivers without allappointments.read only see their own."""
    if not session.can("allappointments.read"):
        driver_id = session.user_id
    try:
        appointments, total = appointment_service.list_appointments(
            db,
            pagination,
            sort,
            status=status,
            start_date=start_date,
            end_date=end_date,
            driver_id=driver_id,
            client_id=client_id,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    pages = (total + pagination.per_page - 1) // pagination.per_page
    return AppointmentListResponse(
        items=[appointment_service.to_read(a) for a in appointments],
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        pages=pages,
    )


@router.post(
    "",
    response_model=AppointmentRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_appointment(
    data: AppointmentCreate,
    session: OrgSession = Depends(require_permission("allappointments.create")),
    db: Session = Depends(get_org_db),
):
    """Schedule a ride. Supplying driver_id creates it already Scheduled."""
    try:
        appointment = appointment_service.create_appointment(db, data, session.user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return appointment_service.to_read(appointment)


@router.get("/{appointment_id}", response_model=AppointmentRead)
def get_appointment(
    appointment_id: UUID,
    session: OrgSession = Depends(
        require_permission("allappointments.read", "ownappointments.read")
    ),
    db: Session = Depends(get_org_db),
):
    return appointment_service.to_read(
        _get_visible_or_404(db, session, appointment_id, "read")
    )


@router.patch(
    "/{appointment_id}",
    response_model=AppointmentRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_appointment(
    appointment_id: UUID,
    data: AppointmentUpdate,
    session: OrgSession = Depends(
        require_permission("allappointments.update", "ownappointments.update")
    ),
    db: Session = Depends(get_org_db),
):
    appointment = _get_visible_or_404(db, session, appointment_id, "update")
    try:
        appointment = appointment_service.update_appointment(db, appointment, data, session.user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return appointment_service.to_read(appointment)


@router.post(
    "/{appointment_id}/assign",
    response_model=AppointmentRead,
    dependencies=[Depends(require_csrf_header)],
)
def assign_driver(
    appointment_id: UUID,
    data: AppointmentAssign,
    session: OrgSession = Depends(require_permission("allappointments.update")),
    db: Session = Depends(get_org_db),
):
    """Assign a driver (ride becomes Scheduled) or pass null to unassign."""
    appointment = _get_visible_or_404(db, session, appointment_id, "update")
    try:
        appointment = appointment_service.assign_driver(
            db, appointment, data.driver_id, session.user_id
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return appointment_service.to_read(appointment)


@router.post(
    "/{appointment_id}/status",
    response_model=AppointmentRead,
    dependencies=[Depends(require_csrf_header)],
)
def change_status(
    appointment_id: UUID,
    data: AppointmentStatusChange,
    session: OrgSession = Depends(
        require_permission("allappointments.update", "ownappointments.update")
    ),
    db: Session = Depends(get_org_db),
):
    """
    Move a ride along its status flow.

    Unassigned <-> Scheduled, Unassigned|Scheduled -> Cancelled|Withdrawn,
    Scheduled -> Completed. Terminal statuses cannot change.
    """
    appointment = _get_visible_or_404(db, session, appointment_id, "update")
    try:
        appointment = appointment_service.change_status(
            db, appointment, data.status, session.user_id, data.reason
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return appointment_service.to_read(appointment)


@router.get("/{appointment_id}/matching-drivers", response_model=MatchingDriversResponse)
def get_matching_drivers(
    appointment_id: UUID,
    limit: int | None = Query(None, ge=1, le=100),
    session: OrgSession = Depends(require_permission("allappointments.read")),
    db: Session = Depends(get_org_db),
):
    """
    Rank candidate drivers for a ride.

    Drivers who cannot accommodate the client's equipment, oxygen, service
    animal or an additional rider are excluded. Each result carries its
    score breakdown and human-readable match reasons.
    """
    appointment = _get_visible_or_404(db, session, appointment_id, "read")
    ranked = matching_service.get_matching_drivers(
        db, appointment, limit or settings.MATCHING_DEFAULT_LIMIT
    )
    return MatchingDriversResponse(
        appointment_id=appointment.id,
        drivers=[matching_service.to_read(s) for s in ranked],
    )
