"""Volunteer records router - hours and miles volunteered."""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from paratransit.core.deps import (
    get_org_db,
    get_org_session,
    require_csrf_header,
    require_permission,
    require_scoped,
)
from paratransit.core.permissions import can_access_scoped
from paratransit.schemas.activity import (
    VolunteerRecordCreate,
    VolunteerRecordListResponse,
    VolunteerRecordRead,
    VolunteerRecordUpdate,
)
from paratransit.schemas.auth import OrgSession
from paratransit.services import volunteer_record_service
from paratransit.utils.pagination import PaginationParams, get_pagination

router = APIRouter(tags=["Volunteer Records"])

RESOURCE = "volunteer-records"


def _check_scope(session: OrgSession, action: str, target_user_id: UUID) -> None:
    if not can_access_scoped(
        session.permissions,
        RESOURCE,
        action,
        caller_id=str(session.user_id),
        target_user_id=str(target_user_id),
    ):
        raise HTTPException(status_code=403, detail=f"Not allowed to {action} {RESOURCE}")


def _get_or_404(db: Session, session: OrgSession, record_id: UUID, action: str):
    record = volunteer_record_service.get_record(db, record_id)
    if not record:
        raise HTTPException(status_code=404, detail="Volunteer record not found")
    _check_scope(session, action, record.user_id)
    return record


def _list_response(records, total: int, pagination: PaginationParams) -> VolunteerRecordListResponse:
    pages = (total + pagination.per_page - 1) // pagination.per_page
    return VolunteerRecordListResponse(
        items=[VolunteerRecordRead.model_validate(r) for r in records],
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        pages=pages,
    )


@router.get("/volunteer-records", response_model=VolunteerRecordListResponse)
def list_records(
    user_id: UUID | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    pagination: PaginationParams = Depends(get_pagination),
    session: OrgSession = Depends(require_permission("allvolunteer-records.read")),
    db: Session = Depends(get_org_db),
):
    """Every user's records, newest first."""
    records, total = volunteer_record_service.list_records(
        db, pagination, user_id, start_date, end_date
    )
    return _list_response(records, total, pagination)


@router.get("/users/{user_id}/volunteer-records", response_model=VolunteerRecordListResponse)
def list_user_records(
    user_id: UUID,
    start_date: date | None = None,
    end_date: date | None = None,
    pagination: PaginationParams = Depends(get_pagination),
    session: OrgSession = Depends(require_scoped(RESOURCE, "read")),
    db: Session = Depends(get_org_db),
):
    records, total = volunteer_record_service.list_records(
        db, pagination, user_id, start_date, end_date
    )
    return _list_response(records, total, pagination)


@router.post(
    "/volunteer-records",
    response_model=VolunteerRecordRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_record(
    data: VolunteerRecordCreate,
    session: OrgSession = Depends(get_org_session),
    db: Session = Depends(get_org_db),
):
    """Log hours. user_id defaults to the caller."""
    target = data.user_id or session.user_id
    _check_scope(session, "create", target)
    try:
        record = volunteer_record_service.create_record(db, target, data, session.user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return VolunteerRecordRead.model_validate(record)


@router.get("/volunteer-records/{record_id}", response_model=VolunteerRecordRead)
def get_record(
    record_id: UUID,
    session: OrgSession = Depends(get_org_session),
    db: Session = Depends(get_org_db),
):
    return VolunteerRecordRead.model_validate(_get_or_404(db, session, record_id, "read"))


@router.patch(
    "/volunteer-records/{record_id}",
    response_model=VolunteerRecordRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_record(
    record_id: UUID,
    data: VolunteerRecordUpdate,
    session: OrgSession = Depends(get_org_session),
    db: Session = Depends(get_org_db),
):
    record = _get_or_404(db, session, record_id, "update")
    try:
        record = volunteer_record_service.update_record(db, record, data, session.user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return VolunteerRecordRead.model_validate(record)


@router.delete(
    "/volunteer-records/{record_id}",
    status_code=204,
    dependencies=[Depends(require_csrf_header)],
)
def delete_record(
    record_id: UUID,
    session: OrgSession = Depends(get_org_session),
    db: Session = Depends(get_org_db),
):
    record = _get_or_404(db, session, record_id, "delete")
    volunteer_record_service.delete_record(db, record, session.user_id)
