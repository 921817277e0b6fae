"""Call logs router - phone calls taken by staff."""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from paratransit.core.deps import get_org_db, require_csrf_header, require_permission
from paratransit.schemas.activity import (
    CallLogCreate,
    CallLogListResponse,
    CallLogRead,
    CallLogTypeRead,
    CallLogUpdate,
)
from paratransit.schemas.auth import OrgSession
from paratransit.services import call_log_service
from paratransit.utils.pagination import (
    PaginationParams,
    SortParams,
    get_pagination,
    get_sort_params,
)

router = APIRouter(prefix="/call-logs", tags=["Call Logs"])


def _get_or_404(db: Session, call_log_id: UUID):
    entry = call_log_service.get_call_log(db, call_log_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Call log not found")
    return entry


@router.get("/types", response_model=list[CallLogTypeRead])
def list_call_types(
    session: OrgSession = Depends(require_permission("calllogs.read")),
    db: Session = Depends(get_org_db),
):
    return [CallLogTypeRead.model_validate(t) for t in call_log_service.list_types(db)]


@router.get("", response_model=CallLogListResponse)
def list_call_logs(
    call_type: UUID | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    pagination: PaginationParams = Depends(get_pagination),
    sort: SortParams = Depends(get_sort_params),
    session: OrgSession = Depends(require_permission("calllogs.read")),
    db: Session = Depends(get_org_db),
):
    """List calls, newest first. ?search matches caller name or phone."""
    try:
        entries, total = call_log_service.list_call_logs(
            db, pagination, sort, call_type, start_date, end_date
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    pages = (total + pagination.per_page - 1) // pagination.per_page
    return CallLogListResponse(
        items=[CallLogRead.model_validate(e) for e in entries],
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        pages=pages,
    )


@router.post(
    "",
    response_model=CallLogRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_call_log(
    data: CallLogCreate,
    session: OrgSession = Depends(require_permission("calllogs.create")),
    db: Session = Depends(get_org_db),
):
    try:
        entry = call_log_service.create_call_log(db, data, session.user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return CallLogRead.model_validate(entry)


@router.get("/{call_log_id}", response_model=CallLogRead)
def get_call_log(
    call_log_id: UUID,
    session: OrgSession = Depends(require_permission("calllogs.read")),
    db: Session = Depends(get_org_db),
):
    return CallLogRead.model_validate(_get_or_404(db, call_log_id))


@router.patch(
    "/{call_log_id}",
    response_model=CallLogRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_call_log(
    call_log_id: UUID,
    data: CallLogUpdate,
    session: OrgSession = Depends(require_permission("calllogs.update")),
    db: Session = Depends(get_org_db),
):
    entry = _get_or_404(db, call_log_id)
    try:
        entry = call_log_service.update_call_log(db, entry, data, session.user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return CallLogRead.model_validate(entry)


@router.delete(
    "/{call_log_id}",
    status_code=204,
    dependencies=[Depends(require_csrf_header)],
)
def delete_call_log(
    call_log_id: UUID,
    session: OrgSession = Depends(require_permission("calllogs.delete")),
    db: Session = Depends(get_org_db),
):
    call_log_service.delete_call_log(db, _get_or_404(db, call_log_id), session.user_id)
