"""Unavailability router - blocks of time drivers cannot drive.

Per-user routes are scoped: allunavailability.* covers every user,
ownunavailability.* only the caller.
"""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from paratransit.core.deps import (
    get_org_db,
    require_csrf_header,
    require_permission,
    require_scoped,
)
from paratransit.schemas.auth import OrgSession
from paratransit.schemas.unavailability import (
    UnavailabilityCreate,
    UnavailabilityRead,
    UnavailabilityUpdate,
)
from paratransit.services import unavailability_service, user_service

router = APIRouter(prefix="/users", tags=["Unavailability"])


def _get_user_or_404(db: Session, user_id: UUID):
    user = user_service.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def _get_block_or_404(db: Session, user_id: UUID, block_id: UUID):
    block = unavailability_service.get_block(db, block_id)
    if not block or block.user_id != user_id:
        raise HTTPException(status_code=404, detail="Unavailability not found")
    return block


@router.get("/unavailability", response_model=list[UnavailabilityRead])
def list_all_unavailability(
    start_date: date | None = None,
    end_date: date | None = None,
    user_id: UUID | None = None,
    session: OrgSession = Depends(require_permission("allunavailability.read")),
    db: Session = Depends(get_org_db),
):
    """Every user's blocks touching the date range (recurring blocks always included)."""
    blocks = unavailability_service.list_all(db, start_date, end_date, user_id)
    return [UnavailabilityRead.model_validate(b) for b in blocks]


@router.get("/{user_id}/unavailability", response_model=list[UnavailabilityRead])
def list_user_unavailability(
    user_id: UUID,
    start_date: date | None = None,
    end_date: date | None = None,
    session: OrgSession = Depends(require_scoped("unavailability", "read")),
    db: Session = Depends(get_org_db),
):
    _get_user_or_404(db, user_id)
    blocks = unavailability_service.list_for_user(db, user_id, start_date, end_date)
    return [UnavailabilityRead.model_validate(b) for b in blocks]


@router.post(
    "/{user_id}/unavailability",
    response_model=UnavailabilityRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_unavailability(
    user_id: UUID,
    data: UnavailabilityCreate,
    session: OrgSession = Depends(require_scoped("unavailability", "create")),
    db: Session = Depends(get_org_db),
):
    _get_user_or_404(db, user_id)
    block = unavailability_service.create_block(db, user_id, data, session.user_id)
    return UnavailabilityRead.model_validate(block)


@router.patch(
    "/{user_id}/unavailability/{block_id}",
    response_model=UnavailabilityRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_unavailability(
    user_id: UUID,
    block_id: UUID,
    data: UnavailabilityUpdate,
    session: OrgSession = Depends(require_scoped("unavailability", "update")),
    db: Session = Depends(get_org_db),
):
    block = _get_block_or_404(db, user_id, block_id)
    try:
        block = unavailability_service.update_block(db, block, data, session.user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return UnavailabilityRead.model_validate(block)


@router.delete(
    "/{user_id}/unavailability/{block_id}",
    status_code=204,
    dependencies=[Depends(require_csrf_header)],
)
def delete_unavailability(
    user_id: UUID,
    block_id: UUID,
    session: OrgSession = Depends(require_scoped("unavailability", "delete")),
    db: Session = Depends(get_org_db),
):
    block = _get_block_or_404(db, user_id, block_id)
    unavailability_service.delete_block(db, block, session.user_id)
