"""Locations router - saved addresses."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from paratransit.core.deps import get_org_db, require_csrf_header, require_permission
from paratransit.schemas.auth import OrgSession
from paratransit.schemas.location import (
    LocationCreate,
    LocationListResponse,
    LocationRead,
    LocationUpdate,
)
from paratransit.services import location_service
from paratransit.services.errors import DuplicateError
from paratransit.utils.pagination import (
    PaginationParams,
    SortParams,
    get_pagination,
    get_sort_params,
)

router = APIRouter(prefix="/locations", tags=["Locations"])


@router.get("", response_model=LocationListResponse)
def list_locations(
    pagination: PaginationParams = Depends(get_pagination),
    sort: SortParams = Depends(get_sort_params),
    session: OrgSession = Depends(require_permission("locations.read")),
    db: Session = Depends(get_org_db),
):
    try:
        locations, total = location_service.list_locations(db, pagination, sort)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    pages = (total + pagination.per_page - 1) // pagination.per_page
    return LocationListResponse(
        items=[LocationRead.model_validate(loc) for loc in locations],
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        pages=pages,
    )


@router.post(
    "",
    response_model=LocationRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_location(
    data: LocationCreate,
    session: OrgSession = Depends(require_permission("locations.create")),
    db: Session = Depends(get_org_db),
):
    """
    Save an address.

    A case-insensitive duplicate of an existing address returns 409 with
    the existing location's id so callers can reuse it.
    """
    try:
        location = location_service.create_location(db, data, session.user_id)
    except DuplicateError as e:
        raise HTTPException(
            status_code=409,
            detail={"message": str(e), "existing_id": str(e.existing_id)},
        )
    return LocationRead.model_validate(location)


@router.get("/{location_id}", response_model=LocationRead)
def get_location(
    location_id: UUID,
    session: OrgSession = Depends(require_permission("locations.read")),
    db: Session = Depends(get_org_db),
):
    location = location_service.get_location(db, location_id)
    if not location:
        raise HTTPException(status_code=404, detail="Location not found")
    return LocationRead.model_validate(location)


@router.patch(
    "/{location_id}",
    response_model=LocationRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_location(
    location_id: UUID,
    data: LocationUpdate,
    session: OrgSession = Depends(require_permission("locations.update")),
    db: Session = Depends(get_org_db),
):
    location = location_service.get_location(db, location_id)
    if not location:
        raise HTTPException(status_code=404, detail="Location not found")
    try:
        location = location_service.update_location(db, location, data, session.user_id)
    except DuplicateError as e:
        raise HTTPException(
            status_code=409,
            detail={"message": str(e), "existing_id": str(e.existing_id)},
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return LocationRead.model_validate(location)
