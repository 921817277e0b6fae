"""Organizations router - platform (system) endpoints for tenants."""

from typing import Callable
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from paratransit.core.deps import (
    get_org_provisioner,
    get_org_session_factory,
    get_sys_db,
    require_csrf_header,
    require_system_permission,
)
from paratransit.schemas.auth import SystemSession
from paratransit.schemas.org import OrgCreate, OrgListResponse, OrgRead, OrgUpdate
from paratransit.services import organization_service
from paratransit.services.errors import DuplicateError
from paratransit.utils.pagination import (
    PaginationParams,
    SortParams,
    get_pagination,
    get_sort_params,
)

router = APIRouter(prefix="/s/organizations", tags=["Organizations"])


@router.get("", response_model=OrgListResponse)
def list_organizations(
    include_inactive: bool = True,
    pagination: PaginationParams = Depends(get_pagination),
    sort: SortParams = Depends(get_sort_params),
    session: SystemSession = Depends(require_system_permission("organizations.read")),
    db: Session = Depends(get_sys_db),
):
    """List registered organizations."""
    try:
        orgs, total = organization_service.list_organizations(db, pagination, sort, include_inactive)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    pages = (total + pagination.per_page - 1) // pagination.per_page
    return OrgListResponse(
        items=[OrgRead.model_validate(o) for o in orgs],
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        pages=pages,
    )


@router.post(
    "",
    response_model=OrgRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_organization(
    data: OrgCreate,
    session: SystemSession = Depends(require_system_permission("organizations.create")),
    db: Session = Depends(get_sys_db),
    provision: Callable[[str], None] = Depends(get_org_provisioner),
    session_factory: Callable[[str], Session] = Depends(get_org_session_factory),
):
    """
    Register an organization and provision its database.

    Seeds permissions, default roles, call types and settings.
    """
    try:
        org = organization_service.create_organization(
            db, data, session.user_id, provision, session_factory
        )
    except DuplicateError as e:
        raise HTTPException(
            status_code=409,
            detail={"message": str(e), "existing_id": str(e.existing_id)},
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return OrgRead.model_validate(org)


@router.get("/{org_id}", response_model=OrgRead)
def get_organization(
    org_id: UUID,
    session: SystemSession = Depends(require_system_permission("organizations.read")),
    db: Session = Depends(get_sys_db),
):
    org = organization_service.get_organization(db, org_id)
    if not org:
        raise HTTPException(status_code=404, detail="Organization not found")
    return OrgRead.model_validate(org)


@router.patch(
    "/{org_id}",
    response_model=OrgRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_organization(
    org_id: UUID,
    data: OrgUpdate,
    session: SystemSession = Depends(require_system_permission("organizations.update")),
    db: Session = Depends(get_sys_db),
):
    """Update organization details. Deactivating blocks all /o/{org} access."""
    org = organization_service.get_organization(db, org_id)
    if not org:
        raise HTTPException(status_code=404, detail="Organization not found")
    org = organization_service.update_organization(db, org, data, session.user_id)
    return OrgRead.model_validate(org)
