"""Clients router - riders receiving rides."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from paratransit.core.deps import get_org_db, require_csrf_header, require_permission
from paratransit.schemas.auth import OrgSession
from paratransit.schemas.client import (
    ClientCreate,
    ClientListResponse,
    ClientRead,
    ClientUpdate,
)
from paratransit.services import client_service
from paratransit.services.errors import DuplicateError
from paratransit.utils.pagination import (
    PaginationParams,
    SortParams,
    get_pagination,
    get_sort_params,
)

router = APIRouter(prefix="/clients", tags=["Clients"])


def _get_or_404(db: Session, client_id: UUID):
    client = client_service.get_client(db, client_id)
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    return client


@router.get("", response_model=ClientListResponse)
def list_clients(
    include_inactive: bool = False,
    pagination: PaginationParams = Depends(get_pagination),
    sort: SortParams = Depends(get_sort_params),
    session: OrgSession = Depends(require_permission("clients.read")),
    db: Session = Depends(get_org_db),
):
    try:
        clients, total = client_service.list_clients(db, pagination, sort, include_inactive)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    pages = (total + pagination.per_page - 1) // pagination.per_page
    return ClientListResponse(
        items=[ClientRead.model_validate(c) for c in clients],
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        pages=pages,
    )


@router.post(
    "",
    response_model=ClientRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_client(
    data: ClientCreate,
    session: OrgSession = Depends(require_permission("clients.create")),
    db: Session = Depends(get_org_db),
):
    try:
        client = client_service.create_client(db, data, session.user_id)
    except DuplicateError as e:
        raise HTTPException(
            status_code=409,
            detail={"message": str(e), "existing_id": str(e.existing_id)},
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ClientRead.model_validate(client)


@router.get("/{client_id}", response_model=ClientRead)
def get_client(
    client_id: UUID,
    session: OrgSession = Depends(require_permission("clients.read")),
    db: Session = Depends(get_org_db),
):
    return ClientRead.model_validate(_get_or_404(db, client_id))


@router.patch(
    "/{client_id}",
    response_model=ClientRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_client(
    client_id: UUID,
    data: ClientUpdate,
    session: OrgSession = Depends(require_permission("clients.update")),
    db: Session = Depends(get_org_db),
):
    client = _get_or_404(db, client_id)
    try:
        client = client_service.update_client(db, client, data, session.user_id)
    except DuplicateError as e:
        raise HTTPException(
            status_code=409,
            detail={"message": str(e), "existing_id": str(e.existing_id)},
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ClientRead.model_validate(client)


@router.delete(
    "/{client_id}",
    status_code=204,
    dependencies=[Depends(require_csrf_header)],
)
def deactivate_client(
    client_id: UUID,
    session: OrgSession = Depends(require_permission("clients.delete")),
    db: Session = Depends(get_org_db),
):
    """Soft-delete: the client is hidden from lists but rides keep their reference."""
    client_service.deactivate_client(db, _get_or_404(db, client_id), session.user_id)
