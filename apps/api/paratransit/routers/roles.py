"""Roles and permissions router."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from paratransit.core.deps import (
    get_org_db,
    get_org_session,
    require_csrf_header,
    require_permission,
)
from paratransit.core.permissions import get_all_permissions
from paratransit.schemas.auth import MyPermissionsResponse, OrgSession
from paratransit.schemas.role import PermissionRead, RoleCreate, RoleRead, RoleUpdate
from paratransit.services import permission_service
from paratransit.services.errors import DuplicateError

router = APIRouter(tags=["Roles"])


def _role_read(role) -> RoleRead:
    return RoleRead(
        id=role.id,
        role_key=role.role_key,
        name=role.name,
        description=role.description,
        is_system=role.is_system,
        permissions=permission_service.role_permission_keys(role),
    )


def _get_or_404(db: Session, role_id: UUID):
    role = permission_service.get_role(db, role_id)
    if not role:
        raise HTTPException(status_code=404, detail="Role not found")
    return role


@router.get("/permissions", response_model=list[PermissionRead])
def list_permissions(
    session: OrgSession = Depends(require_permission("permissions.read")),
):
    """The permission registry, sorted by resource."""
    return [
        PermissionRead(
            perm_key=p.perm_key,
            resource=p.resource,
            action=p.action,
            name=p.name,
            description=p.description,
        )
        for p in get_all_permissions()
    ]


@router.get("/me/permissions", response_model=MyPermissionsResponse)
def get_my_permissions(session: OrgSession = Depends(get_org_session)):
    """The caller's effective permission keys."""
    return MyPermissionsResponse(
        user_id=session.user_id,
        role_key=session.role_key,
        permissions=sorted(session.permissions),
    )


@router.get("/roles", response_model=list[RoleRead])
def list_roles(
    session: OrgSession = Depends(require_permission("roles.read")),
    db: Session = Depends(get_org_db),
):
    return [_role_read(r) for r in permission_service.list_roles(db)]


@router.post(
    "/roles",
    response_model=RoleRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_role(
    data: RoleCreate,
    session: OrgSession = Depends(require_permission("roles.create")),
    db: Session = Depends(get_org_db),
):
    try:
        role = permission_service.create_role(
            db, data.role_key, data.name, data.description, data.permissions, session.user_id
        )
    except DuplicateError as e:
        raise HTTPException(
            status_code=409,
            detail={"message": str(e), "existing_id": str(e.existing_id)},
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _role_read(role)


@router.get("/roles/{role_id}", response_model=RoleRead)
def get_role(
    role_id: UUID,
    session: OrgSession = Depends(require_permission("roles.read")),
    db: Session = Depends(get_org_db),
):
    return _role_read(_get_or_404(db, role_id))


@router.patch(
    "/roles/{role_id}",
    response_model=RoleRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_role(
    role_id: UUID,
    data: RoleUpdate,
    session: OrgSession = Depends(require_permission("roles.update")),
    db: Session = Depends(get_org_db),
):
    """Rename a custom role or replace its permission list."""
    role = _get_or_404(db, role_id)
    try:
        role = permission_service.update_role(
            db,
            role,
            session.user_id,
            name=data.name,
            description=data.description,
            permissions=data.permissions,
        )
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _role_read(role)


@router.delete(
    "/roles/{role_id}",
    status_code=204,
    dependencies=[Depends(require_csrf_header)],
)
def delete_role(
    role_id: UUID,
    session: OrgSession = Depends(require_permission("roles.delete")),
    db: Session = Depends(get_org_db),
):
    role = _get_or_404(db, role_id)
    try:
        permission_service.delete_role(db, role, session.user_id)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
