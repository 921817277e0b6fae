"""Users router - staff and volunteer driver accounts."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from paratransit.core.deps import get_org_db, require_csrf_header, require_permission
from paratransit.schemas.auth import OrgSession
from paratransit.schemas.role import (
    UserPermissionOverride,
    UserPermissionsRead,
    UserPermissionsUpdate,
)
from paratransit.schemas.user import UserCreate, UserListResponse, UserRead, UserUpdate
from paratransit.services import permission_service, user_service
from paratransit.services.errors import DuplicateError
from paratransit.utils.pagination import (
    PaginationParams,
    SortParams,
    get_pagination,
    get_sort_params,
)

router = APIRouter(prefix="/users", tags=["Users"])


def _get_or_404(db: Session, user_id: UUID):
    user = user_service.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("", response_model=UserListResponse)
def list_users(
    is_driver: bool | None = None,
    include_inactive: bool = False,
    pagination: PaginationParams = Depends(get_pagination),
    sort: SortParams = Depends(get_sort_params),
    session: OrgSession = Depends(require_permission("users.read")),
    db: Session = Depends(get_org_db),
):
    """List users. Filter drivers with ?is_driver=true."""
    try:
        users, total = user_service.list_users(db, pagination, sort, is_driver, include_inactive)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    pages = (total + pagination.per_page - 1) // pagination.per_page
    return UserListResponse(
        items=[user_service.to_read(u) for u in users],
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        pages=pages,
    )


@router.post(
    "",
    response_model=UserRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_user(
    data: UserCreate,
    session: OrgSession = Depends(require_permission("users.create")),
    db: Session = Depends(get_org_db),
):
    try:
        user = user_service.create_user(db, data, session.user_id)
    except DuplicateError as e:
        raise HTTPException(
            status_code=409,
            detail={"message": str(e), "existing_id": str(e.existing_id)},
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return user_service.to_read(user)


@router.get("/{user_id}", response_model=UserRead)
def get_user(
    user_id: UUID,
    session: OrgSession = Depends(require_permission("users.read")),
    db: Session = Depends(get_org_db),
):
    return user_service.to_read(_get_or_404(db, user_id))


@router.patch(
    "/{user_id}",
    response_model=UserRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_user(
    user_id: UUID,
    data: UserUpdate,
    session: OrgSession = Depends(require_permission("users.update")),
    db: Session = Depends(get_org_db),
):
    """Update a user. Role changes and deactivation revoke existing sessions."""
    user = _get_or_404(db, user_id)
    try:
        user = user_service.update_user(db, user, data, session.user_id)
    except DuplicateError as e:
        raise HTTPException(
            status_code=409,
            detail={"message": str(e), "existing_id": str(e.existing_id)},
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return user_service.to_read(user)


@router.delete(
    "/{user_id}",
    status_code=204,
    dependencies=[Depends(require_csrf_header)],
)
def delete_user(
    user_id: UUID,
    session: OrgSession = Depends(require_permission("users.delete")),
    db: Session = Depends(get_org_db),
):
    """Soft-delete a user (hidden, deactivated, sessions revoked)."""
    user = _get_or_404(db, user_id)
    try:
        user_service.delete_user(db, user, session.user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# =============================================================================
# Permission Overrides
# =============================================================================

def _permissions_read(db: Session, user) -> UserPermissionsRead:
    overrides = permission_service.get_user_overrides(db, user.id)
    return UserPermissionsRead(
        user_id=user.id,
        role_key=user.role.role_key if user.role else None,
        overrides=[
            UserPermissionOverride(perm_key=key, grant_access=granted)
            for key, granted in sorted(overrides.items())
        ],
        effective=sorted(permission_service.get_effective_permissions(db, user)),
    )


@router.get("/{user_id}/permissions", response_model=UserPermissionsRead)
def get_user_permissions(
    user_id: UUID,
    session: OrgSession = Depends(require_permission("roles.read")),
    db: Session = Depends(get_org_db),
):
    """Role, per-user overrides and the resulting effective permissions."""
    return _permissions_read(db, _get_or_404(db, user_id))


@router.put(
    "/{user_id}/permissions",
    response_model=UserPermissionsRead,
    dependencies=[Depends(require_csrf_header)],
)
def set_user_permissions(
    user_id: UUID,
    data: UserPermissionsUpdate,
    session: OrgSession = Depends(require_permission("roles.update")),
    db: Session = Depends(get_org_db),
):
    """Replace a user's permission overrides (grant_access false revokes)."""
    user = _get_or_404(db, user_id)
    overrides = {o.perm_key: o.grant_access for o in data.overrides}
    try:
        permission_service.set_user_overrides(db, user, overrides, session.user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _permissions_read(db, user)
