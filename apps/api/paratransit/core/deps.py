"""FastAPI dependencies for authentication, authorization, and database access."""

import logging
from typing import Callable, Generator
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, Path, Request
from sqlalchemy.orm import Session

from paratransit.core.permissions import SUPER_ADMIN_ROLE, can_access_scoped, has_permission
from paratransit.core.security import decode_session_token, is_system_token
from paratransit.db.session import SessionLocal
from paratransit.db.tenancy import org_registry
from paratransit.schemas.auth import OrgSession, SystemSession

logger = logging.getLogger(__name__)


# Cookie and header names
COOKIE_NAME = "paratransit_session"
CSRF_HEADER = "X-Requested-With"
CSRF_HEADER_VALUE = "XMLHttpRequest"


# =============================================================================
# Database Sessions
# =============================================================================

def get_sys_db() -> Generator[Session, None, None]:
    """
    System database session dependency.

    Yields a database session and ensures it's closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_org_session_factory() -> Callable[[str], Session]:
    """Opens sessions on an organization's database (overridden in tests)."""
    return org_registry.session


def get_organization(
    org: str = Path(..., description="Organization subdomain"),
    sys_db: Session = Depends(get_sys_db),
):
    """
    Resolve the {org} path segment to an active organization.

    Raises:
        HTTPException 404: Unknown or inactive organization
    """
    from paratransit.db.models import Organization

    organization = sys_db.query(Organization).filter(Organization.subdomain == org).first()
    if not organization or not organization.is_active:
        raise HTTPException(status_code=404, detail="Organization not found")
    return organization


def get_org_db(
    organization=Depends(get_organization),
    session_factory: Callable[[str], Session] = Depends(get_org_session_factory),
) -> Generator[Session, None, None]:
    """Organization database session for the {org} in the path."""
    db = session_factory(organization.subdomain)
    try:
        yield db
    finally:
        db.close()


# =============================================================================
# Authentication
# =============================================================================

def _read_token(request: Request) -> str | None:
    """Session token from the cookie, else an Authorization: Bearer header."""
    token = request.cookies.get(COOKIE_NAME)
    if token:
        return token
    auth = request.headers.get("Authorization", "")
    scheme, _, credentials = auth.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials.strip()
    return None


def get_token_payload(request: Request) -> dict:
    """
    Decode the caller's session token.

    Raises:
        HTTPException 401: Missing or invalid token
    """
    token = _read_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        payload = decode_session_token(token)
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid session")
    if "sub" not in payload:
        raise HTTPException(status_code=401, detail="Invalid session")
    return payload


def _parse_user_id(payload: dict) -> UUID:
    try:
        return UUID(str(payload["sub"]))
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid session")


def get_org_session(
    request: Request,
    org: str = Path(..., description="Organization subdomain"),
    db: Session = Depends(get_org_db),
) -> OrgSession:
    """
    Get full session context for an organization request.

    This is the PRIMARY auth dependency for /o/{org} endpoints.

    Validates:
    - Token is valid and was issued for this organization
    - User exists, is not deleted, and is active
    - Token version matches (for revocation support)

    Raises:
        HTTPException 401: Not authenticated
        HTTPException 403: Token belongs to another organization
    """
    from paratransit.db.models import User
    from paratransit.services import permission_service

    payload = get_token_payload(request)
    if is_system_token(payload) or payload.get("org") != org:
        raise HTTPException(status_code=403, detail="Session not valid for this organization")

    user = db.query(User).filter(User.id == _parse_user_id(payload)).first()
    if not user or user.is_deleted:
        raise HTTPException(status_code=401, detail="User not found")
    if not user.is_active:
        raise HTTPException(status_code=401, detail="Account disabled")

    token_version = payload.get("token_version")
    if token_version is not None and token_version != user.token_version:
        raise HTTPException(status_code=401, detail="Session revoked")

    request.state.user_id = str(user.id)
    return OrgSession(
        user_id=user.id,
        org=org,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        role_key=user.role.role_key if user.role else None,
        permissions=frozenset(permission_service.get_effective_permissions(db, user)),
    )


def get_system_session(
    request: Request,
    sys_db: Session = Depends(get_sys_db),
) -> SystemSession:
    """
    Session context for platform (super-admin) endpoints under /s.

    Raises:
        HTTPException 401: Not authenticated
        HTTPException 403: Not a system token
    """
    from paratransit.db.models import SystemUser

    payload = get_token_payload(request)
    if not is_system_token(payload):
        raise HTTPException(status_code=403, detail="System access required")

    user = sys_db.query(SystemUser).filter(SystemUser.id == _parse_user_id(payload)).first()
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    if not user.is_active:
        raise HTTPException(status_code=401, detail="Account disabled")

    token_version = payload.get("token_version")
    if token_version is not None and token_version != user.token_version:
        raise HTTPException(status_code=401, detail="Session revoked")

    return SystemSession(
        user_id=user.id,
        email=user.email,
        permissions=frozenset(SUPER_ADMIN_ROLE.permissions),
    )


# =============================================================================
# Authorization
# =============================================================================

def require_permission(*keys: str, require_all: bool = False):
    """
    Dependency factory for permission-based authorization.

    Usage:
        @router.get("/clients")
        def list_clients(session: OrgSession = Depends(require_permission("clients.read"))):
            ...
    """
    def dependency(session: OrgSession = Depends(get_org_session)) -> OrgSession:
        checks = [has_permission(session.permissions, key) for key in keys]
        allowed = all(checks) if require_all else any(checks)
        if not allowed:
            raise HTTPException(
                status_code=403,
                detail=f"Missing permission: {' or '.join(keys) if not require_all else ', '.join(keys)}",
            )
        return session
    return dependency


def require_scoped(resource: str, action: str, target_param: str = "user_id"):
    """
    Dependency factory for own/all checks on per-user resources.

    Allows all{resource}.{action}, or own{resource}.{action} when the
    {target_param} path parameter is the caller.
    """
    def dependency(
        request: Request,
        session: OrgSession = Depends(get_org_session),
    ) -> OrgSession:
        target = request.path_params.get(target_param)
        if not can_access_scoped(
            session.permissions,
            resource,
            action,
            caller_id=str(session.user_id),
            target_user_id=target,
        ):
            raise HTTPException(status_code=403, detail=f"Not allowed to {action} {resource}")
        return session
    return dependency


def require_system_permission(key: str):
    def dependency(session: SystemSession = Depends(get_system_session)) -> SystemSession:
        if not has_permission(session.permissions, key):
            raise HTTPException(status_code=403, detail=f"Missing permission: {key}")
        return session
    return dependency


def require_csrf_header(request: Request) -> None:
    """
    Verify CSRF header on cookie-authenticated mutations.

    Bearer-token requests are not exposed to CSRF and skip the check.

    Raises:
        HTTPException 403: Missing or invalid CSRF header
    """
    if not request.cookies.get(COOKIE_NAME):
        return
    if request.headers.get(CSRF_HEADER) != CSRF_HEADER_VALUE:
        raise HTTPException(
            status_code=403,
            detail=f"Missing CSRF header. Include '{CSRF_HEADER}: {CSRF_HEADER_VALUE}'"
        )


# =============================================================================
# Collaborators
# =============================================================================

def get_org_provisioner() -> Callable[[str], None]:
    """Creates an organization's database (overridden in tests)."""
    from paratransit.db.tenancy import provision_org_database
    return provision_org_database
