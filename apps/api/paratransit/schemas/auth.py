"""Authentication-related Pydantic schemas."""

from uuid import UUID

from pydantic import BaseModel


class TokenPayload(BaseModel):
    """Decoded JWT payload structure."""
    sub: UUID  # user_id
    org: str | None = None  # organization subdomain (org users)
    scope: str | None = None  # "system" for platform users
    token_version: int | None = None


class OrgSession(BaseModel):
    """
    Session context for authenticated organization requests.

    Returned by the get_org_session dependency; carries the caller's
    effective permission keys.
    """
    user_id: UUID
    org: str
    first_name: str
    last_name: str
    email: str
    role_key: str | None = None
    permissions: frozenset[str] = frozenset()

    def can(self, key: str) -> bool:
        from paratransit.core.permissions import has_permission
        return has_permission(self.permissions, key)


class SystemSession(BaseModel):
    """Session context for platform (super-admin) requests."""
    user_id: UUID
    email: str
    permissions: frozenset[str] = frozenset()


class MyPermissionsResponse(BaseModel):
    user_id: UUID
    role_key: str | None
    permissions: list[str]
