"""Role and permission schemas."""

from uuid import UUID

from pydantic import BaseModel, Field


ROLE_KEY_PATTERN = r"^[a-z0-9][a-z0-9.-]*$"


class PermissionRead(BaseModel):
    perm_key: str
    resource: str
    action: str
    name: str
    description: str


class RoleCreate(BaseModel):
    role_key: str = Field(..., min_length=1, max_length=50, pattern=ROLE_KEY_PATTERN)
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field("", max_length=500)
    permissions: list[str] = Field(default_factory=list)


class RoleUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    permissions: list[str] | None = None  # Replaces the full grant list


class RoleRead(BaseModel):
    id: UUID
    role_key: str
    name: str
    description: str
    is_system: bool
    permissions: list[str]


class UserPermissionOverride(BaseModel):
    perm_key: str
    grant_access: bool


class UserPermissionsUpdate(BaseModel):
    """Replaces the user's overrides."""
    overrides: list[UserPermissionOverride]


class UserPermissionsRead(BaseModel):
    user_id: UUID
    role_key: str | None
    overrides: list[UserPermissionOverride]
    effective: list[str]
