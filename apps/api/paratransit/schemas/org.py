"""Organization (tenant) schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from paratransit.schemas.common import Phone


SUBDOMAIN_PATTERN = r"^[a-z0-9]([a-z0-9-]{0,13}[a-z0-9])?$"


class OrgCreate(BaseModel):
    """Request schema for registering an organization."""
    name: str = Field(..., min_length=1, max_length=255)
    subdomain: str = Field(..., min_length=1, max_length=15, pattern=SUBDOMAIN_PATTERN)
    poc_email: EmailStr
    poc_phone: Phone | None = None
    logo_path: str | None = Field(None, max_length=255)


class OrgUpdate(BaseModel):
    """Subdomain is immutable (it names the org database)."""
    name: str | None = Field(None, min_length=1, max_length=255)
    poc_email: EmailStr | None = None
    poc_phone: Phone | None = None
    logo_path: str | None = Field(None, max_length=255)
    is_active: bool | None = None


class OrgRead(BaseModel):
    model_config = {"from_attributes": True}

    id: UUID
    name: str
    subdomain: str
    poc_email: str
    poc_phone: str | None
    logo_path: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class OrgListResponse(BaseModel):
    items: list[OrgRead]
    total: int
    page: int
    per_page: int
    pages: int
