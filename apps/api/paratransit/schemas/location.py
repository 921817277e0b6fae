"""Location (address) schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class LocationCreate(BaseModel):
    alias_name: str | None = Field(None, max_length=255)
    address_line_1: str = Field(..., min_length=1, max_length=255)
    address_line_2: str | None = Field(None, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=50)
    zip: str = Field(..., min_length=1, max_length=20)
    country: str = Field("USA", min_length=1, max_length=100)
    address_validated: bool = False


class LocationUpdate(BaseModel):
    alias_name: str | None = Field(None, max_length=255)
    address_line_1: str | None = Field(None, min_length=1, max_length=255)
    address_line_2: str | None = Field(None, max_length=255)
    city: str | None = Field(None, min_length=1, max_length=100)
    state: str | None = Field(None, min_length=1, max_length=50)
    zip: str | None = Field(None, min_length=1, max_length=20)
    country: str | None = Field(None, min_length=1, max_length=100)
    address_validated: bool | None = None


class LocationRead(BaseModel):
    model_config = {"from_attributes": True}

    id: UUID
    alias_name: str | None
    address_line_1: str
    address_line_2: str | None
    city: str
    state: str
    zip: str
    country: str
    address_validated: bool
    created_at: datetime
    updated_at: datetime


class LocationListResponse(BaseModel):
    items: list[LocationRead]
    total: int
    page: int
    per_page: int
    pages: int
