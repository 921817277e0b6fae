"""Call log and volunteer record schemas."""

import datetime as dt
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from paratransit.schemas.common import Name, Phone


# =============================================================================
# Call Logs
# =============================================================================

class CallLogTypeRead(BaseModel):
    model_config = {"from_attributes": True}

    id: UUID
    title: str


class CallLogCreate(BaseModel):
    date: dt.date
    call_type: UUID
    first_name: Name = Field(..., max_length=255)
    last_name: Name = Field(..., max_length=255)
    phone_number: Phone
    message: str | None = None
    notes: str | None = None


class CallLogUpdate(BaseModel):
    date: dt.date | None = None
    call_type: UUID | None = None
    first_name: Name | None = Field(None, max_length=255)
    last_name: Name | None = Field(None, max_length=255)
    phone_number: Phone | None = None
    message: str | None = None
    notes: str | None = None


class CallLogRead(BaseModel):
    model_config = {"from_attributes": True}

    id: UUID
    created_by_user_id: UUID
    date: dt.date
    call_type: UUID
    first_name: str
    last_name: str
    phone_number: str
    message: str | None
    notes: str | None
    created_at: dt.datetime
    updated_at: dt.datetime


class CallLogListResponse(BaseModel):
    items: list[CallLogRead]
    total: int
    page: int
    per_page: int
    pages: int


# =============================================================================
# Volunteer Records
# =============================================================================

class VolunteerRecordCreate(BaseModel):
    user_id: UUID | None = None  # Defaults to the caller
    date: dt.date
    hours: Decimal = Field(..., gt=0, le=24, max_digits=6, decimal_places=2)
    miles: Decimal | None = Field(None, ge=0, max_digits=8, decimal_places=2)
    description: str | None = None


class VolunteerRecordUpdate(BaseModel):
    date: dt.date | None = None
    hours: Decimal | None = Field(None, gt=0, le=24, max_digits=6, decimal_places=2)
    miles: Decimal | None = Field(None, ge=0, max_digits=8, decimal_places=2)
    description: str | None = None


class VolunteerRecordRead(BaseModel):
    model_config = {"from_attributes": True}

    id: UUID
    user_id: UUID
    date: dt.date
    hours: Decimal
    miles: Decimal | None
    description: str | None
    created_at: dt.datetime
    updated_at: dt.datetime


class VolunteerRecordListResponse(BaseModel):
    items: list[VolunteerRecordRead]
    total: int
    page: int
    per_page: int
    pages: int
