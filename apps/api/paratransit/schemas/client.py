"""Client (rider) schemas."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from paratransit.db.enums import (
    ContactPreference,
    Gender,
    MobilityEquipment,
    OtherLimitation,
    VehicleType,
)
from paratransit.schemas.common import Name, Phone
from paratransit.utils.normalization import normalize_email


def _check_birth_year(v: int | None) -> int | None:
    if v is not None and not (1900 <= v <= date.today().year):
        raise ValueError(f"birth_year must be between 1900 and {date.today().year}")
    return v


class ClientCreate(BaseModel):
    """Request schema for creating a client."""
    model_config = {"use_enum_values": True}

    first_name: Name = Field(..., max_length=100)
    last_name: Name = Field(..., max_length=100)
    email: EmailStr | None = None
    phone: Phone
    phone_is_cell: bool = False
    secondary_phone: Phone | None = None
    secondary_phone_is_cell: bool = False
    contact_preference: ContactPreference = ContactPreference.PHONE
    allow_messages: bool = False
    gender: Gender
    birth_year: int | None = None
    birth_month: int | None = Field(None, ge=1, le=12)
    lives_alone: bool
    address_location: UUID
    mobility_equipment: list[MobilityEquipment] = Field(default_factory=list)
    vehicle_types: list[VehicleType] = Field(default_factory=list)
    has_oxygen: bool = False
    has_service_animal: bool = False
    other_limitations: list[OtherLimitation] = Field(default_factory=list)
    pickup_instructions: str | None = None
    notes: str | None = None

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str | None) -> str | None:
        return normalize_email(v)

    @field_validator("birth_year")
    @classmethod
    def validate_birth_year(cls, v: int | None) -> int | None:
        return _check_birth_year(v)

    @model_validator(mode="after")
    def phones_differ(self):
        if self.secondary_phone and self.secondary_phone == self.phone:
            raise ValueError("secondary_phone must differ from phone")
        return self


class ClientUpdate(BaseModel):
    model_config = {"use_enum_values": True}

    first_name: Name | None = Field(None, max_length=100)
    last_name: Name | None = Field(None, max_length=100)
    email: EmailStr | None = None
    phone: Phone | None = None
    phone_is_cell: bool | None = None
    secondary_phone: Phone | None = None
    secondary_phone_is_cell: bool | None = None
    contact_preference: ContactPreference | None = None
    allow_messages: bool | None = None
    gender: Gender | None = None
    birth_year: int | None = None
    birth_month: int | None = Field(None, ge=1, le=12)
    lives_alone: bool | None = None
    address_location: UUID | None = None
    mobility_equipment: list[MobilityEquipment] | None = None
    vehicle_types: list[VehicleType] | None = None
    has_oxygen: bool | None = None
    has_service_animal: bool | None = None
    other_limitations: list[OtherLimitation] | None = None
    pickup_instructions: str | None = None
    notes: str | None = None
    is_active: bool | None = None

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str | None) -> str | None:
        return normalize_email(v)

    @field_validator("birth_year")
    @classmethod
    def validate_birth_year(cls, v: int | None) -> int | None:
        return _check_birth_year(v)


class ClientRead(BaseModel):
    model_config = {"from_attributes": True}

    id: UUID
    first_name: str
    last_name: str
    email: str | None
    phone: str
    phone_is_cell: bool
    secondary_phone: str | None
    secondary_phone_is_cell: bool
    contact_preference: str
    allow_messages: bool
    gender: str
    birth_year: int | None
    birth_month: int | None
    lives_alone: bool
    address_location: UUID
    mobility_equipment: list[str]
    vehicle_types: list[str]
    has_oxygen: bool
    has_service_animal: bool
    other_limitations: list[str]
    pickup_instructions: str | None
    notes: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class ClientListResponse(BaseModel):
    items: list[ClientRead]
    total: int
    page: int
    per_page: int
    pages: int
