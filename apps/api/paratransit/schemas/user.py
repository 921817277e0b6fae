"""User (staff and driver) schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from paratransit.db.enums import ContactPreference, MobilityEquipment, VehicleType
from paratransit.schemas.common import Name, Phone
from paratransit.utils.normalization import normalize_email


class DriverProfileFields(BaseModel):
    """Driver profile columns shared by create and read schemas."""
    model_config = {"use_enum_values": True}

    vehicle_type: VehicleType | None = None
    vehicle_color: str | None = Field(None, max_length=50)
    max_rides_per_week: int = Field(0, ge=0, le=100, description="0 = unlimited")
    can_accommodate_mobility_equipment: list[MobilityEquipment] = Field(default_factory=list)
    can_accommodate_oxygen: bool = False
    can_accommodate_service_animal: bool = False
    can_accommodate_additional_rider: bool = False
    town_preferences: str | None = None
    destination_limitations: str | None = None


class UserCreate(DriverProfileFields):
    """Request schema for creating a user."""
    first_name: Name = Field(..., max_length=100)
    last_name: Name = Field(..., max_length=100)
    email: EmailStr
    phone: Phone | None = None
    contact_preference: ContactPreference = ContactPreference.EMAIL
    role_key: str | None = Field(None, max_length=50)
    address_location: UUID | None = None
    is_driver: bool = False
    password: str | None = Field(None, min_length=8, max_length=72)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return normalize_email(v)


class UserUpdate(BaseModel):
    """Partial update; only provided fields change."""
    model_config = {"use_enum_values": True}

    first_name: Name | None = Field(None, max_length=100)
    last_name: Name | None = Field(None, max_length=100)
    email: EmailStr | None = None
    phone: Phone | None = None
    contact_preference: ContactPreference | None = None
    role_key: str | None = Field(None, max_length=50)
    address_location: UUID | None = None
    is_driver: bool | None = None
    is_active: bool | None = None
    vehicle_type: VehicleType | None = None
    vehicle_color: str | None = Field(None, max_length=50)
    max_rides_per_week: int | None = Field(None, ge=0, le=100)
    can_accommodate_mobility_equipment: list[MobilityEquipment] | None = None
    can_accommodate_oxygen: bool | None = None
    can_accommodate_service_animal: bool | None = None
    can_accommodate_additional_rider: bool | None = None
    town_preferences: str | None = None
    destination_limitations: str | None = None

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str | None) -> str | None:
        return normalize_email(v)


class UserRead(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    email: str
    phone: str | None
    contact_preference: str
    role_key: str | None
    address_location: UUID | None
    is_driver: bool
    is_active: bool
    vehicle_type: str | None
    vehicle_color: str | None
    max_rides_per_week: int
    can_accommodate_mobility_equipment: list[str]
    can_accommodate_oxygen: bool
    can_accommodate_service_animal: bool
    can_accommodate_additional_rider: bool
    town_preferences: str | None
    destination_limitations: str | None
    created_at: datetime
    updated_at: datetime


class UserListResponse(BaseModel):
    items: list[UserRead]
    total: int
    page: int
    per_page: int
    pages: int
