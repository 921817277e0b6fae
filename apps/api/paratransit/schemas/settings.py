"""Organization settings schemas."""

from datetime import date
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, field_validator

from paratransit.utils.normalization import validate_hhmm


class OrgSettingsRead(BaseModel):
    model_config = {"from_attributes": True}

    timezone: str
    close_time: str
    digest_enabled: bool
    last_digest_date: date | None


class OrgSettingsUpdate(BaseModel):
    timezone: str | None = None
    close_time: str | None = None
    digest_enabled: bool | None = None

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str | None) -> str | None:
        if v is None:
            return None
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone '{v}'")
        return v

    @field_validator("close_time")
    @classmethod
    def validate_close_time(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return validate_hhmm(v)
