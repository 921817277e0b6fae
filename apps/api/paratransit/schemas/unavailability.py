"""Driver unavailability schemas."""

from datetime import date, datetime, time
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from paratransit.db.enums import Weekday


class UnavailabilityFields(BaseModel):
    model_config = {"use_enum_values": True}

    start_date: date
    end_date: date
    start_time: time | None = None
    end_time: time | None = None
    is_all_day: bool = False
    is_recurring: bool = False
    recurring_day_of_week: Weekday | None = None
    reason: str | None = Field(None, max_length=500)

    @model_validator(mode="after")
    def validate_block(self):
        validate_block_fields(
            start_date=self.start_date,
            end_date=self.end_date,
            start_time=self.start_time,
            end_time=self.end_time,
            is_all_day=self.is_all_day,
            is_recurring=self.is_recurring,
            recurring_day_of_week=self.recurring_day_of_week,
        )
        return self


def validate_block_fields(
    *,
    start_date: date,
    end_date: date,
    start_time: time | None,
    end_time: time | None,
    is_all_day: bool,
    is_recurring: bool,
    recurring_day_of_week: str | None,
) -> None:
    """
    Shared block rules (also applied after partial updates).

    Raises:
        ValueError: On any violated rule
    """
    if end_date < start_date:
        raise ValueError("end_date must be on or after start_date")
    if not is_all_day:
        if start_time is None or end_time is None:
            raise ValueError("start_time and end_time are required unless is_all_day is set")
        if end_time <= start_time:
            raise ValueError("end_time must be after start_time")
    if is_recurring and not recurring_day_of_week:
        raise ValueError("recurring_day_of_week is required for recurring blocks")


class UnavailabilityCreate(UnavailabilityFields):
    pass


class UnavailabilityUpdate(BaseModel):
    model_config = {"use_enum_values": True}

    start_date: date | None = None
    end_date: date | None = None
    start_time: time | None = None
    end_time: time | None = None
    is_all_day: bool | None = None
    is_recurring: bool | None = None
    recurring_day_of_week: Weekday | None = None
    reason: str | None = Field(None, max_length=500)


class UnavailabilityRead(BaseModel):
    model_config = {"from_attributes": True}

    id: UUID
    user_id: UUID
    start_date: date
    end_date: date
    start_time: time | None
    end_time: time | None
    is_all_day: bool
    is_recurring: bool
    recurring_day_of_week: str | None
    reason: str | None
    created_at: datetime
    updated_at: datetime
