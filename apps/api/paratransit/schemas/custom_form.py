"""Custom form schemas: form definitions, fields and saved responses."""

import re
from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from paratransit.db.enums import OPTION_FIELD_TYPES, CustomFieldType


FIELD_KEY_PATTERN = r"^[A-Za-z0-9_]+$"


class FieldOption(BaseModel):
    label: str = Field(..., min_length=1, max_length=255)
    value: str = Field(..., min_length=1, max_length=255)


class FieldValidation(BaseModel):
    min_length: int | None = Field(None, ge=0)
    max_length: int | None = Field(None, ge=0)
    min_value: float | None = None
    max_value: float | None = None
    pattern: str | None = None

    @field_validator("pattern")
    @classmethod
    def compiles(cls, v: str | None) -> str | None:
        if v is not None:
            try:
                re.compile(v)
            except re.error as e:
                raise ValueError(f"Invalid pattern: {e}")
        return v


ConditionOperator = Literal[
    "equals",
    "not_equals",
    "contains",
    "not_contains",
    "is_empty",
    "is_not_empty",
]


class FieldCondition(BaseModel):
    field_key: str = Field(..., min_length=1, max_length=100)
    operator: ConditionOperator
    value: Any = None


class CustomFormFieldInput(BaseModel):
    field_key: str = Field(..., min_length=1, max_length=100, pattern=FIELD_KEY_PATTERN)
    label: str = Field(..., min_length=1, max_length=255)
    field_type: CustomFieldType
    placeholder: str | None = Field(None, max_length=255)
    help_text: str | None = None
    default_value: str | None = None
    is_required: bool = False
    options: list[FieldOption] | None = None
    validation_rules: FieldValidation | None = None
    conditional_logic: FieldCondition | None = None
    display_order: int | None = None  # Defaults to list position

    @model_validator(mode="after")
    def options_for_choice_fields(self) -> "CustomFormFieldInput":
        if self.field_type in OPTION_FIELD_TYPES and not self.options:
            raise ValueError(f"{self.field_type.value} fields need at least one option")
        if self.options:
            values = [o.value for o in self.options]
            if len(values) != len(set(values)):
                raise ValueError(f"Duplicate option values in {self.field_key}")
        return self


def _check_field_set(fields: list[CustomFormFieldInput]) -> None:
    keys = [f.field_key for f in fields]
    if len(keys) != len(set(keys)):
        raise ValueError("Field keys must be unique within a form")
    for field in fields:
        condition = field.conditional_logic
        if condition and (condition.field_key == field.field_key or condition.field_key not in keys):
            raise ValueError(
                f"Condition on {field.field_key} must reference another field in the form"
            )


class CustomFormCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=500)
    target_entity: str = Field(..., max_length=20)  # client | user | appointment
    display_order: int = 0
    fields: list[CustomFormFieldInput] = Field(default_factory=list)

    @model_validator(mode="after")
    def unique_keys(self) -> "CustomFormCreate":
        _check_field_set(self.fields)
        return self


class CustomFormUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=500)
    is_active: bool | None = None
    display_order: int | None = None
    fields: list[CustomFormFieldInput] | None = None  # Replaces every field

    @model_validator(mode="after")
    def unique_keys(self) -> "CustomFormUpdate":
        if self.fields is not None:
            _check_field_set(self.fields)
        return self


class CustomFormFieldRead(BaseModel):
    model_config = {"from_attributes": True}

    id: UUID
    field_key: str
    label: str
    field_type: str
    placeholder: str | None
    help_text: str | None
    default_value: str | None
    is_required: bool
    options: list[dict] | None
    validation_rules: dict | None
    conditional_logic: dict | None
    display_order: int


class CustomFormRead(BaseModel):
    model_config = {"from_attributes": True}

    id: UUID
    name: str
    description: str | None
    target_entity: str
    is_active: bool
    display_order: int
    fields: list[CustomFormFieldRead]
    created_at: datetime
    updated_at: datetime


class CustomFormResponseSave(BaseModel):
    form_id: UUID
    entity_type: str = Field(..., max_length=20)
    entity_id: UUID
    response_data: dict[str, Any]


class CustomFormResponseRead(BaseModel):
    model_config = {"from_attributes": True}

    id: UUID
    form_id: UUID
    entity_type: str
    entity_id: UUID
    response_data: dict[str, Any]
    submitted_by: UUID | None
    created_at: datetime
    updated_at: datetime
