"""Custom form enums."""

from enum import Enum


class CustomFormTarget(str, Enum):
    """Record type a custom form extends. One form per target."""

    CLIENT = "client"
    USER = "user"
    APPOINTMENT = "appointment"


class CustomFieldType(str, Enum):
    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    DATE = "date"
    SELECT = "select"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    CHECKBOX_GROUP = "checkboxGroup"


# Field types whose answers must come from the field's options
OPTION_FIELD_TYPES = frozenset({
    CustomFieldType.SELECT,
    CustomFieldType.RADIO,
    CustomFieldType.CHECKBOX_GROUP,
})
