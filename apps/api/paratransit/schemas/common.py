"""Shared field validators and response envelopes."""

from typing import Annotated

from pydantic import AfterValidator, BaseModel

from paratransit.utils.normalization import normalize_name, normalize_phone


def _phone(value: str) -> str:
    return normalize_phone(value)  # Raises ValueError on invalid


def _name(value: str) -> str:
    normalized = normalize_name(value)
    if not normalized:
        raise ValueError("Name cannot be blank")
    return normalized


# E.164 phone, normalized from common US input formats
Phone = Annotated[str, AfterValidator(_phone)]
Name = Annotated[str, AfterValidator(_name)]


class DeleteResponse(BaseModel):
    id: str
    message: str
