"""Client and user contact enums."""

from enum import Enum


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class ContactPreference(str, Enum):
    EMAIL = "email"
    PHONE = "phone"
