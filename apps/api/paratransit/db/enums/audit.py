"""Audit log enums."""

from enum import Enum


class AuditAction(str, Enum):
    """Audit entry categories."""

    AUTH = "auth"
    ADD = "add"
    CHANGE = "change"
    DELETE = "delete"
    ERROR = "error"
