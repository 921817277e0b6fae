"""Pydantic schemas for API request/response models."""

from paratransit.schemas.auth import OrgSession, SystemSession, TokenPayload
from paratransit.schemas.org import OrgCreate, OrgRead, OrgUpdate

__all__ = [
    "OrgCreate",
    "OrgRead",
    "OrgSession",
    "OrgUpdate",
    "SystemSession",
    "TokenPayload",
]
