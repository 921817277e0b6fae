import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> uuid.UUID:
    return uuid.uuid4()


class SystemBase(DeclarativeBase):
    """Base class for models stored in the system database."""
    type_annotation_map = {
        datetime: DateTime(timezone=True),
    }


class OrgBase(DeclarativeBase):
    """Base class for models stored in every organization database."""
    type_annotation_map = {
        datetime: DateTime(timezone=True),
    }
