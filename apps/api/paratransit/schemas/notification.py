"""Outbound message (notification) schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from paratransit.db.enums import MessageStatus


class NotificationRead(BaseModel):
    id: UUID
    sender_id: UUID | None
    message_type: str
    subject: str
    body: str
    status: MessageStatus
    last_error: str | None
    recipient_ids: list[UUID]
    sent_at: datetime | None
    created_at: datetime


class NotificationListResponse(BaseModel):
    items: list[NotificationRead]
    total: int
    page: int
    per_page: int
    pages: int


class NotificationUpdate(BaseModel):
    """Only cancellation of a pending message is supported."""
    status: MessageStatus
