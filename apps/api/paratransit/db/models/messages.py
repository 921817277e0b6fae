"""Org database models: outbound messages and their recipients."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from paratransit.db.base import OrgBase, new_id, utcnow
from paratransit.db.enums import DEFAULT_MESSAGE_STATUS, MessageType
from paratransit.db.models.auth import User


class Message(OrgBase):
    """Outbound email queued for delivery to one or more users."""

    __tablename__ = "messages"
    __table_args__ = (
        Index("idx_messages_status", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_id)
    sender_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=True
    )
    message_type: Mapped[str] = mapped_column(
        String(20), default=MessageType.EMAIL.value, nullable=False
    )
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=DEFAULT_MESSAGE_STATUS.value, nullable=False
    )
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    sent_at: Mapped[datetime | None] = mapped_column(nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    recipients: Mapped[list[MessageRecipient]] = relationship(
        back_populates="message", cascade="all, delete-orphan"
    )


class MessageRecipient(OrgBase):
    __tablename__ = "message_recipients"

    message_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("messages.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )

    message: Mapped[Message] = relationship(back_populates="recipients")
    user: Mapped[User] = relationship()
