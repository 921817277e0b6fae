"""Outbound message enums."""

from enum import Enum


class MessageStatus(str, Enum):
    """
    Outbound message status.

    Flow: pending → sent
              ↘ failed → pending (retry)
              ↘ cancelled
    """

    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"
    CANCELLED = "cancelled"


class MessageType(str, Enum):
    EMAIL = "Email"
    TEXT_MESSAGE = "Text Message"


DEFAULT_MESSAGE_STATUS = MessageStatus.PENDING
