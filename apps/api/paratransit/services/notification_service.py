"""Outbound notifications - queue, send loop, retry and cancel.

Messages are stored with their recipients and delivered through an
EmailSender. A failed send marks the message failed; retries are explicit.
"""

import logging
from uuid import UUID

from sqlalchemy.orm import Session, selectinload

from paratransit.db.base import utcnow
from paratransit.db.enums import AuditAction, MessageStatus, MessageType
from paratransit.db.models import Message, MessageRecipient, User
from paratransit.schemas.notification import NotificationRead
from paratransit.services import audit_service
from paratransit.services.email_sender import EmailSender
from paratransit.utils.pagination import PaginationParams, paginate_query

logger = logging.getLogger(__name__)


# =============================================================================
# Queries
# =============================================================================

def list_messages(
    db: Session,
    pagination: PaginationParams,
    status: MessageStatus | None = None,
    recipient_id: UUID | None = None,
) -> tuple[list[Message], int]:
    """List messages newest first; recipient_id limits to one user's inbox."""
    query = db.query(Message).options(selectinload(Message.recipients))
    if status:
        query = query.filter(Message.status == status.value)
    if recipient_id:
        query = query.join(MessageRecipient).filter(MessageRecipient.user_id == recipient_id)
    query = query.order_by(Message.created_at.desc(), Message.id)
    return paginate_query(query, pagination)


def get_message(db: Session, message_id: UUID) -> Message | None:
    return (
        db.query(Message)
        .options(selectinload(Message.recipients))
        .filter(Message.id == message_id)
        .first()
    )


def recipient_ids(message: Message) -> list[UUID]:
    return [r.user_id for r in message.recipients]


def to_read(message: Message) -> NotificationRead:
    return NotificationRead(
        id=message.id,
        sender_id=message.sender_id,
        message_type=message.message_type,
        subject=message.subject,
        body=message.body,
        status=message.status,
        last_error=message.last_error,
        recipient_ids=recipient_ids(message),
        sent_at=message.sent_at,
        created_at=message.created_at,
    )


# =============================================================================
# Queue & Send
# =============================================================================

def queue_message(
    db: Session,
    subject: str,
    body: str,
    recipients: list[UUID],
    sender_id: UUID | None = None,
    message_type: MessageType = MessageType.EMAIL,
) -> Message:
    """Create a pending message (flushed, not committed)."""
    if not recipients:
        raise ValueError("A message needs at least one recipient")
    message = Message(
        sender_id=sender_id,
        message_type=message_type.value,
        subject=subject,
        body=body,
        status=MessageStatus.PENDING.value,
    )
    for user_id in dict.fromkeys(recipients):
        message.recipients.append(MessageRecipient(user_id=user_id))
    db.add(message)
    db.flush()
    return message


def mark_sent(message: Message) -> None:
    message.status = MessageStatus.SENT.value
    message.sent_at = utcnow()
    message.last_error = None


def mark_failed(message: Message, error: str) -> None:
    message.status = MessageStatus.FAILED.value
    message.last_error = error[:1000]


def send_message(db: Session, message: Message, sender: EmailSender) -> bool:
    """
    Deliver a pending message to every recipient.

    Every recipient is attempted; the message is sent only when all
    deliveries succeed. Sender errors are recorded, never raised.

    Returns:
        True if the message was marked sent
    """
    errors: list[str] = []
    for recipient in message.recipients:
        user = recipient.user or db.get(User, recipient.user_id)
        if user is None or not user.email:
            errors.append(f"recipient {recipient.user_id}: no email address")
            continue
        try:
            sender.send_email(to_email=user.email, subject=message.subject, text=message.body)
        except Exception as e:
            logger.warning(
                "Email delivery failed",
                extra={"context": {
                    "message_id": str(message.id),
                    "recipient_id": str(user.id),
                    "sender": sender.key,
                }},
            )
            errors.append(f"recipient {user.id}: {e}")

    if errors:
        mark_failed(message, "; ".join(errors))
    else:
        mark_sent(message)
    db.flush()
    return not errors


def send_pending(db: Session, sender: EmailSender) -> dict[str, int]:
    """
    Send loop over every pending message. Commits once at the end.

    Returns:
        Counts of sent and failed messages
    """
    pending = (
        db.query(Message)
        .options(selectinload(Message.recipients).selectinload(MessageRecipient.user))
        .filter(Message.status == MessageStatus.PENDING.value)
        .order_by(Message.created_at)
        .all()
    )
    counts = {"sent": 0, "failed": 0}
    for message in pending:
        if send_message(db, message, sender):
            counts["sent"] += 1
        else:
            counts["failed"] += 1
    db.commit()
    if pending:
        logger.info("Send loop finished", extra={"context": counts})
    return counts


# =============================================================================
# Retry & Cancel
# =============================================================================

def retry_message(
    db: Session,
    message: Message,
    sender: EmailSender,
    actor_id: UUID,
) -> Message:
    """
    Requeue a failed message and attempt delivery once more.

    Raises:
        ValueError: Message is not failed
    """
    if message.status != MessageStatus.FAILED.value:
        raise ValueError(f"Only failed messages can be retried (status is {message.status})")
    message.status = MessageStatus.PENDING.value
    message.last_error = None
    db.flush()
    send_message(db, message, sender)
    audit_service.log_action(
        db,
        AuditAction.CHANGE,
        user_id=actor_id,
        object_id=message.id,
        message="Notification retried",
        details={"status": message.status},
    )
    db.commit()
    db.refresh(message)
    return message


def cancel_message(db: Session, message: Message, actor_id: UUID) -> Message:
    """
    Raises:
        ValueError: Message is not pending
    """
    if message.status != MessageStatus.PENDING.value:
        raise ValueError(f"Only pending messages can be cancelled (status is {message.status})")
    message.status = MessageStatus.CANCELLED.value
    audit_service.log_action(
        db,
        AuditAction.CHANGE,
        user_id=actor_id,
        object_id=message.id,
        message="Notification cancelled",
    )
    db.commit()
    db.refresh(message)
    return message
