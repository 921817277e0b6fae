"""Notifications router - outbound messages, retry and cancel."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from paratransit.core.deps import get_org_db, require_csrf_header, require_permission
from paratransit.db.enums import MessageStatus
from paratransit.schemas.auth import OrgSession
from paratransit.schemas.notification import (
    NotificationListResponse,
    NotificationRead,
    NotificationUpdate,
)
from paratransit.services import notification_service
from paratransit.services.email_sender import EmailSender, get_email_sender
from paratransit.utils.pagination import PaginationParams, get_pagination

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    status: MessageStatus | None = None,
    pagination: PaginationParams = Depends(get_pagination),
    session: OrgSession = Depends(
        require_permission("allnotifications.read", "ownnotifications.read")
    ),
    db: Session = Depends(get_org_db),
):
    """List messages. Without allnotifications.read only the caller's are shown."""
    recipient_id = None if session.can("allnotifications.read") else session.user_id
    messages, total = notification_service.list_messages(db, pagination, status, recipient_id)
    pages = (total + pagination.per_page - 1) // pagination.per_page
    return NotificationListResponse(
        items=[notification_service.to_read(m) for m in messages],
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        pages=pages,
    )


@router.get("/{message_id}", response_model=NotificationRead)
def get_notification(
    message_id: UUID,
    session: OrgSession = Depends(
        require_permission("allnotifications.read", "ownnotifications.read")
    ),
    db: Session = Depends(get_org_db),
):
    message = notification_service.get_message(db, message_id)
    if not message:
        raise HTTPException(status_code=404, detail="Notification not found")
    if not session.can("allnotifications.read") and session.user_id not in (
        notification_service.recipient_ids(message)
    ):
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification_service.to_read(message)


@router.post(
    "/{message_id}/retry",
    response_model=NotificationRead,
    dependencies=[Depends(require_csrf_header)],
)
def retry_notification(
    message_id: UUID,
    session: OrgSession = Depends(require_permission("allnotifications.update")),
    db: Session = Depends(get_org_db),
    sender: EmailSender = Depends(get_email_sender),
):
    """Requeue a failed message and try delivering it again."""
    message = notification_service.get_message(db, message_id)
    if not message:
        raise HTTPException(status_code=404, detail="Notification not found")
    try:
        message = notification_service.retry_message(db, message, sender, session.user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return notification_service.to_read(message)


@router.put(
    "/{message_id}",
    response_model=NotificationRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_notification(
    message_id: UUID,
    data: NotificationUpdate,
    session: OrgSession = Depends(require_permission("allnotifications.update")),
    db: Session = Depends(get_org_db),
):
    """Cancel a pending message (the only supported status change)."""
    message = notification_service.get_message(db, message_id)
    if not message:
        raise HTTPException(status_code=404, detail="Notification not found")
    if data.status != MessageStatus.CANCELLED:
        raise HTTPException(status_code=400, detail="Only cancellation is supported")
    try:
        message = notification_service.cancel_message(db, message, session.user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return notification_service.to_read(message)
