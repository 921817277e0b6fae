"""Audit logging service - who changed what, per organization.

Security guidelines:
- NEVER log secrets (tokens, passwords)
- Use IDs instead of raw PII where possible
"""

from typing import Any
from uuid import UUID

from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session

from paratransit.db.enums import AuditAction
from paratransit.db.models import AuditLog, SystemAuditLog
from paratransit.utils.pagination import PaginationParams, paginate_query


REDACTED_FIELDS = {"password", "password_hash"}


def redact(details: dict[str, Any] | None) -> dict[str, Any]:
    """Drop secret fields and make values JSON-safe."""
    if not details:
        return {}
    clean = {k: v for k, v in details.items() if k not in REDACTED_FIELDS}
    return jsonable_encoder(clean)


def log_action(
    db: Session,
    action: AuditAction,
    user_id: UUID | None = None,
    object_id: UUID | None = None,
    message: str | None = None,
    details: dict[str, Any] | None = None,
) -> AuditLog:
    """
    Append an entry to the organization audit log.

    The entry is flushed, not committed; it lands with the caller's commit.
    """
    entry = AuditLog(
        user_id=user_id,
        object_id=object_id,
        action_type=action.value,
        action_message=message,
        action_details=redact(details),
    )
    db.add(entry)
    db.flush()
    return entry


def log_system_action(
    db: Session,
    action: AuditAction,
    user_id: UUID | None = None,
    object_id: UUID | None = None,
    message: str | None = None,
    details: dict[str, Any] | None = None,
) -> SystemAuditLog:
    """Append an entry to the platform audit log (system database)."""
    entry = SystemAuditLog(
        user_id=user_id,
        object_id=object_id,
        action_type=action.value,
        action_message=message,
        action_details=redact(details),
    )
    db.add(entry)
    db.flush()
    return entry


def list_entries(
    db: Session,
    pagination: PaginationParams,
    action_type: AuditAction | None = None,
    user_id: UUID | None = None,
    object_id: UUID | None = None,
) -> tuple[list[AuditLog], int]:
    """List audit entries, newest first."""
    query = db.query(AuditLog)
    if action_type:
        query = query.filter(AuditLog.action_type == action_type.value)
    if user_id:
        query = query.filter(AuditLog.user_id == user_id)
    if object_id:
        query = query.filter(AuditLog.object_id == object_id)
    query = query.order_by(AuditLog.created_at.desc(), AuditLog.id)
    return paginate_query(query, pagination)


def diff_changes(before: dict[str, Any], after: dict[str, Any]) -> dict[str, Any]:
    """Fields whose value changed, as {field: {"from": old, "to": new}}."""
    changes = {}
    for key, new_value in after.items():
        old_value = before.get(key)
        if old_value != new_value:
            changes[key] = {"from": old_value, "to": new_value}
    return changes
