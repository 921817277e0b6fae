"""Audit log router."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from paratransit.core.deps import get_org_db, require_permission
from paratransit.db.enums import AuditAction
from paratransit.schemas.audit import AuditLogListResponse, AuditLogRead
from paratransit.schemas.auth import OrgSession
from paratransit.services import audit_service
from paratransit.utils.pagination import PaginationParams, get_pagination

router = APIRouter(prefix="/audit-log", tags=["Audit"])


@router.get("", response_model=AuditLogListResponse)
def list_audit_log(
    action_type: AuditAction | None = None,
    user_id: UUID | None = None,
    object_id: UUID | None = None,
    pagination: PaginationParams = Depends(get_pagination),
    session: OrgSession = Depends(require_permission("auditlog.read")),
    db: Session = Depends(get_org_db),
):
    """Audit entries, newest first."""
    entries, total = audit_service.list_entries(db, pagination, action_type, user_id, object_id)
    pages = (total + pagination.per_page - 1) // pagination.per_page
    return AuditLogListResponse(
        items=[AuditLogRead.model_validate(e) for e in entries],
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        pages=pages,
    )
