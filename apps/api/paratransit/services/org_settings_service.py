"""Organization settings service (single row per org database)."""

from uuid import UUID

from sqlalchemy.orm import Session

from paratransit.core.config import settings
from paratransit.db.enums import AuditAction
from paratransit.db.models import OrgSettings
from paratransit.schemas.settings import OrgSettingsUpdate
from paratransit.services import audit_service


SETTINGS_ROW_ID = 1


def get_or_create_settings(db: Session) -> OrgSettings:
    """Settings row, created with platform defaults on first access (flushed)."""
    row = db.query(OrgSettings).filter(OrgSettings.id == SETTINGS_ROW_ID).first()
    if row is None:
        row = OrgSettings(
            id=SETTINGS_ROW_ID,
            timezone=settings.DIGEST_TIMEZONE,
            close_time=settings.DIGEST_CLOSE_TIME,
            digest_enabled=True,
        )
        db.add(row)
        db.flush()
    return row


def update_settings(db: Session, data: OrgSettingsUpdate, actor_id: UUID) -> OrgSettings:
    row = get_or_create_settings(db)
    updates = data.model_dump(exclude_unset=True, exclude_none=True)
    before = {field: getattr(row, field) for field in updates}
    for field, value in updates.items():
        setattr(row, field, value)
    audit_service.log_action(
        db,
        AuditAction.CHANGE,
        user_id=actor_id,
        message="Organization settings updated",
        details=audit_service.diff_changes(before, updates),
    )
    db.commit()
    db.refresh(row)
    return row
