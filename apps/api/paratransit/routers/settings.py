"""Organization settings router."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from paratransit.core.deps import get_org_db, require_csrf_header, require_permission
from paratransit.schemas.auth import OrgSession
from paratransit.schemas.settings import OrgSettingsRead, OrgSettingsUpdate
from paratransit.services import org_settings_service

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("", response_model=OrgSettingsRead)
def get_settings(
    session: OrgSession = Depends(require_permission("settings.read")),
    db: Session = Depends(get_org_db),
):
    row = org_settings_service.get_or_create_settings(db)
    db.commit()
    return OrgSettingsRead.model_validate(row)


@router.patch(
    "",
    response_model=OrgSettingsRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_settings(
    data: OrgSettingsUpdate,
    session: OrgSession = Depends(require_permission("settings.update")),
    db: Session = Depends(get_org_db),
):
    """Update digest timezone, close time (HH:MM) or enable flag."""
    row = org_settings_service.update_settings(db, data, session.user_id)
    return OrgSettingsRead.model_validate(row)
