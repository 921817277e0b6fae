"""Dashboard router - API endpoints for dashboard widgets."""

from datetime import datetime
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from paratransit.core.deps import get_org_db, require_permission
from paratransit.schemas.auth import OrgSession
from paratransit.schemas.dashboard import DashboardResponse
from paratransit.services import dashboard_service, org_settings_service

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("", response_model=DashboardResponse)
def get_dashboard(
    session: OrgSession = Depends(require_permission("dashboard.read")),
    db: Session = Depends(get_org_db),
) -> DashboardResponse:
    """
    Monthly ride counts, upcoming rides and recent activity.

    "Today" is taken in the organization's timezone.
    """
    row = org_settings_service.get_or_create_settings(db)
    db.commit()
    today = datetime.now(ZoneInfo(row.timezone)).date()
    return DashboardResponse(**dashboard_service.get_dashboard(db, today))
