"""
Internal endpoints for scheduled/cron operations.

Protected by X-Internal-Secret header.
Call from an external cron (every 15 minutes is typical).
"""

from typing import Callable

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from paratransit.core.config import settings
from paratransit.core.deps import get_org_session_factory, get_sys_db
from paratransit.core.rate_limit import limiter
from paratransit.schemas.digest import DigestRunResponse
from paratransit.services import digest_service
from paratransit.services.email_sender import EmailSender, get_email_sender

router = APIRouter(prefix="/internal/scheduled", tags=["internal"])


def verify_internal_secret(x_internal_secret: str = Header(...)):
    """Verify the internal secret header."""
    expected = settings.INTERNAL_SECRET
    if not expected:
        raise HTTPException(status_code=501, detail="INTERNAL_SECRET not configured")
    if x_internal_secret != expected:
        raise HTTPException(status_code=403, detail="Invalid internal secret")


@router.post("/driver-digest", response_model=DigestRunResponse)
@limiter.limit(f"{settings.RATE_LIMIT_INTERNAL}/minute")
def run_driver_digest(
    request: Request,
    x_internal_secret: str = Header(...),
    sys_db: Session = Depends(get_sys_db),
    session_factory: Callable[[str], Session] = Depends(get_org_session_factory),
    sender: EmailSender = Depends(get_email_sender),
):
    """
    Send the daily driver digest for every organization that is due.

    An organization is due once its local close time has passed and its
    digest has not run today.
    """
    verify_internal_secret(x_internal_secret)
    result = digest_service.run_driver_digests(sys_db, session_factory, sender)
    return DigestRunResponse(**result.as_dict())
