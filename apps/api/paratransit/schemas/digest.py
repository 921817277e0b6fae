"""Driver digest job schemas."""

from pydantic import BaseModel


class DigestRunResponse(BaseModel):
    orgs_checked: int
    orgs_processed: int
    messages_queued: int
    messages_sent: int
    messages_failed: int
