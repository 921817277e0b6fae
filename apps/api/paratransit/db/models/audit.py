"""Org database models: audit trail."""

import uuid
from datetime import datetime

from sqlalchemy import JSON, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from paratransit.db.base import OrgBase, new_id, utcnow


class AuditLog(OrgBase):
    """Append-only record of who changed what."""

    __tablename__ = "audit_logs"
    __table_args__ = (
        Index("idx_audit_action_type", "action_type"),
        Index("idx_audit_created_at", "created_at"),
        Index("idx_audit_object", "object_id"),
        Index("idx_audit_user", "user_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_id)
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    object_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    action_type: Mapped[str] = mapped_column(String(20), nullable=False)
    action_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    action_details: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
