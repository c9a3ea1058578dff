# hms/models/audit_log.py
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Index, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hms.models.base import Base, UUIDPrimaryKeyMixin
from hms.models.user import User


class AuditLog(UUIDPrimaryKeyMixin, Base):
    """
    Append-only audit trail.

    Rows are written by AuditRecorder and never updated or deleted by the API.
    user_id / hospital_id are plain columns, not foreign keys: deleting the
    user or hospital leaves existing rows exactly as they were written.
    """

    __tablename__ = "audit_logs"
    __table_args__ = (
        Index("ix_audit_logs_entity_entity_id", "entity", "entity_id"),
    )

    user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True, index=True)
    hospital_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True, index=True)

    action: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    entity: Mapped[str] = mapped_column(String(100), nullable=False)
    entity_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    details: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    ip_address: Mapped[str | None] = mapped_column(String(100), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
        index=True,
    )

    user: Mapped["User | None"] = relationship(
        "User",
        primaryjoin="foreign(AuditLog.user_id) == User.id",
        viewonly=True,
    )
