# hms/schemas/audit.py
from datetime import datetime
from typing import Any
from uuid import UUID

from hms.models.user import Role
from hms.schemas.common import ApiModel, PageMeta


class AuditUser(ApiModel):
    id: UUID
    email: str
    first_name: str
    last_name: str
    role: Role


class AuditLogRead(ApiModel):
    id: UUID
    user_id: UUID | None = None
    hospital_id: UUID | None = None
    action: str
    entity: str
    entity_id: str | None = None
    details: dict[str, Any] | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    created_at: datetime

    user: AuditUser | None = None


class AuditLogList(PageMeta):
    logs: list[AuditLogRead]


class EntityAuditTrail(ApiModel):
    logs: list[AuditLogRead]
