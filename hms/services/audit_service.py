# hms/services/audit_service.py
"""
Audit trail writer.

Writes go through their own session, after the business transaction has
committed, so an audit failure can neither roll back nor block the clinical
operation that triggered it. Failures are logged and dropped: the trail is
best-effort.
"""

import json
import logging
import uuid
from typing import Any, Callable

from fastapi import Request
from sqlalchemy.orm import Session

from hms.core.tenant_context import Principal
from hms.models.audit_log import AuditLog

logger = logging.getLogger(__name__)

# Request paths that never get the generic API_REQUEST entry
AUDIT_SKIP_PATHS = ("/auth/login", "/auth/register", "/auth/refresh", "/payments/webhook")
MUTATING_METHODS = ("POST", "PUT", "PATCH", "DELETE")


def to_json_document(details: Any) -> dict[str, Any] | None:
    """
    Turn an arbitrary payload into something a JSON column accepts.
    Values json can't encode (UUID, datetime, Decimal, enums...) are stringified.
    """
    if details is None:
        return None
    document = json.loads(json.dumps(details, default=str))
    if not isinstance(document, dict):
        return {"value": document}
    return document


def client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


class AuditRecorder:
    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def record(
        self,
        *,
        action: str,
        entity: str,
        entity_id: Any = None,
        details: Any = None,
        user_id: uuid.UUID | None = None,
        hospital_id: uuid.UUID | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> None:
        """
        Append one audit row. Never raises.
        """
        try:
            entry = AuditLog(
                user_id=user_id,
                hospital_id=hospital_id,
                action=action,
                entity=entity,
                entity_id=str(entity_id) if entity_id is not None else None,
                details=to_json_document(details),
                ip_address=ip_address,
                user_agent=(user_agent or "")[:500] or None,
            )
            db = self.session_factory()
            try:
                db.add(entry)
                db.commit()
            except Exception:
                db.rollback()
                raise
            finally:
                db.close()
        except Exception:
            logger.exception(
                "Non-fatal: failed to write audit log action=%s entity=%s entity_id=%s",
                action,
                entity,
                entity_id,
            )

    def for_request(self, principal: Principal | None, request: Request) -> "RequestAuditor":
        return RequestAuditor(
            recorder=self,
            principal=principal,
            ip_address=client_ip(request),
            user_agent=request.headers.get("user-agent"),
        )


class RequestAuditor:
    """
    AuditRecorder bound to one request's principal and client details.

    Endpoints call it right after their commit:

        audit("CREATE_PATIENT", "PATIENT", patient.id, {"name": ...},
              hospital_id=patient.hospital_id)
    """

    def __init__(
        self,
        recorder: AuditRecorder,
        principal: Principal | None,
        ip_address: str | None,
        user_agent: str | None,
    ):
        self.recorder = recorder
        self.principal = principal
        self.ip_address = ip_address
        self.user_agent = user_agent

    def __call__(
        self,
        action: str,
        entity: str,
        entity_id: Any = None,
        details: Any = None,
        hospital_id: uuid.UUID | None = None,
        user_id: uuid.UUID | None = None,
    ) -> None:
        if hospital_id is None and self.principal is not None:
            hospital_id = self.principal.hospital_id
        if user_id is None and self.principal is not None:
            user_id = self.principal.user_id

        self.recorder.record(
            action=action,
            entity=entity,
            entity_id=entity_id,
            details=details,
            user_id=user_id,
            hospital_id=hospital_id,
            ip_address=self.ip_address,
            user_agent=self.user_agent,
        )
