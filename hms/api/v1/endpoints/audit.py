# hms/api/v1/endpoints/audit.py
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session, joinedload

from hms.core.database import get_db
from hms.core.tenant_context import Principal, scope_hospital_id
from hms.dependencies.authz import require_permission
from hms.models.audit_log import AuditLog
from hms.schemas.audit import AuditLogList, AuditLogRead, EntityAuditTrail
from hms.utils.datetime_utils import as_utc
from hms.utils.pagination import PageParams, page_params, paginate

router = APIRouter()


def _scoped_logs(db: Session, principal: Principal, hospital_id: UUID | None = None):
    query = db.query(AuditLog).options(joinedload(AuditLog.user))
    scope = scope_hospital_id(principal, hospital_id)
    if scope is not None:
        query = query.filter(AuditLog.hospital_id == scope)
    return query


@router.get("", response_model=AuditLogList)
def list_audit_logs(
    user_id: UUID | None = Query(None, alias="userId"),
    entity: str | None = Query(None),
    action: str | None = Query(None, description="Substring match on the action name"),
    start_date: datetime | None = Query(None, alias="startDate"),
    end_date: datetime | None = Query(None, alias="endDate"),
    hospital_id: UUID | None = Query(None, alias="hospitalId"),
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("audit.read")),
) -> AuditLogList:
    """
    Newest first. Hospital admins only see their own hospital's trail.
    """
    query = _scoped_logs(db, principal, hospital_id)
    if user_id:
        query = query.filter(AuditLog.user_id == user_id)
    if entity:
        query = query.filter(AuditLog.entity == entity)
    if action:
        query = query.filter(AuditLog.action.ilike(f"%{action}%"))
    if start_date:
        query = query.filter(AuditLog.created_at >= as_utc(start_date))
    if end_date:
        query = query.filter(AuditLog.created_at <= as_utc(end_date))

    logs, meta = paginate(query.order_by(AuditLog.created_at.desc()), params)
    return AuditLogList(logs=[AuditLogRead.model_validate(log) for log in logs], **meta)


@router.get("/{entity}/{entity_id}", response_model=EntityAuditTrail)
def entity_audit_trail(
    entity: str,
    entity_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("audit.read")),
) -> EntityAuditTrail:
    logs = (
        _scoped_logs(db, principal)
        .filter(AuditLog.entity == entity, AuditLog.entity_id == entity_id)
        .order_by(AuditLog.created_at.desc())
        .all()
    )
    return EntityAuditTrail(logs=[AuditLogRead.model_validate(log) for log in logs])
