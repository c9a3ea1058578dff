# hms/api/v1/endpoints/dashboard.py
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from hms.core.database import get_db
from hms.core.tenant_context import Principal, scope_hospital_id
from hms.dependencies.authz import require_permission
from hms.schemas.dashboard import DashboardResponse, RecentVisit
from hms.services.dashboard_service import build_dashboard

router = APIRouter()


@router.get("/stats", response_model=DashboardResponse)
def dashboard_stats(
    hospital_id: UUID | None = Query(None, alias="hospitalId"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("dashboard.read")),
) -> DashboardResponse:
    """
    Snapshot of today's activity, money, queues and bed occupancy.

    SUPER_ADMIN sees every hospital unless hospitalId narrows it down.
    """
    snapshot = build_dashboard(db, scope_hospital_id(principal, hospital_id))
    snapshot["recent_activity"] = [RecentVisit.model_validate(v) for v in snapshot["recent_activity"]]
    return DashboardResponse(**snapshot)
