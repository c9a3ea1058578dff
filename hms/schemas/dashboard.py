# hms/schemas/dashboard.py
from datetime import datetime
from typing import Any
from uuid import UUID

from hms.models.visit import VisitStatus
from hms.schemas.common import ApiModel
from hms.schemas.patient import PatientBrief


class DashboardStats(ApiModel):
    today_visits: int
    queue_count: int
    total_patients: int
    today_revenue: float
    today_billed: float
    outstanding_amount: float
    outstanding_bills_count: int
    pending_prescriptions: int
    pending_lab_orders: int
    low_stock_count: int


class BedOccupancy(ApiModel):
    total: int
    occupied: int
    available: int
    occupancy_percentage: int


class DepartmentCount(ApiModel):
    department: str
    count: int


class StatusCount(ApiModel):
    status: VisitStatus
    count: int


class RecentVisit(ApiModel):
    id: UUID
    department: str
    status: VisitStatus
    check_in_time: datetime
    patient: PatientBrief | None = None


class DashboardResponse(ApiModel):
    settings: dict[str, Any]
    branding: dict[str, Any]
    stats: DashboardStats
    bed_occupancy: BedOccupancy
    department_breakdown: list[DepartmentCount]
    status_breakdown: list[StatusCount]
    recent_activity: list[RecentVisit]
