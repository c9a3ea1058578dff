# hms/services/dashboard_service.py
import logging
import uuid
from datetime import datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy import func
from sqlalchemy.orm import Query, Session, joinedload

from hms.models.billing import OUTSTANDING_STATUSES, BillingRecord, Payment
from hms.models.hospital import Hospital
from hms.models.inventory import InventoryItem
from hms.models.lab import PENDING_LAB_STATUSES, LabOrder
from hms.models.patient import Patient
from hms.models.prescription import Prescription, PrescriptionStatus
from hms.models.visit import QUEUE_STATUSES, Visit
from hms.models.ward import Bed, BedStatus, Room, Ward
from hms.services.settings_service import effective_branding, effective_settings
from hms.utils.datetime_utils import utc_now

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_LIMIT = 10


def occupancy_percentage(occupied: int, total: int) -> int:
    if total <= 0:
        return 0
    return round(occupied / total * 100)


def today_bounds(tz_name: str | None, now: datetime | None = None) -> tuple[datetime, datetime]:
    """
    [start, end) of the current local day in tz_name, expressed in UTC.
    Unknown zones fall back to UTC.
    """
    try:
        tz = ZoneInfo(tz_name or "UTC")
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r in hospital settings, using UTC", tz_name)
        tz = timezone.utc

    local_now = (now or utc_now()).astimezone(tz)
    start_local = datetime.combine(local_now.date(), time.min, tzinfo=tz)
    start = start_local.astimezone(timezone.utc)
    return start, start + timedelta(days=1)


def _scoped(query: Query, column, hospital_id: uuid.UUID | None) -> Query:
    if hospital_id is None:
        return query
    return query.filter(column == hospital_id)


def _sum(query: Query) -> float:
    return round(float(query.scalar() or 0), 2)


def bed_occupancy(db: Session, hospital_id: uuid.UUID | None) -> dict:
    query = db.query(Bed.status, func.count(Bed.id)).join(Room, Bed.room_id == Room.id).join(Ward, Room.ward_id == Ward.id)
    query = _scoped(query, Ward.hospital_id, hospital_id)
    counts = {status: count for status, count in query.group_by(Bed.status).all()}

    total = sum(counts.values())
    occupied = counts.get(BedStatus.OCCUPIED, 0)
    available = counts.get(BedStatus.AVAILABLE, 0)
    return {
        "total": total,
        "occupied": occupied,
        "available": available,
        "occupancy_percentage": occupancy_percentage(occupied, total),
    }


def build_dashboard(db: Session, hospital_id: uuid.UUID | None) -> dict:
    """
    Point-in-time snapshot for one hospital, or every hospital when
    hospital_id is None. Recomputed on every call.
    """
    hospital = db.get(Hospital, hospital_id) if hospital_id else None
    settings = effective_settings(hospital)
    start, end = today_bounds(settings.get("timezone"))

    today_visits_q = _scoped(db.query(Visit), Visit.hospital_id, hospital_id).filter(
        Visit.check_in_time >= start, Visit.check_in_time < end
    )

    stats = {
        "today_visits": today_visits_q.count(),
        "queue_count": _scoped(db.query(Visit), Visit.hospital_id, hospital_id)
        .filter(Visit.status.in_(QUEUE_STATUSES))
        .count(),
        "total_patients": _scoped(db.query(Patient), Patient.hospital_id, hospital_id).count(),
        "today_revenue": _sum(
            _scoped(
                db.query(func.sum(Payment.amount)).join(
                    BillingRecord, Payment.billing_record_id == BillingRecord.id
                ),
                BillingRecord.hospital_id,
                hospital_id,
            ).filter(Payment.created_at >= start, Payment.created_at < end)
        ),
        "today_billed": _sum(
            _scoped(db.query(func.sum(BillingRecord.total_amount)), BillingRecord.hospital_id, hospital_id).filter(
                BillingRecord.created_at >= start, BillingRecord.created_at < end
            )
        ),
        "outstanding_amount": _sum(
            _scoped(
                db.query(func.sum(BillingRecord.total_amount - BillingRecord.paid_amount)),
                BillingRecord.hospital_id,
                hospital_id,
            ).filter(BillingRecord.status.in_(OUTSTANDING_STATUSES))
        ),
        "outstanding_bills_count": _scoped(db.query(BillingRecord), BillingRecord.hospital_id, hospital_id)
        .filter(BillingRecord.status.in_(OUTSTANDING_STATUSES))
        .count(),
        "pending_prescriptions": _scoped(db.query(Prescription), Prescription.hospital_id, hospital_id)
        .filter(Prescription.status == PrescriptionStatus.PENDING)
        .count(),
        "pending_lab_orders": _scoped(db.query(LabOrder), LabOrder.hospital_id, hospital_id)
        .filter(LabOrder.status.in_(PENDING_LAB_STATUSES))
        .count(),
        "low_stock_count": _scoped(db.query(InventoryItem), InventoryItem.hospital_id, hospital_id)
        .filter(InventoryItem.stock <= InventoryItem.reorder_level)
        .count(),
    }

    department_breakdown = [
        {"department": department, "count": count}
        for department, count in today_visits_q.with_entities(Visit.department, func.count(Visit.id))
        .group_by(Visit.department)
        .order_by(func.count(Visit.id).desc())
        .all()
    ]
    status_breakdown = [
        {"status": status, "count": count}
        for status, count in today_visits_q.with_entities(Visit.status, func.count(Visit.id))
        .group_by(Visit.status)
        .all()
    ]

    recent_activity = (
        _scoped(db.query(Visit), Visit.hospital_id, hospital_id)
        .options(joinedload(Visit.patient))
        .order_by(Visit.check_in_time.desc())
        .limit(RECENT_ACTIVITY_LIMIT)
        .all()
    )

    return {
        "settings": settings,
        "branding": effective_branding(hospital),
        "stats": stats,
        "bed_occupancy": bed_occupancy(db, hospital_id),
        "department_breakdown": department_breakdown,
        "status_breakdown": status_breakdown,
        "recent_activity": recent_activity,
    }
