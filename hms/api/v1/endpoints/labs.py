# hms/api/v1/endpoints/labs.py
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session, joinedload

from hms.core.database import get_db
from hms.core.errors import InvalidInput, InvalidState
from hms.core.tenant_context import Principal, scope_hospital_id
from hms.dependencies.auth import get_auditor
from hms.dependencies.authz import require_permission
from hms.dependencies.services import get_change_notifier
from hms.models.lab import PENDING_LAB_STATUSES, LabOrder, LabOrderStatus
from hms.models.patient import Patient
from hms.models.visit import Visit
from hms.schemas.lab import (
    LabOrderCreate,
    LabOrderEnvelope,
    LabOrderList,
    LabOrderRead,
    LabOrderStatusUpdate,
    LabResultsEntry,
)
from hms.services.audit_service import RequestAuditor
from hms.services.live_updates import ChangeNotifier
from hms.utils.datetime_utils import utc_now
from hms.utils.lookups import commit_or_raise, get_owned_or_404

router = APIRouter()

FINAL_STATUSES = (LabOrderStatus.COMPLETED, LabOrderStatus.CANCELLED)


def _orders(db: Session):
    return db.query(LabOrder).options(joinedload(LabOrder.patient), joinedload(LabOrder.orderer))


def _ensure_open(order: LabOrder) -> None:
    if order.status in FINAL_STATUSES:
        raise InvalidState(f"Lab order is already {order.status.value.lower()}")


@router.post("", response_model=LabOrderEnvelope, status_code=status.HTTP_201_CREATED)
def create_lab_order(
    payload: LabOrderCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("labs.order")),
    audit: RequestAuditor = Depends(get_auditor),
    notifier: ChangeNotifier = Depends(get_change_notifier),
) -> LabOrderEnvelope:
    visit = get_owned_or_404(db, Visit, payload.visit_id, principal, "Visit")
    if visit.patient_id != payload.patient_id:
        raise InvalidInput("Visit does not belong to this patient")

    order = LabOrder(
        **payload.model_dump(),
        hospital_id=visit.hospital_id,
        ordered_by=principal.user_id,
        status=LabOrderStatus.ORDERED,
    )
    db.add(order)
    commit_or_raise(db, "create lab order")
    db.refresh(order)

    body = LabOrderRead.model_validate(order)
    audit(
        "CREATE_LAB_ORDER",
        "LAB_ORDER",
        order.id,
        {"testType": order.test_type, "patientId": order.patient_id, "visitId": order.visit_id},
        hospital_id=order.hospital_id,
    )
    notifier.publish(order.hospital_id, "lab", "created", body)
    return LabOrderEnvelope(lab_order=body)


@router.patch("/{order_id}/status", response_model=LabOrderEnvelope)
def update_lab_order_status(
    order_id: UUID,
    payload: LabOrderStatusUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("labs.process")),
    audit: RequestAuditor = Depends(get_auditor),
    notifier: ChangeNotifier = Depends(get_change_notifier),
) -> LabOrderEnvelope:
    order = get_owned_or_404(db, LabOrder, order_id, principal, "Lab order")
    _ensure_open(order)

    previous = order.status
    order.status = payload.status
    if payload.status == LabOrderStatus.PROCESSING:
        order.processed_by = principal.user_id
    elif payload.status == LabOrderStatus.COMPLETED:
        order.completed_at = utc_now()
        order.processed_by = order.processed_by or principal.user_id

    commit_or_raise(db, "update lab order status")
    db.refresh(order)

    body = LabOrderRead.model_validate(order)
    audit(
        "UPDATE_LAB_ORDER_STATUS",
        "LAB_ORDER",
        order.id,
        {"from": previous, "to": order.status},
        hospital_id=order.hospital_id,
    )
    notifier.publish(order.hospital_id, "lab", "status-updated", body)
    return LabOrderEnvelope(lab_order=body)


@router.patch("/{order_id}/results", response_model=LabOrderEnvelope)
def enter_lab_results(
    order_id: UUID,
    payload: LabResultsEntry,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("labs.process")),
    audit: RequestAuditor = Depends(get_auditor),
    notifier: ChangeNotifier = Depends(get_change_notifier),
) -> LabOrderEnvelope:
    """
    Record results and complete the order.
    """
    order = get_owned_or_404(db, LabOrder, order_id, principal, "Lab order")
    _ensure_open(order)

    order.result_value = payload.result_value
    order.normal_range = payload.normal_range
    order.result_notes = payload.result_notes
    order.status = LabOrderStatus.COMPLETED
    order.completed_at = utc_now()
    order.processed_by = order.processed_by or principal.user_id

    commit_or_raise(db, "enter lab results")
    db.refresh(order)

    body = LabOrderRead.model_validate(order)
    audit(
        "ENTER_LAB_RESULTS",
        "LAB_ORDER",
        order.id,
        {"testType": order.test_type, "patientId": order.patient_id},
        hospital_id=order.hospital_id,
    )
    notifier.publish(order.hospital_id, "lab", "completed", body)
    return LabOrderEnvelope(lab_order=body)


@router.get("/pending", response_model=LabOrderList)
def pending_lab_orders(
    hospital_id: UUID | None = Query(None, alias="hospitalId"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("labs.read")),
) -> LabOrderList:
    query = _orders(db).filter(LabOrder.status.in_(PENDING_LAB_STATUSES))
    scope = scope_hospital_id(principal, hospital_id)
    if scope is not None:
        query = query.filter(LabOrder.hospital_id == scope)
    orders = query.order_by(LabOrder.created_at.asc()).all()
    return LabOrderList(lab_orders=[LabOrderRead.model_validate(o) for o in orders])


@router.get("/patient/{patient_id}", response_model=LabOrderList)
def patient_lab_orders(
    patient_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("labs.read")),
) -> LabOrderList:
    patient = get_owned_or_404(db, Patient, patient_id, principal, "Patient")
    orders = _orders(db).filter(LabOrder.patient_id == patient.id).order_by(LabOrder.created_at.desc()).all()
    return LabOrderList(lab_orders=[LabOrderRead.model_validate(o) for o in orders])


@router.get("/visit/{visit_id}", response_model=LabOrderList)
def visit_lab_orders(
    visit_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("labs.read")),
) -> LabOrderList:
    visit = get_owned_or_404(db, Visit, visit_id, principal, "Visit")
    orders = _orders(db).filter(LabOrder.visit_id == visit.id).order_by(LabOrder.created_at.desc()).all()
    return LabOrderList(lab_orders=[LabOrderRead.model_validate(o) for o in orders])
