# hms/api/v1/endpoints/visits.py
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session, joinedload

from hms.core.database import get_db
from hms.core.errors import Conflict, InvalidInput
from hms.core.tenant_context import Principal, scope_hospital_id
from hms.dependencies.auth import get_auditor
from hms.dependencies.authz import require_permission
from hms.dependencies.services import get_change_notifier
from hms.models.billing import BillingRecord
from hms.models.hospital import Hospital
from hms.models.patient import Patient
from hms.models.user import User
from hms.models.visit import QUEUE_STATUSES, Visit, VisitStatus
from hms.schemas.common import MessageResponse
from hms.schemas.visit import VisitCheckIn, VisitEnvelope, VisitList, VisitRead, VisitStatusUpdate
from hms.services.audit_service import RequestAuditor
from hms.services.dashboard_service import today_bounds
from hms.services.live_updates import ChangeNotifier
from hms.services.settings_service import effective_settings
from hms.utils.datetime_utils import utc_now
from hms.utils.lookups import commit_or_raise, get_owned_or_404

router = APIRouter()

LIST_LIMIT = 100


def _visits(db: Session, principal: Principal, hospital_id: UUID | None = None):
    query = db.query(Visit).options(joinedload(Visit.patient), joinedload(Visit.assigned_user))
    scope = scope_hospital_id(principal, hospital_id)
    if scope is not None:
        query = query.filter(Visit.hospital_id == scope)
    return query


@router.post("/check-in", response_model=VisitEnvelope, status_code=status.HTTP_201_CREATED)
def check_in(
    payload: VisitCheckIn,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("visits.write")),
    audit: RequestAuditor = Depends(get_auditor),
    notifier: ChangeNotifier = Depends(get_change_notifier),
) -> VisitEnvelope:
    """
    Open a visit for a patient. The visit belongs to the patient's hospital.
    """
    patient = get_owned_or_404(db, Patient, payload.patient_id, principal, "Patient")

    if payload.id and db.get(Visit, payload.id):
        raise Conflict("Visit already exists")

    if payload.assigned_to:
        assignee = get_owned_or_404(db, User, payload.assigned_to, principal, "User")
        if assignee.hospital_id != patient.hospital_id:
            raise InvalidInput("Assigned user does not belong to the same hospital")

    visit = Visit(
        hospital_id=patient.hospital_id,
        patient_id=patient.id,
        department=payload.department,
        reason_for_visit=payload.reason_for_visit,
        assigned_to=payload.assigned_to,
        checked_in_by=principal.user_id,
        status=VisitStatus.CHECKED_IN,
        check_in_time=utc_now(),
    )
    if payload.id:
        visit.id = payload.id

    db.add(visit)
    commit_or_raise(db, "check in patient")
    db.refresh(visit)

    body = VisitRead.model_validate(visit)
    audit(
        "CHECK_IN",
        "VISIT",
        visit.id,
        {"patientId": patient.id, "department": visit.department},
        hospital_id=visit.hospital_id,
    )
    notifier.publish(visit.hospital_id, "visit", "created", body)
    return VisitEnvelope(visit=body)


@router.patch("/{visit_id}/status", response_model=VisitEnvelope)
def update_visit_status(
    visit_id: UUID,
    payload: VisitStatusUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("visits.write")),
    audit: RequestAuditor = Depends(get_auditor),
    notifier: ChangeNotifier = Depends(get_change_notifier),
) -> VisitEnvelope:
    visit = get_owned_or_404(db, Visit, visit_id, principal, "Visit")
    previous = visit.status

    visit.status = payload.status
    if payload.status == VisitStatus.COMPLETED:
        visit.completed_time = utc_now()

    commit_or_raise(db, "update visit status")
    db.refresh(visit)

    body = VisitRead.model_validate(visit)
    audit(
        "UPDATE_VISIT_STATUS",
        "VISIT",
        visit.id,
        {"from": previous, "to": visit.status},
        hospital_id=visit.hospital_id,
    )
    notifier.publish(visit.hospital_id, "visit", "status-updated", body)
    return VisitEnvelope(visit=body)


@router.get("", response_model=VisitList)
def list_visits(
    status_filter: VisitStatus | None = Query(None, alias="status"),
    department: str | None = Query(None),
    hospital_id: UUID | None = Query(None, alias="hospitalId"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("visits.read")),
) -> VisitList:
    query = _visits(db, principal, hospital_id)
    if status_filter:
        query = query.filter(Visit.status == status_filter)
    if department:
        query = query.filter(Visit.department == department)

    visits = query.order_by(Visit.check_in_time.desc()).limit(LIST_LIMIT).all()
    return VisitList(visits=[VisitRead.model_validate(v) for v in visits])


@router.get("/queue", response_model=VisitList)
def visit_queue(
    department: str | None = Query(None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("visits.read")),
) -> VisitList:
    """
    Patients still waiting or being seen, oldest first.
    """
    query = _visits(db, principal).filter(Visit.status.in_(QUEUE_STATUSES))
    if department:
        query = query.filter(Visit.department == department)
    visits = query.order_by(Visit.check_in_time.asc()).all()
    return VisitList(visits=[VisitRead.model_validate(v) for v in visits])


@router.get("/today", response_model=VisitList)
def todays_visits(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("visits.read")),
) -> VisitList:
    hospital = db.get(Hospital, principal.hospital_id) if principal.hospital_id else None
    start, end = today_bounds(effective_settings(hospital).get("timezone"))

    visits = (
        _visits(db, principal)
        .filter(Visit.check_in_time >= start, Visit.check_in_time < end)
        .order_by(Visit.check_in_time.desc())
        .all()
    )
    return VisitList(visits=[VisitRead.model_validate(v) for v in visits])


@router.get("/patient/{patient_id}", response_model=VisitList)
def patient_visits(
    patient_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("visits.read")),
) -> VisitList:
    patient = get_owned_or_404(db, Patient, patient_id, principal, "Patient")
    visits = (
        db.query(Visit)
        .options(joinedload(Visit.patient), joinedload(Visit.assigned_user))
        .filter(Visit.patient_id == patient.id)
        .order_by(Visit.check_in_time.desc())
        .all()
    )
    return VisitList(visits=[VisitRead.model_validate(v) for v in visits])


@router.get("/{visit_id}", response_model=VisitEnvelope)
def get_visit(
    visit_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("visits.read")),
) -> VisitEnvelope:
    visit = get_owned_or_404(db, Visit, visit_id, principal, "Visit")
    return VisitEnvelope(visit=VisitRead.model_validate(visit))


@router.delete("/{visit_id}", response_model=MessageResponse)
def delete_visit(
    visit_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("visits.delete")),
    audit: RequestAuditor = Depends(get_auditor),
    notifier: ChangeNotifier = Depends(get_change_notifier),
) -> MessageResponse:
    """
    Remove a visit together with its billing records.
    """
    visit = get_owned_or_404(db, Visit, visit_id, principal, "Visit")
    hospital_id = visit.hospital_id

    bills = db.query(BillingRecord).filter(BillingRecord.visit_id == visit.id).all()
    for bill in bills:
        db.delete(bill)
    db.delete(visit)
    commit_or_raise(db, "delete visit")

    audit(
        "DELETE_VISIT",
        "VISIT",
        visit_id,
        {"deletedBillingRecords": len(bills)},
        hospital_id=hospital_id,
    )
    notifier.publish(hospital_id, "visit", "deleted", {"id": visit_id})
    return MessageResponse(message="Visit deleted successfully")
