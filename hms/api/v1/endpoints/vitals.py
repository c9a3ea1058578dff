# hms/api/v1/endpoints/vitals.py
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import case
from sqlalchemy.orm import Session, joinedload

from hms.core.database import get_db
from hms.core.errors import InvalidInput
from hms.core.tenant_context import Principal, scope_hospital_id
from hms.dependencies.auth import get_auditor
from hms.dependencies.authz import require_permission
from hms.models.patient import Patient
from hms.models.visit import Visit, VisitStatus
from hms.models.vital import TRIAGE_PRIORITY, VitalSigns
from hms.schemas.vital import (
    TriageQueue,
    VitalSignsCreate,
    VitalSignsEnvelope,
    VitalSignsList,
    VitalSignsRead,
)
from hms.services.audit_service import RequestAuditor
from hms.utils.lookups import commit_or_raise, get_owned_or_404

router = APIRouter()

TRIAGE_VISIT_STATUSES = (VisitStatus.CHECKED_IN, VisitStatus.WAITING)


def _vitals(db: Session):
    return db.query(VitalSigns).options(joinedload(VitalSigns.patient), joinedload(VitalSigns.recorder))


@router.get("", response_model=VitalSignsList)
def list_vitals(
    hospital_id: UUID | None = Query(None, alias="hospitalId"),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("vitals.read")),
) -> VitalSignsList:
    query = _vitals(db)
    scope = scope_hospital_id(principal, hospital_id)
    if scope is not None:
        query = query.filter(VitalSigns.hospital_id == scope)
    vitals = query.order_by(VitalSigns.created_at.desc()).limit(limit).all()
    return VitalSignsList(vital_signs=[VitalSignsRead.model_validate(v) for v in vitals])


@router.post("", response_model=VitalSignsEnvelope, status_code=status.HTTP_201_CREATED)
def record_vitals(
    payload: VitalSignsCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("vitals.write")),
    audit: RequestAuditor = Depends(get_auditor),
) -> VitalSignsEnvelope:
    """
    Record a vitals reading. When a visit is given it must be the patient's.
    """
    patient = get_owned_or_404(db, Patient, payload.patient_id, principal, "Patient")
    if payload.visit_id:
        visit = get_owned_or_404(db, Visit, payload.visit_id, principal, "Visit")
        if visit.patient_id != patient.id:
            raise InvalidInput("Visit does not belong to this patient")

    vitals = VitalSigns(
        **payload.model_dump(),
        hospital_id=patient.hospital_id,
        recorded_by=principal.user_id,
    )
    db.add(vitals)
    commit_or_raise(db, "record vital signs")
    db.refresh(vitals)

    audit(
        "RECORD_VITALS",
        "VITAL_SIGNS",
        vitals.id,
        {"patientId": patient.id, "visitId": payload.visit_id, "triageCategory": vitals.triage_category},
        hospital_id=vitals.hospital_id,
    )
    return VitalSignsEnvelope(vital_signs=VitalSignsRead.model_validate(vitals))


@router.get("/visit/{visit_id}", response_model=VitalSignsList)
def visit_vitals(
    visit_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("vitals.read")),
) -> VitalSignsList:
    visit = get_owned_or_404(db, Visit, visit_id, principal, "Visit")
    vitals = _vitals(db).filter(VitalSigns.visit_id == visit.id).order_by(VitalSigns.created_at.desc()).all()
    return VitalSignsList(vital_signs=[VitalSignsRead.model_validate(v) for v in vitals])


@router.get("/patient/{patient_id}", response_model=VitalSignsList)
def patient_vitals(
    patient_id: UUID,
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("vitals.read")),
) -> VitalSignsList:
    patient = get_owned_or_404(db, Patient, patient_id, principal, "Patient")
    vitals = (
        _vitals(db)
        .filter(VitalSigns.patient_id == patient.id)
        .order_by(VitalSigns.created_at.desc())
        .limit(limit)
        .all()
    )
    return VitalSignsList(vital_signs=[VitalSignsRead.model_validate(v) for v in vitals])


@router.get("/triage/queue", response_model=TriageQueue)
def triage_queue(
    hospital_id: UUID | None = Query(None, alias="hospitalId"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("vitals.read")),
) -> TriageQueue:
    """
    Triaged patients whose visit hasn't started yet.
    EMERGENCY first; oldest first within a category.
    """
    priority = case(
        {category.value: rank for rank, category in enumerate(TRIAGE_PRIORITY)},
        value=VitalSigns.triage_category,
        else_=len(TRIAGE_PRIORITY),
    )
    query = (
        _vitals(db)
        .join(Visit, VitalSigns.visit_id == Visit.id)
        .filter(
            VitalSigns.triage_category.is_not(None),
            Visit.status.in_(TRIAGE_VISIT_STATUSES),
        )
    )
    scope = scope_hospital_id(principal, hospital_id)
    if scope is not None:
        query = query.filter(VitalSigns.hospital_id == scope)

    vitals = query.order_by(priority.asc(), VitalSigns.created_at.asc()).all()
    return TriageQueue(queue=[VitalSignsRead.model_validate(v) for v in vitals])
