# hms/api/v1/endpoints/consultations.py
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session, joinedload

from hms.core.database import get_db
from hms.core.errors import Forbidden, InvalidInput
from hms.core.tenant_context import Principal
from hms.dependencies.auth import get_auditor
from hms.dependencies.authz import require_permission
from hms.models.consultation import Consultation
from hms.models.patient import Patient
from hms.models.user import Role
from hms.models.visit import Visit, VisitStatus
from hms.schemas.consultation import (
    ConsultationCreate,
    ConsultationEnvelope,
    ConsultationList,
    ConsultationRead,
    ConsultationUpdate,
)
from hms.services.audit_service import RequestAuditor
from hms.utils.lookups import commit_or_raise, get_owned_or_404

router = APIRouter()


def _consultations(db: Session):
    return db.query(Consultation).options(joinedload(Consultation.doctor), joinedload(Consultation.patient))


@router.post("", response_model=ConsultationEnvelope, status_code=status.HTTP_201_CREATED)
def create_consultation(
    payload: ConsultationCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("consultations.write")),
    audit: RequestAuditor = Depends(get_auditor),
) -> ConsultationEnvelope:
    """
    Record a consultation. The visit moves to IN_PROGRESS in the same commit.
    """
    visit = get_owned_or_404(db, Visit, payload.visit_id, principal, "Visit")
    if visit.patient_id != payload.patient_id:
        raise InvalidInput("Visit does not belong to this patient")

    consultation = Consultation(
        **payload.model_dump(),
        hospital_id=visit.hospital_id,
        doctor_id=principal.user_id,
    )
    db.add(consultation)
    if visit.status in (VisitStatus.CHECKED_IN, VisitStatus.WAITING):
        visit.status = VisitStatus.IN_PROGRESS
    commit_or_raise(db, "create consultation")
    db.refresh(consultation)

    audit(
        "CREATE_CONSULTATION",
        "CONSULTATION",
        consultation.id,
        {"visitId": visit.id, "patientId": visit.patient_id, "diagnosis": consultation.diagnosis},
        hospital_id=consultation.hospital_id,
    )
    return ConsultationEnvelope(consultation=ConsultationRead.model_validate(consultation))


@router.put("/{consultation_id}", response_model=ConsultationEnvelope)
def update_consultation(
    consultation_id: UUID,
    payload: ConsultationUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("consultations.write")),
    audit: RequestAuditor = Depends(get_auditor),
) -> ConsultationEnvelope:
    """
    Only the authoring doctor, an ADMIN or a SUPER_ADMIN may edit.
    """
    consultation = get_owned_or_404(db, Consultation, consultation_id, principal, "Consultation")
    if consultation.doctor_id != principal.user_id and principal.role not in (Role.ADMIN, Role.SUPER_ADMIN):
        raise Forbidden("Only the consulting doctor can update this consultation")

    data = payload.model_dump(exclude_unset=True)
    for field, value in data.items():
        setattr(consultation, field, value)
    commit_or_raise(db, "update consultation")
    db.refresh(consultation)

    audit(
        "UPDATE_CONSULTATION",
        "CONSULTATION",
        consultation.id,
        {"updatedFields": sorted(data)},
        hospital_id=consultation.hospital_id,
    )
    return ConsultationEnvelope(consultation=ConsultationRead.model_validate(consultation))


@router.get("/visit/{visit_id}", response_model=ConsultationList)
def visit_consultations(
    visit_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("consultations.read")),
) -> ConsultationList:
    visit = get_owned_or_404(db, Visit, visit_id, principal, "Visit")
    consultations = (
        _consultations(db)
        .filter(Consultation.visit_id == visit.id)
        .order_by(Consultation.created_at.desc())
        .all()
    )
    return ConsultationList(consultations=[ConsultationRead.model_validate(c) for c in consultations])


@router.get("/patient/{patient_id}", response_model=ConsultationList)
def patient_consultations(
    patient_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("consultations.read")),
) -> ConsultationList:
    patient = get_owned_or_404(db, Patient, patient_id, principal, "Patient")
    consultations = (
        _consultations(db)
        .filter(Consultation.patient_id == patient.id)
        .order_by(Consultation.created_at.desc())
        .all()
    )
    return ConsultationList(consultations=[ConsultationRead.model_validate(c) for c in consultations])
