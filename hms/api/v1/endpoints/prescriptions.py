# hms/api/v1/endpoints/prescriptions.py
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session, joinedload, selectinload

from hms.core.database import get_db
from hms.core.errors import InvalidInput, InvalidState, NotFound
from hms.core.tenant_context import Principal, scope_hospital_id
from hms.dependencies.auth import get_auditor
from hms.dependencies.authz import require_permission
from hms.models.consultation import Consultation
from hms.models.patient import Patient
from hms.models.prescription import Prescription, PrescriptionItem, PrescriptionStatus
from hms.models.visit import Visit
from hms.schemas.prescription import (
    PrescriptionCreate,
    PrescriptionEnvelope,
    PrescriptionList,
    PrescriptionRead,
)
from hms.services.audit_service import RequestAuditor
from hms.utils.datetime_utils import utc_now
from hms.utils.lookups import commit_or_raise, get_owned_or_404

router = APIRouter()


def _prescriptions(db: Session):
    return db.query(Prescription).options(
        selectinload(Prescription.items),
        joinedload(Prescription.patient),
        joinedload(Prescription.doctor),
    )


def _reload_prescription(db: Session, prescription_id: UUID) -> Prescription:
    """
    Re-query after commit so we return a fresh object with items loaded.
    """
    prescription = _prescriptions(db).filter(Prescription.id == prescription_id).populate_existing().first()
    if not prescription:
        raise NotFound("Prescription not found")
    return prescription


@router.post("", response_model=PrescriptionEnvelope, status_code=status.HTTP_201_CREATED)
def create_prescription(
    payload: PrescriptionCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("prescriptions.create")),
    audit: RequestAuditor = Depends(get_auditor),
) -> PrescriptionEnvelope:
    """
    Create a prescription with its items in one commit.
    """
    visit = get_owned_or_404(db, Visit, payload.visit_id, principal, "Visit")
    if visit.patient_id != payload.patient_id:
        raise InvalidInput("Visit does not belong to this patient")
    if payload.consultation_id:
        consultation = get_owned_or_404(db, Consultation, payload.consultation_id, principal, "Consultation")
        if consultation.visit_id != visit.id:
            raise InvalidInput("Consultation does not belong to this visit")

    prescription = Prescription(
        hospital_id=visit.hospital_id,
        patient_id=visit.patient_id,
        visit_id=visit.id,
        consultation_id=payload.consultation_id,
        doctor_id=principal.user_id,
        status=PrescriptionStatus.PENDING,
    )
    prescription.items = [PrescriptionItem(**item.model_dump()) for item in payload.items]
    db.add(prescription)
    commit_or_raise(db, "create prescription")

    prescription = _reload_prescription(db, prescription.id)
    audit(
        "CREATE_PRESCRIPTION",
        "PRESCRIPTION",
        prescription.id,
        {
            "patientId": prescription.patient_id,
            "medications": [item.medication_name for item in prescription.items],
        },
        hospital_id=prescription.hospital_id,
    )
    return PrescriptionEnvelope(prescription=PrescriptionRead.model_validate(prescription))


@router.patch("/{prescription_id}/dispense", response_model=PrescriptionEnvelope)
def dispense_prescription(
    prescription_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("prescriptions.dispense")),
    audit: RequestAuditor = Depends(get_auditor),
) -> PrescriptionEnvelope:
    prescription = get_owned_or_404(db, Prescription, prescription_id, principal, "Prescription")
    if prescription.status == PrescriptionStatus.DISPENSED:
        raise InvalidState("Prescription already dispensed")
    if prescription.status == PrescriptionStatus.CANCELLED:
        raise InvalidState("Prescription was cancelled")

    prescription.status = PrescriptionStatus.DISPENSED
    prescription.dispensed_by = principal.user_id
    prescription.dispensed_at = utc_now()
    commit_or_raise(db, "dispense prescription")

    prescription = _reload_prescription(db, prescription_id)
    audit(
        "DISPENSE_PRESCRIPTION",
        "PRESCRIPTION",
        prescription.id,
        {"patientId": prescription.patient_id},
        hospital_id=prescription.hospital_id,
    )
    return PrescriptionEnvelope(prescription=PrescriptionRead.model_validate(prescription))


@router.get("/pending", response_model=PrescriptionList)
def pending_prescriptions(
    hospital_id: UUID | None = Query(None, alias="hospitalId"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("prescriptions.read")),
) -> PrescriptionList:
    query = _prescriptions(db).filter(Prescription.status == PrescriptionStatus.PENDING)
    scope = scope_hospital_id(principal, hospital_id)
    if scope is not None:
        query = query.filter(Prescription.hospital_id == scope)
    prescriptions = query.order_by(Prescription.created_at.asc()).all()
    return PrescriptionList(prescriptions=[PrescriptionRead.model_validate(p) for p in prescriptions])


@router.get("/patient/{patient_id}", response_model=PrescriptionList)
def patient_prescriptions(
    patient_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("prescriptions.read")),
) -> PrescriptionList:
    patient = get_owned_or_404(db, Patient, patient_id, principal, "Patient")
    prescriptions = (
        _prescriptions(db)
        .filter(Prescription.patient_id == patient.id)
        .order_by(Prescription.created_at.desc())
        .all()
    )
    return PrescriptionList(prescriptions=[PrescriptionRead.model_validate(p) for p in prescriptions])


@router.get("/visit/{visit_id}", response_model=PrescriptionList)
def visit_prescriptions(
    visit_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("prescriptions.read")),
) -> PrescriptionList:
    visit = get_owned_or_404(db, Visit, visit_id, principal, "Visit")
    prescriptions = (
        _prescriptions(db)
        .filter(Prescription.visit_id == visit.id)
        .order_by(Prescription.created_at.desc())
        .all()
    )
    return PrescriptionList(prescriptions=[PrescriptionRead.model_validate(p) for p in prescriptions])
