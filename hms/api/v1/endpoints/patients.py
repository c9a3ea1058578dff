# hms/api/v1/endpoints/patients.py
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from hms.core.database import get_db
from hms.core.errors import Conflict, InvalidInput, InvalidState
from hms.core.tenant_context import Principal, resolve_hospital_id, scope_hospital_id
from hms.dependencies.auth import get_auditor
from hms.dependencies.authz import require_permission
from hms.dependencies.services import get_change_notifier
from hms.models.admission import Admission, AdmissionStatus
from hms.models.patient import Patient
from hms.schemas.common import MessageResponse
from hms.schemas.patient import (
    PatientCreate,
    PatientEnvelope,
    PatientList,
    PatientRead,
    PatientSearchResult,
    PatientUpdate,
)
from hms.services.audit_service import RequestAuditor
from hms.services.live_updates import ChangeNotifier
from hms.utils.lookups import commit_or_raise, get_owned_or_404
from hms.utils.pagination import PageParams, page_params, paginate

router = APIRouter()

SEARCH_LIMIT = 20


def _search_filter(term: str):
    like = f"%{term.strip()}%"
    return or_(
        Patient.first_name.ilike(like),
        Patient.last_name.ilike(like),
        Patient.phone.ilike(like),
        Patient.email.ilike(like),
    )


@router.post("", response_model=PatientEnvelope, status_code=status.HTTP_201_CREATED)
def create_patient(
    payload: PatientCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("patients.write")),
    audit: RequestAuditor = Depends(get_auditor),
    notifier: ChangeNotifier = Depends(get_change_notifier),
) -> PatientEnvelope:
    """
    Register a patient.

    Offline clients may send their own id; a reused id is a Conflict.
    """
    hospital_id = resolve_hospital_id(principal, payload.hospital_id)

    if payload.id and db.get(Patient, payload.id):
        raise Conflict("Patient already exists")

    data = payload.model_dump(exclude={"id", "hospital_id"})
    patient = Patient(**data, hospital_id=hospital_id, created_by=principal.user_id)
    if payload.id:
        patient.id = payload.id

    db.add(patient)
    commit_or_raise(db, "create patient")
    db.refresh(patient)

    body = PatientRead.model_validate(patient)
    audit(
        "CREATE_PATIENT",
        "PATIENT",
        patient.id,
        {"name": patient.full_name},
        hospital_id=hospital_id,
    )
    notifier.publish(hospital_id, "patient", "created", body)
    return PatientEnvelope(patient=body)


@router.get("", response_model=PatientList)
def list_patients(
    search: str | None = Query(None, description="Match name, phone or email"),
    hospital_id: UUID | None = Query(None, alias="hospitalId"),
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("patients.read")),
) -> PatientList:
    query = db.query(Patient)
    scope = scope_hospital_id(principal, hospital_id)
    if scope is not None:
        query = query.filter(Patient.hospital_id == scope)
    if search and search.strip():
        query = query.filter(_search_filter(search))

    patients, meta = paginate(query.order_by(Patient.created_at.desc()), params)
    return PatientList(patients=[PatientRead.model_validate(p) for p in patients], **meta)


@router.get("/search", response_model=PatientSearchResult)
def search_patients(
    q: str | None = Query(None, description="Search term"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("patients.read")),
) -> PatientSearchResult:
    """
    Quick lookup for check-in forms. At most 20 matches.
    """
    if not q or not q.strip():
        raise InvalidInput("Search query is required")

    query = db.query(Patient).filter(_search_filter(q))
    scope = scope_hospital_id(principal)
    if scope is not None:
        query = query.filter(Patient.hospital_id == scope)

    patients = query.order_by(Patient.last_name.asc(), Patient.first_name.asc()).limit(SEARCH_LIMIT).all()
    return PatientSearchResult(patients=[PatientRead.model_validate(p) for p in patients])


@router.get("/{patient_id}", response_model=PatientEnvelope)
def get_patient(
    patient_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("patients.read")),
) -> PatientEnvelope:
    patient = get_owned_or_404(db, Patient, patient_id, principal, "Patient")
    return PatientEnvelope(patient=PatientRead.model_validate(patient))


@router.put("/{patient_id}", response_model=PatientEnvelope)
def update_patient(
    patient_id: UUID,
    payload: PatientUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("patients.write")),
    audit: RequestAuditor = Depends(get_auditor),
    notifier: ChangeNotifier = Depends(get_change_notifier),
) -> PatientEnvelope:
    patient = get_owned_or_404(db, Patient, patient_id, principal, "Patient")

    data = payload.model_dump(exclude_unset=True)
    for field, value in data.items():
        setattr(patient, field, value)

    commit_or_raise(db, "update patient")
    db.refresh(patient)

    body = PatientRead.model_validate(patient)
    audit(
        "UPDATE_PATIENT",
        "PATIENT",
        patient.id,
        {"updatedFields": sorted(data)},
        hospital_id=patient.hospital_id,
    )
    notifier.publish(patient.hospital_id, "patient", "updated", body)
    return PatientEnvelope(patient=body)


@router.delete("/{patient_id}", response_model=MessageResponse)
def delete_patient(
    patient_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("patients.write")),
    audit: RequestAuditor = Depends(get_auditor),
    notifier: ChangeNotifier = Depends(get_change_notifier),
) -> MessageResponse:
    patient = get_owned_or_404(db, Patient, patient_id, principal, "Patient")
    hospital_id = patient.hospital_id
    name = patient.full_name

    # Admissions cascade with the patient; one that still holds a bed would leave it occupied.
    active = (
        db.query(Admission.id)
        .filter(Admission.patient_id == patient.id, Admission.status != AdmissionStatus.DISCHARGED)
        .first()
    )
    if active:
        raise InvalidState("Patient has an active admission; discharge them first")

    db.delete(patient)
    commit_or_raise(db, "delete patient")

    audit("DELETE_PATIENT", "PATIENT", patient_id, {"name": name}, hospital_id=hospital_id)
    notifier.publish(hospital_id, "patient", "deleted", {"id": patient_id})
    return MessageResponse(message="Patient deleted successfully")
