# hms/api/v1/endpoints/admissions.py
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session, joinedload

from hms.core.database import get_db
from hms.core.errors import InvalidInput, NotFound
from hms.core.tenant_context import Principal, ensure_tenant_access, scope_hospital_id
from hms.dependencies.auth import get_auditor
from hms.dependencies.authz import require_permission
from hms.dependencies.services import get_change_notifier
from hms.models.admission import Admission, AdmissionStatus
from hms.models.patient import Patient
from hms.models.visit import Visit
from hms.schemas.admission import (
    ActiveAdmissionList,
    AdmissionCreate,
    AdmissionDischargeRequest,
    AdmissionEnvelope,
    AdmissionList,
    AdmissionRead,
    AssignBedRequest,
)
from hms.services import admission_service
from hms.services.audit_service import RequestAuditor
from hms.services.live_updates import ChangeNotifier
from hms.utils.datetime_utils import utc_now
from hms.utils.lookups import commit_or_raise, get_owned_or_404
from hms.utils.pagination import PageParams, page_params, paginate

router = APIRouter()


def _admissions(db: Session):
    return db.query(Admission).options(
        joinedload(Admission.patient),
        joinedload(Admission.doctor),
        joinedload(Admission.ward),
        joinedload(Admission.room),
        joinedload(Admission.bed),
    )


def _reload(db: Session, admission_id: UUID) -> Admission:
    """
    Re-query after commit so the response carries fresh ward/room/bed rows.
    """
    admission = _admissions(db).filter(Admission.id == admission_id).populate_existing().first()
    if not admission:
        raise NotFound("Admission not found")
    return admission


@router.post("", response_model=AdmissionEnvelope, status_code=status.HTTP_201_CREATED)
def create_admission(
    payload: AdmissionCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("admissions.create")),
    audit: RequestAuditor = Depends(get_auditor),
    notifier: ChangeNotifier = Depends(get_change_notifier),
) -> AdmissionEnvelope:
    """
    Admit a patient. Starts PENDING until a ward manager assigns a bed.
    """
    patient = get_owned_or_404(db, Patient, payload.patient_id, principal, "Patient")
    if payload.hospital_id and payload.hospital_id != patient.hospital_id:
        raise InvalidInput("Patient does not belong to this hospital")
    if payload.visit_id:
        visit = get_owned_or_404(db, Visit, payload.visit_id, principal, "Visit")
        if visit.patient_id != patient.id:
            raise InvalidInput("Visit does not belong to this patient")

    admission = Admission(
        hospital_id=patient.hospital_id,
        patient_id=patient.id,
        visit_id=payload.visit_id,
        admitted_by=principal.user_id,
        diagnosis=payload.diagnosis,
        notes=payload.notes,
        status=AdmissionStatus.PENDING,
        admission_date=utc_now(),
    )
    db.add(admission)
    commit_or_raise(db, "create admission")

    body = AdmissionRead.model_validate(_reload(db, admission.id))
    audit(
        "CREATE_ADMISSION",
        "ADMISSION",
        admission.id,
        {"patientId": patient.id, "diagnosis": payload.diagnosis},
        hospital_id=patient.hospital_id,
    )
    notifier.publish(patient.hospital_id, "admission", "created", body)
    return AdmissionEnvelope(admission=body)


@router.get("", response_model=AdmissionList)
def list_admissions(
    status_filter: AdmissionStatus | None = Query(None, alias="status"),
    ward_id: UUID | None = Query(None, alias="wardId"),
    patient_id: UUID | None = Query(None, alias="patientId"),
    hospital_id: UUID | None = Query(None, alias="hospitalId"),
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("admissions.read")),
) -> AdmissionList:
    query = _admissions(db)
    scope = scope_hospital_id(principal, hospital_id)
    if scope is not None:
        query = query.filter(Admission.hospital_id == scope)
    if status_filter:
        query = query.filter(Admission.status == status_filter)
    if ward_id:
        query = query.filter(Admission.ward_id == ward_id)
    if patient_id:
        query = query.filter(Admission.patient_id == patient_id)

    admissions, meta = paginate(query.order_by(Admission.admission_date.desc()), params)
    return AdmissionList(admissions=[AdmissionRead.model_validate(a) for a in admissions], **meta)


@router.get("/active", response_model=ActiveAdmissionList)
def active_admissions(
    ward_id: UUID | None = Query(None, alias="wardId"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("admissions.read")),
) -> ActiveAdmissionList:
    query = _admissions(db).filter(Admission.status == AdmissionStatus.ADMITTED)
    scope = scope_hospital_id(principal)
    if scope is not None:
        query = query.filter(Admission.hospital_id == scope)
    if ward_id:
        query = query.filter(Admission.ward_id == ward_id)
    admissions = query.order_by(Admission.admission_date.desc()).all()
    return ActiveAdmissionList(admissions=[AdmissionRead.model_validate(a) for a in admissions])


@router.get("/{admission_id}", response_model=AdmissionEnvelope)
def get_admission(
    admission_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("admissions.read")),
) -> AdmissionEnvelope:
    admission = _admissions(db).filter(Admission.id == admission_id).first()
    if not admission:
        raise NotFound("Admission not found")
    ensure_tenant_access(principal, admission.hospital_id)
    return AdmissionEnvelope(admission=AdmissionRead.model_validate(admission))


@router.put("/{admission_id}/assign-bed", response_model=AdmissionEnvelope)
def assign_bed(
    admission_id: UUID,
    payload: AssignBedRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("admissions.assign_bed")),
    audit: RequestAuditor = Depends(get_auditor),
    notifier: ChangeNotifier = Depends(get_change_notifier),
) -> AdmissionEnvelope:
    """
    Put the patient in a bed. The old bed, if any, is freed in the same commit.
    """
    admission = get_owned_or_404(db, Admission, admission_id, principal, "Admission")
    bed = admission_service.load_bed_for_update(db, payload.bed_id)
    released_bed_id = admission_service.assign_bed(db, admission, bed, principal)

    body = AdmissionRead.model_validate(_reload(db, admission_id))
    audit(
        "ASSIGN_BED",
        "ADMISSION",
        admission_id,
        {"bedId": payload.bed_id, "releasedBedId": released_bed_id, "patientId": body.patient_id},
        hospital_id=body.hospital_id,
    )
    notifier.publish(body.hospital_id, "admission", "bed-assigned", body)
    return AdmissionEnvelope(admission=body)


@router.put("/{admission_id}/discharge", response_model=AdmissionEnvelope)
def discharge_patient(
    admission_id: UUID,
    payload: AdmissionDischargeRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("admissions.discharge")),
    audit: RequestAuditor = Depends(get_auditor),
    notifier: ChangeNotifier = Depends(get_change_notifier),
) -> AdmissionEnvelope:
    admission = get_owned_or_404(db, Admission, admission_id, principal, "Admission")
    released_bed_id = admission_service.discharge(
        db,
        admission,
        principal,
        discharge_notes=payload.discharge_notes,
        discharge_summary=payload.discharge_summary,
    )

    body = AdmissionRead.model_validate(_reload(db, admission_id))
    audit(
        "DISCHARGE_PATIENT",
        "ADMISSION",
        admission_id,
        {"patientId": body.patient_id, "releasedBedId": released_bed_id},
        hospital_id=body.hospital_id,
    )
    notifier.publish(body.hospital_id, "admission", "discharged", body)
    return AdmissionEnvelope(admission=body)
