# hms/api/v1/endpoints/rounds.py
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session, joinedload

from hms.core.database import get_db
from hms.core.errors import InvalidInput, InvalidState
from hms.core.tenant_context import Principal, scope_hospital_id
from hms.dependencies.auth import get_auditor
from hms.dependencies.authz import require_permission
from hms.models.admission import Admission, AdmissionStatus
from hms.models.round import NursingRound
from hms.models.vital import VitalSigns
from hms.schemas.round import (
    NursingRoundCreate,
    NursingRoundEnvelope,
    NursingRoundList,
    NursingRoundRead,
)
from hms.services.audit_service import RequestAuditor
from hms.utils.datetime_utils import utc_now
from hms.utils.lookups import commit_or_raise, get_owned_or_404

router = APIRouter()


def _rounds(db: Session):
    return db.query(NursingRound).options(joinedload(NursingRound.nurse))


@router.get("", response_model=NursingRoundList)
def list_rounds(
    hospital_id: UUID | None = Query(None, alias="hospitalId"),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("rounds.read")),
) -> NursingRoundList:
    query = _rounds(db)
    scope = scope_hospital_id(principal, hospital_id)
    if scope is not None:
        query = query.filter(NursingRound.hospital_id == scope)
    rounds = query.order_by(NursingRound.created_at.desc()).limit(limit).all()
    return NursingRoundList(rounds=[NursingRoundRead.model_validate(r) for r in rounds])


@router.post("", response_model=NursingRoundEnvelope, status_code=status.HTTP_201_CREATED)
def record_round(
    payload: NursingRoundCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("rounds.write")),
    audit: RequestAuditor = Depends(get_auditor),
) -> NursingRoundEnvelope:
    admission = get_owned_or_404(db, Admission, payload.admission_id, principal, "Admission")
    if admission.status == AdmissionStatus.DISCHARGED:
        raise InvalidState("Patient already discharged")
    if payload.vital_signs_id:
        vitals = get_owned_or_404(db, VitalSigns, payload.vital_signs_id, principal, "Vital signs record")
        if vitals.patient_id != admission.patient_id:
            raise InvalidInput("Vital signs belong to another patient")

    nursing_round = NursingRound(
        **payload.model_dump(),
        hospital_id=admission.hospital_id,
        nurse_id=principal.user_id,
    )
    db.add(nursing_round)
    commit_or_raise(db, "record nursing round")
    db.refresh(nursing_round)

    audit(
        "RECORD_NURSING_ROUND",
        "NURSING_ROUND",
        nursing_round.id,
        {
            "admissionId": admission.id,
            "roundType": nursing_round.round_type,
            "patientCondition": nursing_round.patient_condition,
        },
        hospital_id=nursing_round.hospital_id,
    )
    return NursingRoundEnvelope(round=NursingRoundRead.model_validate(nursing_round))


@router.get("/due", response_model=NursingRoundList)
def due_rounds(
    hospital_id: UUID | None = Query(None, alias="hospitalId"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("rounds.due")),
) -> NursingRoundList:
    """
    Rounds whose next round is due or overdue, for patients still admitted.
    """
    query = (
        _rounds(db)
        .join(Admission, NursingRound.admission_id == Admission.id)
        .filter(
            NursingRound.next_round_due <= utc_now(),
            Admission.status == AdmissionStatus.ADMITTED,
        )
    )
    scope = scope_hospital_id(principal, hospital_id)
    if scope is not None:
        query = query.filter(Admission.hospital_id == scope)
    rounds = query.order_by(NursingRound.next_round_due.asc()).all()
    return NursingRoundList(rounds=[NursingRoundRead.model_validate(r) for r in rounds])


@router.get("/admission/{admission_id}", response_model=NursingRoundList)
def admission_rounds(
    admission_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("rounds.read")),
) -> NursingRoundList:
    admission = get_owned_or_404(db, Admission, admission_id, principal, "Admission")
    rounds = (
        _rounds(db)
        .filter(NursingRound.admission_id == admission.id)
        .order_by(NursingRound.created_at.desc())
        .all()
    )
    return NursingRoundList(rounds=[NursingRoundRead.model_validate(r) for r in rounds])
