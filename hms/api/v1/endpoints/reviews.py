# hms/api/v1/endpoints/reviews.py
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session, joinedload

from hms.core.database import get_db
from hms.core.errors import InvalidState
from hms.core.tenant_context import Principal, scope_hospital_id
from hms.dependencies.auth import get_auditor
from hms.dependencies.authz import require_permission
from hms.models.admission import Admission, AdmissionStatus
from hms.models.round import DoctorReview
from hms.schemas.round import (
    DoctorReviewCreate,
    DoctorReviewEnvelope,
    DoctorReviewList,
    DoctorReviewRead,
)
from hms.services.audit_service import RequestAuditor
from hms.utils.lookups import commit_or_raise, get_owned_or_404

router = APIRouter()


@router.get("", response_model=DoctorReviewList)
def list_reviews(
    hospital_id: UUID | None = Query(None, alias="hospitalId"),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("reviews.read")),
) -> DoctorReviewList:
    query = db.query(DoctorReview).options(joinedload(DoctorReview.doctor))
    scope = scope_hospital_id(principal, hospital_id)
    if scope is not None:
        query = query.filter(DoctorReview.hospital_id == scope)
    reviews = query.order_by(DoctorReview.created_at.desc()).limit(limit).all()
    return DoctorReviewList(reviews=[DoctorReviewRead.model_validate(r) for r in reviews])


@router.post("", response_model=DoctorReviewEnvelope, status_code=status.HTTP_201_CREATED)
def record_review(
    payload: DoctorReviewCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("reviews.write")),
    audit: RequestAuditor = Depends(get_auditor),
) -> DoctorReviewEnvelope:
    admission = get_owned_or_404(db, Admission, payload.admission_id, principal, "Admission")
    if admission.status == AdmissionStatus.DISCHARGED:
        raise InvalidState("Patient already discharged")

    review = DoctorReview(
        **payload.model_dump(),
        hospital_id=admission.hospital_id,
        doctor_id=principal.user_id,
    )
    db.add(review)
    commit_or_raise(db, "record doctor review")
    db.refresh(review)

    audit(
        "RECORD_DOCTOR_REVIEW",
        "DOCTOR_REVIEW",
        review.id,
        {"admissionId": admission.id, "dischargeRecommendation": review.discharge_recommendation},
        hospital_id=review.hospital_id,
    )
    return DoctorReviewEnvelope(review=DoctorReviewRead.model_validate(review))


@router.get("/admission/{admission_id}", response_model=DoctorReviewList)
def admission_reviews(
    admission_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("reviews.read")),
) -> DoctorReviewList:
    admission = get_owned_or_404(db, Admission, admission_id, principal, "Admission")
    reviews = (
        db.query(DoctorReview)
        .options(joinedload(DoctorReview.doctor))
        .filter(DoctorReview.admission_id == admission.id)
        .order_by(DoctorReview.created_at.desc())
        .all()
    )
    return DoctorReviewList(reviews=[DoctorReviewRead.model_validate(r) for r in reviews])
