# hms/schemas/round.py
from datetime import datetime
from uuid import UUID

from hms.schemas.common import ApiModel, NonEmptyStr, PersonRef


class NursingRoundCreate(ApiModel):
    admission_id: UUID
    round_type: NonEmptyStr
    patient_condition: NonEmptyStr
    vital_signs_id: UUID | None = None
    medication_given: str | None = None
    observations: str | None = None
    next_round_due: datetime | None = None


class NursingRoundRead(NursingRoundCreate):
    id: UUID
    hospital_id: UUID
    nurse_id: UUID | None = None
    created_at: datetime | None = None

    nurse: PersonRef | None = None


class NursingRoundEnvelope(ApiModel):
    round: NursingRoundRead


class NursingRoundList(ApiModel):
    rounds: list[NursingRoundRead]


class DoctorReviewCreate(ApiModel):
    admission_id: UUID
    findings: str | None = None
    treatment_plan_update: str | None = None
    orders_given: str | None = None
    discharge_recommendation: str | None = None
    next_review_due: datetime | None = None


class DoctorReviewRead(DoctorReviewCreate):
    id: UUID
    hospital_id: UUID
    doctor_id: UUID | None = None
    created_at: datetime | None = None

    doctor: PersonRef | None = None


class DoctorReviewEnvelope(ApiModel):
    review: DoctorReviewRead


class DoctorReviewList(ApiModel):
    reviews: list[DoctorReviewRead]
