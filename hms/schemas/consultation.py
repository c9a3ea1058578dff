# hms/schemas/consultation.py
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import field_validator

from hms.schemas.common import ApiModel, NonEmptyStr, PersonRef, reject_null
from hms.schemas.patient import PatientBrief


class ConsultationCreate(ApiModel):
    visit_id: UUID
    patient_id: UUID
    chief_complaint: NonEmptyStr
    diagnosis: NonEmptyStr
    vital_signs: dict[str, Any] | None = None
    physical_exam: str | None = None
    treatment_plan: str | None = None
    follow_up: str | None = None


class ConsultationUpdate(ApiModel):
    chief_complaint: NonEmptyStr | None = None
    diagnosis: NonEmptyStr | None = None
    vital_signs: dict[str, Any] | None = None
    physical_exam: str | None = None
    treatment_plan: str | None = None
    follow_up: str | None = None

    @field_validator("chief_complaint", "diagnosis", mode="before")
    @classmethod
    def required_columns_not_null(cls, v):
        return reject_null(v)


class ConsultationRead(ApiModel):
    id: UUID
    hospital_id: UUID
    visit_id: UUID
    patient_id: UUID
    doctor_id: UUID
    chief_complaint: str
    diagnosis: str
    vital_signs: dict[str, Any] | None = None
    physical_exam: str | None = None
    treatment_plan: str | None = None
    follow_up: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    doctor: PersonRef | None = None
    patient: PatientBrief | None = None


class ConsultationEnvelope(ApiModel):
    consultation: ConsultationRead


class ConsultationList(ApiModel):
    consultations: list[ConsultationRead]
