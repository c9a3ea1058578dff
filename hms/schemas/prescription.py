# hms/schemas/prescription.py
from datetime import datetime
from uuid import UUID

from pydantic import Field

from hms.models.prescription import PrescriptionStatus
from hms.schemas.common import ApiModel, NonEmptyStr, PersonRef
from hms.schemas.patient import PatientBrief


class PrescriptionItemCreate(ApiModel):
    medication_name: NonEmptyStr
    dosage: NonEmptyStr
    frequency: NonEmptyStr
    duration: NonEmptyStr
    instructions: str | None = None


class PrescriptionItemRead(PrescriptionItemCreate):
    id: UUID


class PrescriptionCreate(ApiModel):
    patient_id: UUID
    visit_id: UUID
    consultation_id: UUID | None = None
    items: list[PrescriptionItemCreate] = Field(min_length=1)


class PrescriptionRead(ApiModel):
    id: UUID
    hospital_id: UUID
    patient_id: UUID
    visit_id: UUID
    consultation_id: UUID | None = None
    doctor_id: UUID | None = None
    status: PrescriptionStatus
    dispensed_by: UUID | None = None
    dispensed_at: datetime | None = None
    created_at: datetime | None = None
    items: list[PrescriptionItemRead] = []

    patient: PatientBrief | None = None
    doctor: PersonRef | None = None


class PrescriptionEnvelope(ApiModel):
    prescription: PrescriptionRead


class PrescriptionList(ApiModel):
    prescriptions: list[PrescriptionRead]
