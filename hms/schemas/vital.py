# hms/schemas/vital.py
from datetime import datetime
from uuid import UUID

from pydantic import Field

from hms.models.vital import TriageCategory
from hms.schemas.common import ApiModel, PersonRef
from hms.schemas.patient import PatientBrief


class VitalSignsCreate(ApiModel):
    patient_id: UUID
    visit_id: UUID | None = None
    blood_pressure: str | None = None
    heart_rate: int | None = Field(default=None, ge=0, le=400)
    temperature: float | None = Field(default=None, ge=20, le=50)
    weight: float | None = Field(default=None, ge=0)
    height: float | None = Field(default=None, ge=0)
    respiratory_rate: int | None = Field(default=None, ge=0, le=200)
    oxygen_saturation: float | None = Field(default=None, ge=0, le=100)
    blood_sugar: float | None = Field(default=None, ge=0)
    pain_level: int | None = Field(default=None, ge=0, le=10)
    notes: str | None = None
    triage_category: TriageCategory | None = None


class VitalSignsRead(VitalSignsCreate):
    id: UUID
    hospital_id: UUID
    recorded_by: UUID | None = None
    created_at: datetime | None = None

    patient: PatientBrief | None = None
    recorder: PersonRef | None = None


class VitalSignsEnvelope(ApiModel):
    vital_signs: VitalSignsRead


class VitalSignsList(ApiModel):
    vital_signs: list[VitalSignsRead]


class TriageQueue(ApiModel):
    queue: list[VitalSignsRead]
