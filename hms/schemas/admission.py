# hms/schemas/admission.py
from datetime import datetime
from uuid import UUID

from hms.models.admission import AdmissionStatus
from hms.schemas.common import ApiModel, NonEmptyStr, PageMeta, PersonRef
from hms.schemas.patient import PatientBrief
from hms.schemas.ward import BedRead, RoomRef, WardRef


class AdmissionCreate(ApiModel):
    patient_id: UUID
    diagnosis: NonEmptyStr
    visit_id: UUID | None = None
    notes: str | None = None
    hospital_id: UUID | None = None


class AssignBedRequest(ApiModel):
    bed_id: UUID


class AdmissionDischargeRequest(ApiModel):
    discharge_notes: str | None = None
    discharge_summary: str | None = None


class AdmissionRead(ApiModel):
    id: UUID
    hospital_id: UUID
    patient_id: UUID
    visit_id: UUID | None = None
    admitted_by: UUID | None = None
    diagnosis: str
    notes: str | None = None
    status: AdmissionStatus
    admission_date: datetime
    ward_id: UUID | None = None
    room_id: UUID | None = None
    bed_id: UUID | None = None
    assigned_ward_manager: UUID | None = None
    discharge_date: datetime | None = None
    discharge_notes: str | None = None
    discharge_summary: str | None = None
    discharged_by: UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    # Computed fields for frontend convenience
    patient: PatientBrief | None = None
    doctor: PersonRef | None = None
    ward: WardRef | None = None
    room: RoomRef | None = None
    bed: BedRead | None = None


class AdmissionEnvelope(ApiModel):
    admission: AdmissionRead


class AdmissionList(PageMeta):
    admissions: list[AdmissionRead]


class ActiveAdmissionList(ApiModel):
    admissions: list[AdmissionRead]
