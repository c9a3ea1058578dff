# hms/schemas/visit.py
from datetime import datetime
from uuid import UUID

from hms.models.visit import VisitStatus
from hms.schemas.common import ApiModel, NonEmptyStr, PersonRef
from hms.schemas.patient import PatientBrief


class VisitCheckIn(ApiModel):
    id: UUID | None = None
    patient_id: UUID
    department: NonEmptyStr
    reason_for_visit: NonEmptyStr
    assigned_to: UUID | None = None


class VisitStatusUpdate(ApiModel):
    status: VisitStatus


class VisitRead(ApiModel):
    id: UUID
    hospital_id: UUID
    patient_id: UUID
    department: str
    reason_for_visit: str
    status: VisitStatus
    check_in_time: datetime
    completed_time: datetime | None = None
    assigned_to: UUID | None = None
    checked_in_by: UUID | None = None
    created_at: datetime | None = None

    patient: PatientBrief | None = None
    assigned_user: PersonRef | None = None


class VisitEnvelope(ApiModel):
    visit: VisitRead


class VisitList(ApiModel):
    visits: list[VisitRead]
