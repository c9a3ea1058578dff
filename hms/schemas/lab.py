# hms/schemas/lab.py
from datetime import datetime
from uuid import UUID

from hms.models.lab import LabOrderStatus
from hms.schemas.common import ApiModel, NonEmptyStr, PersonRef
from hms.schemas.patient import PatientBrief


class LabOrderCreate(ApiModel):
    visit_id: UUID
    patient_id: UUID
    test_type: NonEmptyStr
    sample_id: str | None = None


class LabOrderStatusUpdate(ApiModel):
    status: LabOrderStatus


class LabResultsEntry(ApiModel):
    result_value: NonEmptyStr
    normal_range: str | None = None
    result_notes: str | None = None


class LabOrderRead(ApiModel):
    id: UUID
    hospital_id: UUID
    visit_id: UUID
    patient_id: UUID
    test_type: str
    sample_id: str | None = None
    status: LabOrderStatus
    ordered_by: UUID | None = None
    processed_by: UUID | None = None
    result_value: str | None = None
    normal_range: str | None = None
    result_notes: str | None = None
    completed_at: datetime | None = None
    created_at: datetime | None = None

    patient: PatientBrief | None = None
    orderer: PersonRef | None = None


class LabOrderEnvelope(ApiModel):
    lab_order: LabOrderRead


class LabOrderList(ApiModel):
    lab_orders: list[LabOrderRead]
