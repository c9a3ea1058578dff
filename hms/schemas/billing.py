# hms/schemas/billing.py
from datetime import datetime
from uuid import UUID

from pydantic import Field

from hms.models.billing import BillingStatus
from hms.schemas.common import ApiModel, NonEmptyStr
from hms.schemas.patient import PatientBrief


class BillingItemCreate(ApiModel):
    description: NonEmptyStr
    category: NonEmptyStr
    amount: float = Field(ge=0)
    quantity: int = Field(default=1, ge=1)


class BillingItemRead(BillingItemCreate):
    id: UUID


class BillingRecordCreate(ApiModel):
    visit_id: UUID
    patient_id: UUID
    items: list[BillingItemCreate] = Field(min_length=1)
    insurance_provider: str | None = None
    insurance_number: str | None = None
    insurance_coverage: float | None = Field(default=None, ge=0)


class PaymentCreate(ApiModel):
    billing_record_id: UUID
    amount: float = Field(gt=0)
    method: NonEmptyStr
    reference: str | None = None


class PaymentRead(ApiModel):
    id: UUID
    billing_record_id: UUID
    amount: float
    method: str
    reference: str | None = None
    received_by: UUID | None = None
    created_at: datetime | None = None


class BillingRecordRead(ApiModel):
    id: UUID
    hospital_id: UUID
    visit_id: UUID
    patient_id: UUID
    total_amount: float
    paid_amount: float
    balance: float
    status: BillingStatus
    insurance_provider: str | None = None
    insurance_number: str | None = None
    insurance_coverage: float | None = None
    created_by: UUID | None = None
    created_at: datetime | None = None
    items: list[BillingItemRead] = []
    payments: list[PaymentRead] = []

    patient: PatientBrief | None = None


class BillingRecordEnvelope(ApiModel):
    billing_record: BillingRecordRead


class BillingRecordList(ApiModel):
    billing_records: list[BillingRecordRead]


class PaymentApplied(ApiModel):
    payment: PaymentRead
    billing_record: BillingRecordRead
