# hms/schemas/patient.py
from datetime import date, datetime
from uuid import UUID

from pydantic import EmailStr, field_validator

from hms.schemas.common import ApiModel, NonEmptyStr, PageMeta, reject_null


class PatientBase(ApiModel):
    first_name: NonEmptyStr
    last_name: NonEmptyStr
    date_of_birth: date
    gender: NonEmptyStr
    phone: NonEmptyStr
    email: EmailStr | None = None
    address: str | None = None
    emergency_contact_name: str | None = None
    emergency_contact_phone: str | None = None
    emergency_contact_relationship: str | None = None
    blood_group: str | None = None
    allergies: list[str] = []
    current_medications: list[str] = []

    @field_validator("email", mode="before")
    @classmethod
    def empty_email_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class PatientCreate(PatientBase):
    # Offline-first clients generate their own ids
    id: UUID | None = None
    hospital_id: UUID | None = None


class PatientUpdate(ApiModel):
    first_name: NonEmptyStr | None = None
    last_name: NonEmptyStr | None = None
    date_of_birth: date | None = None
    gender: NonEmptyStr | None = None
    phone: NonEmptyStr | None = None
    email: EmailStr | None = None
    address: str | None = None
    emergency_contact_name: str | None = None
    emergency_contact_phone: str | None = None
    emergency_contact_relationship: str | None = None
    blood_group: str | None = None
    allergies: list[str] | None = None
    current_medications: list[str] | None = None

    @field_validator(
        "first_name",
        "last_name",
        "date_of_birth",
        "gender",
        "phone",
        "allergies",
        "current_medications",
        mode="before",
    )
    @classmethod
    def required_columns_not_null(cls, v):
        return reject_null(v)


class PatientRead(PatientBase):
    id: UUID
    hospital_id: UUID
    email: str | None = None
    created_by: UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PatientBrief(ApiModel):
    id: UUID
    first_name: str
    last_name: str
    phone: str | None = None
    date_of_birth: date | None = None
    gender: str | None = None


class PatientEnvelope(ApiModel):
    patient: PatientRead


class PatientList(PageMeta):
    patients: list[PatientRead]


class PatientSearchResult(ApiModel):
    patients: list[PatientRead]
