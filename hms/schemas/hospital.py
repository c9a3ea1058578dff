# hms/schemas/hospital.py
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from hms.schemas.common import ApiModel, NonEmptyStr, reject_null
from hms.schemas.user import UserRead


class HospitalRead(ApiModel):
    id: UUID
    name: str
    email: str
    phone: str | None = None
    address: str | None = None
    logo: str | None = None
    active: bool
    settings: dict[str, Any] | None = None
    created_at: datetime | None = None


class HospitalSummary(ApiModel):
    """Contact card without the settings document."""

    id: UUID
    name: str
    address: str | None = None
    phone: str | None = None
    email: str
    logo: str | None = None


class HospitalCreate(ApiModel):
    name: NonEmptyStr
    email: EmailStr
    phone: str | None = None
    address: str | None = None
    logo: str | None = None
    settings: dict[str, Any] | None = None

    # First administrator of the new hospital
    admin_email: EmailStr
    admin_password: str = Field(min_length=8)
    admin_first_name: NonEmptyStr = "Hospital"
    admin_last_name: NonEmptyStr = "Admin"


class HospitalUpdate(ApiModel):
    name: NonEmptyStr | None = None
    email: EmailStr | None = None
    phone: str | None = None
    address: str | None = None
    logo: str | None = None
    active: bool | None = None

    @field_validator("name", "email", "active", mode="before")
    @classmethod
    def required_columns_not_null(cls, v):
        return reject_null(v)


class HospitalEnvelope(ApiModel):
    hospital: HospitalRead


class HospitalCreated(ApiModel):
    hospital: HospitalRead
    admin: UserRead


class HospitalList(ApiModel):
    hospitals: list[HospitalRead]
