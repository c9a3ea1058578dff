# hms/schemas/user.py
from datetime import datetime
from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from hms.models.user import Role
from hms.schemas.common import ApiModel, NonEmptyStr, PageMeta, reject_null


class UserRead(ApiModel):
    """
    Public view of a staff account. Never carries the password hash.
    """

    id: UUID
    email: str
    first_name: str
    last_name: str
    phone: str | None = None
    department: str | None = None
    role: Role
    hospital_id: UUID | None = None
    active: bool
    last_login: datetime | None = None
    created_at: datetime | None = None


class UserCreate(ApiModel):
    email: EmailStr
    password: str = Field(min_length=8)
    first_name: NonEmptyStr
    last_name: NonEmptyStr
    role: Role
    hospital_id: UUID | None = None
    department: str | None = None
    phone: str | None = None


class UserUpdate(ApiModel):
    first_name: NonEmptyStr | None = None
    last_name: NonEmptyStr | None = None
    phone: str | None = None
    department: str | None = None
    role: Role | None = None
    active: bool | None = None

    @field_validator("first_name", "last_name", "role", "active", mode="before")
    @classmethod
    def required_columns_not_null(cls, v):
        return reject_null(v)


class ResetPasswordRequest(ApiModel):
    new_password: str = Field(min_length=8)


class UserEnvelope(ApiModel):
    user: UserRead


class UserList(PageMeta):
    users: list[UserRead]
