# hms/schemas/auth.py
from pydantic import EmailStr, Field

from hms.schemas.common import ApiModel, NonEmptyStr
from hms.schemas.user import UserRead


class LoginRequest(ApiModel):
    email: EmailStr
    password: str = Field(min_length=1)


class RefreshRequest(ApiModel):
    refresh_token: str = Field(min_length=1)


class LogoutRequest(ApiModel):
    refresh_token: str | None = None


class ChangePasswordRequest(ApiModel):
    old_password: str = Field(min_length=1)
    new_password: str = Field(min_length=8)


class SetupRequest(ApiModel):
    """
    First super admin of a fresh installation.
    """

    email: EmailStr
    password: str = Field(min_length=8)
    first_name: NonEmptyStr
    last_name: NonEmptyStr
    phone: str | None = None


class TokenResponse(ApiModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserRead


class TokenPair(ApiModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class MeResponse(ApiModel):
    user: UserRead
