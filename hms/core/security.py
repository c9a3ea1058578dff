from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

from jose import JWTError, jwt
from passlib.context import CryptContext

from hms.core.config import Settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ALGORITHM = "HS256"
ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(
    settings: Settings,
    subject: str,
    email: str,
    role: str,
    hospital_id: str | None,
    first_name: str,
    last_name: str,
    expires_delta_minutes: int | None = None,
) -> str:
    """
    Create a short-lived JWT carrying everything needed to build a Principal.
    """
    if expires_delta_minutes is None:
        expires_delta_minutes = settings.access_token_expire_minutes

    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_delta_minutes)
    to_encode: dict[str, Any] = {
        "sub": str(subject),
        "email": email,
        "role": role,
        "hospital_id": hospital_id,
        "first_name": first_name,
        "last_name": last_name,
        "type": ACCESS_TOKEN_TYPE,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def create_refresh_token(settings: Settings, subject: str) -> tuple[str, datetime]:
    """
    Create a refresh token signed with the refresh secret.
    Returns the token and its expiry so the caller can persist both.
    """
    expire = datetime.now(timezone.utc) + timedelta(days=settings.refresh_token_expire_days)
    to_encode: dict[str, Any] = {
        "sub": str(subject),
        "type": REFRESH_TOKEN_TYPE,
        # unique per issue so two logins in the same second never collide
        "jti": uuid4().hex,
        "exp": expire,
    }
    token = jwt.encode(to_encode, settings.refresh_secret_key, algorithm=ALGORITHM)
    return token, expire


def decode_token(settings: Settings, token: str) -> dict[str, Any]:
    """
    Decode and validate an access token.
    Raises ValueError if the token is malformed, expired, badly signed
    or not an access token.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError as exc:
        raise ValueError("Invalid or expired token") from exc

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise ValueError("Invalid or expired token")
    return payload


def decode_refresh_token(settings: Settings, token: str) -> dict[str, Any]:
    try:
        payload = jwt.decode(token, settings.refresh_secret_key, algorithms=[ALGORITHM])
    except JWTError as exc:
        raise ValueError("Invalid refresh token") from exc

    if payload.get("type") != REFRESH_TOKEN_TYPE:
        raise ValueError("Invalid refresh token")
    return payload
