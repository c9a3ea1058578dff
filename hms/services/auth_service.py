# hms/services/auth_service.py
import logging
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hms.core.config import Settings
from hms.core.errors import Forbidden
from hms.core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    get_password_hash,
    verify_password,
)
from hms.models.user import RefreshToken, Role, User
from hms.schemas.auth import SetupRequest
from hms.utils.datetime_utils import as_utc, utc_now

logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    pass


def authenticate_user(db: Session, email: str, password: str) -> User:
    """
    Authenticate a user given email and password.
    Unknown email, wrong password and deactivated account look the same.
    """
    user = db.query(User).filter(func.lower(User.email) == email.lower()).first()
    if not user or not user.active:
        raise AuthenticationError("Invalid credentials")

    if not verify_password(password, user.hashed_password):
        raise AuthenticationError("Invalid credentials")

    return user


def issue_access_token_for_user(settings: Settings, user: User) -> str:
    return create_access_token(
        settings,
        subject=str(user.id),
        email=user.email,
        role=user.role.value,
        hospital_id=str(user.hospital_id) if user.hospital_id else None,
        first_name=user.first_name,
        last_name=user.last_name,
    )


def issue_tokens(db: Session, settings: Settings, user: User) -> tuple[str, str]:
    """
    Issue an access/refresh pair and persist the refresh token.
    Caller commits.
    """
    access_token = issue_access_token_for_user(settings, user)
    refresh_token, expires_at = create_refresh_token(settings, str(user.id))
    db.add(RefreshToken(token=refresh_token, user_id=user.id, expires_at=expires_at))
    return access_token, refresh_token


def rotate_refresh_token(db: Session, settings: Settings, token: str) -> tuple[User, str, str]:
    """
    Exchange a stored refresh token for a new pair. The old token stops working.
    """
    try:
        decode_refresh_token(settings, token)
    except ValueError as exc:
        raise AuthenticationError("Invalid refresh token") from exc

    stored = db.query(RefreshToken).filter(RefreshToken.token == token).first()
    if not stored or as_utc(stored.expires_at) < utc_now():
        raise AuthenticationError("Invalid refresh token")

    user = db.get(User, stored.user_id)
    if not user or not user.active:
        raise AuthenticationError("Invalid refresh token")

    db.delete(stored)
    access_token, refresh_token = issue_tokens(db, settings, user)
    db.commit()
    return user, access_token, refresh_token


def revoke_refresh_token(db: Session, token: str | None, user_id) -> int:
    """
    Delete the given refresh token, or every token of the user when none is given.
    Returns how many were removed. Caller commits.
    """
    query = db.query(RefreshToken).filter(RefreshToken.user_id == user_id)
    if token:
        query = query.filter(RefreshToken.token == token)
    return query.delete(synchronize_session=False)


def record_login(db: Session, user: User, when: datetime | None = None) -> None:
    user.last_login = when or utc_now()


def setup_completed(db: Session) -> bool:
    return (db.query(func.count(User.id)).scalar() or 0) > 0


def bootstrap_super_admin(db: Session, payload: SetupRequest) -> User:
    """
    Create the very first account, a SUPER_ADMIN.

    Rules:
    - Only while the users table is empty; afterwards always Forbidden.
    - There is no reset other than deleting users directly in the database.
    """
    if setup_completed(db):
        raise Forbidden("Setup already completed. Users already exist.")

    user = User(
        email=payload.email.lower(),
        hashed_password=get_password_hash(payload.password),
        first_name=payload.first_name,
        last_name=payload.last_name,
        phone=payload.phone,
        role=Role.SUPER_ADMIN,
        hospital_id=None,
        active=True,
    )
    db.add(user)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise Forbidden("Setup already completed. Users already exist.")
    logger.info("Bootstrap: created initial super admin %s", user.email)
    return user
