# hms/api/v1/endpoints/auth.py
import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from hms.core.config import Settings
from hms.core.database import get_db
from hms.core.errors import NotFound, TooManyRequests, Unauthenticated
from hms.core.security import get_password_hash, verify_password
from hms.core.services import AppServices
from hms.core.tenant_context import Principal
from hms.dependencies.auth import get_auditor, get_current_principal
from hms.dependencies.services import get_app_settings, get_services
from hms.models.user import User
from hms.schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    LogoutRequest,
    MeResponse,
    RefreshRequest,
    SetupRequest,
    TokenPair,
    TokenResponse,
)
from hms.schemas.common import MessageResponse
from hms.schemas.user import UserRead
from hms.services.audit_service import RequestAuditor, client_ip
from hms.services.auth_service import (
    AuthenticationError,
    authenticate_user,
    bootstrap_super_admin,
    issue_tokens,
    record_login,
    revoke_refresh_token,
    rotate_refresh_token,
)
from hms.utils.lookups import commit_or_raise

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/login", response_model=TokenResponse)
def login(
    payload: LoginRequest,
    request: Request,
    db: Session = Depends(get_db),
    services: AppServices = Depends(get_services),
) -> TokenResponse:
    """
    Exchange email and password for an access/refresh token pair.
    """
    throttle_key = client_ip(request) or payload.email.lower()
    if not services.login_throttle.hit(throttle_key):
        logger.warning("Login throttled for %s", throttle_key)
        raise TooManyRequests()

    try:
        user = authenticate_user(db, payload.email, payload.password)
    except AuthenticationError:
        raise Unauthenticated("Invalid credentials")

    record_login(db, user)
    access_token, refresh_token = issue_tokens(db, services.settings, user)
    commit_or_raise(db, "log in")
    db.refresh(user)
    services.login_throttle.reset(throttle_key)

    services.audit.for_request(None, request)(
        "LOGIN",
        "USER",
        user.id,
        {"email": user.email},
        hospital_id=user.hospital_id,
        user_id=user.id,
    )
    return TokenResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        user=UserRead.model_validate(user),
    )


@router.post("/refresh", response_model=TokenPair)
def refresh(
    payload: RefreshRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> TokenPair:
    """
    Rotate a refresh token. The presented token is consumed.
    """
    try:
        _, access_token, refresh_token = rotate_refresh_token(db, settings, payload.refresh_token)
    except AuthenticationError:
        raise Unauthenticated("Invalid refresh token")
    return TokenPair(access_token=access_token, refresh_token=refresh_token)


@router.post("/logout", response_model=MessageResponse)
def logout(
    payload: LogoutRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    audit: RequestAuditor = Depends(get_auditor),
) -> MessageResponse:
    revoke_refresh_token(db, payload.refresh_token, principal.user_id)
    commit_or_raise(db, "log out")
    audit("LOGOUT", "USER", principal.user_id)
    return MessageResponse(message="Logged out successfully")


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    payload: ChangePasswordRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    audit: RequestAuditor = Depends(get_auditor),
) -> MessageResponse:
    user = db.get(User, principal.user_id)
    if not user:
        raise NotFound("User not found")

    if not verify_password(payload.old_password, user.hashed_password):
        raise Unauthenticated("Current password is incorrect")

    user.hashed_password = get_password_hash(payload.new_password)
    commit_or_raise(db, "change password")
    audit("CHANGE_PASSWORD", "USER", user.id)
    return MessageResponse(message="Password changed successfully")


@router.post("/setup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def setup(
    payload: SetupRequest,
    request: Request,
    db: Session = Depends(get_db),
    services: AppServices = Depends(get_services),
) -> TokenResponse:
    """
    One-time bootstrap: create the first SUPER_ADMIN on an empty installation.
    """
    user = bootstrap_super_admin(db, payload)
    access_token, refresh_token = issue_tokens(db, services.settings, user)
    commit_or_raise(db, "complete setup")
    db.refresh(user)

    services.audit.for_request(None, request)(
        "SETUP_SUPER_ADMIN",
        "USER",
        user.id,
        {"email": user.email},
        user_id=user.id,
    )
    return TokenResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        user=UserRead.model_validate(user),
    )


@router.get("/me", response_model=MeResponse)
def me(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> MeResponse:
    user = db.get(User, principal.user_id)
    if not user or not user.active:
        raise Unauthenticated("Invalid or expired token")
    return MeResponse(user=UserRead.model_validate(user))
