# hms/api/v1/endpoints/users.py
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from hms.core.database import get_db
from hms.core.errors import Conflict, Forbidden, InvalidInput
from hms.core.security import get_password_hash
from hms.core.tenant_context import Principal, scope_hospital_id
from hms.dependencies.auth import get_auditor
from hms.dependencies.authz import require_permission
from hms.models.hospital import Hospital
from hms.models.user import Role, User
from hms.schemas.common import MessageResponse
from hms.schemas.user import (
    ResetPasswordRequest,
    UserCreate,
    UserEnvelope,
    UserList,
    UserRead,
    UserUpdate,
)
from hms.services.audit_service import RequestAuditor
from hms.services.auth_service import revoke_refresh_token
from hms.utils.lookups import commit_or_raise, get_owned_or_404
from hms.utils.pagination import PageParams, page_params, paginate

router = APIRouter()


def _target_hospital(principal: Principal, payload: UserCreate):
    """
    Hospital for a new account.

    - Only SUPER_ADMIN creates SUPER_ADMINs, and those have no hospital.
    - Hospital admins always create inside their own hospital.
    """
    if payload.role == Role.SUPER_ADMIN:
        if not principal.is_super_admin:
            raise Forbidden("Only a super admin can create super admin accounts")
        return None

    if principal.is_super_admin:
        if payload.hospital_id is None:
            raise InvalidInput("Hospital ID is required")
        return payload.hospital_id

    if payload.hospital_id and payload.hospital_id != principal.hospital_id:
        raise Forbidden("You can only create users in your own hospital")
    return principal.hospital_id


@router.post("", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("users.manage")),
    audit: RequestAuditor = Depends(get_auditor),
) -> UserEnvelope:
    hospital_id = _target_hospital(principal, payload)
    if hospital_id is not None and not db.get(Hospital, hospital_id):
        raise InvalidInput("Hospital not found")

    email = payload.email.lower()
    if db.query(User.id).filter(func.lower(User.email) == email).first():
        raise Conflict("A user with this email already exists")

    user = User(
        email=email,
        hashed_password=get_password_hash(payload.password),
        first_name=payload.first_name,
        last_name=payload.last_name,
        phone=payload.phone,
        department=payload.department,
        role=payload.role,
        hospital_id=hospital_id,
        active=True,
    )
    db.add(user)
    commit_or_raise(db, "create user")
    db.refresh(user)

    audit(
        "CREATE_USER",
        "USER",
        user.id,
        {"email": user.email, "role": user.role},
        hospital_id=user.hospital_id,
    )
    return UserEnvelope(user=UserRead.model_validate(user))


@router.get("", response_model=UserList)
def list_users(
    role: Role | None = Query(None),
    active: bool | None = Query(None),
    search: str | None = Query(None),
    hospital_id: UUID | None = Query(None, alias="hospitalId"),
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("users.manage")),
) -> UserList:
    query = db.query(User)
    scope = scope_hospital_id(principal, hospital_id)
    if scope is not None:
        query = query.filter(User.hospital_id == scope)
    if role:
        query = query.filter(User.role == role)
    if active is not None:
        query = query.filter(User.active.is_(active))
    if search and search.strip():
        like = f"%{search.strip()}%"
        query = query.filter(
            or_(User.first_name.ilike(like), User.last_name.ilike(like), User.email.ilike(like))
        )

    users, meta = paginate(query.order_by(User.created_at.desc()), params)
    return UserList(users=[UserRead.model_validate(u) for u in users], **meta)


@router.get("/{user_id}", response_model=UserEnvelope)
def get_user(
    user_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("users.manage")),
) -> UserEnvelope:
    user = get_owned_or_404(db, User, user_id, principal, "User")
    return UserEnvelope(user=UserRead.model_validate(user))


@router.put("/{user_id}", response_model=UserEnvelope)
def update_user(
    user_id: UUID,
    payload: UserUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("users.manage")),
    audit: RequestAuditor = Depends(get_auditor),
) -> UserEnvelope:
    user = get_owned_or_404(db, User, user_id, principal, "User")

    data = payload.model_dump(exclude_unset=True)
    if data.get("role") == Role.SUPER_ADMIN and not principal.is_super_admin:
        raise Forbidden("Only a super admin can grant the super admin role")
    if data.get("role") not in (None, Role.SUPER_ADMIN) and user.hospital_id is None:
        raise InvalidInput("Hospital ID is required")
    if user.id == principal.user_id and data.get("active") is False:
        raise InvalidInput("You cannot deactivate your own account")

    previous_hospital_id = user.hospital_id

    for field, value in data.items():
        setattr(user, field, value)
    if user.role == Role.SUPER_ADMIN:
        # Super admins are platform-wide and never belong to a hospital
        user.hospital_id = None
    if data.get("active") is False or "role" in data:
        # Token claims carry role and hospital; make the user sign in again
        revoke_refresh_token(db, None, user.id)
    commit_or_raise(db, "update user")
    db.refresh(user)

    audit(
        "UPDATE_USER",
        "USER",
        user.id,
        {"updatedFields": sorted(data)},
        hospital_id=previous_hospital_id,
    )
    return UserEnvelope(user=UserRead.model_validate(user))


@router.patch("/{user_id}/deactivate", response_model=UserEnvelope)
def deactivate_user(
    user_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("users.manage")),
    audit: RequestAuditor = Depends(get_auditor),
) -> UserEnvelope:
    if user_id == principal.user_id:
        raise InvalidInput("You cannot deactivate your own account")
    user = get_owned_or_404(db, User, user_id, principal, "User")

    user.active = False
    revoke_refresh_token(db, None, user.id)
    commit_or_raise(db, "deactivate user")
    db.refresh(user)

    audit("DEACTIVATE_USER", "USER", user.id, {"email": user.email}, hospital_id=user.hospital_id)
    return UserEnvelope(user=UserRead.model_validate(user))


@router.post("/{user_id}/reset-password", response_model=MessageResponse)
def reset_password(
    user_id: UUID,
    payload: ResetPasswordRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("users.manage")),
    audit: RequestAuditor = Depends(get_auditor),
) -> MessageResponse:
    """
    Set a new password and sign the user out everywhere.
    """
    user = get_owned_or_404(db, User, user_id, principal, "User")

    user.hashed_password = get_password_hash(payload.new_password)
    revoke_refresh_token(db, None, user.id)
    commit_or_raise(db, "reset password")

    audit("RESET_PASSWORD", "USER", user.id, {"email": user.email}, hospital_id=user.hospital_id)
    return MessageResponse(message="Password reset successfully")
