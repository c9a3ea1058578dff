# hms/api/v1/endpoints/hospitals.py
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from hms.core.database import get_db
from hms.core.errors import Conflict, Forbidden, NotFound
from hms.core.security import get_password_hash
from hms.core.tenant_context import Principal, ensure_tenant_access
from hms.dependencies.auth import get_auditor
from hms.dependencies.authz import require_permission
from hms.models.hospital import Hospital
from hms.models.user import Role, User
from hms.schemas.common import MessageResponse
from hms.schemas.hospital import (
    HospitalCreate,
    HospitalCreated,
    HospitalEnvelope,
    HospitalList,
    HospitalRead,
    HospitalUpdate,
)
from hms.schemas.user import UserRead
from hms.services.audit_service import RequestAuditor
from hms.services.settings_service import DEFAULT_SETTINGS, merge_settings
from hms.utils.lookups import commit_or_raise

router = APIRouter()
logger = logging.getLogger(__name__)


def _load_hospital(db: Session, principal: Principal, hospital_id: UUID) -> Hospital:
    """
    A hospital is its own tenant: admins reach only theirs.
    """
    hospital = db.get(Hospital, hospital_id)
    if not hospital:
        raise NotFound("Hospital not found")
    ensure_tenant_access(principal, hospital.id)
    return hospital


@router.get("", response_model=HospitalList)
def list_hospitals(
    include_inactive: bool = Query(True, alias="includeInactive"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("hospitals.manage")),
) -> HospitalList:
    query = db.query(Hospital)
    if not include_inactive:
        query = query.filter(Hospital.active.is_(True))
    hospitals = query.order_by(Hospital.name.asc()).all()
    return HospitalList(hospitals=[HospitalRead.model_validate(h) for h in hospitals])


@router.post("", response_model=HospitalCreated, status_code=status.HTTP_201_CREATED)
def create_hospital(
    payload: HospitalCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("hospitals.manage")),
    audit: RequestAuditor = Depends(get_auditor),
) -> HospitalCreated:
    """
    Create a hospital together with its first ADMIN account.

    Both rows commit together; a duplicate email on either side is a Conflict
    and nothing is created.
    """
    admin_email = payload.admin_email.lower()
    if db.query(User.id).filter(func.lower(User.email) == admin_email).first():
        raise Conflict("A user with this email already exists")
    if db.query(Hospital.id).filter(func.lower(Hospital.email) == payload.email.lower()).first():
        raise Conflict("A hospital with this email already exists")

    hospital = Hospital(
        name=payload.name,
        email=payload.email.lower(),
        phone=payload.phone,
        address=payload.address,
        logo=payload.logo,
        settings=merge_settings(DEFAULT_SETTINGS, payload.settings or {}),
        active=True,
    )
    db.add(hospital)
    db.flush()

    admin = User(
        email=admin_email,
        hashed_password=get_password_hash(payload.admin_password),
        first_name=payload.admin_first_name,
        last_name=payload.admin_last_name,
        role=Role.ADMIN,
        hospital_id=hospital.id,
        active=True,
    )
    db.add(admin)
    commit_or_raise(db, "create hospital")
    db.refresh(hospital)
    db.refresh(admin)

    logger.info("Created hospital %s with admin %s", hospital.id, admin.email)
    audit(
        "CREATE_HOSPITAL",
        "HOSPITAL",
        hospital.id,
        {"name": hospital.name, "adminEmail": admin.email},
        hospital_id=hospital.id,
    )
    return HospitalCreated(
        hospital=HospitalRead.model_validate(hospital),
        admin=UserRead.model_validate(admin),
    )


@router.get("/{hospital_id}", response_model=HospitalEnvelope)
def get_hospital(
    hospital_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("hospitals.read")),
) -> HospitalEnvelope:
    hospital = _load_hospital(db, principal, hospital_id)
    return HospitalEnvelope(hospital=HospitalRead.model_validate(hospital))


@router.put("/{hospital_id}", response_model=HospitalEnvelope)
def update_hospital(
    hospital_id: UUID,
    payload: HospitalUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("hospitals.update")),
    audit: RequestAuditor = Depends(get_auditor),
) -> HospitalEnvelope:
    hospital = _load_hospital(db, principal, hospital_id)

    data = payload.model_dump(exclude_unset=True)
    if "active" in data and not principal.is_super_admin:
        raise Forbidden("Only a super admin can activate or deactivate a hospital")
    if "email" in data and data["email"]:
        data["email"] = data["email"].lower()

    for field, value in data.items():
        setattr(hospital, field, value)
    commit_or_raise(db, "update hospital")
    db.refresh(hospital)

    audit(
        "UPDATE_HOSPITAL",
        "HOSPITAL",
        hospital.id,
        {"updatedFields": sorted(data)},
        hospital_id=hospital.id,
    )
    return HospitalEnvelope(hospital=HospitalRead.model_validate(hospital))


@router.delete("/{hospital_id}", response_model=MessageResponse)
def delete_hospital(
    hospital_id: UUID,
    permanent: bool = Query(False),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("hospitals.manage")),
    audit: RequestAuditor = Depends(get_auditor),
) -> MessageResponse:
    """
    Deactivate a hospital, or remove it with all its data when permanent=true.
    """
    hospital = _load_hospital(db, principal, hospital_id)
    name = hospital.name

    if permanent:
        db.delete(hospital)
        commit_or_raise(db, "delete hospital")
        logger.warning("Hospital %s (%s) permanently deleted", hospital_id, name)
        audit(
            "DELETE_HOSPITAL",
            "HOSPITAL",
            hospital_id,
            {"name": name, "permanent": True},
            hospital_id=hospital_id,
        )
        return MessageResponse(message="Hospital permanently deleted")

    hospital.active = False
    commit_or_raise(db, "deactivate hospital")
    audit("DEACTIVATE_HOSPITAL", "HOSPITAL", hospital_id, {"name": name}, hospital_id=hospital_id)
    return MessageResponse(message="Hospital deactivated")
