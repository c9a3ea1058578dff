# hms/api/v1/endpoints/settings.py
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from hms.core.database import get_db
from hms.core.errors import NotFound
from hms.core.tenant_context import Principal, resolve_hospital_id
from hms.dependencies.auth import get_auditor, get_current_principal, get_optional_principal
from hms.dependencies.authz import require_permission
from hms.models.hospital import Hospital
from hms.schemas.hospital import HospitalSummary
from hms.schemas.settings import (
    Branding,
    BrandingUpdate,
    BrandingUpdated,
    DepartmentList,
    HospitalSettings,
    PublicSettings,
    SettingsUpdate,
    SettingsUpdated,
)
from hms.services.audit_service import RequestAuditor
from hms.services.settings_service import (
    DEFAULT_BRANDING,
    departments_for,
    effective_settings,
    update_branding,
    update_settings,
)
from hms.utils.lookups import commit_or_raise

router = APIRouter()


def _hospital(db: Session, hospital_id: UUID) -> Hospital:
    hospital = db.get(Hospital, hospital_id)
    if not hospital:
        raise NotFound("Hospital not found")
    return hospital


@router.get("", response_model=HospitalSettings | PublicSettings)
def get_settings(
    hospital_id: UUID | None = Query(None, alias="hospitalId"),
    db: Session = Depends(get_db),
    principal: Principal | None = Depends(get_optional_principal),
) -> HospitalSettings | PublicSettings:
    """
    Anonymous callers (the login page) get default branding only.
    Signed-in users get their hospital and its settings.
    """
    if principal is None:
        return PublicSettings(branding=Branding.model_validate(DEFAULT_BRANDING))

    target = hospital_id if principal.is_super_admin else principal.hospital_id
    if target is None:
        return PublicSettings(branding=Branding.model_validate(DEFAULT_BRANDING))

    hospital = _hospital(db, target)
    return HospitalSettings(
        hospital=HospitalSummary.model_validate(hospital),
        settings=effective_settings(hospital),
    )


@router.put("", response_model=SettingsUpdated)
def put_settings(
    payload: SettingsUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("settings.update")),
    audit: RequestAuditor = Depends(get_auditor),
) -> SettingsUpdated:
    """
    Shallow merge: top-level keys in the body replace stored ones, the rest stay.
    """
    hospital = _hospital(db, resolve_hospital_id(principal, payload.hospital_id))
    settings = update_settings(hospital, payload.settings)
    commit_or_raise(db, "update settings")

    audit(
        "UPDATE_SETTINGS",
        "HOSPITAL",
        hospital.id,
        {"updatedFields": sorted(payload.settings)},
        hospital_id=hospital.id,
    )
    return SettingsUpdated(message="Settings updated successfully", settings=settings)


@router.get("/departments", response_model=DepartmentList)
def get_departments(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> DepartmentList:
    hospital = db.get(Hospital, principal.hospital_id) if principal.hospital_id else None
    return DepartmentList(departments=departments_for(hospital))


@router.put("/branding", response_model=BrandingUpdated)
def put_branding(
    payload: BrandingUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("settings.update")),
    audit: RequestAuditor = Depends(get_auditor),
) -> BrandingUpdated:
    hospital = _hospital(db, resolve_hospital_id(principal, payload.hospital_id))
    patch = payload.model_dump(by_alias=True, exclude={"hospital_id"}, exclude_none=True)
    branding = update_branding(hospital, patch)
    commit_or_raise(db, "update branding")

    audit(
        "UPDATE_BRANDING",
        "HOSPITAL",
        hospital.id,
        {"updatedFields": sorted(patch)},
        hospital_id=hospital.id,
    )
    return BrandingUpdated(message="Branding updated successfully", branding=branding)
