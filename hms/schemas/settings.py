# hms/schemas/settings.py
from typing import Any
from uuid import UUID

from hms.schemas.common import ApiModel
from hms.schemas.hospital import HospitalSummary


class Branding(ApiModel):
    hospital_name: str
    primary_color: str
    secondary_color: str
    logo_url: str = ""
    tagline: str = ""


class PublicSettings(ApiModel):
    branding: Branding


class HospitalSettings(ApiModel):
    hospital: HospitalSummary
    settings: dict[str, Any]


class SettingsUpdate(ApiModel):
    """
    Top-level keys in `settings` replace the stored ones; other keys are kept.
    """

    settings: dict[str, Any]
    hospital_id: UUID | None = None


class SettingsUpdated(ApiModel):
    message: str
    settings: dict[str, Any]


class BrandingUpdate(ApiModel):
    hospital_name: str | None = None
    primary_color: str | None = None
    secondary_color: str | None = None
    logo_url: str | None = None
    tagline: str | None = None
    hospital_id: UUID | None = None


class BrandingUpdated(ApiModel):
    message: str
    branding: dict[str, Any]


class DepartmentList(ApiModel):
    departments: list[str]
