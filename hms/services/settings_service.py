# hms/services/settings_service.py
"""
Hospital settings document helpers.

The settings document is opaque JSON. Updates are merged one level deep:
top-level keys in the patch replace stored ones, everything else is kept.
"""

from copy import deepcopy
from typing import Any

from hms.models.hospital import Hospital

DEFAULT_DEPARTMENTS = [
    "General Medicine",
    "Emergency",
    "Surgery",
    "Pediatrics",
    "Obstetrics",
]

DEFAULT_SETTINGS: dict[str, Any] = {
    "currency": "NGN",
    "locale": "en-NG",
    "timezone": "Africa/Lagos",
}

DEFAULT_BRANDING: dict[str, Any] = {
    "hospitalName": "Hospital Management System",
    "primaryColor": "#0F766E",
    "secondaryColor": "#14B8A6",
    "logoUrl": "",
    "tagline": "",
}


def merge_settings(existing: dict[str, Any] | None, patch: dict[str, Any]) -> dict[str, Any]:
    """
    Shallow merge. Returns a new dict so SQLAlchemy sees the JSON column change.
    """
    merged = dict(existing or {})
    merged.update(patch)
    return merged


def effective_settings(hospital: Hospital | None) -> dict[str, Any]:
    """Stored settings layered over the defaults."""
    return merge_settings(deepcopy(DEFAULT_SETTINGS), dict((hospital.settings if hospital else None) or {}))


def effective_branding(hospital: Hospital | None) -> dict[str, Any]:
    branding = deepcopy(DEFAULT_BRANDING)
    if hospital is None:
        return branding
    branding["hospitalName"] = hospital.name
    if hospital.logo:
        branding["logoUrl"] = hospital.logo
    stored = (hospital.settings or {}).get("branding")
    if isinstance(stored, dict):
        branding.update(stored)
    return branding


def departments_for(hospital: Hospital | None) -> list[str]:
    stored = ((hospital.settings if hospital else None) or {}).get("departments")
    if isinstance(stored, list) and stored:
        return [str(d) for d in stored]
    return list(DEFAULT_DEPARTMENTS)


def update_settings(hospital: Hospital, patch: dict[str, Any]) -> dict[str, Any]:
    """
    Merge patch into the hospital's settings. Caller commits.
    Concurrent editors are last-write-wins.
    """
    hospital.settings = merge_settings(hospital.settings, patch)
    return hospital.settings


def update_branding(hospital: Hospital, patch: dict[str, Any]) -> dict[str, Any]:
    """Merge patch into settings["branding"]. Caller commits."""
    current = dict((hospital.settings or {}).get("branding") or {})
    current.update({k: v for k, v in patch.items() if v is not None})
    hospital.settings = merge_settings(hospital.settings, {"branding": current})
    return current
