# hms/core/permissions.py
"""
Which roles may perform which operation.

Routes declare `require_permission("<operation>")` and never list roles
themselves, so two routes sharing an operation always share its rule.
"""

from typing import TYPE_CHECKING, Iterable

from hms.models.user import Role

if TYPE_CHECKING:
    from hms.core.tenant_context import Principal

SA = Role.SUPER_ADMIN
ADMIN = Role.ADMIN
DOCTOR = Role.DOCTOR
NURSE = Role.NURSE
PHARMACIST = Role.PHARMACIST
LAB_TECH = Role.LAB_TECH
RECEPTIONIST = Role.RECEPTIONIST
BILLING_OFFICER = Role.BILLING_OFFICER
WARD_MANAGER = Role.WARD_MANAGER

ALL_ROLES = frozenset(Role)


def _roles(*roles: Role) -> frozenset[Role]:
    return frozenset((SA, *roles))


PERMISSIONS: dict[str, frozenset[Role]] = {
    # Patients
    "patients.read": ALL_ROLES,
    "patients.write": ALL_ROLES,
    # Visits
    "visits.read": ALL_ROLES,
    "visits.write": _roles(RECEPTIONIST, DOCTOR, NURSE, ADMIN),
    "visits.delete": _roles(),
    # Vitals
    "vitals.read": _roles(NURSE, DOCTOR, ADMIN),
    "vitals.write": _roles(NURSE, DOCTOR, ADMIN),
    # Consultations
    "consultations.read": _roles(DOCTOR, ADMIN),
    "consultations.write": _roles(DOCTOR, ADMIN),
    # Admissions
    "admissions.create": _roles(DOCTOR, ADMIN),
    "admissions.read": _roles(DOCTOR, NURSE, ADMIN, WARD_MANAGER),
    "admissions.assign_bed": _roles(WARD_MANAGER, ADMIN),
    "admissions.discharge": _roles(DOCTOR, ADMIN),
    # Wards, rooms, beds
    "wards.read": ALL_ROLES,
    "wards.write": _roles(ADMIN, WARD_MANAGER),
    "beds.update_status": _roles(ADMIN, WARD_MANAGER, NURSE),
    # Nursing rounds / doctor reviews
    "rounds.read": _roles(NURSE, DOCTOR, ADMIN, WARD_MANAGER),
    "rounds.write": _roles(NURSE, ADMIN),
    "rounds.due": _roles(NURSE, ADMIN, WARD_MANAGER),
    "reviews.read": _roles(NURSE, DOCTOR, ADMIN, WARD_MANAGER),
    "reviews.write": _roles(DOCTOR, ADMIN),
    # Labs
    "labs.order": _roles(DOCTOR, ADMIN),
    "labs.process": _roles(LAB_TECH, ADMIN),
    "labs.read": _roles(DOCTOR, LAB_TECH, ADMIN),
    # Prescriptions
    "prescriptions.create": _roles(DOCTOR, ADMIN),
    "prescriptions.dispense": _roles(PHARMACIST, ADMIN),
    "prescriptions.read": _roles(DOCTOR, PHARMACIST, ADMIN),
    # Billing
    "billing.read": _roles(BILLING_OFFICER, ADMIN),
    "billing.write": _roles(BILLING_OFFICER, ADMIN),
    # Inventory
    "inventory.read": _roles(PHARMACIST, ADMIN),
    "inventory.write": _roles(PHARMACIST, ADMIN),
    # Administration
    "users.manage": _roles(ADMIN),
    "hospitals.manage": _roles(),
    "hospitals.read": _roles(ADMIN),
    "hospitals.update": _roles(ADMIN),
    "settings.update": _roles(ADMIN),
    "audit.read": _roles(ADMIN),
    "dashboard.read": ALL_ROLES,
    # Payment gateway
    "payments.gateway": _roles(BILLING_OFFICER, ADMIN),
}


def permitted_roles(operation: str) -> frozenset[Role]:
    """
    Roles allowed to perform `operation`. Unknown operations raise KeyError
    so a typo in a route fails at import time rather than silently denying.
    """
    return PERMISSIONS[operation]


def role_allowed(principal: "Principal", allowed: Iterable[Role]) -> bool:
    return principal.role in set(allowed)
