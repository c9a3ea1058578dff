# hms/dependencies/authz.py
from typing import Iterable

from fastapi import Depends

from hms.core.errors import Forbidden
from hms.core.permissions import permitted_roles, role_allowed
from hms.core.tenant_context import Principal
from hms.dependencies.auth import get_current_principal
from hms.models.user import Role


def _forbid(principal: Principal, allowed: Iterable[Role]) -> Forbidden:
    # The permitted set is disclosed on purpose; it makes misconfigured
    # accounts easy to diagnose from the client.
    return Forbidden(
        "Access denied. Insufficient permissions.",
        requiredRoles=sorted(role.value for role in allowed),
        userRole=principal.role.value,
    )


def require_roles(allowed_roles: Iterable[Role]):
    """
    Dependency factory for role-based access.

    Usage:

    @router.get("/admin")
    def admin_only(principal: Principal = Depends(require_roles([Role.ADMIN]))):
        ...

    Returns the principal if their role is in `allowed_roles`.
    """

    allowed = frozenset(allowed_roles)

    def dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        if not role_allowed(principal, allowed):
            raise _forbid(principal, allowed)
        return principal

    return dependency


def require_permission(operation: str):
    """
    Dependency factory for a named operation from hms.core.permissions.PERMISSIONS.

    Usage:

    @router.put("/{admission_id}/assign-bed")
    def assign_bed(
        principal: Principal = Depends(require_permission("admissions.assign_bed")),
        ...
    ):
        ...
    """

    return require_roles(permitted_roles(operation))
