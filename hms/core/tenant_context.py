# hms/core/tenant_context.py
"""
Principal and tenant scope guard.

Every tenant-owned row carries a hospital_id. Access rules:

- SUPER_ADMIN may touch any hospital's rows.
- Everyone else only rows whose hospital_id equals their own.
- A row with no hospital_id is out of reach for everyone but SUPER_ADMIN.

Endpoints load a row by primary key first and then call ensure_tenant_access(),
so a row from another hospital answers 403 rather than 404.
"""

import uuid
from dataclasses import dataclass
from typing import Any

from hms.core.errors import Forbidden, InvalidInput
from hms.models.user import Role


@dataclass(frozen=True)
class Principal:
    """
    Identity of the caller, rebuilt from the access token on every request.
    """

    user_id: uuid.UUID
    email: str
    role: Role
    hospital_id: uuid.UUID | None
    first_name: str = ""
    last_name: str = ""

    @property
    def is_super_admin(self) -> bool:
        return self.role == Role.SUPER_ADMIN

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> "Principal":
        """
        Build a Principal from decoded JWT claims.
        Raises ValueError on missing or malformed claims.
        """
        hospital_id = claims.get("hospital_id")
        return cls(
            user_id=uuid.UUID(str(claims["sub"])),
            email=claims.get("email") or "",
            role=Role(claims["role"]),
            hospital_id=uuid.UUID(str(hospital_id)) if hospital_id else None,
            first_name=claims.get("first_name") or "",
            last_name=claims.get("last_name") or "",
        )


def can_access_tenant(principal: Principal, resource_hospital_id: uuid.UUID | None) -> bool:
    if principal.is_super_admin:
        return True
    if resource_hospital_id is None or principal.hospital_id is None:
        return False
    return principal.hospital_id == resource_hospital_id


def ensure_tenant_access(
    principal: Principal,
    resource_hospital_id: uuid.UUID | None,
    message: str = "Access denied",
) -> None:
    """
    Raise Forbidden unless the principal may act on a row owned by resource_hospital_id.
    """
    if not can_access_tenant(principal, resource_hospital_id):
        raise Forbidden(message)


def resolve_hospital_id(
    principal: Principal,
    requested_hospital_id: uuid.UUID | None = None,
) -> uuid.UUID:
    """
    Pick the owning hospital for a new row.

    SUPER_ADMIN may name any hospital; other roles always get their own,
    whatever the request says.
    """
    if principal.is_super_admin:
        hospital_id = requested_hospital_id or principal.hospital_id
    else:
        hospital_id = principal.hospital_id

    if hospital_id is None:
        raise InvalidInput("Hospital ID is required")
    return hospital_id


def scope_hospital_id(
    principal: Principal,
    requested_hospital_id: uuid.UUID | None = None,
) -> uuid.UUID | None:
    """
    Hospital filter for list/aggregate queries.

    Returns None only for SUPER_ADMIN without an explicit hospital, meaning
    "all hospitals".
    """
    if principal.is_super_admin:
        return requested_hospital_id
    if principal.hospital_id is None:
        raise Forbidden("Tenant-scoped operation requires a hospital user.")
    return principal.hospital_id
