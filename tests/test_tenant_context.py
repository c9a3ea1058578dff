import uuid

import pytest

from hms.core.errors import Forbidden, InvalidInput
from hms.core.permissions import PERMISSIONS, permitted_roles
from hms.core.tenant_context import (
    Principal,
    can_access_tenant,
    ensure_tenant_access,
    resolve_hospital_id,
    scope_hospital_id,
)
from hms.models.user import Role

HOSPITAL_A = uuid.uuid4()
HOSPITAL_B = uuid.uuid4()


def principal(role=Role.DOCTOR, hospital_id=HOSPITAL_A):
    return Principal(user_id=uuid.uuid4(), email="someone@stnicholas.ng", role=role, hospital_id=hospital_id)


def test_super_admin_reaches_every_hospital():
    sa = principal(Role.SUPER_ADMIN, hospital_id=None)
    assert can_access_tenant(sa, HOSPITAL_A)
    assert can_access_tenant(sa, HOSPITAL_B)
    assert can_access_tenant(sa, None)


def test_same_hospital_only():
    doc = principal()
    assert can_access_tenant(doc, HOSPITAL_A)
    assert not can_access_tenant(doc, HOSPITAL_B)


def test_missing_hospital_fails_closed():
    assert not can_access_tenant(principal(), None)
    assert not can_access_tenant(principal(hospital_id=None), HOSPITAL_A)
    assert not can_access_tenant(principal(hospital_id=None), None)


def test_ensure_tenant_access_raises_forbidden():
    with pytest.raises(Forbidden) as exc:
        ensure_tenant_access(principal(), HOSPITAL_B)
    assert exc.value.status_code == 403


def test_resolve_hospital_id_ignores_request_for_non_super_admin():
    assert resolve_hospital_id(principal(), HOSPITAL_B) == HOSPITAL_A


def test_resolve_hospital_id_super_admin_needs_a_target():
    sa = principal(Role.SUPER_ADMIN, hospital_id=None)
    assert resolve_hospital_id(sa, HOSPITAL_B) == HOSPITAL_B
    with pytest.raises(InvalidInput):
        resolve_hospital_id(sa, None)


def test_scope_hospital_id():
    sa = principal(Role.SUPER_ADMIN, hospital_id=None)
    assert scope_hospital_id(sa) is None
    assert scope_hospital_id(sa, HOSPITAL_B) == HOSPITAL_B
    assert scope_hospital_id(principal(), HOSPITAL_B) == HOSPITAL_A
    with pytest.raises(Forbidden):
        scope_hospital_id(principal(hospital_id=None))


def test_from_claims_rejects_bad_role():
    with pytest.raises(ValueError):
        Principal.from_claims({"sub": str(uuid.uuid4()), "role": "JANITOR"})


def test_from_claims_round_trip():
    user_id = uuid.uuid4()
    p = Principal.from_claims(
        {"sub": str(user_id), "email": "a@b.ng", "role": "NURSE", "hospital_id": str(HOSPITAL_A)}
    )
    assert p.user_id == user_id
    assert p.role == Role.NURSE
    assert p.hospital_id == HOSPITAL_A


def test_every_operation_allows_super_admin():
    for operation, roles in PERMISSIONS.items():
        assert Role.SUPER_ADMIN in roles, operation


def test_unknown_operation_is_a_key_error():
    with pytest.raises(KeyError):
        permitted_roles("patients.teleport")
