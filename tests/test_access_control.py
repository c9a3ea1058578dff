import uuid

from hms.models.patient import Patient
from tests.conftest import make_patient


def test_missing_token_is_unauthenticated(client):
    response = client.get("/api/v1/patients")
    assert response.status_code == 401
    assert response.json() == {"error": "unauthenticated", "message": "No token provided"}


def test_garbage_token_is_unauthenticated(client):
    response = client.get("/api/v1/patients", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid or expired token"


def test_role_gate_lists_required_roles(client, receptionist, auth_headers):
    response = client.get("/api/v1/inventory", headers=auth_headers(receptionist))
    assert response.status_code == 403
    body = response.json()
    assert body["error"] == "forbidden"
    assert body["userRole"] == "RECEPTIONIST"
    assert set(body["requiredRoles"]) == {"SUPER_ADMIN", "PHARMACIST", "ADMIN"}


def test_role_gate_allows_permitted_role(client, pharmacist, auth_headers):
    response = client.get("/api/v1/inventory", headers=auth_headers(pharmacist))
    assert response.status_code == 200
    assert response.json()["items"] == []


def test_cross_tenant_read_is_forbidden(client, db, other_hospital, doctor, auth_headers):
    foreign = make_patient(db, other_hospital)
    response = client.get(f"/api/v1/patients/{foreign.id}", headers=auth_headers(doctor))
    assert response.status_code == 403


def test_cross_tenant_update_and_delete_are_forbidden(client, db, other_hospital, receptionist, auth_headers):
    foreign = make_patient(db, other_hospital)

    update = client.put(
        f"/api/v1/patients/{foreign.id}",
        headers=auth_headers(receptionist),
        json={"phone": "+2348039999999"},
    )
    assert update.status_code == 403

    delete = client.delete(f"/api/v1/patients/{foreign.id}", headers=auth_headers(receptionist))
    assert delete.status_code == 403

    db.expire_all()
    unchanged = db.get(Patient, foreign.id)
    assert unchanged is not None
    assert unchanged.phone == "+2348030000001"


def test_unknown_id_is_not_found(client, doctor, auth_headers):
    response = client.get(f"/api/v1/patients/{uuid.uuid4()}", headers=auth_headers(doctor))
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


def test_super_admin_reads_any_hospital(client, db, other_hospital, super_admin, auth_headers):
    foreign = make_patient(db, other_hospital)
    response = client.get(f"/api/v1/patients/{foreign.id}", headers=auth_headers(super_admin))
    assert response.status_code == 200
    assert response.json()["patient"]["hospitalId"] == str(other_hospital.id)


def test_lists_are_scoped_to_own_hospital(client, db, hospital, other_hospital, doctor, auth_headers):
    make_patient(db, hospital, phone="+2348030000010")
    make_patient(db, other_hospital, phone="+2348030000011")

    response = client.get("/api/v1/patients", headers=auth_headers(doctor))
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 1
    assert body["patients"][0]["hospitalId"] == str(hospital.id)


def test_created_rows_take_the_callers_hospital(client, hospital, other_hospital, receptionist, auth_headers):
    response = client.post(
        "/api/v1/patients",
        headers=auth_headers(receptionist),
        json={
            "firstName": "Bola",
            "lastName": "Ade",
            "dateOfBirth": "1988-02-01",
            "gender": "MALE",
            "phone": "+2348030000020",
            "hospitalId": str(other_hospital.id),
        },
    )
    assert response.status_code == 201
    assert response.json()["patient"]["hospitalId"] == str(hospital.id)
