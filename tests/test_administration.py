import uuid

from hms.models.audit_log import AuditLog
from hms.models.hospital import Hospital
from hms.models.user import Role, User

NEW_HOSPITAL = {
    "name": "Abuja Heart Centre",
    "email": "Info@AbujaHeart.ng",
    "phone": "+2349012345678",
    "adminEmail": "admin@abujaheart.ng",
    "adminPassword": "Adm1nPass!",
}


def test_super_admin_creates_hospital_with_admin(client, db, super_admin, auth_headers):
    response = client.post("/api/v1/hospitals", headers=auth_headers(super_admin), json=NEW_HOSPITAL)
    assert response.status_code == 201
    body = response.json()
    assert body["hospital"]["email"] == "info@abujaheart.ng"
    assert body["admin"]["role"] == "ADMIN"
    assert body["admin"]["hospitalId"] == body["hospital"]["id"]

    login = client.post(
        "/api/v1/auth/login", json={"email": "admin@abujaheart.ng", "password": "Adm1nPass!"}
    )
    assert login.status_code == 200


def test_hospital_with_taken_admin_email_creates_nothing(client, db, super_admin, admin, auth_headers):
    response = client.post(
        "/api/v1/hospitals",
        headers=auth_headers(super_admin),
        json={**NEW_HOSPITAL, "adminEmail": admin.email},
    )
    assert response.status_code == 409
    assert db.query(Hospital).filter(Hospital.email == "info@abujaheart.ng").count() == 0


def test_admin_cannot_manage_hospitals(client, admin, auth_headers):
    assert client.get("/api/v1/hospitals", headers=auth_headers(admin)).status_code == 403


def test_admin_reads_only_own_hospital(client, hospital, other_hospital, admin, auth_headers):
    assert client.get(f"/api/v1/hospitals/{hospital.id}", headers=auth_headers(admin)).status_code == 200
    assert client.get(f"/api/v1/hospitals/{other_hospital.id}", headers=auth_headers(admin)).status_code == 403


def test_only_super_admin_toggles_active(client, db, hospital, admin, super_admin, auth_headers):
    response = client.put(f"/api/v1/hospitals/{hospital.id}", headers=auth_headers(admin), json={"active": False})
    assert response.status_code == 403

    response = client.put(f"/api/v1/hospitals/{hospital.id}", headers=auth_headers(admin), json={"phone": "+2348000000000"})
    assert response.status_code == 200

    response = client.delete(f"/api/v1/hospitals/{hospital.id}", headers=auth_headers(super_admin))
    assert response.status_code == 200
    db.expire_all()
    assert db.get(Hospital, hospital.id).active is False


def test_admin_creates_staff_in_own_hospital(client, hospital, other_hospital, admin, auth_headers):
    payload = {
        "email": "New.Nurse@StNicholas.ng",
        "password": "Nurse123!",
        "firstName": "Ngozi",
        "lastName": "Eke",
        "role": "NURSE",
    }
    response = client.post("/api/v1/users", headers=auth_headers(admin), json=payload)
    assert response.status_code == 201
    user = response.json()["user"]
    assert user["email"] == "new.nurse@stnicholas.ng"
    assert user["hospitalId"] == str(hospital.id)

    duplicate = client.post("/api/v1/users", headers=auth_headers(admin), json=payload)
    assert duplicate.status_code == 409

    foreign = client.post(
        "/api/v1/users",
        headers=auth_headers(admin),
        json={**payload, "email": "x@ikejaclinic.ng", "hospitalId": str(other_hospital.id)},
    )
    assert foreign.status_code == 403


def test_admin_cannot_create_super_admin(client, admin, auth_headers):
    response = client.post(
        "/api/v1/users",
        headers=auth_headers(admin),
        json={"email": "root2@example.ng", "password": "Passw0rd!", "firstName": "A", "lastName": "B", "role": "SUPER_ADMIN"},
    )
    assert response.status_code == 403


def test_deactivated_user_is_signed_out(client, db, admin, doctor, auth_headers):
    tokens = client.post("/api/v1/auth/login", json={"email": doctor.email, "password": "Passw0rd!23"}).json()

    response = client.patch(f"/api/v1/users/{doctor.id}/deactivate", headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.json()["user"]["active"] is False

    assert client.post("/api/v1/auth/refresh", json={"refreshToken": tokens["refreshToken"]}).status_code == 401
    assert client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {tokens['accessToken']}"}).status_code == 401


def test_admin_cannot_deactivate_self(client, admin, auth_headers):
    response = client.patch(f"/api/v1/users/{admin.id}/deactivate", headers=auth_headers(admin))
    assert response.status_code == 400


def test_user_listing_is_scoped(client, db, admin, doctor, other_admin, auth_headers):
    response = client.get("/api/v1/users", headers=auth_headers(admin))
    assert response.status_code == 200
    emails = {u["email"] for u in response.json()["users"]}
    assert doctor.email in emails
    assert other_admin.email not in emails


def test_reset_password(client, db, admin, nurse, auth_headers):
    response = client.post(
        f"/api/v1/users/{nurse.id}/reset-password",
        headers=auth_headers(admin),
        json={"newPassword": "Fresh-Pass-1"},
    )
    assert response.status_code == 200

    login = client.post("/api/v1/auth/login", json={"email": nurse.email, "password": "Fresh-Pass-1"})
    assert login.status_code == 200
    assert db.query(User).filter(User.role == Role.NURSE).count() == 1


def test_permanent_hospital_delete_keeps_audit_history(client, db, super_admin, auth_headers):
    created = client.post("/api/v1/hospitals", headers=auth_headers(super_admin), json=NEW_HOSPITAL)
    hospital_id = created.json()["hospital"]["id"]
    admin_id = created.json()["admin"]["id"]

    response = client.delete(
        f"/api/v1/hospitals/{hospital_id}",
        params={"permanent": "true"},
        headers=auth_headers(super_admin),
    )
    assert response.status_code == 200
    assert db.query(User).filter(User.id == uuid.UUID(admin_id)).count() == 0

    db.expire_all()
    creation = db.query(AuditLog).filter(AuditLog.action == "CREATE_HOSPITAL").one()
    assert str(creation.hospital_id) == hospital_id
    assert creation.details["adminEmail"] == "admin@abujaheart.ng"

    removal = db.query(AuditLog).filter(AuditLog.action == "DELETE_HOSPITAL").one()
    assert str(removal.hospital_id) == hospital_id
    assert removal.user_id == super_admin.id


def test_promotion_to_super_admin_detaches_hospital(client, db, doctor, super_admin, auth_headers):
    tokens = client.post("/api/v1/auth/login", json={"email": doctor.email, "password": "Passw0rd!23"}).json()

    response = client.put(
        f"/api/v1/users/{doctor.id}",
        headers=auth_headers(super_admin),
        json={"role": "SUPER_ADMIN"},
    )
    assert response.status_code == 200
    body = response.json()["user"]
    assert body["role"] == "SUPER_ADMIN"
    assert body["hospitalId"] is None

    assert client.post("/api/v1/auth/refresh", json={"refreshToken": tokens["refreshToken"]}).status_code == 401
