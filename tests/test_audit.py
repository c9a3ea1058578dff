import datetime
import logging
import uuid
from decimal import Decimal

from hms.models.audit_log import AuditLog
from hms.models.patient import Patient
from hms.services.audit_service import AuditRecorder, to_json_document


def test_to_json_document_stringifies_unknown_values():
    ident = uuid.uuid4()
    document = to_json_document({"id": ident, "when": datetime.date(2025, 1, 2), "amount": Decimal("5.50")})
    assert document == {"id": str(ident), "when": "2025-01-02", "amount": "5.50"}


def test_to_json_document_wraps_scalars():
    assert to_json_document(None) is None
    assert to_json_document(["a", "b"]) == {"value": ["a", "b"]}


def test_recorder_swallows_storage_failures(caplog):
    def broken_session():
        raise RuntimeError("database is down")

    recorder = AuditRecorder(broken_session)
    with caplog.at_level(logging.ERROR, logger="hms.services.audit_service"):
        recorder.record(action="CREATE_PATIENT", entity="PATIENT", entity_id="p-1")

    assert "failed to write audit log" in caplog.text


def test_recorder_writes_one_row(services, db, hospital):
    services.audit.record(
        action="UPDATE_SETTINGS",
        entity="HOSPITAL",
        entity_id=hospital.id,
        details={"updatedFields": ["currency"]},
        hospital_id=hospital.id,
    )

    rows = db.query(AuditLog).filter(AuditLog.action == "UPDATE_SETTINGS").all()
    assert len(rows) == 1
    assert rows[0].entity_id == str(hospital.id)
    assert rows[0].details == {"updatedFields": ["currency"]}


def test_mutation_writes_operation_and_api_request_entries(client, db, receptionist, auth_headers):
    response = client.post(
        "/api/v1/patients",
        headers={**auth_headers(receptionist), "User-Agent": "reception-desk/1.0"},
        json={
            "firstName": "Sade",
            "lastName": "Ojo",
            "dateOfBirth": "1975-09-09",
            "gender": "FEMALE",
            "phone": "+2348030000030",
        },
    )
    assert response.status_code == 201
    patient_id = response.json()["patient"]["id"]

    operation = db.query(AuditLog).filter(AuditLog.action == "CREATE_PATIENT").one()
    assert operation.entity == "PATIENT"
    assert operation.entity_id == patient_id
    assert operation.user_id == receptionist.id
    assert operation.user_agent == "reception-desk/1.0"

    api_request = db.query(AuditLog).filter(AuditLog.action == "API_REQUEST").one()
    assert api_request.details["method"] == "POST"
    assert api_request.details["path"] == "/api/v1/patients"
    assert api_request.details["statusCode"] == 201


def test_mutation_succeeds_when_audit_storage_fails(client, db, services, receptionist, auth_headers, caplog):
    def broken_session():
        raise RuntimeError("audit database is down")

    services.audit.session_factory = broken_session

    with caplog.at_level(logging.ERROR, logger="hms.services.audit_service"):
        response = client.post(
            "/api/v1/patients",
            headers=auth_headers(receptionist),
            json={
                "firstName": "Yemi",
                "lastName": "Alade",
                "dateOfBirth": "1992-03-15",
                "gender": "FEMALE",
                "phone": "+2348030000031",
            },
        )

    assert response.status_code == 201
    assert db.query(Patient).filter(Patient.phone == "+2348030000031").count() == 1
    assert db.query(AuditLog).count() == 0
    assert "failed to write audit log" in caplog.text


def test_reads_and_anonymous_calls_skip_api_request_entry(client, db, doctor, auth_headers):
    client.get("/api/v1/patients", headers=auth_headers(doctor))
    client.post("/api/v1/patients", json={})

    assert db.query(AuditLog).filter(AuditLog.action == "API_REQUEST").count() == 0


def test_login_is_not_logged_as_api_request(client, db, doctor):
    response = client.post("/api/v1/auth/login", json={"email": doctor.email, "password": "Passw0rd!23"})
    assert response.status_code == 200

    assert db.query(AuditLog).filter(AuditLog.action == "LOGIN").count() == 1
    assert db.query(AuditLog).filter(AuditLog.action == "API_REQUEST").count() == 0


def test_audit_listing_is_scoped(client, services, hospital, other_hospital, admin, auth_headers):
    services.audit.record(action="CREATE_WARD", entity="WARD", hospital_id=hospital.id)
    services.audit.record(action="CREATE_WARD", entity="WARD", hospital_id=other_hospital.id)

    response = client.get("/api/v1/audit", params={"action": "WARD"}, headers=auth_headers(admin))
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 1
    assert body["logs"][0]["hospitalId"] == str(hospital.id)
