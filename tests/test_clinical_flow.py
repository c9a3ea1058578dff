from hms.models.user import Role
from hms.models.visit import Visit, VisitStatus
from tests.conftest import make_patient, make_user, make_visit


def record_vitals(client, headers, visit, category):
    return client.post(
        "/api/v1/vitals",
        headers=headers,
        json={
            "patientId": str(visit.patient_id),
            "visitId": str(visit.id),
            "bloodPressure": "120/80",
            "temperature": 37.9,
            "triageCategory": category,
        },
    )


def test_check_in_and_status_change(client, db, hospital, receptionist, nurse, auth_headers):
    patient = make_patient(db, hospital)

    response = client.post(
        "/api/v1/visits/check-in",
        headers=auth_headers(receptionist),
        json={"patientId": str(patient.id), "department": "Emergency", "reasonForVisit": "Chest pain"},
    )
    assert response.status_code == 201
    visit = response.json()["visit"]
    assert visit["status"] == "CHECKED_IN"
    assert visit["checkedInBy"] == str(receptionist.id)

    queue = client.get("/api/v1/visits/queue", headers=auth_headers(nurse)).json()
    assert [v["id"] for v in queue["visits"]] == [visit["id"]]

    done = client.patch(
        f"/api/v1/visits/{visit['id']}/status", headers=auth_headers(nurse), json={"status": "COMPLETED"}
    )
    assert done.status_code == 200
    assert done.json()["visit"]["completedTime"] is not None


def test_check_in_with_existing_id_conflicts(client, db, hospital, receptionist, auth_headers):
    visit = make_visit(db, make_patient(db, hospital))

    response = client.post(
        "/api/v1/visits/check-in",
        headers=auth_headers(receptionist),
        json={
            "id": str(visit.id),
            "patientId": str(visit.patient_id),
            "department": "Emergency",
            "reasonForVisit": "Again",
        },
    )
    assert response.status_code == 409


def test_check_in_assignee_must_share_the_hospital(
    client, db, hospital, receptionist, doctor, other_admin, super_admin, auth_headers
):
    patient = make_patient(db, hospital)
    body = {"patientId": str(patient.id), "department": "General Medicine", "reasonForVisit": "Cough"}

    foreign = client.post(
        "/api/v1/visits/check-in",
        headers=auth_headers(receptionist),
        json={**body, "assignedTo": str(other_admin.id)},
    )
    assert foreign.status_code == 403

    # Super admins pass the tenant guard, but the assignee still has to work at the patient's hospital
    mismatched = client.post(
        "/api/v1/visits/check-in",
        headers=auth_headers(super_admin),
        json={**body, "assignedTo": str(other_admin.id)},
    )
    assert mismatched.status_code == 400
    assert mismatched.json()["message"] == "Assigned user does not belong to the same hospital"
    assert db.query(Visit).count() == 0

    local = client.post(
        "/api/v1/visits/check-in",
        headers=auth_headers(receptionist),
        json={**body, "assignedTo": str(doctor.id)},
    )
    assert local.status_code == 201
    assert local.json()["visit"]["assignedUser"]["lastName"] == "Bakare"


def test_triage_queue_orders_by_severity(client, db, hospital, nurse, auth_headers):
    headers = auth_headers(nurse)
    standard = make_visit(db, make_patient(db, hospital, phone="+2348030000201"))
    emergency = make_visit(db, make_patient(db, hospital, phone="+2348030000202"))
    non_urgent = make_visit(db, make_patient(db, hospital, phone="+2348030000203"))
    seen = make_visit(db, make_patient(db, hospital, phone="+2348030000204"), status=VisitStatus.IN_PROGRESS)

    for visit, category in ((standard, "STANDARD"), (emergency, "EMERGENCY"), (non_urgent, "NON_URGENT")):
        assert record_vitals(client, headers, visit, category).status_code == 201
    record_vitals(client, headers, seen, "URGENT")

    queue = client.get("/api/v1/vitals/triage/queue", headers=headers).json()["queue"]
    assert [entry["triageCategory"] for entry in queue] == ["EMERGENCY", "STANDARD", "NON_URGENT"]


def test_vitals_reject_mismatched_visit(client, db, hospital, nurse, auth_headers):
    visit = make_visit(db, make_patient(db, hospital, phone="+2348030000211"))
    other = make_patient(db, hospital, phone="+2348030000212")

    response = client.post(
        "/api/v1/vitals",
        headers=auth_headers(nurse),
        json={"patientId": str(other.id), "visitId": str(visit.id), "heartRate": 80},
    )
    assert response.status_code == 400


def test_consultation_starts_visit_and_is_author_only(client, db, hospital, doctor, auth_headers):
    visit = make_visit(db, make_patient(db, hospital))
    payload = {
        "visitId": str(visit.id),
        "patientId": str(visit.patient_id),
        "chiefComplaint": "Fever for three days",
        "diagnosis": "Malaria",
    }

    created = client.post("/api/v1/consultations", headers=auth_headers(doctor), json=payload)
    assert created.status_code == 201
    consultation_id = created.json()["consultation"]["id"]

    db.expire_all()
    assert db.get(Visit, visit.id).status == VisitStatus.IN_PROGRESS

    colleague = make_user(db, hospital, Role.DOCTOR, "dr.eze@stnicholas.ng")
    response = client.put(
        f"/api/v1/consultations/{consultation_id}",
        headers=auth_headers(colleague),
        json={"diagnosis": "Typhoid"},
    )
    assert response.status_code == 403

    response = client.put(
        f"/api/v1/consultations/{consultation_id}",
        headers=auth_headers(doctor),
        json={"treatmentPlan": "ACT for 3 days"},
    )
    assert response.status_code == 200
    assert response.json()["consultation"]["diagnosis"] == "Malaria"


def test_lab_order_lifecycle(client, db, hospital, doctor, auth_headers):
    lab_tech = make_user(db, hospital, Role.LAB_TECH, "lab@stnicholas.ng")
    visit = make_visit(db, make_patient(db, hospital))

    order = client.post(
        "/api/v1/labs",
        headers=auth_headers(doctor),
        json={"visitId": str(visit.id), "patientId": str(visit.patient_id), "testType": "Full Blood Count"},
    )
    assert order.status_code == 201
    order_id = order.json()["labOrder"]["id"]
    assert order.json()["labOrder"]["status"] == "ORDERED"

    pending = client.get("/api/v1/labs/pending", headers=auth_headers(lab_tech)).json()
    assert [o["id"] for o in pending["labOrders"]] == [order_id]

    processing = client.patch(
        f"/api/v1/labs/{order_id}/status", headers=auth_headers(lab_tech), json={"status": "PROCESSING"}
    )
    assert processing.json()["labOrder"]["processedBy"] == str(lab_tech.id)

    results = client.patch(
        f"/api/v1/labs/{order_id}/results",
        headers=auth_headers(lab_tech),
        json={"resultValue": "Hb 13.2 g/dL", "normalRange": "12-16"},
    )
    assert results.status_code == 200
    assert results.json()["labOrder"]["status"] == "COMPLETED"

    again = client.patch(
        f"/api/v1/labs/{order_id}/status", headers=auth_headers(lab_tech), json={"status": "PROCESSING"}
    )
    assert again.status_code == 400
    assert again.json()["error"] == "invalid_state"


def test_doctor_cannot_process_labs(client, db, hospital, doctor, auth_headers):
    visit = make_visit(db, make_patient(db, hospital))
    order_id = client.post(
        "/api/v1/labs",
        headers=auth_headers(doctor),
        json={"visitId": str(visit.id), "patientId": str(visit.patient_id), "testType": "Urinalysis"},
    ).json()["labOrder"]["id"]

    response = client.patch(f"/api/v1/labs/{order_id}/status", headers=auth_headers(doctor), json={"status": "PROCESSING"})
    assert response.status_code == 403


def test_prescription_dispensed_once(client, db, hospital, doctor, pharmacist, auth_headers):
    visit = make_visit(db, make_patient(db, hospital))

    created = client.post(
        "/api/v1/prescriptions",
        headers=auth_headers(doctor),
        json={
            "visitId": str(visit.id),
            "patientId": str(visit.patient_id),
            "items": [
                {"medicationName": "Artemether/Lumefantrine", "dosage": "80/480mg", "frequency": "BD", "duration": "3 days"}
            ],
        },
    )
    assert created.status_code == 201
    prescription = created.json()["prescription"]
    assert prescription["status"] == "PENDING"
    assert len(prescription["items"]) == 1

    dispensed = client.patch(f"/api/v1/prescriptions/{prescription['id']}/dispense", headers=auth_headers(pharmacist))
    assert dispensed.status_code == 200
    assert dispensed.json()["prescription"]["dispensedBy"] == str(pharmacist.id)

    again = client.patch(f"/api/v1/prescriptions/{prescription['id']}/dispense", headers=auth_headers(pharmacist))
    assert again.status_code == 400
    assert again.json()["message"] == "Prescription already dispensed"


def test_prescription_needs_items(client, db, hospital, doctor, auth_headers):
    visit = make_visit(db, make_patient(db, hospital))
    response = client.post(
        "/api/v1/prescriptions",
        headers=auth_headers(doctor),
        json={"visitId": str(visit.id), "patientId": str(visit.patient_id), "items": []},
    )
    assert response.status_code == 400
