from hms.models.admission import Admission, AdmissionStatus
from tests.conftest import make_patient


def admitted(db, hospital, doctor, status=AdmissionStatus.ADMITTED, phone="+2348030000301"):
    admission = Admission(
        hospital_id=hospital.id,
        patient_id=make_patient(db, hospital, phone=phone).id,
        admitted_by=doctor.id,
        diagnosis="Post-operative care",
        status=status,
    )
    db.add(admission)
    db.commit()
    return admission


def test_round_is_recorded_and_listed(client, db, hospital, doctor, nurse, auth_headers):
    admission = admitted(db, hospital, doctor)

    response = client.post(
        "/api/v1/rounds",
        headers=auth_headers(nurse),
        json={
            "admissionId": str(admission.id),
            "roundType": "MORNING",
            "patientCondition": "STABLE",
            "medicationGiven": "IV Ceftriaxone 1g",
        },
    )
    assert response.status_code == 201
    assert response.json()["round"]["nurseId"] == str(nurse.id)

    listed = client.get(f"/api/v1/rounds/admission/{admission.id}", headers=auth_headers(doctor)).json()
    assert len(listed["rounds"]) == 1


def test_no_rounds_after_discharge(client, db, hospital, doctor, nurse, auth_headers):
    admission = admitted(db, hospital, doctor, status=AdmissionStatus.DISCHARGED)

    response = client.post(
        "/api/v1/rounds",
        headers=auth_headers(nurse),
        json={"admissionId": str(admission.id), "roundType": "EVENING", "patientCondition": "STABLE"},
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Patient already discharged"


def test_due_rounds_only_for_admitted_patients(client, db, hospital, doctor, nurse, auth_headers):
    current = admitted(db, hospital, doctor, phone="+2348030000311")
    later = admitted(db, hospital, doctor, phone="+2348030000312")
    headers = auth_headers(nurse)

    for admission, due in ((current, "2020-01-01T08:00:00Z"), (later, "2099-01-01T08:00:00Z")):
        client.post(
            "/api/v1/rounds",
            headers=headers,
            json={
                "admissionId": str(admission.id),
                "roundType": "MORNING",
                "patientCondition": "STABLE",
                "nextRoundDue": due,
            },
        )

    due = client.get("/api/v1/rounds/due", headers=headers).json()["rounds"]
    assert [r["admissionId"] for r in due] == [str(current.id)]


def test_doctor_review(client, db, hospital, doctor, nurse, auth_headers):
    admission = admitted(db, hospital, doctor)

    response = client.post(
        "/api/v1/reviews",
        headers=auth_headers(doctor),
        json={"admissionId": str(admission.id), "findings": "Wound healing well"},
    )
    assert response.status_code == 201
    assert response.json()["review"]["doctorId"] == str(doctor.id)

    assert client.post(
        "/api/v1/reviews",
        headers=auth_headers(nurse),
        json={"admissionId": str(admission.id), "findings": "n/a"},
    ).status_code == 403
