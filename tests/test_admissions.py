import pytest

from hms.models.admission import Admission, AdmissionStatus
from hms.models.ward import Bed, BedStatus
from tests.conftest import make_beds, make_patient


def make_admission(db, patient, doctor):
    admission = Admission(
        hospital_id=patient.hospital_id,
        patient_id=patient.id,
        admitted_by=doctor.id,
        diagnosis="Severe malaria",
        status=AdmissionStatus.PENDING,
    )
    db.add(admission)
    db.commit()
    return admission


@pytest.fixture
def beds(db, hospital):
    return make_beds(db, hospital, count=2)


def bed_state(db, bed_id):
    db.expire_all()
    return db.get(Bed, bed_id)


def test_create_admission_starts_pending(client, db, hospital, doctor, auth_headers):
    patient = make_patient(db, hospital)

    response = client.post(
        "/api/v1/admissions",
        headers=auth_headers(doctor),
        json={"patientId": str(patient.id), "diagnosis": "Pneumonia"},
    )
    assert response.status_code == 201
    admission = response.json()["admission"]
    assert admission["status"] == "PENDING"
    assert admission["bedId"] is None
    assert admission["hospitalId"] == str(hospital.id)


def test_assign_bed_occupies_it(client, db, hospital, doctor, ward_manager, beds, auth_headers):
    admission = make_admission(db, make_patient(db, hospital), doctor)

    response = client.put(
        f"/api/v1/admissions/{admission.id}/assign-bed",
        headers=auth_headers(ward_manager),
        json={"bedId": str(beds[0].id)},
    )
    assert response.status_code == 200
    body = response.json()["admission"]
    assert body["status"] == "ADMITTED"
    assert body["bedId"] == str(beds[0].id)
    assert body["assignedWardManager"] == str(ward_manager.id)

    bed = bed_state(db, beds[0].id)
    assert bed.status == BedStatus.OCCUPIED
    assert bed.current_admission_id == admission.id


def test_occupied_bed_cannot_be_assigned_twice(client, db, hospital, doctor, ward_manager, beds, auth_headers):
    first = make_admission(db, make_patient(db, hospital, phone="+2348030000101"), doctor)
    second = make_admission(db, make_patient(db, hospital, phone="+2348030000102"), doctor)
    headers = auth_headers(ward_manager)

    ok = client.put(f"/api/v1/admissions/{first.id}/assign-bed", headers=headers, json={"bedId": str(beds[0].id)})
    assert ok.status_code == 200

    clash = client.put(f"/api/v1/admissions/{second.id}/assign-bed", headers=headers, json={"bedId": str(beds[0].id)})
    assert clash.status_code == 400
    assert clash.json() == {"error": "invalid_state", "message": "Bed is not available"}

    assert bed_state(db, beds[0].id).current_admission_id == first.id
    db.expire_all()
    assert db.get(Admission, second.id).status == AdmissionStatus.PENDING


def test_reassignment_releases_previous_bed(client, db, hospital, doctor, ward_manager, beds, auth_headers):
    admission = make_admission(db, make_patient(db, hospital), doctor)
    headers = auth_headers(ward_manager)

    client.put(f"/api/v1/admissions/{admission.id}/assign-bed", headers=headers, json={"bedId": str(beds[0].id)})
    response = client.put(
        f"/api/v1/admissions/{admission.id}/assign-bed", headers=headers, json={"bedId": str(beds[1].id)}
    )
    assert response.status_code == 200

    old_bed = bed_state(db, beds[0].id)
    assert old_bed.status == BedStatus.AVAILABLE
    assert old_bed.current_patient_id is None
    assert bed_state(db, beds[1].id).status == BedStatus.OCCUPIED


def test_bed_from_another_hospital_is_rejected(
    client, db, hospital, other_hospital, doctor, ward_manager, auth_headers
):
    admission = make_admission(db, make_patient(db, hospital), doctor)
    foreign_bed = make_beds(db, other_hospital, count=1, ward_name="Foreign Ward")[0]

    response = client.put(
        f"/api/v1/admissions/{admission.id}/assign-bed",
        headers=auth_headers(ward_manager),
        json={"bedId": str(foreign_bed.id)},
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Bed does not belong to the same hospital"


def test_discharge_frees_bed_and_second_discharge_fails(
    client, db, hospital, doctor, ward_manager, beds, auth_headers
):
    admission = make_admission(db, make_patient(db, hospital), doctor)
    client.put(
        f"/api/v1/admissions/{admission.id}/assign-bed",
        headers=auth_headers(ward_manager),
        json={"bedId": str(beds[0].id)},
    )

    response = client.put(
        f"/api/v1/admissions/{admission.id}/discharge",
        headers=auth_headers(doctor),
        json={"dischargeSummary": "Completed IV artesunate, stable"},
    )
    assert response.status_code == 200
    body = response.json()["admission"]
    assert body["status"] == "DISCHARGED"
    assert body["dischargedBy"] == str(doctor.id)
    assert body["dischargeDate"] is not None
    assert bed_state(db, beds[0].id).status == BedStatus.AVAILABLE

    again = client.put(f"/api/v1/admissions/{admission.id}/discharge", headers=auth_headers(doctor), json={})
    assert again.status_code == 400
    assert again.json()["message"] == "Patient already discharged"


def test_patient_with_active_admission_cannot_be_deleted(
    client, db, hospital, doctor, ward_manager, beds, auth_headers
):
    patient = make_patient(db, hospital)
    admission = make_admission(db, patient, doctor)
    client.put(
        f"/api/v1/admissions/{admission.id}/assign-bed",
        headers=auth_headers(ward_manager),
        json={"bedId": str(beds[0].id)},
    )

    refused = client.delete(f"/api/v1/patients/{patient.id}", headers=auth_headers(doctor))
    assert refused.status_code == 400
    assert refused.json() == {
        "error": "invalid_state",
        "message": "Patient has an active admission; discharge them first",
    }
    bed = bed_state(db, beds[0].id)
    assert bed.status == BedStatus.OCCUPIED
    assert bed.current_patient_id == patient.id

    client.put(f"/api/v1/admissions/{admission.id}/discharge", headers=auth_headers(doctor), json={})
    deleted = client.delete(f"/api/v1/patients/{patient.id}", headers=auth_headers(doctor))
    assert deleted.status_code == 200

    bed = bed_state(db, beds[0].id)
    assert bed.status == BedStatus.AVAILABLE
    assert bed.current_admission_id is None
    assert db.query(Admission).filter(Admission.id == admission.id).count() == 0


def test_discharged_admission_cannot_get_a_bed(client, db, hospital, doctor, ward_manager, beds, auth_headers):
    admission = make_admission(db, make_patient(db, hospital), doctor)
    client.put(f"/api/v1/admissions/{admission.id}/discharge", headers=auth_headers(doctor), json={})

    response = client.put(
        f"/api/v1/admissions/{admission.id}/assign-bed",
        headers=auth_headers(ward_manager),
        json={"bedId": str(beds[0].id)},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "invalid_state"


def test_nurse_cannot_assign_beds(client, db, hospital, doctor, nurse, beds, auth_headers):
    admission = make_admission(db, make_patient(db, hospital), doctor)

    response = client.put(
        f"/api/v1/admissions/{admission.id}/assign-bed",
        headers=auth_headers(nurse),
        json={"bedId": str(beds[0].id)},
    )
    assert response.status_code == 403


def test_occupied_bed_status_cannot_be_changed_by_hand(
    client, db, hospital, doctor, ward_manager, beds, auth_headers
):
    admission = make_admission(db, make_patient(db, hospital), doctor)
    headers = auth_headers(ward_manager)
    client.put(f"/api/v1/admissions/{admission.id}/assign-bed", headers=headers, json={"bedId": str(beds[0].id)})

    response = client.put(f"/api/v1/wards/beds/{beds[0].id}/status", headers=headers, json={"status": "CLEANING"})
    assert response.status_code == 400

    response = client.put(f"/api/v1/wards/beds/{beds[1].id}/status", headers=headers, json={"status": "OCCUPIED"})
    assert response.status_code == 400
    assert response.json()["error"] == "invalid_input"
