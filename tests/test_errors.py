from fastapi.testclient import TestClient

from hms.core.errors import Conflict, InvalidInput, PaymentServiceError
from tests.conftest import make_inventory_item, make_patient


def test_error_classes_carry_status_and_code():
    assert (InvalidInput.status_code, InvalidInput.code) == (400, "invalid_input")
    assert (Conflict.status_code, Conflict.code) == (409, "conflict")
    assert PaymentServiceError("down", status_code=503).status_code == 503


def test_validation_errors_use_the_envelope(client, receptionist, auth_headers):
    response = client.post("/api/v1/patients", headers=auth_headers(receptionist), json={"lastName": "Ade"})
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "invalid_input"
    assert body["message"].startswith("Invalid or missing field: ")
    assert "firstName" in {f["field"] for f in body["fields"]}


def test_null_for_required_column_is_invalid_input(client, db, hospital, receptionist, auth_headers):
    patient = make_patient(db, hospital)

    response = client.put(
        f"/api/v1/patients/{patient.id}",
        headers=auth_headers(receptionist),
        json={"firstName": None},
    )
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "invalid_input"
    assert body["fields"][0]["field"] == "firstName"

    cleared = client.put(
        f"/api/v1/patients/{patient.id}",
        headers=auth_headers(receptionist),
        json={"address": None, "lastName": "Okonkwo"},
    )
    assert cleared.status_code == 200
    assert cleared.json()["patient"]["lastName"] == "Okonkwo"


def test_null_inventory_price_is_invalid_input(client, db, hospital, pharmacist, auth_headers):
    item = make_inventory_item(db, hospital)

    response = client.put(
        f"/api/v1/inventory/{item.id}",
        headers=auth_headers(pharmacist),
        json={"unitPrice": None},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "invalid_input"


def test_malformed_uuid_is_invalid_input(client, doctor, auth_headers):
    response = client.get("/api/v1/patients/not-a-uuid", headers=auth_headers(doctor))
    assert response.status_code == 400
    assert response.json()["error"] == "invalid_input"


def test_unknown_route_is_not_found(client):
    response = client.get("/api/v1/nowhere")
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


def test_unexpected_errors_hide_details_in_production(app, settings):
    app.state.settings = settings.model_copy(update={"app_env": "production"})

    @app.get("/boom")
    def boom():
        raise RuntimeError("kaboom")

    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/boom")

    assert response.status_code == 500
    assert response.json() == {"error": "unexpected", "message": "Internal server error"}


def test_unexpected_errors_show_stack_outside_production(app):
    @app.get("/boom")
    def boom():
        raise RuntimeError("kaboom")

    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/boom")

    assert response.status_code == 500
    body = response.json()
    assert body["message"] == "kaboom"
    assert body["stack"]


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
