import pytest

from hms.models.billing import BillingStatus
from hms.schemas.billing import BillingItemCreate
from hms.services.billing_service import compute_total, derive_status
from tests.conftest import make_bill, make_patient, make_visit


def test_compute_total_multiplies_quantity():
    items = [
        BillingItemCreate(description="Consultation", category="CONSULTATION", amount=5000, quantity=1),
        BillingItemCreate(description="Paracetamol", category="DRUG", amount=50.25, quantity=4),
    ]
    assert compute_total(items) == 5201.0


@pytest.mark.parametrize(
    "total, paid, current, expected",
    [
        (1000, 0, BillingStatus.PENDING, BillingStatus.PENDING),
        (1000, 400, BillingStatus.PENDING, BillingStatus.PARTIAL),
        (1000, 1000, BillingStatus.PARTIAL, BillingStatus.PAID),
        (1000, 1200, BillingStatus.PENDING, BillingStatus.PAID),
        (0, 0, BillingStatus.PENDING, BillingStatus.PENDING),
    ],
)
def test_derive_status(total, paid, current, expected):
    assert derive_status(total, paid, current) == expected


def test_create_bill_computes_total(client, db, hospital, billing_officer, auth_headers):
    visit = make_visit(db, make_patient(db, hospital))

    response = client.post(
        "/api/v1/billing",
        headers=auth_headers(billing_officer),
        json={
            "visitId": str(visit.id),
            "patientId": str(visit.patient_id),
            "items": [
                {"description": "Consultation", "category": "CONSULTATION", "amount": 5000},
                {"description": "Malaria RDT", "category": "LAB", "amount": 1500, "quantity": 2},
            ],
        },
    )
    assert response.status_code == 201
    record = response.json()["billingRecord"]
    assert record["totalAmount"] == 8000
    assert record["paidAmount"] == 0
    assert record["status"] == "PENDING"
    assert len(record["items"]) == 2


def test_payments_accumulate_until_paid(client, db, hospital, billing_officer, auth_headers):
    record = make_bill(db, make_visit(db, make_patient(db, hospital)), total=10000)
    headers = auth_headers(billing_officer)

    first = client.post(
        "/api/v1/billing/payment",
        headers=headers,
        json={"billingRecordId": str(record.id), "amount": 4000, "method": "CASH"},
    )
    assert first.status_code == 201
    assert first.json()["billingRecord"]["status"] == "PARTIAL"
    assert first.json()["billingRecord"]["balance"] == 6000

    second = client.post(
        "/api/v1/billing/payment",
        headers=headers,
        json={"billingRecordId": str(record.id), "amount": 6000, "method": "TRANSFER", "reference": "TRF-889"},
    )
    assert second.status_code == 201
    body = second.json()["billingRecord"]
    assert body["paidAmount"] == 10000
    assert body["status"] == "PAID"
    assert len(body["payments"]) == 2


def test_cancelled_bill_takes_no_payment(client, db, hospital, billing_officer, auth_headers):
    record = make_bill(db, make_visit(db, make_patient(db, hospital)))
    record.status = BillingStatus.CANCELLED
    db.commit()

    response = client.post(
        "/api/v1/billing/payment",
        headers=auth_headers(billing_officer),
        json={"billingRecordId": str(record.id), "amount": 100, "method": "CASH"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "invalid_state"


def test_non_positive_payment_is_invalid(client, db, hospital, billing_officer, auth_headers):
    record = make_bill(db, make_visit(db, make_patient(db, hospital)))

    response = client.post(
        "/api/v1/billing/payment",
        headers=auth_headers(billing_officer),
        json={"billingRecordId": str(record.id), "amount": 0, "method": "CASH"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "invalid_input"


def test_outstanding_lists_unpaid_bills(client, db, hospital, billing_officer, auth_headers):
    patient = make_patient(db, hospital)
    open_bill = make_bill(db, make_visit(db, patient))
    paid_bill = make_bill(db, make_visit(db, patient))
    paid_bill.status = BillingStatus.PAID
    paid_bill.paid_amount = paid_bill.total_amount
    db.commit()

    response = client.get("/api/v1/billing/outstanding", headers=auth_headers(billing_officer))
    assert response.status_code == 200
    ids = [r["id"] for r in response.json()["billingRecords"]]
    assert ids == [str(open_bill.id)]
