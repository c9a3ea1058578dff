import json

import httpx
import pytest

from hms.core.errors import PaymentServiceError
from hms.dependencies.services import get_payment_client
from hms.models.audit_log import AuditLog
from hms.models.billing import BillingRecord, BillingStatus, Payment
from hms.services.paystack_client import FALLBACK_BANKS, PaystackClient, compute_signature, verify_signature
from tests.conftest import WEBHOOK_SECRET, make_bill, make_patient, make_visit, sign_webhook


def charge_event(record, reference="PSK-REF-0001", kobo=400000):
    return {
        "event": "charge.success",
        "data": {
            "reference": reference,
            "amount": kobo,
            "currency": "NGN",
            "metadata": {"billingRecordId": str(record.id)},
        },
    }


def post_webhook(client, raw, signature):
    return client.post(
        "/api/v1/payments/webhook",
        content=raw,
        headers={"x-paystack-signature": signature, "Content-Type": "application/json"},
    )


def test_verify_signature():
    body = b'{"event":"charge.success"}'
    signature = compute_signature("whsec", body)

    assert verify_signature("whsec", body, signature)
    assert not verify_signature("whsec", body + b" ", signature)
    assert not verify_signature("other", body, signature)
    assert not verify_signature(None, body, signature)
    assert not verify_signature("whsec", body, None)


def test_webhook_rejects_bad_signature(client, db, hospital):
    record = make_bill(db, make_visit(db, make_patient(db, hospital)))
    raw, _ = sign_webhook(charge_event(record))

    response = post_webhook(client, raw, "0" * 128)
    assert response.status_code == 401
    assert response.json()["error"] == "unauthenticated"
    assert db.query(Payment).count() == 0


def test_webhook_applies_charge_once(client, db, hospital):
    record = make_bill(db, make_visit(db, make_patient(db, hospital)), total=10000)
    raw, signature = sign_webhook(charge_event(record, kobo=400000))

    first = post_webhook(client, raw, signature)
    assert first.status_code == 200
    assert first.json() == {"received": True}

    replay = post_webhook(client, raw, signature)
    assert replay.status_code == 200

    db.expire_all()
    payments = db.query(Payment).all()
    assert len(payments) == 1
    assert payments[0].amount == 4000
    assert payments[0].method == "PAYSTACK"
    bill = db.get(BillingRecord, record.id)
    assert bill.paid_amount == 4000
    assert bill.status == BillingStatus.PARTIAL

    entry = db.query(AuditLog).filter(AuditLog.action == "PAYMENT_WEBHOOK").one()
    assert entry.details["reference"] == "PSK-REF-0001"
    assert entry.hospital_id == hospital.id


def test_webhook_acknowledges_unprocessable_payload(client, db):
    raw = b"{not json"
    response = post_webhook(client, raw, compute_signature(WEBHOOK_SECRET, raw))
    assert response.status_code == 200
    assert response.json() == {"received": True}


def test_webhook_ignores_other_events(client, db, hospital):
    record = make_bill(db, make_visit(db, make_patient(db, hospital)))
    event = charge_event(record)
    event["event"] = "transfer.success"
    raw, signature = sign_webhook(event)

    assert post_webhook(client, raw, signature).status_code == 200
    assert db.query(Payment).count() == 0


def test_webhook_is_not_logged_as_api_request(client, db, hospital):
    record = make_bill(db, make_visit(db, make_patient(db, hospital)))
    raw, signature = sign_webhook(charge_event(record))
    post_webhook(client, raw, signature)

    assert db.query(AuditLog).filter(AuditLog.action == "API_REQUEST").count() == 0


def paystack_transport(calls):
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if request.url.path == "/transaction/initialize":
            payload = json.loads(request.content)
            return httpx.Response(
                200,
                json={
                    "status": True,
                    "message": "Authorization URL created",
                    "data": {
                        "authorization_url": "https://checkout.paystack.com/abc123",
                        "access_code": "abc123",
                        "reference": payload["reference"],
                    },
                },
            )
        if request.url.path.startswith("/transaction/verify/"):
            return httpx.Response(
                200,
                json={
                    "status": True,
                    "message": "Verification successful",
                    "data": {
                        "reference": "INV-77",
                        "amount": 250000,
                        "currency": "NGN",
                        "channel": "card",
                        "status": "success",
                        "paid_at": "2025-03-04T10:00:00.000Z",
                        "customer": {"email": "payer@example.ng", "phone": "+2348030000000"},
                        "authorization": {"last4": "4081"},
                    },
                },
            )
        return httpx.Response(500, json={"status": False, "message": "Gateway exploded"})

    return httpx.MockTransport(handler)


def test_client_initialize_sends_secret_and_defaults(settings):
    calls = []
    client = PaystackClient(settings, transport=paystack_transport(calls))

    result = client.initialize_transaction(email="payer@example.ng", amount=250000, reference="INV-77")

    assert result == {
        "authorization_url": "https://checkout.paystack.com/abc123",
        "access_code": "abc123",
        "reference": "INV-77",
    }
    sent = json.loads(calls[0].content)
    assert sent["currency"] == "NGN"
    assert sent["channels"] == ["card", "bank", "ussd", "bank_transfer"]
    assert calls[0].headers["Authorization"] == "Bearer sk_test_0a1b2c"


def test_client_verify_trims_gateway_payload(settings):
    client = PaystackClient(settings, transport=paystack_transport([]))

    result = client.verify_transaction("INV-77")

    assert result["status"] is True
    assert result["data"]["amount"] == 250000
    assert result["data"]["customer"] == {"email": "payer@example.ng"}
    assert "authorization" not in result["data"]


def test_client_gateway_error_becomes_payment_error(settings):
    client = PaystackClient(settings, transport=paystack_transport([]))

    with pytest.raises(PaymentServiceError, match="Gateway exploded"):
        client.list_banks()


def test_unconfigured_client(settings):
    client = PaystackClient(settings.model_copy(update={"paystack_secret_key": None}))

    assert client.list_banks() == FALLBACK_BANKS
    with pytest.raises(PaymentServiceError) as excinfo:
        client.verify_transaction("INV-77")
    assert excinfo.value.status_code == 503


def test_initialize_endpoint(app, client, settings, billing_officer, auth_headers):
    app.dependency_overrides[get_payment_client] = lambda: PaystackClient(
        settings, transport=paystack_transport([])
    )

    response = client.post(
        "/api/v1/payments/initialize",
        headers=auth_headers(billing_officer),
        json={"email": "payer@example.ng", "amount": 250000, "reference": "INV-77"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["status"] is True
    assert body["data"]["authorization_url"] == "https://checkout.paystack.com/abc123"


def test_gateway_endpoints_need_billing_role(client, nurse, auth_headers):
    response = client.get("/api/v1/payments/banks", headers=auth_headers(nurse))
    assert response.status_code == 403
