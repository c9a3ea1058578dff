# hms/api/v1/endpoints/payments.py
import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.encoders import jsonable_encoder
from starlette.concurrency import run_in_threadpool

from hms.core.errors import Unauthenticated
from hms.core.services import AppServices
from hms.core.tenant_context import Principal
from hms.dependencies.authz import require_permission
from hms.dependencies.services import get_payment_client, get_services
from hms.schemas.billing import BillingRecordRead
from hms.schemas.payment import (
    GatewayResponse,
    InitializePaymentRequest,
    VerifyPaymentRequest,
    WebhookAck,
)
from hms.services.billing_service import apply_gateway_charge
from hms.services.paystack_client import PaystackClient, verify_signature

router = APIRouter()
logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "x-paystack-signature"


@router.post("/initialize", response_model=GatewayResponse)
def initialize_payment(
    payload: InitializePaymentRequest,
    principal: Principal = Depends(require_permission("payments.gateway")),
    client: PaystackClient = Depends(get_payment_client),
) -> GatewayResponse:
    """
    Start a Paystack checkout. Amount is in kobo, currency NGN.
    """
    data = client.initialize_transaction(
        email=payload.email,
        amount=payload.amount,
        reference=payload.reference,
        metadata=payload.metadata,
        channels=payload.channels,
    )
    logger.info("Payment initialized reference=%s by user=%s", payload.reference, principal.user_id)
    return GatewayResponse(status=True, message="Authorization URL created", data=data)


@router.post("/verify", response_model=GatewayResponse)
def verify_payment(
    payload: VerifyPaymentRequest,
    principal: Principal = Depends(require_permission("payments.gateway")),
    client: PaystackClient = Depends(get_payment_client),
) -> GatewayResponse:
    result = client.verify_transaction(payload.reference)
    return GatewayResponse(**result)


@router.get("/banks", response_model=GatewayResponse)
def list_banks(
    principal: Principal = Depends(require_permission("payments.gateway")),
    client: PaystackClient = Depends(get_payment_client),
) -> GatewayResponse:
    return GatewayResponse(status=True, message="Banks retrieved", data=client.list_banks())


def _apply_charge(services: AppServices, data: dict) -> dict | None:
    with services.database.session() as db:
        applied = apply_gateway_charge(db, data)
        if applied is None:
            return None
        record, payment = applied
        body = BillingRecordRead.model_validate(record)
        details = {
            "reference": payment.reference,
            "amount": payment.amount,
            "billingRecordId": body.id,
            "status": body.status,
        }
        payment_id = payment.id

    services.audit.record(
        action="PAYMENT_WEBHOOK",
        entity="PAYMENT",
        entity_id=payment_id,
        details=details,
        hospital_id=body.hospital_id,
    )
    return jsonable_encoder(body, by_alias=True)


@router.post("/webhook", response_model=WebhookAck)
async def paystack_webhook(
    request: Request,
    services: AppServices = Depends(get_services),
) -> WebhookAck:
    """
    Paystack event callback.

    A bad signature is 401. Once the signature checks out the answer is
    always 200, even when applying the event fails, so Paystack stops retrying.
    """
    body = await request.body()
    if not verify_signature(services.payments.signing_secret, body, request.headers.get(SIGNATURE_HEADER)):
        logger.warning("Rejected Paystack webhook with invalid signature")
        raise Unauthenticated("Invalid signature")

    try:
        event = json.loads(body)
        if event.get("event") == "charge.success":
            record = await run_in_threadpool(_apply_charge, services, event.get("data") or {})
            if record:
                await services.live_updates.broadcast(record["hospitalId"], "billing", "payment", record)
        else:
            logger.info("Ignoring Paystack event %s", event.get("event"))
    except Exception:
        logger.exception("Non-fatal: failed to process Paystack webhook")

    return WebhookAck(received=True)
