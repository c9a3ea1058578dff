# hms/services/billing_service.py
"""
Billing arithmetic and payment application.

paid_amount is always the sum of recorded payments and status is derived
from it, so the three can't drift apart.
"""

import logging
import uuid
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from hms.core.errors import InvalidInput, InvalidState
from hms.models.billing import BillingItem, BillingRecord, BillingStatus, Payment
from hms.schemas.billing import BillingItemCreate

logger = logging.getLogger(__name__)

GATEWAY_PAYMENT_METHOD = "PAYSTACK"


def compute_total(items: list[BillingItemCreate]) -> float:
    return round(sum(item.amount * item.quantity for item in items), 2)


def derive_status(total: float, paid: float, current: BillingStatus) -> BillingStatus:
    """
    PAID once paid covers total, PARTIAL while something has been paid,
    otherwise whatever the bill already was.
    """
    if paid >= total and paid > 0:
        return BillingStatus.PAID
    if paid > 0:
        return BillingStatus.PARTIAL
    return current


def build_billing_record(
    *,
    hospital_id: uuid.UUID,
    visit_id: uuid.UUID,
    patient_id: uuid.UUID,
    created_by: uuid.UUID | None,
    items: list[BillingItemCreate],
    insurance_provider: str | None = None,
    insurance_number: str | None = None,
    insurance_coverage: float | None = None,
) -> BillingRecord:
    if not items:
        raise InvalidInput("At least one billing item is required")

    record = BillingRecord(
        hospital_id=hospital_id,
        visit_id=visit_id,
        patient_id=patient_id,
        created_by=created_by,
        total_amount=compute_total(items),
        paid_amount=0,
        status=BillingStatus.PENDING,
        insurance_provider=insurance_provider,
        insurance_number=insurance_number,
        insurance_coverage=insurance_coverage,
    )
    record.items = [
        BillingItem(
            description=item.description,
            category=item.category,
            amount=item.amount,
            quantity=item.quantity,
        )
        for item in items
    ]
    return record


def apply_payment(
    db: Session,
    record: BillingRecord,
    *,
    amount: float,
    method: str,
    reference: str | None = None,
    received_by: uuid.UUID | None = None,
) -> Payment:
    """
    Append a payment, recompute paid_amount from all payments and derive status.
    Caller commits.
    """
    if amount <= 0:
        raise InvalidInput("Payment amount must be greater than zero")
    if record.status == BillingStatus.CANCELLED:
        raise InvalidState("Cannot pay a cancelled bill")

    payment = Payment(
        billing_record_id=record.id,
        amount=amount,
        method=method,
        reference=reference,
        received_by=received_by,
    )
    db.add(payment)
    db.flush()

    paid = (
        db.query(func.coalesce(func.sum(Payment.amount), 0))
        .filter(Payment.billing_record_id == record.id)
        .scalar()
    )
    record.paid_amount = round(float(paid), 2)
    record.status = derive_status(record.total_amount or 0, record.paid_amount, record.status)
    return payment


def payment_reference_exists(db: Session, reference: str) -> bool:
    return db.query(Payment.id).filter(Payment.reference == reference).first() is not None


def apply_gateway_charge(db: Session, data: dict[str, Any]) -> tuple[BillingRecord, Payment] | None:
    """
    Apply a successful gateway charge to the bill named in its metadata.

    Returns None when the event carries nothing to apply or was applied before.
    Gateway amounts are in kobo.
    """
    metadata = data.get("metadata") or {}
    if not isinstance(metadata, dict):
        return None

    record_id = metadata.get("billingRecordId") or metadata.get("billing_record_id")
    reference = data.get("reference")
    if not record_id or not reference:
        logger.info("Webhook charge without billing metadata, ignoring reference=%s", reference)
        return None

    if payment_reference_exists(db, reference):
        logger.info("Webhook charge %s already applied", reference)
        return None

    record = db.get(BillingRecord, uuid.UUID(str(record_id)))
    if not record:
        logger.warning("Webhook charge %s references unknown bill %s", reference, record_id)
        return None

    amount = round(float(data.get("amount") or 0) / 100, 2)
    payment = apply_payment(
        db,
        record,
        amount=amount,
        method=GATEWAY_PAYMENT_METHOD,
        reference=reference,
    )
    db.commit()
    db.refresh(record)
    return record, payment
