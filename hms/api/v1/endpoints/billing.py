# hms/api/v1/endpoints/billing.py
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session, joinedload, selectinload

from hms.core.database import get_db
from hms.core.errors import InvalidInput, NotFound
from hms.core.tenant_context import Principal, scope_hospital_id
from hms.dependencies.auth import get_auditor
from hms.dependencies.authz import require_permission
from hms.dependencies.services import get_change_notifier
from hms.models.billing import OUTSTANDING_STATUSES, BillingRecord
from hms.models.patient import Patient
from hms.models.visit import Visit
from hms.schemas.billing import (
    BillingRecordCreate,
    BillingRecordEnvelope,
    BillingRecordList,
    BillingRecordRead,
    PaymentApplied,
    PaymentCreate,
    PaymentRead,
)
from hms.services import billing_service
from hms.services.audit_service import RequestAuditor
from hms.services.live_updates import ChangeNotifier
from hms.utils.lookups import commit_or_raise, get_owned_or_404

router = APIRouter()


def _records(db: Session):
    return db.query(BillingRecord).options(
        selectinload(BillingRecord.items),
        selectinload(BillingRecord.payments),
        joinedload(BillingRecord.patient),
    )


def _reload_record(db: Session, record_id: UUID) -> BillingRecord:
    record = _records(db).filter(BillingRecord.id == record_id).populate_existing().first()
    if not record:
        raise NotFound("Billing record not found")
    return record


@router.post("", response_model=BillingRecordEnvelope, status_code=status.HTTP_201_CREATED)
def create_bill(
    payload: BillingRecordCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("billing.write")),
    audit: RequestAuditor = Depends(get_auditor),
    notifier: ChangeNotifier = Depends(get_change_notifier),
) -> BillingRecordEnvelope:
    """
    Bill a visit. total = sum(amount * quantity) over the items.
    """
    visit = get_owned_or_404(db, Visit, payload.visit_id, principal, "Visit")
    if visit.patient_id != payload.patient_id:
        raise InvalidInput("Visit does not belong to this patient")

    record = billing_service.build_billing_record(
        hospital_id=visit.hospital_id,
        visit_id=visit.id,
        patient_id=visit.patient_id,
        created_by=principal.user_id,
        items=payload.items,
        insurance_provider=payload.insurance_provider,
        insurance_number=payload.insurance_number,
        insurance_coverage=payload.insurance_coverage,
    )
    db.add(record)
    commit_or_raise(db, "create bill")

    body = BillingRecordRead.model_validate(_reload_record(db, record.id))
    audit(
        "CREATE_BILL",
        "BILLING",
        body.id,
        {"totalAmount": body.total_amount, "itemCount": len(body.items), "visitId": body.visit_id},
        hospital_id=body.hospital_id,
    )
    notifier.publish(body.hospital_id, "billing", "created", body)
    return BillingRecordEnvelope(billing_record=body)


@router.post("/payment", response_model=PaymentApplied, status_code=status.HTTP_201_CREATED)
def add_payment(
    payload: PaymentCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("billing.write")),
    audit: RequestAuditor = Depends(get_auditor),
    notifier: ChangeNotifier = Depends(get_change_notifier),
) -> PaymentApplied:
    """
    Record a payment. paidAmount and status are recomputed from all payments.
    """
    record = get_owned_or_404(db, BillingRecord, payload.billing_record_id, principal, "Billing record")
    payment = billing_service.apply_payment(
        db,
        record,
        amount=payload.amount,
        method=payload.method,
        reference=payload.reference,
        received_by=principal.user_id,
    )
    commit_or_raise(db, "record payment")
    db.refresh(payment)

    payment_body = PaymentRead.model_validate(payment)
    record_body = BillingRecordRead.model_validate(_reload_record(db, record.id))
    audit(
        "ADD_PAYMENT",
        "PAYMENT",
        payment_body.id,
        {
            "billingRecordId": record_body.id,
            "amount": payment_body.amount,
            "method": payment_body.method,
            "status": record_body.status,
        },
        hospital_id=record_body.hospital_id,
    )
    notifier.publish(record_body.hospital_id, "billing", "payment", record_body)
    return PaymentApplied(payment=payment_body, billing_record=record_body)


@router.get("/outstanding", response_model=BillingRecordList)
def outstanding_bills(
    hospital_id: UUID | None = Query(None, alias="hospitalId"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("billing.read")),
) -> BillingRecordList:
    query = _records(db).filter(BillingRecord.status.in_(OUTSTANDING_STATUSES))
    scope = scope_hospital_id(principal, hospital_id)
    if scope is not None:
        query = query.filter(BillingRecord.hospital_id == scope)
    records = query.order_by(BillingRecord.created_at.desc()).all()
    return BillingRecordList(billing_records=[BillingRecordRead.model_validate(r) for r in records])


@router.get("/visit/{visit_id}", response_model=BillingRecordList)
def visit_bills(
    visit_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("billing.read")),
) -> BillingRecordList:
    visit = get_owned_or_404(db, Visit, visit_id, principal, "Visit")
    records = _records(db).filter(BillingRecord.visit_id == visit.id).order_by(BillingRecord.created_at.desc()).all()
    return BillingRecordList(billing_records=[BillingRecordRead.model_validate(r) for r in records])


@router.get("/patient/{patient_id}", response_model=BillingRecordList)
def patient_bills(
    patient_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("billing.read")),
) -> BillingRecordList:
    patient = get_owned_or_404(db, Patient, patient_id, principal, "Patient")
    records = (
        _records(db)
        .filter(BillingRecord.patient_id == patient.id)
        .order_by(BillingRecord.created_at.desc())
        .all()
    )
    return BillingRecordList(billing_records=[BillingRecordRead.model_validate(r) for r in records])
