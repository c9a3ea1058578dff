# hms/models/billing.py
import uuid
from enum import Enum as PyEnum

from sqlalchemy import Enum, ForeignKey, Integer, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hms.models.base import Base, HospitalScopedMixin, TimestampMixin, UUIDPrimaryKeyMixin
from hms.models.patient import Patient
from hms.models.user import User
from hms.models.visit import Visit

Money = Numeric(12, 2, asdecimal=False)


class BillingStatus(str, PyEnum):
    PENDING = "PENDING"
    PARTIAL = "PARTIAL"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


OUTSTANDING_STATUSES = (BillingStatus.PENDING, BillingStatus.PARTIAL)


class BillingRecord(UUIDPrimaryKeyMixin, HospitalScopedMixin, TimestampMixin, Base):
    """
    A bill for a visit.

    paid_amount and status are derived from the payments; clients never set them.
    """

    __tablename__ = "billing_records"

    visit_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("visits.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    patient_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    total_amount: Mapped[float] = mapped_column(Money, nullable=False, default=0)
    paid_amount: Mapped[float] = mapped_column(Money, nullable=False, default=0)
    status: Mapped[BillingStatus] = mapped_column(
        Enum(BillingStatus, name="billing_status_enum", native_enum=False, length=32),
        nullable=False,
        default=BillingStatus.PENDING,
        index=True,
    )

    insurance_provider: Mapped[str | None] = mapped_column(String(100), nullable=True)
    insurance_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    insurance_coverage: Mapped[float | None] = mapped_column(Money, nullable=True)

    patient: Mapped["Patient"] = relationship("Patient")
    visit: Mapped["Visit"] = relationship("Visit")
    items: Mapped[list["BillingItem"]] = relationship(
        "BillingItem",
        back_populates="billing_record",
        cascade="all, delete-orphan",
    )
    payments: Mapped[list["Payment"]] = relationship(
        "Payment",
        back_populates="billing_record",
        cascade="all, delete-orphan",
        order_by="Payment.created_at",
    )

    @property
    def balance(self) -> float:
        return round((self.total_amount or 0) - (self.paid_amount or 0), 2)


class BillingItem(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "billing_items"

    billing_record_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("billing_records.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    amount: Mapped[float] = mapped_column(Money, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    billing_record: Mapped["BillingRecord"] = relationship("BillingRecord", back_populates="items")


class Payment(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """
    Append-only payment against a billing record.
    """

    __tablename__ = "payments"

    billing_record_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("billing_records.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount: Mapped[float] = mapped_column(Money, nullable=False)
    method: Mapped[str] = mapped_column(String(50), nullable=False)
    reference: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    received_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    billing_record: Mapped["BillingRecord"] = relationship("BillingRecord", back_populates="payments")
    receiver: Mapped["User | None"] = relationship("User", foreign_keys=[received_by])
