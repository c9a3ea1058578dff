# hms/models/lab.py
import uuid
from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import DateTime, Enum, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hms.models.base import Base, HospitalScopedMixin, TimestampMixin, UUIDPrimaryKeyMixin
from hms.models.patient import Patient
from hms.models.user import User
from hms.models.visit import Visit


class LabOrderStatus(str, PyEnum):
    ORDERED = "ORDERED"
    COLLECTED = "COLLECTED"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


PENDING_LAB_STATUSES = (LabOrderStatus.ORDERED, LabOrderStatus.COLLECTED, LabOrderStatus.PROCESSING)


class LabOrder(UUIDPrimaryKeyMixin, HospitalScopedMixin, TimestampMixin, Base):
    __tablename__ = "lab_orders"

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
    ordered_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    processed_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    test_type: Mapped[str] = mapped_column(String(200), nullable=False)
    sample_id: Mapped[str | None] = mapped_column(String(100), nullable=True)

    status: Mapped[LabOrderStatus] = mapped_column(
        Enum(LabOrderStatus, name="lab_order_status_enum", native_enum=False, length=32),
        nullable=False,
        default=LabOrderStatus.ORDERED,
        index=True,
    )

    result_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    normal_range: Mapped[str | None] = mapped_column(String(200), nullable=True)
    result_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    patient: Mapped["Patient"] = relationship("Patient")
    visit: Mapped["Visit"] = relationship("Visit")
    orderer: Mapped["User | None"] = relationship("User", foreign_keys=[ordered_by])
