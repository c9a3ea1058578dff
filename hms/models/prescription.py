# hms/models/prescription.py
import uuid
from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import DateTime, Enum, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hms.models.base import Base, HospitalScopedMixin, TimestampMixin, UUIDPrimaryKeyMixin
from hms.models.patient import Patient
from hms.models.user import User
from hms.models.visit import Visit


class PrescriptionStatus(str, PyEnum):
    PENDING = "PENDING"
    DISPENSED = "DISPENSED"
    CANCELLED = "CANCELLED"


class Prescription(UUIDPrimaryKeyMixin, HospitalScopedMixin, TimestampMixin, Base):
    __tablename__ = "prescriptions"

    patient_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    visit_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("visits.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    consultation_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("consultations.id", ondelete="SET NULL"),
        nullable=True,
    )
    doctor_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    status: Mapped[PrescriptionStatus] = mapped_column(
        Enum(PrescriptionStatus, name="prescription_status_enum", native_enum=False, length=32),
        nullable=False,
        default=PrescriptionStatus.PENDING,
        index=True,
    )
    dispensed_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    dispensed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    patient: Mapped["Patient"] = relationship("Patient")
    visit: Mapped["Visit"] = relationship("Visit")
    doctor: Mapped["User | None"] = relationship("User", foreign_keys=[doctor_id])
    items: Mapped[list["PrescriptionItem"]] = relationship(
        "PrescriptionItem",
        back_populates="prescription",
        cascade="all, delete-orphan",
    )


class PrescriptionItem(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "prescription_items"

    prescription_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("prescriptions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    medication_name: Mapped[str] = mapped_column(String(255), nullable=False)
    dosage: Mapped[str] = mapped_column(String(100), nullable=False)  # e.g. "500mg"
    frequency: Mapped[str] = mapped_column(String(100), nullable=False)  # e.g. "every 8 hours"
    duration: Mapped[str] = mapped_column(String(100), nullable=False)  # e.g. "5 days"
    instructions: Mapped[str | None] = mapped_column(String(500), nullable=True)  # e.g. "after food"

    prescription: Mapped["Prescription"] = relationship("Prescription", back_populates="items")
