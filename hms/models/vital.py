# hms/models/vital.py
import uuid
from enum import Enum as PyEnum

from sqlalchemy import Enum, Float, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hms.models.base import Base, HospitalScopedMixin, TimestampMixin, UUIDPrimaryKeyMixin
from hms.models.patient import Patient
from hms.models.user import User
from hms.models.visit import Visit


class TriageCategory(str, PyEnum):
    EMERGENCY = "EMERGENCY"
    URGENT = "URGENT"
    STANDARD = "STANDARD"
    NON_URGENT = "NON_URGENT"


# Most urgent first
TRIAGE_PRIORITY = list(TriageCategory)


class VitalSigns(UUIDPrimaryKeyMixin, HospitalScopedMixin, TimestampMixin, Base):
    """
    A vitals reading for a patient (BP, pulse, temperature, ...).

    triage_category orders the triage queue, see TRIAGE_PRIORITY.
    """

    __tablename__ = "vital_signs"

    patient_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    visit_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("visits.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    blood_pressure: Mapped[str | None] = mapped_column(String(20), nullable=True)
    heart_rate: Mapped[int | None] = mapped_column(Integer, nullable=True)
    temperature: Mapped[float | None] = mapped_column(Float, nullable=True)
    weight: Mapped[float | None] = mapped_column(Float, nullable=True)
    height: Mapped[float | None] = mapped_column(Float, nullable=True)
    respiratory_rate: Mapped[int | None] = mapped_column(Integer, nullable=True)
    oxygen_saturation: Mapped[float | None] = mapped_column(Float, nullable=True)
    blood_sugar: Mapped[float | None] = mapped_column(Float, nullable=True)
    pain_level: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    triage_category: Mapped[TriageCategory | None] = mapped_column(
        Enum(TriageCategory, name="triage_category_enum", native_enum=False, length=32),
        nullable=True,
        index=True,
    )

    recorded_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Relationships
    patient: Mapped["Patient"] = relationship("Patient")
    visit: Mapped["Visit | None"] = relationship("Visit")
    recorder: Mapped["User | None"] = relationship("User", foreign_keys=[recorded_by])
