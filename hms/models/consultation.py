# hms/models/consultation.py
import uuid
from typing import Any

from sqlalchemy import JSON, ForeignKey, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hms.models.base import Base, HospitalScopedMixin, TimestampMixin, UUIDPrimaryKeyMixin
from hms.models.patient import Patient
from hms.models.user import User
from hms.models.visit import Visit


class Consultation(UUIDPrimaryKeyMixin, HospitalScopedMixin, TimestampMixin, Base):
    """
    Doctor's notes for a visit. Only the authoring doctor (or an admin) edits it.
    """

    __tablename__ = "consultations"

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
    doctor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    chief_complaint: Mapped[str] = mapped_column(Text, nullable=False)
    diagnosis: Mapped[str] = mapped_column(Text, nullable=False)
    vital_signs: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    physical_exam: Mapped[str | None] = mapped_column(Text, nullable=True)
    treatment_plan: Mapped[str | None] = mapped_column(Text, nullable=True)
    follow_up: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    visit: Mapped["Visit"] = relationship("Visit")
    patient: Mapped["Patient"] = relationship("Patient")
    doctor: Mapped["User"] = relationship("User", foreign_keys=[doctor_id])
