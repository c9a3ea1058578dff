# hms/models/round.py
import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hms.models.admission import Admission
from hms.models.base import Base, HospitalScopedMixin, TimestampMixin, UUIDPrimaryKeyMixin
from hms.models.user import User


class NursingRound(UUIDPrimaryKeyMixin, HospitalScopedMixin, TimestampMixin, Base):
    """
    A nurse's check on an admitted patient. next_round_due drives the "due" list.
    """

    __tablename__ = "nursing_rounds"

    admission_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("admissions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    nurse_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    vital_signs_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("vital_signs.id", ondelete="SET NULL"),
        nullable=True,
    )

    round_type: Mapped[str] = mapped_column(String(50), nullable=False)
    patient_condition: Mapped[str] = mapped_column(String(100), nullable=False)
    medication_given: Mapped[str | None] = mapped_column(Text, nullable=True)
    observations: Mapped[str | None] = mapped_column(Text, nullable=True)
    next_round_due: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        index=True,
    )

    admission: Mapped["Admission"] = relationship("Admission")
    nurse: Mapped["User | None"] = relationship("User", foreign_keys=[nurse_id])


class DoctorReview(UUIDPrimaryKeyMixin, HospitalScopedMixin, TimestampMixin, Base):
    __tablename__ = "doctor_reviews"

    admission_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("admissions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    doctor_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    findings: Mapped[str | None] = mapped_column(Text, nullable=True)
    treatment_plan_update: Mapped[str | None] = mapped_column(Text, nullable=True)
    orders_given: Mapped[str | None] = mapped_column(Text, nullable=True)
    discharge_recommendation: Mapped[str | None] = mapped_column(Text, nullable=True)
    next_review_due: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    admission: Mapped["Admission"] = relationship("Admission")
    doctor: Mapped["User | None"] = relationship("User", foreign_keys=[doctor_id])
