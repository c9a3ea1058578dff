# hms/models/admission.py
import uuid
from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import DateTime, Enum, ForeignKey, Text, Uuid
from sqlalchemy.orm import Mapped, backref, mapped_column, relationship

from hms.models.base import Base, HospitalScopedMixin, TimestampMixin, UUIDPrimaryKeyMixin
from hms.models.patient import Patient
from hms.models.user import User
from hms.models.ward import Bed, Room, Ward
from hms.utils.datetime_utils import utc_now


class AdmissionStatus(str, PyEnum):
    PENDING = "PENDING"
    ADMITTED = "ADMITTED"
    DISCHARGED = "DISCHARGED"


class Admission(UUIDPrimaryKeyMixin, HospitalScopedMixin, TimestampMixin, Base):
    """
    IPD (In-Patient Department) stay.

    PENDING on creation, ADMITTED once a bed is assigned, DISCHARGED at the end.
    """

    __tablename__ = "admissions"

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
    )
    admitted_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    diagnosis: Mapped[str] = mapped_column(Text, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[AdmissionStatus] = mapped_column(
        Enum(AdmissionStatus, name="admission_status_enum", native_enum=False, length=32),
        nullable=False,
        default=AdmissionStatus.PENDING,
        index=True,
    )
    admission_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    # Placement (set by bed assignment)
    ward_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("wards.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    room_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("rooms.id", ondelete="SET NULL"),
        nullable=True,
    )
    bed_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("beds.id", ondelete="SET NULL"),
        nullable=True,
    )
    assigned_ward_manager: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Discharge
    discharge_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    discharge_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    discharge_summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    discharged_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Relationships
    patient: Mapped["Patient"] = relationship("Patient", backref=backref("admissions", passive_deletes=True))
    ward: Mapped["Ward | None"] = relationship("Ward")
    room: Mapped["Room | None"] = relationship("Room")
    bed: Mapped["Bed | None"] = relationship("Bed", foreign_keys=[bed_id])
    doctor: Mapped["User | None"] = relationship("User", foreign_keys=[admitted_by])
