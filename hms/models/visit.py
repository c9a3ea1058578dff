# hms/models/visit.py
import uuid
from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import DateTime, Enum, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, backref, mapped_column, relationship

from hms.models.base import Base, HospitalScopedMixin, TimestampMixin, UUIDPrimaryKeyMixin
from hms.models.patient import Patient
from hms.models.user import User
from hms.utils.datetime_utils import utc_now


class VisitStatus(str, PyEnum):
    CHECKED_IN = "CHECKED_IN"
    WAITING = "WAITING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


QUEUE_STATUSES = (VisitStatus.CHECKED_IN, VisitStatus.WAITING, VisitStatus.IN_PROGRESS)


class Visit(UUIDPrimaryKeyMixin, HospitalScopedMixin, TimestampMixin, Base):
    """
    One outpatient encounter, from check-in to completion.
    """

    __tablename__ = "visits"

    patient_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    department: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    reason_for_visit: Mapped[str] = mapped_column(Text, nullable=False)

    status: Mapped[VisitStatus] = mapped_column(
        Enum(VisitStatus, name="visit_status_enum", native_enum=False, length=32),
        nullable=False,
        default=VisitStatus.CHECKED_IN,
        index=True,
    )

    check_in_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        index=True,
    )
    completed_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    assigned_to: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    checked_in_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Relationships
    patient: Mapped["Patient"] = relationship("Patient", backref=backref("visits", passive_deletes=True))
    assigned_user: Mapped["User | None"] = relationship("User", foreign_keys=[assigned_to])
