# hms/models/patient.py
import uuid
from datetime import date

from sqlalchemy import JSON, Date, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hms.models.base import Base, HospitalScopedMixin, TimestampMixin, UUIDPrimaryKeyMixin
from hms.models.hospital import Hospital
from hms.models.user import User


class Patient(UUIDPrimaryKeyMixin, HospitalScopedMixin, TimestampMixin, Base):
    """
    Registered patient of one hospital.

    The id may be supplied by an offline-first client; it is kept as-is.
    """

    __tablename__ = "patients"

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    gender: Mapped[str] = mapped_column(String(20), nullable=False)
    phone: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)

    emergency_contact_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    emergency_contact_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    emergency_contact_relationship: Mapped[str | None] = mapped_column(String(100), nullable=True)

    blood_group: Mapped[str | None] = mapped_column(String(10), nullable=True)
    allergies: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    current_medications: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    created_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Relationships
    hospital: Mapped["Hospital"] = relationship("Hospital")
    creator: Mapped["User | None"] = relationship("User", foreign_keys=[created_by])

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
