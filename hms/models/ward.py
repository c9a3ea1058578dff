# hms/models/ward.py
import uuid
from enum import Enum as PyEnum

from sqlalchemy import (
    Boolean,
    Enum,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hms.models.base import Base, HospitalScopedMixin, TimestampMixin, UUIDPrimaryKeyMixin


class BedStatus(str, PyEnum):
    AVAILABLE = "AVAILABLE"
    OCCUPIED = "OCCUPIED"
    RESERVED = "RESERVED"
    CLEANING = "CLEANING"
    MAINTENANCE = "MAINTENANCE"


class Ward(UUIDPrimaryKeyMixin, HospitalScopedMixin, TimestampMixin, Base):
    __tablename__ = "wards"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    floor: Mapped[str | None] = mapped_column(String(20), nullable=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("true"),
    )

    rooms: Mapped[list["Room"]] = relationship(
        "Room",
        back_populates="ward",
        order_by="Room.room_number",
    )


class Room(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """
    A room inside a ward. Tenant is the ward's hospital.
    """

    __tablename__ = "rooms"
    __table_args__ = (
        UniqueConstraint("ward_id", "room_number", name="uq_rooms_ward_room_number"),
    )

    ward_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("wards.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    room_number: Mapped[str] = mapped_column(String(20), nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)

    ward: Mapped["Ward"] = relationship("Ward", back_populates="rooms")
    beds: Mapped[list["Bed"]] = relationship(
        "Bed",
        back_populates="room",
        order_by="Bed.bed_number",
    )

    @property
    def hospital_id(self) -> uuid.UUID:
        return self.ward.hospital_id


class Bed(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """
    A bed inside a room. Tenant is derived through room -> ward -> hospital.

    While OCCUPIED, current_admission_id points at the one admission holding it.
    """

    __tablename__ = "beds"
    __table_args__ = (
        UniqueConstraint("room_id", "bed_number", name="uq_beds_room_bed_number"),
    )

    room_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("rooms.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    bed_number: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[BedStatus] = mapped_column(
        Enum(BedStatus, name="bed_status_enum", native_enum=False, length=32),
        nullable=False,
        default=BedStatus.AVAILABLE,
        index=True,
    )

    current_patient_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("patients.id", ondelete="SET NULL"),
        nullable=True,
    )
    # plain reference; admissions.bed_id already points back at this table
    current_admission_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)

    room: Mapped["Room"] = relationship("Room", back_populates="beds")

    @property
    def hospital_id(self) -> uuid.UUID:
        return self.room.ward.hospital_id
