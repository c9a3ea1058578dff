import uuid
from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    String,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, backref, mapped_column, relationship

from hms.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from hms.models.hospital import Hospital


class Role(str, PyEnum):
    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    DOCTOR = "DOCTOR"
    NURSE = "NURSE"
    PHARMACIST = "PHARMACIST"
    LAB_TECH = "LAB_TECH"
    RECEPTIONIST = "RECEPTIONIST"
    BILLING_OFFICER = "BILLING_OFFICER"
    WARD_MANAGER = "WARD_MANAGER"


class User(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """
    Represents a staff account.
    - SUPER_ADMIN: hospital_id may be NULL (platform level)
    - Everyone else: hospital_id references Hospital.id
    """

    __tablename__ = "users"

    hospital_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("hospitals.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    # Authentication
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)

    # Personal Information
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)

    role: Mapped[Role] = mapped_column(
        Enum(Role, name="role_enum", native_enum=False, length=32),
        nullable=False,
    )

    active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("true"),
        doc="If false, user cannot login. Use this instead of hard delete.",
    )
    last_login: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Relationships
    hospital: Mapped["Hospital | None"] = relationship("Hospital", backref=backref("users", passive_deletes=True))

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class RefreshToken(UUIDPrimaryKeyMixin, Base):
    """
    Issued refresh tokens. Deleted on logout and replaced on refresh.
    """

    __tablename__ = "refresh_tokens"

    token: Mapped[str] = mapped_column(String(1024), nullable=False, unique=True)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    user: Mapped["User"] = relationship("User")
