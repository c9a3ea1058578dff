# hms/models/hospital.py
from typing import Any

from sqlalchemy import JSON, Boolean, String, text
from sqlalchemy.orm import Mapped, mapped_column

from hms.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Hospital(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """
    A hospital tenant. Owns every clinical and administrative row.

    `settings` is an opaque document (currency, locale, departments,
    branding, fee schedule, feature flags). Updates merge its top-level
    keys instead of replacing it.
    """

    __tablename__ = "hospitals"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    logo: Mapped[str | None] = mapped_column(String(500), nullable=True)

    settings: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("true"),
        doc="Deactivated hospitals keep their data but are hidden from public branding.",
    )
