# hms/models/inventory.py
from datetime import date

from sqlalchemy import Date, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from hms.models.base import Base, HospitalScopedMixin, TimestampMixin, UUIDPrimaryKeyMixin


class InventoryItem(UUIDPrimaryKeyMixin, HospitalScopedMixin, TimestampMixin, Base):
    """
    Pharmacy / store item with a running stock count.

    Low stock means stock <= reorder_level.
    """

    __tablename__ = "inventory_items"
    __table_args__ = (
        UniqueConstraint(
            "hospital_id", "name", "batch_number", name="uq_inventory_items_hospital_name_batch"
        ),
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    category: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    reorder_level: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    unit_price: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False)

    expiry_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    batch_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    supplier: Mapped[str | None] = mapped_column(String(200), nullable=True)

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= self.reorder_level
