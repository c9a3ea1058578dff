# hms/schemas/inventory.py
from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Annotated
from uuid import UUID

from pydantic import Field, StringConstraints, field_validator

from hms.schemas.common import ApiModel, PageMeta, reject_null

NameStr = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=200),
]

OptStr100 = (
    Annotated[
        str,
        StringConstraints(strip_whitespace=True, max_length=100),
    ]
    | None
)


class StockAdjustmentType(str, Enum):
    ADD = "ADD"
    SUBTRACT = "SUBTRACT"
    SET = "SET"


class InventoryItemBase(ApiModel):
    """
    Shared fields for create/response.

    - Optional strings accept None and are limited in length when present.
    - Empty strings from UI are normalized to None.
    """

    name: NameStr
    category: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
    stock: int = Field(ge=0)
    reorder_level: int = Field(ge=0)
    unit_price: float = Field(gt=0)

    expiry_date: date | None = None
    batch_number: OptStr100 = None
    supplier: OptStr100 = None

    @field_validator("batch_number", "supplier", mode="before")
    @classmethod
    def empty_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class InventoryItemCreate(InventoryItemBase):
    hospital_id: UUID | None = None


class InventoryItemUpdate(ApiModel):
    """
    Partial update. Stock is changed through the adjustment endpoint, not here.
    """

    name: NameStr | None = None
    category: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)] | None = None
    reorder_level: int | None = Field(default=None, ge=0)
    unit_price: float | None = Field(default=None, gt=0)
    expiry_date: date | None = None
    batch_number: OptStr100 = None
    supplier: OptStr100 = None

    @field_validator("name", "category", "reorder_level", "unit_price", mode="before")
    @classmethod
    def required_columns_not_null(cls, v):
        return reject_null(v)


class StockAdjustment(ApiModel):
    adjustment: int = Field(ge=0)
    type: StockAdjustmentType


class InventoryItemRead(InventoryItemBase):
    id: UUID
    hospital_id: UUID
    is_low_stock: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class InventoryItemEnvelope(ApiModel):
    item: InventoryItemRead


class InventoryItemList(PageMeta):
    items: list[InventoryItemRead]


class LowStockList(ApiModel):
    items: list[InventoryItemRead]
