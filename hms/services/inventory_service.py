# hms/services/inventory_service.py
import logging

from sqlalchemy import update
from sqlalchemy.orm import Session

from hms.core.errors import Conflict, InvalidInput
from hms.models.inventory import InventoryItem
from hms.schemas.inventory import StockAdjustmentType

logger = logging.getLogger(__name__)


def compute_new_stock(current: int, adjustment: int, adjustment_type: StockAdjustmentType) -> int:
    """
    ADD increases, SUBTRACT decreases, SET overwrites.
    Stock never goes negative.
    """
    if adjustment < 0:
        raise InvalidInput("Adjustment must not be negative")

    if adjustment_type == StockAdjustmentType.ADD:
        return current + adjustment
    if adjustment_type == StockAdjustmentType.SUBTRACT:
        if adjustment > current:
            raise InvalidInput("Insufficient stock")
        return current - adjustment
    if adjustment_type == StockAdjustmentType.SET:
        return adjustment

    raise InvalidInput(f"Unknown adjustment type: {adjustment_type}")


def adjust_stock(
    db: Session,
    item: InventoryItem,
    adjustment: int,
    adjustment_type: StockAdjustmentType,
) -> tuple[int, int]:
    """
    Apply a stock adjustment and commit.

    The write is conditional on the stock still being what we read, so a
    concurrent adjustment surfaces as Conflict instead of a lost update.
    Returns (previous_stock, new_stock).
    """
    previous = item.stock
    new_stock = compute_new_stock(previous, adjustment, adjustment_type)

    result = db.execute(
        update(InventoryItem)
        .where(InventoryItem.id == item.id, InventoryItem.stock == previous)
        .values(stock=new_stock)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        raise Conflict("Stock was changed by another request, please retry")

    db.commit()
    db.refresh(item)
    logger.info(
        "Stock adjusted item=%s type=%s %s -> %s",
        item.id,
        adjustment_type.value,
        previous,
        new_stock,
    )
    return previous, new_stock
