# hms/api/v1/endpoints/inventory.py
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from hms.core.database import get_db
from hms.core.tenant_context import Principal, resolve_hospital_id, scope_hospital_id
from hms.dependencies.auth import get_auditor
from hms.dependencies.authz import require_permission
from hms.dependencies.services import get_change_notifier
from hms.models.inventory import InventoryItem
from hms.schemas.common import MessageResponse
from hms.schemas.inventory import (
    InventoryItemCreate,
    InventoryItemEnvelope,
    InventoryItemList,
    InventoryItemRead,
    InventoryItemUpdate,
    LowStockList,
    StockAdjustment,
)
from hms.services.audit_service import RequestAuditor
from hms.services.inventory_service import adjust_stock
from hms.services.live_updates import ChangeNotifier
from hms.utils.lookups import commit_or_raise, get_owned_or_404
from hms.utils.pagination import PageParams, page_params, paginate

router = APIRouter()
logger = logging.getLogger(__name__)


def _change_action(item: InventoryItem, default: str) -> str:
    return "low-stock" if item.is_low_stock else default


@router.post("", response_model=InventoryItemEnvelope, status_code=status.HTTP_201_CREATED)
def create_inventory_item(
    payload: InventoryItemCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("inventory.write")),
    audit: RequestAuditor = Depends(get_auditor),
    notifier: ChangeNotifier = Depends(get_change_notifier),
) -> InventoryItemEnvelope:
    hospital_id = resolve_hospital_id(principal, payload.hospital_id)
    item = InventoryItem(**payload.model_dump(exclude={"hospital_id"}), hospital_id=hospital_id)
    db.add(item)
    commit_or_raise(db, "create inventory item")
    db.refresh(item)

    body = InventoryItemRead.model_validate(item)
    audit(
        "CREATE_INVENTORY_ITEM",
        "INVENTORY",
        item.id,
        {"name": item.name, "stock": item.stock},
        hospital_id=hospital_id,
    )
    notifier.publish(hospital_id, "inventory", _change_action(item, "created"), body)
    return InventoryItemEnvelope(item=body)


@router.get("", response_model=InventoryItemList)
def list_inventory(
    category: str | None = Query(None),
    search: str | None = Query(None, description="Match name, supplier or batch number"),
    hospital_id: UUID | None = Query(None, alias="hospitalId"),
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("inventory.read")),
) -> InventoryItemList:
    query = db.query(InventoryItem)
    scope = scope_hospital_id(principal, hospital_id)
    if scope is not None:
        query = query.filter(InventoryItem.hospital_id == scope)
    if category:
        query = query.filter(InventoryItem.category == category)
    if search and search.strip():
        like = f"%{search.strip()}%"
        query = query.filter(
            or_(
                InventoryItem.name.ilike(like),
                InventoryItem.supplier.ilike(like),
                InventoryItem.batch_number.ilike(like),
            )
        )

    items, meta = paginate(query.order_by(InventoryItem.name.asc()), params)
    return InventoryItemList(items=[InventoryItemRead.model_validate(i) for i in items], **meta)


@router.get("/low-stock", response_model=LowStockList)
def low_stock_items(
    hospital_id: UUID | None = Query(None, alias="hospitalId"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("inventory.read")),
) -> LowStockList:
    """
    Items at or below their reorder level, emptiest first.
    """
    query = db.query(InventoryItem).filter(InventoryItem.stock <= InventoryItem.reorder_level)
    scope = scope_hospital_id(principal, hospital_id)
    if scope is not None:
        query = query.filter(InventoryItem.hospital_id == scope)
    items = query.order_by(InventoryItem.stock.asc(), InventoryItem.name.asc()).all()
    return LowStockList(items=[InventoryItemRead.model_validate(i) for i in items])


@router.get("/{item_id}", response_model=InventoryItemEnvelope)
def get_inventory_item(
    item_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("inventory.read")),
) -> InventoryItemEnvelope:
    item = get_owned_or_404(db, InventoryItem, item_id, principal, "Inventory item")
    return InventoryItemEnvelope(item=InventoryItemRead.model_validate(item))


@router.put("/{item_id}", response_model=InventoryItemEnvelope)
def update_inventory_item(
    item_id: UUID,
    payload: InventoryItemUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("inventory.write")),
    audit: RequestAuditor = Depends(get_auditor),
    notifier: ChangeNotifier = Depends(get_change_notifier),
) -> InventoryItemEnvelope:
    item = get_owned_or_404(db, InventoryItem, item_id, principal, "Inventory item")

    data = payload.model_dump(exclude_unset=True)
    for field, value in data.items():
        setattr(item, field, value)
    commit_or_raise(db, "update inventory item")
    db.refresh(item)

    body = InventoryItemRead.model_validate(item)
    audit(
        "UPDATE_INVENTORY_ITEM",
        "INVENTORY",
        item.id,
        {"updatedFields": sorted(data)},
        hospital_id=item.hospital_id,
    )
    notifier.publish(item.hospital_id, "inventory", _change_action(item, "updated"), body)
    return InventoryItemEnvelope(item=body)


@router.patch("/{item_id}/stock", response_model=InventoryItemEnvelope)
def update_stock(
    item_id: UUID,
    payload: StockAdjustment,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("inventory.write")),
    audit: RequestAuditor = Depends(get_auditor),
    notifier: ChangeNotifier = Depends(get_change_notifier),
) -> InventoryItemEnvelope:
    """
    ADD, SUBTRACT or SET the stock level. Subtracting below zero is rejected.
    """
    item = get_owned_or_404(db, InventoryItem, item_id, principal, "Inventory item")
    previous, new_stock = adjust_stock(db, item, payload.adjustment, payload.type)

    body = InventoryItemRead.model_validate(item)
    audit(
        "UPDATE_STOCK",
        "INVENTORY",
        item.id,
        {
            "type": payload.type,
            "adjustment": payload.adjustment,
            "previousStock": previous,
            "newStock": new_stock,
        },
        hospital_id=item.hospital_id,
    )
    if item.is_low_stock:
        logger.info("Inventory item %s is at or below reorder level (%s)", item.id, new_stock)
    notifier.publish(item.hospital_id, "inventory", _change_action(item, "stock-updated"), body)
    return InventoryItemEnvelope(item=body)


@router.delete("/{item_id}", response_model=MessageResponse)
def delete_inventory_item(
    item_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("inventory.write")),
    audit: RequestAuditor = Depends(get_auditor),
    notifier: ChangeNotifier = Depends(get_change_notifier),
) -> MessageResponse:
    item = get_owned_or_404(db, InventoryItem, item_id, principal, "Inventory item")
    hospital_id = item.hospital_id
    name = item.name

    db.delete(item)
    commit_or_raise(db, "delete inventory item")

    audit("DELETE_INVENTORY_ITEM", "INVENTORY", item_id, {"name": name}, hospital_id=hospital_id)
    notifier.publish(hospital_id, "inventory", "deleted", {"id": item_id})
    return MessageResponse(message="Inventory item deleted successfully")
