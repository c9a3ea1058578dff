import pytest

from hms.core.errors import InvalidInput
from hms.models.audit_log import AuditLog
from hms.schemas.inventory import StockAdjustmentType
from hms.services.inventory_service import compute_new_stock
from tests.conftest import make_inventory_item


@pytest.mark.parametrize(
    "adjustment_type, adjustment, expected",
    [
        (StockAdjustmentType.ADD, 15, 65),
        (StockAdjustmentType.SUBTRACT, 50, 0),
        (StockAdjustmentType.SET, 7, 7),
        (StockAdjustmentType.SET, 0, 0),
    ],
)
def test_compute_new_stock(adjustment_type, adjustment, expected):
    assert compute_new_stock(50, adjustment, adjustment_type) == expected


def test_subtract_past_zero_is_rejected():
    with pytest.raises(InvalidInput, match="Insufficient stock"):
        compute_new_stock(3, 4, StockAdjustmentType.SUBTRACT)


def test_stock_endpoint_subtracts_and_audits(client, db, hospital, pharmacist, auth_headers):
    item = make_inventory_item(db, hospital, stock=100, reorder_level=20)

    response = client.patch(
        f"/api/v1/inventory/{item.id}/stock",
        headers=auth_headers(pharmacist),
        json={"adjustment": 30, "type": "SUBTRACT"},
    )
    assert response.status_code == 200
    body = response.json()["item"]
    assert body["stock"] == 70
    assert body["isLowStock"] is False

    entry = db.query(AuditLog).filter(AuditLog.action == "UPDATE_STOCK").one()
    assert entry.details["previousStock"] == 100
    assert entry.details["newStock"] == 70


def test_stock_endpoint_rejects_overdraw(client, db, hospital, pharmacist, auth_headers):
    item = make_inventory_item(db, hospital, stock=5)

    response = client.patch(
        f"/api/v1/inventory/{item.id}/stock",
        headers=auth_headers(pharmacist),
        json={"adjustment": 6, "type": "SUBTRACT"},
    )
    assert response.status_code == 400
    assert response.json() == {"error": "invalid_input", "message": "Insufficient stock"}

    db.expire_all()
    assert db.get(type(item), item.id).stock == 5


def test_stock_set_then_add_accumulates(client, db, hospital, pharmacist, auth_headers):
    item = make_inventory_item(db, hospital, stock=100, reorder_level=20)
    url = f"/api/v1/inventory/{item.id}/stock"

    set_to = client.patch(url, headers=auth_headers(pharmacist), json={"adjustment": 12, "type": "SET"})
    assert set_to.status_code == 200
    assert set_to.json()["item"]["stock"] == 12
    assert set_to.json()["item"]["isLowStock"] is True

    added = client.patch(url, headers=auth_headers(pharmacist), json={"adjustment": 30, "type": "ADD"})
    assert added.status_code == 200
    assert added.json()["item"]["stock"] == 42

    db.expire_all()
    assert db.get(type(item), item.id).stock == 42


def test_low_stock_listing(client, db, hospital, pharmacist, auth_headers):
    make_inventory_item(db, hospital, name="Amoxicillin 500mg", stock=10, reorder_level=20)
    make_inventory_item(db, hospital, name="Metformin 500mg", stock=20, reorder_level=20)
    make_inventory_item(db, hospital, name="Gloves", stock=500, reorder_level=20)

    response = client.get("/api/v1/inventory/low-stock", headers=auth_headers(pharmacist))
    assert response.status_code == 200
    names = sorted(i["name"] for i in response.json()["items"])
    assert names == ["Amoxicillin 500mg", "Metformin 500mg"]


def test_duplicate_item_is_a_conflict(client, db, hospital, pharmacist, auth_headers):
    make_inventory_item(db, hospital)

    response = client.post(
        "/api/v1/inventory",
        headers=auth_headers(pharmacist),
        json={
            "name": "Paracetamol 500mg",
            "category": "DRUG",
            "stock": 10,
            "reorderLevel": 5,
            "unitPrice": 50,
            "batchNumber": "PCM-01",
        },
    )
    assert response.status_code == 409
    assert response.json()["error"] == "conflict"
