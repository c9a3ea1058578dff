from datetime import datetime, timezone

import pytest

from hms.models.visit import VisitStatus
from hms.services.dashboard_service import occupancy_percentage, today_bounds
from tests.conftest import make_beds, make_bill, make_inventory_item, make_patient, make_visit


@pytest.mark.parametrize(
    "occupied, total, expected",
    [(0, 0, 0), (0, 4, 0), (1, 3, 33), (2, 3, 67), (4, 4, 100)],
)
def test_occupancy_percentage(occupied, total, expected):
    assert occupancy_percentage(occupied, total) == expected


def test_today_bounds_in_hospital_timezone():
    # 23:30 UTC is already the next day in Lagos (UTC+1)
    now = datetime(2025, 6, 1, 23, 30, tzinfo=timezone.utc)
    start, end = today_bounds("Africa/Lagos", now)

    assert start == datetime(2025, 6, 1, 23, 0, tzinfo=timezone.utc)
    assert (end - start).total_seconds() == 86400


def test_today_bounds_unknown_zone_uses_utc():
    now = datetime(2025, 6, 1, 23, 30, tzinfo=timezone.utc)
    start, _ = today_bounds("Mars/Olympus_Mons", now)
    assert start == datetime(2025, 6, 1, tzinfo=timezone.utc)


def test_stats_with_no_beds(client, doctor, auth_headers):
    response = client.get("/api/v1/dashboard/stats", headers=auth_headers(doctor))
    assert response.status_code == 200
    body = response.json()
    assert body["bedOccupancy"] == {"total": 0, "occupied": 0, "available": 0, "occupancyPercentage": 0}
    assert body["stats"]["todayVisits"] == 0
    assert body["recentActivity"] == []


def test_stats_counts_own_hospital(client, db, hospital, other_hospital, admin, auth_headers):
    patient = make_patient(db, hospital)
    make_visit(db, patient)
    make_visit(db, patient, department="Pediatrics", status=VisitStatus.COMPLETED)
    make_bill(db, make_visit(db, patient), total=2500)
    make_inventory_item(db, hospital, stock=3, reorder_level=10)
    beds = make_beds(db, hospital, count=4)
    make_visit(db, make_patient(db, other_hospital))

    response = client.get("/api/v1/dashboard/stats", headers=auth_headers(admin))
    assert response.status_code == 200
    body = response.json()

    assert body["stats"]["totalPatients"] == 1
    assert body["stats"]["todayVisits"] == 3
    assert body["stats"]["outstandingAmount"] == 2500
    assert body["stats"]["outstandingBillsCount"] == 1
    assert body["stats"]["lowStockCount"] == 1
    assert body["bedOccupancy"]["total"] == len(beds)
    assert body["bedOccupancy"]["available"] == 4
    assert body["branding"]["hospitalName"] == hospital.name
    assert {d["department"] for d in body["departmentBreakdown"]} == {"General Medicine", "Pediatrics"}
    assert len(body["recentActivity"]) == 3


def test_super_admin_sees_all_hospitals(client, db, hospital, other_hospital, super_admin, auth_headers):
    make_patient(db, hospital)
    make_patient(db, other_hospital)

    everything = client.get("/api/v1/dashboard/stats", headers=auth_headers(super_admin)).json()
    assert everything["stats"]["totalPatients"] == 2

    narrowed = client.get(
        "/api/v1/dashboard/stats",
        params={"hospitalId": str(other_hospital.id)},
        headers=auth_headers(super_admin),
    ).json()
    assert narrowed["stats"]["totalPatients"] == 1
