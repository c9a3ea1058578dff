#!/usr/bin/env python3
# scripts/seed_demo_data.py
"""
HMS demo data seeder.

Creates one demo hospital with:
- one login per role, all with password Demo@12345
- a ward / room / bed layout
- a handful of patients
- an inventory catalog (some items deliberately at reorder level)

Safe to re-run: rows are matched by email / name and only missing ones are
added. --reset deletes the demo hospital (everything cascades from it).

Run:
  python -m scripts.seed_demo_data --seed
  python -m scripts.seed_demo_data --reset
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hms.core.config import get_settings
from hms.core.database import Database
from hms.core.security import get_password_hash
from hms.models.hospital import Hospital
from hms.models.inventory import InventoryItem
from hms.models.patient import Patient
from hms.models.user import Role, User
from hms.models.ward import Bed, BedStatus, Room, Ward
from hms.services.settings_service import DEFAULT_DEPARTMENTS, DEFAULT_SETTINGS, merge_settings

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "Demo@12345"
DEMO_HOSPITAL_EMAIL = "info@lagosgeneral-demo.ng"
DEMO_EMAIL_DOMAIN = "lagosgeneral-demo.ng"

STAFF = [
    (Role.ADMIN, "admin", "Adaeze", "Okafor", None),
    (Role.DOCTOR, "doctor", "Tunde", "Bakare", "General Medicine"),
    (Role.NURSE, "nurse", "Ngozi", "Eze", "General Medicine"),
    (Role.PHARMACIST, "pharmacist", "Ibrahim", "Musa", None),
    (Role.LAB_TECH, "labtech", "Funke", "Adeyemi", None),
    (Role.RECEPTIONIST, "reception", "Chinedu", "Obi", None),
    (Role.BILLING_OFFICER, "billing", "Aisha", "Bello", None),
    (Role.WARD_MANAGER, "wardmanager", "Emeka", "Nwosu", None),
]

# ward name, type, floor, [(room number, room type, beds)]
WARDS = [
    ("Male Medical Ward", "GENERAL", "1", [("101", "GENERAL", 4), ("102", "GENERAL", 4)]),
    ("Female Medical Ward", "GENERAL", "1", [("103", "GENERAL", 4)]),
    ("Private Wing", "PRIVATE", "2", [("201", "PRIVATE", 1), ("202", "PRIVATE", 1)]),
    ("ICU", "ICU", "2", [("ICU-1", "ICU", 2)]),
]

PATIENTS = [
    ("Oluwaseun", "Adebayo", date(1985, 3, 14), "MALE", "+2348031234501", "O+"),
    ("Chiamaka", "Nnaji", date(1992, 7, 2), "FEMALE", "+2348031234502", "A+"),
    ("Yusuf", "Abdullahi", date(1978, 11, 23), "MALE", "+2348031234503", "B+"),
    ("Blessing", "Etim", date(2001, 1, 9), "FEMALE", "+2348031234504", "O-"),
    ("Kelechi", "Uche", date(2015, 5, 30), "MALE", "+2348031234505", None),
]

# name, category, stock, reorder level, unit price (NGN), batch
INVENTORY = [
    ("Paracetamol 500mg", "DRUG", 500, 100, 50.0, "PCM-2401"),
    ("Amoxicillin 500mg", "DRUG", 240, 60, 120.0, "AMX-2402"),
    ("Artemether/Lumefantrine 20/120", "DRUG", 40, 50, 1500.0, "ALU-2403"),
    ("Metformin 500mg", "DRUG", 300, 80, 80.0, "MTF-2401"),
    ("Normal Saline 500ml", "CONSUMABLE", 60, 20, 700.0, "NS-2405"),
    ("Disposable Syringe 5ml", "CONSUMABLE", 15, 100, 40.0, "SYR-2404"),
    ("Surgical Gloves (pair)", "CONSUMABLE", 800, 200, 90.0, "GLV-2402"),
]


def demo_email(username: str) -> str:
    return f"{username}@{DEMO_EMAIL_DOMAIN}"


def get_or_create_hospital(db: Session) -> Hospital:
    hospital = db.query(Hospital).filter(Hospital.email == DEMO_HOSPITAL_EMAIL).first()
    if hospital:
        print(f"Hospital exists: {hospital.name}")
        return hospital

    hospital = Hospital(
        name="Lagos General Hospital (Demo)",
        email=DEMO_HOSPITAL_EMAIL,
        phone="+234 1 234 5678",
        address="12 Broad Street, Lagos Island, Lagos",
        settings=merge_settings(DEFAULT_SETTINGS, {"departments": DEFAULT_DEPARTMENTS}),
        active=True,
    )
    db.add(hospital)
    db.flush()
    print(f"Hospital created: {hospital.name}")
    return hospital


def upsert_staff(db: Session, hospital: Hospital) -> dict[Role, User]:
    staff: dict[Role, User] = {}
    hashed = get_password_hash(DEMO_PASSWORD)
    for role, username, first_name, last_name, department in STAFF:
        email = demo_email(username)
        user = db.query(User).filter(User.email == email).first()
        if user is None:
            user = User(
                hospital_id=hospital.id,
                email=email,
                hashed_password=hashed,
                first_name=first_name,
                last_name=last_name,
                department=department,
                role=role,
                active=True,
            )
            db.add(user)
            print(f"  + {role.value:<16} {email}")
        staff[role] = user
    db.flush()
    return staff


def upsert_wards(db: Session, hospital: Hospital) -> int:
    created = 0
    for ward_name, ward_type, floor, rooms in WARDS:
        ward = (
            db.query(Ward)
            .filter(Ward.hospital_id == hospital.id, Ward.name == ward_name)
            .first()
        )
        if ward is None:
            ward = Ward(
                hospital_id=hospital.id,
                name=ward_name,
                type=ward_type,
                floor=floor,
                capacity=sum(beds for _, _, beds in rooms),
            )
            db.add(ward)
            db.flush()

        for room_number, room_type, bed_count in rooms:
            room = (
                db.query(Room)
                .filter(Room.ward_id == ward.id, Room.room_number == room_number)
                .first()
            )
            if room is None:
                room = Room(ward_id=ward.id, room_number=room_number, type=room_type, capacity=bed_count)
                db.add(room)
                db.flush()

            existing = {bed.bed_number for bed in db.query(Bed).filter(Bed.room_id == room.id)}
            for n in range(1, bed_count + 1):
                bed_number = f"{room_number}-{n}"
                if bed_number not in existing:
                    db.add(Bed(room_id=room.id, bed_number=bed_number, status=BedStatus.AVAILABLE))
                    created += 1
    db.flush()
    return created


def upsert_patients(db: Session, hospital: Hospital, created_by: User) -> int:
    created = 0
    for first_name, last_name, dob, gender, phone, blood_group in PATIENTS:
        exists = (
            db.query(Patient.id)
            .filter(Patient.hospital_id == hospital.id, Patient.phone == phone)
            .first()
        )
        if exists:
            continue
        db.add(
            Patient(
                hospital_id=hospital.id,
                first_name=first_name,
                last_name=last_name,
                date_of_birth=dob,
                gender=gender,
                phone=phone,
                blood_group=blood_group,
                allergies=[],
                current_medications=[],
                created_by=created_by.id,
            )
        )
        created += 1
    db.flush()
    return created


def upsert_inventory(db: Session, hospital: Hospital) -> int:
    created = 0
    for name, category, stock, reorder_level, unit_price, batch in INVENTORY:
        exists = (
            db.query(InventoryItem.id)
            .filter(
                InventoryItem.hospital_id == hospital.id,
                InventoryItem.name == name,
                InventoryItem.batch_number == batch,
            )
            .first()
        )
        if exists:
            continue
        db.add(
            InventoryItem(
                hospital_id=hospital.id,
                name=name,
                category=category,
                stock=stock,
                reorder_level=reorder_level,
                unit_price=unit_price,
                batch_number=batch,
                supplier="Emzor Pharmaceuticals",
            )
        )
        created += 1
    db.flush()
    return created


def seed(db: Session) -> None:
    hospital = get_or_create_hospital(db)
    staff = upsert_staff(db, hospital)
    beds = upsert_wards(db, hospital)
    patients = upsert_patients(db, hospital, staff[Role.RECEPTIONIST])
    items = upsert_inventory(db, hospital)
    print(f"Seeded: beds+{beds} patients+{patients} inventory+{items}")
    print(f"Demo logins use password {DEMO_PASSWORD}")


def reset(db: Session) -> None:
    hospital = db.query(Hospital).filter(Hospital.email == DEMO_HOSPITAL_EMAIL).first()
    if not hospital:
        print("Demo hospital not found, nothing to reset.")
        return
    db.delete(hospital)
    print(f"Deleted demo hospital {hospital.name}")


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    parser = argparse.ArgumentParser(description="Seed / reset HMS demo data")
    parser.add_argument("--seed", action="store_true", help="Seed the demo hospital")
    parser.add_argument("--reset", action="store_true", help="Delete the demo hospital and its data")
    args = parser.parse_args()

    if not (args.seed or args.reset):
        parser.print_help()
        return 1

    database = Database(get_settings())
    try:
        if args.reset:
            with database.session() as db:
                reset(db)
        if args.seed:
            with database.session() as db:
                seed(db)
    except SQLAlchemyError as e:
        logger.error("Seed failed: %s", e, exc_info=True)
        if getattr(e, "orig", None) is not None:
            logger.error("DBAPI orig: %r", e.orig)
        return 1
    finally:
        database.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(main())
