import hashlib
import hmac
import json
from datetime import date

import pytest
from fastapi.testclient import TestClient

from hms.core.config import Settings
from hms.core.security import get_password_hash
from hms.main import create_app
from hms.models.billing import BillingRecord, BillingStatus
from hms.models.hospital import Hospital
from hms.models.inventory import InventoryItem
from hms.models.patient import Patient
from hms.models.user import Role, User
from hms.models.visit import Visit, VisitStatus
from hms.models.ward import Bed, BedStatus, Room, Ward
from hms.services.auth_service import issue_access_token_for_user

PASSWORD = "Passw0rd!23"
WEBHOOK_SECRET = "whsec_test_5c3d"


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        app_env="test",
        database_url="sqlite://",
        auto_create_tables=True,
        redis_url=None,
        secret_key="test-access-secret",
        refresh_secret_key="test-refresh-secret",
        paystack_secret_key="sk_test_0a1b2c",
        paystack_webhook_secret=WEBHOOK_SECRET,
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def services(client):
    return client.app.state.services


@pytest.fixture
def db(services):
    session = services.database.session_factory()
    try:
        yield session
    finally:
        session.close()


def make_hospital(db, name="St. Nicholas Hospital", email="info@stnicholas.ng", settings=None):
    hospital = Hospital(name=name, email=email, settings=settings, active=True)
    db.add(hospital)
    db.commit()
    return hospital


def make_user(db, hospital, role, email, first_name="Test", last_name="User"):
    user = User(
        hospital_id=hospital.id if hospital else None,
        email=email,
        hashed_password=get_password_hash(PASSWORD),
        first_name=first_name,
        last_name=last_name,
        role=role,
        active=True,
    )
    db.add(user)
    db.commit()
    return user


def make_patient(db, hospital, first_name="Amaka", last_name="Obi", phone="+2348030000001"):
    patient = Patient(
        hospital_id=hospital.id,
        first_name=first_name,
        last_name=last_name,
        date_of_birth=date(1990, 4, 12),
        gender="FEMALE",
        phone=phone,
        allergies=[],
        current_medications=[],
    )
    db.add(patient)
    db.commit()
    return patient


def make_visit(db, patient, department="General Medicine", status=VisitStatus.CHECKED_IN):
    visit = Visit(
        hospital_id=patient.hospital_id,
        patient_id=patient.id,
        department=department,
        reason_for_visit="Fever and headache",
        status=status,
    )
    db.add(visit)
    db.commit()
    return visit


def make_beds(db, hospital, count=2, ward_name="Male Medical Ward"):
    ward = Ward(hospital_id=hospital.id, name=ward_name, type="GENERAL", capacity=count)
    db.add(ward)
    db.flush()
    room = Room(ward_id=ward.id, room_number="101", type="GENERAL", capacity=count)
    db.add(room)
    db.flush()
    beds = [Bed(room_id=room.id, bed_number=f"101-{n}", status=BedStatus.AVAILABLE) for n in range(1, count + 1)]
    db.add_all(beds)
    db.commit()
    return beds


def make_inventory_item(db, hospital, name="Paracetamol 500mg", stock=100, reorder_level=20):
    item = InventoryItem(
        hospital_id=hospital.id,
        name=name,
        category="DRUG",
        stock=stock,
        reorder_level=reorder_level,
        unit_price=50.0,
        batch_number="PCM-01",
    )
    db.add(item)
    db.commit()
    return item


def make_bill(db, visit, total=10000.0):
    record = BillingRecord(
        hospital_id=visit.hospital_id,
        visit_id=visit.id,
        patient_id=visit.patient_id,
        total_amount=total,
        paid_amount=0,
        status=BillingStatus.PENDING,
    )
    db.add(record)
    db.commit()
    return record


def sign_webhook(body: dict, secret: str = WEBHOOK_SECRET) -> tuple[bytes, str]:
    raw = json.dumps(body).encode("utf-8")
    return raw, hmac.new(secret.encode("utf-8"), raw, hashlib.sha512).hexdigest()


@pytest.fixture
def hospital(db):
    return make_hospital(db)


@pytest.fixture
def other_hospital(db):
    return make_hospital(db, name="Ikeja Specialist Clinic", email="contact@ikejaclinic.ng")


@pytest.fixture
def super_admin(db):
    return make_user(db, None, Role.SUPER_ADMIN, "root@hmsplatform.ng", "Platform", "Owner")


@pytest.fixture
def admin(db, hospital):
    return make_user(db, hospital, Role.ADMIN, "admin@stnicholas.ng", "Adaeze", "Okafor")


@pytest.fixture
def doctor(db, hospital):
    return make_user(db, hospital, Role.DOCTOR, "dr.bakare@stnicholas.ng", "Tunde", "Bakare")


@pytest.fixture
def nurse(db, hospital):
    return make_user(db, hospital, Role.NURSE, "nurse.eze@stnicholas.ng", "Ngozi", "Eze")


@pytest.fixture
def receptionist(db, hospital):
    return make_user(db, hospital, Role.RECEPTIONIST, "frontdesk@stnicholas.ng", "Chinedu", "Obi")


@pytest.fixture
def pharmacist(db, hospital):
    return make_user(db, hospital, Role.PHARMACIST, "pharmacy@stnicholas.ng", "Ibrahim", "Musa")


@pytest.fixture
def billing_officer(db, hospital):
    return make_user(db, hospital, Role.BILLING_OFFICER, "billing@stnicholas.ng", "Aisha", "Bello")


@pytest.fixture
def ward_manager(db, hospital):
    return make_user(db, hospital, Role.WARD_MANAGER, "wards@stnicholas.ng", "Emeka", "Nwosu")


@pytest.fixture
def other_admin(db, other_hospital):
    return make_user(db, other_hospital, Role.ADMIN, "admin@ikejaclinic.ng", "Kemi", "Lawal")


@pytest.fixture
def auth_headers(settings):
    def _headers(user):
        return {"Authorization": f"Bearer {issue_access_token_for_user(settings, user)}"}

    return _headers
