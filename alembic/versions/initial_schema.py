"""initial_schema

Revision ID: initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

MONEY = sa.Numeric(12, 2, asdecimal=False)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def _hospital_fk() -> list:
    return [
        sa.Column("hospital_id", sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(["hospital_id"], ["hospitals.id"], ondelete="CASCADE"),
    ]


def _status(name: str, *values: str) -> sa.Enum:
    return sa.Enum(*values, name=name, native_enum=False, length=32)


def _index(table: str, *columns: str) -> None:
    op.create_index(op.f(f"ix_{table}_{columns[0]}"), table, list(columns))


def upgrade() -> None:
    op.create_table(
        "hospitals",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("address", sa.String(length=500), nullable=True),
        sa.Column("logo", sa.String(length=500), nullable=True),
        sa.Column("settings", sa.JSON(), nullable=True),
        sa.Column("active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    _index("hospitals", "created_at")

    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("hospital_id", sa.Uuid(), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("department", sa.String(length=100), nullable=True),
        sa.Column(
            "role",
            _status(
                "role_enum",
                "SUPER_ADMIN",
                "ADMIN",
                "DOCTOR",
                "NURSE",
                "PHARMACIST",
                "LAB_TECH",
                "RECEPTIONIST",
                "BILLING_OFFICER",
                "WARD_MANAGER",
            ),
            nullable=False,
        ),
        sa.Column("active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["hospital_id"], ["hospitals.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    _index("users", "hospital_id")
    _index("users", "created_at")

    op.create_table(
        "refresh_tokens",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("token", sa.String(length=1024), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("token"),
    )
    _index("refresh_tokens", "user_id")

    op.create_table(
        "patients",
        sa.Column("id", sa.Uuid(), nullable=False),
        *_hospital_fk(),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=False),
        sa.Column("gender", sa.String(length=20), nullable=False),
        sa.Column("phone", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("address", sa.String(length=500), nullable=True),
        sa.Column("emergency_contact_name", sa.String(length=200), nullable=True),
        sa.Column("emergency_contact_phone", sa.String(length=50), nullable=True),
        sa.Column("emergency_contact_relationship", sa.String(length=100), nullable=True),
        sa.Column("blood_group", sa.String(length=10), nullable=True),
        sa.Column("allergies", sa.JSON(), nullable=False),
        sa.Column("current_medications", sa.JSON(), nullable=False),
        sa.Column("created_by", sa.Uuid(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("patients", "hospital_id")
    _index("patients", "phone")
    _index("patients", "created_at")

    op.create_table(
        "visits",
        sa.Column("id", sa.Uuid(), nullable=False),
        *_hospital_fk(),
        sa.Column("patient_id", sa.Uuid(), nullable=False),
        sa.Column("department", sa.String(length=100), nullable=False),
        sa.Column("reason_for_visit", sa.Text(), nullable=False),
        sa.Column(
            "status",
            _status("visit_status_enum", "CHECKED_IN", "WAITING", "IN_PROGRESS", "COMPLETED", "CANCELLED"),
            nullable=False,
        ),
        sa.Column("check_in_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("assigned_to", sa.Uuid(), nullable=True),
        sa.Column("checked_in_by", sa.Uuid(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["patient_id"], ["patients.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["assigned_to"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["checked_in_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    for column in ("hospital_id", "patient_id", "department", "status", "check_in_time", "created_at"):
        _index("visits", column)

    op.create_table(
        "vital_signs",
        sa.Column("id", sa.Uuid(), nullable=False),
        *_hospital_fk(),
        sa.Column("patient_id", sa.Uuid(), nullable=False),
        sa.Column("visit_id", sa.Uuid(), nullable=True),
        sa.Column("blood_pressure", sa.String(length=20), nullable=True),
        sa.Column("heart_rate", sa.Integer(), nullable=True),
        sa.Column("temperature", sa.Float(), nullable=True),
        sa.Column("weight", sa.Float(), nullable=True),
        sa.Column("height", sa.Float(), nullable=True),
        sa.Column("respiratory_rate", sa.Integer(), nullable=True),
        sa.Column("oxygen_saturation", sa.Float(), nullable=True),
        sa.Column("blood_sugar", sa.Float(), nullable=True),
        sa.Column("pain_level", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column(
            "triage_category",
            _status("triage_category_enum", "EMERGENCY", "URGENT", "STANDARD", "NON_URGENT"),
            nullable=True,
        ),
        sa.Column("recorded_by", sa.Uuid(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["patient_id"], ["patients.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["visit_id"], ["visits.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["recorded_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    for column in ("hospital_id", "patient_id", "visit_id", "triage_category", "created_at"):
        _index("vital_signs", column)

    op.create_table(
        "consultations",
        sa.Column("id", sa.Uuid(), nullable=False),
        *_hospital_fk(),
        sa.Column("visit_id", sa.Uuid(), nullable=False),
        sa.Column("patient_id", sa.Uuid(), nullable=False),
        sa.Column("doctor_id", sa.Uuid(), nullable=False),
        sa.Column("chief_complaint", sa.Text(), nullable=False),
        sa.Column("diagnosis", sa.Text(), nullable=False),
        sa.Column("vital_signs", sa.JSON(), nullable=True),
        sa.Column("physical_exam", sa.Text(), nullable=True),
        sa.Column("treatment_plan", sa.Text(), nullable=True),
        sa.Column("follow_up", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["visit_id"], ["visits.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["patient_id"], ["patients.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["doctor_id"], ["users.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    for column in ("hospital_id", "visit_id", "patient_id", "doctor_id", "created_at"):
        _index("consultations", column)

    op.create_table(
        "wards",
        sa.Column("id", sa.Uuid(), nullable=False),
        *_hospital_fk(),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("type", sa.String(length=50), nullable=False),
        sa.Column("floor", sa.String(length=20), nullable=True),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    for column in ("hospital_id", "type", "created_at"):
        _index("wards", column)

    op.create_table(
        "rooms",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("ward_id", sa.Uuid(), nullable=False),
        sa.Column("room_number", sa.String(length=20), nullable=False),
        sa.Column("type", sa.String(length=50), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["ward_id"], ["wards.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("ward_id", "room_number", name="uq_rooms_ward_room_number"),
    )
    _index("rooms", "ward_id")
    _index("rooms", "created_at")

    op.create_table(
        "beds",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("room_id", sa.Uuid(), nullable=False),
        sa.Column("bed_number", sa.String(length=20), nullable=False),
        sa.Column(
            "status",
            _status("bed_status_enum", "AVAILABLE", "OCCUPIED", "RESERVED", "CLEANING", "MAINTENANCE"),
            nullable=False,
        ),
        sa.Column("current_patient_id", sa.Uuid(), nullable=True),
        sa.Column("current_admission_id", sa.Uuid(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["room_id"], ["rooms.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["current_patient_id"], ["patients.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("room_id", "bed_number", name="uq_beds_room_bed_number"),
    )
    for column in ("room_id", "status", "created_at"):
        _index("beds", column)

    op.create_table(
        "admissions",
        sa.Column("id", sa.Uuid(), nullable=False),
        *_hospital_fk(),
        sa.Column("patient_id", sa.Uuid(), nullable=False),
        sa.Column("visit_id", sa.Uuid(), nullable=True),
        sa.Column("admitted_by", sa.Uuid(), nullable=True),
        sa.Column("diagnosis", sa.Text(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column(
            "status",
            _status("admission_status_enum", "PENDING", "ADMITTED", "DISCHARGED"),
            nullable=False,
        ),
        sa.Column("admission_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ward_id", sa.Uuid(), nullable=True),
        sa.Column("room_id", sa.Uuid(), nullable=True),
        sa.Column("bed_id", sa.Uuid(), nullable=True),
        sa.Column("assigned_ward_manager", sa.Uuid(), nullable=True),
        sa.Column("discharge_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("discharge_notes", sa.Text(), nullable=True),
        sa.Column("discharge_summary", sa.Text(), nullable=True),
        sa.Column("discharged_by", sa.Uuid(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["patient_id"], ["patients.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["visit_id"], ["visits.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["admitted_by"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["ward_id"], ["wards.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["room_id"], ["rooms.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["bed_id"], ["beds.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["assigned_ward_manager"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["discharged_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    for column in ("hospital_id", "patient_id", "status", "ward_id", "created_at"):
        _index("admissions", column)

    op.create_table(
        "nursing_rounds",
        sa.Column("id", sa.Uuid(), nullable=False),
        *_hospital_fk(),
        sa.Column("admission_id", sa.Uuid(), nullable=False),
        sa.Column("nurse_id", sa.Uuid(), nullable=True),
        sa.Column("vital_signs_id", sa.Uuid(), nullable=True),
        sa.Column("round_type", sa.String(length=50), nullable=False),
        sa.Column("patient_condition", sa.String(length=100), nullable=False),
        sa.Column("medication_given", sa.Text(), nullable=True),
        sa.Column("observations", sa.Text(), nullable=True),
        sa.Column("next_round_due", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["admission_id"], ["admissions.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["nurse_id"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["vital_signs_id"], ["vital_signs.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    for column in ("hospital_id", "admission_id", "next_round_due", "created_at"):
        _index("nursing_rounds", column)

    op.create_table(
        "doctor_reviews",
        sa.Column("id", sa.Uuid(), nullable=False),
        *_hospital_fk(),
        sa.Column("admission_id", sa.Uuid(), nullable=False),
        sa.Column("doctor_id", sa.Uuid(), nullable=True),
        sa.Column("findings", sa.Text(), nullable=True),
        sa.Column("treatment_plan_update", sa.Text(), nullable=True),
        sa.Column("orders_given", sa.Text(), nullable=True),
        sa.Column("discharge_recommendation", sa.Text(), nullable=True),
        sa.Column("next_review_due", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["admission_id"], ["admissions.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["doctor_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    for column in ("hospital_id", "admission_id", "created_at"):
        _index("doctor_reviews", column)

    op.create_table(
        "lab_orders",
        sa.Column("id", sa.Uuid(), nullable=False),
        *_hospital_fk(),
        sa.Column("visit_id", sa.Uuid(), nullable=False),
        sa.Column("patient_id", sa.Uuid(), nullable=False),
        sa.Column("ordered_by", sa.Uuid(), nullable=True),
        sa.Column("processed_by", sa.Uuid(), nullable=True),
        sa.Column("test_type", sa.String(length=200), nullable=False),
        sa.Column("sample_id", sa.String(length=100), nullable=True),
        sa.Column(
            "status",
            _status("lab_order_status_enum", "ORDERED", "COLLECTED", "PROCESSING", "COMPLETED", "CANCELLED"),
            nullable=False,
        ),
        sa.Column("result_value", sa.Text(), nullable=True),
        sa.Column("normal_range", sa.String(length=200), nullable=True),
        sa.Column("result_notes", sa.Text(), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["visit_id"], ["visits.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["patient_id"], ["patients.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["ordered_by"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["processed_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    for column in ("hospital_id", "visit_id", "patient_id", "status", "created_at"):
        _index("lab_orders", column)

    op.create_table(
        "prescriptions",
        sa.Column("id", sa.Uuid(), nullable=False),
        *_hospital_fk(),
        sa.Column("patient_id", sa.Uuid(), nullable=False),
        sa.Column("visit_id", sa.Uuid(), nullable=False),
        sa.Column("consultation_id", sa.Uuid(), nullable=True),
        sa.Column("doctor_id", sa.Uuid(), nullable=True),
        sa.Column(
            "status",
            _status("prescription_status_enum", "PENDING", "DISPENSED", "CANCELLED"),
            nullable=False,
        ),
        sa.Column("dispensed_by", sa.Uuid(), nullable=True),
        sa.Column("dispensed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["patient_id"], ["patients.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["visit_id"], ["visits.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["consultation_id"], ["consultations.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["doctor_id"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["dispensed_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    for column in ("hospital_id", "patient_id", "visit_id", "status", "created_at"):
        _index("prescriptions", column)

    op.create_table(
        "prescription_items",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("prescription_id", sa.Uuid(), nullable=False),
        sa.Column("medication_name", sa.String(length=255), nullable=False),
        sa.Column("dosage", sa.String(length=100), nullable=False),
        sa.Column("frequency", sa.String(length=100), nullable=False),
        sa.Column("duration", sa.String(length=100), nullable=False),
        sa.Column("instructions", sa.String(length=500), nullable=True),
        sa.ForeignKeyConstraint(["prescription_id"], ["prescriptions.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("prescription_items", "prescription_id")

    op.create_table(
        "billing_records",
        sa.Column("id", sa.Uuid(), nullable=False),
        *_hospital_fk(),
        sa.Column("visit_id", sa.Uuid(), nullable=False),
        sa.Column("patient_id", sa.Uuid(), nullable=False),
        sa.Column("created_by", sa.Uuid(), nullable=True),
        sa.Column("total_amount", MONEY, nullable=False),
        sa.Column("paid_amount", MONEY, nullable=False),
        sa.Column(
            "status",
            _status("billing_status_enum", "PENDING", "PARTIAL", "PAID", "CANCELLED"),
            nullable=False,
        ),
        sa.Column("insurance_provider", sa.String(length=100), nullable=True),
        sa.Column("insurance_number", sa.String(length=100), nullable=True),
        sa.Column("insurance_coverage", MONEY, nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["visit_id"], ["visits.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["patient_id"], ["patients.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    for column in ("hospital_id", "visit_id", "patient_id", "status", "created_at"):
        _index("billing_records", column)

    op.create_table(
        "billing_items",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("billing_record_id", sa.Uuid(), nullable=False),
        sa.Column("description", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=50), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["billing_record_id"], ["billing_records.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    _index("billing_items", "billing_record_id")

    op.create_table(
        "payments",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("billing_record_id", sa.Uuid(), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("method", sa.String(length=50), nullable=False),
        sa.Column("reference", sa.String(length=100), nullable=True),
        sa.Column("received_by", sa.Uuid(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["billing_record_id"], ["billing_records.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["received_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    for column in ("billing_record_id", "reference", "created_at"):
        _index("payments", column)

    op.create_table(
        "inventory_items",
        sa.Column("id", sa.Uuid(), nullable=False),
        *_hospital_fk(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("category", sa.String(length=50), nullable=False),
        sa.Column("stock", sa.Integer(), nullable=False),
        sa.Column("reorder_level", sa.Integer(), nullable=False),
        sa.Column("unit_price", MONEY, nullable=False),
        sa.Column("expiry_date", sa.Date(), nullable=True),
        sa.Column("batch_number", sa.String(length=100), nullable=True),
        sa.Column("supplier", sa.String(length=200), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "hospital_id", "name", "batch_number", name="uq_inventory_items_hospital_name_batch"
        ),
    )
    for column in ("hospital_id", "name", "category", "created_at"):
        _index("inventory_items", column)

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=True),
        sa.Column("hospital_id", sa.Uuid(), nullable=True),
        sa.Column("action", sa.String(length=255), nullable=False),
        sa.Column("entity", sa.String(length=100), nullable=False),
        sa.Column("entity_id", sa.String(length=100), nullable=True),
        sa.Column("details", sa.JSON(), nullable=True),
        sa.Column("ip_address", sa.String(length=100), nullable=True),
        sa.Column("user_agent", sa.String(length=500), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    for column in ("user_id", "hospital_id", "action", "created_at"):
        _index("audit_logs", column)
    op.create_index("ix_audit_logs_entity_entity_id", "audit_logs", ["entity", "entity_id"])


def downgrade() -> None:
    for table in (
        "audit_logs",
        "inventory_items",
        "payments",
        "billing_items",
        "billing_records",
        "prescription_items",
        "prescriptions",
        "lab_orders",
        "doctor_reviews",
        "nursing_rounds",
        "admissions",
        "beds",
        "rooms",
        "wards",
        "consultations",
        "vital_signs",
        "visits",
        "patients",
        "refresh_tokens",
        "users",
        "hospitals",
    ):
        op.drop_table(table)
