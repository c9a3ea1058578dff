# hms/services/admission_service.py
"""
Bed assignment and discharge.

Both touch an admission and one or two beds. Each runs as a single
transaction: either every row changes or none does.
"""

import logging
import uuid

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from hms.core.errors import InvalidInput, InvalidState, NotFound, Unexpected
from hms.core.tenant_context import Principal
from hms.models.admission import Admission, AdmissionStatus
from hms.models.ward import Bed, BedStatus, Room
from hms.utils.datetime_utils import utc_now

logger = logging.getLogger(__name__)


def _release_bed(db: Session, bed_id: uuid.UUID) -> None:
    db.execute(
        update(Bed)
        .where(Bed.id == bed_id)
        .values(
            status=BedStatus.AVAILABLE,
            current_patient_id=None,
            current_admission_id=None,
        )
    )


def _commit(db: Session, what: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to %s", what)
        raise Unexpected(f"Failed to {what}")


def load_bed_for_update(db: Session, bed_id: uuid.UUID) -> Bed:
    bed = (
        db.query(Bed)
        .options(joinedload(Bed.room).joinedload(Room.ward))
        .filter(Bed.id == bed_id)
        .with_for_update(of=Bed)
        .first()
    )
    if not bed:
        raise NotFound("Bed not found")
    return bed


def assign_bed(
    db: Session,
    admission: Admission,
    bed: Bed,
    principal: Principal,
) -> uuid.UUID | None:
    """
    Place an admission in a bed.

    Rules:
    - Bed must belong to the admission's hospital
    - Bed must be AVAILABLE at the moment of the write
    - A discharged admission cannot get a bed
    - A previously held bed is released in the same transaction

    Returns the id of the released bed, if any.
    """
    if admission.status == AdmissionStatus.DISCHARGED:
        raise InvalidState("Cannot assign a bed to a discharged admission")

    if bed.hospital_id != admission.hospital_id:
        raise InvalidInput("Bed does not belong to the same hospital")

    if bed.status != BedStatus.AVAILABLE:
        raise InvalidState("Bed is not available")

    previous_bed_id = admission.bed_id
    if previous_bed_id and previous_bed_id != bed.id:
        _release_bed(db, previous_bed_id)

    # Compare-and-set: a concurrent assignment that got there first makes this match nothing.
    result = db.execute(
        update(Bed)
        .where(Bed.id == bed.id, Bed.status == BedStatus.AVAILABLE)
        .values(
            status=BedStatus.OCCUPIED,
            current_patient_id=admission.patient_id,
            current_admission_id=admission.id,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        raise InvalidState("Bed is not available")

    admission.ward_id = bed.room.ward_id
    admission.room_id = bed.room_id
    admission.bed_id = bed.id
    admission.assigned_ward_manager = principal.user_id
    admission.status = AdmissionStatus.ADMITTED

    _commit(db, "assign bed")
    db.expire(bed)
    return previous_bed_id if previous_bed_id != bed.id else None


def discharge(
    db: Session,
    admission: Admission,
    principal: Principal,
    discharge_notes: str | None = None,
    discharge_summary: str | None = None,
) -> uuid.UUID | None:
    """
    Discharge a patient and free their bed.

    Rules:
    - Discharging twice is InvalidState, not a no-op
    - Bed release and admission update commit together

    Returns the id of the released bed, if any.
    """
    if admission.status == AdmissionStatus.DISCHARGED:
        raise InvalidState("Patient already discharged")

    released_bed_id = admission.bed_id
    if released_bed_id:
        _release_bed(db, released_bed_id)

    admission.status = AdmissionStatus.DISCHARGED
    admission.discharge_date = utc_now()
    admission.discharge_notes = discharge_notes
    admission.discharge_summary = discharge_summary
    admission.discharged_by = principal.user_id

    _commit(db, "discharge patient")
    return released_bed_id
