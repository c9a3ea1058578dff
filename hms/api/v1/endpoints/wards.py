# hms/api/v1/endpoints/wards.py
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session, contains_eager, selectinload

from hms.core.database import get_db
from hms.core.errors import InvalidInput, InvalidState
from hms.core.tenant_context import Principal, resolve_hospital_id, scope_hospital_id
from hms.dependencies.auth import get_auditor
from hms.dependencies.authz import require_permission
from hms.models.ward import Bed, BedStatus, Room, Ward
from hms.schemas.ward import (
    AvailableBed,
    AvailableBedList,
    BedCreate,
    BedEnvelope,
    BedRead,
    BedStatusUpdate,
    RoomCreate,
    RoomEnvelope,
    RoomRead,
    RoomRef,
    WardBeds,
    WardCreate,
    WardDetail,
    WardEnvelope,
    WardList,
    WardOccupancy,
    WardRead,
    WardRef,
)
from hms.services.audit_service import RequestAuditor
from hms.services.dashboard_service import occupancy_percentage
from hms.utils.lookups import commit_or_raise, get_owned_or_404

router = APIRouter()


@router.post("", response_model=WardEnvelope, status_code=status.HTTP_201_CREATED)
def create_ward(
    payload: WardCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("wards.write")),
    audit: RequestAuditor = Depends(get_auditor),
) -> WardEnvelope:
    hospital_id = resolve_hospital_id(principal, payload.hospital_id)
    ward = Ward(
        hospital_id=hospital_id,
        name=payload.name,
        type=payload.type,
        floor=payload.floor,
        capacity=payload.capacity,
        active=True,
    )
    db.add(ward)
    commit_or_raise(db, "create ward")
    db.refresh(ward)

    audit("CREATE_WARD", "WARD", ward.id, {"name": ward.name, "type": ward.type}, hospital_id=hospital_id)
    return WardEnvelope(ward=WardRead.model_validate(ward))


@router.get("", response_model=WardList)
def list_wards(
    hospital_id: UUID | None = Query(None, alias="hospitalId"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("wards.read")),
) -> WardList:
    """
    Active wards with their bed counts.
    """
    query = db.query(Ward).filter(Ward.active.is_(True))
    scope = scope_hospital_id(principal, hospital_id)
    if scope is not None:
        query = query.filter(Ward.hospital_id == scope)
    wards = query.order_by(Ward.name.asc()).all()

    counts: dict[UUID, dict[BedStatus, int]] = {}
    if wards:
        rows = (
            db.query(Room.ward_id, Bed.status, func.count(Bed.id))
            .join(Bed, Bed.room_id == Room.id)
            .filter(Room.ward_id.in_([w.id for w in wards]))
            .group_by(Room.ward_id, Bed.status)
            .all()
        )
        for ward_id, bed_status, count in rows:
            counts.setdefault(ward_id, {})[bed_status] = count

    result = []
    for ward in wards:
        by_status = counts.get(ward.id, {})
        total = sum(by_status.values())
        occupied = by_status.get(BedStatus.OCCUPIED, 0)
        result.append(
            WardOccupancy.model_validate(ward).model_copy(
                update={
                    "total_beds": total,
                    "occupied_beds": occupied,
                    "available_beds": by_status.get(BedStatus.AVAILABLE, 0),
                    "occupancy_rate": occupancy_percentage(occupied, total),
                }
            )
        )
    return WardList(wards=result)


@router.get("/beds/available", response_model=AvailableBedList)
def available_beds(
    ward_type: str | None = Query(None, alias="wardType"),
    room_type: str | None = Query(None, alias="roomType"),
    hospital_id: UUID | None = Query(None, alias="hospitalId"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("wards.read")),
) -> AvailableBedList:
    query = (
        db.query(Bed)
        .join(Bed.room)
        .join(Room.ward)
        .options(contains_eager(Bed.room).contains_eager(Room.ward))
        .filter(Bed.status == BedStatus.AVAILABLE, Ward.active.is_(True))
    )
    scope = scope_hospital_id(principal, hospital_id)
    if scope is not None:
        query = query.filter(Ward.hospital_id == scope)
    if ward_type:
        query = query.filter(Ward.type == ward_type)
    if room_type:
        query = query.filter(Room.type == room_type)

    beds = query.order_by(Ward.name.asc(), Room.room_number.asc(), Bed.bed_number.asc()).all()
    return AvailableBedList(
        beds=[
            AvailableBed(
                **BedRead.model_validate(bed).model_dump(),
                room=RoomRef.model_validate(bed.room),
                ward=WardRef.model_validate(bed.room.ward),
            )
            for bed in beds
        ]
    )


@router.post("/rooms", response_model=RoomEnvelope, status_code=status.HTTP_201_CREATED)
def create_room(
    payload: RoomCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("wards.write")),
    audit: RequestAuditor = Depends(get_auditor),
) -> RoomEnvelope:
    ward = get_owned_or_404(db, Ward, payload.ward_id, principal, "Ward")
    room = Room(
        ward_id=ward.id,
        room_number=payload.room_number,
        type=payload.type,
        capacity=payload.capacity,
    )
    db.add(room)
    commit_or_raise(db, "create room")
    db.refresh(room)

    audit(
        "CREATE_ROOM",
        "ROOM",
        room.id,
        {"wardId": ward.id, "roomNumber": room.room_number},
        hospital_id=ward.hospital_id,
    )
    return RoomEnvelope(room=RoomRead.model_validate(room))


@router.post("/beds", response_model=BedEnvelope, status_code=status.HTTP_201_CREATED)
def create_bed(
    payload: BedCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("wards.write")),
    audit: RequestAuditor = Depends(get_auditor),
) -> BedEnvelope:
    room = get_owned_or_404(db, Room, payload.room_id, principal, "Room")
    bed = Bed(room_id=room.id, bed_number=payload.bed_number, status=BedStatus.AVAILABLE)
    db.add(bed)
    commit_or_raise(db, "create bed")
    db.refresh(bed)

    audit(
        "CREATE_BED",
        "BED",
        bed.id,
        {"roomId": room.id, "bedNumber": bed.bed_number},
        hospital_id=room.hospital_id,
    )
    return BedEnvelope(bed=BedRead.model_validate(bed))


@router.put("/beds/{bed_id}/status", response_model=BedEnvelope)
def update_bed_status(
    bed_id: UUID,
    payload: BedStatusUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("beds.update_status")),
    audit: RequestAuditor = Depends(get_auditor),
) -> BedEnvelope:
    """
    Housekeeping status changes. Occupancy is only ever changed by
    bed assignment and discharge.
    """
    bed = get_owned_or_404(db, Bed, bed_id, principal, "Bed")
    if payload.status == BedStatus.OCCUPIED:
        raise InvalidInput("Beds become occupied through bed assignment")
    if bed.status == BedStatus.OCCUPIED:
        raise InvalidState("Bed is occupied; discharge or reassign the patient first")

    previous = bed.status
    bed.status = payload.status
    hospital_id = bed.hospital_id
    commit_or_raise(db, "update bed status")
    db.refresh(bed)

    audit(
        "UPDATE_BED_STATUS",
        "BED",
        bed.id,
        {"from": previous, "to": bed.status},
        hospital_id=hospital_id,
    )
    return BedEnvelope(bed=BedRead.model_validate(bed))


@router.get("/{ward_id}/beds", response_model=WardBeds)
def ward_beds(
    ward_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("wards.read")),
) -> WardBeds:
    get_owned_or_404(db, Ward, ward_id, principal, "Ward")
    ward = (
        db.query(Ward)
        .options(selectinload(Ward.rooms).selectinload(Room.beds))
        .filter(Ward.id == ward_id)
        .one()
    )
    return WardBeds(ward=WardDetail.model_validate(ward))
