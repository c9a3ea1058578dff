# hms/schemas/ward.py
from datetime import datetime
from uuid import UUID

from pydantic import Field

from hms.models.ward import BedStatus
from hms.schemas.common import ApiModel, NonEmptyStr


class WardCreate(ApiModel):
    name: NonEmptyStr
    type: NonEmptyStr
    capacity: int = Field(ge=1)
    floor: str | None = None
    hospital_id: UUID | None = None


class RoomCreate(ApiModel):
    ward_id: UUID
    room_number: NonEmptyStr
    type: NonEmptyStr
    capacity: int = Field(ge=1)


class BedCreate(ApiModel):
    room_id: UUID
    bed_number: NonEmptyStr


class BedStatusUpdate(ApiModel):
    status: BedStatus


class BedRead(ApiModel):
    id: UUID
    room_id: UUID
    bed_number: str
    status: BedStatus
    current_patient_id: UUID | None = None
    current_admission_id: UUID | None = None


class RoomRead(ApiModel):
    id: UUID
    ward_id: UUID
    room_number: str
    type: str
    capacity: int
    beds: list[BedRead] = []


class WardRead(ApiModel):
    id: UUID
    hospital_id: UUID
    name: str
    type: str
    floor: str | None = None
    capacity: int
    active: bool
    created_at: datetime | None = None


class WardOccupancy(WardRead):
    total_beds: int = 0
    occupied_beds: int = 0
    available_beds: int = 0
    occupancy_rate: int = 0


class WardDetail(WardRead):
    rooms: list[RoomRead] = []


class WardRef(ApiModel):
    id: UUID
    name: str
    type: str


class RoomRef(ApiModel):
    id: UUID
    room_number: str
    type: str


class AvailableBed(BedRead):
    room: RoomRef
    ward: WardRef


class WardEnvelope(ApiModel):
    ward: WardRead


class WardList(ApiModel):
    wards: list[WardOccupancy]


class WardBeds(ApiModel):
    ward: WardDetail


class RoomEnvelope(ApiModel):
    room: RoomRead


class BedEnvelope(ApiModel):
    bed: BedRead


class AvailableBedList(ApiModel):
    beds: list[AvailableBed]
