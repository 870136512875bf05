# app/domains/fleet/schemas.py

"""
'fleet' 도메인 (좌석 배치 모델, 버스 모델, 좌석 배치도, 버스)의 API 데이터 전송 객체(DTO)를 정의하는 모듈입니다.

층별 좌석 구성(FloorSeats), 화장실 위치(BathroomLocation), 좌석 배치 결과(SeatConfiguration) 등
좌석 배치 엔진의 타입은 seat_layout 모듈의 것을 그대로 사용합니다.
"""

from typing import Optional, List, Dict, Any
from datetime import datetime, date
from pydantic import BaseModel, field_validator
from sqlmodel import SQLModel, Field

from . import models as fleet_models
from .seat_layout import (
    FloorSeats,
    BathroomLocation,
    SeatPosition,
    SeatConfigurationInput,
    SpaceType,
    SeatType,
)


def _validate_not_blank(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.strip():
        raise ValueError("must contain at least one non-whitespace character")
    return value


# =============================================================================
# 1. 좌석 배치 모델 (BusDiagramModel) 스키마
# =============================================================================
class BusDiagramModelBase(SQLModel):
    name: str = Field(..., min_length=1, max_length=100, description="좌석 배치 모델명")
    description: Optional[str] = None
    max_capacity: int = Field(..., ge=0, description="최대 탑승 인원")
    num_floors: int = Field(1, ge=1, description="층 수")
    seats_per_floor: List[FloorSeats] = Field(..., min_length=1, description="층별 좌석 구성")
    bathroom_rows: List[BathroomLocation] = Field(default_factory=list, description="화장실 위치")
    is_factory_default: bool = False
    active: bool = True


class BusDiagramModelCreate(BusDiagramModelBase):
    """total_seats 는 생성된 템플릿 좌석 수로 계산됩니다."""

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        return _validate_not_blank(value)


class BusDiagramModelUpdate(SQLModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    max_capacity: Optional[int] = Field(None, ge=0)
    num_floors: Optional[int] = Field(None, ge=1)
    seats_per_floor: Optional[List[FloorSeats]] = Field(None, min_length=1)
    bathroom_rows: Optional[List[BathroomLocation]] = None
    is_factory_default: Optional[bool] = None
    active: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, value: Optional[str]) -> Optional[str]:
        return _validate_not_blank(value)


class BusDiagramModelRead(BusDiagramModelBase):
    id: int
    total_seats: int
    created_at: datetime = Field(..., description="레코드 생성 일시")
    updated_at: datetime = Field(..., description="레코드 마지막 업데이트 일시")


class RegenerateSeatModelsResult(BaseModel):
    bus_diagram_model: BusDiagramModelRead
    seats_generated: int


# =============================================================================
# 2. 좌석 (BusSeatModel / BusSeat) 스키마
# =============================================================================
class SeatSpaceRead(SQLModel):
    id: int
    space_type: SpaceType
    seat_number: Optional[str] = None
    seat_type: Optional[SeatType] = None
    floor_number: int
    amenities: List[str] = []
    reclinement_angle: Optional[int] = None
    position: Optional[SeatPosition] = None
    meta: Dict[str, Any] = {}
    active: bool
    created_at: datetime
    updated_at: datetime


class BusSeatModelRead(SeatSpaceRead):
    bus_diagram_model_id: int


class BusSeatRead(SeatSpaceRead):
    seat_diagram_id: int


class SeatConfigurationUpdate(BaseModel):
    """좌석 일괄 수정 요청. 요청에 없는 활성 칸은 비활성화됩니다."""
    seats: List[SeatConfigurationInput]


class SeatConfigurationUpdateResult(BaseModel):
    seats_created: int
    seats_updated: int
    seats_deactivated: int
    total_active_seats: int


class MaterializeSeatsResult(BaseModel):
    seat_diagram_id: int
    seats_created: int
    total_seats: int


class SeatDiagramSyncResult(BaseModel):
    """템플릿 좌석과 동기화된 좌석 배치도 한 건의 변경 요약"""
    seat_diagram_id: int
    created: int
    updated: int
    deleted: int


class SeatDiagramSyncResponse(BaseModel):
    """
    동기화 요청 응답.
    작업 큐(arq)에 등록되면 status='queued'와 job_id를, 즉시 실행되면 status='completed'와 results를 반환합니다.
    """
    status: str
    job_id: Optional[str] = None
    results: List[SeatDiagramSyncResult] = []


# =============================================================================
# 3. 버스 모델 (BusModel) 스키마
# =============================================================================
class BusModelBase(SQLModel):
    default_bus_diagram_model_id: Optional[int] = None
    manufacturer: str = Field(..., min_length=1, max_length=100)
    model: str = Field(..., min_length=1, max_length=100)
    year: int = Field(..., ge=1900, le=2100)
    seating_capacity: int = Field(..., ge=1)
    num_floors: int = Field(1, ge=1)
    amenities: List[str] = Field(default_factory=list)
    engine_type: Optional[str] = Field(None, max_length=50)
    distribution_type: Optional[str] = Field(None, max_length=50)
    active: bool = True


class BusModelCreate(BusModelBase):
    @field_validator("manufacturer", "model")
    @classmethod
    def check_not_blank(cls, value: str) -> str:
        return _validate_not_blank(value)


class BusModelUpdate(SQLModel):
    default_bus_diagram_model_id: Optional[int] = None
    manufacturer: Optional[str] = Field(None, min_length=1, max_length=100)
    model: Optional[str] = Field(None, min_length=1, max_length=100)
    year: Optional[int] = Field(None, ge=1900, le=2100)
    seating_capacity: Optional[int] = Field(None, ge=1)
    num_floors: Optional[int] = Field(None, ge=1)
    amenities: Optional[List[str]] = None
    engine_type: Optional[str] = Field(None, max_length=50)
    distribution_type: Optional[str] = Field(None, max_length=50)
    active: Optional[bool] = None


class BusModelRead(BusModelBase):
    id: int
    created_at: datetime = Field(..., description="레코드 생성 일시")
    updated_at: datetime = Field(..., description="레코드 마지막 업데이트 일시")


# =============================================================================
# 4. 좌석 배치도 (SeatDiagram) 스키마
# =============================================================================
class SeatDiagramUpdate(SQLModel):
    """좌석 배치도를 수정하면 is_modified 가 true 로 바뀌어 템플릿 동기화에서 제외됩니다."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    max_capacity: Optional[int] = Field(None, ge=0)
    num_floors: Optional[int] = Field(None, ge=1)
    seats_per_floor: Optional[List[FloorSeats]] = Field(None, min_length=1)
    bathroom_rows: Optional[List[BathroomLocation]] = None
    active: Optional[bool] = None


class SeatDiagramRead(SQLModel):
    id: int
    bus_diagram_model_id: int
    name: str
    description: Optional[str] = None
    max_capacity: int
    num_floors: int
    seats_per_floor: List[FloorSeats]
    bathroom_rows: List[BathroomLocation] = []
    total_seats: int
    is_factory_default: bool
    is_modified: bool
    active: bool
    created_at: datetime
    updated_at: datetime


# =============================================================================
# 5. 버스 (Bus) 스키마
# =============================================================================
class BusBase(SQLModel):
    registration_number: str = Field(..., min_length=1, max_length=50, description="차량 등록번호")
    economic_number: Optional[str] = Field(None, max_length=50)
    model_id: int
    year: Optional[int] = Field(None, ge=1900, le=2100)
    max_capacity: Optional[int] = Field(None, ge=0)
    purchase_date: Optional[date] = None
    last_maintenance_date: Optional[date] = None
    next_maintenance_date: Optional[date] = None
    gps_id: Optional[str] = Field(None, max_length=50)
    license_plate_type: Optional[str] = Field(None, max_length=50)
    circulation_card: Optional[str] = Field(None, max_length=50)
    sct_permit: Optional[str] = Field(None, max_length=50)
    vehicle_id: Optional[str] = Field(None, max_length=50)
    engine_number: Optional[str] = Field(None, max_length=50)
    serial_number: Optional[str] = Field(None, max_length=50)
    chassis_number: Optional[str] = Field(None, max_length=50)
    gross_vehicle_weight: Optional[float] = Field(None, ge=0)
    fuel_efficiency: Optional[float] = Field(None, ge=0)
    service_type: Optional[str] = Field(None, max_length=50)
    commercial_tourism: bool = False
    available: bool = True
    tourism: bool = False
    active: bool = True


class BusCreate(BusBase):
    """
    bus_diagram_model_id 를 생략하면 버스 모델의 기본 좌석 배치 모델을 사용합니다.
    좌석 배치도(seat_diagram_id)는 서버에서 생성합니다.
    """
    bus_diagram_model_id: Optional[int] = None
    status: fleet_models.BusStatus = fleet_models.BusStatus.ACTIVE

    @field_validator("registration_number")
    @classmethod
    def check_registration_number(cls, value: str) -> str:
        return _validate_not_blank(value)


class BusUpdate(SQLModel):
    registration_number: Optional[str] = Field(None, min_length=1, max_length=50)
    economic_number: Optional[str] = Field(None, max_length=50)
    model_id: Optional[int] = None
    status: Optional[fleet_models.BusStatus] = None
    year: Optional[int] = Field(None, ge=1900, le=2100)
    max_capacity: Optional[int] = Field(None, ge=0)
    purchase_date: Optional[date] = None
    last_maintenance_date: Optional[date] = None
    next_maintenance_date: Optional[date] = None
    gps_id: Optional[str] = Field(None, max_length=50)
    license_plate_type: Optional[str] = Field(None, max_length=50)
    circulation_card: Optional[str] = Field(None, max_length=50)
    sct_permit: Optional[str] = Field(None, max_length=50)
    vehicle_id: Optional[str] = Field(None, max_length=50)
    engine_number: Optional[str] = Field(None, max_length=50)
    serial_number: Optional[str] = Field(None, max_length=50)
    chassis_number: Optional[str] = Field(None, max_length=50)
    gross_vehicle_weight: Optional[float] = Field(None, ge=0)
    fuel_efficiency: Optional[float] = Field(None, ge=0)
    service_type: Optional[str] = Field(None, max_length=50)
    commercial_tourism: Optional[bool] = None
    available: Optional[bool] = None
    tourism: Optional[bool] = None
    active: Optional[bool] = None


class BusStatusUpdate(BaseModel):
    status: fleet_models.BusStatus


class BusAllowedTransitions(BaseModel):
    status: fleet_models.BusStatus
    allowed_transitions: List[fleet_models.BusStatus]


class BusRead(BusBase):
    id: int
    seat_diagram_id: int
    status: fleet_models.BusStatus
    created_at: datetime = Field(..., description="레코드 생성 일시")
    updated_at: datetime = Field(..., description="레코드 마지막 업데이트 일시")
