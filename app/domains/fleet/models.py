# app/domains/fleet/models.py

"""
'fleet' 도메인 (PostgreSQL 'fleet' 스키마)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.
 - 좌석 배치 모델(BusDiagramModel) -> 템플릿 좌석(BusSeatModel)
 - 버스 모델(BusModel) -> 기본 좌석 배치 모델 참조
 - 버스(Bus) -> 버스 전용 좌석 배치도(SeatDiagram) -> 좌석(BusSeat)

좌석 배치도는 버스를 만들 때 좌석 배치 모델을 복사하여 생성되며, 버스마다 하나씩 소유합니다.
seats_per_floor, bathroom_rows, amenities, position, meta 컬럼은 JSON(B)으로 저장됩니다.
"""

from typing import Optional, List, Dict, Any
from datetime import datetime, date, UTC
from enum import Enum
from sqlmodel import Field, Relationship, SQLModel, Column
from sqlalchemy import UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP

from app.core.db_types import JSONVariant
from app.domains.fleet.seat_layout import SpaceType, SeatType, DEFAULT_SEAT_TYPE


# 버스 운행 상태 Enum
class BusStatus(str, Enum):
    ACTIVE = "ACTIVE"
    MAINTENANCE = "MAINTENANCE"
    REPAIR = "REPAIR"
    OUT_OF_SERVICE = "OUT_OF_SERVICE"
    RESERVED = "RESERVED"
    IN_TRANSIT = "IN_TRANSIT"
    RETIRED = "RETIRED"


# =============================================================================
# 1. fleet.bus_diagram_models 테이블 모델
# =============================================================================
class BusDiagramModelBase(SQLModel):
    """
    fleet.bus_diagram_models 테이블의 기본 속성을 정의하는 SQLModel Base 클래스입니다.
    """
    id: Optional[int] = Field(default=None, primary_key=True, description="좌석 배치 모델 고유 ID")
    name: str = Field(max_length=100, sa_column_kwargs={"unique": True}, description="좌석 배치 모델명")
    description: Optional[str] = Field(default=None, description="설명")
    max_capacity: int = Field(default=0, description="최대 탑승 인원")
    num_floors: int = Field(default=1, description="층 수")
    seats_per_floor: List[Dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSONVariant, nullable=False),
        description="층별 좌석 구성 [{floor_number, num_rows, seats_left, seats_right}]"
    )
    bathroom_rows: List[Dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSONVariant, nullable=False),
        description="화장실 위치 [{floor_number, row_number}]"
    )
    total_seats: int = Field(default=0, description="활성 좌석 수")
    is_factory_default: bool = Field(default=False, description="제조사 기본 배치 여부")
    active: bool = Field(default=True, description="사용 여부")

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
        description="레코드 마지막 업데이트 일시"
    )


class BusDiagramModel(BusDiagramModelBase, table=True):
    """
    PostgreSQL의 fleet.bus_diagram_models 테이블에 매핑되는 SQLModel ORM 클래스입니다.
    """
    __tablename__ = "bus_diagram_models"
    __table_args__ = {'schema': 'fleet'}

    seat_models: List["BusSeatModel"] = Relationship(back_populates="bus_diagram_model")
    seat_diagrams: List["SeatDiagram"] = Relationship(back_populates="bus_diagram_model")


# =============================================================================
# 2. fleet.bus_seat_models 테이블 모델 (좌석 배치 모델의 템플릿 좌석)
# =============================================================================
class BusSeatModelBase(SQLModel):
    id: Optional[int] = Field(default=None, primary_key=True)
    bus_diagram_model_id: int = Field(foreign_key="fleet.bus_diagram_models.id", index=True, description="좌석 배치 모델 ID (FK)")
    space_type: SpaceType = Field(default=SpaceType.SEAT, description="칸 종류")
    seat_number: Optional[str] = Field(default=None, max_length=10, description="좌석 번호")
    seat_type: Optional[SeatType] = Field(default=DEFAULT_SEAT_TYPE, description="좌석 등급")
    floor_number: int = Field(default=1, description="층 번호")
    amenities: List[str] = Field(default_factory=list, sa_column=Column(JSONVariant, nullable=False), description="좌석 편의시설")
    reclinement_angle: Optional[int] = Field(default=None, description="등받이 각도")
    position: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSONVariant, nullable=False), description="위치 {x, y}")
    meta: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSONVariant, nullable=False), description="부가 속성")
    active: bool = Field(default=True)

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
        description="레코드 마지막 업데이트 일시"
    )


class BusSeatModel(BusSeatModelBase, table=True):
    __tablename__ = "bus_seat_models"
    __table_args__ = {'schema': 'fleet'}

    bus_diagram_model: Optional[BusDiagramModel] = Relationship(back_populates="seat_models")


# =============================================================================
# 3. fleet.bus_models 테이블 모델
# =============================================================================
class BusModelBase(SQLModel):
    """
    fleet.bus_models 테이블의 기본 속성을 정의하는 SQLModel Base 클래스입니다.
    제조사/모델명/연식 조합은 고유해야 합니다.
    """
    id: Optional[int] = Field(default=None, primary_key=True, description="버스 모델 고유 ID")
    default_bus_diagram_model_id: Optional[int] = Field(
        default=None, foreign_key="fleet.bus_diagram_models.id", description="기본 좌석 배치 모델 ID (FK)"
    )
    manufacturer: str = Field(max_length=100, description="제조사")
    model: str = Field(max_length=100, description="모델명")
    year: int = Field(description="연식")
    seating_capacity: int = Field(description="좌석 정원")
    num_floors: int = Field(default=1, description="층 수")
    amenities: List[str] = Field(default_factory=list, sa_column=Column(JSONVariant, nullable=False), description="버스 편의시설")
    engine_type: Optional[str] = Field(default=None, max_length=50, description="엔진 종류")
    distribution_type: Optional[str] = Field(default=None, max_length=50, description="좌석 배열 형태")
    active: bool = Field(default=True)

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
        description="레코드 마지막 업데이트 일시"
    )


class BusModel(BusModelBase, table=True):
    __tablename__ = "bus_models"
    __table_args__ = (
        UniqueConstraint("manufacturer", "model", "year", name="uq_bus_models_manufacturer_model_year"),
        {'schema': 'fleet'},
    )

    buses: List["Bus"] = Relationship(back_populates="bus_model")


# =============================================================================
# 4. fleet.seat_diagrams 테이블 모델 (버스별 좌석 배치도)
# =============================================================================
class SeatDiagramBase(SQLModel):
    id: Optional[int] = Field(default=None, primary_key=True, description="좌석 배치도 고유 ID")
    bus_diagram_model_id: int = Field(foreign_key="fleet.bus_diagram_models.id", description="원본 좌석 배치 모델 ID (FK)")
    name: str = Field(max_length=200, description="좌석 배치도명")
    description: Optional[str] = Field(default=None)
    max_capacity: int = Field(default=0)
    num_floors: int = Field(default=1)
    seats_per_floor: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSONVariant, nullable=False))
    bathroom_rows: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSONVariant, nullable=False))
    total_seats: int = Field(default=0)
    is_factory_default: bool = Field(default=False)
    is_modified: bool = Field(default=False, description="수동 수정 여부 (true이면 템플릿 동기화 대상에서 제외)")
    active: bool = Field(default=True)

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
        description="레코드 마지막 업데이트 일시"
    )


class SeatDiagram(SeatDiagramBase, table=True):
    __tablename__ = "seat_diagrams"
    __table_args__ = {'schema': 'fleet'}

    bus_diagram_model: Optional[BusDiagramModel] = Relationship(back_populates="seat_diagrams")
    seats: List["BusSeat"] = Relationship(back_populates="seat_diagram")


# =============================================================================
# 5. fleet.bus_seats 테이블 모델 (좌석 배치도의 실제 좌석)
# =============================================================================
class BusSeatBase(SQLModel):
    id: Optional[int] = Field(default=None, primary_key=True)
    seat_diagram_id: int = Field(foreign_key="fleet.seat_diagrams.id", index=True, description="좌석 배치도 ID (FK)")
    space_type: SpaceType = Field(default=SpaceType.SEAT)
    seat_number: Optional[str] = Field(default=None, max_length=10)
    seat_type: Optional[SeatType] = Field(default=DEFAULT_SEAT_TYPE)
    floor_number: int = Field(default=1)
    amenities: List[str] = Field(default_factory=list, sa_column=Column(JSONVariant, nullable=False))
    reclinement_angle: Optional[int] = Field(default=None)
    position: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSONVariant, nullable=False))
    meta: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSONVariant, nullable=False))
    active: bool = Field(default=True)

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
        description="레코드 마지막 업데이트 일시"
    )


class BusSeat(BusSeatBase, table=True):
    __tablename__ = "bus_seats"
    __table_args__ = {'schema': 'fleet'}

    seat_diagram: Optional[SeatDiagram] = Relationship(back_populates="seats")


# =============================================================================
# 6. fleet.buses 테이블 모델
# =============================================================================
class BusBase(SQLModel):
    """
    fleet.buses 테이블의 기본 속성을 정의하는 SQLModel Base 클래스입니다.
    등록 관련 부가 정보(번호판 종류, 운행증, 차대번호 등)는 모두 선택 항목입니다.
    """
    id: Optional[int] = Field(default=None, primary_key=True, description="버스 고유 ID")
    registration_number: str = Field(max_length=50, sa_column_kwargs={"unique": True}, description="차량 등록번호 (번호판)")
    economic_number: Optional[str] = Field(default=None, max_length=50, index=True, description="사내 관리번호")
    model_id: int = Field(foreign_key="fleet.bus_models.id", index=True, description="버스 모델 ID (FK)")
    seat_diagram_id: int = Field(foreign_key="fleet.seat_diagrams.id", index=True, description="좌석 배치도 ID (FK)")
    status: BusStatus = Field(default=BusStatus.ACTIVE, description="운행 상태")
    year: Optional[int] = Field(default=None, description="제작 연도")
    max_capacity: Optional[int] = Field(default=None, description="최대 탑승 인원")
    purchase_date: Optional[date] = Field(default=None, description="구매일")
    last_maintenance_date: Optional[date] = Field(default=None, description="최근 정비일")
    next_maintenance_date: Optional[date] = Field(default=None, description="다음 정비 예정일")
    gps_id: Optional[str] = Field(default=None, max_length=50, description="GPS 단말 ID")

    # 등록 부가 정보
    license_plate_type: Optional[str] = Field(default=None, max_length=50)
    circulation_card: Optional[str] = Field(default=None, max_length=50)
    sct_permit: Optional[str] = Field(default=None, max_length=50)
    vehicle_id: Optional[str] = Field(default=None, max_length=50)
    engine_number: Optional[str] = Field(default=None, max_length=50)
    serial_number: Optional[str] = Field(default=None, max_length=50)
    chassis_number: Optional[str] = Field(default=None, max_length=50)
    gross_vehicle_weight: Optional[float] = Field(default=None)
    fuel_efficiency: Optional[float] = Field(default=None)
    service_type: Optional[str] = Field(default=None, max_length=50)
    commercial_tourism: bool = Field(default=False)
    available: bool = Field(default=True)
    tourism: bool = Field(default=False)
    active: bool = Field(default=True)

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
        description="레코드 마지막 업데이트 일시"
    )


class Bus(BusBase, table=True):
    __tablename__ = "buses"
    __table_args__ = {'schema': 'fleet'}

    bus_model: Optional[BusModel] = Relationship(back_populates="buses")
    seat_diagram: Optional[SeatDiagram] = Relationship()
