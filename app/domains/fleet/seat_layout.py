# app/domains/fleet/seat_layout.py

"""
버스 좌석 배치(seat layout) 생성 엔진 모듈입니다.

데이터베이스에 의존하지 않는 순수 함수들로 구성되며, 다음을 수행합니다.

- 이론적 배치(theoretical configuration): 층/열/좌우 좌석 수/화장실 위치만으로 좌석 격자를 계산합니다.
- 재구성 배치(reconciled configuration): 저장된 좌석 레코드를 격자 위에 겹쳐 그리며,
  레코드가 없는 칸은 통로(hallway)로 표시합니다.
- 실체화(materialize): 이론적 배치의 좌석을 저장 가능한 좌석 페이로드로 변환합니다.
- 템플릿 좌석 생성, 일괄 수정 페이로드 검증, 템플릿과 좌석 간 동기화 계획 수립.

격자 한 줄(row)의 폭은 `seats_left + 1 + seats_right` 이며, 인덱스 `seats_left` 칸이 가운데 통로입니다.
좌석 번호는 "1"부터 시작하여 열과 층을 가로질러 연속으로 매겨집니다.
"""

from dataclasses import dataclass, field
from datetime import datetime, UTC
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_NUM_ROWS = 10
DEFAULT_RECLINEMENT_ANGLE = 120
DEFAULT_ROW_NUMBER = 1
DEFAULT_COLUMN_NUMBER = 0
INITIAL_SEAT_NUMBER = 1

# 좌석(SEAT)일 때만 meta에 존재하는 속성
SEAT_META_KEYS = ("is_window", "is_legroom")


# =============================================================================
# 1. 열거형 및 예외
# =============================================================================
class SpaceType(str, Enum):
    """격자 한 칸(space)의 종류"""
    SEAT = "seat"
    HALLWAY = "hallway"
    BATHROOM = "bathroom"
    EMPTY = "empty"
    STAIRS = "stairs"


class SeatType(str, Enum):
    """좌석 등급"""
    REGULAR = "regular"
    PREMIUM = "premium"
    VIP = "vip"
    BUSINESS = "business"
    EXECUTIVE = "executive"


DEFAULT_SEAT_TYPE = SeatType.REGULAR


class SeatLayoutError(ValueError):
    """
    좌석 배치 계산 또는 검증 실패 시 발생하는 예외입니다.
    일괄 검증의 경우 `errors`에 모든 오류 메시지가 담깁니다.
    """

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.errors = list(errors) if errors else [message]

    def __str__(self) -> str:
        if self.errors == [self.message]:
            return self.message
        return f"{self.message}: {'; '.join(self.errors)}"


# =============================================================================
# 2. 배치 입력/출력 타입
# =============================================================================
class FloorSeats(BaseModel):
    """층별 좌석 구성 (seats_per_floor 항목)"""
    floor_number: int = Field(..., ge=1)
    num_rows: int = Field(DEFAULT_NUM_ROWS, ge=0)
    seats_left: int = Field(..., ge=0)
    seats_right: int = Field(..., ge=0)


class BathroomLocation(BaseModel):
    """화장실이 위치한 층과 열 번호 (1부터 시작)"""
    floor_number: int = Field(..., ge=1)
    row_number: int = Field(..., ge=1)


class SeatPosition(BaseModel):
    """x: 0부터 시작하는 칸(column) 인덱스, y: 1부터 시작하는 열(row) 번호"""
    x: int
    y: int


class SeatSpace(BaseModel):
    """격자 한 칸"""
    space_type: SpaceType
    seat_number: Optional[str] = None
    seat_type: Optional[SeatType] = None
    amenities: List[str] = Field(default_factory=list)
    reclinement_angle: Optional[int] = None
    meta: Dict[str, Any] = Field(default_factory=dict)
    position: Optional[SeatPosition] = None


class FloorConfiguration(BaseModel):
    floor_number: int
    rows: List[List[SeatSpace]]


class SeatConfiguration(BaseModel):
    floors: List[FloorConfiguration]
    total_seats: int
    amenities: List[str] = Field(default_factory=list)


class SeatRecord(BaseModel):
    """
    저장된 좌석(BusSeat) 또는 템플릿 좌석(BusSeatModel)을 엔진이 읽는 형태입니다.
    ORM 객체와 dict 모두에서 생성할 수 있습니다.
    """
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    space_type: SpaceType = SpaceType.SEAT
    seat_number: Optional[str] = None
    seat_type: Optional[SeatType] = None
    floor_number: int = 1
    amenities: List[str] = Field(default_factory=list)
    reclinement_angle: Optional[int] = None
    position: Optional[SeatPosition] = None
    meta: Dict[str, Any] = Field(default_factory=dict)
    active: bool = True

    @field_validator("amenities", "meta", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any, info) -> Any:
        if value is None:
            return [] if info.field_name == "amenities" else {}
        return value


class SeatConfigurationInput(BaseModel):
    """좌석 일괄 수정 요청의 한 항목"""
    space_type: SpaceType = SpaceType.SEAT
    seat_number: Optional[str] = None
    floor_number: Optional[int] = None
    seat_type: Optional[SeatType] = None
    amenities: Optional[List[str]] = None
    reclinement_angle: Optional[int] = None
    position: Optional[SeatPosition] = None
    active: Optional[bool] = None


class SeatPayload(BaseModel):
    """저장할 좌석 한 칸의 속성 (BusSeat/BusSeatModel 생성용)"""
    space_type: SpaceType = SpaceType.SEAT
    seat_number: Optional[str] = None
    seat_type: Optional[SeatType] = None
    floor_number: int
    amenities: List[str] = Field(default_factory=list)
    reclinement_angle: Optional[int] = None
    position: SeatPosition
    meta: Dict[str, Any] = Field(default_factory=dict)
    active: bool = True


@dataclass
class MaterializableSeat:
    space: SeatSpace
    floor_number: int
    row_index: int
    col_index: int
    row_length: int


@dataclass
class SeatSyncPlan:
    """
    좌석 배치도(SeatDiagram)의 좌석을 템플릿 좌석과 일치시키기 위한 작업 목록입니다.
    to_update 항목은 (기존 좌석 객체, 반영할 필드 dict) 쌍입니다.
    """
    to_create: List[SeatPayload] = field(default_factory=list)
    to_update: List[Tuple[Any, Dict[str, Any]]] = field(default_factory=list)
    to_delete: List[Any] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.to_create or self.to_update or self.to_delete)


# =============================================================================
# 3. 내부 헬퍼
# =============================================================================
def _parse_floors(seats_per_floor: Iterable[Any]) -> List[FloorSeats]:
    return [FloorSeats.model_validate(item) for item in (seats_per_floor or [])]


def _parse_bathrooms(bathroom_rows: Optional[Iterable[Any]]) -> List[BathroomLocation]:
    return [BathroomLocation.model_validate(item) for item in (bathroom_rows or [])]


def _as_record(obj: Any) -> SeatRecord:
    if isinstance(obj, SeatRecord):
        return obj
    return SeatRecord.model_validate(obj)


def _as_input(obj: Any) -> SeatConfigurationInput:
    if isinstance(obj, SeatConfigurationInput):
        return obj
    return SeatConfigurationInput.model_validate(obj)


def _find_floor(floors: Sequence[FloorSeats], floor_number: int) -> Optional[FloorSeats]:
    for floor in floors:
        if floor.floor_number == floor_number:
            return floor
    return None


def _require_floor(floors: Sequence[FloorSeats], floor_number: int) -> FloorSeats:
    floor = _find_floor(floors, floor_number)
    if floor is None:
        raise SeatLayoutError(f"Floor configuration not found for floor {floor_number}")
    return floor


def _floor_row_count(floor: FloorSeats) -> int:
    # num_rows가 0이면 기본 열 수를 사용합니다.
    return floor.num_rows or DEFAULT_NUM_ROWS


def _bathroom_rows_on(bathrooms: Sequence[BathroomLocation], floor_number: int) -> Set[int]:
    return {b.row_number for b in bathrooms if b.floor_number == floor_number}


def _hallway() -> SeatSpace:
    return SeatSpace(space_type=SpaceType.HALLWAY)


def _seat_space(seat_number: str) -> SeatSpace:
    return SeatSpace(
        space_type=SpaceType.SEAT,
        seat_number=seat_number,
        seat_type=DEFAULT_SEAT_TYPE,
        amenities=[],
        meta={},
        reclinement_angle=DEFAULT_RECLINEMENT_ANGLE,
    )


def _bathroom_row(width: int) -> List[SeatSpace]:
    """통로로 채운 열의 가운데(width // 2)에 화장실 한 칸을 둡니다."""
    row = [_hallway() for _ in range(width)]
    row[width // 2] = SeatSpace(space_type=SpaceType.BATHROOM)
    return row


def _regular_row(floor: FloorSeats, counter: int) -> Tuple[List[SeatSpace], int]:
    row: List[SeatSpace] = []
    for _ in range(floor.seats_left):
        row.append(_seat_space(str(counter)))
        counter += 1
    row.append(_hallway())
    for _ in range(floor.seats_right):
        row.append(_seat_space(str(counter)))
        counter += 1
    return row, counter


def _space_from_record(record: SeatRecord) -> SeatSpace:
    is_seat = record.space_type == SpaceType.SEAT
    return SeatSpace(
        space_type=record.space_type,
        seat_number=record.seat_number,
        seat_type=(record.seat_type or DEFAULT_SEAT_TYPE) if is_seat else record.seat_type,
        amenities=list(record.amenities),
        reclinement_angle=(record.reclinement_angle or DEFAULT_RECLINEMENT_ANGLE) if is_seat else record.reclinement_angle,
        meta=dict(record.meta),
        position=record.position,
    )


def _row_from_records(floor: FloorSeats, by_column: Dict[int, SeatRecord]) -> List[SeatSpace]:
    row: List[SeatSpace] = []
    for x in range(row_width(floor)):
        record = by_column.get(x)
        if x == floor.seats_left or record is None:
            row.append(_hallway())
        else:
            row.append(_space_from_record(record))
    return row


def _coerce_position(position: Any) -> SeatPosition:
    if isinstance(position, SeatPosition):
        return position
    return SeatPosition.model_validate(position)


# =============================================================================
# 4. 격자 계산
# =============================================================================
def row_width(floor: FloorSeats) -> int:
    """한 열의 칸 수. 가운데 통로 한 칸을 포함합니다."""
    return floor.seats_left + 1 + floor.seats_right


def seat_meta_properties(position: Any, floor: FloorSeats) -> Dict[str, bool]:
    """창가 좌석(맨 왼쪽/맨 오른쪽 칸)과 레그룸 좌석(첫 번째 열) 여부를 계산합니다."""
    pos = _coerce_position(position)
    rightmost = floor.seats_left + floor.seats_right
    return {
        "is_window": pos.x == 0 or pos.x == rightmost,
        "is_legroom": pos.y == 1,
    }


def build_theoretical_configuration(
    num_floors: int,
    seats_per_floor: Iterable[Any],
    bathroom_rows: Optional[Iterable[Any]] = None,
    amenities: Optional[Iterable[str]] = None,
) -> SeatConfiguration:
    """
    배치 파라미터만으로 좌석 격자를 계산합니다.

    층마다 max(num_rows, 해당 층 화장실 열 번호의 최댓값) 개의 열을 검사하며,
    num_rows를 넘는 열은 화장실 열일 때만 출력됩니다.
    화장실 열은 좌석 번호를 소비하지 않습니다.
    """
    floors_cfg = _parse_floors(seats_per_floor)
    bathrooms = _parse_bathrooms(bathroom_rows)

    counter = INITIAL_SEAT_NUMBER
    total_seats = 0
    floors: List[FloorConfiguration] = []

    for floor_number in range(1, num_floors + 1):
        floor = _require_floor(floors_cfg, floor_number)
        num_rows = _floor_row_count(floor)
        bath_rows = _bathroom_rows_on(bathrooms, floor_number)
        max_row = max([num_rows, *bath_rows])

        rows: List[List[SeatSpace]] = []
        for row_number in range(1, max_row + 1):
            if row_number in bath_rows:
                rows.append(_bathroom_row(row_width(floor)))
            elif row_number <= num_rows:
                row, counter = _regular_row(floor, counter)
                total_seats += floor.seats_left + floor.seats_right
                rows.append(row)
        floors.append(FloorConfiguration(floor_number=floor_number, rows=rows))

    return SeatConfiguration(floors=floors, total_seats=total_seats, amenities=list(amenities or []))


def build_configuration_from_existing_seats(
    num_floors: int,
    seats_per_floor: Iterable[Any],
    bathroom_rows: Optional[Iterable[Any]],
    seats: Iterable[Any],
    amenities: Optional[Iterable[str]] = None,
) -> SeatConfiguration:
    """
    저장된 좌석 레코드를 격자 위에 겹쳐 그립니다.

    - 활성(active) 레코드만 사용하며, 층 > 열(position.y) > 칸(position.x) 순으로 묶습니다.
    - 화장실 열은 그대로 화장실 열로 표시합니다.
    - 레코드가 없는 칸과 가운데 통로 칸은 통로로 표시합니다.
    - 레코드가 없는 열 중 가장 큰 기존 열 번호와 num_rows를 모두 넘는 열은 생략합니다.
    - total_seats는 space_type이 seat인 레코드 수입니다.
    """
    floors_cfg = _parse_floors(seats_per_floor)
    bathrooms = _parse_bathrooms(bathroom_rows)
    records = [r for r in (_as_record(s) for s in seats) if r.active]

    grouped: Dict[int, Dict[int, Dict[int, SeatRecord]]] = {}
    for record in records:
        if record.position is None:
            y, x = DEFAULT_ROW_NUMBER, DEFAULT_COLUMN_NUMBER
        else:
            y, x = record.position.y, record.position.x
        grouped.setdefault(record.floor_number, {}).setdefault(y, {})[x] = record

    floors: List[FloorConfiguration] = []
    for floor_number in range(1, num_floors + 1):
        floor = _require_floor(floors_cfg, floor_number)
        num_rows = _floor_row_count(floor)
        seats_by_row = grouped.get(floor_number, {})
        max_existing_row = max(seats_by_row, default=0)
        bath_rows = _bathroom_rows_on(bathrooms, floor_number)
        max_row = max([num_rows, max_existing_row, *bath_rows])

        rows: List[List[SeatSpace]] = []
        for row_number in range(1, max_row + 1):
            if row_number in bath_rows:
                rows.append(_bathroom_row(row_width(floor)))
                continue
            row_seats = seats_by_row.get(row_number, {})
            if not row_seats and row_number > max_existing_row and row_number > num_rows:
                continue
            rows.append(_row_from_records(floor, row_seats))
        floors.append(FloorConfiguration(floor_number=floor_number, rows=rows))

    total_seats = sum(1 for r in records if r.space_type == SpaceType.SEAT)
    return SeatConfiguration(floors=floors, total_seats=total_seats, amenities=list(amenities or []))


def build_seat_configuration(
    num_floors: int,
    seats_per_floor: Iterable[Any],
    bathroom_rows: Optional[Iterable[Any]] = None,
    seats: Optional[Sequence[Any]] = None,
    amenities: Optional[Iterable[str]] = None,
) -> SeatConfiguration:
    """저장된 좌석이 있으면 재구성 배치를, 없으면 이론적 배치를 반환합니다."""
    if seats:
        return build_configuration_from_existing_seats(num_floors, seats_per_floor, bathroom_rows, seats, amenities)
    return build_theoretical_configuration(num_floors, seats_per_floor, bathroom_rows, amenities)


# =============================================================================
# 5. 실체화 및 템플릿 좌석 생성
# =============================================================================
def collect_materializable_seats(configuration: SeatConfiguration) -> List[MaterializableSeat]:
    """좌석 번호가 있는 모든 좌석 칸을 층/열/칸 위치와 함께 수집합니다."""
    collected: List[MaterializableSeat] = []
    for floor in configuration.floors:
        for row_index, row in enumerate(floor.rows):
            for col_index, space in enumerate(row):
                if space.space_type == SpaceType.SEAT and space.seat_number:
                    collected.append(MaterializableSeat(
                        space=space,
                        floor_number=floor.floor_number,
                        row_index=row_index,
                        col_index=col_index,
                        row_length=len(row),
                    ))
    return collected


def build_seat_payloads(configuration: SeatConfiguration, now: Optional[datetime] = None) -> List[SeatPayload]:
    """
    배치의 좌석 칸을 저장용 페이로드로 변환합니다.
    position은 {x: 칸 인덱스, y: 열 인덱스 + 1} 입니다.
    """
    created = (now or datetime.now(UTC)).isoformat()
    payloads: List[SeatPayload] = []
    for item in collect_materializable_seats(configuration):
        space = item.space
        payloads.append(SeatPayload(
            space_type=SpaceType.SEAT,
            seat_number=space.seat_number,
            seat_type=space.seat_type or DEFAULT_SEAT_TYPE,
            floor_number=item.floor_number,
            amenities=list(space.amenities),
            reclinement_angle=space.reclinement_angle or DEFAULT_RECLINEMENT_ANGLE,
            position=SeatPosition(x=item.col_index, y=item.row_index + 1),
            meta={
                "seat_floor": f"Floor {item.floor_number}",
                "row_index": item.row_index,
                "col_index": item.col_index,
                "is_aisle": False,
                "is_window": item.col_index == 0 or item.col_index == item.row_length - 1,
                "is_legroom": item.row_index == 0,
                "created": created,
            },
            active=True,
        ))
    return payloads


def generate_seat_models(num_floors: int, seats_per_floor: Iterable[Any]) -> List[SeatPayload]:
    """
    좌석 배치 모델의 템플릿 좌석을 생성합니다.
    왼쪽 좌석은 칸 0..L-1, 오른쪽 좌석은 칸 L+1..L+R 에 놓이며 번호는 층을 넘어 연속됩니다.
    """
    floors_cfg = _parse_floors(seats_per_floor)
    payloads: List[SeatPayload] = []
    counter = INITIAL_SEAT_NUMBER

    for floor_number in range(1, num_floors + 1):
        floor = _require_floor(floors_cfg, floor_number)
        columns = list(range(floor.seats_left)) + [
            floor.seats_left + 1 + i for i in range(floor.seats_right)
        ]
        for row_index in range(floor.num_rows):
            for col_index in columns:
                position = SeatPosition(x=col_index, y=row_index + 1)
                payloads.append(SeatPayload(
                    space_type=SpaceType.SEAT,
                    seat_number=str(counter),
                    seat_type=DEFAULT_SEAT_TYPE,
                    floor_number=floor_number,
                    amenities=[],
                    reclinement_angle=DEFAULT_RECLINEMENT_ANGLE,
                    position=position,
                    meta={
                        "row_index": row_index,
                        "col_index": col_index,
                        **seat_meta_properties(position, floor),
                    },
                    active=True,
                ))
                counter += 1

    if not payloads:
        raise SeatLayoutError("Invalid seats_per_floor configuration")
    return payloads


# =============================================================================
# 6. 일괄 수정(batch update) 지원
# =============================================================================
def position_key(floor_number: int, position: Any) -> str:
    """위치 키 '층:x:y' 를 만듭니다."""
    pos = _coerce_position(position)
    return f"{floor_number}:{pos.x}:{pos.y}"


def validate_seat_configuration(
    spaces: Iterable[Any],
    num_floors: int,
    seats_per_floor: Iterable[Any],
) -> List[SeatConfigurationInput]:
    """
    좌석 일괄 수정 페이로드를 검증합니다.
    발견한 모든 오류를 모아 SeatLayoutError로 한 번에 발생시키며, 문제가 없으면 파싱된 입력을 반환합니다.
    """
    floors_cfg = _parse_floors(seats_per_floor)
    inputs = [_as_input(s) for s in spaces]
    errors: List[str] = []
    seen_positions: Set[str] = set()
    seen_numbers: Set[str] = set()

    for index, item in enumerate(inputs):
        label = f"spaces[{index}]"
        if item.floor_number is None or item.position is None:
            errors.append(f"{label}: floor_number and position are required")
            continue

        if item.space_type == SpaceType.SEAT and not (item.seat_number and item.seat_number.strip()):
            errors.append(f"{label}: seat_number is required for seat spaces")

        key = position_key(item.floor_number, item.position)
        if key in seen_positions:
            errors.append(f"{label}: duplicate position {key}")
        seen_positions.add(key)

        if item.space_type == SpaceType.SEAT and item.seat_number:
            if item.seat_number in seen_numbers:
                errors.append(f"{label}: duplicate seat number {item.seat_number}")
            seen_numbers.add(item.seat_number)

        if item.floor_number < 1 or item.floor_number > num_floors:
            errors.append(f"{label}: invalid floor number {item.floor_number}, must be between 1 and {num_floors}")
            continue

        floor = _find_floor(floors_cfg, item.floor_number)
        if floor is None:
            errors.append(f"{label}: floor configuration not found for floor {item.floor_number}")
            continue

        if item.position.y < 1 or item.position.y > floor.num_rows:
            errors.append(
                f"{label}: invalid row number {item.position.y} for floor {item.floor_number}, "
                f"must be between 1 and {floor.num_rows}"
            )
        max_column = floor.seats_left + floor.seats_right
        if item.position.x < 0 or item.position.x > max_column:
            errors.append(
                f"{label}: invalid column number {item.position.x} for floor {item.floor_number}, "
                f"must be between 0 and {max_column}"
            )

    if errors:
        raise SeatLayoutError("Invalid seat configuration", errors=errors)
    return inputs


def build_new_seat_payload(incoming: Any, seats_per_floor: Iterable[Any]) -> SeatPayload:
    """기존 좌석이 없는 위치에 새로 만들 칸의 페이로드. 좌석이 아닌 칸은 좌석 필드를 비웁니다."""
    item = _as_input(incoming)
    is_seat = item.space_type == SpaceType.SEAT
    meta: Dict[str, Any] = {"row_index": item.position.y - 1, "col_index": item.position.x}
    if is_seat:
        floor = _require_floor(_parse_floors(seats_per_floor), item.floor_number)
        meta.update(seat_meta_properties(item.position, floor))

    return SeatPayload(
        space_type=item.space_type,
        seat_number=item.seat_number if is_seat else None,
        seat_type=(item.seat_type or DEFAULT_SEAT_TYPE) if is_seat else None,
        floor_number=item.floor_number,
        amenities=list(item.amenities or []) if is_seat else [],
        reclinement_angle=(item.reclinement_angle or DEFAULT_RECLINEMENT_ANGLE) if is_seat else None,
        position=item.position,
        meta=meta,
        active=True if item.active is None else item.active,
    )


def needs_seat_update(existing: Any, incoming: Any) -> bool:
    """기존 칸과 요청 항목을 비교하여 수정이 필요한지 판단합니다."""
    current = _as_record(existing)
    item = _as_input(incoming)

    if item.space_type != current.space_type:
        return True

    if item.space_type == SpaceType.SEAT:
        if item.seat_number != current.seat_number:
            return True
        if item.seat_type is not None and item.seat_type != current.seat_type:
            return True
        if item.amenities is not None and list(item.amenities) != list(current.amenities):
            return True
        if item.reclinement_angle is not None and item.reclinement_angle != current.reclinement_angle:
            return True

    return item.active is not None and item.active != current.active


def build_seat_update_data(existing: Any, incoming: Any, seats_per_floor: Iterable[Any]) -> Dict[str, Any]:
    """
    기존 칸에 반영할 필드 dict를 만듭니다.
    space_type이 바뀌면 meta의 좌석 전용 속성(is_window, is_legroom)을 다시 계산하거나 제거합니다.
    """
    current = _as_record(existing)
    item = _as_input(incoming)
    data: Dict[str, Any] = {"space_type": item.space_type}
    is_seat = item.space_type == SpaceType.SEAT

    if item.space_type != current.space_type:
        if is_seat:
            floor = _require_floor(_parse_floors(seats_per_floor), item.floor_number)
            data["meta"] = {**current.meta, **seat_meta_properties(item.position, floor)}
        else:
            data["meta"] = {k: v for k, v in current.meta.items() if k not in SEAT_META_KEYS}

    if is_seat:
        data["seat_number"] = item.seat_number
        if item.seat_type is not None:
            data["seat_type"] = item.seat_type
        if item.reclinement_angle is not None:
            data["reclinement_angle"] = item.reclinement_angle
        if item.amenities is not None:
            data["amenities"] = list(item.amenities)
    else:
        data["seat_number"] = None
        data["seat_type"] = None
        data["reclinement_angle"] = None
        data["amenities"] = []

    if item.active is not None:
        data["active"] = item.active
    return data


# =============================================================================
# 7. 템플릿(BusSeatModel) -> 좌석(BusSeat) 동기화
# =============================================================================
def seat_needs_update_from_model(seat: Any, model: Any) -> bool:
    """좌석과 템플릿 좌석의 내용이 다른지 비교합니다."""
    current = _as_record(seat)
    template = _as_record(model)

    if current.space_type != template.space_type:
        return True
    if list(current.amenities) != list(template.amenities):
        return True
    if current.meta != template.meta:
        return True
    if current.active != template.active:
        return True
    if current.space_type == SpaceType.SEAT:
        return (
            current.seat_number != template.seat_number
            or current.seat_type != template.seat_type
            or current.reclinement_angle != template.reclinement_angle
        )
    return False


def seat_data_from_model(model: Any) -> Dict[str, Any]:
    """템플릿 좌석에서 좌석으로 복사할 필드 dict"""
    template = _as_record(model)
    return {
        "space_type": template.space_type,
        "seat_number": template.seat_number,
        "seat_type": template.seat_type,
        "floor_number": template.floor_number,
        "amenities": list(template.amenities),
        "reclinement_angle": template.reclinement_angle,
        "position": template.position.model_dump() if template.position else None,
        "meta": dict(template.meta),
        "active": template.active,
    }


def plan_seat_sync(seats: Iterable[Any], models: Iterable[Any]) -> SeatSyncPlan:
    """
    위치 키(층:x:y) 기준으로 좌석과 템플릿 좌석을 맞추는 작업 목록을 계산합니다.
    템플릿에만 있는 위치는 생성, 양쪽에 있으면서 내용이 다르면 수정, 좌석에만 있으면 삭제합니다.
    위치가 없는 좌석은 비교할 수 없으므로 삭제 대상입니다.
    """
    plan = SeatSyncPlan()

    models_by_key: Dict[str, Any] = {}
    for model in models:
        record = _as_record(model)
        if record.position is None:
            continue
        models_by_key.setdefault(position_key(record.floor_number, record.position), model)

    matched: Set[str] = set()
    for seat in seats:
        record = _as_record(seat)
        key = position_key(record.floor_number, record.position) if record.position else None
        model = models_by_key.get(key) if key else None
        if model is None or key in matched:
            plan.to_delete.append(seat)
            continue
        matched.add(key)
        if seat_needs_update_from_model(record, model):
            plan.to_update.append((seat, seat_data_from_model(model)))

    for key, model in models_by_key.items():
        if key not in matched:
            plan.to_create.append(SeatPayload(**seat_data_from_model(model)))

    return plan
