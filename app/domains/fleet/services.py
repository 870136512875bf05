# app/domains/fleet/services.py

"""
'fleet' 도메인의 유스케이스(service) 모듈입니다.

좌석 배치 엔진(seat_layout)과 CRUD 객체를 조합하여 여러 테이블에 걸친 작업을
하나의 트랜잭션으로 처리합니다.

- 좌석 배치 모델 생성/수정/재생성 및 템플릿 좌석 일괄 수정
- 좌석 배치도 좌석 실체화(materialize), 일괄 수정, 템플릿 동기화
- 버스 생성/모델 변경 시 좌석 배치도 복사 및 교체, 운행 상태 전이 검증

모든 변경 작업은 shared.audits 에 이력을 남깁니다.
커밋 후 반환하는 객체는 항상 refresh 하여 서버 측 갱신 컬럼(updated_at)을 다시 읽습니다.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from fastapi import HTTPException, status
from sqlmodel.ext.asyncio.session import AsyncSession

from app.domains.shared.services import record_audit
from . import crud as fleet_crud
from . import models as fleet_models
from . import schemas as fleet_schemas
from .seat_layout import (
    SeatConfiguration,
    SeatLayoutError,
    build_new_seat_payload,
    build_seat_configuration,
    build_seat_payloads,
    build_seat_update_data,
    build_theoretical_configuration,
    generate_seat_models,
    needs_seat_update,
    plan_seat_sync,
    position_key,
    seat_data_from_model,
    validate_seat_configuration,
)

logger = logging.getLogger(__name__)


# 버스 운행 상태 전이 규칙 (현재 상태 -> 변경 가능한 상태)
BUS_STATUS_TRANSITIONS: Dict[fleet_models.BusStatus, List[fleet_models.BusStatus]] = {
    fleet_models.BusStatus.ACTIVE: [
        fleet_models.BusStatus.MAINTENANCE,
        fleet_models.BusStatus.REPAIR,
        fleet_models.BusStatus.OUT_OF_SERVICE,
        fleet_models.BusStatus.RESERVED,
        fleet_models.BusStatus.IN_TRANSIT,
        fleet_models.BusStatus.RETIRED,
    ],
    fleet_models.BusStatus.MAINTENANCE: [
        fleet_models.BusStatus.ACTIVE,
        fleet_models.BusStatus.REPAIR,
        fleet_models.BusStatus.OUT_OF_SERVICE,
        fleet_models.BusStatus.RETIRED,
    ],
    fleet_models.BusStatus.REPAIR: [
        fleet_models.BusStatus.ACTIVE,
        fleet_models.BusStatus.MAINTENANCE,
        fleet_models.BusStatus.OUT_OF_SERVICE,
        fleet_models.BusStatus.RETIRED,
    ],
    fleet_models.BusStatus.OUT_OF_SERVICE: [
        fleet_models.BusStatus.ACTIVE,
        fleet_models.BusStatus.MAINTENANCE,
        fleet_models.BusStatus.REPAIR,
        fleet_models.BusStatus.RETIRED,
    ],
    fleet_models.BusStatus.RESERVED: [
        fleet_models.BusStatus.ACTIVE,
        fleet_models.BusStatus.IN_TRANSIT,
        fleet_models.BusStatus.MAINTENANCE,
    ],
    fleet_models.BusStatus.IN_TRANSIT: [
        fleet_models.BusStatus.ACTIVE,
        fleet_models.BusStatus.MAINTENANCE,
        fleet_models.BusStatus.REPAIR,
    ],
    fleet_models.BusStatus.RETIRED: [
        fleet_models.BusStatus.OUT_OF_SERVICE,
    ],
}


# =============================================================================
# 0. 내부 헬퍼
# =============================================================================
def layout_error_to_http(exc: SeatLayoutError) -> HTTPException:
    """좌석 배치 엔진 예외를 400 응답으로 변환합니다."""
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"message": exc.message, "errors": exc.errors},
    )


def _apply(db_obj: Any, data: Dict[str, Any]) -> None:
    for key, value in data.items():
        setattr(db_obj, key, value)


async def _apply_seat_configuration(
    db: AsyncSession,
    *,
    seat_crud: fleet_crud.CRUDSeatSpace,
    owner_id: int,
    num_floors: int,
    seats_per_floor: Sequence[Dict[str, Any]],
    spaces: Iterable[Any],
) -> Dict[str, int]:
    """
    좌석 일괄 수정의 공통 처리입니다. 템플릿 좌석과 좌석 배치도 좌석 모두에 사용합니다.

    요청에 있는 위치는 생성하거나 (변경이 있을 때만) 수정하고,
    요청에 없는 활성 칸은 비활성화합니다. 커밋은 호출한 쪽에서 합니다.
    """
    try:
        inputs = validate_seat_configuration(spaces, num_floors, seats_per_floor)
    except SeatLayoutError as e:
        raise layout_error_to_http(e)

    existing = await seat_crud.get_by_owner(db, owner_id=owner_id)
    existing_by_key = {
        position_key(seat.floor_number, seat.position): seat
        for seat in existing
        if seat.position
    }

    seats_created = 0
    seats_updated = 0
    incoming_keys = set()
    for item in inputs:
        key = position_key(item.floor_number, item.position)
        incoming_keys.add(key)
        current = existing_by_key.get(key)
        if current is None:
            payload = build_new_seat_payload(item, seats_per_floor)
            db.add(seat_crud.model(**{seat_crud.owner_field: owner_id}, **payload.model_dump()))
            seats_created += 1
        elif needs_seat_update(current, item):
            _apply(current, build_seat_update_data(current, item, seats_per_floor))
            db.add(current)
            seats_updated += 1

    seats_deactivated = 0
    for seat in existing:
        key = position_key(seat.floor_number, seat.position) if seat.position else None
        if key not in incoming_keys and seat.active:
            seat.active = False
            db.add(seat)
            seats_deactivated += 1

    await db.flush()
    total_active_seats = await seat_crud.count_active_seats(db, owner_id=owner_id)
    return {
        "seats_created": seats_created,
        "seats_updated": seats_updated,
        "seats_deactivated": seats_deactivated,
        "total_active_seats": total_active_seats,
    }


# =============================================================================
# 1. 좌석 배치 모델 (BusDiagramModel)
# =============================================================================
async def create_bus_diagram_model(
    db: AsyncSession, *, obj_in: fleet_schemas.BusDiagramModelCreate, user_id: Optional[int] = None
) -> fleet_models.BusDiagramModel:
    """좌석 배치 모델을 만들고 템플릿 좌석을 함께 생성합니다."""
    await fleet_crud.bus_diagram_model.ensure_unique_name(db, name=obj_in.name)
    data = obj_in.model_dump()
    try:
        payloads = generate_seat_models(data["num_floors"], data["seats_per_floor"])
    except SeatLayoutError as e:
        raise layout_error_to_http(e)

    db_obj = fleet_models.BusDiagramModel(**data, total_seats=len(payloads))
    db.add(db_obj)
    await db.flush()

    db.add_all([
        fleet_models.BusSeatModel(bus_diagram_model_id=db_obj.id, **payload.model_dump())
        for payload in payloads
    ])
    await record_audit(
        db, user_id=user_id, action="create", entity_type="bus_diagram_model", entity_id=db_obj.id,
        details={"name": db_obj.name, "seats_generated": len(payloads)},
    )
    await db.commit()
    await db.refresh(db_obj)
    logger.info("좌석 배치 모델 생성: %s (id=%s, 좌석 %d개)", db_obj.name, db_obj.id, len(payloads))
    return db_obj


async def regenerate_seat_models(
    db: AsyncSession,
    *,
    db_obj: fleet_models.BusDiagramModel,
    obj_in: Optional[fleet_schemas.BusDiagramModelUpdate] = None,
    user_id: Optional[int] = None,
) -> Dict[str, Any]:
    """
    템플릿 좌석을 모두 지우고 현재(또는 obj_in 을 반영한) 구성으로 다시 생성합니다.
    {bus_diagram_model, seats_generated} 를 반환합니다.
    """
    update_data = obj_in.model_dump(exclude_unset=True) if obj_in else {}
    if update_data.get("name") and update_data["name"] != db_obj.name:
        await fleet_crud.bus_diagram_model.ensure_unique_name(db, name=update_data["name"], exclude_id=db_obj.id)

    num_floors = update_data.get("num_floors", db_obj.num_floors)
    seats_per_floor = update_data.get("seats_per_floor", db_obj.seats_per_floor)
    try:
        payloads = generate_seat_models(num_floors, seats_per_floor)
    except SeatLayoutError as e:
        raise layout_error_to_http(e)

    _apply(db_obj, update_data)
    await fleet_crud.bus_seat_model.delete_by_owner(db, owner_id=db_obj.id)
    db.add_all([
        fleet_models.BusSeatModel(bus_diagram_model_id=db_obj.id, **payload.model_dump())
        for payload in payloads
    ])
    db_obj.total_seats = len(payloads)
    db.add(db_obj)
    await record_audit(
        db, user_id=user_id, action="regenerate_seats", entity_type="bus_diagram_model", entity_id=db_obj.id,
        details={"seats_generated": len(payloads)},
    )
    await db.commit()
    await db.refresh(db_obj)
    logger.info("템플릿 좌석 재생성: bus_diagram_model_id=%s, 좌석 %d개", db_obj.id, len(payloads))
    return {"bus_diagram_model": db_obj, "seats_generated": len(payloads)}


async def update_bus_diagram_model(
    db: AsyncSession,
    *,
    db_obj: fleet_models.BusDiagramModel,
    obj_in: fleet_schemas.BusDiagramModelUpdate,
    regenerate_seats: bool = False,
    user_id: Optional[int] = None,
) -> fleet_models.BusDiagramModel:
    if regenerate_seats:
        result = await regenerate_seat_models(db, db_obj=db_obj, obj_in=obj_in, user_id=user_id)
        return result["bus_diagram_model"]

    update_data = obj_in.model_dump(exclude_unset=True)
    if update_data.get("name") and update_data["name"] != db_obj.name:
        await fleet_crud.bus_diagram_model.ensure_unique_name(db, name=update_data["name"], exclude_id=db_obj.id)
    if "num_floors" in update_data or "seats_per_floor" in update_data:
        try:
            generate_seat_models(
                update_data.get("num_floors", db_obj.num_floors),
                update_data.get("seats_per_floor", db_obj.seats_per_floor),
            )
        except SeatLayoutError as e:
            raise layout_error_to_http(e)
    _apply(db_obj, update_data)
    db.add(db_obj)
    await record_audit(
        db, user_id=user_id, action="update", entity_type="bus_diagram_model", entity_id=db_obj.id,
        details={"fields": sorted(update_data)},
    )
    await db.commit()
    await db.refresh(db_obj)
    return db_obj


async def delete_bus_diagram_model(
    db: AsyncSession, *, db_obj: fleet_models.BusDiagramModel, user_id: Optional[int] = None
) -> None:
    """좌석 배치도나 버스 모델이 참조하는 좌석 배치 모델은 삭제할 수 없습니다."""
    if await fleet_crud.seat_diagram.count(db, bus_diagram_model_id=db_obj.id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete bus diagram model because seat diagrams were created from it."
        )
    if await fleet_crud.bus_model.count(db, default_bus_diagram_model_id=db_obj.id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete bus diagram model because it is the default of a bus model."
        )

    model_id = db_obj.id
    await fleet_crud.bus_seat_model.delete_by_owner(db, owner_id=model_id)
    await db.delete(db_obj)
    await record_audit(db, user_id=user_id, action="delete", entity_type="bus_diagram_model", entity_id=model_id)
    await db.commit()
    logger.info("좌석 배치 모델 삭제: id=%s", model_id)


async def update_template_seat_configuration(
    db: AsyncSession,
    *,
    db_obj: fleet_models.BusDiagramModel,
    spaces: Iterable[Any],
    user_id: Optional[int] = None,
) -> Dict[str, int]:
    """좌석 배치 모델의 템플릿 좌석을 일괄 수정하고 total_seats 를 다시 계산합니다."""
    result = await _apply_seat_configuration(
        db,
        seat_crud=fleet_crud.bus_seat_model,
        owner_id=db_obj.id,
        num_floors=db_obj.num_floors,
        seats_per_floor=db_obj.seats_per_floor,
        spaces=spaces,
    )
    db_obj.total_seats = result["total_active_seats"]
    db.add(db_obj)
    await record_audit(
        db, user_id=user_id, action="update_seat_configuration", entity_type="bus_diagram_model",
        entity_id=db_obj.id, details=result,
    )
    await db.commit()
    await db.refresh(db_obj)
    return result


async def get_diagram_model_configuration(
    db: AsyncSession, *, db_obj: fleet_models.BusDiagramModel
) -> SeatConfiguration:
    """템플릿 좌석을 격자 위에 겹쳐 그린 배치 (템플릿 좌석이 없으면 이론적 배치)"""
    seats = await fleet_crud.bus_seat_model.get_by_owner(db, owner_id=db_obj.id)
    try:
        return build_seat_configuration(db_obj.num_floors, db_obj.seats_per_floor, db_obj.bathroom_rows, seats)
    except SeatLayoutError as e:
        raise layout_error_to_http(e)


# =============================================================================
# 2. 좌석 배치도 (SeatDiagram)
# =============================================================================
async def get_seat_diagram_configuration(
    db: AsyncSession, *, db_obj: fleet_models.SeatDiagram
) -> SeatConfiguration:
    """
    좌석 배치도의 배치를 계산합니다. 저장된 좌석이 있으면 재구성 배치, 없으면 이론적 배치입니다.
    편의시설은 이 배치도를 사용하는 버스의 버스 모델 편의시설이며, 버스가 없으면 빈 목록입니다.
    """
    seats = await fleet_crud.bus_seat.get_by_owner(db, owner_id=db_obj.id)
    amenities: List[str] = []
    bus = await fleet_crud.bus.get_by_seat_diagram(db, seat_diagram_id=db_obj.id)
    if bus is not None:
        bus_model = await fleet_crud.bus_model.get(db, id=bus.model_id)
        if bus_model is not None:
            amenities = list(bus_model.amenities or [])
    try:
        return build_seat_configuration(
            db_obj.num_floors, db_obj.seats_per_floor, db_obj.bathroom_rows, seats, amenities
        )
    except SeatLayoutError as e:
        raise layout_error_to_http(e)


async def materialize_seats(
    db: AsyncSession, *, db_obj: fleet_models.SeatDiagram, user_id: Optional[int] = None
) -> Dict[str, int]:
    """
    이론적 배치의 좌석을 BusSeat 로 저장합니다.
    이미 좌석이 있으면 아무것도 만들지 않고 기존 좌석 수를 반환합니다.
    """
    existing_count = await fleet_crud.bus_seat.count_by_owner(db, owner_id=db_obj.id)
    if existing_count:
        return {"seat_diagram_id": db_obj.id, "seats_created": 0, "total_seats": existing_count}

    try:
        configuration = build_theoretical_configuration(
            db_obj.num_floors, db_obj.seats_per_floor, db_obj.bathroom_rows
        )
    except SeatLayoutError as e:
        raise layout_error_to_http(e)

    payloads = build_seat_payloads(configuration)
    db.add_all([
        fleet_models.BusSeat(seat_diagram_id=db_obj.id, **payload.model_dump())
        for payload in payloads
    ])
    db_obj.total_seats = len(payloads)
    db.add(db_obj)
    await record_audit(
        db, user_id=user_id, action="materialize_seats", entity_type="seat_diagram", entity_id=db_obj.id,
        details={"seats_created": len(payloads)},
    )
    await db.commit()
    await db.refresh(db_obj)
    logger.info("좌석 실체화: seat_diagram_id=%s, 좌석 %d개", db_obj.id, len(payloads))
    return {"seat_diagram_id": db_obj.id, "seats_created": len(payloads), "total_seats": len(payloads)}


async def update_seat_diagram(
    db: AsyncSession,
    *,
    db_obj: fleet_models.SeatDiagram,
    obj_in: fleet_schemas.SeatDiagramUpdate,
    user_id: Optional[int] = None,
) -> fleet_models.SeatDiagram:
    update_data = obj_in.model_dump(exclude_unset=True)
    _apply(db_obj, update_data)
    db_obj.is_modified = True
    db.add(db_obj)
    await record_audit(
        db, user_id=user_id, action="update", entity_type="seat_diagram", entity_id=db_obj.id,
        details={"fields": sorted(update_data)},
    )
    await db.commit()
    await db.refresh(db_obj)
    return db_obj


async def update_seat_diagram_configuration(
    db: AsyncSession,
    *,
    db_obj: fleet_models.SeatDiagram,
    spaces: Iterable[Any],
    user_id: Optional[int] = None,
) -> Dict[str, int]:
    """좌석 배치도의 좌석을 일괄 수정합니다. 수정된 배치도는 템플릿 동기화 대상에서 제외됩니다."""
    result = await _apply_seat_configuration(
        db,
        seat_crud=fleet_crud.bus_seat,
        owner_id=db_obj.id,
        num_floors=db_obj.num_floors,
        seats_per_floor=db_obj.seats_per_floor,
        spaces=spaces,
    )
    db_obj.total_seats = result["total_active_seats"]
    db_obj.is_modified = True
    db.add(db_obj)
    await record_audit(
        db, user_id=user_id, action="update_seat_configuration", entity_type="seat_diagram",
        entity_id=db_obj.id, details=result,
    )
    await db.commit()
    await db.refresh(db_obj)
    return result


async def delete_seat_diagram(
    db: AsyncSession, *, db_obj: fleet_models.SeatDiagram, user_id: Optional[int] = None
) -> None:
    if await fleet_crud.bus.get_by_seat_diagram(db, seat_diagram_id=db_obj.id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete seat diagram because it is assigned to a bus."
        )
    diagram_id = db_obj.id
    await fleet_crud.bus_seat.delete_by_owner(db, owner_id=diagram_id)
    await db.delete(db_obj)
    await record_audit(db, user_id=user_id, action="delete", entity_type="seat_diagram", entity_id=diagram_id)
    await db.commit()


async def sync_seat_diagrams(
    db: AsyncSession, *, db_obj: fleet_models.BusDiagramModel, user_id: Optional[int] = None
) -> List[Dict[str, int]]:
    """
    좌석 배치 모델에서 만들어진 좌석 배치도 중 수동 수정되지 않은 것들의 좌석을 템플릿 좌석과 일치시킵니다.
    배치도마다 {seat_diagram_id, created, updated, deleted} 요약을 반환합니다.
    """
    templates = await fleet_crud.bus_seat_model.get_by_owner(db, owner_id=db_obj.id)
    diagrams = await fleet_crud.seat_diagram.get_by_diagram_model(
        db, bus_diagram_model_id=db_obj.id, unmodified_only=True
    )

    results: List[Dict[str, int]] = []
    for diagram in diagrams:
        seats = await fleet_crud.bus_seat.get_by_owner(db, owner_id=diagram.id)
        plan = plan_seat_sync(seats, templates)

        db.add_all([
            fleet_models.BusSeat(seat_diagram_id=diagram.id, **payload.model_dump())
            for payload in plan.to_create
        ])
        for seat, data in plan.to_update:
            _apply(seat, data)
            db.add(seat)
        for seat in plan.to_delete:
            await db.delete(seat)

        diagram.max_capacity = db_obj.max_capacity
        diagram.num_floors = db_obj.num_floors
        diagram.seats_per_floor = list(db_obj.seats_per_floor)
        diagram.bathroom_rows = list(db_obj.bathroom_rows)
        await db.flush()
        diagram.total_seats = await fleet_crud.bus_seat.count_active_seats(db, owner_id=diagram.id)
        db.add(diagram)

        results.append({
            "seat_diagram_id": diagram.id,
            "created": len(plan.to_create),
            "updated": len(plan.to_update),
            "deleted": len(plan.to_delete),
        })

    await record_audit(
        db, user_id=user_id, action="sync_seat_diagrams", entity_type="bus_diagram_model", entity_id=db_obj.id,
        details={"seat_diagrams": len(results)},
    )
    await db.commit()
    for diagram in diagrams:
        await db.refresh(diagram)
    logger.info("좌석 배치도 동기화: bus_diagram_model_id=%s, 배치도 %d개", db_obj.id, len(results))
    return results


# =============================================================================
# 3. 버스 모델 (BusModel)
# =============================================================================
async def create_bus_model(
    db: AsyncSession, *, obj_in: fleet_schemas.BusModelCreate, user_id: Optional[int] = None
) -> fleet_models.BusModel:
    db_obj = await fleet_crud.bus_model.create(db, obj_in=obj_in)
    await record_audit(
        db, user_id=user_id, action="create", entity_type="bus_model", entity_id=db_obj.id,
        details={"manufacturer": db_obj.manufacturer, "model": db_obj.model, "year": db_obj.year},
    )
    await db.commit()
    await db.refresh(db_obj)
    return db_obj


async def update_bus_model(
    db: AsyncSession,
    *,
    db_obj: fleet_models.BusModel,
    obj_in: fleet_schemas.BusModelUpdate,
    user_id: Optional[int] = None,
) -> fleet_models.BusModel:
    db_obj = await fleet_crud.bus_model.update(db, db_obj=db_obj, obj_in=obj_in)
    await record_audit(
        db, user_id=user_id, action="update", entity_type="bus_model", entity_id=db_obj.id,
        details={"fields": sorted(obj_in.model_dump(exclude_unset=True))},
    )
    await db.commit()
    await db.refresh(db_obj)
    return db_obj


async def delete_bus_model(db: AsyncSession, *, id: int, user_id: Optional[int] = None) -> Optional[fleet_models.BusModel]:
    deleted = await fleet_crud.bus_model.remove(db, id=id)
    if deleted is not None:
        await record_audit(db, user_id=user_id, action="delete", entity_type="bus_model", entity_id=id)
        await db.commit()
    return deleted


# =============================================================================
# 4. 버스 (Bus)
# =============================================================================
def allowed_status_transitions(current: fleet_models.BusStatus) -> List[fleet_models.BusStatus]:
    return list(BUS_STATUS_TRANSITIONS.get(current, []))


def validate_status_transition(current: fleet_models.BusStatus, new: fleet_models.BusStatus) -> None:
    """같은 상태로의 변경은 허용합니다."""
    if current == new:
        return
    if new not in BUS_STATUS_TRANSITIONS.get(current, []):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid status transition from {current.value} to {new.value}"
        )


async def _resolve_diagram_model_for(
    db: AsyncSession, *, bus_model: fleet_models.BusModel, bus_diagram_model_id: Optional[int] = None
) -> fleet_models.BusDiagramModel:
    diagram_model_id = bus_diagram_model_id or bus_model.default_bus_diagram_model_id
    if diagram_model_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Bus model has no default bus diagram model"
        )
    diagram_model = await fleet_crud.bus_diagram_model.get(db, id=diagram_model_id)
    if diagram_model is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bus diagram model not found")
    return diagram_model


async def _copy_diagram_model(
    db: AsyncSession,
    *,
    diagram_model: fleet_models.BusDiagramModel,
    bus_model: fleet_models.BusModel,
    registration_number: str,
) -> fleet_models.SeatDiagram:
    """
    좌석 배치 모델과 그 템플릿 좌석을 버스 전용 좌석 배치도로 복사합니다. 커밋은 호출한 쪽에서 합니다.
    total_seats는 복사된 활성 좌석 수입니다.
    """
    templates = await fleet_crud.bus_seat_model.get_by_owner(db, owner_id=diagram_model.id)
    seats_data = [seat_data_from_model(template) for template in templates]
    seat_diagram = fleet_models.SeatDiagram(
        bus_diagram_model_id=diagram_model.id,
        name=f"{bus_model.manufacturer} {bus_model.model} - {registration_number}",
        description=diagram_model.description,
        max_capacity=bus_model.seating_capacity,
        num_floors=diagram_model.num_floors,
        seats_per_floor=list(diagram_model.seats_per_floor),
        bathroom_rows=list(diagram_model.bathroom_rows),
        total_seats=0,
        is_factory_default=diagram_model.is_factory_default,
        is_modified=False,
        active=True,
    )
    db.add(seat_diagram)
    await db.flush()
    db.add_all([fleet_models.BusSeat(seat_diagram_id=seat_diagram.id, **data) for data in seats_data])
    await db.flush()
    seat_diagram.total_seats = await fleet_crud.bus_seat.count_active_seats(db, owner_id=seat_diagram.id)
    db.add(seat_diagram)
    return seat_diagram


async def _get_bus_model_or_404(db: AsyncSession, *, model_id: int) -> fleet_models.BusModel:
    bus_model = await fleet_crud.bus_model.get(db, id=model_id)
    if bus_model is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bus model not found")
    return bus_model


async def create_bus(
    db: AsyncSession, *, obj_in: fleet_schemas.BusCreate, user_id: Optional[int] = None
) -> fleet_models.Bus:
    """
    버스를 생성합니다. 선택한 좌석 배치 모델(없으면 버스 모델의 기본값)을 복사한
    좌석 배치도를 같은 트랜잭션에서 함께 만듭니다.
    """
    await fleet_crud.bus.ensure_unique_registration(db, registration_number=obj_in.registration_number)
    bus_model = await _get_bus_model_or_404(db, model_id=obj_in.model_id)
    diagram_model = await _resolve_diagram_model_for(
        db, bus_model=bus_model, bus_diagram_model_id=obj_in.bus_diagram_model_id
    )

    seat_diagram = await _copy_diagram_model(
        db, diagram_model=diagram_model, bus_model=bus_model, registration_number=obj_in.registration_number
    )
    db_obj = fleet_models.Bus(
        **obj_in.model_dump(exclude={"bus_diagram_model_id"}),
        seat_diagram_id=seat_diagram.id,
    )
    db.add(db_obj)
    await db.flush()
    await record_audit(
        db, user_id=user_id, action="create", entity_type="bus", entity_id=db_obj.id,
        details={"registration_number": db_obj.registration_number, "seat_diagram_id": seat_diagram.id},
    )
    await db.commit()
    await db.refresh(db_obj)
    logger.info("버스 생성: %s (id=%s, seat_diagram_id=%s)", db_obj.registration_number, db_obj.id, seat_diagram.id)
    return db_obj


async def update_bus(
    db: AsyncSession,
    *,
    db_obj: fleet_models.Bus,
    obj_in: fleet_schemas.BusUpdate,
    user_id: Optional[int] = None,
) -> fleet_models.Bus:
    """
    버스를 수정합니다. 버스 모델이 바뀌면 새 모델의 기본 좌석 배치 모델을 복사한 배치도로 교체하고
    이전 배치도와 그 좌석은 삭제합니다.
    """
    update_data = obj_in.model_dump(exclude_unset=True)

    if update_data.get("registration_number") and update_data["registration_number"] != db_obj.registration_number:
        await fleet_crud.bus.ensure_unique_registration(
            db, registration_number=update_data["registration_number"], exclude_id=db_obj.id
        )
    if update_data.get("status") is not None:
        validate_status_transition(db_obj.status, update_data["status"])

    old_seat_diagram_id: Optional[int] = None
    new_model_id = update_data.get("model_id")
    if new_model_id is not None and new_model_id != db_obj.model_id:
        bus_model = await _get_bus_model_or_404(db, model_id=new_model_id)
        diagram_model = await _resolve_diagram_model_for(db, bus_model=bus_model)
        seat_diagram = await _copy_diagram_model(
            db,
            diagram_model=diagram_model,
            bus_model=bus_model,
            registration_number=update_data.get("registration_number", db_obj.registration_number),
        )
        old_seat_diagram_id = db_obj.seat_diagram_id
        db_obj.seat_diagram_id = seat_diagram.id

    _apply(db_obj, update_data)
    db.add(db_obj)
    await db.flush()

    if old_seat_diagram_id is not None:
        await fleet_crud.bus_seat.delete_by_owner(db, owner_id=old_seat_diagram_id)
        old_diagram = await fleet_crud.seat_diagram.get(db, id=old_seat_diagram_id)
        if old_diagram is not None:
            await db.delete(old_diagram)
        logger.info("버스 %s 좌석 배치도 교체: %s -> %s", db_obj.id, old_seat_diagram_id, db_obj.seat_diagram_id)

    await record_audit(
        db, user_id=user_id, action="update", entity_type="bus", entity_id=db_obj.id,
        details={"fields": sorted(update_data), "replaced_seat_diagram_id": old_seat_diagram_id},
    )
    await db.commit()
    await db.refresh(db_obj)
    return db_obj


async def change_bus_status(
    db: AsyncSession,
    *,
    db_obj: fleet_models.Bus,
    new_status: fleet_models.BusStatus,
    user_id: Optional[int] = None,
) -> fleet_models.Bus:
    previous = db_obj.status
    validate_status_transition(previous, new_status)
    db_obj.status = new_status
    db.add(db_obj)
    await record_audit(
        db, user_id=user_id, action="change_status", entity_type="bus", entity_id=db_obj.id,
        details={"from": previous.value, "to": new_status.value},
    )
    await db.commit()
    await db.refresh(db_obj)
    return db_obj


async def delete_bus(db: AsyncSession, *, db_obj: fleet_models.Bus, user_id: Optional[int] = None) -> None:
    """버스와 버스 전용 좌석 배치도(좌석 포함)를 함께 삭제합니다."""
    bus_id = db_obj.id
    seat_diagram_id = db_obj.seat_diagram_id
    await db.delete(db_obj)
    await db.flush()

    await fleet_crud.bus_seat.delete_by_owner(db, owner_id=seat_diagram_id)
    seat_diagram = await fleet_crud.seat_diagram.get(db, id=seat_diagram_id)
    if seat_diagram is not None:
        await db.delete(seat_diagram)

    await record_audit(
        db, user_id=user_id, action="delete", entity_type="bus", entity_id=bus_id,
        details={"seat_diagram_id": seat_diagram_id},
    )
    await db.commit()
    logger.info("버스 삭제: id=%s (seat_diagram_id=%s)", bus_id, seat_diagram_id)
