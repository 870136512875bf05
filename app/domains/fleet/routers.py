# app/domains/fleet/routers.py

"""
'fleet' 도메인 (PostgreSQL 'fleet' 스키마)의 API 엔드포인트를 정의하는 모듈입니다.

좌석 배치 모델, 버스 모델, 좌석 배치도, 버스에 대한 CRUD와
좌석 배치 조회/실체화/일괄 수정/동기화 엔드포인트를 제공합니다.
여러 테이블을 함께 바꾸는 작업은 services 모듈에 위임합니다.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from redis.exceptions import RedisError
from sqlmodel.ext.asyncio.session import AsyncSession

# 핵심 의존성 (데이터베이스 세션, 사용자 인증 등)
from app.core import dependencies as deps
from app.domains.usr.models import User as UsrUser

# 'fleet' 도메인의 CRUD, 스키마, 서비스
from app.domains.fleet import crud as fleet_crud
from app.domains.fleet import models as fleet_models
from app.domains.fleet import schemas as fleet_schemas
from app.domains.fleet import services as fleet_services
from app.domains.fleet.seat_layout import SeatConfiguration

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Fleet Management (버스 및 좌석 배치 관리)"],
    responses={404: {"description": "Not found"}},
)


async def _get_diagram_model_or_404(db: AsyncSession, model_id: int) -> fleet_models.BusDiagramModel:
    db_obj = await fleet_crud.bus_diagram_model.get(db, id=model_id)
    if db_obj is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bus diagram model not found")
    return db_obj


async def _get_seat_diagram_or_404(db: AsyncSession, diagram_id: int) -> fleet_models.SeatDiagram:
    db_obj = await fleet_crud.seat_diagram.get(db, id=diagram_id)
    if db_obj is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Seat diagram not found")
    return db_obj


async def _get_bus_or_404(db: AsyncSession, bus_id: int) -> fleet_models.Bus:
    db_obj = await fleet_crud.bus.get(db, id=bus_id)
    if db_obj is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bus not found")
    return db_obj


# =============================================================================
# 1. fleet.bus_diagram_models 엔드포인트
# =============================================================================
@router.post("/bus-diagram-models", response_model=fleet_schemas.BusDiagramModelRead, status_code=status.HTTP_201_CREATED, summary="새 좌석 배치 모델 생성")
async def create_bus_diagram_model(
    model_create: fleet_schemas.BusDiagramModelCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user)
):
    """좌석 배치 모델을 만들면서 층/열 구성에 따른 템플릿 좌석을 함께 생성합니다."""
    return await fleet_services.create_bus_diagram_model(db, obj_in=model_create, user_id=current_user.id)


@router.get("/bus-diagram-models", response_model=List[fleet_schemas.BusDiagramModelRead], summary="좌석 배치 모델 목록 조회")
async def read_bus_diagram_models(
    skip: int = 0,
    limit: int = 100,
    active: Optional[bool] = Query(None, description="사용 여부 필터"),
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user)
):
    filters = {"active": active} if active is not None else {}
    return await fleet_crud.bus_diagram_model.get_multi(db, skip=skip, limit=limit, **filters)


@router.get("/bus-diagram-models/{model_id}", response_model=fleet_schemas.BusDiagramModelRead, summary="특정 좌석 배치 모델 조회")
async def read_bus_diagram_model(
    model_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user)
):
    return await _get_diagram_model_or_404(db, model_id)


@router.put("/bus-diagram-models/{model_id}", response_model=fleet_schemas.BusDiagramModelRead, summary="좌석 배치 모델 업데이트")
async def update_bus_diagram_model(
    model_id: int,
    model_update: fleet_schemas.BusDiagramModelUpdate,
    regenerate_seats: bool = Query(False, description="true이면 수정 후 템플릿 좌석을 다시 생성합니다."),
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user)
):
    db_obj = await _get_diagram_model_or_404(db, model_id)
    return await fleet_services.update_bus_diagram_model(
        db, db_obj=db_obj, obj_in=model_update, regenerate_seats=regenerate_seats, user_id=current_user.id
    )


@router.delete("/bus-diagram-models/{model_id}", status_code=status.HTTP_204_NO_CONTENT, summary="좌석 배치 모델 삭제")
async def delete_bus_diagram_model(
    model_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user)
):
    """좌석 배치도 또는 버스 모델이 참조 중이면 삭제할 수 없습니다."""
    db_obj = await _get_diagram_model_or_404(db, model_id)
    await fleet_services.delete_bus_diagram_model(db, db_obj=db_obj, user_id=current_user.id)
    return None


@router.get("/bus-diagram-models/{model_id}/seat-models", response_model=List[fleet_schemas.BusSeatModelRead], summary="템플릿 좌석 목록 조회")
async def read_seat_models(
    model_id: int,
    active_only: bool = False,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user)
):
    await _get_diagram_model_or_404(db, model_id)
    return await fleet_crud.bus_seat_model.get_by_owner(db, owner_id=model_id, active_only=active_only)


@router.post("/bus-diagram-models/{model_id}/seat-models/regenerate", response_model=fleet_schemas.RegenerateSeatModelsResult, summary="템플릿 좌석 재생성")
async def regenerate_seat_models(
    model_id: int,
    model_update: Optional[fleet_schemas.BusDiagramModelUpdate] = None,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user)
):
    """
    기존 템플릿 좌석을 모두 삭제하고 다시 생성합니다.
    요청 본문이 있으면 좌석 배치 모델에 먼저 반영합니다.
    """
    db_obj = await _get_diagram_model_or_404(db, model_id)
    return await fleet_services.regenerate_seat_models(
        db, db_obj=db_obj, obj_in=model_update, user_id=current_user.id
    )


@router.put("/bus-diagram-models/{model_id}/seat-models/configuration", response_model=fleet_schemas.SeatConfigurationUpdateResult, summary="템플릿 좌석 일괄 수정")
async def update_seat_models_configuration(
    model_id: int,
    configuration: fleet_schemas.SeatConfigurationUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user)
):
    db_obj = await _get_diagram_model_or_404(db, model_id)
    return await fleet_services.update_template_seat_configuration(
        db, db_obj=db_obj, spaces=configuration.seats, user_id=current_user.id
    )


@router.get("/bus-diagram-models/{model_id}/seat-configuration", response_model=SeatConfiguration, summary="좌석 배치 모델의 좌석 배치 조회")
async def read_diagram_model_configuration(
    model_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user)
):
    db_obj = await _get_diagram_model_or_404(db, model_id)
    return await fleet_services.get_diagram_model_configuration(db, db_obj=db_obj)


@router.post("/bus-diagram-models/{model_id}/seat-diagrams/sync", response_model=fleet_schemas.SeatDiagramSyncResponse, summary="좌석 배치도 템플릿 동기화")
async def sync_seat_diagrams(
    model_id: int,
    request: Request,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user)
):
    """
    수동 수정되지 않은 좌석 배치도들의 좌석을 템플릿 좌석과 일치시킵니다.
    작업 큐가 연결되어 있으면 백그라운드 작업으로 등록하고, 아니면 즉시 실행합니다.
    """
    db_obj = await _get_diagram_model_or_404(db, model_id)

    task_queue_client = getattr(request.app.state, "redis", None)
    if task_queue_client is not None:
        try:
            job = await task_queue_client.enqueue_job("sync_seat_diagrams_task", db_obj.id, current_user.id)
        except (OSError, RedisError) as e:
            logger.warning("작업 큐 등록 실패, 즉시 실행합니다: %s", e)
        else:
            logger.info("좌석 배치도 동기화 작업 등록: bus_diagram_model_id=%s, job_id=%s", db_obj.id, job.job_id)
            return {"status": "queued", "job_id": job.job_id, "results": []}

    results = await fleet_services.sync_seat_diagrams(db, db_obj=db_obj, user_id=current_user.id)
    return {"status": "completed", "job_id": None, "results": results}


# =============================================================================
# 2. fleet.bus_models 엔드포인트
# =============================================================================
@router.post("/bus-models", response_model=fleet_schemas.BusModelRead, status_code=status.HTTP_201_CREATED, summary="새 버스 모델 생성")
async def create_bus_model(
    model_create: fleet_schemas.BusModelCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user)
):
    return await fleet_services.create_bus_model(db, obj_in=model_create, user_id=current_user.id)


@router.get("/bus-models", response_model=List[fleet_schemas.BusModelRead], summary="버스 모델 목록 조회")
async def read_bus_models(
    skip: int = 0,
    limit: int = 100,
    manufacturer: Optional[str] = Query(None, description="제조사 필터"),
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user)
):
    filters = {"manufacturer": manufacturer} if manufacturer else {}
    return await fleet_crud.bus_model.get_multi(db, skip=skip, limit=limit, **filters)


@router.get("/bus-models/{model_id}", response_model=fleet_schemas.BusModelRead, summary="특정 버스 모델 조회")
async def read_bus_model(
    model_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user)
):
    db_obj = await fleet_crud.bus_model.get(db, id=model_id)
    if db_obj is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bus model not found")
    return db_obj


@router.put("/bus-models/{model_id}", response_model=fleet_schemas.BusModelRead, summary="버스 모델 업데이트")
async def update_bus_model(
    model_id: int,
    model_update: fleet_schemas.BusModelUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user)
):
    db_obj = await fleet_crud.bus_model.get(db, id=model_id)
    if db_obj is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bus model not found")
    return await fleet_services.update_bus_model(db, db_obj=db_obj, obj_in=model_update, user_id=current_user.id)


@router.delete("/bus-models/{model_id}", status_code=status.HTTP_204_NO_CONTENT, summary="버스 모델 삭제")
async def delete_bus_model(
    model_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user)
):
    deleted = await fleet_services.delete_bus_model(db, id=model_id, user_id=current_user.id)
    if deleted is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bus model not found")
    return None


# =============================================================================
# 3. fleet.seat_diagrams 엔드포인트
# =============================================================================
@router.get("/seat-diagrams", response_model=List[fleet_schemas.SeatDiagramRead], summary="좌석 배치도 목록 조회")
async def read_seat_diagrams(
    skip: int = 0,
    limit: int = 100,
    bus_diagram_model_id: Optional[int] = Query(None, description="원본 좌석 배치 모델 ID 필터"),
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user)
):
    filters = {"bus_diagram_model_id": bus_diagram_model_id} if bus_diagram_model_id else {}
    return await fleet_crud.seat_diagram.get_multi(db, skip=skip, limit=limit, **filters)


@router.get("/seat-diagrams/{diagram_id}", response_model=fleet_schemas.SeatDiagramRead, summary="특정 좌석 배치도 조회")
async def read_seat_diagram(
    diagram_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user)
):
    return await _get_seat_diagram_or_404(db, diagram_id)


@router.put("/seat-diagrams/{diagram_id}", response_model=fleet_schemas.SeatDiagramRead, summary="좌석 배치도 업데이트")
async def update_seat_diagram(
    diagram_id: int,
    diagram_update: fleet_schemas.SeatDiagramUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user)
):
    db_obj = await _get_seat_diagram_or_404(db, diagram_id)
    return await fleet_services.update_seat_diagram(db, db_obj=db_obj, obj_in=diagram_update, user_id=current_user.id)


@router.delete("/seat-diagrams/{diagram_id}", status_code=status.HTTP_204_NO_CONTENT, summary="좌석 배치도 삭제")
async def delete_seat_diagram(
    diagram_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user)
):
    db_obj = await _get_seat_diagram_or_404(db, diagram_id)
    await fleet_services.delete_seat_diagram(db, db_obj=db_obj, user_id=current_user.id)
    return None


@router.get("/seat-diagrams/{diagram_id}/seats", response_model=List[fleet_schemas.BusSeatRead], summary="좌석 배치도의 좌석 목록 조회")
async def read_seat_diagram_seats(
    diagram_id: int,
    active_only: bool = False,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user)
):
    await _get_seat_diagram_or_404(db, diagram_id)
    return await fleet_crud.bus_seat.get_by_owner(db, owner_id=diagram_id, active_only=active_only)


@router.get("/seat-diagrams/{diagram_id}/seat-configuration", response_model=SeatConfiguration, summary="좌석 배치도의 좌석 배치 조회")
async def read_seat_diagram_configuration(
    diagram_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user)
):
    """저장된 좌석이 있으면 재구성 배치를, 없으면 이론적 배치를 반환합니다."""
    db_obj = await _get_seat_diagram_or_404(db, diagram_id)
    return await fleet_services.get_seat_diagram_configuration(db, db_obj=db_obj)


@router.post("/seat-diagrams/{diagram_id}/materialize", response_model=fleet_schemas.MaterializeSeatsResult, summary="좌석 실체화")
async def materialize_seat_diagram(
    diagram_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user)
):
    """이론적 배치의 좌석을 저장합니다. 이미 좌석이 있으면 새로 만들지 않습니다."""
    db_obj = await _get_seat_diagram_or_404(db, diagram_id)
    return await fleet_services.materialize_seats(db, db_obj=db_obj, user_id=current_user.id)


@router.put("/seat-diagrams/{diagram_id}/seats/configuration", response_model=fleet_schemas.SeatConfigurationUpdateResult, summary="좌석 배치도 좌석 일괄 수정")
async def update_seat_diagram_configuration(
    diagram_id: int,
    configuration: fleet_schemas.SeatConfigurationUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user)
):
    db_obj = await _get_seat_diagram_or_404(db, diagram_id)
    return await fleet_services.update_seat_diagram_configuration(
        db, db_obj=db_obj, spaces=configuration.seats, user_id=current_user.id
    )


# =============================================================================
# 4. fleet.buses 엔드포인트
# =============================================================================
@router.post("/buses", response_model=fleet_schemas.BusRead, status_code=status.HTTP_201_CREATED, summary="새 버스 등록")
async def create_bus(
    bus_create: fleet_schemas.BusCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user)
):
    """버스 전용 좌석 배치도를 좌석 배치 모델에서 복사하여 함께 생성합니다."""
    return await fleet_services.create_bus(db, obj_in=bus_create, user_id=current_user.id)


@router.get("/buses", response_model=List[fleet_schemas.BusRead], summary="버스 목록 조회")
async def read_buses(
    skip: int = 0,
    limit: int = 100,
    status_filter: Optional[fleet_models.BusStatus] = Query(None, alias="status", description="운행 상태 필터"),
    model_id: Optional[int] = Query(None, description="버스 모델 ID 필터"),
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user)
):
    filters = {}
    if status_filter is not None:
        filters["status"] = status_filter
    if model_id is not None:
        filters["model_id"] = model_id
    return await fleet_crud.bus.get_multi(db, skip=skip, limit=limit, **filters)


@router.get("/buses/{bus_id}", response_model=fleet_schemas.BusRead, summary="특정 버스 조회")
async def read_bus(
    bus_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user)
):
    return await _get_bus_or_404(db, bus_id)


@router.put("/buses/{bus_id}", response_model=fleet_schemas.BusRead, summary="버스 정보 업데이트")
async def update_bus(
    bus_id: int,
    bus_update: fleet_schemas.BusUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user)
):
    """버스 모델이 바뀌면 좌석 배치도가 새 모델의 기본 좌석 배치 모델 복사본으로 교체됩니다."""
    db_obj = await _get_bus_or_404(db, bus_id)
    return await fleet_services.update_bus(db, db_obj=db_obj, obj_in=bus_update, user_id=current_user.id)


@router.put("/buses/{bus_id}/status", response_model=fleet_schemas.BusRead, summary="버스 운행 상태 변경")
async def change_bus_status(
    bus_id: int,
    status_update: fleet_schemas.BusStatusUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user)
):
    db_obj = await _get_bus_or_404(db, bus_id)
    return await fleet_services.change_bus_status(
        db, db_obj=db_obj, new_status=status_update.status, user_id=current_user.id
    )


@router.get("/buses/{bus_id}/allowed-status-transitions", response_model=fleet_schemas.BusAllowedTransitions, summary="변경 가능한 운행 상태 조회")
async def read_allowed_status_transitions(
    bus_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user)
):
    db_obj = await _get_bus_or_404(db, bus_id)
    return {
        "status": db_obj.status,
        "allowed_transitions": fleet_services.allowed_status_transitions(db_obj.status),
    }


@router.delete("/buses/{bus_id}", status_code=status.HTTP_204_NO_CONTENT, summary="버스 삭제")
async def delete_bus(
    bus_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user)
):
    """버스 전용 좌석 배치도와 좌석도 함께 삭제됩니다."""
    db_obj = await _get_bus_or_404(db, bus_id)
    await fleet_services.delete_bus(db, db_obj=db_obj, user_id=current_user.id)
    return None
