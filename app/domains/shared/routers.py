# app/domains/shared/routers.py

"""
'shared' 도메인 (편의시설, 변경 이력)과 관련된 API 엔드포인트를 정의하는 모듈입니다.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.database import get_session
from app.core import dependencies as deps
from app.domains.usr import models as usr_models

from . import crud as shared_crud
from . import models as shared_models
from . import schemas as shared_schemas


router = APIRouter(
    tags=["Shared Resources (편의시설 및 변경 이력)"],
    responses={404: {"description": "Not found"}},
)


# =============================================================================
# 1. 편의시설 (Amenity) 엔드포인트
# =============================================================================
@router.post("/amenities", response_model=shared_schemas.AmenityRead, status_code=status.HTTP_201_CREATED, summary="새 편의시설 생성")
async def create_amenity(
    amenity_in: shared_schemas.AmenityCreate,
    db: AsyncSession = Depends(get_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    return await shared_crud.amenity.create(db, obj_in=amenity_in)


@router.get("/amenities", response_model=List[shared_schemas.AmenityRead], summary="편의시설 목록 조회")
async def read_amenities(
    category: Optional[shared_models.AmenityCategory] = Query(None, description="분류로 필터링"),
    amenity_type: Optional[shared_models.AmenityType] = Query(None, description="적용 대상으로 필터링"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1),
    db: AsyncSession = Depends(get_session),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    """소프트 삭제된 편의시설은 목록에 포함되지 않습니다."""
    return await shared_crud.amenity.get_active_multi(
        db, category=category, amenity_type=amenity_type, skip=skip, limit=limit
    )


@router.get("/amenities/{amenity_id}", response_model=shared_schemas.AmenityRead, summary="특정 편의시설 조회")
async def read_amenity(
    amenity_id: int,
    db: AsyncSession = Depends(get_session),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    amenity = await shared_crud.amenity.get(db, id=amenity_id)
    if not amenity or amenity.deleted_at is not None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Amenity not found")
    return amenity


@router.put("/amenities/{amenity_id}", response_model=shared_schemas.AmenityRead, summary="편의시설 업데이트")
async def update_amenity(
    amenity_id: int,
    amenity_in: shared_schemas.AmenityUpdate,
    db: AsyncSession = Depends(get_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    db_amenity = await shared_crud.amenity.get(db, id=amenity_id)
    if not db_amenity or db_amenity.deleted_at is not None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Amenity not found")
    return await shared_crud.amenity.update(db, db_obj=db_amenity, obj_in=amenity_in)


@router.delete("/amenities/{amenity_id}", status_code=status.HTTP_204_NO_CONTENT, summary="편의시설 삭제 (소프트 삭제)")
async def delete_amenity(
    amenity_id: int,
    db: AsyncSession = Depends(get_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    db_amenity = await shared_crud.amenity.get(db, id=amenity_id)
    if not db_amenity or db_amenity.deleted_at is not None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Amenity not found")
    await shared_crud.amenity.soft_delete(db, db_obj=db_amenity)
    return None


# =============================================================================
# 2. 변경 이력 (Audit) 엔드포인트
# =============================================================================
@router.get("/audits", response_model=List[shared_schemas.AuditRead], summary="변경 이력 조회")
async def read_audits(
    entity_type: Optional[str] = Query(None, description="엔티티 종류로 필터링 (예: bus)"),
    entity_id: Optional[int] = Query(None, description="엔티티 ID로 필터링"),
    user_id: Optional[int] = Query(None, description="작업 사용자 ID로 필터링"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1),
    db: AsyncSession = Depends(get_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    """최신 이력부터 반환합니다. 관리자 권한이 필요합니다."""
    filters = {
        key: value
        for key, value in {"entity_type": entity_type, "entity_id": entity_id, "user_id": user_id}.items()
        if value is not None
    }
    return await shared_crud.audit.get_filtered(db, filters=filters, skip=skip, limit=limit)
