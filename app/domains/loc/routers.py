# app/domains/loc/routers.py

"""
'loc' 도메인 (PostgreSQL 'loc' 스키마)의 API 엔드포인트를 정의하는 모듈입니다.

이 라우터는 시설 유형(InstallationType)과 시설(Installation) 정보에 대한
CRUD 작업을 위한 HTTP 엔드포인트를 제공합니다.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel.ext.asyncio.session import AsyncSession

# 핵심 의존성 (데이터베이스 세션, 사용자 인증 등)
from app.core import dependencies as deps
from app.domains.usr.models import User as UsrUser

# 'loc' 도메인의 CRUD, 스키마
from app.domains.loc import crud as loc_crud
from app.domains.loc import schemas as loc_schemas

router = APIRouter(
    tags=["Location Management (시설 관리)"],
    responses={404: {"description": "Not found"}},
)


# =============================================================================
# 1. loc.installation_types 엔드포인트
# =============================================================================
@router.post("/installation-types", response_model=loc_schemas.InstallationTypeRead, status_code=status.HTTP_201_CREATED, summary="새 시설 유형 생성")
async def create_installation_type(
    type_create: loc_schemas.InstallationTypeCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user)  # 관리자 이상만 생성 가능
):
    return await loc_crud.installation_type.create(db=db, obj_in=type_create)


@router.get("/installation-types", response_model=List[loc_schemas.InstallationTypeRead], summary="시설 유형 목록 조회")
async def read_installation_types(
    skip: int = 0,
    limit: int = 100,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user)
):
    return await loc_crud.installation_type.get_multi(db, skip=skip, limit=limit)


@router.get("/installation-types/{type_id}", response_model=loc_schemas.InstallationTypeRead, summary="특정 시설 유형 조회")
async def read_installation_type(
    type_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user)
):
    db_type = await loc_crud.installation_type.get(db, id=type_id)
    if db_type is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Installation type not found")
    return db_type


@router.put("/installation-types/{type_id}", response_model=loc_schemas.InstallationTypeRead, summary="시설 유형 업데이트")
async def update_installation_type(
    type_id: int,
    type_update: loc_schemas.InstallationTypeUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user)
):
    """시스템 잠금(system_locked) 유형은 수정할 수 없습니다."""
    db_type = await loc_crud.installation_type.get(db, id=type_id)
    if db_type is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Installation type not found")
    return await loc_crud.installation_type.update(db=db, db_obj=db_type, obj_in=type_update)


@router.delete("/installation-types/{type_id}", status_code=status.HTTP_204_NO_CONTENT, summary="시설 유형 삭제")
async def delete_installation_type(
    type_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user)
):
    deleted = await loc_crud.installation_type.remove(db, id=type_id)
    if deleted is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Installation type not found")
    return None


# =============================================================================
# 2. loc.installations 엔드포인트
# =============================================================================
@router.post("/installations", response_model=loc_schemas.InstallationReadWithAmenities, status_code=status.HTTP_201_CREATED, summary="새 시설 생성")
async def create_installation(
    installation_create: loc_schemas.InstallationCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user)
):
    """
    새로운 시설을 생성합니다. (관리자 권한 필요)
    - `amenity_ids`: 연결할 편의시설 ID 목록 (편의시설 유형이 'installation'이어야 함)
    """
    return await loc_crud.installation.create(db=db, obj_in=installation_create)


@router.get("/installations", response_model=List[loc_schemas.InstallationRead], summary="시설 목록 조회")
async def read_installations(
    installation_type_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user)
):
    return await loc_crud.installation.get_multi_by_type(
        db, installation_type_id=installation_type_id, skip=skip, limit=limit
    )


@router.get("/installations/{installation_id}", response_model=loc_schemas.InstallationReadWithAmenities, summary="특정 시설 조회")
async def read_installation(
    installation_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user)
):
    db_installation = await loc_crud.installation.get_with_amenities(db, id=installation_id)
    if db_installation is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Installation not found")
    return db_installation


@router.put("/installations/{installation_id}", response_model=loc_schemas.InstallationReadWithAmenities, summary="시설 업데이트")
async def update_installation(
    installation_id: int,
    installation_update: loc_schemas.InstallationUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user)
):
    db_installation = await loc_crud.installation.get(db, id=installation_id)
    if db_installation is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Installation not found")
    return await loc_crud.installation.update(db=db, db_obj=db_installation, obj_in=installation_update)


@router.delete("/installations/{installation_id}", status_code=status.HTTP_204_NO_CONTENT, summary="시설 삭제")
async def delete_installation(
    installation_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_admin_user)
):
    deleted = await loc_crud.installation.remove(db, id=installation_id)
    if deleted is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Installation not found")
    return None
