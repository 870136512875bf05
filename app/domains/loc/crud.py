# app/domains/loc/crud.py

"""
'loc' 도메인 (시설 유형, 시설)과 관련된 CRUD 로직을 담당하는 모듈입니다.
"""

from typing import List, Optional
import logging

from sqlalchemy.orm import selectinload
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from fastapi import HTTPException, status

from app.core.crud_base import CRUDBase
from app.domains.shared import crud as shared_crud
from app.domains.shared import models as shared_models
from . import models as loc_models
from . import schemas as loc_schemas


logger = logging.getLogger(__name__)


# =============================================================================
# 1. 시설 유형 (InstallationType) CRUD
# =============================================================================
class CRUDInstallationType(
    CRUDBase[
        loc_models.InstallationType,
        loc_schemas.InstallationTypeCreate,
        loc_schemas.InstallationTypeUpdate
    ]
):
    def __init__(self):
        super().__init__(model=loc_models.InstallationType)

    async def get_by_code(self, db: AsyncSession, *, code: str) -> Optional[loc_models.InstallationType]:
        """시설 유형 코드로 조회합니다."""
        statement = select(self.model).where(self.model.code == code)
        result = await db.execute(statement)
        return result.scalars().one_or_none()

    async def create(
        self, db: AsyncSession, *, obj_in: loc_schemas.InstallationTypeCreate
    ) -> loc_models.InstallationType:
        if await self.get_by_code(db, code=obj_in.code):
            raise HTTPException(status_code=400, detail="Installation type with this code already exists.")
        return await super().create(db, obj_in=obj_in)

    async def update(
        self,
        db: AsyncSession,
        *,
        db_obj: loc_models.InstallationType,
        obj_in: loc_schemas.InstallationTypeUpdate
    ) -> loc_models.InstallationType:
        if db_obj.system_locked:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="System-locked installation types cannot be modified."
            )
        if obj_in.code and obj_in.code != db_obj.code:
            if await self.get_by_code(db, code=obj_in.code):
                raise HTTPException(status_code=400, detail="Installation type with this code already exists.")
        return await super().update(db, db_obj=db_obj, obj_in=obj_in)

    async def remove(self, db: AsyncSession, *, id: int) -> Optional[loc_models.InstallationType]:
        """시스템 잠금 유형이나 시설이 사용 중인 유형은 삭제할 수 없습니다."""
        db_obj = await self.get(db, id=id)
        if db_obj is None:
            return None
        if db_obj.system_locked:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="System-locked installation types cannot be deleted."
            )

        in_use = await db.execute(
            select(loc_models.Installation.id).where(loc_models.Installation.installation_type_id == id).limit(1)
        )
        if in_use.first() is not None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete installation type because there are associated installations."
            )
        return await self.delete(db, id=id)


installation_type = CRUDInstallationType()


# =============================================================================
# 2. 시설 (Installation) CRUD
# =============================================================================
class CRUDInstallation(
    CRUDBase[
        loc_models.Installation,
        loc_schemas.InstallationCreate,
        loc_schemas.InstallationUpdate
    ]
):
    def __init__(self):
        super().__init__(model=loc_models.Installation)

    async def get_with_amenities(self, db: AsyncSession, *, id: int) -> Optional[loc_models.Installation]:
        statement = (
            select(self.model)
            .where(self.model.id == id)
            .options(selectinload(loc_models.Installation.amenities))
            .execution_options(populate_existing=True)
        )
        result = await db.execute(statement)
        return result.scalars().one_or_none()

    async def _validate_installation_type(self, db: AsyncSession, *, installation_type_id: Optional[int]) -> None:
        if installation_type_id is None:
            return
        if not await installation_type.get(db, id=installation_type_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Installation type not found")

    async def _resolve_amenities(self, db: AsyncSession, *, amenity_ids: List[int]) -> List[shared_models.Amenity]:
        """
        편의시설 ID 목록을 검증합니다.
        존재하지 않거나(삭제 포함) 시설용(installation)이 아닌 편의시설이 있으면 400을 반환합니다.
        """
        unique_ids = list(dict.fromkeys(amenity_ids))
        amenities = await shared_crud.amenity.get_by_ids(db, ids=unique_ids)
        found_ids = {a.id for a in amenities}
        missing = [i for i in unique_ids if i not in found_ids]
        if missing:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Amenities not found: {missing}")

        invalid = [a.id for a in amenities if a.amenity_type != shared_models.AmenityType.INSTALLATION]
        if invalid:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Amenities must be of type 'installation': {sorted(invalid)}"
            )
        return amenities

    async def create(self, db: AsyncSession, *, obj_in: loc_schemas.InstallationCreate) -> loc_models.Installation:
        await self._validate_installation_type(db, installation_type_id=obj_in.installation_type_id)
        amenities = await self._resolve_amenities(db, amenity_ids=obj_in.amenity_ids)

        db_obj = loc_models.Installation(**obj_in.model_dump(exclude={"amenity_ids"}))
        db_obj.amenities = amenities
        db.add(db_obj)
        await db.commit()
        logger.info("시설 생성: %s (id=%s, amenities=%d)", db_obj.name, db_obj.id, len(amenities))
        return await self.get_with_amenities(db, id=db_obj.id)

    async def update(
        self, db: AsyncSession, *, db_obj: loc_models.Installation, obj_in: loc_schemas.InstallationUpdate
    ) -> loc_models.Installation:
        """amenity_ids 가 주어지면 편의시설 연결을 통째로 교체합니다."""
        if obj_in.installation_type_id is not None:
            await self._validate_installation_type(db, installation_type_id=obj_in.installation_type_id)

        installation_id = db_obj.id
        db_obj = await self.get_with_amenities(db, id=installation_id)
        update_data = obj_in.model_dump(exclude_unset=True, exclude={"amenity_ids"})
        for key, value in update_data.items():
            setattr(db_obj, key, value)
        if obj_in.amenity_ids is not None:
            db_obj.amenities = await self._resolve_amenities(db, amenity_ids=obj_in.amenity_ids)

        db.add(db_obj)
        await db.commit()
        return await self.get_with_amenities(db, id=installation_id)

    async def remove(self, db: AsyncSession, *, id: int) -> Optional[loc_models.Installation]:
        """편의시설 연결을 먼저 정리한 뒤 시설을 삭제합니다."""
        db_obj = await self.get_with_amenities(db, id=id)
        if db_obj is None:
            return None
        db_obj.amenities = []
        await db.flush()
        await db.delete(db_obj)
        await db.commit()
        logger.info("시설 삭제: id=%s", id)
        return db_obj

    async def get_multi_by_type(
        self, db: AsyncSession, *, installation_type_id: Optional[int] = None, skip: int = 0, limit: int = 100
    ) -> List[loc_models.Installation]:
        filters = {"installation_type_id": installation_type_id} if installation_type_id is not None else {}
        return await self.get_multi(db, skip=skip, limit=limit, **filters)


installation = CRUDInstallation()
