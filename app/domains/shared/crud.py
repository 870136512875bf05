# app/domains/shared/crud.py

"""
'shared' 도메인의 CRUD 작업을 담당하는 모듈입니다.
"""

from datetime import datetime, UTC
from typing import List, Optional, Sequence

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from fastapi import HTTPException, status

from app.core.crud_base import CRUDBase
from . import models as shared_models
from . import schemas as shared_schemas


# =============================================================================
# 1. shared.amenities 테이블 CRUD
# =============================================================================
class CRUDAmenity(CRUDBase[shared_models.Amenity, shared_schemas.AmenityCreate, shared_schemas.AmenityUpdate]):
    def __init__(self):
        super().__init__(model=shared_models.Amenity)

    async def get_by_name(self, db: AsyncSession, *, name: str) -> Optional[shared_models.Amenity]:
        return await self.get_by_attribute(db, attribute="name", value=name)

    async def get_active_multi(
        self,
        db: AsyncSession,
        *,
        category: Optional[shared_models.AmenityCategory] = None,
        amenity_type: Optional[shared_models.AmenityType] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[shared_models.Amenity]:
        """소프트 삭제되지 않은 편의시설을 이름순으로 조회합니다."""
        query = select(self.model).where(self.model.deleted_at.is_(None))
        if category is not None:
            query = query.where(self.model.category == category)
        if amenity_type is not None:
            query = query.where(self.model.amenity_type == amenity_type)
        query = query.order_by(self.model.name).offset(skip).limit(limit)
        result = await db.execute(query)
        return result.scalars().all()

    async def get_by_ids(self, db: AsyncSession, *, ids: Sequence[int]) -> List[shared_models.Amenity]:
        """삭제되지 않은 편의시설 중 ids에 해당하는 것들을 조회합니다."""
        if not ids:
            return []
        result = await db.execute(
            select(self.model).where(self.model.id.in_(list(ids)), self.model.deleted_at.is_(None))
        )
        return result.scalars().all()

    async def create(self, db: AsyncSession, *, obj_in: shared_schemas.AmenityCreate) -> shared_models.Amenity:
        if await self.get_by_name(db, name=obj_in.name):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Amenity with this name already exists")
        return await super().create(db, obj_in=obj_in)

    async def update(
        self, db: AsyncSession, *, db_obj: shared_models.Amenity, obj_in: shared_schemas.AmenityUpdate
    ) -> shared_models.Amenity:
        if obj_in.name and obj_in.name != db_obj.name:
            if await self.get_by_name(db, name=obj_in.name):
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Amenity with this name already exists")
        return await super().update(db, db_obj=db_obj, obj_in=obj_in)

    async def soft_delete(self, db: AsyncSession, *, db_obj: shared_models.Amenity) -> shared_models.Amenity:
        """deleted_at을 기록하고 비활성화합니다. 레코드는 남아 있습니다."""
        db_obj.deleted_at = datetime.now(UTC)
        db_obj.active = False
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj


amenity = CRUDAmenity()


# =============================================================================
# 2. shared.audits 테이블 CRUD
# =============================================================================
class CRUDAudit(CRUDBase[shared_models.Audit, shared_schemas.AuditCreate, shared_schemas.AuditCreate]):
    def __init__(self):
        super().__init__(model=shared_models.Audit)


audit = CRUDAudit()
