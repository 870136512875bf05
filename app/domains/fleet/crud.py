# app/domains/fleet/crud.py

"""
'fleet' 도메인의 CRUD 작업을 담당하는 모듈입니다.

좌석 배치 계산과 여러 테이블에 걸친 작업(버스 생성 시 좌석 배치도 복사 등)은
services.py 에서 이 모듈의 CRUD 객체를 조합하여 수행합니다.
"""

import logging
from typing import Any, List, Optional, Type

from sqlalchemy import delete as sa_delete, func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from fastapi import HTTPException, status

from app.core.crud_base import CRUDBase
from . import models as fleet_models
from . import schemas as fleet_schemas
from .seat_layout import SpaceType

logger = logging.getLogger(__name__)


# =============================================================================
# 1. 좌석 배치 모델 (BusDiagramModel) CRUD
# =============================================================================
class CRUDBusDiagramModel(
    CRUDBase[fleet_models.BusDiagramModel, fleet_schemas.BusDiagramModelCreate, fleet_schemas.BusDiagramModelUpdate]
):
    def __init__(self):
        super().__init__(model=fleet_models.BusDiagramModel)

    async def get_by_name(self, db: AsyncSession, *, name: str) -> Optional[fleet_models.BusDiagramModel]:
        return await self.get_by_attribute(db, attribute="name", value=name)

    async def ensure_unique_name(self, db: AsyncSession, *, name: str, exclude_id: Optional[int] = None) -> None:
        existing = await self.get_by_name(db, name=name)
        if existing and existing.id != exclude_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Bus diagram model with this name already exists"
            )


bus_diagram_model = CRUDBusDiagramModel()


# =============================================================================
# 2. 좌석 칸 (BusSeatModel, BusSeat) 공통 CRUD
# =============================================================================
class CRUDSeatSpace(CRUDBase[Any, Any, Any]):
    """
    템플릿 좌석(BusSeatModel)과 좌석(BusSeat)은 소유 테이블 FK 컬럼만 다릅니다.
    owner_field 에 FK 컬럼 이름을 지정합니다.
    """

    def __init__(self, model: Type[Any], owner_field: str):
        super().__init__(model=model)
        self.owner_field = owner_field

    def _owner_column(self):
        return getattr(self.model, self.owner_field)

    async def get_by_owner(self, db: AsyncSession, *, owner_id: int, active_only: bool = False) -> List[Any]:
        """소유 배치의 모든 칸을 층, ID 순으로 조회합니다."""
        query = select(self.model).where(self._owner_column() == owner_id)
        if active_only:
            query = query.where(self.model.active.is_(True))
        query = query.order_by(self.model.floor_number, self.model.id)
        result = await db.execute(query)
        return result.scalars().all()

    async def count_by_owner(self, db: AsyncSession, *, owner_id: int) -> int:
        result = await db.execute(
            select(func.count()).select_from(self.model).where(self._owner_column() == owner_id)
        )
        return result.scalar_one()

    async def count_active_seats(self, db: AsyncSession, *, owner_id: int) -> int:
        """활성 상태이며 space_type이 seat인 칸의 수"""
        result = await db.execute(
            select(func.count())
            .select_from(self.model)
            .where(
                self._owner_column() == owner_id,
                self.model.active.is_(True),
                self.model.space_type == SpaceType.SEAT,
            )
        )
        return result.scalar_one()

    async def delete_by_owner(self, db: AsyncSession, *, owner_id: int) -> int:
        """소유 배치의 모든 칸을 삭제합니다. 커밋은 호출한 쪽에서 합니다."""
        result = await db.execute(sa_delete(self.model).where(self._owner_column() == owner_id))
        return result.rowcount or 0


bus_seat_model = CRUDSeatSpace(fleet_models.BusSeatModel, owner_field="bus_diagram_model_id")
bus_seat = CRUDSeatSpace(fleet_models.BusSeat, owner_field="seat_diagram_id")


# =============================================================================
# 3. 버스 모델 (BusModel) CRUD
# =============================================================================
class CRUDBusModel(CRUDBase[fleet_models.BusModel, fleet_schemas.BusModelCreate, fleet_schemas.BusModelUpdate]):
    def __init__(self):
        super().__init__(model=fleet_models.BusModel)

    async def get_by_identity(
        self, db: AsyncSession, *, manufacturer: str, model: str, year: int
    ) -> Optional[fleet_models.BusModel]:
        return await self.get_one_filtered(
            db, filters={"manufacturer": manufacturer, "model": model, "year": year}
        )

    async def _validate_diagram_model(self, db: AsyncSession, *, bus_diagram_model_id: Optional[int]) -> None:
        if bus_diagram_model_id is not None and not await bus_diagram_model.get(db, id=bus_diagram_model_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bus diagram model not found")

    async def create(self, db: AsyncSession, *, obj_in: fleet_schemas.BusModelCreate) -> fleet_models.BusModel:
        if await self.get_by_identity(db, manufacturer=obj_in.manufacturer, model=obj_in.model, year=obj_in.year):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Bus model with this manufacturer, model and year already exists"
            )
        await self._validate_diagram_model(db, bus_diagram_model_id=obj_in.default_bus_diagram_model_id)
        return await super().create(db, obj_in=obj_in)

    async def update(
        self, db: AsyncSession, *, db_obj: fleet_models.BusModel, obj_in: fleet_schemas.BusModelUpdate
    ) -> fleet_models.BusModel:
        data = obj_in.model_dump(exclude_unset=True)
        manufacturer = data.get("manufacturer", db_obj.manufacturer)
        model = data.get("model", db_obj.model)
        year = data.get("year", db_obj.year)
        existing = await self.get_by_identity(db, manufacturer=manufacturer, model=model, year=year)
        if existing and existing.id != db_obj.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Bus model with this manufacturer, model and year already exists"
            )
        if "default_bus_diagram_model_id" in data:
            await self._validate_diagram_model(db, bus_diagram_model_id=data["default_bus_diagram_model_id"])
        return await super().update(db, db_obj=db_obj, obj_in=obj_in)

    async def remove(self, db: AsyncSession, *, id: int) -> Optional[fleet_models.BusModel]:
        """이 모델을 사용하는 버스가 있으면 삭제할 수 없습니다."""
        db_obj = await self.get(db, id=id)
        if db_obj is None:
            return None
        if await bus.count(db, model_id=id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete bus model because there are buses using it."
            )
        return await self.delete(db, id=id)


bus_model = CRUDBusModel()


# =============================================================================
# 4. 좌석 배치도 (SeatDiagram) CRUD
# =============================================================================
class CRUDSeatDiagram(CRUDBase[fleet_models.SeatDiagram, fleet_schemas.SeatDiagramUpdate, fleet_schemas.SeatDiagramUpdate]):
    def __init__(self):
        super().__init__(model=fleet_models.SeatDiagram)

    async def get_by_diagram_model(
        self, db: AsyncSession, *, bus_diagram_model_id: int, unmodified_only: bool = False
    ) -> List[fleet_models.SeatDiagram]:
        query = select(self.model).where(self.model.bus_diagram_model_id == bus_diagram_model_id)
        if unmodified_only:
            query = query.where(self.model.is_modified.is_(False))
        result = await db.execute(query.order_by(self.model.id))
        return result.scalars().all()


seat_diagram = CRUDSeatDiagram()


# =============================================================================
# 5. 버스 (Bus) CRUD
# =============================================================================
class CRUDBus(CRUDBase[fleet_models.Bus, fleet_schemas.BusCreate, fleet_schemas.BusUpdate]):
    def __init__(self):
        super().__init__(model=fleet_models.Bus)

    async def get_by_registration_number(self, db: AsyncSession, *, registration_number: str) -> Optional[fleet_models.Bus]:
        return await self.get_by_attribute(db, attribute="registration_number", value=registration_number)

    async def get_by_seat_diagram(self, db: AsyncSession, *, seat_diagram_id: int) -> Optional[fleet_models.Bus]:
        return await self.get_by_attribute(db, attribute="seat_diagram_id", value=seat_diagram_id)

    async def ensure_unique_registration(
        self, db: AsyncSession, *, registration_number: str, exclude_id: Optional[int] = None
    ) -> None:
        existing = await self.get_by_registration_number(db, registration_number=registration_number)
        if existing and existing.id != exclude_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Bus with this registration number already exists"
            )


bus = CRUDBus()
