# app/core/crud_base.py

"""
공통 CRUD(Create, Read, Update, Delete) 작업을 위한 기본 클래스 모듈입니다.
모든 메서드는 비동기(async) 환경에서 동작합니다.
"""

import logging
from typing import Generic, List, Optional, Type, TypeVar, Any, Dict
from datetime import date, timedelta

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession
from pydantic import BaseModel
from fastapi import HTTPException, status

ModelType = TypeVar("ModelType", bound=SQLModel)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)

logger = logging.getLogger(__name__)


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """
    모든 CRUD 작업에 대한 기본 클래스를 정의합니다.
    """
    def __init__(self, model: Type[ModelType]):
        self.model = model

    async def get(self, db: AsyncSession, id: Any) -> Optional[ModelType]:
        """
        ID를 기준으로 단일 레코드를 조회합니다.
        """
        return await db.get(self.model, id)

    async def get_multi(
        self, db: AsyncSession, *, skip: int = 0, limit: int = 100, **kwargs: Any
    ) -> List[ModelType]:
        """
        여러 레코드를 ID 오름차순으로 조회합니다. 필터링을 위한 키워드 인자를 지원합니다.
        """
        query = select(self.model)

        for field, value in kwargs.items():
            if hasattr(self.model, field):
                query = query.where(getattr(self.model, field) == value)

        if hasattr(self.model, 'id'):
            query = query.order_by(self.model.id)
        query = query.offset(skip).limit(limit)

        result = await db.execute(query)
        return result.scalars().all()

    async def count(self, db: AsyncSession, **kwargs: Any) -> int:
        """조건(키워드 인자)을 만족하는 레코드 수를 반환합니다."""
        query = select(func.count()).select_from(self.model)
        for field, value in kwargs.items():
            if hasattr(self.model, field):
                query = query.where(getattr(self.model, field) == value)
        result = await db.execute(query)
        return result.scalar_one()

    async def get_by_attribute(
        self, db: AsyncSession, *, attribute: str, value: Any
    ) -> Optional[ModelType]:
        statement = select(self.model).where(getattr(self.model, attribute) == value)
        response = await db.execute(statement)
        return response.scalars().first()

    async def get_filtered(
        self,
        db: AsyncSession,
        *,
        filters: Optional[Dict[str, Any]] = None,  # 다중 속성 필터: {"attribute_name": "value"}
        date_range_field: Optional[str] = None,    # 기간 검색을 적용할 날짜 필드 이름 (예: "purchase_date")
        start_date: Optional[date] = None,         # 기간 검색 시작일
        end_date: Optional[date] = None,           # 기간 검색 종료일
        order_by_field: Optional[str] = None,      # 정렬할 필드 (예: "id")
        order_desc: bool = True,                   # 내림차순 정렬 여부
        skip: int = 0,
        limit: int = 100
    ) -> List[ModelType]:
        """
        다중 속성 및 기간 검색 기능을 포함한 다중 조회.
        조건을 만족하는 레코드가 없으면 빈 리스트를 반환합니다.
        """
        query = select(self.model)
        conditions = self._build_conditions(filters, date_range_field, start_date, end_date)

        if conditions:
            query = query.where(*conditions)

        # 정렬 (선택 사항)
        if order_by_field and hasattr(self.model, order_by_field):
            column = getattr(self.model, order_by_field)
            query = query.order_by(column.desc() if order_desc else column)
        elif order_by_field:
            logger.warning("Model %s has no attribute '%s' for ordering.", self.model.__name__, order_by_field)
        elif hasattr(self.model, 'id'):
            query = query.order_by(self.model.id.desc())

        query = query.offset(skip).limit(limit)

        result = await db.execute(query)
        return result.scalars().all()

    async def get_one_filtered(
        self,
        db: AsyncSession,
        *,
        filters: Optional[Dict[str, Any]] = None,
        date_range_field: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Optional[ModelType]:
        """
        조건을 만족하는 첫 번째 레코드를 반환하며, 없으면 None을 반환합니다.
        """
        query = select(self.model)
        conditions = self._build_conditions(filters, date_range_field, start_date, end_date)
        if conditions:
            query = query.where(*conditions)

        response = await db.execute(query)
        return response.scalars().first()

    def _build_conditions(
        self,
        filters: Optional[Dict[str, Any]],
        date_range_field: Optional[str],
        start_date: Optional[date],
        end_date: Optional[date],
    ) -> List[Any]:
        conditions = []

        # 1. 다중 속성 필터링
        for attribute, value in (filters or {}).items():
            if hasattr(self.model, attribute):
                conditions.append(getattr(self.model, attribute) == value)
            else:
                logger.warning("Model %s has no attribute '%s'", self.model.__name__, attribute)

        # 2. 기간 검색 필터링 (end_date 당일까지 포함)
        if date_range_field and hasattr(self.model, date_range_field):
            date_field = getattr(self.model, date_range_field)
            if start_date is not None:
                conditions.append(date_field >= start_date)
            if end_date is not None:
                conditions.append(date_field < end_date + timedelta(days=1))
        elif date_range_field:
            logger.warning(
                "Model %s has no attribute '%s' for date range filtering.", self.model.__name__, date_range_field
            )
        return conditions

    async def create(self, db: AsyncSession, *, obj_in: CreateSchemaType) -> ModelType:
        """
        새로운 레코드를 생성합니다.
        """
        db_obj = self.model.model_validate(obj_in)
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def update(
        self, db: AsyncSession, *, db_obj: ModelType, obj_in: UpdateSchemaType
    ) -> ModelType:
        """
        기존 레코드를 업데이트합니다. 요청에 포함된 필드만 반영합니다.
        """
        update_data = obj_in.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            setattr(db_obj, key, value)

        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def delete(self, db: AsyncSession, *, id: Any) -> Optional[ModelType]:
        """
        ID를 기준으로 레코드를 삭제합니다.
        참조 무결성 위반(IntegrityError)은 롤백 후 400 응답으로 변환합니다.
        """
        db_obj = await db.get(self.model, id)
        if db_obj:
            try:
                await db.delete(db_obj)
                await db.commit()
            except IntegrityError as e:
                await db.rollback()
                logger.error("IntegrityError during %s deletion (ID: %s): %s", self.model.__name__, id, e)
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Cannot delete {self.model.__name__}: it is referenced by other records."
                )
        return db_obj
