# app/domains/shared/schemas.py

"""
'shared' 도메인 (편의시설, 변경 이력)의 API 데이터 전송 객체(DTO)를 정의하는 모듈입니다.
"""

import re
from typing import Optional, Dict, Any
from datetime import datetime
from sqlmodel import SQLModel, Field
from pydantic import field_validator

from . import models as shared_models

# 아이콘 이름은 kebab-case (예: air-vent, credit-card)
KEBAB_CASE_PATTERN = re.compile(r"^[a-z][a-z0-9]*(-[a-z0-9]+)*$")


def _validate_icon_name(value: Optional[str]) -> Optional[str]:
    if value is not None and not KEBAB_CASE_PATTERN.match(value):
        raise ValueError("icon_name must be in kebab-case (e.g. 'air-vent')")
    return value


# =============================================================================
# 1. 편의시설 (Amenity) 스키마
# =============================================================================
class AmenityBase(SQLModel):
    name: str = Field(..., min_length=1, max_length=100)
    category: shared_models.AmenityCategory = shared_models.AmenityCategory.BASIC
    amenity_type: shared_models.AmenityType = shared_models.AmenityType.BUS
    description: Optional[str] = None
    icon_name: Optional[str] = Field(None, max_length=50)
    active: bool = True


class AmenityCreate(AmenityBase):
    @field_validator("icon_name")
    @classmethod
    def check_icon_name(cls, value: Optional[str]) -> Optional[str]:
        return _validate_icon_name(value)


class AmenityUpdate(SQLModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    category: Optional[shared_models.AmenityCategory] = None
    amenity_type: Optional[shared_models.AmenityType] = None
    description: Optional[str] = None
    icon_name: Optional[str] = Field(None, max_length=50)
    active: Optional[bool] = None

    @field_validator("icon_name")
    @classmethod
    def check_icon_name(cls, value: Optional[str]) -> Optional[str]:
        return _validate_icon_name(value)


class AmenityRead(AmenityBase):
    id: int
    deleted_at: Optional[datetime] = None
    created_at: datetime = Field(..., description="레코드 생성 일시")
    updated_at: datetime = Field(..., description="레코드 마지막 업데이트 일시")


# =============================================================================
# 2. 변경 이력 (Audit) 스키마
# =============================================================================
class AuditCreate(SQLModel):
    user_id: Optional[int] = None
    action: str = Field(..., max_length=50)
    entity_type: str = Field(..., max_length=50)
    entity_id: Optional[int] = None
    details: Optional[Dict[str, Any]] = None


class AuditRead(AuditCreate):
    id: int
    created_at: datetime = Field(..., description="레코드 생성 일시")
