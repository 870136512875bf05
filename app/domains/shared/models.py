# app/domains/shared/models.py

"""
'shared' 도메인 (PostgreSQL 'shared' 스키마)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

이 모듈은 여러 도메인에서 공통으로 참조하는 편의시설(amenities)과
변경 이력(audits) 테이블에 대한 SQLModel 클래스를 포함합니다.
"""

from typing import Optional, Dict, Any
from enum import Enum
from datetime import datetime, UTC

from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP
from sqlmodel import Field, SQLModel, Column

from app.core.db_types import JSONVariant


# =============================================================================
# 편의시설 분류 Enum
# =============================================================================
class AmenityCategory(str, Enum):
    """편의시설의 분류"""
    BASIC = "basic"
    COMFORT = "comfort"
    TECHNOLOGY = "technology"
    SECURITY = "security"
    ACCESSIBILITY = "accessibility"
    SERVICES = "services"


class AmenityType(str, Enum):
    """편의시설이 적용되는 대상"""
    BUS = "bus"
    INSTALLATION = "installation"
    SERVICE_TYPE = "service_type"


# =============================================================================
# 1. shared.amenities 테이블 모델
# =============================================================================
class AmenityBase(SQLModel):
    """
    shared.amenities 테이블의 기본 속성을 정의하는 SQLModel Base 클래스입니다.
    삭제는 deleted_at을 기록하는 소프트 삭제로 처리합니다.
    """
    id: Optional[int] = Field(default=None, primary_key=True, description="편의시설 고유 ID")
    name: str = Field(max_length=100, sa_column_kwargs={"unique": True}, description="편의시설명")
    category: AmenityCategory = Field(default=AmenityCategory.BASIC, description="분류")
    amenity_type: AmenityType = Field(default=AmenityType.BUS, description="적용 대상")
    description: Optional[str] = Field(default=None, description="설명")
    icon_name: Optional[str] = Field(default=None, max_length=50, description="아이콘 이름 (kebab-case)")
    active: bool = Field(default=True, description="활성 여부")
    deleted_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(TIMESTAMP(timezone=True), nullable=True),
        description="삭제 일시 (소프트 삭제)"
    )

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
        description="레코드 마지막 업데이트 일시"
    )


class Amenity(AmenityBase, table=True):
    """
    PostgreSQL의 shared.amenities 테이블에 매핑되는 SQLModel ORM 클래스입니다.
    """
    __tablename__ = "amenities"
    __table_args__ = {'schema': 'shared'}


# =============================================================================
# 2. shared.audits 테이블 모델
# =============================================================================
class AuditBase(SQLModel):
    """
    shared.audits 테이블의 기본 속성을 정의하는 SQLModel Base 클래스입니다.
    누가(user_id) 어떤 엔티티(entity_type, entity_id)에 무엇을(action) 했는지 기록합니다.
    """
    id: Optional[int] = Field(default=None, primary_key=True, description="이력 고유 ID")
    user_id: Optional[int] = Field(default=None, foreign_key="usr.users.id", description="작업 사용자 ID (FK)")
    action: str = Field(max_length=50, description="작업 (create, update, delete 등)")
    entity_type: str = Field(max_length=50, description="대상 엔티티 종류 (예: bus, seat_diagram)")
    entity_id: Optional[int] = Field(default=None, description="대상 엔티티 ID")
    details: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSONVariant), description="작업 상세 (JSON)")

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )


class Audit(AuditBase, table=True):
    """
    PostgreSQL의 shared.audits 테이블에 매핑되는 SQLModel ORM 클래스입니다.
    """
    __tablename__ = "audits"
    __table_args__ = {'schema': 'shared'}
