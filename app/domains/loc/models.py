# app/domains/loc/models.py

"""
'loc' 도메인 (PostgreSQL 'loc' 스키마)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.
 - loc 도메인은 시설 유형(InstallationType) -> 시설(Installation) 구조
 - 시설의 편의시설은 shared.amenities 를 연결 테이블(InstallationAmenity)로 참조

각 클래스는 해당 PostgreSQL 테이블의 구조와 컬럼을 Python 객체로 매핑하며,
SQLModel의 Field 및 Relationship을 사용하여 데이터베이스 제약 조건 및 관계를 정의합니다.
"""

from typing import Optional, List
from datetime import datetime, UTC
from sqlmodel import Field, Relationship, SQLModel, Column
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP

from app.domains.shared.models import Amenity


# =============================================================================
# 1. loc.installation_types 테이블 모델
# =============================================================================
class InstallationTypeBase(SQLModel):
    """
    loc.installation_types 테이블의 기본 속성을 정의하는 SQLModel Base 클래스입니다.
    """
    id: Optional[int] = Field(default=None, primary_key=True, description="시설 유형 고유 ID")
    code: str = Field(max_length=20, sa_column_kwargs={"unique": True}, description="시설 유형 코드")
    name: str = Field(max_length=100, description="시설 유형 명칭")
    description: Optional[str] = Field(default=None, description="설명")
    system_locked: bool = Field(default=False, description="시스템 잠금 여부 (true이면 수정/삭제 불가)")
    active: bool = Field(default=True, description="사용 여부")

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


class InstallationType(InstallationTypeBase, table=True):
    """
    PostgreSQL의 loc.installation_types 테이블에 매핑되는 SQLModel ORM 클래스입니다.
    """
    __tablename__ = "installation_types"
    __table_args__ = {'schema': 'loc'}

    installations: List["Installation"] = Relationship(back_populates="installation_type")


# =============================================================================
# 2. loc.installation_amenities 연결 테이블 모델
# =============================================================================
class InstallationAmenity(SQLModel, table=True):
    """
    Installation과 shared.Amenity의 다대다 관계를 위한 연결(link) 테이블 모델입니다.
    """
    __tablename__ = "installation_amenities"
    __table_args__ = {'schema': 'loc'}

    installation_id: int = Field(
        default=None,
        foreign_key="loc.installations.id",
        primary_key=True,
        description="시설 ID (FK, 복합 PK)"
    )
    amenity_id: int = Field(
        default=None,
        foreign_key="shared.amenities.id",
        primary_key=True,
        description="편의시설 ID (FK, 복합 PK)"
    )

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )


# =============================================================================
# 3. loc.installations 테이블 모델
# =============================================================================
class InstallationBase(SQLModel):
    """
    loc.installations 테이블의 기본 속성을 정의하는 SQLModel Base 클래스입니다.
    """
    id: Optional[int] = Field(default=None, primary_key=True, description="시설 고유 ID")
    name: str = Field(max_length=100, description="시설 명칭")
    address: str = Field(max_length=255, description="주소")
    description: Optional[str] = Field(default=None, description="설명")
    contact_phone: Optional[str] = Field(default=None, max_length=20, description="연락처")
    contact_email: Optional[str] = Field(default=None, max_length=100, description="이메일")
    website: Optional[str] = Field(default=None, max_length=255, description="웹사이트")
    installation_type_id: Optional[int] = Field(
        default=None, foreign_key="loc.installation_types.id", description="시설 유형 ID (FK)"
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


class Installation(InstallationBase, table=True):
    """
    PostgreSQL의 loc.installations 테이블에 매핑되는 SQLModel ORM 클래스입니다.
    """
    __tablename__ = "installations"
    __table_args__ = {'schema': 'loc'}

    installation_type: Optional[InstallationType] = Relationship(back_populates="installations")
    # 편의시설은 shared 도메인 소유이므로 역방향 관계는 두지 않습니다.
    amenities: List[Amenity] = Relationship(link_model=InstallationAmenity)
