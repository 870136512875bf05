# app/domains/usr/models.py

"""
'usr' 도메인 (PostgreSQL 'usr' 스키마)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

이 모듈은 'usr' 스키마에 속하는 모든 테이블
(tenants, departments, roles, user_roles, users)에 대한 SQLModel 클래스를 포함합니다.
테넌트(tenant)는 멀티 테넌시의 최상위 단위이며, 부서/역할/사용자는 모두 하나의 테넌트에 속합니다.
"""

from typing import Optional, List
from datetime import datetime, UTC
from enum import IntEnum

from sqlmodel import Field, Relationship, SQLModel, Column
from sqlalchemy import UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP


# =============================================================================
# 사용자 접근 레벨(RBAC)을 Enum으로 정의합니다.
# =============================================================================
class AccessLevel(IntEnum):
    """
    사용자 접근 레벨을 정의하는 정수형 Enum 클래스입니다.
    값이 작을수록 권한이 높습니다. (테넌트별 역할(Role)과는 별개인 시스템 권한)
    """
    SUPERUSER = 1               # 최고 관리자
    ADMIN = 10                  # 시스템 관리자
    FLEET_MANAGER = 50          # 차량(버스) 관리자
    INSTALLATION_MANAGER = 60   # 시설 관리자
    OPERATOR = 80               # 운영 담당자
    GENERAL_USER = 100          # 일반 사용자


# =============================================================================
# 1. usr.tenants 테이블 모델
# =============================================================================
class TenantBase(SQLModel):
    """
    usr.tenants 테이블의 기본 속성을 정의하는 SQLModel Base 클래스입니다.
    """
    id: Optional[int] = Field(default=None, primary_key=True, description="테넌트 고유 ID")
    code: str = Field(max_length=20, sa_column_kwargs={"unique": True}, description="테넌트 코드")
    name: str = Field(max_length=100, description="테넌트명")
    description: Optional[str] = Field(default=None, description="설명")
    is_active: bool = Field(default=True, description="활성 여부")

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


class Tenant(TenantBase, table=True):
    """
    PostgreSQL의 usr.tenants 테이블에 매핑되는 SQLModel ORM 클래스입니다.
    """
    __tablename__ = "tenants"
    __table_args__ = {'schema': 'usr'}

    departments: List["Department"] = Relationship(back_populates="tenant")
    roles: List["Role"] = Relationship(back_populates="tenant")
    users: List["User"] = Relationship(back_populates="tenant")


# =============================================================================
# 2. usr.departments 테이블 모델
# =============================================================================
class DepartmentBase(SQLModel):
    """
    usr.departments 테이블의 기본 속성을 정의하는 SQLModel Base 클래스입니다.
    부서 코드는 테넌트 내에서 고유합니다.
    """
    id: Optional[int] = Field(default=None, primary_key=True, description="부서 고유 ID")
    tenant_id: int = Field(foreign_key="usr.tenants.id", description="소속 테넌트 ID (FK)")
    code: str = Field(max_length=20, description="부서 코드 (예: OPS, MAINT)")
    name: str = Field(max_length=100, description="부서명")
    description: Optional[str] = Field(default=None, description="비고")
    is_active: bool = Field(default=True, description="활성 여부")

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


class Department(DepartmentBase, table=True):
    """
    PostgreSQL의 usr.departments 테이블에 매핑되는 SQLModel ORM 클래스입니다.
    """
    __tablename__ = "departments"
    __table_args__ = (
        UniqueConstraint("tenant_id", "code", name="uq_departments_tenant_code"),
        {'schema': 'usr'},
    )

    tenant: Optional[Tenant] = Relationship(back_populates="departments")
    users: List["User"] = Relationship(back_populates="department")


# =============================================================================
# 3. usr.user_roles 연결 테이블 (User <-> Role 다대다)
# =============================================================================
class UserRoleLink(SQLModel, table=True):
    """
    User와 Role의 다대다 관계를 위한 연결(link) 테이블 모델입니다.
    """
    __tablename__ = "user_roles"
    __table_args__ = {'schema': 'usr'}

    user_id: Optional[int] = Field(
        default=None,
        foreign_key="usr.users.id",
        primary_key=True,
        description="사용자 ID (FK, 복합 PK)"
    )
    role_id: Optional[int] = Field(
        default=None,
        foreign_key="usr.roles.id",
        primary_key=True,
        description="역할 ID (FK, 복합 PK)"
    )


# =============================================================================
# 4. usr.roles 테이블 모델
# =============================================================================
class RoleBase(SQLModel):
    """
    usr.roles 테이블의 기본 속성을 정의하는 SQLModel Base 클래스입니다.
    역할 이름은 테넌트 내에서 고유합니다.
    """
    id: Optional[int] = Field(default=None, primary_key=True, description="역할 고유 ID")
    tenant_id: int = Field(foreign_key="usr.tenants.id", description="소속 테넌트 ID (FK)")
    name: str = Field(max_length=100, description="역할명")
    description: Optional[str] = Field(default=None, description="설명")

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


class Role(RoleBase, table=True):
    """
    PostgreSQL의 usr.roles 테이블에 매핑되는 SQLModel ORM 클래스입니다.
    """
    __tablename__ = "roles"
    __table_args__ = (
        UniqueConstraint("tenant_id", "name", name="uq_roles_tenant_name"),
        {'schema': 'usr'},
    )

    tenant: Optional[Tenant] = Relationship(back_populates="roles")
    users: List["User"] = Relationship(back_populates="roles", link_model=UserRoleLink)


# =============================================================================
# 5. usr.users 테이블 모델
# =============================================================================
class UserBase(SQLModel):
    """
    usr.users 테이블의 기본 속성을 정의하는 SQLModel Base 클래스입니다.
    """
    id: Optional[int] = Field(default=None, primary_key=True, description="사용자 고유 ID")
    tenant_id: int = Field(foreign_key="usr.tenants.id", description="소속 테넌트 ID (FK)")
    department_id: Optional[int] = Field(default=None, foreign_key="usr.departments.id", description="소속 부서 ID (FK)")
    username: str = Field(max_length=50, sa_column_kwargs={"unique": True}, description="로그인 사용자명")
    email: str = Field(max_length=100, sa_column_kwargs={"unique": True}, description="사용자 이메일")
    password_hash: str = Field(max_length=255, description="해싱된 비밀번호")
    first_name: str = Field(max_length=100, description="이름")
    last_name: str = Field(max_length=100, description="성")
    phone: Optional[str] = Field(default=None, max_length=30, description="전화번호")
    position: Optional[str] = Field(default=None, max_length=100, description="직위")
    employee_id: Optional[str] = Field(default=None, max_length=30, description="사번")
    access_level: AccessLevel = Field(default=AccessLevel.GENERAL_USER, description="시스템 접근 레벨 (권한)")
    is_active: bool = Field(default=True, description="계정 활성 여부")
    last_login: Optional[datetime] = Field(
        default=None,
        sa_column=Column(TIMESTAMP(timezone=True), nullable=True),
        description="마지막 로그인 일시"
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


class User(UserBase, table=True):
    """
    PostgreSQL의 usr.users 테이블에 매핑되는 SQLModel ORM 클래스입니다.
    """
    __tablename__ = "users"
    __table_args__ = {'schema': 'usr'}

    tenant: Optional[Tenant] = Relationship(back_populates="users")
    department: Optional[Department] = Relationship(back_populates="users")
    roles: List[Role] = Relationship(back_populates="users", link_model=UserRoleLink)

    @property
    def is_admin(self) -> bool:
        """ADMIN 이상(값이 10 이하)의 접근 레벨인지 여부."""
        return self.access_level <= AccessLevel.ADMIN
