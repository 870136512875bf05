# app/domains/usr/schemas.py

"""
'usr' 도메인 (테넌트, 부서, 역할, 사용자 관리)의 API 데이터 전송 객체(DTO)를 정의하는 모듈입니다.
"""

from typing import Optional, List
from datetime import datetime
from sqlmodel import SQLModel, Field
from pydantic import BaseModel, EmailStr

from . import models as usr_models


# =============================================================================
# 1. 테넌트 (Tenant) 스키마
# =============================================================================
class TenantBase(SQLModel):
    code: str = Field(..., min_length=2, max_length=20)
    name: str = Field(..., max_length=100)
    description: Optional[str] = None
    is_active: bool = True


class TenantCreate(TenantBase):
    pass


class TenantUpdate(SQLModel):
    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    is_active: Optional[bool] = None


class TenantRead(TenantBase):
    id: int
    created_at: datetime = Field(..., description="레코드 생성 일시")
    updated_at: datetime = Field(..., description="레코드 마지막 업데이트 일시")


# =============================================================================
# 2. 부서 (Department) 스키마
# =============================================================================
class DepartmentBase(SQLModel):
    tenant_id: int
    code: str = Field(..., max_length=20)
    name: str = Field(..., max_length=100)
    description: Optional[str] = None
    is_active: bool = True


class DepartmentCreate(DepartmentBase):
    pass


class DepartmentUpdate(SQLModel):
    code: Optional[str] = Field(None, max_length=20)
    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    is_active: Optional[bool] = None


class DepartmentRead(DepartmentBase):
    id: int
    created_at: datetime = Field(..., description="레코드 생성 일시")
    updated_at: datetime = Field(..., description="레코드 마지막 업데이트 일시")


# =============================================================================
# 3. 역할 (Role) 스키마
# =============================================================================
class RoleBase(SQLModel):
    tenant_id: int
    name: str = Field(..., max_length=100)
    description: Optional[str] = None


class RoleCreate(RoleBase):
    pass


class RoleUpdate(SQLModel):
    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None


class RoleRead(RoleBase):
    id: int
    created_at: datetime = Field(..., description="레코드 생성 일시")
    updated_at: datetime = Field(..., description="레코드 마지막 업데이트 일시")


# =============================================================================
# 4. 사용자 (User) 스키마
# =============================================================================
class UserBase(SQLModel):
    """사용자 정보의 기본 필드를 정의하는 스키마"""
    tenant_id: int
    department_id: Optional[int] = None
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr = Field(..., max_length=100)
    first_name: str = Field(..., max_length=100)
    last_name: str = Field(..., max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    position: Optional[str] = Field(None, max_length=100)
    employee_id: Optional[str] = Field(None, max_length=30)
    access_level: usr_models.AccessLevel = Field(default=usr_models.AccessLevel.GENERAL_USER, description="시스템 접근 레벨")
    is_active: bool = True


class UserCreate(UserBase):
    """사용자 생성을 위한 스키마. role_ids는 같은 테넌트의 역할이어야 합니다."""
    password: str = Field(..., min_length=8)
    role_ids: List[int] = Field(default_factory=list)


class UserUpdate(SQLModel):
    """사용자 정보 수정을 위한 스키마"""
    department_id: Optional[int] = None
    email: Optional[EmailStr] = None
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    position: Optional[str] = Field(None, max_length=100)
    employee_id: Optional[str] = Field(None, max_length=30)
    access_level: Optional[usr_models.AccessLevel] = None
    is_active: Optional[bool] = None
    role_ids: Optional[List[int]] = None


class UserRead(UserBase):
    """
    사용자 정보 조회를 위한 기본 스키마.
    비밀번호 해시값 등 민감한 정보는 제외됩니다.
    """
    id: int
    last_login: Optional[datetime] = None
    created_at: datetime = Field(..., description="레코드 생성 일시")
    updated_at: datetime = Field(..., description="레코드 마지막 업데이트 일시")


class UserReadWithRoles(UserRead):
    """사용자 조회 시 할당된 역할 목록까지 함께 반환하는 스키마"""
    roles: List[RoleRead] = []


class PasswordChange(SQLModel):
    """비밀번호 변경 요청 스키마"""
    current_password: str
    new_password: str = Field(..., min_length=8)


# =============================================================================
# 5. 인증 토큰 (Token) 스키마
# =============================================================================
class Token(BaseModel):
    """JWT 토큰 응답 스키마"""
    access_token: str
    token_type: str
    refresh_token: Optional[str] = None


class TokenData(BaseModel):
    """JWT 토큰에 담길 데이터 스키마"""
    username: Optional[str] = None
