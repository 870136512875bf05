# app/domains/loc/schemas.py

"""
'loc' 도메인 (PostgreSQL 'loc' 스키마)의 Pydantic 스키마를 정의하는 모듈입니다.

시설 유형과 시설 데이터에 대한 API 요청(생성, 업데이트) 및 응답(조회)에 사용되는
데이터 유효성 검사 및 직렬화를 위한 모델을 포함합니다.
"""

import re
from typing import Optional, List
from datetime import datetime
from pydantic import EmailStr, field_validator
from sqlmodel import SQLModel, Field

from app.domains.shared.schemas import AmenityRead

# 국제 전화번호 형식 (예: +521234567890)
PHONE_PATTERN = re.compile(r"^[+]?[1-9][\d]{0,15}$")
WEBSITE_PATTERN = re.compile(r"^https?://\S+$")


def _validate_phone(value: Optional[str]) -> Optional[str]:
    if value is not None and not PHONE_PATTERN.match(value):
        raise ValueError("contact_phone must be a valid phone number (e.g. +521234567890)")
    return value


def _validate_website(value: Optional[str]) -> Optional[str]:
    if value is not None and not WEBSITE_PATTERN.match(value):
        raise ValueError("website must start with http:// or https://")
    return value


def _validate_not_blank(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.strip():
        raise ValueError("must contain at least one non-whitespace character")
    return value


# =============================================================================
# 1. loc.installation_types 테이블 스키마
# =============================================================================
class InstallationTypeBase(SQLModel):
    code: str = Field(..., min_length=1, max_length=20, description="시설 유형 코드")
    name: str = Field(..., min_length=1, max_length=100, description="시설 유형 명칭")
    description: Optional[str] = Field(None, description="설명")
    active: bool = Field(True, description="사용 여부")


class InstallationTypeCreate(InstallationTypeBase):
    """system_locked 는 API로 지정할 수 없습니다."""

    @field_validator("code", "name")
    @classmethod
    def check_not_blank(cls, value: str) -> str:
        return _validate_not_blank(value)


class InstallationTypeUpdate(SQLModel):
    code: Optional[str] = Field(None, min_length=1, max_length=20)
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    active: Optional[bool] = None

    @field_validator("code", "name")
    @classmethod
    def check_not_blank(cls, value: Optional[str]) -> Optional[str]:
        return _validate_not_blank(value)


class InstallationTypeRead(InstallationTypeBase):
    id: int
    system_locked: bool
    created_at: datetime = Field(..., description="레코드 생성 일시")
    updated_at: datetime = Field(..., description="레코드 마지막 업데이트 일시")


# =============================================================================
# 2. loc.installations 테이블 스키마
# =============================================================================
class InstallationBase(SQLModel):
    name: str = Field(..., min_length=1, max_length=100, description="시설 명칭")
    address: str = Field(..., min_length=1, max_length=255, description="주소")
    description: Optional[str] = Field(None, description="설명")
    contact_phone: Optional[str] = Field(None, max_length=20, description="연락처")
    contact_email: Optional[EmailStr] = Field(None, description="이메일")
    website: Optional[str] = Field(None, max_length=255, description="웹사이트")
    installation_type_id: Optional[int] = Field(None, ge=1, description="시설 유형 ID")


class InstallationCreate(InstallationBase):
    amenity_ids: List[int] = Field(default_factory=list, description="연결할 편의시설 ID 목록")

    @field_validator("name", "address")
    @classmethod
    def check_not_blank(cls, value: str) -> str:
        return _validate_not_blank(value)

    @field_validator("contact_phone")
    @classmethod
    def check_phone(cls, value: Optional[str]) -> Optional[str]:
        return _validate_phone(value)

    @field_validator("website")
    @classmethod
    def check_website(cls, value: Optional[str]) -> Optional[str]:
        return _validate_website(value)


class InstallationUpdate(SQLModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    address: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    contact_phone: Optional[str] = Field(None, max_length=20)
    contact_email: Optional[EmailStr] = None
    website: Optional[str] = Field(None, max_length=255)
    installation_type_id: Optional[int] = Field(None, ge=1)
    amenity_ids: Optional[List[int]] = Field(None, description="지정하면 편의시설 연결을 교체합니다.")

    @field_validator("name", "address")
    @classmethod
    def check_not_blank(cls, value: Optional[str]) -> Optional[str]:
        return _validate_not_blank(value)

    @field_validator("contact_phone")
    @classmethod
    def check_phone(cls, value: Optional[str]) -> Optional[str]:
        return _validate_phone(value)

    @field_validator("website")
    @classmethod
    def check_website(cls, value: Optional[str]) -> Optional[str]:
        return _validate_website(value)


class InstallationRead(InstallationBase):
    id: int
    contact_email: Optional[str] = None
    created_at: datetime = Field(..., description="레코드 생성 일시")
    updated_at: datetime = Field(..., description="레코드 마지막 업데이트 일시")


class InstallationReadWithAmenities(InstallationRead):
    """편의시설 목록을 포함하는 시설 응답 스키마"""
    amenities: List[AmenityRead] = []
