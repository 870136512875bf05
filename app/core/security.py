# app/core/security.py

"""
애플리케이션의 보안 관련 유틸리티 함수 및 의존성 주입을 정의하는 모듈입니다.

- 비밀번호 해싱 및 검증.
- JWT(JSON Web Token) 생성 및 검증.
- OAuth2 Password Bearer 스키마를 사용하여 현재 사용자 획득.
- 접근 레벨(access_level) 기반 권한 부여(Authorization) 검사.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError
from passlib.context import CryptContext  # 비밀번호 해싱을 위한 라이브러리
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app import API_PREFIX
from app.core.config import settings  # 애플리케이션 설정
from app.core.database import get_session  # 데이터베이스 세션 의존성
from app.domains.usr import models as usr_models  # 사용자 모델 임포트 (충돌 방지를 위해 별칭 사용)

logger = logging.getLogger(__name__)

# --- 비밀번호 해싱 설정 ---
# bcrypt 해싱 알고리즘을 사용합니다.
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# 관리자 권한으로 인정되는 접근 레벨
ADMIN_LEVELS = (usr_models.AccessLevel.SUPERUSER, usr_models.AccessLevel.ADMIN)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    일반 텍스트 비밀번호와 해싱된 비밀번호를 비교하여 일치하는지 확인합니다.
    """
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """
    주어진 비밀번호를 해싱합니다.
    """
    return pwd_context.hash(password)


# --- OAuth2 스키마 설정 ---
# API_PREFIX를 사용하여 Swagger UI가 올바른 경로를 찾아가도록 합니다.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{API_PREFIX}/usr/auth/token")


# --- JWT 토큰 생성 및 검증 ---
def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Access Token을 생성합니다.
    """
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY.get_secret_value(), algorithm=settings.ALGORITHM)
    logger.debug("Access token created for '%s', expires at %s", data.get("sub"), expire)
    return encoded_jwt


def create_refresh_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Refresh Token을 생성합니다. 기본 만료 기간은 7일입니다.
    """
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(days=7)
    to_encode.update({"exp": expire, "type": "refresh"})
    return jwt.encode(to_encode, settings.SECRET_KEY.get_secret_value(), algorithm=settings.ALGORITHM)


async def get_current_user_from_token(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_session),
) -> usr_models.User:
    """
    JWT 토큰을 디코딩하고 검증하여 현재 사용자를 데이터베이스에서 가져옵니다.
    토큰의 'sub' 클레임에는 사용자명(username)이 들어 있습니다.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.SECRET_KEY.get_secret_value(), algorithms=[settings.ALGORITHM])
        username: Optional[str] = payload.get("sub")
        if username is None:
            raise credentials_exception
    except JWTError as e:
        logger.info("JWT 검증 실패: %s", e)
        raise credentials_exception

    statement = select(usr_models.User).where(usr_models.User.username == username)
    result = await db.execute(statement)
    user = result.scalars().one_or_none()
    if user is None:
        raise credentials_exception
    return user


# --- 접근 레벨 기반 권한 부여 의존성 ---

def get_current_active_user(
    current_user: usr_models.User = Depends(get_current_user_from_token),
) -> usr_models.User:
    """
    현재 인증된 활성 사용자를 반환합니다.
    계정이 비활성화된 경우 400 Bad Request를 발생시킵니다.
    """
    if not current_user.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Inactive user")
    return current_user


def get_current_admin_user(
    current_user: usr_models.User = Depends(get_current_active_user),
) -> usr_models.User:
    """
    현재 인증된 관리자 사용자를 반환합니다 (SUPERUSER 또는 ADMIN).
    관리자 권한이 없는 경우 403 Forbidden을 발생시킵니다.
    """
    if current_user.access_level not in ADMIN_LEVELS:
        logger.info("사용자 '%s' 관리자 권한 없음 (access_level=%s)", current_user.username, current_user.access_level)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions. Admin role required."
        )
    return current_user


def get_current_superuser(
    current_user: usr_models.User = Depends(get_current_active_user),
) -> usr_models.User:
    """
    현재 인증된 최고 관리자 사용자를 반환합니다 (SUPERUSER).
    최고 관리자 권한이 없는 경우 403 Forbidden을 발생시킵니다.
    """
    if current_user.access_level != usr_models.AccessLevel.SUPERUSER:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions. Superuser role required."
        )
    return current_user
