# app/core/dependencies.py

"""
FastAPI 애플리케이션의 의존성 주입(Dependency Injection)을 정의하는 모듈입니다.

- 데이터베이스 세션 관리 (get_db_session).
- 현재 인증된 사용자 정보 획득 (get_current_active_user 등, app.core.security 재노출).
"""

from typing import AsyncGenerator

from sqlmodel.ext.asyncio.session import AsyncSession

# 실제 데이터베이스 세션 제너레이터 임포트
from app.core.database import get_session as get_main_app_session

# 보안 관련 의존성 재노출
# flake8: noqa
from app.core.security import (
    oauth2_scheme,  # OAuth2PasswordBearer 인스턴스
    get_current_user_from_token,  # 토큰에서 사용자 정보를 가져오는 함수
    get_current_active_user,  # 활성 사용자 확인 함수
    get_current_admin_user,  # 관리자 사용자 확인 함수
    get_current_superuser  # 최고 관리자 확인 함수
)


# --- 데이터베이스 세션 의존성 주입 ---
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI 의존성 주입을 위한 비동기 데이터베이스 세션 제너레이터입니다.
    app.core.database.get_session을 래핑하여 사용합니다.
    테스트에서는 dependency_overrides로 이 함수를 교체합니다.
    """
    async for session in get_main_app_session():
        yield session
