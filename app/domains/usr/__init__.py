# app/domains/usr/__init__.py

"""
FastAPI 애플리케이션의 'usr' 도메인 패키지입니다.

이 패키지는 PostgreSQL의 'usr' 스키마에 해당하는 데이터 모델과
관련된 비즈니스 로직 및 API 엔드포인트를 포함합니다.

'usr' 도메인은 테넌트, 부서, 역할, 시스템 사용자 그리고 인증/권한 부여와 관련된
핵심 데이터를 관리하는 역할을 합니다.

주요 서브모듈:
- `models.py`: 'usr' 스키마의 테이블에 매핑되는 SQLModel 정의.
- `schemas.py`: 요청 및 응답 유효성 검사용 Pydantic 모델 (인증 스키마 포함).
- `crud.py`: 비동기 CRUD 로직 및 사용자 인증 로직.
- `routers.py`: FastAPI API 엔드포인트 정의 (로그인, 테넌트/부서/역할/사용자 관리).
"""

__title__ = "FIMS User Domain"
__description__ = "Manages tenants, departments, roles and users, and handles authentication."
__version__ = "0.1.0"
__all__ = []
