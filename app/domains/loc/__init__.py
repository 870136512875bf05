# app/domains/loc/__init__.py

"""
FastAPI 애플리케이션의 'loc' 도메인 패키지입니다.

이 패키지는 PostgreSQL의 'loc' 스키마에 해당하는 데이터 모델과
관련된 비즈니스 로직 및 API 엔드포인트를 포함합니다.

'loc' 도메인은 시설 유형(InstallationType)과 터미널, 정비소 같은
물리적 시설(Installation), 그리고 시설에 연결된 편의시설을 관리하는 역할을 합니다.

주요 서브모듈:
- `models.py`: 'loc' 스키마의 테이블에 매핑되는 SQLModel 정의.
- `schemas.py`: 'loc' 스키마 데이터에 대한 Pydantic 모델 (요청 및 응답 유효성 검사).
- `crud.py`: 'loc' 스키마 테이블에 대한 비동기 CRUD 로직.
- `routers.py`: 'loc' 스키마 데이터에 접근하기 위한 FastAPI API 엔드포인트 정의.
"""

__title__ = "FIMS Location Domain"
__description__ = "Manages installation types, installations and their amenities."
__version__ = "0.1.0"
__all__ = []
