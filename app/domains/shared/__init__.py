# app/domains/shared/__init__.py

"""
FastAPI 애플리케이션의 'shared' 도메인 패키지입니다.

여러 도메인에서 공통으로 참조하는 데이터(편의시설)와
차량 도메인의 변경 이력(audit)을 관리합니다.

주요 서브모듈:
- `models.py`: 'shared' 스키마의 테이블에 매핑되는 SQLModel 정의.
- `schemas.py`: 요청 및 응답 유효성 검사용 Pydantic 모델.
- `crud.py`: 비동기 CRUD 로직 (편의시설 소프트 삭제 포함).
- `services.py`: 변경 이력 기록(record_audit) 및 편의시설 초기 데이터 적재.
- `routers.py`: FastAPI API 엔드포인트 정의.
"""

__title__ = "FIMS Shared Domain"
__description__ = "Manages amenities and the audit trail shared by other domains."
__version__ = "0.1.0"
__all__ = []
