# app/domains/fleet/__init__.py

"""
FastAPI 애플리케이션의 'fleet' 도메인 패키지입니다.

이 패키지는 PostgreSQL의 'fleet' 스키마에 해당하는 데이터 모델과
관련된 비즈니스 로직 및 API 엔드포인트를 포함합니다.

'fleet' 도메인은 버스, 버스 모델, 좌석 배치 모델(템플릿)과 버스별 좌석 배치도를 관리합니다.

주요 서브모듈:
- `seat_layout.py`: 데이터베이스와 무관한 좌석 배치 계산 엔진.
- `models.py`: 'fleet' 스키마의 테이블에 매핑되는 SQLModel 정의.
- `schemas.py`: 요청 및 응답 유효성 검사용 Pydantic 모델.
- `crud.py`: 'fleet' 스키마 테이블에 대한 비동기 CRUD 로직.
- `services.py`: 좌석 생성, 실체화, 동기화, 버스 등록 등 여러 테이블에 걸친 작업.
- `tasks.py`: ARQ 워커가 실행하는 백그라운드 태스크.
- `routers.py`: 'fleet' 스키마 데이터에 접근하기 위한 FastAPI API 엔드포인트 정의.
"""

__title__ = "FIMS Fleet Domain"
__description__ = "Manages buses, bus models, seat diagram templates and per-bus seat diagrams."
__version__ = "0.1.0"
__all__ = []
