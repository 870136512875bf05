# tests/domains/__init__.py

"""
FastAPI 애플리케이션의 도메인별 테스트 스위트 패키지입니다.

- `test_seat_layout.py`: 데이터베이스 없이 동작하는 좌석 배치 계산 엔진 테스트.
- `test_fleet.py`: 'fleet' 도메인 (좌석 배치 모델, 버스 모델, 버스, 좌석 배치도) API 테스트.
- `test_loc.py`: 'loc' 도메인 (시설 유형, 시설) API 테스트.
- `test_shared.py`: 'shared' 도메인 (편의시설, 변경 이력) API 및 서비스 테스트.
- `test_usr.py`, `test_auth.py`: 'usr' 도메인 (테넌트, 부서, 역할, 사용자, 인증) API 테스트.
"""

__title__ = "FIMS Domain Tests"
__description__ = "Categorized tests for each business domain in FIMS FastAPI application."
__version__ = "0.1.0"
__all__ = []
