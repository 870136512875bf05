# tests/__init__.py

"""
FastAPI 애플리케이션의 테스트 스위트 패키지입니다.

테스트 코드는 `pytest` 와 `pytest-asyncio` 를 기반으로 작성되며,
API 엔드포인트는 httpx AsyncClient(ASGITransport)로 호출합니다.

- `domains/`: 각 비즈니스 도메인(shared, usr, loc, fleet)에 대한 테스트 모듈.
- `conftest.py`: 데이터베이스 세션, 역할별 인증 클라이언트, 도메인 데이터 픽스처.
  TEST_DATABASE_URL 이 없으면 SQLite(aiosqlite) 파일 데이터베이스를 사용합니다.
"""

__title__ = "FIMS API Tests"
__description__ = "Test suite for FIMS FastAPI application."
__version__ = "0.1.0"
__all__ = []
