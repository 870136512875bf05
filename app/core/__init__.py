# app/core/__init__.py

"""
FastAPI 애플리케이션의 핵심 구성 요소 패키지입니다.

이 패키지는 애플리케이션 전반에 걸쳐 사용되는 공통 기능들을 캡슐화합니다.
주요 서브모듈은 다음과 같습니다:

- `config.py`: 애플리케이션의 설정 및 환경 변수 관리 (Pydantic Settings).
- `database.py`: 데이터베이스 엔진, 세션 관리 및 스키마 생성 (SQLModel 및 AsyncSQLAlchemy).
- `db_types.py`: PostgreSQL/SQLite 양쪽에서 동작하는 컬럼 타입.
- `crud_base.py`: 모든 도메인 CRUD 클래스가 상속하는 제네릭 CRUD 기반 클래스.
- `security.py`: 사용자 인증, 접근 레벨 기반 권한 부여, 비밀번호 해싱.
- `dependencies.py`: FastAPI 의존성 주입에서 사용되는 공통 의존성 함수들.
- `tasks.py`: ARQ 워커 공통 태스크와 작업 시작/종료 훅.
"""

__title__ = "FIMS Core"
__description__ = "Core components for FIMS FastAPI application."
__version__ = "0.1.0"
__all__ = []
