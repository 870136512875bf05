# app/core/db_types.py

"""
여러 도메인 모델에서 공통으로 사용하는 SQLAlchemy 컬럼 타입을 정의하는 모듈입니다.

운영 DB(PostgreSQL)에서는 JSONB를 사용하고, 테스트용 SQLite 등
다른 방언(dialect)에서는 일반 JSON 타입으로 대체됩니다.
"""

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB

JSONVariant = JSON().with_variant(JSONB(), "postgresql")
