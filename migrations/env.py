# migrations/env.py

import os
import sys
import asyncio
import logging
from logging.config import fileConfig

from alembic import context
from alembic_utils.replaceable_entity import register_entities

from sqlalchemy import pool, text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlmodel import SQLModel

# --- 1. 프로젝트 루트 경로 설정 ---
# env.py가 어디에서 실행되든 'app' 모듈을 찾을 수 있게 합니다.
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

# --- 2. 애플리케이션의 핵심 설정 및 모든 모델 임포트 ---
from app.core.config import settings        # noqa: E402
from app.core.database import SCHEMA        # noqa: E402

# pgsql_scripts에서 자동으로 탐색된 DB 객체 리스트 (좌석 수 재계산 함수/트리거)
from pgsql_scripts import all_db_objects    # noqa: E402

#  모든 SQLModel 클래스가 SQLModel.metadata에 등록되도록 도메인 모델을 임포트합니다.
import app.domains.shared.models            # noqa: F401, E402
import app.domains.usr.models               # noqa: F401, E402
import app.domains.loc.models               # noqa: F401, E402
import app.domains.fleet.models             # noqa: F401, E402

# --- 3. Alembic 기본 설정 ---
config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")

# 테이블이 먼저 생성된 뒤에 함수/트리거를 비교하도록 환경 변수로 제어합니다.
# 최초 마이그레이션: ALEMBIC_SKIP_DB_OBJECTS=1 로 테이블만 생성
if not os.getenv("ALEMBIC_SKIP_DB_OBJECTS"):
    register_entities(all_db_objects)

target_metadata = SQLModel.metadata

if config.get_main_option("sqlalchemy.url") is None:
    config.set_main_option("sqlalchemy.url", settings.DATABASE_URL.get_secret_value())


def include_object(object, name, type_, reflected, compare_to):
    if type_ == "table" and name == "alembic_version":
        return False
    return True


def do_run_migrations(connection) -> None:
    """
    실제 마이그레이션을 실행하는 동기 로직입니다.
    Alembic 컨텍스트를 데이터베이스 연결로 구성하고 마이그레이션을 실행합니다.
    """
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        include_schemas=True,  # 여러 스키마를 사용하는 프로젝트에서는 필수
        version_table_schema='public',  # alembic_version 테이블 위치
        include_object=include_object,
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    """'온라인' 모드에서 마이그레이션을 실행합니다."""
    engine: AsyncEngine = create_async_engine(
        settings.DATABASE_URL.get_secret_value(),
        echo=settings.DEBUG_MODE,
        future=True,
        poolclass=pool.NullPool,  # 마이그레이션 시에는 풀을 사용하지 않아 즉시 연결/해제
    )

    # --- 1단계: 스키마 생성 전용 연결 ---
    async with engine.connect() as connection:
        logger.info("Ensuring all schemas exist before migration...")
        async with connection.begin():
            for schema_name in SCHEMA:
                await connection.execute(text(f"CREATE SCHEMA IF NOT EXISTS {schema_name}"))

    # --- 2단계: Alembic 마이그레이션 전용 연결 ---
    async with engine.connect() as connection:
        logger.info("Running Alembic migrations...")
        await connection.run_sync(do_run_migrations)

    await engine.dispose()
    logger.info("Alembic migrations finished.")


if context.is_offline_mode():
    raise NotImplementedError("Offline mode is not supported in this configuration.")
else:
    asyncio.run(run_migrations_online())
