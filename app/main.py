import logging
from typing import Any, AsyncGenerator, Dict
from contextlib import asynccontextmanager
from arq.connections import create_pool, RedisSettings
from arq.cron import cron

from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from fastapi import FastAPI, Depends, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware

# 핵심 설정 및 데이터베이스 모듈 임포트
from app.core.config import settings
from app.core.database import engine, get_session, AsyncSessionLocal

from app import API_PREFIX

# 모든 도메인 모델을 로드하여 매퍼 관계를 확정합니다.
from app.domains import models as domain_models  # noqa: F401

# 태스크 모듈 임포트
from app.core import tasks as core_tasks
from app.domains.fleet import tasks as fleet_tasks

# 도메인 라우터 임포트
from app.domains.shared.routers import router as shared_router
from app.domains.usr.routers import router as usr_router
from app.domains.loc.routers import router as loc_router
from app.domains.fleet.routers import router as fleet_router

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# ARQ 워커가 실행할 태스크 함수 목록
worker_functions = [
    core_tasks.health_check_database_task,
    fleet_tasks.sync_seat_diagrams_task,
]


async def _open_job_session(ctx: Dict[str, Any]) -> None:
    """작업마다 새 DB 세션을 열어 ctx['db']로 전달합니다."""
    ctx['db'] = AsyncSessionLocal()


async def _close_job_session(ctx: Dict[str, Any]) -> None:
    db = ctx.pop('db', None)
    if db is not None:
        await db.close()


# ARQ 워커 설정 클래스 (실행: arq app.main.ArqWorkerSettings)
class ArqWorkerSettings:
    redis_settings = RedisSettings(host=settings.REDIS_HOST, port=settings.REDIS_PORT)
    functions = worker_functions
    on_job_start = _open_job_session
    on_job_end = _close_job_session
    cron_jobs = [
        # 매일 자정 데이터베이스 헬스 체크
        cron(core_tasks.health_check_database_task, hour=0, minute=0, timeout=300, keep_result=600),
    ]


# -- 애플리케이션 수명 주기 이벤트 핸들러 --
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI 애플리케이션의 수명 주기 이벤트(데이터베이스, ARQ Redis)를 함께 처리합니다.
    Redis에 연결할 수 없으면 작업 큐 없이 시작하며, 큐를 쓰는 엔드포인트는 작업을 즉시 실행합니다.
    """
    logger.info("FastAPI 애플리케이션 시작 중...")
    app.state.redis = None
    try:
        app.state.redis = await create_pool(ArqWorkerSettings.redis_settings)
        logger.info("ARQ Redis 커넥션 풀 생성 완료.")
    except (OSError, RedisError) as e:
        logger.warning("ARQ Redis에 연결할 수 없어 작업 큐 없이 시작합니다: %s", e)

    yield  # 애플리케이션 실행

    logger.info("FastAPI 애플리케이션 종료 중...")
    if app.state.redis is not None:
        await app.state.redis.close()
        logger.info("ARQ Redis 연결 풀 종료 완료.")
    await engine.dispose()
    logger.info("데이터베이스 연결 풀 종료 완료.")


# -- FastAPI 애플리케이션 인스턴스 생성 --
app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# -- CORS (Cross-Origin Resource Sharing) 미들웨어 설정 --
# 프로덕션에서는 CORS_ORIGINS 를 실제 프론트엔드 도메인으로 제한해야 합니다.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -- 도메인 라우터 포함 --
app.include_router(shared_router, prefix=f"{API_PREFIX}/shared", tags=["Shared (편의시설 및 변경 이력 관리)"])
app.include_router(usr_router, prefix=f"{API_PREFIX}/usr", tags=["User & Department Management (사용자 및 부서 관리)"])
app.include_router(loc_router, prefix=f"{API_PREFIX}/loc", tags=["Location Management (시설 관리)"])
app.include_router(fleet_router, prefix=f"{API_PREFIX}/fleet", tags=["Fleet Management (버스 및 좌석 배치 관리)"])


# -- 루트 엔드포인트 --
@app.get("/", summary="API Root", response_description="Welcome message and documentation link.")
async def read_root():
    """
    FIMS API의 루트 엔드포인트입니다.
    API의 시작점을 알리고 문서 링크를 제공합니다.
    """
    return {"message": "Welcome to FIMS API. Visit /docs for interactive API documentation."}


# -- 헬스 체크 엔드포인트 --
@app.get("/health-check", summary="Health Check", response_description="Status of the application and database connection.")
async def health_check(session: AsyncSession = Depends(get_session)):
    """
    애플리케이션의 헬스 체크 엔드포인트입니다.
    데이터베이스 연결을 테스트하여 서비스의 정상 작동 여부를 확인합니다.
    """
    try:
        result = await session.exec(select(1))
        if result.first():
            return {"status": "ok", "database_connection": "successful"}
    except SQLAlchemyError as e:
        logger.error("헬스 체크 중 데이터베이스 오류: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Database connection error during health check: {e}"
        )
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Database health check failed: No result from test query"
    )
