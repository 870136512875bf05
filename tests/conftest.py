# tests/conftest.py

import os
import asyncio
from typing import AsyncGenerator, Callable, Awaitable
from contextlib import asynccontextmanager

# --- 테스트용 환경 변수 ---
# app 모듈을 임포트하기 전에 설정해야 Settings()가 테스트 DB를 사용합니다.
# PostgreSQL로 테스트하려면 TEST_DATABASE_URL=postgresql+asyncpg://... 를 지정합니다.
TEST_DATABASE_URL = os.environ.setdefault("TEST_DATABASE_URL", "sqlite+aiosqlite:///./test_fims.db")
os.environ.setdefault("DATABASE_URL", TEST_DATABASE_URL)
os.environ.setdefault("SECRET_KEY", "fims-test-secret-key")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402

from sqlalchemy.ext.asyncio import create_async_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402
from sqlalchemy import text  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: E402

# app.main을 임포트하여 FastAPI 앱 인스턴스에 접근합니다.
from app.main import app as main_app  # noqa: E402
from app.core import dependencies as deps  # noqa: E402
from app.core.database import get_session, SCHEMA  # noqa: E402
from app.core.security import get_password_hash  # noqa: E402

# --- 모든 모델 임포트 ---
#  SQLModel.metadata.create_all()이 모든 테이블을 인식하도록 모든 모델 클래스를 임포트합니다.
from app.domains.models import *    # noqa: F401, F403, E402

from app.domains.usr import models as usr_models  # noqa: E402
from app.domains.shared import models as shared_models  # noqa: E402
from app.domains.loc import models as loc_models  # noqa: E402
from app.domains.fleet import models as fleet_models  # noqa: E402


# --- 테스트용 데이터베이스 설정 ---
IS_SQLITE = TEST_DATABASE_URL.startswith("sqlite")

test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,             # 테스트 시 SQL 쿼리 출력하지 않음
    future=True,
    poolclass=NullPool,     # 각 연결이 독립적으로 사용되고 바로 닫히도록 함
    # SQLite는 스키마를 지원하지 않으므로 모든 스키마를 기본 스키마로 매핑합니다.
    execution_options={"schema_translate_map": {name: None for name in SCHEMA}} if IS_SQLITE else {},
)

TestingSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def _recreate_tables() -> None:
    async with test_engine.begin() as conn:
        if not IS_SQLITE:
            for schema_name in SCHEMA:
                await conn.execute(text(f"CREATE SCHEMA IF NOT EXISTS {schema_name}"))
        await conn.run_sync(SQLModel.metadata.drop_all)
        await conn.run_sync(SQLModel.metadata.create_all)


async def _drop_tables() -> None:
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)


# --- 데이터베이스 픽스처 ---
@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """
    테스트 세션 시작 시 모든 테이블을 삭제하고 재생성합니다.
    테스트 종료 시 다시 테이블을 삭제합니다.
    """
    asyncio.run(_recreate_tables())
    yield
    asyncio.run(_drop_tables())


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    각 테스트 함수마다 연결 수준 트랜잭션을 시작하고, 테스트 완료 후 롤백하여
    테스트 간의 격리를 보장하는 비동기 데이터베이스 세션을 제공합니다.
    """
    connection = await test_engine.connect()
    transaction = await connection.begin()
    session = TestingSessionLocal(bind=connection)

    try:
        yield session
    finally:
        await session.close()
        await transaction.rollback()
        await connection.close()


# --- 테넌트/부서 픽스처 ---
@pytest_asyncio.fixture(scope="function")
async def test_tenant(db_session: AsyncSession) -> usr_models.Tenant:
    """테스트용 테넌트를 데이터베이스에 생성하고 반환합니다."""
    tenant = usr_models.Tenant(code="FIMS", name="테스트 운송회사")
    db_session.add(tenant)
    await db_session.commit()
    await db_session.refresh(tenant)
    return tenant


@pytest_asyncio.fixture(scope="function")
async def test_other_tenant(db_session: AsyncSession) -> usr_models.Tenant:
    """다른 테넌트 (테넌트 간 격리 검증용)"""
    tenant = usr_models.Tenant(code="OTHER", name="다른 운송회사")
    db_session.add(tenant)
    await db_session.commit()
    await db_session.refresh(tenant)
    return tenant


@pytest_asyncio.fixture(scope="function")
async def test_department(db_session: AsyncSession, test_tenant: usr_models.Tenant) -> usr_models.Department:
    """테스트용 부서를 데이터베이스에 생성하고 반환합니다."""
    department = usr_models.Department(tenant_id=test_tenant.id, code="OPS", name="운영팀")
    db_session.add(department)
    await db_session.commit()
    await db_session.refresh(department)
    return department


# --- 접근 레벨별 사용자 픽스처 (팩토리 사용) ---
@pytest_asyncio.fixture(scope="function")
def user_factory(
    db_session: AsyncSession, test_tenant: usr_models.Tenant
) -> Callable[..., Awaitable[usr_models.User]]:
    """
    접근 레벨과 속성을 지정하여 테스트 사용자를 생성하는 팩토리 함수를 반환합니다.
    추가 키워드 인자는 User 모델 생성자에 그대로 전달합니다.
    """
    async def _create_user(
        username: str,
        password: str,
        access_level: usr_models.AccessLevel,
        department_id: int = None,
        is_active: bool = True,
        **kwargs,
    ) -> usr_models.User:
        user_data = {
            "tenant_id": test_tenant.id,
            "username": username,
            "password_hash": get_password_hash(password),
            "email": f"{username}@fims.co.kr",
            "first_name": username.capitalize(),
            "last_name": "Test",
            "access_level": access_level,
            "department_id": department_id,
            "is_active": is_active,
            **kwargs,
        }
        user = usr_models.User(**user_data)
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user
    return _create_user


@pytest_asyncio.fixture(scope="function")
async def test_superuser(user_factory: Callable, test_department: usr_models.Department) -> usr_models.User:
    """최고 관리자(SUPERUSER)를 생성합니다."""
    return await user_factory(
        "superadm", "superadmpass123",
        access_level=usr_models.AccessLevel.SUPERUSER,
        department_id=test_department.id,
    )


@pytest_asyncio.fixture(scope="function")
async def test_admin_user(user_factory: Callable, test_department: usr_models.Department) -> usr_models.User:
    """관리자(ADMIN)를 생성합니다."""
    return await user_factory(
        "sysadm", "sysadmpass123",
        access_level=usr_models.AccessLevel.ADMIN,
        department_id=test_department.id,
    )


@pytest_asyncio.fixture(scope="function")
async def test_fleet_manager(user_factory: Callable, test_department: usr_models.Department) -> usr_models.User:
    """차량 관리자(FLEET_MANAGER)를 생성합니다."""
    return await user_factory(
        "fleetmgr", "fleetmgrpass123",
        access_level=usr_models.AccessLevel.FLEET_MANAGER,
        department_id=test_department.id,
    )


@pytest_asyncio.fixture(scope="function")
async def test_user(user_factory: Callable, test_department: usr_models.Department) -> usr_models.User:
    """일반 사용자(GENERAL_USER)를 생성합니다."""
    return await user_factory(
        "testuser", "testpass123",
        access_level=usr_models.AccessLevel.GENERAL_USER,
        department_id=test_department.id,
    )


# --- 인증 클라이언트 픽스처 ---
@pytest_asyncio.fixture(scope="function")
def authorized_client_factory(db_session: AsyncSession):
    """
    특정 사용자로 로그인된 AsyncClient를 만드는 비동기 컨텍스트 매니저 팩토리를 반환합니다.
    /api/v1/usr/auth/token 으로 실제 로그인하여 받은 토큰을 Authorization 헤더에 설정합니다.
    인증 의존성은 오버라이드하지 않으므로 한 테스트에서 여러 사용자의 클라이언트를 함께 쓸 수 있습니다.
    """
    @asynccontextmanager
    async def _create_client_context(user: usr_models.User, password: str) -> AsyncGenerator[AsyncClient, None]:
        def override_get_session():
            yield db_session

        original_overrides = main_app.dependency_overrides.copy()

        try:
            # 토큰 검증과 엔드포인트가 모두 테스트 세션을 사용하도록 세션 의존성만 교체합니다.
            main_app.dependency_overrides.update({
                get_session: override_get_session,
                deps.get_db_session: override_get_session,
            })

            transport = ASGITransport(app=main_app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                login_data = {"username": user.username, "password": password}
                res = await client.post("/api/v1/usr/auth/token", data=login_data)

                if res.status_code != 200:
                    pytest.fail(f"Login failed for {user.username}: {res.text}")

                token = res.json()["access_token"]
                client.headers["Authorization"] = f"Bearer {token}"
                yield client

        finally:
            main_app.dependency_overrides.clear()
            main_app.dependency_overrides.update(original_overrides)

    return _create_client_context


@pytest_asyncio.fixture(scope="function")
async def superuser_client(authorized_client_factory, test_superuser: usr_models.User) -> AsyncGenerator[AsyncClient, None]:
    """최고 관리자로 인증된 클라이언트를 반환합니다."""
    async with authorized_client_factory(test_superuser, "superadmpass123") as client:
        yield client


@pytest_asyncio.fixture(scope="function")
async def admin_client(authorized_client_factory, test_admin_user: usr_models.User) -> AsyncGenerator[AsyncClient, None]:
    """관리자로 인증된 클라이언트를 반환합니다."""
    async with authorized_client_factory(test_admin_user, "sysadmpass123") as client:
        yield client


@pytest_asyncio.fixture(scope="function")
async def fleet_manager_client(authorized_client_factory, test_fleet_manager: usr_models.User) -> AsyncGenerator[AsyncClient, None]:
    """차량 관리자로 인증된 클라이언트를 반환합니다."""
    async with authorized_client_factory(test_fleet_manager, "fleetmgrpass123") as client:
        yield client


@pytest_asyncio.fixture(scope="function")
async def authorized_client(authorized_client_factory, test_user: usr_models.User) -> AsyncGenerator[AsyncClient, None]:
    """일반 사용자로 인증된 클라이언트를 반환합니다."""
    async with authorized_client_factory(test_user, "testpass123") as client:
        yield client


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    인증되지 않은 사용자를 위한 AsyncClient 인스턴스를 생성하고,
    테스트용 비동기 DB 세션을 주입합니다.
    """
    def override_get_session_and_dependency():
        yield db_session

    original_overrides = main_app.dependency_overrides.copy()
    try:
        main_app.dependency_overrides[get_session] = override_get_session_and_dependency
        main_app.dependency_overrides[deps.get_db_session] = override_get_session_and_dependency

        async with AsyncClient(transport=ASGITransport(app=main_app), base_url="http://test") as async_client:
            yield async_client
    finally:
        main_app.dependency_overrides.clear()
        main_app.dependency_overrides.update(original_overrides)


# --- 도메인 데이터 픽스처 ---
@pytest_asyncio.fixture(name="installation_amenity")
async def installation_amenity_fixture(db_session: AsyncSession) -> shared_models.Amenity:
    """시설(installation) 유형 편의시설"""
    amenity = shared_models.Amenity(
        name="Waiting Room",
        category=shared_models.AmenityCategory.COMFORT,
        amenity_type=shared_models.AmenityType.INSTALLATION,
        icon_name="waiting-room",
    )
    db_session.add(amenity)
    await db_session.commit()
    await db_session.refresh(amenity)
    return amenity


@pytest_asyncio.fixture(name="bus_amenity")
async def bus_amenity_fixture(db_session: AsyncSession) -> shared_models.Amenity:
    """버스(bus) 유형 편의시설"""
    amenity = shared_models.Amenity(
        name="Wi-Fi",
        category=shared_models.AmenityCategory.TECHNOLOGY,
        amenity_type=shared_models.AmenityType.BUS,
        icon_name="wifi",
    )
    db_session.add(amenity)
    await db_session.commit()
    await db_session.refresh(amenity)
    return amenity


@pytest_asyncio.fixture(name="test_installation_type")
async def test_installation_type_fixture(db_session: AsyncSession) -> loc_models.InstallationType:
    installation_type = loc_models.InstallationType(code="TERM", name="터미널")
    db_session.add(installation_type)
    await db_session.commit()
    await db_session.refresh(installation_type)
    return installation_type


@pytest_asyncio.fixture(name="locked_installation_type")
async def locked_installation_type_fixture(db_session: AsyncSession) -> loc_models.InstallationType:
    installation_type = loc_models.InstallationType(code="SYS", name="시스템 시설", system_locked=True)
    db_session.add(installation_type)
    await db_session.commit()
    await db_session.refresh(installation_type)
    return installation_type


@pytest.fixture
def seats_per_floor_one_floor():
    """1층, 3열, 좌 2석 / 우 2석"""
    return [{"floor_number": 1, "num_rows": 3, "seats_left": 2, "seats_right": 2}]


@pytest_asyncio.fixture(name="test_diagram_model")
async def test_diagram_model_fixture(admin_client: AsyncClient, seats_per_floor_one_floor) -> dict:
    """API로 생성한 좌석 배치 모델 (템플릿 좌석 12석 포함)"""
    response = await admin_client.post(
        "/api/v1/fleet/bus-diagram-models",
        json={
            "name": "Standard 2+2",
            "max_capacity": 12,
            "num_floors": 1,
            "seats_per_floor": seats_per_floor_one_floor,
            "bathroom_rows": [],
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest_asyncio.fixture(name="test_bus_model")
async def test_bus_model_fixture(admin_client: AsyncClient, test_diagram_model: dict) -> dict:
    """기본 좌석 배치 모델이 지정된 버스 모델"""
    response = await admin_client.post(
        "/api/v1/fleet/bus-models",
        json={
            "default_bus_diagram_model_id": test_diagram_model["id"],
            "manufacturer": "Volvo",
            "model": "9800",
            "year": 2024,
            "seating_capacity": 12,
            "num_floors": 1,
            "amenities": ["wifi", "usb"],
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest_asyncio.fixture(name="test_bus")
async def test_bus_fixture(admin_client: AsyncClient, test_bus_model: dict) -> dict:
    response = await admin_client.post(
        "/api/v1/fleet/buses",
        json={"registration_number": "ABC-1234", "economic_number": "E-001", "model_id": test_bus_model["id"]},
    )
    assert response.status_code == 201, response.text
    return response.json()
