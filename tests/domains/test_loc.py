# tests/domains/test_loc.py

"""
'loc' 도메인 (시설 유형, 시설) 관련 API 엔드포인트에 대한 통합 테스트를 정의하는 모듈입니다.

- 시설 유형: 생성, 중복 코드, 시스템 잠금 유형 수정/삭제 거부, 사용 중인 유형 삭제 거부
- 시설: 편의시설 연결 생성, 편의시설 유형 검증, 유형별 필터링, 수정, 삭제

다양한 사용자 역할(관리자, 일반 사용자, 비인증 사용자)에 따른 권한 검사를 포함합니다.
"""

import pytest
from httpx import AsyncClient

from app.domains.loc import models as loc_models
from app.domains.shared import models as shared_models

BASE = "/api/v1/loc"


# --- 시설 유형 엔드포인트 테스트 ---

@pytest.mark.asyncio
async def test_create_installation_type_success_admin(admin_client: AsyncClient):
    """관리자 권한으로 시설 유형을 생성합니다. system_locked 는 항상 false 입니다."""
    response = await admin_client.post(
        f"{BASE}/installation-types",
        json={"code": "DEPOT", "name": "차고지", "description": "버스 차고지"},
    )
    assert response.status_code == 201
    created = response.json()
    assert created["code"] == "DEPOT"
    assert created["system_locked"] is False
    assert "id" in created


@pytest.mark.asyncio
async def test_create_installation_type_duplicate_code(
    admin_client: AsyncClient, test_installation_type: loc_models.InstallationType
):
    response = await admin_client.post(
        f"{BASE}/installation-types", json={"code": test_installation_type.code, "name": "중복"}
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Installation type with this code already exists."


@pytest.mark.asyncio
async def test_create_installation_type_blank_name(admin_client: AsyncClient):
    response = await admin_client.post(f"{BASE}/installation-types", json={"code": "BLNK", "name": "   "})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_installation_type_forbidden_for_general_user(authorized_client: AsyncClient):
    response = await authorized_client.post(f"{BASE}/installation-types", json={"code": "X", "name": "X"})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_read_installation_types_unauthenticated(client: AsyncClient):
    response = await client.get(f"{BASE}/installation-types")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_update_installation_type(admin_client: AsyncClient, test_installation_type: loc_models.InstallationType):
    response = await admin_client.put(
        f"{BASE}/installation-types/{test_installation_type.id}", json={"name": "종합 터미널"}
    )
    assert response.status_code == 200
    assert response.json()["name"] == "종합 터미널"
    assert response.json()["code"] == "TERM"


@pytest.mark.asyncio
async def test_update_system_locked_installation_type(
    admin_client: AsyncClient, locked_installation_type: loc_models.InstallationType
):
    response = await admin_client.put(
        f"{BASE}/installation-types/{locked_installation_type.id}", json={"name": "변경 시도"}
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "System-locked installation types cannot be modified."


@pytest.mark.asyncio
async def test_delete_system_locked_installation_type(
    admin_client: AsyncClient, locked_installation_type: loc_models.InstallationType
):
    response = await admin_client.delete(f"{BASE}/installation-types/{locked_installation_type.id}")
    assert response.status_code == 400
    assert response.json()["detail"] == "System-locked installation types cannot be deleted."


@pytest.mark.asyncio
async def test_delete_installation_type_in_use(
    admin_client: AsyncClient, test_installation_type: loc_models.InstallationType
):
    response = await admin_client.post(
        f"{BASE}/installations",
        json={"name": "서울 고속버스 터미널", "address": "서울시 서초구", "installation_type_id": test_installation_type.id},
    )
    assert response.status_code == 201

    response = await admin_client.delete(f"{BASE}/installation-types/{test_installation_type.id}")
    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot delete installation type because there are associated installations."


@pytest.mark.asyncio
async def test_delete_installation_type_success(
    admin_client: AsyncClient, test_installation_type: loc_models.InstallationType
):
    response = await admin_client.delete(f"{BASE}/installation-types/{test_installation_type.id}")
    assert response.status_code == 204

    response = await admin_client.get(f"{BASE}/installation-types/{test_installation_type.id}")
    assert response.status_code == 404


# --- 시설 엔드포인트 테스트 ---

@pytest.mark.asyncio
async def test_create_installation_with_amenities(
    admin_client: AsyncClient,
    test_installation_type: loc_models.InstallationType,
    installation_amenity: shared_models.Amenity,
):
    response = await admin_client.post(
        f"{BASE}/installations",
        json={
            "name": "부산 종합 터미널",
            "address": "부산시 금정구",
            "contact_phone": "+82515081234",
            "contact_email": "terminal@fims.co.kr",
            "website": "https://terminal.fims.co.kr",
            "installation_type_id": test_installation_type.id,
            "amenity_ids": [installation_amenity.id],
        },
    )
    assert response.status_code == 201, response.text
    created = response.json()
    assert created["installation_type_id"] == test_installation_type.id
    assert [a["id"] for a in created["amenities"]] == [installation_amenity.id]


@pytest.mark.asyncio
async def test_create_installation_rejects_bus_amenity(
    admin_client: AsyncClient, bus_amenity: shared_models.Amenity
):
    response = await admin_client.post(
        f"{BASE}/installations",
        json={"name": "잘못된 시설", "address": "어딘가", "amenity_ids": [bus_amenity.id]},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == f"Amenities must be of type 'installation': [{bus_amenity.id}]"


@pytest.mark.asyncio
async def test_create_installation_unknown_amenity(admin_client: AsyncClient):
    response = await admin_client.post(
        f"{BASE}/installations",
        json={"name": "시설", "address": "주소", "amenity_ids": [99999]},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Amenities not found: [99999]"


@pytest.mark.asyncio
async def test_create_installation_invalid_phone_and_website(admin_client: AsyncClient):
    response = await admin_client.post(
        f"{BASE}/installations",
        json={"name": "시설", "address": "주소", "contact_phone": "phone-number"},
    )
    assert response.status_code == 422

    response = await admin_client.post(
        f"{BASE}/installations",
        json={"name": "시설", "address": "주소", "website": "ftp://example"},
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_installation_unknown_type(admin_client: AsyncClient):
    response = await admin_client.post(
        f"{BASE}/installations", json={"name": "시설", "address": "주소", "installation_type_id": 99999}
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_read_installations_filter_by_type(
    admin_client: AsyncClient,
    authorized_client: AsyncClient,
    test_installation_type: loc_models.InstallationType,
):
    typed = await admin_client.post(
        f"{BASE}/installations",
        json={"name": "대전 터미널", "address": "대전시", "installation_type_id": test_installation_type.id},
    )
    await admin_client.post(f"{BASE}/installations", json={"name": "무유형 시설", "address": "광주시"})

    response = await authorized_client.get(
        f"{BASE}/installations", params={"installation_type_id": test_installation_type.id}
    )
    assert response.status_code == 200
    assert [i["id"] for i in response.json()] == [typed.json()["id"]]

    response = await authorized_client.get(f"{BASE}/installations")
    assert len(response.json()) == 2


@pytest.mark.asyncio
async def test_update_installation_replaces_amenities(
    admin_client: AsyncClient, installation_amenity: shared_models.Amenity
):
    created = await admin_client.post(
        f"{BASE}/installations",
        json={"name": "인천 터미널", "address": "인천시", "amenity_ids": [installation_amenity.id]},
    )
    installation_id = created.json()["id"]

    response = await admin_client.put(
        f"{BASE}/installations/{installation_id}", json={"address": "인천시 미추홀구", "amenity_ids": []}
    )
    assert response.status_code == 200, response.text
    assert response.json()["address"] == "인천시 미추홀구"
    assert response.json()["amenities"] == []


@pytest.mark.asyncio
async def test_delete_installation(admin_client: AsyncClient, installation_amenity: shared_models.Amenity):
    created = await admin_client.post(
        f"{BASE}/installations",
        json={"name": "삭제할 시설", "address": "주소", "amenity_ids": [installation_amenity.id]},
    )
    installation_id = created.json()["id"]

    response = await admin_client.delete(f"{BASE}/installations/{installation_id}")
    assert response.status_code == 204

    response = await admin_client.get(f"{BASE}/installations/{installation_id}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_missing_installation(admin_client: AsyncClient):
    response = await admin_client.delete(f"{BASE}/installations/99999")
    assert response.status_code == 404
