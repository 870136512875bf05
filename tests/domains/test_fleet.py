# tests/domains/test_fleet.py

"""
'fleet' 도메인 (좌석 배치 모델, 버스 모델, 좌석 배치도, 버스) API 엔드포인트 통합 테스트입니다.

- 좌석 배치 모델 생성 시 템플릿 좌석 생성, 재생성, 일괄 수정
- 버스 생성 시 좌석 배치도 복사, 좌석 실체화(materialize), 좌석 배치 조회
- 템플릿 -> 좌석 배치도 동기화 (수동 수정된 배치도 제외)
- 삭제 제약, 운행 상태 전이, 권한 검증
"""

import pytest
from httpx import AsyncClient
from redis.exceptions import RedisError
from sqlmodel.ext.asyncio.session import AsyncSession

from app.domains.fleet import crud as fleet_crud
from app.domains.fleet.tasks import sync_seat_diagrams_task
from app.domains.usr import models as usr_models
from app.main import app as main_app

BASE = "/api/v1/fleet"


async def _create_bus(client: AsyncClient, bus_model_id: int, registration_number: str, **extra) -> dict:
    response = await client.post(
        f"{BASE}/buses",
        json={"registration_number": registration_number, "model_id": bus_model_id, **extra},
    )
    assert response.status_code == 201, response.text
    return response.json()


# =============================================================================
# 1. 좌석 배치 모델
# =============================================================================
@pytest.mark.asyncio
async def test_create_bus_diagram_model_generates_template_seats(admin_client: AsyncClient, test_diagram_model: dict):
    assert test_diagram_model["total_seats"] == 12
    assert test_diagram_model["seats_per_floor"][0]["seats_left"] == 2

    response = await admin_client.get(f"{BASE}/bus-diagram-models/{test_diagram_model['id']}/seat-models")
    assert response.status_code == 200
    seats = response.json()
    assert len(seats) == 12
    first = seats[0]
    assert first["seat_number"] == "1"
    assert first["space_type"] == "seat"
    assert first["position"] == {"x": 0, "y": 1}
    assert first["meta"]["is_window"] is True
    # 오른쪽 좌석은 가운데 통로(x=2)를 건너뜁니다.
    assert sorted({seat["position"]["x"] for seat in seats}) == [0, 1, 3, 4]


@pytest.mark.asyncio
async def test_create_bus_diagram_model_duplicate_name(admin_client: AsyncClient, test_diagram_model: dict, seats_per_floor_one_floor):
    response = await admin_client.post(
        f"{BASE}/bus-diagram-models",
        json={"name": test_diagram_model["name"], "max_capacity": 12, "seats_per_floor": seats_per_floor_one_floor},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Bus diagram model with this name already exists"


@pytest.mark.asyncio
async def test_create_bus_diagram_model_missing_floor_configuration(admin_client: AsyncClient, seats_per_floor_one_floor):
    response = await admin_client.post(
        f"{BASE}/bus-diagram-models",
        json={"name": "Double Decker", "max_capacity": 40, "num_floors": 2, "seats_per_floor": seats_per_floor_one_floor},
    )
    assert response.status_code == 400
    detail = response.json()["detail"]
    assert "floor 2" in detail["message"]
    assert detail["errors"]


@pytest.mark.asyncio
async def test_create_bus_diagram_model_forbidden_for_general_user(authorized_client: AsyncClient, seats_per_floor_one_floor):
    response = await authorized_client.post(
        f"{BASE}/bus-diagram-models",
        json={"name": "Forbidden", "max_capacity": 12, "seats_per_floor": seats_per_floor_one_floor},
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_read_bus_diagram_models_requires_authentication(client: AsyncClient):
    response = await client.get(f"{BASE}/bus-diagram-models")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_diagram_model_seat_configuration(authorized_client: AsyncClient, test_diagram_model: dict):
    response = await authorized_client.get(f"{BASE}/bus-diagram-models/{test_diagram_model['id']}/seat-configuration")
    assert response.status_code == 200
    config = response.json()
    assert config["total_seats"] == 12
    rows = config["floors"][0]["rows"]
    assert len(rows) == 3
    assert [space["space_type"] for space in rows[0]] == ["seat", "seat", "hallway", "seat", "seat"]
    assert [space["seat_number"] for space in rows[1]] == ["5", "6", None, "7", "8"]


@pytest.mark.asyncio
async def test_update_bus_diagram_model_with_regeneration(admin_client: AsyncClient, test_diagram_model: dict):
    model_id = test_diagram_model["id"]
    response = await admin_client.put(
        f"{BASE}/bus-diagram-models/{model_id}?regenerate_seats=true",
        json={"seats_per_floor": [{"floor_number": 1, "num_rows": 5, "seats_left": 2, "seats_right": 1}]},
    )
    assert response.status_code == 200, response.text
    assert response.json()["total_seats"] == 15

    seats = (await admin_client.get(f"{BASE}/bus-diagram-models/{model_id}/seat-models")).json()
    assert len(seats) == 15


@pytest.mark.asyncio
async def test_update_bus_diagram_model_without_regeneration_keeps_seats(admin_client: AsyncClient, test_diagram_model: dict):
    model_id = test_diagram_model["id"]
    response = await admin_client.put(f"{BASE}/bus-diagram-models/{model_id}", json={"description": "2+2 배치"})
    assert response.status_code == 200
    assert response.json()["description"] == "2+2 배치"
    assert response.json()["total_seats"] == 12


@pytest.mark.asyncio
async def test_update_bus_diagram_model_without_regeneration_validates_floors(admin_client: AsyncClient, test_diagram_model: dict):
    """
    재생성 없이 층 수만 늘려도 층별 구성이 없는 층은 거부되고 모델은 그대로 남습니다.
    """
    model_id = test_diagram_model["id"]
    response = await admin_client.put(f"{BASE}/bus-diagram-models/{model_id}", json={"num_floors": 2})
    assert response.status_code == 400
    assert "floor 2" in response.json()["detail"]["message"]

    model = (await admin_client.get(f"{BASE}/bus-diagram-models/{model_id}")).json()
    assert model["num_floors"] == 1

    response = await admin_client.get(f"{BASE}/bus-diagram-models/{model_id}/seat-configuration")
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_regenerate_seat_models(admin_client: AsyncClient, test_diagram_model: dict):
    model_id = test_diagram_model["id"]
    response = await admin_client.post(f"{BASE}/bus-diagram-models/{model_id}/seat-models/regenerate")
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["seats_generated"] == 12
    assert body["bus_diagram_model"]["id"] == model_id


@pytest.mark.asyncio
async def test_update_template_seat_configuration(admin_client: AsyncClient, test_diagram_model: dict):
    model_id = test_diagram_model["id"]
    seats = [
        {"space_type": "seat", "seat_number": "1", "floor_number": 1, "position": {"x": 0, "y": 1}, "seat_type": "vip"},
        {"space_type": "seat", "seat_number": "2", "floor_number": 1, "position": {"x": 1, "y": 1}},
        {"space_type": "bathroom", "floor_number": 1, "position": {"x": 2, "y": 1}},
    ]
    response = await admin_client.put(
        f"{BASE}/bus-diagram-models/{model_id}/seat-models/configuration", json={"seats": seats}
    )
    assert response.status_code == 200, response.text
    assert response.json() == {
        "seats_created": 1,
        "seats_updated": 1,
        "seats_deactivated": 10,
        "total_active_seats": 2,
    }

    model = (await admin_client.get(f"{BASE}/bus-diagram-models/{model_id}")).json()
    assert model["total_seats"] == 2

    active = (await admin_client.get(f"{BASE}/bus-diagram-models/{model_id}/seat-models?active_only=true")).json()
    assert len(active) == 3


@pytest.mark.asyncio
async def test_update_template_seat_configuration_rejects_invalid_payload(admin_client: AsyncClient, test_diagram_model: dict):
    seats = [
        {"space_type": "seat", "seat_number": "1", "floor_number": 1, "position": {"x": 0, "y": 1}},
        {"space_type": "seat", "seat_number": "1", "floor_number": 1, "position": {"x": 0, "y": 9}},
    ]
    response = await admin_client.put(
        f"{BASE}/bus-diagram-models/{test_diagram_model['id']}/seat-models/configuration", json={"seats": seats}
    )
    assert response.status_code == 400
    errors = response.json()["detail"]["errors"]
    assert len(errors) == 2


@pytest.mark.asyncio
async def test_read_missing_bus_diagram_model(authorized_client: AsyncClient):
    response = await authorized_client.get(f"{BASE}/bus-diagram-models/99999")
    assert response.status_code == 404
    assert response.json()["detail"] == "Bus diagram model not found"


@pytest.mark.asyncio
async def test_delete_unused_bus_diagram_model(admin_client: AsyncClient, test_diagram_model: dict):
    model_id = test_diagram_model["id"]
    response = await admin_client.delete(f"{BASE}/bus-diagram-models/{model_id}")
    assert response.status_code == 204

    response = await admin_client.get(f"{BASE}/bus-diagram-models/{model_id}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_bus_diagram_model_used_by_bus_model(admin_client: AsyncClient, test_bus_model: dict):
    model_id = test_bus_model["default_bus_diagram_model_id"]
    response = await admin_client.delete(f"{BASE}/bus-diagram-models/{model_id}")
    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot delete bus diagram model because it is the default of a bus model."


@pytest.mark.asyncio
async def test_delete_bus_diagram_model_with_seat_diagrams(admin_client: AsyncClient, test_bus: dict, test_bus_model: dict):
    model_id = test_bus_model["default_bus_diagram_model_id"]
    response = await admin_client.delete(f"{BASE}/bus-diagram-models/{model_id}")
    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot delete bus diagram model because seat diagrams were created from it."


# =============================================================================
# 2. 버스 모델
# =============================================================================
@pytest.mark.asyncio
async def test_create_bus_model_duplicate_identity(admin_client: AsyncClient, test_bus_model: dict):
    response = await admin_client.post(
        f"{BASE}/bus-models",
        json={"manufacturer": "Volvo", "model": "9800", "year": 2024, "seating_capacity": 40},
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_create_bus_model_unknown_diagram_model(admin_client: AsyncClient):
    response = await admin_client.post(
        f"{BASE}/bus-models",
        json={"default_bus_diagram_model_id": 99999, "manufacturer": "Irizar", "model": "i8", "year": 2023, "seating_capacity": 44},
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_read_bus_models_filter_by_manufacturer(authorized_client: AsyncClient, test_bus_model: dict):
    response = await authorized_client.get(f"{BASE}/bus-models", params={"manufacturer": "Volvo"})
    assert response.status_code == 200
    assert [m["id"] for m in response.json()] == [test_bus_model["id"]]

    response = await authorized_client.get(f"{BASE}/bus-models", params={"manufacturer": "Scania"})
    assert response.json() == []


@pytest.mark.asyncio
async def test_update_bus_model(admin_client: AsyncClient, test_bus_model: dict):
    response = await admin_client.put(
        f"{BASE}/bus-models/{test_bus_model['id']}", json={"engine_type": "diesel", "amenities": ["wifi"]}
    )
    assert response.status_code == 200
    assert response.json()["engine_type"] == "diesel"
    assert response.json()["amenities"] == ["wifi"]


@pytest.mark.asyncio
async def test_delete_bus_model_in_use(admin_client: AsyncClient, test_bus: dict):
    response = await admin_client.delete(f"{BASE}/bus-models/{test_bus['model_id']}")
    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot delete bus model because there are buses using it."


@pytest.mark.asyncio
async def test_delete_missing_bus_model(admin_client: AsyncClient):
    response = await admin_client.delete(f"{BASE}/bus-models/99999")
    assert response.status_code == 404


# =============================================================================
# 3. 버스 생성과 좌석 배치도
# =============================================================================
@pytest.mark.asyncio
async def test_create_bus_copies_diagram_model(admin_client: AsyncClient, test_bus: dict, test_diagram_model: dict):
    assert test_bus["status"] == "ACTIVE"

    response = await admin_client.get(f"{BASE}/seat-diagrams/{test_bus['seat_diagram_id']}")
    assert response.status_code == 200
    diagram = response.json()
    assert diagram["name"] == "Volvo 9800 - ABC-1234"
    assert diagram["bus_diagram_model_id"] == test_diagram_model["id"]
    assert diagram["max_capacity"] == 12
    assert diagram["total_seats"] == 12
    assert diagram["is_modified"] is False

    # 템플릿 좌석이 버스 좌석으로 복사됩니다.
    seats = (await admin_client.get(f"{BASE}/seat-diagrams/{test_bus['seat_diagram_id']}/seats")).json()
    assert [s["seat_number"] for s in seats] == [str(n) for n in range(1, 13)]
    assert seats[0]["position"] == {"x": 0, "y": 1}
    assert seats[2]["position"] == {"x": 3, "y": 1}


@pytest.mark.asyncio
async def test_create_bus_copies_customized_template_seats(admin_client: AsyncClient, test_bus_model: dict, test_diagram_model: dict):
    """
    템플릿 좌석을 일괄 수정한 뒤 만든 버스는 이론적 배치가 아니라 수정된 템플릿을 그대로 받습니다.
    비활성 템플릿 좌석도 비활성 상태로 복사되며 total_seats는 활성 좌석 수입니다.
    """
    model_id = test_diagram_model["id"]
    template = [
        {"space_type": "seat", "seat_number": "1", "floor_number": 1, "position": {"x": 0, "y": 1}, "seat_type": "vip"},
        {"space_type": "seat", "seat_number": "2", "floor_number": 1, "position": {"x": 1, "y": 1}},
        {"space_type": "bathroom", "floor_number": 1, "position": {"x": 3, "y": 1}},
    ]
    response = await admin_client.put(
        f"{BASE}/bus-diagram-models/{model_id}/seat-models/configuration", json={"seats": template}
    )
    assert response.status_code == 200, response.text

    bus = await _create_bus(admin_client, test_bus_model["id"], "TPL-0001")
    diagram_id = bus["seat_diagram_id"]

    seats = (await admin_client.get(f"{BASE}/seat-diagrams/{diagram_id}/seats")).json()
    assert len(seats) == 12
    active = [s for s in seats if s["active"]]
    assert [(s["space_type"], s["seat_number"]) for s in active] == [
        ("seat", "1"), ("seat", "2"), ("bathroom", None)
    ]
    assert active[0]["seat_type"] == "vip"

    diagram = (await admin_client.get(f"{BASE}/seat-diagrams/{diagram_id}")).json()
    assert diagram["total_seats"] == 2

    config = (await admin_client.get(f"{BASE}/seat-diagrams/{diagram_id}/seat-configuration")).json()
    assert config["total_seats"] == 2
    assert [space["space_type"] for space in config["floors"][0]["rows"][0]] == [
        "seat", "seat", "hallway", "bathroom", "hallway"
    ]


@pytest.mark.asyncio
async def test_create_bus_duplicate_registration(admin_client: AsyncClient, test_bus: dict):
    response = await admin_client.post(
        f"{BASE}/buses", json={"registration_number": "ABC-1234", "model_id": test_bus["model_id"]}
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Bus with this registration number already exists"


@pytest.mark.asyncio
async def test_create_bus_model_without_default_diagram(admin_client: AsyncClient):
    response = await admin_client.post(
        f"{BASE}/bus-models",
        json={"manufacturer": "Mercedes", "model": "Tourismo", "year": 2022, "seating_capacity": 50},
    )
    assert response.status_code == 201
    response = await admin_client.post(
        f"{BASE}/buses", json={"registration_number": "NO-DIAGRAM", "model_id": response.json()["id"]}
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Bus model has no default bus diagram model"


@pytest.mark.asyncio
async def test_create_bus_with_explicit_diagram_model(admin_client: AsyncClient, test_bus_model: dict):
    other = await admin_client.post(
        f"{BASE}/bus-diagram-models",
        json={
            "name": "Compact 1+1",
            "max_capacity": 4,
            "seats_per_floor": [{"floor_number": 1, "num_rows": 2, "seats_left": 1, "seats_right": 1}],
        },
    )
    assert other.status_code == 201
    bus = await _create_bus(
        admin_client, test_bus_model["id"], "EXP-0001", bus_diagram_model_id=other.json()["id"]
    )
    diagram = (await admin_client.get(f"{BASE}/seat-diagrams/{bus['seat_diagram_id']}")).json()
    assert diagram["bus_diagram_model_id"] == other.json()["id"]
    assert diagram["total_seats"] == 4


@pytest.mark.asyncio
async def test_seat_diagram_configuration_uses_bus_model_amenities(authorized_client: AsyncClient, test_bus: dict):
    response = await authorized_client.get(f"{BASE}/seat-diagrams/{test_bus['seat_diagram_id']}/seat-configuration")
    assert response.status_code == 200
    config = response.json()
    assert config["amenities"] == ["wifi", "usb"]
    assert config["total_seats"] == 12


@pytest.mark.asyncio
async def test_materialize_seats_is_idempotent(admin_client: AsyncClient, test_bus: dict, db_session: AsyncSession):
    """
    템플릿에서 복사된 좌석이 있으면 실체화는 아무것도 만들지 않습니다.
    좌석이 하나도 없는 배치도에서만 이론적 배치로 좌석을 만듭니다.
    """
    diagram_id = test_bus["seat_diagram_id"]
    response = await admin_client.post(f"{BASE}/seat-diagrams/{diagram_id}/materialize")
    assert response.status_code == 200, response.text
    assert response.json() == {"seat_diagram_id": diagram_id, "seats_created": 0, "total_seats": 12}

    for seat in await fleet_crud.bus_seat.get_by_owner(db_session, owner_id=diagram_id):
        await db_session.delete(seat)
    await db_session.commit()

    response = await admin_client.post(f"{BASE}/seat-diagrams/{diagram_id}/materialize")
    assert response.json() == {"seat_diagram_id": diagram_id, "seats_created": 12, "total_seats": 12}

    response = await admin_client.post(f"{BASE}/seat-diagrams/{diagram_id}/materialize")
    assert response.json() == {"seat_diagram_id": diagram_id, "seats_created": 0, "total_seats": 12}

    seats = (await admin_client.get(f"{BASE}/seat-diagrams/{diagram_id}/seats")).json()
    assert len(seats) == 12
    assert seats[0]["meta"]["seat_floor"] == "Floor 1"

    config = (await admin_client.get(f"{BASE}/seat-diagrams/{diagram_id}/seat-configuration")).json()
    assert config["total_seats"] == 12
    assert [space["seat_number"] for space in config["floors"][0]["rows"][0]] == ["1", "2", None, "3", "4"]


@pytest.mark.asyncio
async def test_update_seat_diagram_configuration_marks_modified(admin_client: AsyncClient, test_bus: dict):
    diagram_id = test_bus["seat_diagram_id"]

    seats = [
        {"space_type": "seat", "seat_number": "1", "floor_number": 1, "position": {"x": 0, "y": 1}},
        {"space_type": "empty", "floor_number": 1, "position": {"x": 1, "y": 1}},
    ]
    response = await admin_client.put(f"{BASE}/seat-diagrams/{diagram_id}/seats/configuration", json={"seats": seats})
    assert response.status_code == 200, response.text
    result = response.json()
    assert result["seats_updated"] == 1
    assert result["seats_deactivated"] == 10
    assert result["total_active_seats"] == 1

    diagram = (await admin_client.get(f"{BASE}/seat-diagrams/{diagram_id}")).json()
    assert diagram["is_modified"] is True
    assert diagram["total_seats"] == 1

    config = (await admin_client.get(f"{BASE}/seat-diagrams/{diagram_id}/seat-configuration")).json()
    assert [space["space_type"] for space in config["floors"][0]["rows"][0]] == [
        "seat", "empty", "hallway", "hallway", "hallway"
    ]


@pytest.mark.asyncio
async def test_update_seat_diagram_marks_modified(admin_client: AsyncClient, test_bus: dict):
    response = await admin_client.put(
        f"{BASE}/seat-diagrams/{test_bus['seat_diagram_id']}", json={"description": "맞춤 배치"}
    )
    assert response.status_code == 200
    assert response.json()["is_modified"] is True
    assert response.json()["description"] == "맞춤 배치"


@pytest.mark.asyncio
async def test_delete_seat_diagram_assigned_to_bus(admin_client: AsyncClient, test_bus: dict):
    response = await admin_client.delete(f"{BASE}/seat-diagrams/{test_bus['seat_diagram_id']}")
    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot delete seat diagram because it is assigned to a bus."


@pytest.mark.asyncio
async def test_read_seat_diagrams_filter_by_model(authorized_client: AsyncClient, test_bus: dict, test_diagram_model: dict):
    response = await authorized_client.get(
        f"{BASE}/seat-diagrams", params={"bus_diagram_model_id": test_diagram_model["id"]}
    )
    assert response.status_code == 200
    assert [d["id"] for d in response.json()] == [test_bus["seat_diagram_id"]]


# =============================================================================
# 4. 템플릿 동기화
# =============================================================================
@pytest.mark.asyncio
async def test_sync_seat_diagrams_skips_modified(admin_client: AsyncClient, test_bus: dict, test_bus_model: dict, test_diagram_model: dict):
    model_id = test_diagram_model["id"]
    modified_bus = await _create_bus(admin_client, test_bus_model["id"], "MOD-0001")
    response = await admin_client.put(
        f"{BASE}/seat-diagrams/{modified_bus['seat_diagram_id']}", json={"description": "수동 수정"}
    )
    assert response.status_code == 200

    # 복사 직후에는 템플릿과 같으므로 변경이 없습니다.
    response = await admin_client.post(f"{BASE}/bus-diagram-models/{model_id}/seat-diagrams/sync")
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["results"] == [
        {"seat_diagram_id": test_bus["seat_diagram_id"], "created": 0, "updated": 0, "deleted": 0}
    ]

    template = [
        {"space_type": "seat", "seat_number": "1", "floor_number": 1, "position": {"x": 0, "y": 1}, "seat_type": "vip"},
        {"space_type": "seat", "seat_number": "2", "floor_number": 1, "position": {"x": 1, "y": 1}},
        {"space_type": "bathroom", "floor_number": 1, "position": {"x": 2, "y": 1}},
    ]
    response = await admin_client.put(
        f"{BASE}/bus-diagram-models/{model_id}/seat-models/configuration", json={"seats": template}
    )
    assert response.status_code == 200, response.text

    # 작업 큐가 없으면 즉시 실행됩니다.
    response = await admin_client.post(f"{BASE}/bus-diagram-models/{model_id}/seat-diagrams/sync")
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["status"] == "completed"
    assert body["job_id"] is None
    # 좌석 1(vip)과 비활성화된 10개는 수정, 화장실 칸은 생성
    assert body["results"] == [
        {"seat_diagram_id": test_bus["seat_diagram_id"], "created": 1, "updated": 11, "deleted": 0}
    ]

    diagram = (await admin_client.get(f"{BASE}/seat-diagrams/{test_bus['seat_diagram_id']}")).json()
    assert diagram["total_seats"] == 2

    untouched = (await admin_client.get(f"{BASE}/seat-diagrams/{modified_bus['seat_diagram_id']}/seats")).json()
    assert len(untouched) == 12
    assert all(seat["active"] for seat in untouched)
    assert untouched[0]["seat_type"] == "regular"

    # 다시 동기화하면 변경이 없습니다.
    body = (await admin_client.post(f"{BASE}/bus-diagram-models/{model_id}/seat-diagrams/sync")).json()
    assert body["results"][0]["created"] == 0
    assert body["results"][0]["updated"] == 0


@pytest.mark.asyncio
async def test_sync_seat_diagrams_applies_template_changes(admin_client: AsyncClient, test_bus: dict, test_diagram_model: dict):
    model_id = test_diagram_model["id"]
    diagram_id = test_bus["seat_diagram_id"]

    response = await admin_client.put(
        f"{BASE}/bus-diagram-models/{model_id}?regenerate_seats=true",
        json={
            "max_capacity": 40,
            "seats_per_floor": [{"floor_number": 1, "num_rows": 2, "seats_left": 2, "seats_right": 2}],
        },
    )
    assert response.status_code == 200

    body = (await admin_client.post(f"{BASE}/bus-diagram-models/{model_id}/seat-diagrams/sync")).json()
    assert body["results"] == [{"seat_diagram_id": diagram_id, "created": 0, "updated": 0, "deleted": 4}]

    diagram = (await admin_client.get(f"{BASE}/seat-diagrams/{diagram_id}")).json()
    assert diagram["total_seats"] == 8
    assert diagram["seats_per_floor"][0]["num_rows"] == 2
    assert diagram["max_capacity"] == 40


class _StubJob:
    def __init__(self, job_id: str):
        self.job_id = job_id


class _StubTaskQueue:
    """arq 풀 대신 사용하는 작업 큐. enqueue 호출을 기록합니다."""

    def __init__(self, error=None):
        self.error = error
        self.calls = []

    async def enqueue_job(self, function: str, *args):
        self.calls.append((function, *args))
        if self.error is not None:
            raise self.error
        return _StubJob("job-1")


@pytest.mark.asyncio
async def test_sync_seat_diagrams_enqueues_when_task_queue_available(
    admin_client: AsyncClient, test_bus: dict, test_diagram_model: dict, test_admin_user: usr_models.User
):
    model_id = test_diagram_model["id"]
    user_id = test_admin_user.id
    task_queue = _StubTaskQueue()
    main_app.state.redis = task_queue
    try:
        response = await admin_client.post(f"{BASE}/bus-diagram-models/{model_id}/seat-diagrams/sync")
    finally:
        main_app.state.redis = None

    assert response.status_code == 200, response.text
    assert response.json() == {"status": "queued", "job_id": "job-1", "results": []}
    assert task_queue.calls == [("sync_seat_diagrams_task", model_id, user_id)]


@pytest.mark.asyncio
async def test_sync_seat_diagrams_runs_inline_when_enqueue_fails(
    admin_client: AsyncClient, test_bus: dict, test_diagram_model: dict
):
    model_id = test_diagram_model["id"]
    task_queue = _StubTaskQueue(error=RedisError("connection refused"))
    main_app.state.redis = task_queue
    try:
        response = await admin_client.post(f"{BASE}/bus-diagram-models/{model_id}/seat-diagrams/sync")
    finally:
        main_app.state.redis = None

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["status"] == "completed"
    assert body["job_id"] is None
    assert body["results"] == [
        {"seat_diagram_id": test_bus["seat_diagram_id"], "created": 0, "updated": 0, "deleted": 0}
    ]
    assert len(task_queue.calls) == 1


@pytest.mark.asyncio
async def test_sync_seat_diagrams_task(db_session: AsyncSession, test_bus: dict, test_diagram_model: dict):
    """
    arq 작업은 ctx['db'] 세션으로 동기화를 실행하고, 없는 좌석 배치 모델이면 빈 목록을 반환합니다.
    """
    results = await sync_seat_diagrams_task({"db": db_session}, test_diagram_model["id"])
    assert results == [
        {"seat_diagram_id": test_bus["seat_diagram_id"], "created": 0, "updated": 0, "deleted": 0}
    ]

    assert await sync_seat_diagrams_task({"db": db_session}, 99999) == []


@pytest.mark.asyncio
async def test_sync_seat_diagrams_forbidden_for_general_user(authorized_client: AsyncClient, test_diagram_model: dict):
    response = await authorized_client.post(
        f"{BASE}/bus-diagram-models/{test_diagram_model['id']}/seat-diagrams/sync"
    )
    assert response.status_code == 403


# =============================================================================
# 5. 버스 수정, 상태 전이, 삭제
# =============================================================================
@pytest.mark.asyncio
async def test_change_bus_status_valid_and_invalid(admin_client: AsyncClient, test_bus: dict):
    bus_id = test_bus["id"]
    response = await admin_client.put(f"{BASE}/buses/{bus_id}/status", json={"status": "RETIRED"})
    assert response.status_code == 200
    assert response.json()["status"] == "RETIRED"

    response = await admin_client.put(f"{BASE}/buses/{bus_id}/status", json={"status": "ACTIVE"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid status transition from RETIRED to ACTIVE"

    response = await admin_client.get(f"{BASE}/buses/{bus_id}/allowed-status-transitions")
    assert response.json() == {"status": "RETIRED", "allowed_transitions": ["OUT_OF_SERVICE"]}


@pytest.mark.asyncio
async def test_read_buses_filter_by_status(authorized_client: AsyncClient, admin_client: AsyncClient, test_bus: dict):
    await admin_client.put(f"{BASE}/buses/{test_bus['id']}/status", json={"status": "MAINTENANCE"})

    response = await authorized_client.get(f"{BASE}/buses", params={"status": "MAINTENANCE"})
    assert response.status_code == 200
    assert [b["id"] for b in response.json()] == [test_bus["id"]]

    response = await authorized_client.get(f"{BASE}/buses", params={"status": "ACTIVE"})
    assert response.json() == []


@pytest.mark.asyncio
async def test_update_bus_model_change_replaces_seat_diagram(admin_client: AsyncClient, test_bus: dict, test_diagram_model: dict):
    other_model = await admin_client.post(
        f"{BASE}/bus-models",
        json={
            "default_bus_diagram_model_id": test_diagram_model["id"],
            "manufacturer": "Scania",
            "model": "Irizar i6",
            "year": 2023,
            "seating_capacity": 12,
        },
    )
    assert other_model.status_code == 201
    old_diagram_id = test_bus["seat_diagram_id"]

    response = await admin_client.put(f"{BASE}/buses/{test_bus['id']}", json={"model_id": other_model.json()["id"]})
    assert response.status_code == 200, response.text
    updated = response.json()
    assert updated["model_id"] == other_model.json()["id"]
    assert updated["seat_diagram_id"] != old_diagram_id

    assert (await admin_client.get(f"{BASE}/seat-diagrams/{old_diagram_id}")).status_code == 404
    diagram = (await admin_client.get(f"{BASE}/seat-diagrams/{updated['seat_diagram_id']}")).json()
    assert diagram["name"] == "Scania Irizar i6 - ABC-1234"
    seats = (await admin_client.get(f"{BASE}/seat-diagrams/{updated['seat_diagram_id']}/seats")).json()
    assert len(seats) == 12
    assert diagram["total_seats"] == 12


@pytest.mark.asyncio
async def test_update_bus_invalid_status(admin_client: AsyncClient, test_bus: dict):
    await admin_client.put(f"{BASE}/buses/{test_bus['id']}/status", json={"status": "RETIRED"})
    response = await admin_client.put(f"{BASE}/buses/{test_bus['id']}", json={"status": "IN_TRANSIT"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_delete_bus_removes_seat_diagram(admin_client: AsyncClient, test_bus: dict):
    diagram_id = test_bus["seat_diagram_id"]

    response = await admin_client.delete(f"{BASE}/buses/{test_bus['id']}")
    assert response.status_code == 204

    assert (await admin_client.get(f"{BASE}/buses/{test_bus['id']}")).status_code == 404
    assert (await admin_client.get(f"{BASE}/seat-diagrams/{diagram_id}")).status_code == 404


@pytest.mark.asyncio
async def test_fleet_mutations_are_audited(admin_client: AsyncClient, test_bus: dict):
    response = await admin_client.get("/api/v1/shared/audits", params={"entity_type": "bus"})
    assert response.status_code == 200
    actions = [(a["action"], a["entity_id"]) for a in response.json()]
    assert ("create", test_bus["id"]) in actions
