# app/domains/fleet/tasks.py

"""
'fleet' 도메인의 ARQ 백그라운드 태스크입니다.
워커가 작업마다 열어 주는 세션(ctx['db'])을 사용합니다.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from app.domains.fleet import crud as fleet_crud
from app.domains.fleet import services as fleet_services

logger = logging.getLogger(__name__)


async def sync_seat_diagrams_task(
    ctx: Dict[str, Any], bus_diagram_model_id: int, user_id: Optional[int] = None
) -> List[Dict[str, int]]:
    """
    좌석 배치 모델의 템플릿 좌석을 수동 수정되지 않은 좌석 배치도들에 반영합니다.
    """
    db: AsyncSession = ctx['db']
    logger.info("백그라운드 작업 시작: 좌석 배치 모델 ID %d의 좌석 배치도 동기화", bus_diagram_model_id)

    diagram_model = await fleet_crud.bus_diagram_model.get(db, id=bus_diagram_model_id)
    if diagram_model is None:
        logger.warning("좌석 배치 모델 ID %d를 찾을 수 없어 동기화를 건너뜁니다.", bus_diagram_model_id)
        return []

    results = await fleet_services.sync_seat_diagrams(db, db_obj=diagram_model, user_id=user_id)
    logger.info(
        "작업 완료! 좌석 배치도 %d개 동기화 (생성 %d, 수정 %d, 삭제 %d)",
        len(results),
        sum(r["created"] for r in results),
        sum(r["updated"] for r in results),
        sum(r["deleted"] for r in results),
    )
    return results
