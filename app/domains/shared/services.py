# app/domains/shared/services.py

import logging
from typing import Any, Dict, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from . import models, crud, schemas

logger = logging.getLogger(__name__)


# 미리 정의된 편의시설 목록 (scripts/seed_amenities.py에서 사용)
PREDEFINED_AMENITIES = [
    # 버스 편의시설
    {"name": "Wi-Fi", "category": models.AmenityCategory.TECHNOLOGY, "amenity_type": models.AmenityType.BUS,
     "description": "Free wireless internet connection", "icon_name": "wifi"},
    {"name": "Air Conditioning", "category": models.AmenityCategory.COMFORT, "amenity_type": models.AmenityType.BUS,
     "description": "Climate controlled environment", "icon_name": "air-vent"},
    {"name": "Reclining Seats", "category": models.AmenityCategory.COMFORT, "amenity_type": models.AmenityType.BUS,
     "description": "Comfortable reclining seats", "icon_name": "armchair"},
    {"name": "USB Charging Ports", "category": models.AmenityCategory.TECHNOLOGY, "amenity_type": models.AmenityType.BUS,
     "description": "USB ports for device charging", "icon_name": "usb"},
    {"name": "Onboard Restroom", "category": models.AmenityCategory.BASIC, "amenity_type": models.AmenityType.BUS,
     "description": "Private restroom facility", "icon_name": "bath"},
    {"name": "Entertainment System", "category": models.AmenityCategory.TECHNOLOGY, "amenity_type": models.AmenityType.BUS,
     "description": "Individual entertainment screens", "icon_name": "tv"},
    {"name": "Security Cameras", "category": models.AmenityCategory.SECURITY, "amenity_type": models.AmenityType.BUS,
     "description": "Onboard security monitoring", "icon_name": "camera"},
    {"name": "Wheelchair Accessibility", "category": models.AmenityCategory.ACCESSIBILITY, "amenity_type": models.AmenityType.BUS,
     "description": "Wheelchair accessible boarding", "icon_name": "accessibility"},
    # 시설(installation) 편의시설
    {"name": "Passenger Waiting Area", "category": models.AmenityCategory.BASIC, "amenity_type": models.AmenityType.INSTALLATION,
     "description": "Comfortable seating area for passengers", "icon_name": "users"},
    {"name": "Information Desk", "category": models.AmenityCategory.SERVICES, "amenity_type": models.AmenityType.INSTALLATION,
     "description": "Customer service and information point", "icon_name": "info"},
    {"name": "Cafeteria", "category": models.AmenityCategory.SERVICES, "amenity_type": models.AmenityType.INSTALLATION,
     "description": "Food and beverage service", "icon_name": "coffee"},
    {"name": "Public Restrooms", "category": models.AmenityCategory.BASIC, "amenity_type": models.AmenityType.INSTALLATION,
     "description": "Clean public restroom facilities", "icon_name": "bath"},
    {"name": "Free Wi-Fi Zone", "category": models.AmenityCategory.TECHNOLOGY, "amenity_type": models.AmenityType.INSTALLATION,
     "description": "Free internet access area", "icon_name": "wifi"},
    {"name": "Luggage Storage", "category": models.AmenityCategory.SERVICES, "amenity_type": models.AmenityType.INSTALLATION,
     "description": "Secure luggage storage facility", "icon_name": "package"},
    {"name": "Security Checkpoint", "category": models.AmenityCategory.SECURITY, "amenity_type": models.AmenityType.INSTALLATION,
     "description": "Security screening area", "icon_name": "shield"},
    {"name": "Accessibility Ramp", "category": models.AmenityCategory.ACCESSIBILITY, "amenity_type": models.AmenityType.INSTALLATION,
     "description": "Wheelchair accessible entrance", "icon_name": "accessibility"},
    {"name": "Charging Stations", "category": models.AmenityCategory.TECHNOLOGY, "amenity_type": models.AmenityType.INSTALLATION,
     "description": "Device charging stations", "icon_name": "battery"},
    {"name": "ATM Machine", "category": models.AmenityCategory.SERVICES, "amenity_type": models.AmenityType.INSTALLATION,
     "description": "Automated teller machine", "icon_name": "credit-card"},
]


async def record_audit(
    db: AsyncSession,
    *,
    user_id: Optional[int],
    action: str,
    entity_type: str,
    entity_id: Optional[int] = None,
    details: Optional[Dict[str, Any]] = None,
) -> models.Audit:
    """
    변경 이력을 현재 트랜잭션에 추가합니다.
    커밋은 호출한 쪽의 작업과 함께 이루어집니다.
    """
    audit = models.Audit(
        user_id=user_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        details=details,
    )
    db.add(audit)
    await db.flush()
    logger.debug("Audit 기록: %s %s(id=%s) by user %s", action, entity_type, entity_id, user_id)
    return audit


async def seed_amenities(db: AsyncSession) -> int:
    """
    미리 정의된 편의시설을 추가합니다. 이미 같은 이름이 있으면 건너뜁니다.
    추가된 편의시설 수를 반환합니다.
    """
    created = 0
    for data in PREDEFINED_AMENITIES:
        if await crud.amenity.get_by_name(db, name=data["name"]):
            continue
        await crud.amenity.create(db, obj_in=schemas.AmenityCreate(**data))
        created += 1
    logger.info("편의시설 %d건 추가 (전체 %d건 중)", created, len(PREDEFINED_AMENITIES))
    return created
