# app/domains/models/__init__.py

"""
이 파일은 모든 도메인의 SQLModel 모델들을 한 곳에서 중앙 관리하여,
다른 모듈에서 쉽게 임포트할 수 있도록 하는 역할을 합니다.
SQLModel.metadata가 모든 테이블을 인식하도록 보장합니다.
"""

# shared (Amenity, Audit)
from app.domains.shared.models import Amenity, Audit

# usr (Tenant, Department, Role, User, UserRoleLink)
from app.domains.usr.models import Tenant, Department, Role, User, UserRoleLink

# loc (InstallationType, Installation, InstallationAmenity)
from app.domains.loc.models import InstallationType, Installation, InstallationAmenity

# fleet (좌석 배치 모델, 버스 모델, 좌석 배치도, 버스)
from app.domains.fleet.models import (
    BusDiagramModel, BusSeatModel, BusModel, SeatDiagram, BusSeat, Bus
)


#  `from app.domains.models import *` 구문으로 임포트될 모델 목록 정의
__all__ = [
    # shared
    "Amenity", "Audit",
    # usr
    "Tenant", "Department", "Role", "User", "UserRoleLink",
    # loc
    "InstallationType", "Installation", "InstallationAmenity",
    # fleet
    "BusDiagramModel", "BusSeatModel", "BusModel", "SeatDiagram", "BusSeat", "Bus",
]
