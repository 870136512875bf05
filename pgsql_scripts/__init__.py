# pgsql_scripts/__init__.py
"""
Alembic-utils로 관리하는 PostgreSQL 함수/트리거 정의 패키지입니다.

주요 파일:
- `functions.py`: pgsql 함수 정의 (좌석 수 재계산)
- `triggers.py`: pgsql trigger 정의

패키지 안의 모듈을 순회하며 ReplaceableEntity(PGFunction, PGTrigger 등) 객체를
`all_db_objects` 에 모읍니다. migrations/env.py 에서 register_entities 로 등록합니다.
"""

__title__ = "FIMS Pgsql script"
__description__ = "Database function-scripts and trigger-scripts managed by Alembic."
__version__ = "0.1.0"
__all__ = ["all_db_objects"]

import pkgutil
import importlib
import inspect

from alembic_utils.replaceable_entity import ReplaceableEntity

# Alembic에서 사용할 객체 리스트 (아래 자동 탐색 로직으로 채워집니다)
all_db_objects = []

# --- 자동 탐색 로직 ---
for loader, module_name, is_pkg in pkgutil.iter_modules(__path__):
    module = importlib.import_module(f".{module_name}", __package__)
    for name, obj in inspect.getmembers(module):
        if isinstance(obj, ReplaceableEntity):
            all_db_objects.append(obj)
