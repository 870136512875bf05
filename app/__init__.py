# app/__init__.py

"""
FIMS FastAPI 애플리케이션의 메인 패키지입니다.

이 패키지는 차량(버스) 및 좌석 배치, 시설(installation), 사용자/역할 관리를 위한
핵심 로직과 도메인별 모듈을 포함합니다.
FastAPI 애플리케이션의 진입점 (main.py)과
공통 설정, 데이터베이스 연결, 보안 관련 유틸리티를 담는 core 서브패키지,
그리고 각 비즈니스 도메인을 대표하는 domains 서브패키지로 구성됩니다.
"""

APP_NAME = "FIMS FastAPI API"
APP_VERSION = "0.1.0"
API_PREFIX = "/api/v1"  # API 라우트의 공통 접두사 (main.py에서 적용)

# PEP 440 (Version Identification and Dependency Specification)을 따르는 버전 정보
# pyproject.toml의 version과 일치시켜야 합니다.
__version__ = APP_VERSION
__title__ = APP_NAME
__description__ = "Fleet & Inventory Management System (FIMS) API backend."
__license__ = "MIT"
__all__ = []  # 패키지에서 'from app import *' 시 내보낼 이름 목록.
