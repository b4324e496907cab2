"""
비자 인테이크 서비스 모듈

FastAPI 웹 서버와 관련 서비스들을 제공합니다.
"""

from .app import create_app, IntakeApp

__all__ = [
    "create_app",
    "IntakeApp"
]
