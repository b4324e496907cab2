"""pytest 설정 파일

테스트 환경 설정과 공통 픽스처를 제공합니다.
"""

import sys
import json
from pathlib import Path

import pytest

# 프로젝트 루트를 Python 경로에 추가 (pytest용)
project_root = Path(__file__).parent.parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from visa_intake.adapters import reset_provider
from visa_intake.config import create_config_manager, get_settings
from visa_intake.tests.helpers import JANE_DOE, FakeProvider, message_event, final_event


@pytest.fixture(autouse=True)
def test_env(monkeypatch):
    """테스트용 환경변수 (실제 API 키 불필요)"""
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    get_settings.cache_clear()
    reset_provider()
    yield
    get_settings.cache_clear()
    reset_provider()


@pytest.fixture
def config_manager():
    """질문 설정 관리자 픽스처"""
    return create_config_manager()


@pytest.fixture
def jane_doe():
    """완전한 인테이크 결과"""
    return dict(JANE_DOE)


@pytest.fixture
def jane_doe_provider():
    """두 개의 delta 와 최종 결과를 내보내는 제공자"""
    return FakeProvider(
        stream_events=[
            message_event({"type": "response.output_text.delta", "delta": "Jane"}),
            message_event({"type": "response.output_text.delta", "delta": " Doe"}),
            final_event({"output_text": json.dumps(JANE_DOE)})
        ],
        intake_response={"output_text": json.dumps(JANE_DOE)}
    )
