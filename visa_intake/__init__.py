"""
비자 인테이크 스트림 릴레이 구현

이 패키지는 사용자의 자유 텍스트에서 비자 신청 정보를 추출하도록
업스트림 LLM에 요청하고, 결과를 단건 JSON 또는 SSE 스트림으로
브라우저/클라이언트에 전달하는 시스템을 제공합니다.
"""

__version__ = "1.0.0"
__author__ = "Visa Intake Team"

from .config import IntakeSettings, get_settings, QuestionConfigManager, create_config_manager
from .models import VisaIntake, VISA_INTAKE_SCHEMA, validate_intake
from .extraction import extract_json_from_response
from .adapters import IntakeClient, OpenAIIntakeProvider, get_provider
from .streaming import StreamConsumer, RelayManager, extract_text_from_payload

__all__ = [
    # 환경변수 설정 관리
    "IntakeSettings",
    "get_settings",
    # 질문 설정 관리
    "QuestionConfigManager",
    "create_config_manager",
    # 데이터 모델
    "VisaIntake",
    "VISA_INTAKE_SCHEMA",
    "validate_intake",
    "extract_json_from_response",
    # 클라이언트/제공자
    "IntakeClient",
    "OpenAIIntakeProvider",
    "get_provider",
    # 스트리밍
    "StreamConsumer",
    "RelayManager",
    "extract_text_from_payload"
]
