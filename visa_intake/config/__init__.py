"""비자 인테이크 설정 패키지

환경변수 설정과 질문 설정 관련 모듈들을 포함합니다.
"""

# 환경변수 설정 모듈
from .env_config import (
    IntakeSettings,
    get_settings,
    reload_settings
)

# 질문 설정 모듈
from .question_config import (
    QuestionDefinition,
    ConfigReader,
    JSONConfigReader,
    QuestionConfigManager,
    compose_intake_message,
    create_config_manager,
    validate_answer
)

__all__ = [
    # 환경변수 설정
    "IntakeSettings",
    "get_settings",
    "reload_settings",
    # 질문 설정
    "QuestionDefinition",
    "ConfigReader",
    "JSONConfigReader",
    "QuestionConfigManager",
    "compose_intake_message",
    "create_config_manager",
    "validate_answer"
]
