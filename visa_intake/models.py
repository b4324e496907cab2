"""비자 인테이크 데이터 모델

이 모듈은 비자 인테이크 시스템에서 사용하는 데이터 모델을 정의합니다.
Pydantic 모델로 구조화된 결과의 스키마를 검증하고,
업스트림 제공자에게 전달하는 JSON 스키마도 함께 정의합니다.
"""

import logging
from typing import Dict, Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError


logger = logging.getLogger(__name__)


# 업스트림 제공자에게 생성 제약으로 전달되는 JSON 스키마
VISA_INTAKE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "full_name": {"type": "string", "minLength": 1},
        "dob": {"type": "string", "pattern": "^\\d{4}-\\d{2}-\\d{2}$"},
        "passport_number": {"type": "string", "minLength": 5},
        "nationality": {"type": "string", "minLength": 2}
    },
    "required": ["full_name", "dob", "passport_number", "nationality"]
}

# Responses API text.format 설정
VISA_INTAKE_FORMAT: Dict[str, Any] = {
    "type": "json_schema",
    "name": "VisaIntake",
    "schema": VISA_INTAKE_SCHEMA
}


class VisaIntake(BaseModel):
    """구조화된 비자 인테이크 결과

    네 필드가 모두 채워진 경우에만 유효하며, 추가 필드는 허용하지 않습니다.
    """
    model_config = ConfigDict(extra="forbid")

    full_name: str = Field(..., min_length=1)
    dob: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    passport_number: str = Field(..., min_length=5)
    nationality: str = Field(..., min_length=2)


def validate_intake(data: Any) -> Optional[Dict[str, Any]]:
    """스키마를 만족하면 원본 객체를, 아니면 None을 반환합니다

    부분적으로 채워진 객체는 유효한 결과로 취급하지 않습니다.
    """
    if not isinstance(data, dict):
        return None
    try:
        VisaIntake.model_validate(data)
    except ValidationError as e:
        logger.info(f"스키마 검증 실패로 결과를 폐기합니다: {e.error_count()}개 오류")
        return None
    return data


class ChatResponse(BaseModel):
    """단건 추출 응답 모델"""
    data: Optional[VisaIntake] = None


class TTSResponse(BaseModel):
    """음성 합성 응답 모델"""
    audioBase64: str
    format: str = "mp3"
