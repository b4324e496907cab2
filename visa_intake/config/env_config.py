"""비자 인테이크 환경변수 설정 모듈

모든 환경변수를 중앙에서 관리하고 타입 검증을 제공합니다.
단일 책임 원칙: 환경변수 설정 관리만 담당
개방-폐쇄 원칙: 새로운 환경변수 추가 시 기존 코드 수정 없이 확장 가능
"""

import os
from pathlib import Path
from functools import lru_cache

from pydantic import Field, validator
from pydantic_settings import BaseSettings


# 패키지에 포함된 기본 질문 설정 파일
DEFAULT_QUESTIONS_CONFIG = str(Path(__file__).parent / "questions.json")


class IntakeSettings(BaseSettings):
    """비자 인테이크 환경변수 설정 클래스

    Pydantic BaseSettings를 사용하여 환경변수를 타입 안전하게 관리합니다.
    모든 환경변수는 이 클래스를 통해 접근해야 합니다.
    """

    # OpenAI API 설정
    openai_api_key: str = Field(..., description="OpenAI API 키 (필수)")
    openai_model: str = Field(default="gpt-5", description="사용할 OpenAI 모델명")
    openai_tts_model: str = Field(default="gpt-4o-mini-tts", description="음성 합성 모델명")
    openai_tts_voice: str = Field(default="alloy", description="기본 음성")

    # 서버 설정
    host: str = Field(default="0.0.0.0", description="서버 바인딩 주소")
    port: int = Field(default=3000, description="서버 포트")
    max_relay_sessions: int = Field(default=50, description="동시 스트리밍 세션 최대 수")

    # 질문 설정
    questions_config: str = Field(default=DEFAULT_QUESTIONS_CONFIG, description="질문 설정 파일 경로")

    # 클라이언트(CLI) 설정
    api_base_url: str = Field(default="http://localhost:3000", description="CLI가 접속할 서버 주소")

    class Config:
        """Pydantic 설정"""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False  # 환경변수 대소문자 구분 안함
        extra = "ignore"

    @validator("port")
    def validate_port(cls, v):
        """포트 범위 검증"""
        if not 1 <= v <= 65535:
            raise ValueError(f"포트는 1-65535 범위여야 합니다. 현재 값: {v}")
        return v

    @validator("max_relay_sessions")
    def validate_max_relay_sessions(cls, v):
        """최대 세션 수 검증"""
        if v <= 0:
            raise ValueError(f"최대 세션 수는 양수여야 합니다. 현재 값: {v}")
        return v

    @validator("questions_config")
    def validate_questions_config_path(cls, v):
        """질문 설정 파일 경로 검증"""
        # 상대 경로인 경우 절대 경로로 변환
        if not os.path.isabs(v):
            v = os.path.abspath(v)
        return v

    @validator("api_base_url")
    def validate_api_base_url(cls, v):
        """끝의 슬래시 제거"""
        return v.rstrip("/")

    def get_openai_config(self) -> dict:
        """OpenAI 설정을 딕셔너리로 반환

        Returns:
            OpenAI 설정 딕셔너리
        """
        return {
            "api_key": self.openai_api_key,
            "model": self.openai_model,
        }

    def get_tts_config(self) -> dict:
        """음성 합성 설정을 딕셔너리로 반환"""
        return {
            "model": self.openai_tts_model,
            "voice": self.openai_tts_voice,
        }


@lru_cache()
def get_settings() -> IntakeSettings:
    """환경변수 설정 인스턴스를 반환하는 싱글톤 함수

    lru_cache 데코레이터를 사용하여 한 번만 로드하고 재사용합니다.

    Returns:
        IntakeSettings 인스턴스

    Raises:
        ValueError: 필수 환경변수가 없거나 잘못된 값인 경우
    """
    try:
        return IntakeSettings()
    except Exception as e:
        raise ValueError(f"환경변수 설정 로드 실패: {e}")


def reload_settings() -> IntakeSettings:
    """설정을 다시 로드합니다 (테스트용)

    캐시를 클리어하고 새로운 설정 인스턴스를 생성합니다.
    주로 테스트에서 환경변수를 변경한 후 사용합니다.
    """
    get_settings.cache_clear()
    return get_settings()
