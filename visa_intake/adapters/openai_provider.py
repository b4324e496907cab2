"""OpenAI 제공자 어댑터

OpenAI Responses API 클라이언트 인스턴스 관리와 인테이크 추출 호출을 제공합니다.
단일 책임 원칙: 업스트림 LLM 호출만 담당합니다.

환경변수 설정은 visa_intake.config.env_config 모듈에서 중앙 관리됩니다.
"""

import logging
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

from openai import AsyncOpenAI

from ..config.env_config import get_settings
from ..exceptions import ProviderError
from ..models import VISA_INTAKE_FORMAT
from .base import ProviderEvent, ProviderEventKind

logger = logging.getLogger(__name__)

# 단건 추출용 시스템 지시문
EXTRACTION_INSTRUCTION = (
    "You are a visa intake assistant. Extract ONLY the fields in the schema. "
    "If a field is unknown, return null."
)

# 스트리밍용 시스템 지시문
STREAMING_INSTRUCTION = "You are a concise visa intake assistant."

AUDIO_FORMAT = "mp3"


def _build_input(instruction: str, user_message: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": instruction},
        {"role": "user", "content": user_message}
    ]


class OpenAIIntakeProvider:
    """OpenAI Responses API 기반 인테이크 제공자

    단건 호출과 스트리밍 호출 모두 같은 JSON 스키마 제약을 사용합니다.
    """

    def __init__(self, client: AsyncOpenAI, model: str,
                 tts_model: str = "gpt-4o-mini-tts", tts_voice: str = "alloy"):
        self._client = client
        self.model = model
        self.tts_model = tts_model
        self.tts_voice = tts_voice
        self._logger = logging.getLogger(__name__)

    async def create_intake(self, user_message: str) -> Any:
        """단건 구조화 추출 호출

        Returns:
            원본 응답 객체 (추출은 호출자가 수행)
        """
        return await self._client.responses.create(
            model=self.model,
            input=_build_input(EXTRACTION_INSTRUCTION, user_message),
            text={"format": VISA_INTAKE_FORMAT}
        )

    async def stream_intake(self, user_message: str) -> AsyncIterator[ProviderEvent]:
        """스트리밍 추출 세션

        업스트림 이벤트마다 (완료 요약 이벤트 포함) MESSAGE를, 마지막에 FINAL_MESSAGE를 내보냅니다.
        업스트림 오류는 그대로 전파됩니다.
        """
        async with self._client.responses.stream(
            model=self.model,
            input=_build_input(STREAMING_INSTRUCTION, user_message),
            text={"format": VISA_INTAKE_FORMAT}
        ) as stream:
            async for event in stream:
                yield ProviderEvent(ProviderEventKind.MESSAGE, event.model_dump(mode="json"))

            final_response = await stream.get_final_response()
            yield ProviderEvent(ProviderEventKind.FINAL_MESSAGE, final_response)

    async def synthesize_speech(self, text: str, voice: Optional[str] = None) -> Tuple[bytes, str]:
        """텍스트를 음성으로 변환

        Returns:
            (오디오 바이트, 포맷) 튜플
        """
        response = await self._client.audio.speech.create(
            model=self.tts_model,
            voice=voice or self.tts_voice,
            input=text,
            response_format=AUDIO_FORMAT
        )
        audio = await response.aread()
        self._logger.info(f"음성 합성 완료 - {len(audio)} bytes")
        return audio, AUDIO_FORMAT


# 제공자 인스턴스 (싱글톤 패턴)
_provider_instance: Optional[OpenAIIntakeProvider] = None


def get_provider() -> OpenAIIntakeProvider:
    """OpenAI 인테이크 제공자 인스턴스를 반환합니다

    환경변수 설정 모듈에서 설정을 가져와 클라이언트를 초기화합니다.
    싱글톤 패턴으로 인스턴스를 재사용합니다.

    Raises:
        ProviderError: 환경변수 설정이 잘못된 경우
    """
    global _provider_instance

    if _provider_instance is None:
        try:
            settings = get_settings()
            openai_config = settings.get_openai_config()
            tts_config = settings.get_tts_config()

            _provider_instance = OpenAIIntakeProvider(
                client=AsyncOpenAI(api_key=openai_config["api_key"]),
                model=openai_config["model"],
                tts_model=tts_config["model"],
                tts_voice=tts_config["voice"]
            )

            logger.info(
                f"OpenAI 제공자 초기화 완료 - "
                f"모델: {openai_config['model']}, "
                f"TTS 모델: {tts_config['model']}"
            )

        except Exception as e:
            raise ProviderError(f"제공자 초기화 실패: {e}")

    return _provider_instance


def reset_provider():
    """제공자 인스턴스를 재설정합니다 (테스트용)"""
    global _provider_instance
    _provider_instance = None
    logger.info("제공자 인스턴스 재설정 완료")
