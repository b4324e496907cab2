"""인테이크 API 클라이언트

다단계 입력 폼 쪽에서 사용하는 단건 제출, 질문 조회, 질문 음성 재생용 HTTP 클라이언트입니다.
스트리밍은 visa_intake.streaming.consumer.StreamConsumer 를 사용합니다.
"""

import base64
import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from ..config.question_config import QuestionDefinition, compose_intake_message
from ..exceptions import IntakeClientError
from ..models import validate_intake


class IntakeClient:
    """인테이크 서버 HTTP 클라이언트"""

    def __init__(self, base_url: str, client: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=60.0)
        self._owns_client = client is None
        self._logger = logging.getLogger(__name__)

    async def submit(self, user_message: str) -> Optional[Dict[str, Any]]:
        """자유 텍스트를 제출하고 검증된 구조화 결과를 반환합니다

        Raises:
            IntakeClientError: 서버가 오류 상태를 반환한 경우
        """
        response = await self._client.post(
            f"{self.base_url}/api/chat",
            json={"userMessage": user_message}
        )
        if response.is_error:
            raise IntakeClientError(f"Submit failed ({response.status_code})", response.status_code)

        body = response.json()
        data = body.get("data") if isinstance(body, dict) else None
        return validate_intake(data)

    async def submit_answers(self, answers: Dict[str, str],
                             questions: List[QuestionDefinition]) -> Optional[Dict[str, Any]]:
        """폼 답변을 한 메시지로 합쳐 제출합니다"""
        return await self.submit(compose_intake_message(questions, answers))

    async def get_questions(self) -> List[QuestionDefinition]:
        """서버에 설정된 질문 목록을 조회합니다"""
        response = await self._client.get(f"{self.base_url}/api/questions")
        if response.is_error:
            raise IntakeClientError(f"Questions failed ({response.status_code})", response.status_code)
        return [QuestionDefinition(**q) for q in response.json().get("questions", [])]

    async def speak(self, text: str, voice: Optional[str] = None) -> Tuple[bytes, str]:
        """질문 텍스트를 음성으로 변환합니다

        Returns:
            (오디오 바이트, 포맷) 튜플
        """
        body = {"text": text}
        if voice:
            body["voice"] = voice

        response = await self._client.post(f"{self.base_url}/api/tts", json=body)
        if response.is_error:
            raise IntakeClientError(f"TTS failed with status {response.status_code}", response.status_code)

        payload = response.json()
        audio_base64 = payload.get("audioBase64")
        if not audio_base64:
            raise IntakeClientError("TTS response missing audioBase64")
        return base64.b64decode(audio_base64), payload.get("format") or "mp3"

    async def aclose(self):
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
