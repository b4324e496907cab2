"""스트림 소비자 (클라이언트 측)

릴레이가 보내는 SSE 바이트 스트림을 읽어 이벤트 단위로 복원하고,
누적 트랜스크립트와 최종 구조화 결과를 유지합니다.

프레임 처리 순서:
1. 바이트 청크를 스트림 인식 UTF-8 디코더로 디코딩해 버퍼에 추가
2. 버퍼를 빈 줄(\\n\\n) 기준으로 나누고 마지막 조각은 다음 청크를 위해 보관
3. data: 로 시작하는 프레임만 JSON으로 파싱 (실패한 프레임은 조용히 버림)
4. message 이벤트는 텍스트를 트랜스크립트에 이어붙이고, final 이벤트는 결과를 통째로 교체
"""

import asyncio
import codecs
import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from ..exceptions import StreamConsumerError
from ..models import validate_intake
from .text_extraction import extract_text_from_payload


logger = logging.getLogger(__name__)

FRAME_DELIMITER = "\n\n"
DATA_PREFIX = "data:"


class SSEFrameParser:
    """버퍼링 SSE 프레임 파서

    청크 경계(멀티바이트 문자 중간, 구분자 중간 포함)와 무관하게
    같은 이벤트 순서를 복원합니다.
    """

    def __init__(self):
        self.buffer = ""
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def reset(self):
        """버퍼와 디코더 상태 초기화"""
        self.buffer = ""
        self._decoder.reset()

    def feed(self, chunk: bytes) -> List[Dict[str, Any]]:
        """청크를 추가하고 완성된 프레임에서 파싱된 이벤트 목록을 반환합니다"""
        self.buffer += self._decoder.decode(chunk)
        parts = self.buffer.split(FRAME_DELIMITER)
        self.buffer = parts.pop()

        events = []
        for part in parts:
            event = self.parse_frame(part)
            if event is not None:
                events.append(event)
        return events

    @staticmethod
    def parse_frame(frame: str) -> Optional[Any]:
        """프레임 하나를 파싱합니다 (data: 프레임이 아니거나 JSON 오류면 None)"""
        line = frame.strip()
        if not line.startswith(DATA_PREFIX):
            return None

        json_str = line[len(DATA_PREFIX):]
        if json_str.startswith(" "):
            json_str = json_str[1:]

        try:
            return json.loads(json_str)
        except json.JSONDecodeError:
            logger.debug(f"잘못된 JSON 프레임 무시: {json_str[:100]}")
            return None


class ConsumerSession:
    """미결 요청 하나 동안 유지되는 소비자 세션 컨텍스트"""

    def __init__(self):
        self.parser = SSEFrameParser()
        self.events: List[Any] = []
        self.transcript = ""
        self.final_result: Optional[Dict[str, Any]] = None
        self.error: Optional[str] = None
        self.is_streaming = False
        self.cancelled = False
        self.task: Optional[asyncio.Task] = None

    def apply(self, event: Any):
        """파싱된 이벤트 하나를 세션 상태에 반영합니다"""
        self.events.append(event)
        if not isinstance(event, dict):
            return

        kind = event.get("event")
        if kind == "message" and event.get("payload"):
            text = extract_text_from_payload(event["payload"])
            if text:
                self.transcript += text
        elif kind == "final":
            self.final_result = validate_intake(event.get("data"))

    def feed(self, chunk: bytes):
        """바이트 청크를 파싱해 상태에 반영합니다"""
        for event in self.parser.feed(chunk):
            self.apply(event)

    def cancel(self):
        """진행 중인 읽기 루프 중단 (상태는 그대로 유지)"""
        self.cancelled = True
        if self.task is not None and not self.task.done():
            self.task.cancel()

    async def wait(self):
        """읽기 루프가 끝날 때까지 대기"""
        if self.task is None:
            return
        try:
            await self.task
        except asyncio.CancelledError:
            # 시작 전에 취소된 태스크
            if not (self.cancelled and self.task.cancelled()):
                raise


class StreamConsumer:
    """릴레이 스트림 소비자

    소비자 인스턴스당 한 번에 하나의 세션만 활성화되며,
    새 세션을 시작하면 이전 세션은 취소되고 폐기됩니다.
    """

    def __init__(self, base_url: str, client: Optional[httpx.AsyncClient] = None,
                 stream_path: str = "/api/chat/stream"):
        self.base_url = base_url.rstrip("/")
        self.stream_path = stream_path
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(10.0, read=None))
        self._owns_client = client is None
        self._session: Optional[ConsumerSession] = None
        self._logger = logging.getLogger(__name__)

    @property
    def session(self) -> Optional[ConsumerSession]:
        return self._session

    @property
    def events(self) -> List[Any]:
        return list(self._session.events) if self._session else []

    @property
    def transcript(self) -> str:
        return self._session.transcript if self._session else ""

    @property
    def final_result(self) -> Optional[Dict[str, Any]]:
        return self._session.final_result if self._session else None

    @property
    def error(self) -> Optional[str]:
        return self._session.error if self._session else None

    @property
    def is_streaming(self) -> bool:
        return self._session.is_streaming if self._session else False

    def start(self, user_message: str) -> ConsumerSession:
        """스트리밍 세션을 백그라운드 태스크로 시작합니다

        Raises:
            ValueError: 메시지가 비어 있거나 문자열이 아닌 경우
        """
        if not isinstance(user_message, str) or not user_message:
            raise ValueError("userMessage (string) is required")

        self.cancel()

        session = ConsumerSession()
        session.is_streaming = True
        self._session = session
        session.task = asyncio.create_task(self._read_loop(session, user_message))
        return session

    async def stream(self, user_message: str) -> ConsumerSession:
        """스트리밍 세션을 시작하고 끝날 때까지 대기합니다"""
        session = self.start(user_message)
        await session.wait()
        return session

    def cancel(self):
        """현재 세션 취소"""
        session = self._session
        if session is not None and session.is_streaming:
            session.cancel()
            session.is_streaming = False
            self._logger.info("스트리밍 세션 취소")

    async def _read_loop(self, session: ConsumerSession, user_message: str):
        url = f"{self.base_url}{self.stream_path}"
        try:
            async with self._client.stream("POST", url, json={"userMessage": user_message}) as response:
                if response.status_code >= 400:
                    raise StreamConsumerError(f"Stream failed with status {response.status_code}")
                async for chunk in response.aiter_bytes():
                    session.feed(chunk)
        except asyncio.CancelledError:
            if not session.cancelled:
                raise
            self._logger.debug("취소된 스트림 읽기 루프 종료")
        except (httpx.HTTPError, StreamConsumerError) as e:
            self._logger.error(f"스트림 오류: {e}")
            session.error = str(e) or "Stream error"
        finally:
            session.is_streaming = False

    async def aclose(self):
        """현재 세션을 취소하고 소유한 HTTP 클라이언트를 닫습니다"""
        session = self._session
        self.cancel()
        if session is not None and session.task is not None:
            await asyncio.gather(session.task, return_exceptions=True)
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
