"""스트림 릴레이

업스트림 스트리밍 세션의 이벤트를 SSE 프레임으로 다시 내보냅니다.
세션은 OPEN -> FINALIZING -> CLOSED 상태 기계로 표현되며,
프레임은 업스트림이 이벤트를 내보낸 순서 그대로 기록됩니다.
"""

import asyncio
import logging
import time
import uuid
from enum import Enum
from typing import AsyncGenerator, AsyncIterator, Dict, List, Optional

from ..adapters.base import ProviderEvent, ProviderEventKind
from ..exceptions import RelayCapacityError
from ..extraction import extract_json_from_response
from .message_types import (
    StreamEvent,
    create_message_event,
    create_final_event,
    create_end_event,
    create_error_event
)


logger = logging.getLogger(__name__)

# 이 시간보다 오래된 세션은 정리 대상
SESSION_MAX_AGE_SECONDS = 3600

# 응답 제너레이터가 이 시간 안에 시작되지 않으면 정리 대상 (응답 전 클라이언트 중단)
SESSION_START_TIMEOUT_SECONDS = 30


class RelayState(Enum):
    """릴레이 세션 상태"""
    OPEN = "open"
    FINALIZING = "finalizing"
    CLOSED = "closed"


class RelaySession:
    """HTTP 요청/응답 한 쌍 동안 유지되는 릴레이 세션

    하나의 업스트림 스트리밍 세션을 구독하고 하나의 HTTP 응답에 기록합니다.
    """

    def __init__(self, session_id: str, provider_events: AsyncIterator[ProviderEvent]):
        self.session_id = session_id
        self.state = RelayState.OPEN
        self.created_at = time.monotonic()
        self.started = False
        self._provider_events = provider_events

    @property
    def is_active(self) -> bool:
        return self.state != RelayState.CLOSED

    def is_stale(self, now: float) -> bool:
        """정리 대상 여부 (닫힘, 시작되지 않음, 최대 수명 초과)"""
        if not self.is_active:
            return True
        age = now - self.created_at
        if not self.started and age > SESSION_START_TIMEOUT_SECONDS:
            return True
        return age > SESSION_MAX_AGE_SECONDS

    def handle(self, event: ProviderEvent) -> Optional[StreamEvent]:
        """업스트림 이벤트 하나로 상태를 전이하고 내보낼 이벤트를 반환합니다"""
        if self.state == RelayState.CLOSED:
            logger.debug(f"닫힌 세션의 이벤트 무시: {self.session_id}")
            return None

        if event.kind == ProviderEventKind.MESSAGE:
            if self.state == RelayState.FINALIZING:
                # final 프레임은 항상 마지막 data 프레임이어야 함
                logger.warning(f"최종 메시지 이후 도착한 증분 이벤트 무시: {self.session_id}")
                return None
            return create_message_event(event.payload)

        if event.kind == ProviderEventKind.FINAL_MESSAGE:
            if self.state == RelayState.FINALIZING:
                logger.warning(f"중복 최종 메시지 무시: {self.session_id}")
                return None
            self.state = RelayState.FINALIZING
            data = extract_json_from_response(event.payload)
            logger.info(f"최종 결과 추출 {'성공' if data is not None else '실패'}: {self.session_id}")
            return create_final_event(data)

        logger.warning(f"알 수 없는 업스트림 이벤트: {event.kind}")
        return None

    def finish(self) -> StreamEvent:
        """업스트림 정상 종료"""
        self.state = RelayState.CLOSED
        logger.info(f"스트리밍 종료: {self.session_id}")
        return create_end_event()

    def fail(self, error: BaseException) -> StreamEvent:
        """업스트림 오류 종료 (오류 내용은 서버 로그에만 기록)"""
        self.state = RelayState.CLOSED
        logger.error(f"[SSE stream error] 세션 {self.session_id}: {error}", exc_info=error)
        return create_error_event()

    async def frames(self) -> AsyncGenerator[str, None]:
        """SSE 프레임 문자열을 생성하는 제너레이터"""
        self.started = True
        if self.state == RelayState.CLOSED:
            # 시작 전에 정리된 세션
            await self._close_upstream()
            return

        try:
            try:
                async for provider_event in self._provider_events:
                    stream_event = self.handle(provider_event)
                    if stream_event is not None:
                        yield stream_event.to_sse_format()
            except Exception as e:
                yield self.fail(e).to_sse_format()
                return
            yield self.finish().to_sse_format()
        finally:
            if self.state != RelayState.CLOSED:
                # 클라이언트가 연결을 끊은 경우
                self.state = RelayState.CLOSED
                logger.info(f"클라이언트 중단으로 세션 종료: {self.session_id}")
            await self._close_upstream()

    async def _close_upstream(self):
        aclose = getattr(self._provider_events, "aclose", None)
        if aclose is None:
            return
        try:
            await aclose()
        except Exception as e:
            logger.warning(f"업스트림 세션 정리 실패 (세션: {self.session_id}): {e}")


class RelayManager:
    """릴레이 세션 관리자

    단일 책임 원칙: 릴레이 세션들의 생명주기 관리만 담당
    """

    def __init__(self, max_sessions: int = 50):
        self.max_sessions = max_sessions
        self.sessions: Dict[str, RelaySession] = {}
        self._lock = asyncio.Lock()
        self._logger = logging.getLogger(__name__)

    async def create_session(self, provider_events: AsyncIterator[ProviderEvent]) -> RelaySession:
        """새 릴레이 세션 생성

        Raises:
            RelayCapacityError: 최대 세션 수를 초과한 경우
        """
        await self.cleanup_inactive_sessions()

        async with self._lock:
            if len(self.sessions) >= self.max_sessions:
                raise RelayCapacityError(self.max_sessions)

            session_id = f"relay_{uuid.uuid4().hex[:8]}"
            session = RelaySession(session_id, provider_events)
            self.sessions[session_id] = session

            self._logger.info(f"릴레이 세션 생성: {session_id}")
            return session

    async def remove_session(self, session_id: str):
        """세션 제거"""
        async with self._lock:
            if self.sessions.pop(session_id, None) is not None:
                self._logger.info(f"릴레이 세션 제거: {session_id}")

    async def stream_session(self, session: RelaySession) -> AsyncGenerator[str, None]:
        """세션의 프레임을 내보내고 끝나면 세션을 제거합니다"""
        frames = session.frames()
        try:
            async for frame in frames:
                yield frame
        finally:
            await frames.aclose()
            await self.remove_session(session.session_id)

    async def cleanup_inactive_sessions(self):
        """비활성 세션들 정리"""
        current_time = time.monotonic()
        async with self._lock:
            inactive = [
                session_id
                for session_id, session in self.sessions.items()
                if session.is_stale(current_time)
            ]
            for session_id in inactive:
                self.sessions.pop(session_id).state = RelayState.CLOSED

        if inactive:
            self._logger.info(f"비활성 세션 {len(inactive)}개 정리 완료")

    def get_session_count(self) -> int:
        """현재 세션 수 반환"""
        return len(self.sessions)

    def get_session_ids(self) -> List[str]:
        """현재 세션 ID 목록 반환"""
        return list(self.sessions.keys())


# 전역 릴레이 매니저 인스턴스
_relay_manager: Optional[RelayManager] = None


def get_relay_manager() -> RelayManager:
    """전역 릴레이 매니저 인스턴스 반환 (싱글톤 패턴)"""
    global _relay_manager
    if _relay_manager is None:
        _relay_manager = RelayManager()
    return _relay_manager
