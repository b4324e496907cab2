"""업스트림 제공자 인터페이스

릴레이와 HTTP 계층은 이 인터페이스에만 의존하므로
테스트에서는 가짜 제공자를 주입할 수 있습니다.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterator, Optional, Protocol, Tuple


class ProviderEventKind(Enum):
    """업스트림 스트리밍 세션이 내보내는 이벤트 종류

    end/error 는 이벤트로 전달되지 않고 반복 종료와 예외로 표현됩니다.
    """
    MESSAGE = "message"
    FINAL_MESSAGE = "final_message"


@dataclass(frozen=True)
class ProviderEvent:
    """업스트림 이벤트 하나"""
    kind: ProviderEventKind
    payload: Any = None


class IntakeProvider(Protocol):
    """업스트림 LLM 제공자가 지원해야 하는 연산"""

    async def create_intake(self, user_message: str) -> Any:
        """단건 구조화 추출 호출 (원본 응답 객체 반환)"""
        ...

    def stream_intake(self, user_message: str) -> AsyncIterator[ProviderEvent]:
        """스트리밍 추출 세션"""
        ...

    async def synthesize_speech(self, text: str, voice: Optional[str] = None) -> Tuple[bytes, str]:
        """텍스트를 음성으로 변환 (오디오 바이트, 포맷)"""
        ...
