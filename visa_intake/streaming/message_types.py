"""SSE 스트리밍 메시지 타입 정의

SSE(Server-Sent Events)를 통해 전송되는 이벤트 타입들을 정의합니다.
message/final 이벤트는 JSON으로 직렬화되어 data: 프레임으로 전송되고,
end/error 이벤트는 데이터 없는 event: 줄로 스트림 종료를 알립니다.
"""

from enum import Enum
from typing import Dict, Any, Optional
from dataclasses import dataclass
import json


SSE_MEDIA_TYPE = "text/event-stream"

# SSE 응답 헤더 (charset 없이 Content-Type 고정)
SSE_HEADERS: Dict[str, str] = {
    "Content-Type": SSE_MEDIA_TYPE,
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
}


class StreamEventType(Enum):
    """스트림 이벤트 타입 열거형"""
    MESSAGE = "message"  # 업스트림 증분 이벤트
    FINAL = "final"      # 최종 구조화 결과
    END = "end"          # 정상 종료
    ERROR = "error"      # 오류 종료


@dataclass
class StreamEvent:
    """SSE 스트림 이벤트 데이터 클래스

    message 이벤트는 payload를, final 이벤트는 data를 가집니다.
    """
    type: StreamEventType
    payload: Optional[Any] = None
    data: Optional[Dict[str, Any]] = None

    @property
    def is_terminal(self) -> bool:
        """스트림을 닫는 이벤트인지 여부"""
        return self.type in (StreamEventType.END, StreamEventType.ERROR)

    def to_dict(self) -> Dict[str, Any]:
        """딕셔너리로 변환 (data: 프레임 본문)"""
        if self.type == StreamEventType.MESSAGE:
            return {"event": self.type.value, "payload": self.payload}
        if self.type == StreamEventType.FINAL:
            return {"event": self.type.value, "data": self.data}
        return {"event": self.type.value}

    def to_json(self) -> str:
        """JSON 문자열로 변환"""
        return json.dumps(self.to_dict(), ensure_ascii=False, default=str)

    def to_sse_format(self) -> str:
        """SSE 형식으로 변환

        종료 이벤트는 데이터 없이 이벤트 이름만 전송합니다.
        업스트림 오류 내용은 절대 프레임에 포함하지 않습니다.
        """
        if self.is_terminal:
            return f"event: {self.type.value}\n"
        return f"data: {self.to_json()}\n\n"


def create_message_event(payload: Any) -> StreamEvent:
    """증분 메시지 이벤트 생성"""
    return StreamEvent(type=StreamEventType.MESSAGE, payload=payload)


def create_final_event(data: Optional[Dict[str, Any]]) -> StreamEvent:
    """최종 결과 이벤트 생성 (추출 실패 시 data=None)"""
    return StreamEvent(type=StreamEventType.FINAL, data=data)


def create_end_event() -> StreamEvent:
    """정상 종료 이벤트 생성"""
    return StreamEvent(type=StreamEventType.END)


def create_error_event() -> StreamEvent:
    """오류 종료 이벤트 생성"""
    return StreamEvent(type=StreamEventType.ERROR)
