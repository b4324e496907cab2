"""스트리밍 모듈

SSE(Server-Sent Events) 기반 릴레이(서버 측)와 소비자(클라이언트 측)를 제공합니다.
"""

from .message_types import (
    SSE_HEADERS,
    SSE_MEDIA_TYPE,
    StreamEventType,
    StreamEvent,
    create_message_event,
    create_final_event,
    create_end_event,
    create_error_event
)

from .text_extraction import (
    DEFAULT_EXTRACTORS,
    extract_text_from_payload
)

from .relay import (
    RelayState,
    RelaySession,
    RelayManager,
    get_relay_manager
)

from .consumer import (
    SSEFrameParser,
    ConsumerSession,
    StreamConsumer
)

__all__ = [
    # 메시지 타입
    'SSE_HEADERS',
    'SSE_MEDIA_TYPE',
    'StreamEventType',
    'StreamEvent',
    'create_message_event',
    'create_final_event',
    'create_end_event',
    'create_error_event',

    # 텍스트 추출
    'DEFAULT_EXTRACTORS',
    'extract_text_from_payload',

    # 릴레이
    'RelayState',
    'RelaySession',
    'RelayManager',
    'get_relay_manager',

    # 소비자
    'SSEFrameParser',
    'ConsumerSession',
    'StreamConsumer'
]
