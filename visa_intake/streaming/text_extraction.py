"""스트림 이벤트 페이로드에서 사람이 읽을 텍스트 추출

페이로드 형태는 제공자 릴리스마다 달라지므로, 형태별 추출기를
고정된 우선순위로 시도합니다. 각 추출기는 payload -> Optional[str] 순수 함수입니다.
"""

import logging
from typing import Any, Callable, Optional, Sequence


logger = logging.getLogger(__name__)

TextExtractor = Callable[[Any], Optional[str]]


def extract_delta(payload: Any) -> Optional[str]:
    """최상위 delta 문자열"""
    value = payload.get("delta")
    return value if isinstance(value, str) else None


def extract_text(payload: Any) -> Optional[str]:
    """최상위 text 문자열"""
    value = payload.get("text")
    return value if isinstance(value, str) else None


def extract_data_text(payload: Any) -> Optional[str]:
    """data.text 문자열"""
    data = payload.get("data")
    if isinstance(data, dict) and isinstance(data.get("text"), str):
        return data["text"]
    return None


def extract_response_content(payload: Any) -> Optional[str]:
    """response.output[0].content[*].text 를 순서대로 이어붙임"""
    content = payload["response"]["output"][0]["content"]
    if not isinstance(content, list):
        return None
    parts = [
        block["text"]
        for block in content
        if isinstance(block, dict) and isinstance(block.get("text"), str)
    ]
    joined = "".join(parts)
    return joined or None


DEFAULT_EXTRACTORS: Sequence[TextExtractor] = (
    extract_delta,
    extract_text,
    extract_data_text,
    extract_response_content,
)


def extract_text_from_payload(payload: Any,
                              extractors: Sequence[TextExtractor] = DEFAULT_EXTRACTORS) -> str:
    """첫 번째로 성공한 추출기의 결과를 반환합니다

    어떤 추출기도 적용되지 않거나 예외가 나면 빈 문자열을 반환합니다.
    """
    if not isinstance(payload, dict):
        return ""

    for extractor in extractors:
        try:
            text = extractor(payload)
        except (KeyError, IndexError, TypeError, AttributeError):
            continue
        if text is not None:
            return text
    return ""
