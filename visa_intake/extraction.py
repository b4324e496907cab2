"""제공자 응답에서 구조화된 JSON 추출

업스트림 응답 형태는 SDK 버전마다 다르므로 다음 순서로 시도합니다.

1. 집계된 평문 필드(output_text)를 JSON으로 파싱
2. output[0].content[0] 이 output_json 타입이면 내장 JSON 사용
3. 응답 전체를 직렬화한 뒤 끝에 붙은 {...} 구간을 정규식으로 찾아 파싱

어느 단계에서도 예외를 호출자에게 전파하지 않으며, 실패하면 None을 반환합니다.
"""

import json
import logging
import re
from typing import Any, Dict, Optional

from .models import validate_intake


logger = logging.getLogger(__name__)

TRAILING_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}$")


def _as_dict(response: Any) -> Dict[str, Any]:
    """SDK 객체 또는 dict를 dict로 변환"""
    if isinstance(response, dict):
        return response
    if hasattr(response, "model_dump"):
        return response.model_dump(mode="json")
    return {}


def _get_output_text(response: Any) -> Optional[str]:
    if isinstance(response, dict):
        text = response.get("output_text")
    else:
        text = getattr(response, "output_text", None)
    return text if isinstance(text, str) and text else None


def _parse_output_text(response: Any) -> Optional[Any]:
    text = _get_output_text(response)
    if text is None:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        logger.debug("output_text가 JSON이 아닙니다")
        return None


def _read_output_json(data: Dict[str, Any]) -> Optional[Any]:
    try:
        content = data["output"][0]["content"][0]
    except (KeyError, IndexError, TypeError):
        return None
    if isinstance(content, dict) and content.get("type") == "output_json":
        return content.get("json")
    return None


def _scan_trailing_object(data: Any) -> Optional[Any]:
    raw = json.dumps(data, default=str)
    match = TRAILING_OBJECT_PATTERN.search(raw)
    if not match:
        return None
    return json.loads(match.group(0))


def extract_json_from_response(response: Any) -> Optional[Dict[str, Any]]:
    """제공자 응답에서 스키마를 만족하는 인테이크 객체를 추출합니다

    Args:
        response: SDK 응답 객체 또는 동일한 형태의 dict

    Returns:
        검증된 인테이크 dict 또는 None
    """
    if response is None:
        return None

    try:
        parsed = _parse_output_text(response)
        if parsed is not None:
            return validate_intake(parsed)

        data = _as_dict(response)
        parsed = _read_output_json(data)
        if parsed is not None:
            return validate_intake(parsed)

        parsed = _scan_trailing_object(data)
        if parsed is not None:
            result = validate_intake(parsed)
            if result is not None:
                logger.warning("정규식 폴백으로 JSON을 추출했습니다")
            return result
    except Exception as e:
        logger.warning(f"응답에서 JSON 추출 실패: {e}")
        return None

    logger.info("응답에서 추출 가능한 JSON이 없습니다")
    return None
