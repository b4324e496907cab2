"""구조화 결과 추출과 스키마 검증 테스트"""

import json
import logging

import pytest
from pydantic import BaseModel

from visa_intake.extraction import extract_json_from_response
from visa_intake.models import validate_intake


class FakeResponse(BaseModel):
    """SDK 응답 객체 대역 (output_text 는 비어 있음)"""
    id: str = "resp_1"
    output_text: str = ""
    output: list = []


class TestExtractJsonFromResponse:
    """추출 단계별 테스트"""

    def test_output_text(self, jane_doe):
        """1단계: 집계된 평문 필드"""
        assert extract_json_from_response({"output_text": json.dumps(jane_doe)}) == jane_doe

    def test_output_json_block(self, jane_doe):
        """2단계: output_json 콘텐츠 블록"""
        response = {"output": [{"content": [{"type": "output_json", "json": jane_doe}]}]}
        assert extract_json_from_response(response) == jane_doe

    def test_output_json_from_sdk_object(self, jane_doe):
        """2단계: model_dump 를 가진 SDK 객체"""
        response = FakeResponse(output=[{"content": [{"type": "output_json", "json": jane_doe}]}])
        assert extract_json_from_response(response) == jane_doe

    def test_output_text_attribute_on_object(self, jane_doe):
        """1단계: 객체 속성 output_text"""
        response = FakeResponse(output_text=json.dumps(jane_doe))
        assert extract_json_from_response(response) == jane_doe

    def test_trailing_object_fallback(self, jane_doe, caplog):
        """3단계: 직렬화된 응답 전체가 결과 객체인 경우"""
        with caplog.at_level(logging.WARNING, logger="visa_intake.extraction"):
            assert extract_json_from_response(dict(jane_doe)) == jane_doe
        assert "정규식 폴백" in caplog.text

    def test_trailing_object_fallback_failure_not_logged_as_success(self, caplog):
        """검증에 실패한 폴백은 성공 경고를 남기지 않음"""
        with caplog.at_level(logging.WARNING, logger="visa_intake.extraction"):
            assert extract_json_from_response({"status": "completed", "output": []}) is None
        assert "정규식 폴백" not in caplog.text

    def test_output_json_of_other_type_ignored(self, jane_doe):
        """output_json 이 아닌 블록은 2단계에서 건너뜀"""
        response = {"output": [{"content": [{"type": "output_text", "text": json.dumps(jane_doe)}]}]}
        assert extract_json_from_response(response) is None

    def test_not_json(self):
        """JSON이 아닌 평문"""
        assert extract_json_from_response({"output_text": "not json"}) is None

    def test_partial_object(self, jane_doe):
        """일부 필드만 있으면 None"""
        partial = {"full_name": jane_doe["full_name"]}
        assert extract_json_from_response({"output_text": json.dumps(partial)}) is None

    def test_extra_field_rejected(self, jane_doe):
        """스키마 밖 필드가 있으면 None"""
        extended = dict(jane_doe, visa_type="tourist")
        assert extract_json_from_response({"output_text": json.dumps(extended)}) is None

    @pytest.mark.parametrize("response", [None, {}, {"output": []}, {"output": None}, object()])
    def test_empty_or_unknown_shapes(self, response):
        """어떤 형태에서도 예외 없이 None"""
        assert extract_json_from_response(response) is None


class TestValidateIntake:
    """스키마 검증 테스트"""

    def test_valid_object_returned_unchanged(self, jane_doe):
        """유효하면 원본 그대로"""
        assert validate_intake(jane_doe) is jane_doe

    @pytest.mark.parametrize("field,value", [
        ("full_name", ""),
        ("dob", "12/04/1991"),
        ("dob", "1991-4-12"),
        ("passport_number", "AB12"),
        ("nationality", "U"),
        ("nationality", 44),
    ])
    def test_constraint_violations(self, jane_doe, field, value):
        """필드 제약 위반"""
        jane_doe[field] = value
        assert validate_intake(jane_doe) is None

    @pytest.mark.parametrize("data", [None, "text", [], 1])
    def test_non_objects(self, data):
        """객체가 아니면 None"""
        assert validate_intake(data) is None
