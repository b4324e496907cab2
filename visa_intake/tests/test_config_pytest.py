"""pytest 스타일 설정 테스트

질문 설정과 환경변수 설정을 함께 검증합니다.
"""

import json

import pytest

from visa_intake.config import (
    IntakeSettings,
    QuestionDefinition,
    compose_intake_message,
    get_settings,
    reload_settings,
    validate_answer
)
from visa_intake.config.env_config import DEFAULT_QUESTIONS_CONFIG


class TestQuestionConfig:
    """질문 설정 테스트 클래스"""

    def test_config_manager_creation(self, config_manager):
        """설정 관리자 생성 테스트"""
        assert config_manager is not None
        assert config_manager.get_questions() == []

    def test_load_default_questions(self, config_manager):
        """기본 질문 설정 로드 테스트"""
        questions = config_manager.load_questions(DEFAULT_QUESTIONS_CONFIG)

        assert [q.key for q in questions] == ["full_name", "dob", "nationality", "passport_number"]
        assert all(isinstance(q, QuestionDefinition) for q in questions)

    def test_questions_sorted_by_order(self, config_manager, tmp_path):
        """order 기준 정렬 테스트"""
        config_file = tmp_path / "questions.json"
        config_file.write_text(json.dumps([
            {"key": "b", "title": "B", "order": 2},
            {"key": "a", "title": "A", "order": 1},
        ]), encoding="utf-8")

        questions = config_manager.load_questions(str(config_file))

        assert [q.key for q in questions] == ["a", "b"]
        assert questions[0].type == "text"

    def test_get_individual_question(self, config_manager):
        """개별 질문 조회 테스트"""
        config_manager.load_questions(DEFAULT_QUESTIONS_CONFIG)

        dob = config_manager.get_question("dob")
        assert dob is not None
        assert dob.type == "date"
        assert config_manager.get_question("nonexistent") is None

    def test_invalid_config_file(self, config_manager):
        """잘못된 설정 파일 처리 테스트"""
        with pytest.raises(ValueError, match="설정 파일 읽기 실패"):
            config_manager.load_questions("nonexistent.json")

    def test_malformed_json(self, config_manager, tmp_path):
        """JSON 형식 오류 테스트"""
        config_file = tmp_path / "broken.json"
        config_file.write_text("{", encoding="utf-8")

        with pytest.raises(ValueError, match="설정 파일 읽기 실패"):
            config_manager.load_questions(str(config_file))

    def test_question_without_title(self):
        """title 이 비어 있으면 오류"""
        with pytest.raises(ValueError):
            QuestionDefinition(key="full_name", title=" ")

    @pytest.mark.parametrize("key,value,valid", [
        ("full_name", "Jane Doe", True),
        ("full_name", "   ", False),
        ("dob", "1991-04-12", True),
        ("dob", "12/04/1991", False),
        ("nationality", "UK", True),
        ("nationality", "", False),
        ("passport_number", " AB123 ", True),
        ("passport_number", "AB12 ", False),
        ("unknown", "", True),
    ])
    def test_validate_answer(self, key, value, valid):
        """매개변수화된 필드 검증 테스트"""
        assert (validate_answer(key, value) is None) == valid

    def test_validate_answers_reports_first_error(self, config_manager, jane_doe):
        """첫 번째 오류를 질문 제목과 함께 반환"""
        config_manager.load_questions(DEFAULT_QUESTIONS_CONFIG)

        assert config_manager.validate_answers(jane_doe) is None
        error = config_manager.validate_answers(dict(jane_doe, dob="April 12"))
        assert error == "What is your date of birth?: Use format YYYY-MM-DD."

    def test_compose_intake_message(self, config_manager, jane_doe):
        """답변을 질문 순서대로 합침"""
        questions = config_manager.load_questions(DEFAULT_QUESTIONS_CONFIG)

        message = compose_intake_message(questions, jane_doe)

        assert message.splitlines() == [
            "What is your full name?: Jane Doe",
            "What is your date of birth?: 1991-04-12",
            "What is your nationality?: UK",
            "What is your passport number?: AB1234567",
        ]
        assert config_manager.compose_intake_message(jane_doe) == message


class TestEnvConfig:
    """환경변수 설정 테스트 클래스"""

    def test_defaults(self):
        """기본값 테스트"""
        settings = get_settings()

        assert settings.get_openai_config() == {"api_key": "test-key", "model": "gpt-5"}
        assert settings.get_tts_config() == {"model": "gpt-4o-mini-tts", "voice": "alloy"}
        assert settings.port == 3000
        assert settings.max_relay_sessions == 50
        assert settings.questions_config == DEFAULT_QUESTIONS_CONFIG

    def test_singleton(self):
        """싱글톤 패턴 테스트"""
        assert get_settings() is get_settings()

    def test_environment_override(self, monkeypatch):
        """환경변수로 덮어쓰기"""
        monkeypatch.setenv("OPENAI_MODEL", "gpt-4.1")
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("API_BASE_URL", "http://intake.local/")

        settings = reload_settings()

        assert settings.openai_model == "gpt-4.1"
        assert settings.port == 8080
        assert settings.api_base_url == "http://intake.local"

    def test_relative_questions_path_made_absolute(self, monkeypatch, tmp_path):
        """상대 경로는 절대 경로로 변환"""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("QUESTIONS_CONFIG", "custom.json")

        settings = reload_settings()

        assert settings.questions_config == str(tmp_path / "custom.json")

    @pytest.mark.parametrize("name,value", [
        ("PORT", "0"),
        ("PORT", "70000"),
        ("MAX_RELAY_SESSIONS", "0"),
    ])
    def test_validation(self, monkeypatch, name, value):
        """잘못된 값 검증 테스트"""
        monkeypatch.setenv(name, value)

        with pytest.raises(ValueError):
            IntakeSettings()

    def test_missing_api_key(self, monkeypatch, tmp_path):
        """필수 환경변수 누락"""
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("OPENAI_API_KEY")

        with pytest.raises(ValueError, match="환경변수 설정 로드 실패"):
            reload_settings()
