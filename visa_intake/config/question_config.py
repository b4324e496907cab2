"""인테이크 질문 설정 관리 모듈

다단계 입력 폼에서 사용하는 질문 목록과 필드 검증 규칙을 관리합니다.
SOLID 원칙을 따라 단일 책임 원칙과 의존성 역전 원칙을 적용했습니다.
"""
import json
import re
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, List, Optional, Any
from abc import ABC, abstractmethod


DOB_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass
class QuestionDefinition:
    """단일 질문의 설정을 담는 데이터 클래스

    단일 책임 원칙: 질문 하나의 표시 정보만을 담당
    """
    key: str
    title: str
    hint: Optional[str] = None
    placeholder: Optional[str] = None
    type: str = "text"
    order: int = 0

    def __post_init__(self):
        """설정 유효성 검증"""
        if not self.key.strip():
            raise ValueError("질문 key가 비어있습니다")
        if not self.title.strip():
            raise ValueError(f"질문 '{self.key}'의 title이 비어있습니다")

    def to_dict(self) -> Dict[str, Any]:
        """딕셔너리로 변환"""
        return asdict(self)


class ConfigReader(ABC):
    """설정 읽기 인터페이스

    개방-폐쇄 원칙: 새로운 설정 소스(DB, API 등)를 추가할 때
    기존 코드 수정 없이 확장 가능
    """

    @abstractmethod
    def read_questions_config(self, source: str) -> Dict[str, Any]:
        """설정 소스에서 질문 설정을 읽어옵니다"""
        pass


class JSONConfigReader(ConfigReader):
    """JSON 파일에서 설정을 읽는 구현체"""

    def read_questions_config(self, source: str) -> Dict[str, Any]:
        """JSON 파일에서 질문 설정을 읽어옵니다

        Raises:
            FileNotFoundError: 설정 파일이 없을 때
            json.JSONDecodeError: JSON 형식이 잘못되었을 때
        """
        config_path = Path(source)

        if not config_path.exists():
            raise FileNotFoundError(f"설정 파일을 찾을 수 없습니다: {source}")

        with open(config_path, 'r', encoding='utf-8') as f:
            return json.load(f)


def validate_answer(key: str, value: str) -> Optional[str]:
    """필드별 입력값 검증

    Returns:
        오류 메시지 (유효하면 None)
    """
    if key == "full_name":
        return None if value.strip() else "Please enter your full name."
    if key == "dob":
        return None if DOB_PATTERN.match(value) else "Use format YYYY-MM-DD."
    if key == "nationality":
        return None if value.strip() else "Please enter your nationality."
    if key == "passport_number":
        return None if len(value.strip()) >= 5 else "Passport number looks too short."
    return None


class QuestionConfigManager:
    """질문 설정 관리자

    단일 책임 원칙: 질문 설정의 읽기와 관리만 담당
    의존성 역전 원칙: ConfigReader 추상화에 의존하여 구체적인 구현에 독립적
    """

    def __init__(self, config_reader: ConfigReader):
        """설정 관리자 초기화

        Args:
            config_reader: 설정을 읽을 ConfigReader 구현체
        """
        self._config_reader = config_reader
        self._questions: List[QuestionDefinition] = []

    def load_questions(self, config_path: str) -> List[QuestionDefinition]:
        """설정 파일에서 질문 목록을 로드합니다 (order 기준 정렬)

        Raises:
            ValueError: 설정 파일을 읽을 수 없을 때
        """
        try:
            config_data = self._config_reader.read_questions_config(config_path)
        except (FileNotFoundError, json.JSONDecodeError) as e:
            raise ValueError(f"설정 파일 읽기 실패: {e}")

        # 두 가지 형식 지원: {"questions": [...]} 또는 직접 [...]
        if isinstance(config_data, dict):
            questions_data = config_data.get("questions", [])
        else:
            questions_data = config_data

        questions = [self._create_question(q) for q in questions_data]
        self._questions = sorted(questions, key=lambda q: q.order)
        return list(self._questions)

    def _create_question(self, config: Dict[str, Any]) -> QuestionDefinition:
        """개별 질문 객체를 생성합니다"""
        return QuestionDefinition(
            key=config.get("key", ""),
            title=config.get("title", ""),
            hint=config.get("hint"),
            placeholder=config.get("placeholder"),
            type=config.get("type") or "text",
            order=config.get("order") or 0,
        )

    def get_questions(self) -> List[QuestionDefinition]:
        """로드된 질문 목록을 반환합니다"""
        return list(self._questions)

    def get_question(self, key: str) -> Optional[QuestionDefinition]:
        """key로 질문을 조회합니다"""
        for question in self._questions:
            if question.key == key:
                return question
        return None

    def validate_answers(self, answers: Dict[str, str]) -> Optional[str]:
        """모든 답변을 순서대로 검증하고 첫 번째 오류를 반환합니다"""
        for question in self._questions:
            error = validate_answer(question.key, answers.get(question.key) or "")
            if error:
                return f"{question.title}: {error}"
        return None

    def compose_intake_message(self, answers: Dict[str, str]) -> str:
        """답변을 "제목: 값" 형식의 자유 텍스트로 합칩니다"""
        return compose_intake_message(self._questions, answers)


def compose_intake_message(questions: List[QuestionDefinition], answers: Dict[str, str]) -> str:
    """질문 순서대로 "title: value" 줄을 만들어 하나의 메시지로 합칩니다"""
    return "\n".join(f"{q.title}: {answers.get(q.key) or ''}" for q in questions)


def create_config_manager() -> QuestionConfigManager:
    """기본 설정 관리자를 생성합니다

    Returns:
        JSON 파일 읽기가 가능한 QuestionConfigManager 인스턴스
    """
    json_reader = JSONConfigReader()
    return QuestionConfigManager(json_reader)
