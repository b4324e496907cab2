"""FastAPI 비자 인테이크 애플리케이션

사용자 자유 텍스트를 업스트림 LLM으로 보내 구조화된 비자 신청 정보를 추출하고,
결과를 단건 JSON 또는 SSE 스트림으로 돌려주는 웹 애플리케이션입니다.
단일 책임 원칙에 따라 웹 서버 기능만 담당합니다.
"""

import base64
import json
import logging
from typing import Optional, Dict, Any, List
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, StreamingResponse

from ..adapters import IntakeProvider, get_provider
from ..config import QuestionConfigManager, QuestionDefinition, create_config_manager, get_settings
from ..config.env_config import DEFAULT_QUESTIONS_CONFIG
from ..exceptions import RelayCapacityError
from ..extraction import extract_json_from_response
from ..models import ChatResponse, TTSResponse
from ..streaming import SSE_HEADERS, SSE_MEDIA_TYPE, RelayManager, get_relay_manager


logger = logging.getLogger(__name__)


async def _read_json_body(request: Request) -> Dict[str, Any]:
    """요청 본문을 JSON 객체로 읽습니다 (형식이 틀리면 빈 dict)"""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {}
    return body if isinstance(body, dict) else {}


def _require_string(body: Dict[str, Any], field: str) -> str:
    """비어 있지 않은 문자열 필드를 꺼냅니다

    Raises:
        HTTPException: 필드가 없거나 문자열이 아닌 경우 (400)
    """
    value = body.get(field)
    if not value or not isinstance(value, str):
        raise HTTPException(status_code=400, detail=f"{field} (string) is required")
    return value


class IntakeApp:
    """비자 인테이크 애플리케이션 클래스

    단일 책임 원칙: FastAPI 애플리케이션 라이프사이클 관리만 담당
    의존성 역전 원칙: 제공자 인터페이스에 의존하여 테스트 가능한 구조
    """

    def __init__(self, provider: Optional[IntakeProvider] = None,
                 relay_manager: Optional[RelayManager] = None,
                 question_manager: Optional[QuestionConfigManager] = None,
                 questions_config: Optional[str] = None):
        """애플리케이션 초기화"""
        self._provider = provider
        self.relay_manager = relay_manager or get_relay_manager()
        self.question_manager = question_manager or create_config_manager()
        self._questions_config = questions_config
        self._logger = logging.getLogger(__name__)

    @property
    def provider(self) -> IntakeProvider:
        """업스트림 제공자 (미지정 시 환경변수 설정으로 생성)"""
        if self._provider is None:
            self._provider = get_provider()
        return self._provider

    def _resolve_questions_config(self) -> str:
        if self._questions_config:
            return self._questions_config
        try:
            return get_settings().questions_config
        except ValueError:
            return DEFAULT_QUESTIONS_CONFIG

    def get_questions(self) -> List[QuestionDefinition]:
        """질문 목록 반환 (처음 호출 시 로드)"""
        questions = self.question_manager.get_questions()
        if not questions:
            questions = self.question_manager.load_questions(self._resolve_questions_config())
        return questions

    async def startup(self):
        """애플리케이션 시작 시 초기화 작업"""
        self._logger.info("비자 인테이크 애플리케이션 시작")
        try:
            questions = self.get_questions()
            self._logger.info(f"질문 {len(questions)}개 로드 완료")
        except ValueError as e:
            self._logger.error(f"질문 설정 로드 실패: {e}")

    async def shutdown(self):
        """애플리케이션 종료 시 정리 작업"""
        self._logger.info("비자 인테이크 애플리케이션 종료")
        await self.relay_manager.cleanup_inactive_sessions()

    async def extract_intake(self, user_message: str) -> Optional[Dict[str, Any]]:
        """단건 추출 (스키마를 만족하지 않으면 None)"""
        response = await self.provider.create_intake(user_message)
        return extract_json_from_response(response)


def create_app(provider: Optional[IntakeProvider] = None,
               relay_manager: Optional[RelayManager] = None,
               question_manager: Optional[QuestionConfigManager] = None,
               questions_config: Optional[str] = None) -> FastAPI:
    """FastAPI 애플리케이션 생성 팩토리 함수

    Args:
        provider: 업스트림 제공자 (None이면 OpenAI 제공자를 지연 생성)
        relay_manager: 릴레이 세션 관리자 (None이면 전역 인스턴스)
        question_manager: 질문 설정 관리자
        questions_config: 질문 설정 파일 경로

    Returns:
        설정된 FastAPI 애플리케이션
    """
    intake_app = IntakeApp(
        provider=provider,
        relay_manager=relay_manager,
        question_manager=question_manager,
        questions_config=questions_config
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """FastAPI 라이프사이클 관리"""
        await intake_app.startup()
        yield
        await intake_app.shutdown()

    app = FastAPI(
        title="Visa Intake",
        description="자유 텍스트에서 비자 신청 정보를 추출하는 스트리밍 릴레이",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.intake_app = intake_app

    # CORS 설정
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # 프로덕션에서는 제한 필요
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/healthz", response_class=PlainTextResponse)
    async def healthz():
        """간단한 생존 확인"""
        logger.debug("healthz")
        return "ok"

    @app.get("/health")
    async def health_check():
        """헬스 체크 엔드포인트"""
        return {
            "status": "healthy",
            "active_relay_sessions": intake_app.relay_manager.get_session_count()
        }

    @app.post("/api/chat", response_model=ChatResponse)
    async def chat_endpoint(request: Request):
        """단건 추출 엔드포인트"""
        body = await _read_json_body(request)
        user_message = _require_string(body, "userMessage")

        try:
            data = await intake_app.extract_intake(user_message)
        except Exception as e:
            logger.error(f"채팅 엔드포인트 오류: {e}")
            raise HTTPException(status_code=500, detail=str(e))

        return ChatResponse(data=data)

    @app.post("/api/chat/stream")
    async def chat_stream_endpoint(request: Request):
        """SSE 스트리밍 추출 엔드포인트"""
        body = await _read_json_body(request)
        user_message = _require_string(body, "userMessage")

        try:
            provider_events = intake_app.provider.stream_intake(user_message)
            session = await intake_app.relay_manager.create_session(provider_events)
        except RelayCapacityError as e:
            logger.warning(f"스트리밍 세션 거부: {e}")
            raise HTTPException(status_code=503, detail="too many active streams")
        except Exception as e:
            logger.error(f"스트리밍 시작 오류: {e}")
            raise HTTPException(status_code=500, detail=str(e))

        logger.info(f"SSE 스트리밍 시작 - 세션: {session.session_id}")
        return StreamingResponse(
            intake_app.relay_manager.stream_session(session),
            media_type=SSE_MEDIA_TYPE,
            headers=SSE_HEADERS
        )

    @app.post("/api/tts", response_model=TTSResponse)
    async def tts_endpoint(request: Request):
        """질문 텍스트 음성 합성 엔드포인트"""
        body = await _read_json_body(request)
        text = _require_string(body, "text")
        voice = body.get("voice") if isinstance(body.get("voice"), str) else None

        try:
            audio, audio_format = await intake_app.provider.synthesize_speech(text, voice)
        except Exception as e:
            logger.error(f"음성 합성 오류: {e}")
            raise HTTPException(status_code=500, detail=str(e))

        return TTSResponse(
            audioBase64=base64.b64encode(audio).decode("ascii"),
            format=audio_format
        )

    @app.get("/api/questions")
    async def get_questions():
        """질문 목록 조회"""
        try:
            questions = intake_app.get_questions()
        except ValueError as e:
            logger.error(f"질문 설정 로드 실패: {e}")
            raise HTTPException(status_code=500, detail="questions unavailable")
        return {"questions": [q.to_dict() for q in questions]}

    @app.get("/debug/relay/status")
    async def get_relay_status():
        """릴레이 세션 상태 조회 (디버깅용)"""
        relay_manager = intake_app.relay_manager
        return {
            "session_count": relay_manager.get_session_count(),
            "max_sessions": relay_manager.max_sessions,
            "sessions": relay_manager.get_session_ids()
        }

    return app
