"""어댑터 모듈

업스트림 LLM 제공자와 인테이크 서버 HTTP 클라이언트를 제공합니다.
"""

from .base import ProviderEvent, ProviderEventKind, IntakeProvider
from .openai_provider import OpenAIIntakeProvider, get_provider, reset_provider
from .intake_client import IntakeClient

__all__ = [
    'ProviderEvent',
    'ProviderEventKind',
    'IntakeProvider',
    'OpenAIIntakeProvider',
    'get_provider',
    'reset_provider',
    'IntakeClient'
]
