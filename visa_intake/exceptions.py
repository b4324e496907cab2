"""비자 인테이크 예외 정의"""


class IntakeError(Exception):
    """모든 인테이크 예외의 기본 클래스"""
    pass


class ProviderError(IntakeError):
    """업스트림 LLM 제공자 초기화/설정 오류"""
    pass


class RelayCapacityError(IntakeError):
    """동시 스트리밍 세션 수 초과"""

    def __init__(self, max_sessions: int):
        super().__init__(f"최대 스트리밍 세션 수 초과 ({max_sessions})")
        self.max_sessions = max_sessions


class StreamConsumerError(IntakeError):
    """스트림 소비 중 발생한 전송 수준 오류"""
    pass


class IntakeClientError(IntakeError):
    """인테이크 API 호출 실패"""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code
