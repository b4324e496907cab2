"""테스트 공용 대역과 헬퍼"""

import json
import asyncio

import httpx

from visa_intake.adapters import ProviderEvent, ProviderEventKind


JANE_DOE = {
    "full_name": "Jane Doe",
    "dob": "1991-04-12",
    "passport_number": "AB1234567",
    "nationality": "UK"
}

JANE_DOE_MESSAGE = "I am Jane Doe, born 1991-04-12, passport AB1234567, nationality UK."


class FakeProvider:
    """업스트림 제공자 대역

    stream_events 를 순서대로 내보낸 뒤 stream_error 가 있으면 예외를 던집니다.
    """

    def __init__(self, stream_events=None, stream_error=None,
                 intake_response=None, intake_error=None,
                 audio=b"ID3-fake-audio", audio_format="mp3"):
        self.stream_events = list(stream_events or [])
        self.stream_error = stream_error
        self.intake_response = intake_response
        self.intake_error = intake_error
        self.audio = audio
        self.audio_format = audio_format
        self.calls = []

    async def create_intake(self, user_message):
        self.calls.append(("create_intake", user_message))
        if self.intake_error:
            raise self.intake_error
        return self.intake_response

    async def stream_intake(self, user_message):
        self.calls.append(("stream_intake", user_message))
        for event in self.stream_events:
            yield event
        if self.stream_error:
            raise self.stream_error

    async def synthesize_speech(self, text, voice=None):
        self.calls.append(("synthesize_speech", text, voice))
        return self.audio, self.audio_format


class ChunkedByteStream(httpx.AsyncByteStream):
    """지정한 청크를 순서대로 내보내는 응답 본문

    block=True 이면 마지막 청크 이후 released 될 때까지 대기합니다.
    """

    def __init__(self, chunks, error=None, block=False):
        self._chunks = list(chunks)
        self._error = error
        self._block = block
        self.released = asyncio.Event()

    async def __aiter__(self):
        for chunk in self._chunks:
            yield chunk
            await asyncio.sleep(0)
        if self._block:
            await self.released.wait()
        if self._error:
            raise self._error


def message_event(payload):
    return ProviderEvent(ProviderEventKind.MESSAGE, payload)


def final_event(payload):
    return ProviderEvent(ProviderEventKind.FINAL_MESSAGE, payload)


def sse_frames(*events):
    """릴레이가 보내는 형식 그대로의 바이트 스트림"""
    body = "".join(f"data: {json.dumps(e, ensure_ascii=False)}\n\n" for e in events)
    return body.encode("utf-8")
