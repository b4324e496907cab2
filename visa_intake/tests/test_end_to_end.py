"""서버와 소비자를 함께 사용하는 통합 테스트

httpx.ASGITransport 로 실제 네트워크 없이 앱에 연결합니다.
"""

import json

import httpx
import pytest

from visa_intake.services import create_app
from visa_intake.streaming import RelayManager, StreamConsumer
from visa_intake.tests.helpers import (
    JANE_DOE,
    JANE_DOE_MESSAGE,
    FakeProvider,
    final_event,
    message_event
)


def make_consumer(provider):
    app = create_app(provider=provider, relay_manager=RelayManager())
    client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app))
    return StreamConsumer("http://testserver", client=client), client


class TestEndToEnd:
    """릴레이에서 소비자까지의 흐름"""

    @pytest.mark.asyncio
    async def test_jane_doe(self, jane_doe_provider):
        consumer, client = make_consumer(jane_doe_provider)

        await consumer.stream(JANE_DOE_MESSAGE)

        assert consumer.transcript == "Jane Doe"
        assert consumer.final_result == JANE_DOE
        assert consumer.error is None
        assert consumer.is_streaming is False
        assert [e["event"] for e in consumer.events] == ["message", "message", "final"]
        await client.aclose()

    @pytest.mark.asyncio
    async def test_response_content_shape(self):
        """Responses API 완료 객체 형태의 페이로드도 트랜스크립트에 반영"""
        provider = FakeProvider(stream_events=[
            message_event({"response": {"output": [{"content": [{"text": "Hello "}, {"text": "Jane"}]}]}}),
            final_event({"output_text": json.dumps(JANE_DOE)}),
        ])
        consumer, client = make_consumer(provider)

        await consumer.stream("hello")

        assert consumer.transcript == "Hello Jane"
        assert consumer.final_result == JANE_DOE
        await client.aclose()

    @pytest.mark.asyncio
    async def test_upstream_failure_is_not_a_consumer_error(self):
        """릴레이의 error 프레임은 data 프레임이 아니므로 소비자 오류가 아님"""
        provider = FakeProvider(
            stream_events=[message_event({"delta": "Ja"})],
            stream_error=RuntimeError("boom")
        )
        consumer, client = make_consumer(provider)

        await consumer.stream("hello")

        assert consumer.transcript == "Ja"
        assert consumer.final_result is None
        assert consumer.error is None
        await client.aclose()

    @pytest.mark.asyncio
    async def test_schema_failure_yields_null(self):
        provider = FakeProvider(stream_events=[
            message_event({"delta": "?"}),
            final_event({"output_text": json.dumps({"full_name": "Jane"})}),
        ])
        consumer, client = make_consumer(provider)

        await consumer.stream("hello")

        assert consumer.final_result is None
        assert consumer.events[-1] == {"event": "final", "data": None}
        await client.aclose()

    @pytest.mark.asyncio
    async def test_capacity_rejection_surfaces_as_error(self):
        app = create_app(provider=FakeProvider(), relay_manager=RelayManager(max_sessions=0))
        client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app))
        consumer = StreamConsumer("http://testserver", client=client)

        await consumer.stream("hello")

        assert consumer.error == "Stream failed with status 503"
        await client.aclose()
