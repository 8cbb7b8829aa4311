"""Tests for the logging, webhook and fan-out event recorders."""

import json
import logging

import httpx
import pytest

from operator_fdb.events import (
    FanoutEventRecorder,
    LoggingEventRecorder,
    WebhookEventRecorder,
)


class CollectingRecorder:
    """Recorder that keeps events in memory."""

    def __init__(self):
        self.events = []

    async def record(self, cluster_name: str, kind: str, message: str) -> None:
        self.events.append((cluster_name, kind, message))


class FailingRecorder:
    """Recorder that always raises."""

    async def record(self, cluster_name: str, kind: str, message: str) -> None:
        raise ConnectionError("sink down")


class TestLoggingEventRecorder:
    """Tests for LoggingEventRecorder."""

    @pytest.mark.asyncio
    async def test_logs_event(self, caplog):
        with caplog.at_level(logging.INFO, logger="operator_fdb.events"):
            await LoggingEventRecorder().record("prod", "ChangingCoordinators", "Choosing new coordinators")

        assert "[prod] ChangingCoordinators: Choosing new coordinators" in caplog.text


class TestWebhookEventRecorder:
    """Tests for WebhookEventRecorder with httpx.MockTransport."""

    @pytest.mark.asyncio
    async def test_posts_event_json(self):
        received = []

        def handler(request: httpx.Request) -> httpx.Response:
            received.append(request)
            return httpx.Response(204)

        async with httpx.AsyncClient(
            transport=httpx.MockTransport(handler), base_url="http://alerts"
        ) as http:
            await WebhookEventRecorder(http=http).record(
                "prod", "DeferringCoordinatorChange", "Deferring"
            )

        assert len(received) == 1
        assert received[0].method == "POST"
        assert received[0].url.path == "/events"
        body = json.loads(received[0].content)
        assert body["cluster"] == "prod"
        assert body["kind"] == "DeferringCoordinatorChange"
        assert body["message"] == "Deferring"
        assert "timestamp" in body

    @pytest.mark.asyncio
    async def test_http_error_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500)

        async with httpx.AsyncClient(
            transport=httpx.MockTransport(handler), base_url="http://alerts"
        ) as http:
            with pytest.raises(httpx.HTTPStatusError):
                await WebhookEventRecorder(http=http, path="/hooks/fdb").record(
                    "prod", "ChangingCoordinators", "Choosing"
                )


class TestFanoutEventRecorder:
    """Tests for FanoutEventRecorder."""

    @pytest.mark.asyncio
    async def test_forwards_to_all(self):
        first, second = CollectingRecorder(), CollectingRecorder()

        await FanoutEventRecorder(recorders=[first, second]).record("prod", "ChangingCoordinators", "msg")

        assert first.events == second.events == [("prod", "ChangingCoordinators", "msg")]

    @pytest.mark.asyncio
    async def test_failing_recorder_does_not_block_others(self, caplog):
        collecting = CollectingRecorder()
        fanout = FanoutEventRecorder(recorders=[FailingRecorder(), collecting])

        await fanout.record("prod", "ChangingCoordinators", "msg")

        assert collecting.events == [("prod", "ChangingCoordinators", "msg")]
        assert "FailingRecorder failed to record ChangingCoordinators" in caplog.text
