"""
Event recorders.

Implementations of EventRecorderProtocol besides the SQLite event log:
- LoggingEventRecorder: Writes events to the standard logger
- WebhookEventRecorder: POSTs events as JSON with an injected httpx client
- FanoutEventRecorder: Sends each event to several recorders, isolating
  failures so one broken sink does not starve the others
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime

import httpx

from operator_protocols import EventRecorderProtocol

logger = logging.getLogger(__name__)


class LoggingEventRecorder:
    """Records events as INFO log lines."""

    async def record(self, cluster_name: str, kind: str, message: str) -> None:
        logger.info(f"[{cluster_name}] {kind}: {message}")


@dataclass
class WebhookEventRecorder:
    """
    Webhook event sink with injected httpx client.

    Attributes:
        http: Pre-configured httpx.AsyncClient with base_url set to the
            receiver.
        path: Path events are posted to.

    Example:
        async with httpx.AsyncClient(base_url="http://alerts:8080") as http:
            recorder = WebhookEventRecorder(http=http)
            await recorder.record("prod", "ChangingCoordinators", "Choosing new coordinators")
    """

    http: httpx.AsyncClient
    path: str = "/events"

    async def record(self, cluster_name: str, kind: str, message: str) -> None:
        """
        POST one event.

        Raises:
            httpx.HTTPStatusError: On HTTP errors (4xx, 5xx responses).
            httpx.TransportError: When the receiver is unreachable.
        """
        response = await self.http.post(
            self.path,
            json={
                "cluster": cluster_name,
                "kind": kind,
                "message": message,
                "timestamp": datetime.now().isoformat(),
            },
        )
        response.raise_for_status()


@dataclass
class FanoutEventRecorder:
    """
    Forwards each event to every wrapped recorder.

    A recorder that raises is logged and skipped.
    """

    recorders: list[EventRecorderProtocol] = field(default_factory=list)

    async def record(self, cluster_name: str, kind: str, message: str) -> None:
        for recorder in self.recorders:
            try:
                await recorder.record(cluster_name, kind, message)
            except Exception as e:
                logger.warning(
                    f"{type(recorder).__name__} failed to record {kind}: {e}"
                )
