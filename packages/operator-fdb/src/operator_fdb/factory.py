"""
Factory for wiring the coordinator reconciler from settings.

This module provides a factory for CLI integration: it opens the SQLite
stores, the optional webhook client and the fdbcli admin client, and
yields a ready ChangeCoordinators instance. Everything is closed when the
context exits.
"""

from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncIterator

import httpx

from operator_fdb.config import Settings
from operator_fdb.coordinators import ChangeCoordinators
from operator_fdb.db import ClusterStateDB, EventDB, LockDB
from operator_fdb.events import (
    FanoutEventRecorder,
    LoggingEventRecorder,
    WebhookEventRecorder,
)
from operator_fdb.fdbcli import FdbCliAdminClient


def create_admin_client(settings: Settings) -> FdbCliAdminClient:
    """Create the fdbcli admin client described by the settings."""
    return FdbCliAdminClient(
        cluster_file=settings.cluster_file,
        fdbcli_path=settings.fdbcli_path,
        timeout_seconds=settings.command_timeout_seconds,
    )


@asynccontextmanager
async def create_change_coordinators(
    settings: Settings,
    webhook_http: httpx.AsyncClient | None = None,
) -> AsyncIterator[ChangeCoordinators]:
    """
    Create a ChangeCoordinators reconciler with all adapters opened.

    Args:
        settings: Operator settings.
        webhook_http: Optional pre-configured httpx client for the event
            webhook. If None and settings.event_webhook_url is set, a new
            client is created with a 10s timeout.

    Yields:
        ChangeCoordinators wired to fdbcli, SQLite state/locks/events and
        the configured event sinks.

    Example:
        async with create_change_coordinators(Settings()) as step:
            result = await step.reconcile(settings.cluster_spec())
    """
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)

    async with AsyncExitStack() as stack:
        state = await stack.enter_async_context(ClusterStateDB(settings.db_path))
        locks = await stack.enter_async_context(
            LockDB(
                settings.db_path,
                holder_id=settings.lock_holder_id,
                ttl_seconds=settings.lock_ttl_seconds,
            )
        )
        events = await stack.enter_async_context(EventDB(settings.db_path))

        recorders = [events, LoggingEventRecorder()]
        if webhook_http is None and settings.event_webhook_url:
            webhook_http = await stack.enter_async_context(
                httpx.AsyncClient(base_url=settings.event_webhook_url, timeout=10.0)
            )
        if webhook_http is not None:
            recorders.append(WebhookEventRecorder(http=webhook_http))

        yield ChangeCoordinators(
            admin=create_admin_client(settings),
            lock=locks,
            store=state,
            recorder=FanoutEventRecorder(recorders=recorders),
            strict_matching=settings.strict_coordinator_matching,
        )
