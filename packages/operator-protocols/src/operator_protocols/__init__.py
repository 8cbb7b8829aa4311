"""
Protocol definitions for the coordinator-selection operator.

This package provides the Protocol definitions for every collaborator the
coordinator core talks to. It has zero dependencies on other operator-*
packages, so adapters (fdbcli, SQLite, webhooks, test doubles) can be
swapped without touching the core.

Key protocols:
- AdminClientProtocol: Database admin interface (status, coordinators)
- LockClientProtocol: Exclusive, non-blocking named lock
- ClusterStateStoreProtocol: Durable storage for the connection string
- EventRecorderProtocol: Fire-and-forget notification sink
"""

from operator_protocols.admin import AdminClientProtocol
from operator_protocols.events import EventRecorderProtocol
from operator_protocols.lock import LockClientProtocol
from operator_protocols.state import ClusterStateStoreProtocol

__all__ = [
    "AdminClientProtocol",
    "ClusterStateStoreProtocol",
    "EventRecorderProtocol",
    "LockClientProtocol",
]
