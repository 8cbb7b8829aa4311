"""
Database module for operator state persistence.

Exports:
    ClusterStateDB: Recorded connection strings (ClusterStateStoreProtocol)
    LockDB: Expiring change locks (LockClientProtocol)
    EventDB: Event log (EventRecorderProtocol)
"""

from operator_fdb.db.events import ClusterEvent, EventDB
from operator_fdb.db.locks import LockDB
from operator_fdb.db.state import ClusterStateDB

__all__ = ["ClusterEvent", "ClusterStateDB", "EventDB", "LockDB"]
