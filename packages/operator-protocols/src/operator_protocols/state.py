"""
Persistence protocol for cluster state.

The store holds the last connection string the operator observed or
committed for each cluster. It is the operator's recorded source of truth.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class ClusterStateStoreProtocol(Protocol):
    """
    Protocol for durable cluster state storage.

    update_connection_string() must be atomic: either the new value is
    stored or the call fails and the previous value is kept.
    """

    async def get_connection_string(self, cluster_name: str) -> str | None:
        """Return the recorded connection string, or None if never recorded."""
        ...

    async def update_connection_string(
        self, cluster_name: str, connection_string: str
    ) -> None:
        """Record a new connection string for the cluster."""
        ...
