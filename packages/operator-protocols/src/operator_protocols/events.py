"""
Event recorder protocol definition.

Events are structured notifications about what the operator decided
(connection string updates, deferrals, coordinator changes). Recording is
fire-and-forget from the caller's point of view.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class EventRecorderProtocol(Protocol):
    """
    Protocol for event sinks.

    Implementations may raise on delivery failure; callers are expected
    to log and continue rather than abort their own work.
    """

    async def record(self, cluster_name: str, kind: str, message: str) -> None:
        """
        Record one event.

        Args:
            cluster_name: Cluster the event refers to.
            kind: Machine-readable event kind (e.g., "ChangingCoordinators").
            message: Human-readable description.
        """
        ...
