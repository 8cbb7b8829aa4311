"""
Lock protocol definition.

Coordinator changes must never run concurrently for one cluster. The lock
is an injected capability: the actual mutual exclusion lives outside the
process and may be cluster-wide.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class LockClientProtocol(Protocol):
    """
    Protocol for exclusive, named, best-effort locks.

    Acquisition never blocks. A lock that is held elsewhere is reported
    by returning False, not by raising. Exceptions are reserved for
    failures talking to the lock backend.
    """

    async def try_acquire(self, resource_key: str, reason: str) -> bool:
        """
        Try to take the lock for a resource.

        Args:
            resource_key: Identity of the locked resource (the cluster name).
            reason: The action the lock guards (e.g., "changing coordinators").

        Returns:
            True if this client now holds the lock, False if another
            holder has it.
        """
        ...

    async def release(self, resource_key: str, reason: str) -> None:
        """
        Release a lock held by this client.

        Releasing a lock that this client does not hold is a no-op.
        """
        ...
