"""
Admin client protocol definition.

The AdminClientProtocol defines how the operator talks to the database's
administrative interface. Implementations include the fdbcli-backed client
and in-memory doubles used by tests.
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class AdminClientProtocol(Protocol):
    """
    Protocol for database admin clients.

    An admin client provides:
    - get_connection_string(): The live connection string
    - get_status(): The machine-readable status document
    - change_coordinators(): Commit a new coordinator set

    Example status schema (subset used by the operator):
        {
            "cluster": {
                "processes": {
                    "a1b2": {
                        "address": "10.0.0.1:4501:tls",
                        "class_type": "storage",
                        "locality": {"zoneid": "z1", "instance_id": "storage-1"},
                        "excluded": false
                    }
                }
            }
        }
    """

    async def get_connection_string(self) -> str:
        """
        Get the connection string currently used by the database.

        Returns:
            Opaque connection string in the form
            "description:generation@addr1,addr2,...".
        """
        ...

    async def get_status(self) -> dict[str, Any]:
        """
        Get the machine-readable status document.

        Returns:
            The decoded status JSON. Only the keys shown in the class
            docstring are required by the operator.
        """
        ...

    async def change_coordinators(self, addresses: list[str]) -> str:
        """
        Replace the coordinator set.

        Args:
            addresses: Coordinator addresses in "ip:port[:tls]" form.

        Returns:
            The new connection string after the change.
        """
        ...
