"""
SQLite-based cluster state persistence.

This module provides ClusterStateDB, the durable record of each cluster's
connection string. It implements ClusterStateStoreProtocol.

Per project patterns:
- Use async context manager for connection lifecycle
- One statement per update so writes are atomic
"""

from datetime import datetime
from pathlib import Path
from typing import Any

import aiosqlite

from operator_fdb.db.schema import SCHEMA_SQL


class ClusterStateDB:
    """
    Async context manager for cluster state operations.

    Example:
        async with ClusterStateDB(Path("fdb.db")) as db:
            await db.update_connection_string("prod", "prod:abc@10.0.0.1:4500")
            current = await db.get_connection_string("prod")
    """

    def __init__(self, db_path: Path) -> None:
        """
        Initialize the database connection manager.

        Args:
            db_path: Path to the SQLite database file
        """
        self.db_path = db_path
        self._conn: aiosqlite.Connection | None = None

    async def __aenter__(self) -> "ClusterStateDB":
        """Open database connection and ensure schema exists."""
        self._conn = await aiosqlite.connect(self.db_path)
        self._conn.row_factory = aiosqlite.Row
        await self._conn.executescript(SCHEMA_SQL)
        await self._conn.commit()
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Close database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    async def get_connection_string(self, cluster_name: str) -> str | None:
        """Return the recorded connection string, or None if never recorded."""
        async with self._conn.execute(
            "SELECT connection_string FROM clusters WHERE name = ?",
            (cluster_name,),
        ) as cursor:
            row = await cursor.fetchone()
        return row["connection_string"] if row else None

    async def update_connection_string(
        self, cluster_name: str, connection_string: str
    ) -> None:
        """Record a new connection string, replacing any previous one."""
        await self._conn.execute(
            """
            INSERT INTO clusters (name, connection_string, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(name) DO UPDATE SET
                connection_string = excluded.connection_string,
                updated_at = excluded.updated_at
            """,
            (cluster_name, connection_string, datetime.now().isoformat()),
        )
        await self._conn.commit()

    async def list_clusters(self) -> list[tuple[str, str, datetime]]:
        """Return (name, connection_string, updated_at) for every cluster."""
        async with self._conn.execute(
            "SELECT name, connection_string, updated_at FROM clusters ORDER BY name"
        ) as cursor:
            rows = await cursor.fetchall()
        return [
            (
                row["name"],
                row["connection_string"],
                datetime.fromisoformat(row["updated_at"]),
            )
            for row in rows
        ]
