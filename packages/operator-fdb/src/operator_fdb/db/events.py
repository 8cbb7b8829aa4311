"""
SQLite-based event log.

This module provides EventDB, which stores events emitted by the
reconciler and implements EventRecorderProtocol. The CLI reads it back
with `operator-fdb events list`.
"""

from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

import aiosqlite

from operator_fdb.db.schema import SCHEMA_SQL


@dataclass
class ClusterEvent:
    """
    One recorded event.

    Attributes:
        id: Database ID (None before persisted)
        cluster_name: Cluster the event refers to
        kind: Event kind (e.g., "ChangingCoordinators")
        message: Human-readable description
        created_at: When the event was recorded
    """

    id: int | None
    cluster_name: str
    kind: str
    message: str
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON serialization."""
        d = asdict(self)
        d["created_at"] = self.created_at.isoformat()
        return d


class EventDB:
    """
    Async context manager for event log operations.

    Example:
        async with EventDB(Path("fdb.db")) as events:
            await events.record("prod", "ChangingCoordinators", "Choosing new coordinators")
            recent = await events.list_events(cluster_name="prod")
    """

    def __init__(self, db_path: Path) -> None:
        """
        Initialize the database connection manager.

        Args:
            db_path: Path to the SQLite database file
        """
        self.db_path = db_path
        self._conn: aiosqlite.Connection | None = None

    async def __aenter__(self) -> "EventDB":
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

    async def record(self, cluster_name: str, kind: str, message: str) -> None:
        """Append an event to the log."""
        await self._conn.execute(
            """
            INSERT INTO cluster_events (cluster_name, kind, message, created_at)
            VALUES (?, ?, ?, ?)
            """,
            (cluster_name, kind, message, datetime.now().isoformat()),
        )
        await self._conn.commit()

    async def list_events(
        self, cluster_name: str | None = None, limit: int = 50
    ) -> list[ClusterEvent]:
        """
        List the most recent events, newest first.

        Args:
            cluster_name: Only events for this cluster when given
            limit: Maximum number of events to return
        """
        query = "SELECT * FROM cluster_events"
        params: list[Any] = []
        if cluster_name is not None:
            query += " WHERE cluster_name = ?"
            params.append(cluster_name)
        query += " ORDER BY id DESC LIMIT ?"
        params.append(limit)

        async with self._conn.execute(query, params) as cursor:
            rows = await cursor.fetchall()

        return [
            ClusterEvent(
                id=row["id"],
                cluster_name=row["cluster_name"],
                kind=row["kind"],
                message=row["message"],
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in rows
        ]
