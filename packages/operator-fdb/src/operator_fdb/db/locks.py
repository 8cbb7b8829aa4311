"""
SQLite-based change locks.

This module provides LockDB, a non-blocking, expiring lock table that
implements LockClientProtocol. A lock is keyed by (resource_key, reason)
and owned by a holder id; a lock whose holder vanished becomes free once
it expires.

Acquisition is a single upsert guarded by holder and expiry, so two
holders racing on the same database file cannot both win.
"""

from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

import aiosqlite

from operator_fdb.db.schema import SCHEMA_SQL


class LockDB:
    """
    Async context manager for change lock operations.

    Example:
        async with LockDB(Path("fdb.db"), holder_id="operator-1") as locks:
            if await locks.try_acquire("prod", "changing coordinators"):
                ...
                await locks.release("prod", "changing coordinators")
    """

    def __init__(
        self, db_path: Path, holder_id: str, ttl_seconds: int = 300
    ) -> None:
        """
        Initialize the lock manager.

        Args:
            db_path: Path to the SQLite database file
            holder_id: Identity recorded as the lock owner
            ttl_seconds: How long an acquired lock stays valid
        """
        self.db_path = db_path
        self.holder_id = holder_id
        self.ttl = timedelta(seconds=ttl_seconds)
        self._conn: aiosqlite.Connection | None = None

    async def __aenter__(self) -> "LockDB":
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

    async def try_acquire(self, resource_key: str, reason: str) -> bool:
        """
        Take the lock unless another holder has an unexpired claim.

        Re-acquiring a lock this holder already owns refreshes its expiry.

        Returns:
            True if this holder owns the lock afterwards.
        """
        now = datetime.now()
        await self._conn.execute(
            """
            INSERT INTO change_locks
                (resource_key, reason, holder_id, acquired_at, expires_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(resource_key, reason) DO UPDATE SET
                holder_id = excluded.holder_id,
                acquired_at = excluded.acquired_at,
                expires_at = excluded.expires_at
            WHERE change_locks.holder_id = excluded.holder_id
               OR change_locks.expires_at <= excluded.acquired_at
            """,
            (
                resource_key,
                reason,
                self.holder_id,
                now.isoformat(),
                (now + self.ttl).isoformat(),
            ),
        )
        await self._conn.commit()

        holder = await self.get_holder(resource_key, reason)
        return holder == self.holder_id

    async def release(self, resource_key: str, reason: str) -> None:
        """Release the lock if this holder owns it."""
        await self._conn.execute(
            """
            DELETE FROM change_locks
            WHERE resource_key = ? AND reason = ? AND holder_id = ?
            """,
            (resource_key, reason, self.holder_id),
        )
        await self._conn.commit()

    async def get_holder(self, resource_key: str, reason: str) -> str | None:
        """Return the current unexpired holder of a lock, if any."""
        async with self._conn.execute(
            """
            SELECT holder_id FROM change_locks
            WHERE resource_key = ? AND reason = ? AND expires_at > ?
            """,
            (resource_key, reason, datetime.now().isoformat()),
        ) as cursor:
            row = await cursor.fetchone()
        return row["holder_id"] if row else None
