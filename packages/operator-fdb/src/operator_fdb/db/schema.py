"""
SQLite schema for operator state.

This module defines the database schema for:
- Cluster state (the recorded connection string per cluster)
- Change locks (one holder per cluster and action, with expiry)
- Cluster events (notifications emitted by the reconciler)
"""

SCHEMA_SQL = """
-- Recorded connection string per cluster
CREATE TABLE IF NOT EXISTS clusters (
    name TEXT PRIMARY KEY,
    connection_string TEXT NOT NULL,
    updated_at TEXT NOT NULL                -- ISO8601 timestamp
);

-- Exclusive locks keyed by resource and action
CREATE TABLE IF NOT EXISTS change_locks (
    resource_key TEXT NOT NULL,             -- Cluster name
    reason TEXT NOT NULL,                   -- e.g. 'changing coordinators'
    holder_id TEXT NOT NULL,                -- Identity of the lock holder
    acquired_at TEXT NOT NULL,              -- ISO8601 timestamp
    expires_at TEXT NOT NULL,               -- Lock is free after this time
    PRIMARY KEY (resource_key, reason)
);

-- Events emitted during reconciliation
CREATE TABLE IF NOT EXISTS cluster_events (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    cluster_name TEXT NOT NULL,
    kind TEXT NOT NULL,                     -- UpdatingConnectionString, ...
    message TEXT NOT NULL,
    created_at TEXT NOT NULL                -- ISO8601 timestamp
);

-- Index for listing a cluster's recent events
CREATE INDEX IF NOT EXISTS idx_cluster_events_cluster
ON cluster_events(cluster_name, id);
"""
