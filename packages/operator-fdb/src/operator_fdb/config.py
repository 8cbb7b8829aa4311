"""Environment-based configuration for the coordinator operator."""

import os
import socket
import uuid
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from operator_fdb.types import ClusterSpec, RedundancyMode


def default_holder_id() -> str:
    """Lock owner identity: host, process and a random suffix."""
    return f"{socket.gethostname()}-{os.getpid()}-{uuid.uuid4().hex[:8]}"


class Settings(BaseSettings):
    """Coordinator operator configuration.

    All settings can be overridden via environment variables with
    FDB_OPERATOR_ prefix. For example:
        FDB_OPERATOR_CLUSTER_NAME=prod
        FDB_OPERATOR_REDUNDANCY_MODE=triple
        FDB_OPERATOR_PENDING_REMOVALS=storage-3,log-1
    """

    # Cluster identity and desired shape
    cluster_name: str = "fdb-cluster"
    redundancy_mode: RedundancyMode = RedundancyMode.DOUBLE
    usable_regions: int = 1
    tls_required: bool = False
    configured: bool = True
    pending_removals: str = ""  # Comma-separated instance ids
    max_coordinators_per_zone: int | None = None
    strict_coordinator_matching: bool = True

    # Admin interface
    cluster_file: Path = Path("/var/fdb/data/fdb.cluster")
    fdbcli_path: str = "fdbcli"
    command_timeout_seconds: float = 10.0

    # Local state: status store, change lock, event log
    db_path: Path = Path.home() / ".operator" / "fdb.db"
    lock_ttl_seconds: int = 300
    # Distinct for every Settings instance; set explicitly to share a lock identity
    lock_holder_id: str = Field(default_factory=default_holder_id)

    # Notifications
    event_webhook_url: str | None = None

    log_level: str = "INFO"

    model_config = {"env_prefix": "FDB_OPERATOR_"}

    @field_validator("usable_regions")
    @classmethod
    def _at_least_one_region(cls, value: int) -> int:
        if value < 1:
            raise ValueError("usable_regions must be at least 1")
        return value

    def pending_removal_ids(self) -> frozenset[str]:
        return frozenset(i.strip() for i in self.pending_removals.split(",") if i.strip())

    def cluster_spec(self) -> ClusterSpec:
        """Build the ClusterSpec these settings describe."""
        return ClusterSpec(
            name=self.cluster_name,
            redundancy_mode=self.redundancy_mode,
            usable_regions=self.usable_regions,
            tls_required=self.tls_required,
            pending_removals=self.pending_removal_ids(),
            configured=self.configured,
            max_coordinators_per_zone=self.max_coordinators_per_zone,
        )
