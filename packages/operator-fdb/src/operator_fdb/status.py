"""
Pydantic models for the database status document.

This module provides Pydantic models for parsing the machine-readable
status document returned by `status json`, and the builder that turns it
into an immutable ClusterSnapshot for one reconciliation cycle.

These are API response types for external data validation. Internal
types (Process, ClusterSnapshot, etc.) are dataclasses in operator_fdb.types.

Notes:
- Only the keys the operator needs are modelled; everything else is ignored
- Processes are keyed by an opaque process id in the document
- Addresses are validated at parse time so a bad entry fails loudly
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from operator_fdb.types import (
    LOCALITY_INSTANCE_ID,
    ClusterSnapshot,
    ClusterSpec,
    Process,
    ProcessAddress,
)


# =============================================================================
# Status document types
# =============================================================================
# Response structure: {"cluster": {"processes": {"<id>": {...}}}}


class ProcessStatus(BaseModel):
    """
    One entry of cluster.processes.

    Example:
        {
            "address": "10.0.0.1:4501:tls",
            "class_type": "storage",
            "locality": {"zoneid": "z1", "instance_id": "storage-1"},
            "excluded": false
        }
    """

    model_config = ConfigDict(extra="ignore")

    address: str
    class_type: str = "unset"
    locality: dict[str, str] = Field(default_factory=dict)
    excluded: bool = False

    @field_validator("address")
    @classmethod
    def _validate_address(cls, value: str) -> str:
        ProcessAddress.parse(value)
        return value

    @field_validator("locality", mode="before")
    @classmethod
    def _drop_null_locality(cls, value: Any) -> Any:
        # Unset locality fields are reported as null
        if isinstance(value, dict):
            return {k: str(v) for k, v in value.items() if v is not None}
        return value


class ClusterSection(BaseModel):
    """The 'cluster' object of the status document."""

    model_config = ConfigDict(extra="ignore")

    processes: dict[str, ProcessStatus] = Field(default_factory=dict)
    connection_string: str | None = None


class DatabaseStatus(BaseModel):
    """
    Top-level status document.

    Only the 'cluster' section is consumed. A document without it (for
    example when the database is unreachable) parses to an empty fleet.
    """

    model_config = ConfigDict(extra="ignore")

    cluster: ClusterSection = Field(default_factory=ClusterSection)

    def to_processes(self, spec: ClusterSpec) -> list[Process]:
        """
        Convert status entries to Process objects.

        being_removed is derived from the cluster's pending removals. The
        result is ordered by process id so it does not depend on how the
        document was serialized.
        """
        processes = []
        for process_id in sorted(self.cluster.processes):
            entry = self.cluster.processes[process_id]
            instance_id = entry.locality.get(LOCALITY_INSTANCE_ID, "")
            processes.append(
                Process(
                    address=ProcessAddress.parse(entry.address),
                    process_class=entry.class_type,
                    locality=dict(entry.locality),
                    excluded=entry.excluded,
                    being_removed=spec.is_being_removed(instance_id),
                )
            )
        return processes

    def to_snapshot(self, spec: ClusterSpec, connection_string: str) -> ClusterSnapshot:
        """
        Build the snapshot for one reconciliation cycle.

        Args:
            spec: Cluster settings (TLS requirement, pending removals).
            connection_string: The live connection string from the admin
                interface.
        """
        return ClusterSnapshot(
            processes=tuple(self.to_processes(spec)),
            connection_string=connection_string,
            tls_required=spec.tls_required,
        )


def build_snapshot(
    status: dict[str, Any], spec: ClusterSpec, connection_string: str
) -> ClusterSnapshot:
    """
    Validate a raw status document and build a ClusterSnapshot.

    Raises:
        pydantic.ValidationError: On malformed status data.
    """
    return DatabaseStatus.model_validate(status).to_snapshot(spec, connection_string)
