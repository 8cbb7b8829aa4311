"""
Shared data types for the coordinator operator.

This module defines the core data structures used to represent the
process fleet, its failure-domain tags, and the cluster settings that
drive coordinator selection. These are internal types used by the
selection core and the adapters - not API models.

All types use @dataclass. Pydantic models are reserved for config parsing
and the database status document (see operator_fdb.status).
"""

import ipaddress
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator

# Locality dimension names as reported by the database
LOCALITY_ZONE_ID = "zoneid"
LOCALITY_DC_ID = "dcid"
LOCALITY_DATA_HALL = "data_hall"
LOCALITY_MACHINE_ID = "machineid"
LOCALITY_INSTANCE_ID = "instance_id"

TLS_FLAG = "tls"


class ProcessClass(str, Enum):
    """Process roles relevant to coordinator selection."""

    STORAGE = "storage"
    LOG = "log"
    TRANSACTION = "transaction"
    STATELESS = "stateless"
    UNSET = "unset"


class RedundancyMode(str, Enum):
    """Replication modes, which determine how many coordinators are needed."""

    SINGLE = "single"
    DOUBLE = "double"
    TRIPLE = "triple"
    THREE_DATA_HALL = "three_data_hall"


@dataclass(frozen=True, order=True)
class ProcessAddress:
    """
    Network identity of a process.

    Attributes:
        ip: Host part. IPv6 hosts are stored without brackets.
        port: Listening port.
        tls: Whether the address is the TLS listener.

    Example:
        ProcessAddress.parse("10.0.0.1:4501:tls")
        # ProcessAddress(ip="10.0.0.1", port=4501, tls=True)
    """

    ip: str
    port: int
    tls: bool = False

    @classmethod
    def parse(cls, value: str) -> "ProcessAddress":
        """
        Parse an "ip:port[:tls]" address.

        Raises:
            ValueError: If the host, port or flags are malformed.
        """
        text = value.strip()
        if text.startswith("["):
            end = text.find("]")
            if end == -1:
                raise ValueError(f"Unterminated IPv6 address in '{value}'")
            ip = text[1:end]
            rest = text[end + 1 :]
            if not rest.startswith(":"):
                raise ValueError(f"Missing port in '{value}'")
            parts = rest[1:].split(":")
            try:
                ipaddress.IPv6Address(ip)
            except ValueError as e:
                raise ValueError(f"Invalid IPv6 host in '{value}'") from e
        else:
            ip, _, rest = text.partition(":")
            parts = rest.split(":") if rest else []

        if not ip:
            raise ValueError(f"Missing host in '{value}'")
        if not parts or not parts[0]:
            raise ValueError(f"Missing port in '{value}'")
        if not parts[0].isdigit():
            raise ValueError(f"Invalid port '{parts[0]}' in '{value}'")

        port = int(parts[0])
        if not 0 < port < 65536:
            raise ValueError(f"Port {port} out of range in '{value}'")

        flags = parts[1:]
        for flag in flags:
            if flag != TLS_FLAG:
                raise ValueError(f"Unknown address flag '{flag}' in '{value}'")

        return cls(ip=ip, port=port, tls=TLS_FLAG in flags)

    def __str__(self) -> str:
        host = f"[{self.ip}]" if ":" in self.ip else self.ip
        suffix = f":{TLS_FLAG}" if self.tls else ""
        return f"{host}:{self.port}{suffix}"


@dataclass(frozen=True)
class Process:
    """
    One running process in the fleet.

    Attributes:
        address: Address the process is reachable on.
        process_class: Role tag (see ProcessClass). Unknown classes reported
            by the database are kept as plain strings.
        locality: Failure-domain tags, e.g. {"zoneid": "z1", "dcid": "dc1"}.
        excluded: Administratively excluded from all roles.
        being_removed: Mid-decommission.
    """

    address: ProcessAddress
    process_class: str
    locality: dict[str, str] = field(default_factory=dict, hash=False)
    excluded: bool = False
    being_removed: bool = False

    @property
    def instance_id(self) -> str:
        return self.locality.get(LOCALITY_INSTANCE_ID, "")

    @property
    def eligible(self) -> bool:
        """True if the process may hold any role."""
        return not (self.excluded or self.being_removed)

    def locality_value(self, dimension: str) -> str:
        """Value of a locality dimension, "" when the process does not report it."""
        return self.locality.get(dimension, "")

    def sort_key(self) -> tuple[str, str]:
        """Canonical ordering key used wherever output must be stable."""
        return (str(self.address), self.instance_id)


@dataclass(frozen=True)
class ClusterSnapshot:
    """
    Point-in-time view of the cluster, built fresh per reconciliation cycle.

    Attributes:
        processes: All known processes.
        connection_string: The live connection string; the active
            coordinator list is parsed from it.
        tls_required: Whether the cluster is configured to require TLS.
    """

    processes: tuple[Process, ...]
    connection_string: str
    tls_required: bool = False

    def process_for_address(self, address: ProcessAddress) -> Process | None:
        """Find the process listening on an address."""
        for process in self.processes:
            if process.address == address:
                return process
        return None

    @property
    def tls_consistent(self) -> bool:
        """True when every process agrees with tls_required."""
        return all(p.address.tls == self.tls_required for p in self.processes)


@dataclass(frozen=True)
class SelectionConstraint:
    """
    Limits applied while choosing a spread-out set of processes.

    Attributes:
        fields: Locality dimensions to spread across, broadest first.
            The first one is the primary grouping key.
        hard_limits: Maximum number of chosen processes that may share one
            value of a dimension. 0 or absent means unlimited.
    """

    fields: tuple[str, ...] = (LOCALITY_ZONE_ID, LOCALITY_DC_ID)
    hard_limits: dict[str, int] = field(default_factory=dict, hash=False)

    def dimensions(self) -> list[str]:
        """All constrained dimensions: fields, then hard-limited extras sorted."""
        extras = sorted(k for k in self.hard_limits if k not in self.fields)
        return list(self.fields) + extras


@dataclass(frozen=True)
class CoordinatorSet:
    """
    Result of a successful selection, in canonical order.

    Iterating yields the chosen processes; `addresses` gives the textual
    form passed to the admin interface.
    """

    processes: tuple[Process, ...]

    @property
    def addresses(self) -> list[str]:
        return [str(p.address) for p in self.processes]

    def __len__(self) -> int:
        return len(self.processes)

    def __iter__(self) -> Iterator[Process]:
        return iter(self.processes)


@dataclass(frozen=True)
class ClusterSpec:
    """
    Desired configuration of a cluster, as far as coordinators care.

    Attributes:
        name: Cluster identity, used for locks, state and events.
        redundancy_mode: Replication mode.
        usable_regions: Number of regions holding data.
        tls_required: Whether processes must listen on TLS.
        pending_removals: Instance ids of processes being decommissioned.
        configured: False until the database has been configured; no
            coordinator work happens before that.
        max_coordinators_per_zone: Looser zone bound used when the fleet has
            fewer eligible zones than coordinators are needed.
    """

    name: str
    redundancy_mode: RedundancyMode = RedundancyMode.DOUBLE
    usable_regions: int = 1
    tls_required: bool = False
    pending_removals: frozenset[str] = frozenset()
    configured: bool = True
    max_coordinators_per_zone: int | None = None

    def minimum_fault_domains(self) -> int:
        if self.redundancy_mode == RedundancyMode.SINGLE:
            return 1
        if self.redundancy_mode == RedundancyMode.DOUBLE:
            return 2
        return 3

    def desired_fault_tolerance(self) -> int:
        if self.redundancy_mode == RedundancyMode.SINGLE:
            return 0
        if self.redundancy_mode == RedundancyMode.DOUBLE:
            return 1
        return 2

    def desired_coordinator_count(self) -> int:
        """
        Number of coordinators the cluster should run.

        Multi-region and three_data_hall clusters always use 9; otherwise
        enough to survive the desired number of failures.
        """
        if self.usable_regions > 1 or self.redundancy_mode == RedundancyMode.THREE_DATA_HALL:
            return 9
        return self.minimum_fault_domains() + self.desired_fault_tolerance()

    def hard_limits(self, zone_count: int | None = None) -> dict[str, int]:
        """
        Per-dimension hard limits for coordinator selection.

        Args:
            zone_count: Distinct zones among eligible processes. When it is
                below the desired coordinator count and a looser zone bound
                is configured, that bound replaces the default of 1.
        """
        desired = self.desired_coordinator_count()
        zone_limit = 1
        if (
            zone_count is not None
            and zone_count < desired
            and self.max_coordinators_per_zone
        ):
            zone_limit = self.max_coordinators_per_zone

        limits = {LOCALITY_ZONE_ID: zone_limit}
        if self.usable_regions > 1:
            limits[LOCALITY_DC_ID] = desired // 2
        if self.redundancy_mode == RedundancyMode.THREE_DATA_HALL:
            limits[LOCALITY_DATA_HALL] = 3
        return limits

    def selection_constraint(self, zone_count: int | None = None) -> SelectionConstraint:
        fields: tuple[str, ...] = (LOCALITY_ZONE_ID, LOCALITY_DC_ID)
        if self.redundancy_mode == RedundancyMode.THREE_DATA_HALL:
            fields = (LOCALITY_DATA_HALL, LOCALITY_ZONE_ID, LOCALITY_DC_ID)
        return SelectionConstraint(fields=fields, hard_limits=self.hard_limits(zone_count))

    def is_being_removed(self, instance_id: str) -> bool:
        return bool(instance_id) and instance_id in self.pending_removals
