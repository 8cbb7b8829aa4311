"""
Coordinator selection, change and the reconciliation step that drives them.

This module provides:
- select_coordinators(): Tiered escalation over candidate process classes
- apply_coordinators(): Commit a chosen set through the admin interface
- ChangeCoordinators: One reconciliation cycle for a cluster

Cycle outline:
1. Catch up the recorded connection string with the live one
2. Keep the current coordinators if they are still valid
3. Take the per-cluster change lock (non-blocking)
4. Defer while the fleet disagrees on TLS
5. Select, apply, persist
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from operator_fdb.exceptions import (
    InconsistentAddressesError,
    InsufficientCandidatesError,
)
from operator_fdb.locality import choose_distributed_processes, select_candidates
from operator_fdb.status import build_snapshot
from operator_fdb.types import (
    LOCALITY_ZONE_ID,
    ClusterSnapshot,
    ClusterSpec,
    CoordinatorSet,
    Process,
    ProcessClass,
    SelectionConstraint,
)
from operator_fdb.validity import check_coordinator_validity
from operator_protocols import (
    AdminClientProtocol,
    ClusterStateStoreProtocol,
    EventRecorderProtocol,
    LockClientProtocol,
)

logger = logging.getLogger(__name__)

CHANGE_COORDINATORS_REASON = "changing coordinators"


@dataclass(frozen=True)
class CandidateTier:
    """
    One escalation step: the class whose processes become eligible.

    Attributes:
        name: Label used in logs.
        process_class: Class added to the candidate pool at this step.
    """

    name: str
    process_class: str


# Least operationally sensitive classes first
COORDINATOR_TIERS: tuple[CandidateTier, ...] = (
    CandidateTier("storage", ProcessClass.STORAGE),
    CandidateTier("log", ProcessClass.LOG),
    CandidateTier("transaction", ProcessClass.TRANSACTION),
)


class EventKind(str, Enum):
    """Kinds of events emitted by the coordinator reconciler."""

    UPDATING_CONNECTION_STRING = "UpdatingConnectionString"
    DEFERRING_COORDINATOR_CHANGE = "DeferringCoordinatorChange"
    CHANGING_COORDINATORS = "ChangingCoordinators"


class ReconcileStatus(str, Enum):
    """How a reconciliation cycle ended."""

    NOT_CONFIGURED = "not_configured"
    VALID = "valid"
    LOCK_UNAVAILABLE = "lock_unavailable"
    DEFERRED = "deferred"
    CHANGED = "changed"


@dataclass
class ReconcileResult:
    """
    Result of one ChangeCoordinators cycle.

    Attributes:
        status: How the cycle ended.
        connection_string: The connection string after the cycle.
        coordinators: New coordinator addresses when status is CHANGED.
    """

    status: ReconcileStatus
    connection_string: str | None = None
    coordinators: list[str] = field(default_factory=list)

    @property
    def ready(self) -> bool:
        """False when the cycle could not run and should be retried."""
        return self.status != ReconcileStatus.LOCK_UNAVAILABLE


def eligible_zone_count(
    snapshot: ClusterSnapshot,
    tiers: tuple[CandidateTier, ...] = COORDINATOR_TIERS,
) -> int:
    """Count distinct zones among processes any tier could choose."""
    classes = {t.process_class for t in tiers}
    return len(
        {
            p.locality_value(LOCALITY_ZONE_ID)
            for p in snapshot.processes
            if p.eligible and p.process_class in classes
        }
    )


def select_coordinators(
    snapshot: ClusterSnapshot,
    desired_count: int,
    constraint: SelectionConstraint,
    tiers: tuple[CandidateTier, ...] = COORDINATOR_TIERS,
) -> CoordinatorSet:
    """
    Choose a coordinator set, widening the candidate pool only as needed.

    Each tier adds its class to the candidates gathered so far and retries
    the chooser. InsufficientCandidatesError moves on to the next tier; any
    other error propagates immediately.

    Args:
        snapshot: The cluster snapshot for this cycle.
        desired_count: Number of coordinators to choose.
        constraint: Spread dimensions and hard limits.
        tiers: Escalation steps, narrowest first.

    Returns:
        The chosen CoordinatorSet.

    Raises:
        InconsistentAddressesError: If the fleet disagrees on TLS.
        InsufficientCandidatesError: If even the last tier fails.
    """
    if not snapshot.tls_consistent:
        raise InconsistentAddressesError(
            sorted(
                str(p.address)
                for p in snapshot.processes
                if p.address.tls != snapshot.tls_required
            )
        )
    if not tiers:
        raise ValueError("At least one candidate tier is required")

    candidates: list[Process] = []
    error: InsufficientCandidatesError | None = None
    for tier in tiers:
        candidates = select_candidates(snapshot, candidates, tier.process_class)
        try:
            coordinators = choose_distributed_processes(
                candidates, desired_count, constraint
            )
        except InsufficientCandidatesError as e:
            logger.info(
                f"Not enough coordinator candidates with {tier.name} processes "
                f"({len(candidates)} candidates): {e}"
            )
            error = e
            continue

        logger.info(
            f"Selected coordinators from {tier.name} tier: "
            f"{', '.join(coordinators.addresses)}"
        )
        return coordinators

    raise error


async def apply_coordinators(
    admin: AdminClientProtocol, coordinators: CoordinatorSet
) -> str:
    """
    Commit a coordinator set through the admin interface.

    Returns:
        The new connection string, to be persisted by the caller.
    """
    return await admin.change_coordinators(coordinators.addresses)


class ChangeCoordinators:
    """
    Reconciliation step that keeps a cluster's coordinators valid.

    Every cycle recomputes from a fresh snapshot; there is no incremental
    state, so the step can be retried from scratch at any time. Repeating
    it on an unchanged fleet makes no further change.

    Example:
        step = ChangeCoordinators(
            admin=FdbCliAdminClient(cluster_file=Path("/var/fdb/fdb.cluster")),
            lock=lock_db,
            store=state_db,
            recorder=LoggingEventRecorder(),
        )
        result = await step.reconcile(ClusterSpec(name="prod"))
        if not result.ready:
            ...  # try again later
    """

    def __init__(
        self,
        admin: AdminClientProtocol,
        lock: LockClientProtocol,
        store: ClusterStateStoreProtocol,
        recorder: EventRecorderProtocol,
        strict_matching: bool = True,
        tiers: tuple[CandidateTier, ...] = COORDINATOR_TIERS,
    ) -> None:
        """
        Initialize the reconciler.

        Args:
            admin: Database admin interface
            lock: Per-cluster change lock
            store: Durable storage for the connection string
            recorder: Event sink; its failures never abort a cycle
            strict_matching: Treat coordinators that match no known process
                as a malformed connection string
            tiers: Candidate escalation steps
        """
        self.admin = admin
        self.lock = lock
        self.store = store
        self.recorder = recorder
        self.strict_matching = strict_matching
        self.tiers = tiers

    async def reconcile(self, cluster: ClusterSpec) -> ReconcileResult:
        """
        Run one cycle for a cluster.

        Returns:
            ReconcileResult describing what happened.

        Raises:
            MalformedConnectionStringError: If the active coordinators
                cannot be matched or parsed.
            InsufficientCandidatesError: If no tier yields a valid set.
            Exception: Admin, lock or persistence failures propagate as is.
        """
        if not cluster.configured:
            return ReconcileResult(status=ReconcileStatus.NOT_CONFIGURED)

        connection_string = await self.admin.get_connection_string()
        recorded = await self.store.get_connection_string(cluster.name)
        if connection_string != recorded:
            logger.info(f"Updating out-of-date connection string for cluster {cluster.name}")
            await self.store.update_connection_string(cluster.name, connection_string)
            await self._notify(
                cluster,
                EventKind.UPDATING_CONNECTION_STRING,
                f"Setting connection string to {connection_string}",
            )

        status = await self.admin.get_status()
        snapshot = build_snapshot(status, cluster, connection_string)

        validity = check_coordinator_validity(snapshot, strict=self.strict_matching)
        if validity.has_valid_coordinators:
            return ReconcileResult(
                status=ReconcileStatus.VALID, connection_string=connection_string
            )

        if not await self.lock.try_acquire(cluster.name, CHANGE_COORDINATORS_REASON):
            logger.info(f"Change lock for cluster {cluster.name} is held elsewhere")
            return ReconcileResult(
                status=ReconcileStatus.LOCK_UNAVAILABLE,
                connection_string=connection_string,
            )

        try:
            if not validity.all_addresses_consistent:
                logger.info(f"Deferring coordinator change for cluster {cluster.name}")
                await self._notify(
                    cluster,
                    EventKind.DEFERRING_COORDINATOR_CHANGE,
                    "Deferring coordinator change until all processes have "
                    "consistent address TLS settings",
                )
                return ReconcileResult(
                    status=ReconcileStatus.DEFERRED,
                    connection_string=connection_string,
                )

            logger.info(f"Changing coordinators for cluster {cluster.name}")
            await self._notify(
                cluster, EventKind.CHANGING_COORDINATORS, "Choosing new coordinators"
            )

            constraint = cluster.selection_constraint(
                eligible_zone_count(snapshot, self.tiers)
            )
            coordinators = select_coordinators(
                snapshot,
                cluster.desired_coordinator_count(),
                constraint,
                self.tiers,
            )
            logger.info(
                f"Final coordinator candidates for cluster {cluster.name}: "
                f"{', '.join(coordinators.addresses)}"
            )

            new_connection_string = await apply_coordinators(self.admin, coordinators)
            try:
                await self.store.update_connection_string(
                    cluster.name, new_connection_string
                )
            except Exception:
                logger.warning(
                    f"Coordinators changed for cluster {cluster.name} but the new "
                    f"connection string was not recorded; the next cycle will catch up"
                )
                raise

            return ReconcileResult(
                status=ReconcileStatus.CHANGED,
                connection_string=new_connection_string,
                coordinators=coordinators.addresses,
            )
        finally:
            await self.lock.release(cluster.name, CHANGE_COORDINATORS_REASON)

    async def _notify(self, cluster: ClusterSpec, kind: EventKind, message: str) -> None:
        """Record an event, logging instead of raising on failure."""
        try:
            await self.recorder.record(cluster.name, kind.value, message)
        except Exception as e:
            logger.warning(f"Failed to record {kind.value} event for {cluster.name}: {e}")
