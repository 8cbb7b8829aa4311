"""
FoundationDB coordinator operator.

This package selects, validates and changes the coordinator set of a
FoundationDB cluster. It includes:

- Locality model: ProcessAddress, Process, ClusterSnapshot, ClusterSpec
- Validity checker for the active coordinators
- Candidate selector and the spread-maximizing chooser
- Tiered escalation over process classes
- ChangeCoordinators reconciliation step
- Adapters: fdbcli admin client, SQLite state/lock/event stores,
  webhook and logging event recorders
"""

__version__ = "0.1.0"

from operator_fdb.connection_string import ConnectionString
from operator_fdb.coordinators import (
    COORDINATOR_TIERS,
    CandidateTier,
    ChangeCoordinators,
    EventKind,
    ReconcileResult,
    ReconcileStatus,
    apply_coordinators,
    select_coordinators,
)
from operator_fdb.exceptions import (
    AdminCommandError,
    CoordinatorError,
    InconsistentAddressesError,
    InsufficientCandidatesError,
    MalformedConnectionStringError,
)
from operator_fdb.locality import choose_distributed_processes, select_candidates
from operator_fdb.status import DatabaseStatus, build_snapshot
from operator_fdb.types import (
    ClusterSnapshot,
    ClusterSpec,
    CoordinatorSet,
    Process,
    ProcessAddress,
    ProcessClass,
    RedundancyMode,
    SelectionConstraint,
)
from operator_fdb.validity import CoordinatorValidity, check_coordinator_validity

__all__ = [
    "__version__",
    # Types
    "ClusterSnapshot",
    "ClusterSpec",
    "ConnectionString",
    "CoordinatorSet",
    "Process",
    "ProcessAddress",
    "ProcessClass",
    "RedundancyMode",
    "SelectionConstraint",
    "DatabaseStatus",
    "build_snapshot",
    # Validity
    "CoordinatorValidity",
    "check_coordinator_validity",
    # Selection
    "select_candidates",
    "choose_distributed_processes",
    "CandidateTier",
    "COORDINATOR_TIERS",
    "select_coordinators",
    "apply_coordinators",
    # Reconciliation
    "ChangeCoordinators",
    "EventKind",
    "ReconcileResult",
    "ReconcileStatus",
    # Errors
    "CoordinatorError",
    "MalformedConnectionStringError",
    "InsufficientCandidatesError",
    "InconsistentAddressesError",
    "AdminCommandError",
]
