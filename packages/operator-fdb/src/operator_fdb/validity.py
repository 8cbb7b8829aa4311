"""
Coordinator validity checks.

Decides whether the currently active coordinator set is still acceptable:
- Every coordinator maps to a known process
- No coordinator is excluded or being removed
- The fleet agrees on TLS, so any address we pick is reachable by everyone

The check is a pure function of a ClusterSnapshot.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterator

from operator_fdb.connection_string import ConnectionString
from operator_fdb.exceptions import MalformedConnectionStringError
from operator_fdb.types import ClusterSnapshot

logger = logging.getLogger(__name__)


@dataclass
class CoordinatorValidity:
    """
    Outcome of a validity check.

    Unpacks as (has_valid_coordinators, all_addresses_consistent).

    Attributes:
        has_valid_coordinators: The active set can be kept as is.
        all_addresses_consistent: The fleet agrees on TLS. When False no
            coordinator change may be made.
        invalid_coordinators: Coordinator addresses that made the set
            invalid, with the reason.
    """

    has_valid_coordinators: bool
    all_addresses_consistent: bool
    invalid_coordinators: dict[str, str] = field(default_factory=dict)

    def __iter__(self) -> Iterator[bool]:
        return iter((self.has_valid_coordinators, self.all_addresses_consistent))


def check_coordinator_validity(
    snapshot: ClusterSnapshot, strict: bool = True
) -> CoordinatorValidity:
    """
    Check whether the active coordinators are still acceptable.

    Args:
        snapshot: The cluster snapshot for this cycle.
        strict: When True a coordinator that matches no known process is a
            MalformedConnectionStringError. When False it only makes the
            set invalid.

    Returns:
        CoordinatorValidity for the snapshot.

    Raises:
        MalformedConnectionStringError: If the connection string cannot be
            parsed, lists no coordinators, or (strict) names an unknown
            process.
    """
    connection_string = ConnectionString.parse(snapshot.connection_string)

    inconsistent = [
        str(p.address)
        for p in snapshot.processes
        if p.address.tls != snapshot.tls_required
    ]
    all_addresses_consistent = not inconsistent
    if inconsistent:
        logger.info(
            f"Processes with TLS setting other than tls_required={snapshot.tls_required}: "
            f"{', '.join(sorted(inconsistent))}"
        )

    invalid: dict[str, str] = {}
    for address in connection_string.coordinators:
        process = snapshot.process_for_address(address)
        if process is None:
            if strict:
                raise MalformedConnectionStringError(
                    snapshot.connection_string,
                    f"coordinator {address} does not match any known process",
                )
            invalid[str(address)] = "unknown process"
        elif process.excluded:
            invalid[str(address)] = "excluded"
        elif process.being_removed:
            invalid[str(address)] = "being removed"

    for address, reason in invalid.items():
        logger.info(f"Coordinator {address} is invalid: {reason}")

    return CoordinatorValidity(
        has_valid_coordinators=not invalid and all_addresses_consistent,
        all_addresses_consistent=all_addresses_consistent,
        invalid_coordinators=invalid,
    )
