"""
Candidate filtering and spread-maximizing selection.

choose_distributed_processes() is the core algorithm: it picks N processes
so that no locality value exceeds its hard limit while spreading the
choice across failure domains as widely as possible.

The result depends only on the candidate set and the constraint, never on
input order: candidates and group keys are sorted before any iteration.
Two passes over an unchanged fleet therefore always agree, which keeps
coordinators from churning between cycles.
"""

import logging
from collections import Counter

from operator_fdb.exceptions import InsufficientCandidatesError
from operator_fdb.types import (
    ClusterSnapshot,
    CoordinatorSet,
    Process,
    SelectionConstraint,
)

logger = logging.getLogger(__name__)


def select_candidates(
    snapshot: ClusterSnapshot,
    already_included: list[Process],
    process_class: str,
) -> list[Process]:
    """
    Add eligible processes of one class to a candidate list.

    Excluded and being-removed processes are skipped. The input list is
    not modified; the result keeps every earlier candidate and never lists
    the same address twice.

    Args:
        snapshot: The cluster snapshot for this cycle.
        already_included: Candidates gathered from earlier classes.
        process_class: Class to add.

    Returns:
        already_included followed by the new candidates.
    """
    candidates = list(already_included)
    seen = {p.address for p in candidates}
    for process in snapshot.processes:
        if process.process_class != process_class or not process.eligible:
            continue
        if process.address in seen:
            continue
        seen.add(process.address)
        candidates.append(process)
    return candidates


def choose_distributed_processes(
    candidates: list[Process],
    count: int,
    constraint: SelectionConstraint,
) -> CoordinatorSet:
    """
    Choose `count` processes spread across failure domains.

    Candidates are grouped by the constraint's primary dimension and taken
    round-robin, one per group per pass. A pick must fit the current
    per-dimension limit for every constrained dimension. Spread dimensions
    start at a limit of 1; when a whole pass picks nothing the last
    relaxable spread dimension is raised by one, never past its hard limit.

    Args:
        candidates: Eligible processes, in any order.
        count: Number of processes to choose.
        constraint: Spread dimensions and hard limits.

    Returns:
        CoordinatorSet in canonical order.

    Raises:
        ValueError: If count is less than 1.
        InsufficientCandidatesError: If the constraints cannot be met.
    """
    if count < 1:
        raise ValueError(f"count must be at least 1, got {count}")

    ordered: list[Process] = []
    seen = set()
    for process in sorted(candidates, key=Process.sort_key):
        if process.address not in seen:
            seen.add(process.address)
            ordered.append(process)

    if count > len(ordered):
        raise InsufficientCandidatesError(count, len(ordered), len(ordered))

    fields = list(constraint.fields)
    dimensions = constraint.dimensions()
    primary = dimensions[0] if dimensions else None

    groups: dict[str, list[Process]] = {}
    for process in ordered:
        key = process.locality_value(primary) if primary else ""
        groups.setdefault(key, []).append(process)
    group_keys = sorted(groups)

    # Hard-limited extras are not spread dimensions and start at their bound
    limits = {d: 1 for d in fields}
    for dimension in dimensions:
        if dimension not in limits:
            limits[dimension] = constraint.hard_limits[dimension]

    counts: dict[str, Counter] = {d: Counter() for d in dimensions}
    chosen: list[Process] = []
    chosen_addresses = set()

    def fits(process: Process) -> bool:
        for dimension in dimensions:
            limit = limits[dimension]
            if limit > 0 and counts[dimension][process.locality_value(dimension)] >= limit:
                return False
        return True

    while len(chosen) < count:
        chose_any = False
        for key in group_keys:
            pick = next(
                (
                    p
                    for p in groups[key]
                    if p.address not in chosen_addresses and fits(p)
                ),
                None,
            )
            if pick is None:
                continue
            chosen.append(pick)
            chosen_addresses.add(pick.address)
            for dimension in dimensions:
                counts[dimension][pick.locality_value(dimension)] += 1
            chose_any = True
            if len(chosen) == count:
                break

        if not chose_any and not _relax(limits, fields, constraint, len(ordered)):
            logger.debug(
                f"Selection stuck at {len(chosen)}/{count} with limits {limits}"
            )
            raise InsufficientCandidatesError(count, len(chosen), len(ordered))

    return CoordinatorSet(processes=tuple(sorted(chosen, key=Process.sort_key)))


def _relax(
    limits: dict[str, int],
    fields: list[str],
    constraint: SelectionConstraint,
    candidate_count: int,
) -> bool:
    """
    Raise the limit of the narrowest spread dimension that still allows it.

    A dimension without a hard limit is capped at the candidate count,
    beyond which raising it cannot make anything newly eligible.

    Returns:
        True if a limit was raised.
    """
    for dimension in reversed(fields):
        hard_limit = constraint.hard_limits.get(dimension, 0)
        ceiling = hard_limit if hard_limit > 0 else candidate_count
        if limits[dimension] < ceiling:
            limits[dimension] += 1
            return True
    return False
