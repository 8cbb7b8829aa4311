"""
Tests for coordinator validity checks.

These tests verify:
- A healthy set is valid
- Excluded and being-removed coordinators invalidate the set
- Mixed TLS invalidates the set and reports inconsistency
- Unknown coordinators raise in strict mode and invalidate otherwise
"""

import logging

import pytest

from operator_fdb.exceptions import MalformedConnectionStringError
from operator_fdb.types import ClusterSnapshot
from operator_fdb.validity import check_coordinator_validity


@pytest.fixture
def fleet(make_process):
    """Five storage processes in five zones."""
    return [make_process(f"10.0.0.{i}:4500", zone=f"z{i}") for i in range(1, 6)]


CURRENT = "test:abc@10.0.0.1:4500,10.0.0.2:4500,10.0.0.3:4500"


class TestCheckCoordinatorValidity:
    """Tests for check_coordinator_validity()."""

    def test_healthy_set_is_valid(self, fleet):
        snapshot = ClusterSnapshot(processes=tuple(fleet), connection_string=CURRENT)

        validity = check_coordinator_validity(snapshot)

        assert validity.has_valid_coordinators is True
        assert validity.all_addresses_consistent is True
        assert validity.invalid_coordinators == {}

    def test_unpacks_as_pair(self, fleet):
        snapshot = ClusterSnapshot(processes=tuple(fleet), connection_string=CURRENT)
        has_valid, consistent = check_coordinator_validity(snapshot)
        assert (has_valid, consistent) == (True, True)

    def test_excluded_coordinator_invalidates_set(self, make_process, fleet):
        fleet[1] = make_process("10.0.0.2:4500", zone="z2", excluded=True)
        snapshot = ClusterSnapshot(processes=tuple(fleet), connection_string=CURRENT)

        validity = check_coordinator_validity(snapshot)

        assert validity.has_valid_coordinators is False
        assert validity.all_addresses_consistent is True
        assert validity.invalid_coordinators == {"10.0.0.2:4500": "excluded"}

    def test_being_removed_coordinator_invalidates_set(self, make_process, fleet):
        fleet[2] = make_process("10.0.0.3:4500", zone="z3", being_removed=True)
        snapshot = ClusterSnapshot(processes=tuple(fleet), connection_string=CURRENT)

        validity = check_coordinator_validity(snapshot)

        assert validity.has_valid_coordinators is False
        assert validity.invalid_coordinators == {"10.0.0.3:4500": "being removed"}

    def test_excluded_non_coordinator_does_not_matter(self, make_process, fleet):
        fleet[4] = make_process("10.0.0.5:4500", zone="z5", excluded=True)
        snapshot = ClusterSnapshot(processes=tuple(fleet), connection_string=CURRENT)

        assert check_coordinator_validity(snapshot).has_valid_coordinators is True

    def test_mixed_tls_is_inconsistent_and_invalid(self, make_process):
        processes = (
            make_process("10.0.0.1:4500:tls", zone="z1"),
            make_process("10.0.0.2:4500:tls", zone="z2"),
            make_process("10.0.0.3:4500", zone="z3"),
        )
        snapshot = ClusterSnapshot(
            processes=processes,
            connection_string="test:abc@10.0.0.1:4500:tls,10.0.0.2:4500:tls",
            tls_required=True,
        )

        has_valid, consistent = check_coordinator_validity(snapshot)

        assert consistent is False
        assert has_valid is False

    def test_tls_not_required_but_fleet_on_tls_is_inconsistent(self, make_process):
        processes = (make_process("10.0.0.1:4500:tls", zone="z1"),)
        snapshot = ClusterSnapshot(
            processes=processes,
            connection_string="test:abc@10.0.0.1:4500:tls",
            tls_required=False,
        )
        assert check_coordinator_validity(snapshot).all_addresses_consistent is False

    def test_unknown_coordinator_strict_raises(self, fleet):
        snapshot = ClusterSnapshot(
            processes=tuple(fleet),
            connection_string="test:abc@10.0.0.1:4500,10.0.0.99:4500",
        )

        with pytest.raises(MalformedConnectionStringError, match="10.0.0.99:4500"):
            check_coordinator_validity(snapshot)

    def test_unknown_coordinator_lenient_invalidates(self, fleet):
        snapshot = ClusterSnapshot(
            processes=tuple(fleet),
            connection_string="test:abc@10.0.0.1:4500,10.0.0.99:4500",
        )

        validity = check_coordinator_validity(snapshot, strict=False)

        assert validity.has_valid_coordinators is False
        assert validity.invalid_coordinators == {"10.0.0.99:4500": "unknown process"}

    def test_tls_coordinator_does_not_match_plaintext_process(self, fleet):
        snapshot = ClusterSnapshot(
            processes=tuple(fleet),
            connection_string="test:abc@10.0.0.1:4500:tls",
        )
        with pytest.raises(MalformedConnectionStringError):
            check_coordinator_validity(snapshot)

    def test_unparseable_connection_string_raises(self, fleet):
        snapshot = ClusterSnapshot(processes=tuple(fleet), connection_string="garbage")
        with pytest.raises(MalformedConnectionStringError):
            check_coordinator_validity(snapshot, strict=False)

    def test_logs_invalid_coordinators(self, make_process, fleet, caplog):
        fleet[0] = make_process("10.0.0.1:4500", zone="z1", excluded=True)
        snapshot = ClusterSnapshot(processes=tuple(fleet), connection_string=CURRENT)

        with caplog.at_level(logging.INFO, logger="operator_fdb.validity"):
            check_coordinator_validity(snapshot)

        assert "Coordinator 10.0.0.1:4500 is invalid: excluded" in caplog.text
