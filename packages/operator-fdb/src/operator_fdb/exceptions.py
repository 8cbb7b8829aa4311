"""
Exception classes for coordinator selection and change.

This module defines the errors the coordinator core raises:
- MalformedConnectionStringError: Connection string or coordinator unusable
- InsufficientCandidatesError: Not enough candidates under the constraints
- InconsistentAddressesError: Fleet disagrees on TLS, selection refused
- AdminCommandError: Admin interface command failed

Per project patterns:
- Inherit from a common base exception type
- Store context data in attributes for error handling
- Include descriptive message with relevant details
"""


class CoordinatorError(Exception):
    """Base class for coordinator operator errors."""


class MalformedConnectionStringError(CoordinatorError):
    """
    Raised when the active coordinator list cannot be trusted.

    Covers unparseable connection strings, unparseable coordinator
    addresses, an empty coordinator list, and coordinators that match no
    known process.

    Attributes:
        connection_string: The offending connection string
        reason: What was wrong with it
    """

    def __init__(self, connection_string: str, reason: str) -> None:
        self.connection_string = connection_string
        self.reason = reason
        super().__init__(
            f"Malformed connection string '{connection_string}': {reason}"
        )


class InsufficientCandidatesError(CoordinatorError):
    """
    Raised when a valid set of the desired size cannot be chosen.

    Expected and retryable while escalating through candidate tiers;
    fatal for the cycle once the last tier fails.

    Attributes:
        desired: Number of processes requested
        chosen: Number that could be chosen under the constraints
        candidate_count: Number of candidates considered
    """

    def __init__(self, desired: int, chosen: int, candidate_count: int) -> None:
        self.desired = desired
        self.chosen = chosen
        self.candidate_count = candidate_count
        super().__init__(
            f"Could only select {chosen} of {desired} processes "
            f"from {candidate_count} candidates"
        )


class InconsistentAddressesError(CoordinatorError):
    """
    Raised when selection is attempted on a fleet with mixed TLS settings.

    Attributes:
        addresses: Addresses whose TLS marking differs from the cluster's
    """

    def __init__(self, addresses: list[str]) -> None:
        self.addresses = addresses
        super().__init__(
            "Processes have inconsistent TLS settings: " + ", ".join(addresses)
        )


class AdminCommandError(CoordinatorError):
    """
    Raised when an admin interface command fails or times out.

    Attributes:
        command: The command that was run
        returncode: Process exit code (None on timeout)
        stderr: Captured error output
    """

    def __init__(self, command: str, returncode: int | None, stderr: str) -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        outcome = "timed out" if returncode is None else f"exited with {returncode}"
        detail = f": {stderr.strip()}" if stderr.strip() else ""
        super().__init__(f"Admin command '{command}' {outcome}{detail}")
