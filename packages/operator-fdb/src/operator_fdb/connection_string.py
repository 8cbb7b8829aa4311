"""
Connection string parsing.

A connection string has the form

    description:generation@addr1,addr2,...

where description is alphanumeric or underscore, generation is
alphanumeric, and each address is "ip:port[:tls]". The operator treats the
string as opaque apart from the coordinator list.
"""

import re
from dataclasses import dataclass

from operator_fdb.exceptions import MalformedConnectionStringError
from operator_fdb.types import ProcessAddress

_PATTERN = re.compile(r"^(?P<description>[A-Za-z0-9_]+):(?P<generation>[A-Za-z0-9]+)@(?P<addresses>.*)$")


@dataclass(frozen=True)
class ConnectionString:
    """
    Parsed connection string.

    Attributes:
        description: Human-readable cluster description.
        generation: Identifier that changes whenever coordinators change.
        coordinators: Coordinator addresses in the order listed.
    """

    description: str
    generation: str
    coordinators: tuple[ProcessAddress, ...]

    @classmethod
    def parse(cls, value: str) -> "ConnectionString":
        """
        Parse a connection string.

        Raises:
            MalformedConnectionStringError: If the overall form or any
                coordinator address is invalid, or the list is empty.
        """
        match = _PATTERN.match(value.strip())
        if match is None:
            raise MalformedConnectionStringError(
                value, "expected description:generation@addresses"
            )

        raw = [a.strip() for a in match["addresses"].split(",") if a.strip()]
        if not raw:
            raise MalformedConnectionStringError(value, "no coordinators listed")

        coordinators = []
        for address in raw:
            try:
                coordinators.append(ProcessAddress.parse(address))
            except ValueError as e:
                raise MalformedConnectionStringError(value, str(e)) from e

        return cls(
            description=match["description"],
            generation=match["generation"],
            coordinators=tuple(coordinators),
        )

    def __str__(self) -> str:
        addresses = ",".join(str(a) for a in self.coordinators)
        return f"{self.description}:{self.generation}@{addresses}"
