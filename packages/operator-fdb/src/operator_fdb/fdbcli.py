"""
fdbcli-backed admin client.

This module provides FdbCliAdminClient, which implements
AdminClientProtocol by running `fdbcli --exec` against a cluster file.

All commands use asyncio.create_subprocess_exec with array arguments
(never a shell) and are bounded by a timeout. Failures raise
AdminCommandError so the reconciliation cycle fails and is retried.
"""

import asyncio
import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from operator_fdb.exceptions import AdminCommandError

logger = logging.getLogger(__name__)

CONNECTION_STRING_KEY = r"\xff\xff/connection_string"
_CONNECTION_STRING_OUTPUT = re.compile(
    r"`\\xff\\xff/connection_string' is `(?P<value>[^']*)'"
)


@dataclass
class FdbCliAdminClient:
    """
    Admin client that shells out to fdbcli.

    Attributes:
        cluster_file: Path to the cluster file fdbcli should connect with.
        fdbcli_path: fdbcli executable name or path.
        timeout_seconds: Per-command timeout, passed to fdbcli and enforced
            around the subprocess.

    Example:
        client = FdbCliAdminClient(cluster_file=Path("/var/fdb/fdb.cluster"))
        status = await client.get_status()
        print(len(status["cluster"]["processes"]))
    """

    cluster_file: Path
    fdbcli_path: str = "fdbcli"
    timeout_seconds: float = 10.0

    async def get_connection_string(self) -> str:
        """
        Read the live connection string from the special key space.

        Raises:
            AdminCommandError: If fdbcli fails or prints something unexpected.
        """
        command = f"option on ACCESS_SYSTEM_KEYS; get {CONNECTION_STRING_KEY}"
        output = await self._run(command)
        match = _CONNECTION_STRING_OUTPUT.search(output)
        if match is None:
            raise AdminCommandError(command, 0, f"unexpected output: {output.strip()}")
        return match["value"]

    async def get_status(self) -> dict[str, Any]:
        """
        Get the machine-readable status document.

        fdbcli may print warnings before the JSON body; everything before
        the first '{' is skipped.

        Raises:
            AdminCommandError: If fdbcli fails or the output is not JSON.
        """
        command = "status json"
        output = await self._run(command)
        start = output.find("{")
        if start == -1:
            raise AdminCommandError(command, 0, "no JSON in output")
        try:
            return json.loads(output[start:])
        except json.JSONDecodeError as e:
            raise AdminCommandError(command, 0, f"invalid JSON: {e}") from e

    async def change_coordinators(self, addresses: list[str]) -> str:
        """
        Replace the coordinators and return the resulting connection string.

        Raises:
            ValueError: If no addresses are given.
            AdminCommandError: If fdbcli rejects the change.
        """
        if not addresses:
            raise ValueError("At least one coordinator address is required")
        logger.info(f"Changing coordinators to {' '.join(addresses)}")
        await self._run("coordinators " + " ".join(addresses))
        return await self.get_connection_string()

    async def _run(self, command: str) -> str:
        """
        Run one fdbcli command and return its stdout.

        Raises:
            AdminCommandError: On non-zero exit or timeout.
        """
        timeout = int(self.timeout_seconds)
        proc = await asyncio.create_subprocess_exec(
            self.fdbcli_path,
            "-C",
            str(self.cluster_file),
            "--exec",
            command,
            "--timeout",
            str(max(timeout, 1)),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )

        try:
            # Allow fdbcli to hit its own timeout first
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(), timeout=self.timeout_seconds + 5
            )
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            raise AdminCommandError(command, None, "")

        if proc.returncode != 0:
            raise AdminCommandError(
                command,
                proc.returncode,
                stderr.decode("utf-8", errors="replace")
                or stdout.decode("utf-8", errors="replace"),
            )
        return stdout.decode("utf-8", errors="replace")
