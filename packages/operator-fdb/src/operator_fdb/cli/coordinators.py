"""Coordinator CLI commands.

This module provides CLI commands for coordinator management:
- check: Report whether the active coordinators are still valid
- select: Dry-run selection and print the set that would be chosen
- reconcile: Run one full change-coordinators cycle

check and select read status from fdbcli, or from a saved `status json`
document with --status-file. Cluster shape comes from FDB_OPERATOR_*
settings; options below override them.
"""

import asyncio
import json
from pathlib import Path
from typing import Any

import aiosqlite
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from operator_fdb.config import Settings
from operator_fdb.connection_string import ConnectionString
from operator_fdb.coordinators import (
    ReconcileStatus,
    eligible_zone_count,
    select_coordinators,
)
from operator_fdb.exceptions import CoordinatorError
from operator_fdb.factory import create_admin_client, create_change_coordinators
from operator_fdb.status import DatabaseStatus
from operator_fdb.types import (
    LOCALITY_DC_ID,
    LOCALITY_ZONE_ID,
    ClusterSnapshot,
    ClusterSpec,
    RedundancyMode,
)
from operator_fdb.validity import check_coordinator_validity

coordinators_app = typer.Typer(help="Check, select and change coordinators")

# Exit code when the change lock is held elsewhere
EXIT_NOT_READY = 2

# Errors reported as "Error: ..." with exit code 1
COMMAND_ERRORS = (
    CoordinatorError,
    ValidationError,
    json.JSONDecodeError,
    OSError,
    aiosqlite.Error,
)


def _settings(
    cluster: str | None,
    redundancy_mode: RedundancyMode | None,
    cluster_file: Path | None,
    db_path: Path | None = None,
) -> Settings:
    """Load settings and apply command-line overrides."""
    settings = Settings()
    overrides: dict[str, Any] = {}
    if cluster:
        overrides["cluster_name"] = cluster
    if redundancy_mode:
        overrides["redundancy_mode"] = redundancy_mode
    if cluster_file:
        overrides["cluster_file"] = cluster_file
    if db_path:
        overrides["db_path"] = db_path
    return settings.model_copy(update=overrides)


def _load_snapshot(
    settings: Settings,
    spec: ClusterSpec,
    status_file: Path | None,
    connection_string: str | None,
) -> ClusterSnapshot:
    """Build a snapshot from a saved status document or live fdbcli."""
    if status_file is not None:
        status = DatabaseStatus.model_validate(json.loads(status_file.read_text()))
        current = connection_string or status.cluster.connection_string
        if not current:
            print("Error: status file has no connection string; pass --connection-string")
            raise typer.Exit(1)
        return status.to_snapshot(spec, current)

    async def _fetch() -> tuple[dict[str, Any], str]:
        admin = create_admin_client(settings)
        return await admin.get_status(), await admin.get_connection_string()

    raw, live = asyncio.run(_fetch())
    return DatabaseStatus.model_validate(raw).to_snapshot(
        spec, connection_string or live
    )


@coordinators_app.command("check")
def check(
    cluster: str = typer.Option(None, "--cluster", "-c", help="Cluster name"),
    redundancy_mode: RedundancyMode = typer.Option(None, "--redundancy-mode", "-r"),
    cluster_file: Path = typer.Option(None, "--cluster-file", help="fdbcli cluster file"),
    status_file: Path = typer.Option(
        None, "--status-file", "-f", help="Saved `status json` document"
    ),
    connection_string: str = typer.Option(
        None, "--connection-string", help="Connection string to check"
    ),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Report whether the active coordinators are still valid."""
    settings = _settings(cluster, redundancy_mode, cluster_file)
    spec = settings.cluster_spec()

    try:
        snapshot = _load_snapshot(settings, spec, status_file, connection_string)
        validity = check_coordinator_validity(
            snapshot, strict=settings.strict_coordinator_matching
        )
    except COMMAND_ERRORS as e:
        print(f"Error: {e}")
        raise typer.Exit(1)

    coordinators = ConnectionString.parse(snapshot.connection_string).coordinators

    if json_output:
        print(
            json.dumps(
                {
                    "cluster": spec.name,
                    "has_valid_coordinators": validity.has_valid_coordinators,
                    "all_addresses_consistent": validity.all_addresses_consistent,
                    "coordinators": [str(a) for a in coordinators],
                    "invalid_coordinators": validity.invalid_coordinators,
                },
                indent=2,
            )
        )
        return

    console = Console()
    table = Table(title=f"Coordinators for {spec.name}")
    table.add_column("Address", style="cyan")
    table.add_column("Class")
    table.add_column("Zone")
    table.add_column("State", justify="center")

    for address in coordinators:
        process = snapshot.process_for_address(address)
        reason = validity.invalid_coordinators.get(str(address))
        state = f"[red]{reason}[/red]" if reason else "[green]ok[/green]"
        table.add_row(
            str(address),
            process.process_class if process else "-",
            process.locality_value(LOCALITY_ZONE_ID) if process else "-",
            state,
        )

    console.print(table)
    if not validity.all_addresses_consistent:
        console.print("[yellow]Processes disagree on TLS; coordinator changes are deferred[/yellow]")
    verdict = "[green]valid[/green]" if validity.has_valid_coordinators else "[red]invalid[/red]"
    console.print(f"Coordinators are {verdict}")


@coordinators_app.command("select")
def select(
    cluster: str = typer.Option(None, "--cluster", "-c", help="Cluster name"),
    redundancy_mode: RedundancyMode = typer.Option(None, "--redundancy-mode", "-r"),
    cluster_file: Path = typer.Option(None, "--cluster-file", help="fdbcli cluster file"),
    status_file: Path = typer.Option(
        None, "--status-file", "-f", help="Saved `status json` document"
    ),
    connection_string: str = typer.Option(
        None, "--connection-string", help="Connection string of the status document"
    ),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Show the coordinators that would be chosen, without changing anything."""
    settings = _settings(cluster, redundancy_mode, cluster_file)
    spec = settings.cluster_spec()

    try:
        snapshot = _load_snapshot(settings, spec, status_file, connection_string)
        coordinators = select_coordinators(
            snapshot,
            spec.desired_coordinator_count(),
            spec.selection_constraint(eligible_zone_count(snapshot)),
        )
    except COMMAND_ERRORS as e:
        print(f"Error: {e}")
        raise typer.Exit(1)

    if json_output:
        print(json.dumps({"cluster": spec.name, "coordinators": coordinators.addresses}, indent=2))
        return

    console = Console()
    table = Table(title=f"Selected coordinators for {spec.name}")
    table.add_column("Address", style="cyan")
    table.add_column("Class")
    table.add_column("Zone")
    table.add_column("DC")
    table.add_column("Instance")

    for process in coordinators:
        table.add_row(
            str(process.address),
            process.process_class,
            process.locality_value(LOCALITY_ZONE_ID) or "-",
            process.locality_value(LOCALITY_DC_ID) or "-",
            process.instance_id or "-",
        )

    console.print(table)


@coordinators_app.command("reconcile")
def reconcile(
    cluster: str = typer.Option(None, "--cluster", "-c", help="Cluster name"),
    redundancy_mode: RedundancyMode = typer.Option(None, "--redundancy-mode", "-r"),
    cluster_file: Path = typer.Option(None, "--cluster-file", help="fdbcli cluster file"),
    db_path: Path = typer.Option(None, "--db", help="Path to the operator database"),
) -> None:
    """
    Run one change-coordinators cycle.

    Exits 0 when the cycle completed (including no-op and deferral),
    2 when another operator holds the change lock, 1 on errors.
    """
    settings = _settings(cluster, redundancy_mode, cluster_file, db_path)
    spec = settings.cluster_spec()

    async def _run() -> None:
        async with create_change_coordinators(settings) as step:
            result = await step.reconcile(spec)

        if result.status == ReconcileStatus.CHANGED:
            print(f"Changed coordinators to {', '.join(result.coordinators)}")
            print(f"Connection string: {result.connection_string}")
        elif result.status == ReconcileStatus.VALID:
            print("Coordinators are valid; nothing to do")
        elif result.status == ReconcileStatus.DEFERRED:
            print("Coordinator change deferred until TLS settings are consistent")
        elif result.status == ReconcileStatus.NOT_CONFIGURED:
            print("Cluster is not configured yet; nothing to do")
        else:
            print("Change lock is held elsewhere; try again later")
            raise typer.Exit(EXIT_NOT_READY)

    try:
        asyncio.run(_run())
    except COMMAND_ERRORS as e:
        print(f"Error: {e}")
        raise typer.Exit(1)
