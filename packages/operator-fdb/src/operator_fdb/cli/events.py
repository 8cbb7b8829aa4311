"""Event log CLI commands.

This module provides CLI commands for reading the event log written by
the reconciler:
- list: Display recent events in table or JSON format
"""

import asyncio
import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from operator_fdb.config import Settings
from operator_fdb.db import EventDB

events_app = typer.Typer(help="Inspect recorded operator events")


@events_app.command("list")
def list_events(
    cluster: str = typer.Option(None, "--cluster", "-c", help="Only events for this cluster"),
    limit: int = typer.Option(50, "--limit", "-n", help="Maximum number of events"),
    db_path: Path = typer.Option(None, "--db", help="Path to the operator database"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """List recent events, newest first."""
    path = db_path or Settings().db_path
    if not path.exists():
        print(f"No operator database at {path}")
        raise typer.Exit(1)

    async def _list() -> None:
        async with EventDB(path) as db:
            events = await db.list_events(cluster_name=cluster, limit=limit)

        if json_output:
            print(json.dumps([e.to_dict() for e in events], indent=2))
            return

        console = Console()
        table = Table(title="Events")
        table.add_column("ID", justify="right", style="cyan")
        table.add_column("Time")
        table.add_column("Cluster", style="green")
        table.add_column("Kind")
        table.add_column("Message")

        for e in events:
            table.add_row(
                str(e.id),
                e.created_at.strftime("%Y-%m-%d %H:%M:%S"),
                e.cluster_name,
                e.kind,
                e.message,
            )

        console.print(table)

    asyncio.run(_list())
