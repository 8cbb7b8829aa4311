"""Cluster state CLI commands.

- list: Show the recorded connection string of every known cluster
"""

import asyncio
import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from operator_fdb.config import Settings
from operator_fdb.db import ClusterStateDB

clusters_app = typer.Typer(help="Inspect recorded cluster state")


@clusters_app.command("list")
def list_clusters(
    db_path: Path = typer.Option(None, "--db", help="Path to the operator database"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """List clusters with their last recorded connection string."""
    path = db_path or Settings().db_path
    if not path.exists():
        print(f"No operator database at {path}")
        raise typer.Exit(1)

    async def _list() -> None:
        async with ClusterStateDB(path) as db:
            clusters = await db.list_clusters()

        if json_output:
            print(
                json.dumps(
                    [
                        {
                            "name": name,
                            "connection_string": connection_string,
                            "updated_at": updated_at.isoformat(),
                        }
                        for name, connection_string, updated_at in clusters
                    ],
                    indent=2,
                )
            )
            return

        if not clusters:
            print("No clusters recorded")
            return

        console = Console()
        table = Table(title="Clusters")
        table.add_column("Name", style="cyan")
        table.add_column("Connection string")
        table.add_column("Updated")

        for name, connection_string, updated_at in clusters:
            table.add_row(
                name,
                connection_string,
                updated_at.strftime("%Y-%m-%d %H:%M:%S"),
            )

        console.print(table)

    asyncio.run(_list())
