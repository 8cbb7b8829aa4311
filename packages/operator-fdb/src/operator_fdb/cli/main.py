"""Operator CLI - coordinator management for FoundationDB clusters."""

import logging

import typer

from operator_fdb.cli.clusters import clusters_app
from operator_fdb.cli.coordinators import coordinators_app
from operator_fdb.cli.events import events_app
from operator_fdb.config import Settings

app = typer.Typer(
    name="operator-fdb",
    help="Coordinator selection and change for FoundationDB clusters",
    no_args_is_help=True,
)

# Add command groups
app.add_typer(coordinators_app, name="coordinators")
app.add_typer(events_app, name="events")
app.add_typer(clusters_app, name="clusters")


@app.callback()
def configure(
    log_level: str = typer.Option(
        None, "--log-level", "-l", help="Logging level (default from FDB_OPERATOR_LOG_LEVEL)"
    ),
) -> None:
    """Configure logging for all commands."""
    level = (log_level or Settings().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
