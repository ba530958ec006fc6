#!/usr/bin/env python3
"""
statetree CLI

Main entrypoint for the statetree command-line tool.
"""

import typer
from rich.console import Console
from rich.table import Table

from statetree.logging_config import setup_logging
from statetree_cli.commands import inspect, state

app = typer.Typer(
    name="statetree",
    help="Inspect hierarchical, namespaced state stores",
    add_completion=False,
)

console = Console()

app.command(name="inspect")(inspect.inspect_command)
app.command(name="state")(state.state_command)


@app.command()
def version():
    """Show version information."""
    from statetree import __version__ as engine_version
    from statetree_cli import __version__

    table = Table(show_header=False, box=None)
    table.add_row("[bold]statetree CLI[/bold]", f"v{__version__}")
    table.add_row("Engine", f"v{engine_version}")

    console.print(table)


def main():
    """Main entrypoint."""
    setup_logging()
    app()


if __name__ == "__main__":
    main()
