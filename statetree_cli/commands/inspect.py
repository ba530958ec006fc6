"""
Inspect command: module tree, namespaces and qualified types of a store
"""

import json
import typer
from rich.console import Console
from rich.table import Table

from statetree.query import describe_store
from statetree_cli.loader import TargetError, load_store

console = Console()


def inspect_command(
    target: str = typer.Argument(..., help="Store to load, as module:attribute or file.py:attribute"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Show the module tree and the qualified types it installs.

    Examples:
        statetree inspect myapp.store:store
        statetree inspect ./store.py:definition --json
    """
    try:
        store = load_store(target)
    except TargetError as e:
        if json_output:
            print(json.dumps({"error": str(e)}))
        else:
            console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    info = describe_store(store)

    if json_output:
        print(json.dumps(info, indent=2))
        return

    console.print(f"[bold]Store[/bold] [cyan]{info['store_id']}[/cyan] strict={info['strict']}")

    modules = Table(title="Modules")
    modules.add_column("Path", style="green")
    modules.add_column("Namespace", style="cyan")
    modules.add_column("Runtime")
    modules.add_column("Mutations", justify="right")
    modules.add_column("Actions", justify="right")
    modules.add_column("Getters", justify="right")
    for row in info["modules"]:
        modules.add_row(
            row["path"],
            row["namespace"] or "-",
            "yes" if row["runtime"] else "no",
            str(len(row["mutations"])),
            str(len(row["actions"])),
            str(len(row["getters"])),
        )
    console.print(modules)

    types = Table(title="Qualified Types")
    types.add_column("Kind", style="green")
    types.add_column("Type", style="cyan")
    types.add_column("Handlers", justify="right")
    for kind, table in info["types"].items():
        for type_, count in table.items():
            types.add_row(kind, type_, str(count))
    console.print(types)

    console.print(f"  State fingerprint: [yellow]{info['state_fingerprint']}[/yellow]")
