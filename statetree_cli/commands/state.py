"""
State command: print a store's root state and its fingerprint
"""

import json
import typer
from rich.console import Console
from rich.syntax import Syntax

from statetree.core.canonical import state_fingerprint
from statetree.query import snapshot_state
from statetree_cli.loader import TargetError, load_store

console = Console()


def state_command(
    target: str = typer.Argument(..., help="Store to load, as module:attribute or file.py:attribute"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Show the root state with keys sorted.

    Examples:
        statetree state myapp.store:store
        statetree state ./store.py:definition --json
    """
    try:
        store = load_store(target)
    except TargetError as e:
        if json_output:
            print(json.dumps({"error": str(e)}))
        else:
            console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    state = snapshot_state(store)
    fingerprint = state_fingerprint(store.state)

    if json_output:
        print(json.dumps({"state": state, "state_fingerprint": fingerprint}, indent=2, default=repr))
        return

    console.print(Syntax(json.dumps(state, indent=2, default=repr), "json", theme="monokai"))
    console.print(f"  State fingerprint: [yellow]{fingerprint}[/yellow]")
