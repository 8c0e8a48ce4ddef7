"""Implementation of the `chatdown rules` command."""

from __future__ import annotations

from rich import box
from rich.table import Table

from chatdown.handlers import build_default_engine

from ..state import get_cli_state


def list_rules() -> None:
    """Print the built-in conversion rules in resolution order."""
    console = get_cli_state().console
    table = Table(
        title="Conversion Rules",
        box=box.SQUARE,
        show_edge=True,
        header_style="bold cyan",
    )
    table.add_column("#", justify="right")
    table.add_column("Priority", justify="right", style="green")
    table.add_column("Name", style="magenta")
    table.add_column("Filter")
    table.add_column("Matches")

    for entry in build_default_engine().describe():
        table.add_row(
            str(entry["order"]),
            str(entry["priority"]),
            str(entry["name"]),
            str(entry["filter"]),
            str(entry["matches"]),
        )

    console.print(table)


__all__ = ["list_rules"]
