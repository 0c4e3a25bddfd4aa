"""
CLI: ``apigate operations`` — print a dispatcher's operation table.
"""

from __future__ import annotations

import typer
from rich.table import Table

from apigate.cli.utils import console, load_dispatcher


def operations(
    target: str = typer.Argument(..., help="Dispatcher as 'module:attribute'"),
    all_methods: bool = typer.Option(False, "--all", "-a", help="Include public methods that are not exposed"),
) -> None:
    """List the operations a dispatcher exposes."""
    dispatcher = load_dispatcher(target)

    table = Table(title=f"Operations of {dispatcher.name}")
    table.add_column("Path", style="cyan", no_wrap=True)
    table.add_column("HTTP")
    table.add_column("Level", justify="right")
    table.add_column("Mode")
    table.add_column("Lock group")
    table.add_column("Parameters")

    for class_id, descriptor in dispatcher.registry.items():
        for name, op in sorted(descriptor.operations.items()):
            if op is None:
                if all_methods:
                    table.add_row(f"/{class_id}/{name}", "-", "-", "[dim]not exposed[/dim]", "", "")
                continue
            params = ", ".join(
                f"{p.request_name}{'?' if p.optional else ''}" for p in op.params if p.request_name
            )
            table.add_row(
                f"/{class_id}/{name}",
                op.http_method,
                str(op.access_level),
                op.mode.value + (" (static)" if op.is_static else ""),
                op.locking_group,
                params,
            )

    console.print(table)
