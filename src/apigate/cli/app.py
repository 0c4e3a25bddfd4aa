"""
Root Typer application for the apigate CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from apigate.cli.operations import operations
from apigate.cli.serve import serve

app = Typer(
    name="apigate",
    help="apigate — expose handler classes as session-scoped HTTP operations.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from apigate import __version__

        typer.echo(f"apigate {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """apigate CLI — serve and inspect dispatchers."""


app.command("serve")(serve)
app.command("operations")(operations)


if __name__ == "__main__":
    app()
