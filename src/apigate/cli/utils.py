"""
CLI utility helpers — consoles and dispatcher loading.
"""

from __future__ import annotations

import importlib

import typer
from rich.console import Console

from apigate.framework.dispatcher import Dispatcher

console = Console()
err_console = Console(stderr=True)


def load_dispatcher(target: str) -> Dispatcher:
    """Resolve ``module:attribute`` to a Dispatcher.

    The attribute may be a Dispatcher or a zero-argument callable
    returning one.  Failures are reported and exit with code 1.
    """
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        err_console.print(f"[red]Target must look like 'module:attribute', got {target!r}[/red]")
        raise typer.Exit(code=1)

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        err_console.print(f"[red]Cannot import {module_name!r}: {e}[/red]")
        raise typer.Exit(code=1) from e

    obj = module
    for part in attr.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            err_console.print(f"[red]{module_name!r} has no attribute {attr!r}[/red]")
            raise typer.Exit(code=1) from e

    if not isinstance(obj, Dispatcher) and callable(obj):
        obj = obj()
    if not isinstance(obj, Dispatcher):
        err_console.print(f"[red]{target!r} is not a Dispatcher (got {type(obj).__name__})[/red]")
        raise typer.Exit(code=1)
    return obj
