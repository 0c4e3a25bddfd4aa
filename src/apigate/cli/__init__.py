"""apigate command line (typer + rich)."""
