"""Command line entry point and REPLs for couch-shell."""

from couch_shell.cli.main import build_shell, main

__all__ = ["build_shell", "main"]
