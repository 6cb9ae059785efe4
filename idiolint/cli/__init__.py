"""Command-line interface for idiolint."""

from idiolint.cli.main import app, main

__all__ = ["app", "main"]
