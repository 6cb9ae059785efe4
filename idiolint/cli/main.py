"""idiolint CLI - Main entrypoint."""

from typing import Annotated

import typer
from rich.console import Console

from idiolint import __version__
from idiolint.cli.commands import lint_cmd, rules_cmd
from idiolint.core.logging import configure_logging

app = typer.Typer(
    name="idiolint",
    help="idiolint - idiom-aware diagnostics and mechanical fixes for Julia code.",
    no_args_is_help=True,
    invoke_without_command=True,
    rich_markup_mode="rich",
    pretty_exceptions_enable=False,
)

console = Console()

app.command(name=lint_cmd._CLI_NAME, help=lint_cmd._CLI_HELP)(lint_cmd.lint)
app.command(name=rules_cmd._CLI_NAME, help=rules_cmd._CLI_HELP)(rules_cmd.rules)

_LOG_LEVELS = {
    "debug": "DEBUG",
    "info": "INFO",
    "warn": "WARNING",
    "warning": "WARNING",
    "error": "ERROR",
}


@app.callback()
def callback(
    ctx: typer.Context,
    *,
    quiet: Annotated[
        bool, typer.Option("-q", "--quiet", help="Only log errors")
    ] = False,
    verbose: Annotated[
        bool, typer.Option("-V", "--verbose", help="Enable debug logging")
    ] = False,
    log_level: Annotated[
        str, typer.Option("--log-level", help="Log level: debug|info|warn|error")
    ] = "warn",
    log_format: Annotated[
        str, typer.Option("--log-format", help="Log format: structured|console|json|rich")
    ] = "structured",
    version: Annotated[
        bool, typer.Option("--version", "-v", help="Show version and exit")
    ] = False,
) -> None:
    """idiolint CLI.

    Global flags configure logging and are stored on `ctx.obj` for subcommands.
    """
    if version:
        console.print(f"[bold blue]idiolint[/bold blue] version [green]{__version__}[/green]")
        raise typer.Exit()
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit()

    if ctx.obj is None:
        ctx.obj = {}

    effective_level = _LOG_LEVELS.get(log_level.lower())
    if effective_level is None:
        console.print(
            f"[red]Invalid log level '{log_level}'.[/red] Choose from: debug, info, warn, error"
        )
        raise typer.Exit(2)
    if quiet:
        effective_level = "ERROR"
    elif verbose:
        effective_level = "DEBUG"

    if log_format not in ("structured", "console", "json", "rich"):
        console.print(
            f"[red]Invalid log format '{log_format}'.[/red] "
            "Choose from: structured, console, json, rich"
        )
        raise typer.Exit(2)

    ctx.obj.update({"log_level": effective_level, "log_format": log_format})
    configure_logging(level=effective_level, format=log_format)  # type: ignore[arg-type]


def main() -> None:
    """Main CLI entrypoint."""
    app()


if __name__ == "__main__":
    main()
