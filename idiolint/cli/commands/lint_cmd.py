"""Source linting command for the idiolint CLI."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from idiolint.builtin.rules import default_registry
from idiolint.compiler.config_loader import load_config
from idiolint.kernel.config.models import LintConfig
from idiolint.kernel.exceptions import ConfigurationError, UnknownRuleError
from idiolint.kernel.linting.models import Category, Severity
from idiolint.kernel.orchestration.runner import LintRunner, RunReport

console = Console()

_CLI_NAME = "lint"
_CLI_HELP = "Lint Julia source files for non-idiomatic patterns"

SOURCE_SUFFIX = ".jl"


def _split(values: list[str] | None) -> list[str]:
    items: list[str] = []
    for value in values or []:
        items.extend(item.strip() for item in value.split(",") if item.strip())
    return items


def collect_sources(paths: list[Path]) -> list[Path]:
    """Expand directories into the source files below them, sorted."""
    files: set[Path] = set()
    for path in paths:
        if path.is_dir():
            files.update(p for p in path.rglob(f"*{SOURCE_SUFFIX}") if p.is_file())
        else:
            files.add(path)
    return sorted(files)


def lint(
    paths: Annotated[
        list[Path],
        typer.Argument(
            help="Files or directories to lint",
            exists=True,
            file_okay=True,
            dir_okay=True,
            readable=True,
        ),
    ],
    category: Annotated[
        list[str] | None,
        typer.Option("--category", "-c", help="Only run rules in these categories"),
    ] = None,
    select: Annotated[
        list[str] | None,
        typer.Option("--select", "-s", help="Only run these rule ids (comma-separated)"),
    ] = None,
    disable: Annotated[
        list[str] | None,
        typer.Option("--disable", "-d", help="Skip these rule ids (comma-separated)"),
    ] = None,
    output_format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format (text, json)"),
    ] = "text",
    fix: Annotated[
        bool, typer.Option("--fix", help="Apply safe fixes in place")
    ] = False,
    unsafe_fixes: Annotated[
        bool, typer.Option("--unsafe-fixes", help="Also apply fixes marked unsafe")
    ] = False,
    workers: Annotated[
        int | None, typer.Option("--workers", "-w", min=1, help="Files analysed concurrently")
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", help="kind: Config YAML or pyproject.toml to read"),
    ] = None,
) -> None:
    """Lint Julia source files for non-idiomatic patterns.

    Exits with status 1 when any error-severity diagnostic is reported.

    Examples
    --------
    idiolint lint src/
    idiolint lint geometry.jl --category typing --format json
    idiolint lint src/ --disable elaborate-union --fix
    """
    if output_format not in ("text", "json"):
        console.print(f"[red]Invalid format '{output_format}'.[/red] Choose from: text, json")
        raise typer.Exit(2)

    try:
        config = load_config(config_path)
        categories = _categories(category) or config.categories
    except (ConfigurationError, FileNotFoundError, ValueError) as e:
        console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        raise typer.Exit(2) from e

    rule_ids = _split(select) or config.select_rules
    try:
        runner = LintRunner(
            default_registry(),
            categories=categories,
            rule_ids=rule_ids or None,
            exclude=[*config.disable_rules, *_split(disable)],
            max_workers=workers or config.max_workers,
            fix=fix or unsafe_fixes,
            unsafe_fixes=unsafe_fixes or config.unsafe_fixes,
        )
    except UnknownRuleError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(2) from e

    report = runner.run_sync(collect_sources(paths))

    if output_format == "json":
        _print_json(report)
    else:
        _print_text(report, config)

    if report.has_errors:
        raise typer.Exit(1)


def _categories(values: list[str] | None) -> frozenset[Category] | None:
    names = _split(values)
    if not names:
        return None
    try:
        return frozenset(Category(name) for name in names)
    except ValueError as e:
        known = ", ".join(c.value for c in Category)
        raise ValueError(f"{e}. Known categories: {known}") from e


def _print_text(report: RunReport, config: LintConfig) -> None:
    """Print lint results as rich text."""
    rows = report.rows()
    console.print()

    if not rows:
        console.print(f"[green]No issues found[/green] in {len(report.files)} file(s)")
    else:
        counts = report.counts_by_severity()
        console.print(
            f"[bold]{len(report.files)} file(s)[/bold]  "
            f"[red]{counts[Severity.ERROR]} error(s)[/red]  "
            f"[yellow]{counts[Severity.WARNING]} warning(s)[/yellow]  "
            f"[blue]{counts[Severity.INFO]} info[/blue]"
        )
        console.print()

        table = Table(show_header=True, border_style="dim")
        table.add_column("Location", style="green")
        table.add_column("Rule", style="cyan")
        table.add_column("Severity")
        table.add_column("Message")
        table.add_column("Fix", justify="center")

        severity_style = {"error": "red", "warning": "yellow", "info": "blue"}
        for row in rows:
            style = severity_style.get(row.severity, "white")
            table.add_row(
                escape(f"{row.file}:{row.line}:{row.column}"),
                row.rule_id,
                f"[{style}]{row.severity}[/{style}]",
                escape(row.message),
                "✓" if row.has_fix else "",
            )
        console.print(table)

    for file_report in report.files:
        outcome = file_report.fix_outcome
        if outcome is None:
            continue
        if outcome.changed:
            console.print(
                f"[green]Fixed {outcome.applied_count} issue(s)[/green] "
                f"in {escape(file_report.path)}"
            )
        for conflict in outcome.conflicts:
            console.print(
                f"[yellow]Skipped overlapping fix[/yellow] {conflict.rule_id} at "
                f"{escape(file_report.path)}:{conflict.span.line}:{conflict.span.column}"
            )
        if outcome.skipped_unsafe and not config.unsafe_fixes:
            console.print(
                f"[dim]{outcome.skipped_unsafe} unsafe fix(es) available in "
                f"{escape(file_report.path)} (use --unsafe-fixes)[/dim]"
            )

    if report.cancelled:
        console.print(f"[yellow]Cancelled; {len(report.skipped)} file(s) not linted[/yellow]")
    console.print()


def _print_json(report: RunReport) -> None:
    """Print lint results as JSON rows."""
    typer.echo(json.dumps([row.to_dict() for row in report.rows()], indent=2))
