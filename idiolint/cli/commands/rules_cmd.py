"""Rule catalogue command for the idiolint CLI."""

from __future__ import annotations

import json
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from idiolint.builtin.rules import default_registry
from idiolint.kernel.linting.models import Category

console = Console()

_CLI_NAME = "rules"
_CLI_HELP = "List the available lint rules"


def rules(
    category: Annotated[
        str | None, typer.Option("--category", "-c", help="Only show this category")
    ] = None,
    output_format: Annotated[
        str, typer.Option("--format", "-f", help="Output format (text, json)")
    ] = "text",
) -> None:
    """List the available lint rules in registry order."""
    registry = default_registry()
    categories = None
    if category:
        try:
            categories = [Category(category)]
        except ValueError as e:
            known = ", ".join(c.value for c in Category)
            console.print(f"[red]Unknown category '{escape(category)}'.[/red] Known: {known}")
            raise typer.Exit(2) from e
    enabled = registry.enabled(categories)

    if output_format == "json":
        typer.echo(
            json.dumps(
                [
                    {
                        "ruleId": rule.rule_id,
                        "category": rule.category.value,
                        "severity": rule.severity.value,
                        "description": rule.description,
                    }
                    for rule in enabled
                ],
                indent=2,
            )
        )
        return

    table = Table(show_header=True, border_style="dim", title="idiolint rules")
    table.add_column("Rule", style="cyan")
    table.add_column("Category", style="magenta")
    table.add_column("Severity")
    table.add_column("Description")
    for rule in enabled:
        table.add_row(rule.rule_id, rule.category.value, rule.severity.value, rule.description)
    console.print(table)
