"""CLI — Module registry inspection commands."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from extcompat.config import Settings
from extcompat.exceptions import ConfigError
from extcompat.providers import build_provider
from extcompat.registry import ModuleRegistry

app = typer.Typer(help="Inspect the modules the registry reports.")
console = Console()


def load_settings(config: Path | None) -> Settings:
    try:
        return Settings.load(config_file=config)
    except ConfigError as exc:
        console.print(f"[red]Error: {escape(exc.message)}[/red]")
        raise typer.Exit(2)


@app.command("list")
def list_modules(
    active_only: bool = typer.Option(False, "--active-only", help="Hide inactive modules."),
    config: Path | None = typer.Option(None, "--config", help="Extra YAML config file."),
) -> None:
    """List the modules of the configured registry source."""
    settings = load_settings(config)
    registry = ModuleRegistry(build_provider(settings.registry))
    descriptors = [d for d in registry.snapshot() if d.active or not active_only]

    table = Table(title=f"Modules ({settings.registry.source})")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Active", style="green")

    for d in sorted(descriptors, key=lambda d: (d.id or "").casefold()):
        table.add_row(
            escape(d.id or ""),
            escape(d.display_name or ""),
            "yes" if d.active else "[red]no[/red]",
        )
    console.print(table)


@app.command("status")
def module_status(
    module_id: str = typer.Argument(help="Module ID (case-insensitive)."),
    config: Path | None = typer.Option(None, "--config", help="Extra YAML config file."),
) -> None:
    """Exit 0 if MODULE_ID is active, 1 otherwise."""
    settings = load_settings(config)
    registry = ModuleRegistry(build_provider(settings.registry))
    name = registry.display_name_of(module_id)
    if name is None:
        console.print(f"[yellow]{escape(module_id)}: not active[/yellow]")
        raise typer.Exit(1)
    console.print(f"[green]{escape(module_id)}: active[/green] ({escape(name)})")
