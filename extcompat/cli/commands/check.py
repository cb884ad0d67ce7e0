"""CLI — Check a symbol against an expected signature.

A fresh CLI process has none of the extension's modules loaded, so the
modules to inspect are imported explicitly with ``--import``.
"""

from __future__ import annotations

import importlib
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from extcompat.cli.commands.modules import load_settings
from extcompat.exceptions import SymbolTokenError
from extcompat.guard import CompatibilityGuard
from extcompat.resolution.descriptors import SymbolDescriptor
from extcompat.resolution.resolver import SymbolResolver
from extcompat.resolution.types import type_name

console = Console()


def _parse_types(resolver: SymbolResolver, names: list[str]) -> list[Any]:
    types: list[Any] = []
    for name in names:
        found = resolver.find_owner(name)
        if found is Any or isinstance(found, type):
            types.append(found)
            continue
        console.print(f"[red]Error: type '{escape(name)}' is not loaded[/red]")
        raise typer.Exit(2)
    return types


def check_symbol(
    module_id: str = typer.Argument(help="Module ID that must be active."),
    symbol: str = typer.Argument(help="Symbol token, e.g. 'acme.api:Widget.spin'."),
    params: list[str] = typer.Option([], "--param", "-p", help="Expected parameter type, in order."),
    generics: list[str] = typer.Option([], "--generic", "-g", help="Type argument for a generic method."),
    imports: list[str] = typer.Option([], "--import", "-i", help="Module to import before checking."),
    config: Path | None = typer.Option(None, "--config", help="Extra YAML config file."),
) -> None:
    """Resolve SYMBOL in MODULE_ID and verify its parameters."""
    settings = load_settings(config)

    for module_name in imports:
        try:
            importlib.import_module(module_name)
        except Exception as exc:
            console.print(f"[yellow]Could not import {escape(module_name)}: {escape(str(exc))}[/yellow]")

    guard = CompatibilityGuard.from_settings(
        settings,
        sink=lambda message: console.print(
            message, style="red", markup=False, highlight=False, soft_wrap=True
        ),
    )
    expected = _parse_types(guard.resolver, params)
    generic_args = _parse_types(guard.resolver, generics)

    descriptor: Any = symbol
    if generic_args:
        try:
            descriptor = SymbolDescriptor.parse(symbol, generic_filter=generic_args)
        except SymbolTokenError as exc:
            console.print(f"[red]Error: {escape(exc.message)}[/red]")
            raise typer.Exit(2)

    handle = guard.get_verified_handle(module_id, descriptor, expected, log_diagnostics=True)
    if handle is None:
        if not guard.is_module_active(module_id):
            console.print(f"[yellow]{escape(module_id)}: not active[/yellow]")
        raise typer.Exit(1)

    table = Table(title=handle.qualified_name)
    table.add_column("#", justify="right")
    table.add_column("Parameter type", style="cyan")
    for index, parameter_type in enumerate(handle.parameter_types, start=1):
        table.add_row(str(index), type_name(parameter_type))
    console.print(table)
    console.print("[green]consistent[/green]")
