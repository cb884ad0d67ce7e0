"""extcompat CLI — Entry point.

Usage:
    extcompat modules list [--active-only]
    extcompat modules status <module_id>
    extcompat check <module_id> <Owner:method> [--param TYPE]... [--import MODULE]...
"""

from __future__ import annotations

import typer

from extcompat.cli.commands import check, modules
from extcompat.logging import configure_logging

app = typer.Typer(
    name="extcompat",
    help="extcompat — check optional extensions and their callable signatures.",
    no_args_is_help=True,
    pretty_exceptions_enable=False,
)

app.add_typer(modules.app, name="modules")
app.command("check")(check.check_symbol)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log resolution steps."),
) -> None:
    if verbose:
        configure_logging(level="debug")


if __name__ == "__main__":
    app()
