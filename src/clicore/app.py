"""Typer developer tool for applications built with clicore.

The ``clicore`` console script loads an application object by import path and
runs or inspects it without writing an entry point first::

    clicore run mytool.cli:app -- deploy --env prod
    clicore inspect mytool.cli:app
    clicore help mytool.cli:app deploy

The target is ``module:attribute`` where the attribute is a
:class:`~clicore.core.CliCore` instance or a zero-argument callable returning
one.

See Also:
    :class:`clicore.core.CliCore`: the pipeline being driven.
"""

from __future__ import annotations

import importlib
import signal
import sys
from typing import Any, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from clicore import __version__
from clicore.commands import iter_commands
from clicore.exceptions import CliCoreError, ConfigError
from clicore.exit_codes import EXIT_GENERIC_FAILURE

app = typer.Typer(
    name="clicore",
    help="Run and inspect clicore applications.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"clicore {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Developer tool for clicore applications."""


def load_app(target: str) -> Any:
    """Import and return the application named by ``module:attribute``.

    Raises:
        ConfigError: If the target is malformed, cannot be imported, or is
            not a clicore application.
    """
    from clicore.core import CliCore

    module_name, sep, attribute = target.partition(":")
    if not sep or not module_name or not attribute:
        raise ConfigError(f"Invalid target {target!r}, expected 'module:attribute'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigError(f"Cannot import {module_name!r}: {exc}") from exc

    obj: Any = module
    for part in attribute.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError:
            raise ConfigError(f"{module_name!r} has no attribute {attribute!r}") from None

    if not isinstance(obj, CliCore) and callable(obj):
        obj = obj()
    if not isinstance(obj, CliCore):
        raise ConfigError(f"{target!r} is not a clicore application")
    return obj


@app.command(
    "run",
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)
def run_command(
    target: str = typer.Argument(..., help="Application as module:attribute."),
    args: Optional[list[str]] = typer.Argument(None, help="Tokens passed to the application."),
) -> None:
    """Run an application with the given tokens."""
    cli = load_app(target)
    prefix = [cli.app_name] * cli.options.arguments.ignore_first
    cli.main([*prefix, *(args or [])])


@app.command("inspect")
def inspect_command(
    target: str = typer.Argument(..., help="Application as module:attribute."),
) -> None:
    """List every command of an application."""
    cli = load_app(target)
    table = Table(title=cli.app_name, show_header=True, header_style="bold cyan")
    table.add_column("Command")
    table.add_column("Callback")
    table.add_column("Description")

    for chain, command in iter_commands(cli.commands):
        table.add_row(
            " ".join((cli.app_name, *chain)),
            f"{command.name} (async)" if command.is_async else command.name,
            command.description or "",
        )

    Console().print(table)


@app.command("help")
def help_command(
    target: str = typer.Argument(..., help="Application as module:attribute."),
    chain: Optional[list[str]] = typer.Argument(None, help="Command chain to describe."),
) -> None:
    """Print an application's help text."""
    cli = load_app(target)
    typer.echo(cli.render_help(chain or []))


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """Entry point of the ``clicore`` console script.

    :class:`~clicore.exceptions.CliCoreError` instances cause a clean exit
    with the error's ``exit_code``; anything else exits with
    :data:`~clicore.exit_codes.EXIT_GENERIC_FAILURE`.
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except CliCoreError as exc:
        Console(stderr=True).print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        sys.exit(exc.exit_code)
    except Exception as exc:
        Console(stderr=True).print(f"[bold red]Unexpected error:[/bold red] {escape(str(exc))}")
        sys.exit(EXIT_GENERIC_FAILURE)
