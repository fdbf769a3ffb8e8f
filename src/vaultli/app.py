"""Typer application and CLI entry point for vaultli.

The command line exposes the client's generic verbs (``read``, ``write``,
``list``, ``delete``, ``help``), every command table operation through
``call``, and an ``operations`` listing of the table itself.  It runs on
the blocking :class:`~vaultli.client.VaultClient`.

:func:`main` is the console-script entry point declared in
``pyproject.toml``.
"""

from __future__ import annotations

import json
import signal
import sys
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import typer

from vaultli import __version__
from vaultli.exceptions import (
    OperationError,
    TransportError,
    ValidationError,
    VaultliError,
)

app = typer.Typer(
    name="vaultli",
    help="Talk to the HashiCorp Vault HTTP API.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"vaultli {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    address: Optional[str] = typer.Option(
        None, "--address", "-a", help="Vault address (default $VAULT_ADDR)."
    ),
    token: Optional[str] = typer.Option(
        None, "--token", "-t", help="Vault token (default $VAULT_TOKEN)."
    ),
    commands: Optional[str] = typer.Option(
        None, "--commands", help="Path to a YAML/JSON command table."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~vaultli.output.OutputManager`, routes
    library logging through it, and stores the connection options in
    ``ctx.obj`` for the sub-commands.
    """
    from vaultli.output import OutputFormat, OutputManager, configure_logging, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    configure_logging(verbose)

    ctx.ensure_object(dict)
    ctx.obj["address"] = address
    ctx.obj["token"] = token
    ctx.obj["commands"] = commands


# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #


def _make_client(ctx: typer.Context) -> Any:
    from vaultli.client import VaultClient

    obj = ctx.obj or {}
    return VaultClient(
        endpoint=obj.get("address"),
        token=obj.get("token"),
        commands=obj.get("commands"),
    )


def parse_fields(pairs: Optional[list[str]]) -> dict[str, Any]:
    """Parse ``KEY=VALUE`` arguments into a payload.

    Values are decoded as JSON when possible (``ttl=3600`` is an int,
    ``renewable=true`` a bool) and kept as strings otherwise.

    Raises:
        ValidationError: If an argument has no ``=``.
    """
    fields: dict[str, Any] = {}
    for pair in pairs or []:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise ValidationError(f"Expected KEY=VALUE, got {pair!r}")
        try:
            fields[key] = json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            fields[key] = raw
    return fields


@contextmanager
def _handle_errors() -> Iterator[None]:
    """Report :class:`VaultliError` on stderr and exit with its code."""
    from vaultli.output import error, suggest

    try:
        yield
    except VaultliError as exc:
        error(str(exc))
        if isinstance(exc, TransportError):
            suggest("Check the Vault address (--address or VAULT_ADDR).")
        elif isinstance(exc, OperationError) and exc.status_code == 403:
            suggest("Check the Vault token (--token or VAULT_TOKEN).")
        raise typer.Exit(code=exc.exit_code)


def _show(result: Any, empty_message: str) -> None:
    from vaultli.output import get_output

    output = get_output()
    if result is None:
        output.success(empty_message)
    else:
        output.format_response(result)


# ------------------------------------------------------------------ #
# Generic verbs
# ------------------------------------------------------------------ #


@app.command("read")
def read_command(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Path to read, e.g. secret/app."),
) -> None:
    """Read data from PATH."""
    with _handle_errors(), _make_client(ctx) as client:
        _show(client.read(path), f"No value found at {path}")


@app.command("write")
def write_command(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Path to write, e.g. secret/app."),
    fields: Optional[list[str]] = typer.Argument(None, help="KEY=VALUE pairs."),
) -> None:
    """Write KEY=VALUE data to PATH."""
    with _handle_errors(), _make_client(ctx) as client:
        _show(client.write(path, parse_fields(fields)), f"Success! Data written to: {path}")


@app.command("list")
def list_command(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Path to list, e.g. secret/."),
) -> None:
    """List the keys below PATH."""
    with _handle_errors(), _make_client(ctx) as client:
        _show(client.list(path), f"No entries found at {path}")


@app.command("delete")
def delete_command(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Path to delete."),
) -> None:
    """Delete the data at PATH."""
    with _handle_errors(), _make_client(ctx) as client:
        _show(client.delete(path), f"Success! Data deleted (if it existed) at: {path}")


@app.command("help")
def help_command(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Path to show Vault's help for."),
) -> None:
    """Show Vault's built-in help for PATH."""
    with _handle_errors(), _make_client(ctx) as client:
        result = client.help(path)
        if isinstance(result, dict) and "help" in result:
            from vaultli.output import get_output

            get_output().print_data(str(result["help"]))
        else:
            _show(result, f"No help available for {path}")


# ------------------------------------------------------------------ #
# Command table
# ------------------------------------------------------------------ #


@app.command("call")
def call_command(
    ctx: typer.Context,
    operation: str = typer.Argument(..., help="Operation name, see 'vaultli operations'."),
    fields: Optional[list[str]] = typer.Argument(None, help="KEY=VALUE arguments."),
) -> None:
    """Run a command table OPERATION with KEY=VALUE arguments."""
    with _handle_errors(), _make_client(ctx) as client:
        _show(client.call(operation, parse_fields(fields)), f"Success! {operation} completed")


@app.command("operations")
def operations_command(ctx: typer.Context) -> None:
    """List the operations of the command table."""
    from vaultli.output import get_output
    from vaultli.table import load_command_table

    with _handle_errors():
        table = load_command_table((ctx.obj or {}).get("commands"))
        rows = [
            [name, descriptor.method.value, descriptor.path, descriptor.description or ""]
            for name, descriptor in table.items()
        ]
        get_output().print_table(
            ["name", "method", "path", "description"], rows, title="Operations"
        )


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``vaultli`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except VaultliError as exc:
        from vaultli.output import error

        error(str(exc))
        sys.exit(exc.exit_code)
