"""Terminal output for the ``vaultli`` command line.

Response bodies and operation listings go to stdout; status lines,
suggestions, errors and debug logs go to stderr, so ``vaultli read ... |
jq`` only ever sees data.

The rendering of a body depends on :class:`OutputFormat`:

* ``json`` -- indented JSON, stable for scripts.
* ``plain`` -- one ``key<TAB>value`` line per top-level field, nested
  values as compact JSON; lists one item per line.
* ``rich`` -- syntax-highlighted JSON and styled tables.

``auto`` picks ``rich`` for an interactive, colour-capable stdout and
``plain`` otherwise.  Colour is off when ``--no-color`` is given,
``NO_COLOR`` is set, or ``TERM=dumb``.

Library modules log through :mod:`logging`; :func:`configure_logging`
attaches an :class:`OutputLogHandler` to the ``vaultli`` logger so those
records reach stderr under ``--verbose``.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Writes response data to stdout and diagnostics to stderr.

    Args:
        format: Requested format; ``AUTO`` is resolved on construction.
        no_color: Never emit colour or Rich markup.
        quiet: Drop success messages and suggestions (errors and warnings
            are always shown).
        verbose: Show debug messages.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            rich = _is_tty() and not self._no_color
            format = OutputFormat.RICH if rich else OutputFormat.PLAIN
        self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=self._format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    # --- stdout ---

    def format_response(self, data: Any) -> None:
        """Render a Vault response body; an empty body prints nothing."""
        if data is None:
            return
        if self._format == OutputFormat.JSON:
            self.print_data(_to_json(data, indent=2))
        elif self._format == OutputFormat.PLAIN:
            for line in _plain_lines(data):
                self.print_data(line)
        elif isinstance(data, (dict, list)):
            syntax = Syntax(_to_json(data, indent=2), "json", theme="monokai", word_wrap=True)
            self._stdout.print(syntax)
        else:
            self._stdout.print(escape(str(data)))

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print rows as JSON records, TSV, or a Rich table."""
        if self._format == OutputFormat.JSON:
            self.print_data(_to_json([dict(zip(headers, row)) for row in rows], indent=2))
            return
        if self._format == OutputFormat.PLAIN:
            for row in [headers, *rows]:
                self.print_data("\t".join(row))
            return

        table = Table(title=title, header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*(escape(cell) for cell in row))
        self._stdout.print(table)

    # --- stderr ---

    def success(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message, "green")

    def warning(self, message: str) -> None:
        self._diagnostic(message, "yellow", label="Warning:")

    def error(self, message: str) -> None:
        self._diagnostic(message, "bold red", label="Error:")

    def suggest(self, message: str) -> None:
        """Print a follow-up hint such as which flag to check."""
        if not self._quiet:
            self._diagnostic(f"→ {message}", "dim")

    def debug(self, message: str) -> None:
        if self._verbose:
            self._diagnostic(message, "dim", label="[debug]")

    def _diagnostic(self, message: str, style: str, label: str = "") -> None:
        if self._no_color:
            text = f"{label} {message}" if label else message
            print(text, file=sys.stderr, flush=True)
            return
        if label:
            self._stderr.print(f"[{style}]{escape(label)}[/{style}] {escape(message)}")
        else:
            self._stderr.print(f"[{style}]{escape(message)}[/{style}]")


class OutputLogHandler(logging.Handler):
    """Send ``vaultli`` log records to the active :class:`OutputManager`."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = f"{record.name}: {record.getMessage()}"
        except Exception:
            self.handleError(record)
            return
        output = get_output()
        if record.levelno >= logging.ERROR:
            output.error(message)
        elif record.levelno >= logging.WARNING:
            output.warning(message)
        else:
            output.debug(message)


def configure_logging(verbose: bool) -> None:
    """Attach one :class:`OutputLogHandler` to the ``vaultli`` logger.

    Calling it again only updates the level.
    """
    logger = logging.getLogger("vaultli")
    if not any(isinstance(h, OutputLogHandler) for h in logger.handlers):
        logger.addHandler(OutputLogHandler())
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False


def _to_json(data: Any, indent: Optional[int] = None) -> str:
    if indent is None:
        return json.dumps(data, ensure_ascii=False, default=str)
    return json.dumps(data, indent=indent, ensure_ascii=False, default=str)


def _plain_lines(data: Any) -> list[str]:
    if isinstance(data, dict):
        return [
            f"{key}\t{_to_json(value) if isinstance(value, (dict, list)) else value}"
            for key, value in data.items()
        ]
    if isinstance(data, list):
        return [str(item) for item in data]
    return [str(data)]


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the process-wide :class:`OutputManager`, creating a default lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    global _output
    _output = None


def error(message: str) -> None:
    get_output().error(message)


def suggest(message: str) -> None:
    get_output().suggest(message)
