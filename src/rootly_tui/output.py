"""Output for the one-shot commands, with stdout/stderr discipline.

* **stdout** -- records only (tables, JSON), so ``rootly-tui incidents --json``
  can be piped.
* **stderr** -- status, warnings and errors.
* **TTY detection** -- Rich tables on an interactive terminal, tab-separated
  text when piped.
* **Colour control** -- respects ``NO_COLOR``, ``TERM=dumb`` and
  ``--no-color``.

The :class:`OutputManager` is built once in the root CLI callback and carried
on the Typer context (see :class:`~rootly_tui.context.AppContext`).
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.syntax import Syntax
from rich.markup import escape
from rich.table import Table


class OutputFormat(str, Enum):
    """``AUTO`` resolves to ``RICH`` on a colour TTY and ``PLAIN`` otherwise."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Route command output to the right stream in the right format.

    Args:
        format: Desired output format.
        no_color: Disable colour and Rich markup.
        quiet: Suppress informational messages on stderr.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet

        if format == OutputFormat.AUTO:
            self._format = (
                OutputFormat.RICH if _is_tty() and not self._no_color else OutputFormat.PLAIN
            )
        else:
            self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._format == OutputFormat.RICH),
        )
        self._stderr = Console(
            file=sys.stderr,
            no_color=self._no_color,
            stderr=True,
        )

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def console(self) -> Console:
        return self._stdout

    @property
    def stderr_console(self) -> Console:
        return self._stderr

    # ------------------------------------------------------------------ #
    # Data output (stdout)
    # ------------------------------------------------------------------ #

    def format_response(self, data: Any) -> None:
        """Print a JSON-compatible document in the active format."""
        if self._format == OutputFormat.JSON:
            self.print_data(json.dumps(data, indent=2, ensure_ascii=False, default=str))
        elif self._format == OutputFormat.PLAIN:
            self._print_plain(data)
        else:
            json_str = json.dumps(data, indent=2, ensure_ascii=False, default=str)
            self._stdout.print(Syntax(json_str, "json", theme="monokai", word_wrap=True))

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print tabular data to stdout in the active format.

        * **Rich mode** -- styled :class:`~rich.table.Table`.
        * **JSON mode** -- array of objects keyed by header names.
        * **Plain mode** -- tab-separated values, one row per line.
        """
        if self._format == OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self.print_data(json.dumps(records, indent=2, ensure_ascii=False))

        elif self._format == OutputFormat.PLAIN:
            self.print_data("\t".join(headers))
            for row in rows:
                self.print_data("\t".join(row))

        else:
            table = Table(title=title, show_header=True, header_style="bold cyan")
            for h in headers:
                table.add_column(h)
            for row in rows:
                table.add_row(*row)
            self._stdout.print(table)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        """Suppressed by ``--quiet``."""
        if not self._quiet:
            self._status(message)

    def success(self, message: str) -> None:
        """Suppressed by ``--quiet``."""
        if not self._quiet:
            self._status(message, style="green")

    def error(self, message: str) -> None:
        """Never suppressed."""
        self._status(message, prefix="Error:", style="bold red")

    def suggest(self, message: str) -> None:
        """Next-step hint, e.g. the command for the following page."""
        if not self._quiet:
            self._status(f"-> {message}", style="dim")

    def _status(self, message: str, prefix: str = "", style: Optional[str] = None) -> None:
        if self._no_color or style is None:
            text = f"{prefix} {message}" if prefix else message
            self._stderr.print(text, markup=False, highlight=False)
        elif prefix:
            self._stderr.print(f"[{style}]{prefix}[/{style}] {escape(message)}")
        else:
            self._stderr.print(f"[{style}]{escape(message)}[/{style}]")

    def _print_plain(self, data: Any) -> None:
        if isinstance(data, list):
            for item in data:
                self._print_plain(item)
            return
        if not isinstance(data, dict):
            self.print_data(str(data))
            return
        for key, value in data.items():
            if isinstance(value, (list, dict)):
                value = json.dumps(value, ensure_ascii=False, default=str)
            self.print_data(f"{key}\t{'' if value is None else value}")


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (any value) or ``TERM=dumb``."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"
