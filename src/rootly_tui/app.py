"""Typer application and CLI entry point for rootly-tui.

This module wires together the top-level Typer application: the root
callback that builds the per-invocation :class:`~rootly_tui.context.AppContext`,
the ``run`` command that starts the interactive UI, the one-shot data
commands, and the ``cache`` and ``config`` sub-groups.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
Unhandled exceptions are written to a crash log under the data directory.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from rootly_tui import __version__
from rootly_tui.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INVALID_USAGE


app = typer.Typer(
    name="rootly-tui",
    help="Browse Rootly incidents and alerts from the terminal.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"rootly-tui {__version__}")
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
    debug: bool = typer.Option(
        False, "--debug", help="Log debug output to stderr."
    ),
    log_file: Optional[str] = typer.Option(
        None, "--log", help="Write debug logs to FILE (implies --debug)."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    mock: bool = typer.Option(
        False, "--mock", help="Use built-in sample data instead of the API."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Builds the :class:`~rootly_tui.output.OutputManager` and the
    :class:`~rootly_tui.debug.DebugLog` from CLI flags and stores them in an
    :class:`~rootly_tui.context.AppContext` on ``ctx.obj``.
    """
    from rootly_tui.context import AppContext
    from rootly_tui.debug import DebugLog
    from rootly_tui.output import OutputFormat, OutputManager

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    output = OutputManager(format=fmt, no_color=no_color, quiet=quiet)
    log = DebugLog()
    if log_file:
        try:
            log.set_log_file(log_file)
        except OSError as exc:
            output.error(f"Cannot open log file {log_file}: {exc}")
            raise typer.Exit(code=EXIT_INVALID_USAGE) from None
    elif debug:
        log.enable_stderr(output.stderr_console)

    ctx.obj = AppContext(output=output, log=log, mock=mock)
    ctx.call_on_close(log.close)


@app.command("run")
def run_command(ctx: typer.Context) -> None:
    """Start the interactive incident and alert browser.

    Example::

        rootly-tui run
        rootly-tui --mock run
        rootly-tui --log /tmp/rootly.log run
    """
    from rootly_tui.commands.data import reported_errors
    from rootly_tui.context import get_app_context
    from rootly_tui.tui.runner import TuiRunner

    app_ctx = get_app_context(ctx)
    with reported_errors(app_ctx):
        config = app_ctx.load_config()
        orchestrator = app_ctx.open_orchestrator(config)
    # stderr output would tear the live screen; the logs panel shows the same entries
    app_ctx.log.disable_stderr()
    try:
        TuiRunner(
            orchestrator,
            app_ctx.log,
            console=app_ctx.output.console,
            tz_name=config.timezone,
        ).run()
    finally:
        orchestrator.close()


# ------------------------------------------------------------------ #
# Command registration
# ------------------------------------------------------------------ #

from rootly_tui.commands.cache import cache_app  # noqa: E402
from rootly_tui.commands.config import config_app  # noqa: E402
from rootly_tui.commands.data import (  # noqa: E402
    alert_command,
    alerts_command,
    incident_command,
    incidents_command,
)

app.command("incidents")(incidents_command)
app.command("alerts")(alerts_command)
app.command("incident")(incident_command)
app.command("alert")(alert_command)
app.add_typer(cache_app, name="cache", help="Cache maintenance.")
app.add_typer(config_app, name="config", help="Configuration management.")


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from rootly_tui.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    )
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``rootly-tui`` console script.

    Unhandled :class:`~rootly_tui.exceptions.RootlyTuiError` instances
    cause a clean exit with the error's ``exit_code``. All other exceptions
    produce a crash log and a generic failure exit.
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from rootly_tui.exceptions import RootlyTuiError

        if isinstance(exc, RootlyTuiError):
            sys.stderr.write(f"Error: {exc}\n")
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        sys.stderr.write(f"Unexpected error. Debug log: {log_path}\n")
        sys.exit(EXIT_GENERIC_FAILURE)
