"""Typer application and CLI entry point for plugbuild.

This module wires together the top-level Typer application and registers
the built-in commands (``build``, ``plan``, ``config``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
:class:`~plugbuild.exceptions.PlugbuildError` exits with its own code;
any other exception is written to a crash log under the data directory.

See Also:
    :mod:`plugbuild.config`: Build configuration resolution.
    :mod:`plugbuild.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any

import typer
from rich.logging import RichHandler

from plugbuild import __version__
from plugbuild.commands.build import build_command, plan_command
from plugbuild.commands.config import config_app
from plugbuild.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="plugbuild",
    help="Build application binaries with statically linked plugins.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("build")(build_command)
app.command("plan")(plan_command)
app.add_typer(config_app, name="config", help="Build configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"plugbuild {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool, console: Any) -> None:
    """Route library log records to stderr through Rich.

    Warnings are always shown; ``--verbose`` lowers the threshold to debug.
    """
    root = logging.getLogger("plugbuild")
    for handler in list(root.handlers):
        root.removeHandler(handler)
    handler = RichHandler(console=console, show_time=False, show_path=False)
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    root.propagate = False


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
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
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~plugbuild.output.OutputManager` and the
    logging handler from the CLI flags.
    """
    from plugbuild.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    output = OutputManager(
        format=fmt,
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
    )
    set_output(output)
    _configure_logging(verbose, output.stderr_console)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from plugbuild.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``plugbuild`` console script.

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
    except Exception as exc:
        from plugbuild.exceptions import PlugbuildError
        from plugbuild.output import error

        if isinstance(exc, PlugbuildError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
